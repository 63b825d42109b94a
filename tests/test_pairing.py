"""Tests for entry/exit pairing and orphan accounting."""

from datetime import datetime
from zoneinfo import ZoneInfo

from library_recap.models import Direction, NormalizedSwipe
from library_recap.pairing import SessionPairer, pair_sessions


UTC = ZoneInfo("UTC")


def _swipe(hour: int, minute: int, direction: Direction, day: int = 1) -> NormalizedSwipe:
    return NormalizedSwipe(datetime(2025, 2, day, hour, minute, tzinfo=UTC), direction)


IN, OUT = Direction.ENTRY, Direction.EXIT


class TestPairSessions:
    def test_simple_pair(self):
        result = pair_sessions([_swipe(9, 0, IN), _swipe(10, 30, OUT)])
        assert len(result.sessions) == 1
        session = result.sessions[0]
        assert session.duration_seconds == 5400
        assert session.duration_minutes == 90
        assert (result.orphan_out_no_in, result.orphan_in_overwritten, result.orphan_in_at_end) == (0, 0, 0)

    def test_second_entry_overwrites_first(self):
        result = pair_sessions([_swipe(9, 0, IN), _swipe(9, 30, IN), _swipe(10, 0, OUT)])
        assert result.orphan_in_overwritten == 1
        assert len(result.sessions) == 1
        assert result.sessions[0].entry_time == datetime(2025, 2, 1, 9, 30, tzinfo=UTC)
        assert result.sessions[0].duration_minutes == 30

    def test_exit_without_entry(self):
        result = pair_sessions([_swipe(8, 0, OUT), _swipe(9, 0, IN), _swipe(10, 0, OUT)])
        assert result.orphan_out_no_in == 1
        assert len(result.sessions) == 1

    def test_trailing_entry(self):
        result = pair_sessions([_swipe(9, 0, IN), _swipe(10, 0, OUT), _swipe(11, 0, IN)])
        assert result.orphan_in_at_end == 1
        assert len(result.sessions) == 1

    def test_lone_trailing_entry_produces_no_session(self):
        result = pair_sessions([_swipe(11, 0, IN)])
        assert result.sessions == ()
        assert result.orphan_in_at_end == 1

    def test_exit_before_entry_drops_both(self):
        pairer = SessionPairer()
        pairer.feed(_swipe(10, 0, IN))
        assert pairer.feed(_swipe(9, 0, OUT)) is None
        result = pairer.finish()
        assert result.sessions == ()
        assert (result.orphan_out_no_in, result.orphan_in_overwritten, result.orphan_in_at_end) == (0, 0, 0)

    def test_zero_length_session_is_kept(self):
        result = pair_sessions([_swipe(9, 0, IN), _swipe(9, 0, OUT)])
        assert len(result.sessions) == 1
        assert result.sessions[0].duration_seconds == 0

    def test_session_across_midnight(self):
        result = pair_sessions([_swipe(23, 30, IN, day=1), _swipe(1, 15, OUT, day=2)])
        assert result.sessions[0].duration_minutes == 105

    def test_empty_stream(self):
        result = pair_sessions([])
        assert result.sessions == ()
        assert result.orphan_in_at_end == 0

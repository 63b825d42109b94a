"""Tests for gap merging and day/hour splitting."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from library_recap.merger import (
    build_daily_minutes,
    build_hourly_minutes,
    merge_sessions_by_gap,
    split_session_by_day,
    split_session_by_hour,
)
from library_recap.models import RawSession


UTC = ZoneInfo("UTC")


def _session(start: datetime, minutes: float) -> RawSession:
    return RawSession(start, start + timedelta(minutes=minutes), minutes * 60.0)


def _at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, day, hour, minute, tzinfo=UTC)


@pytest.fixture
def sessions():
    return [
        _session(_at(3, 9), 60),        # 09:00-10:00
        _session(_at(3, 10, 30), 90),   # 30 min gap -> merges
        _session(_at(3, 14), 10),       # 2h gap -> new visit
        _session(_at(4, 23, 0), 180),   # crosses midnight
    ]


class TestMergeSessionsByGap:
    def test_empty(self):
        assert merge_sessions_by_gap([]) == []

    def test_merges_within_gap(self, sessions):
        merged = merge_sessions_by_gap(sessions, 60)
        assert len(merged) == 3
        first = merged[0]
        assert first.entry_time == _at(3, 9)
        assert first.exit_time == _at(3, 12)
        # gap is not counted
        assert first.duration_minutes == 150

    def test_gap_equal_to_threshold_merges(self):
        merged = merge_sessions_by_gap([_session(_at(3, 9), 30), _session(_at(3, 10, 30), 30)], 60)
        assert len(merged) == 1

    def test_zero_threshold_merges_nothing_separated(self, sessions):
        merged = merge_sessions_by_gap(sessions, 0)
        assert len(merged) == len(sessions)

    def test_unsorted_input(self, sessions):
        assert merge_sessions_by_gap(list(reversed(sessions)), 60) == merge_sessions_by_gap(sessions, 60)

    @pytest.mark.parametrize("gap", [0, 15, 60, 180, 10_000])
    def test_total_duration_preserved(self, sessions, gap):
        merged = merge_sessions_by_gap(sessions, gap)
        assert sum(m.duration_seconds for m in merged) == sum(s.duration_seconds for s in sessions)

    def test_idempotent(self, sessions):
        once = merge_sessions_by_gap(sessions, 60)
        assert merge_sessions_by_gap(once, 60) == once

    def test_overlapping_sessions_stay_separate(self):
        overlapping = [_session(_at(3, 9), 120), _session(_at(3, 10), 30)]
        merged = merge_sessions_by_gap(overlapping, 60)
        assert [(m.entry_time, m.exit_time) for m in merged] == [(_at(3, 9), _at(3, 11)), (_at(3, 10), _at(3, 10, 30))]
        assert sum(m.duration_seconds for m in merged) == 150 * 60.0


class TestSplitSessionByDay:
    def test_same_day(self):
        assert split_session_by_day(_session(_at(3, 9), 45)) == [(date(2025, 3, 3), 45.0)]

    def test_crosses_midnight(self):
        session = RawSession(_at(1, 23, 30), _at(2, 1, 15), 105 * 60.0)
        assert split_session_by_day(session) == [
            (date(2025, 3, 1), 30.0),
            (date(2025, 3, 2), 75.0),
        ]

    def test_spans_two_midnights(self):
        session = _session(_at(1, 22), 27 * 60)  # until 01:00 on the 3rd
        parts = split_session_by_day(session)
        assert len(parts) == 3
        assert [m for _, m in parts] == [120.0, 1440.0, 60.0]

    def test_daily_minutes_sum_to_raw_total(self, sessions):
        daily = build_daily_minutes(sessions)
        assert sum(daily.values()) == pytest.approx(sum(s.duration_minutes for s in sessions))
        assert daily[date(2025, 3, 4)] == 60.0
        assert daily[date(2025, 3, 5)] == 120.0


class TestSplitSessionByHour:
    def test_partial_hours(self):
        parts = split_session_by_hour(_session(_at(3, 9, 45), 30))
        assert parts == [(9, 15.0), (10, 15.0)]

    def test_wraps_past_midnight(self):
        hourly = build_hourly_minutes([_session(_at(3, 23, 30), 60)])
        assert hourly[23] == 30.0
        assert hourly[0] == 30.0
        assert sum(hourly) == 60.0

    def test_zero_length(self):
        assert split_session_by_hour(_session(_at(3, 9), 0)) == []

    def test_last_representable_hour(self):
        start = datetime(9999, 12, 31, 22, 30, tzinfo=UTC)
        parts = split_session_by_hour(_session(start, 89))
        assert parts == [(22, 30.0), (23, 59.0)]

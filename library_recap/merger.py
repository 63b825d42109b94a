"""
Session merging and calendar splitting module.

This module handles:
- Merging raw sessions separated by short gaps into visits
- Splitting raw sessions across midnight into per-day minutes
- Splitting raw sessions across hour boundaries into per-hour minutes
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable

from library_recap.models import MergedSession, RawSession


def merge_sessions_by_gap(
    sessions: Iterable[RawSession],
    gap_minutes: float = 60.0
) -> list[MergedSession]:
    """
    Merge consecutive sessions whose gap is within ``gap_minutes``.

    The gap itself is never counted, so the merged durations always sum to
    the raw durations.
    """
    ordered = sorted(sessions, key=lambda s: s.entry_time)
    if not ordered:
        return []

    merged = []
    cur_in = ordered[0].entry_time
    cur_out = ordered[0].exit_time
    cur_seconds = ordered[0].duration_seconds

    for nxt in ordered[1:]:
        gap = (nxt.entry_time - cur_out).total_seconds() / 60.0
        if 0 <= gap <= gap_minutes:
            cur_out = nxt.exit_time
            cur_seconds += nxt.duration_seconds
        else:
            merged.append(MergedSession(cur_in, cur_out, cur_seconds))
            cur_in = nxt.entry_time
            cur_out = nxt.exit_time
            cur_seconds = nxt.duration_seconds

    merged.append(MergedSession(cur_in, cur_out, cur_seconds))
    return merged


def _next_midnight(ts: datetime) -> datetime:
    return ts.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)


def split_session_by_day(session: RawSession) -> list[tuple[date, float]]:
    """
    Attribute a session's minutes to each calendar day it touches.

    A session crossing N midnights yields N+1 (day, minutes) parts, in order.
    """
    parts = []
    cur = session.entry_time
    while cur.date() < session.exit_time.date():
        boundary = _next_midnight(cur)
        parts.append((cur.date(), (boundary - cur).total_seconds() / 60.0))
        cur = boundary
    parts.append((cur.date(), (session.exit_time - cur).total_seconds() / 60.0))
    return parts


def split_session_by_hour(session: RawSession) -> list[tuple[int, float]]:
    """Attribute a session's minutes to each hour-of-day it overlaps."""
    parts = []
    cur = session.entry_time
    while cur < session.exit_time:
        # step to the next hour only while it lies inside the session
        to_next_hour = timedelta(hours=1) - (cur - cur.replace(minute=0, second=0, microsecond=0))
        if session.exit_time - cur <= to_next_hour:
            segment_end = session.exit_time
        else:
            segment_end = cur + to_next_hour
        parts.append((cur.hour, (segment_end - cur).total_seconds() / 60.0))
        cur = segment_end
    return parts


def build_daily_minutes(sessions: Iterable[RawSession]) -> dict[date, float]:
    """
    Sum per-day minutes across all raw sessions.

    Every minute of every session lands on exactly one day.
    """
    daily_minutes = defaultdict(float)
    for session in sessions:
        for day, minutes in split_session_by_day(session):
            daily_minutes[day] += minutes
    return dict(daily_minutes)


def build_hourly_minutes(sessions: Iterable[RawSession]) -> list[float]:
    """Sum minutes per hour-of-day (24 buckets) across raw sessions."""
    hourly = [0.0] * 24
    for session in sessions:
        for hour, minutes in split_session_by_hour(session):
            hourly[hour] += minutes
    return hourly

"""
Data models for the Library Recap engine.

This module defines the data structures used throughout the pipeline:
- RawSwipeRecord: Untrusted date/time/direction text from the access system
- NormalizedSwipe: Parsed, timestamped entry or exit event
- RawSession / MergedSession: Paired entry/exit sessions and merged visits
- ProcessedStats: Immutable snapshot of every derived metric
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class Direction(Enum):
    """Swipe direction."""
    ENTRY = "IN"
    EXIT = "OUT"


@dataclass(frozen=True)
class RawSwipeRecord:
    """Raw swipe as supplied by the access-control export."""
    date: str
    time: str
    direction: str


@dataclass(frozen=True)
class NormalizedSwipe:
    """Validated swipe with an absolute UTC timestamp."""
    timestamp: datetime
    direction: Direction


@dataclass(frozen=True)
class RawSession:
    """One entry paired with its matching exit."""
    entry_time: datetime
    exit_time: datetime
    duration_seconds: float

    @property
    def duration_minutes(self) -> float:
        return self.duration_seconds / 60.0


@dataclass(frozen=True)
class MergedSession(RawSession):
    """A visit: one or more raw sessions joined across short gaps.

    duration_seconds is the sum of the member durations, so it can be
    smaller than exit_time - entry_time.
    """


@dataclass(frozen=True)
class Streak:
    """Run of consecutive visited days."""
    days: int
    start_date: Optional[date]
    end_date: Optional[date]


@dataclass(frozen=True)
class PairingResult:
    """Output of the pairing pass."""
    sessions: tuple[RawSession, ...]
    orphan_out_no_in: int = 0
    orphan_in_overwritten: int = 0
    orphan_in_at_end: int = 0


@dataclass(frozen=True)
class StreakSummary:
    """Visit and away streaks over the visited-date set."""
    longest_visit_streak: int
    longest_away_streak: int
    span_days: int
    streaks: tuple[Streak, ...]


@dataclass(frozen=True)
class HourlyBucket:
    hour: int
    total_minutes: int
    share: float


@dataclass(frozen=True)
class PeakWindow:
    """Heaviest 3-hour period and the persona derived from it."""
    window_start: int
    window_end: int
    window_share: float
    display_range: str
    persona: str
    is_balanced: bool


@dataclass(frozen=True)
class WeekdayTotal:
    day: str
    minutes: int


@dataclass(frozen=True)
class DayOfWeekShare:
    day: str
    minutes: int
    total_visits: int
    average_minutes: int
    share_percent: float


@dataclass(frozen=True)
class MonthTotal:
    month: str
    minutes: int


@dataclass(frozen=True)
class MonthlySessions:
    month: str
    minutes: int
    sessions: int


@dataclass(frozen=True)
class TermBreakdown:
    """Usage attributed to one term."""
    name: str
    start: date
    end: date
    minutes: int
    hours: float
    visited_days: int
    total_days: int
    consistency: float
    style: str


@dataclass(frozen=True)
class VisitTypeBreakdown:
    """Merged visits bucketed by length."""
    quick: int = 0      # < 1h
    standard: int = 0   # 1-3h
    long: int = 0       # 3-6h
    marathon: int = 0   # >= 6h


@dataclass(frozen=True)
class NoSeatSummary:
    """Very short raw sessions and their complement."""
    max_minutes: float
    count: int = 0
    share_pct_of_raw_sessions: float = 0.0
    total_minutes: int = 0
    total_hours: float = 0.0
    remaining_raw_sessions_count: int = 0
    remaining_raw_sessions_total_minutes: int = 0
    remaining_raw_sessions_total_hours: float = 0.0


@dataclass(frozen=True)
class OrphanFiltering:
    orphan_out_ignored: int = 0
    orphan_in_overwritten_ignored: int = 0
    orphan_in_at_end_ignored: int = 0
    raw_sessions: int = 0
    merged_sessions: int = 0


@dataclass(frozen=True)
class TopSession:
    date: date
    start_hhmm: str
    end_hhmm: str
    minutes: int


@dataclass(frozen=True)
class DebugTotals:
    """Independently computed totals that must all agree."""
    total_minutes_raw: float
    total_minutes_merged: float
    total_minutes_daily_split: float
    total_minutes_weekday_sum: float
    total_minutes_month_sum: float
    total_minutes_term_sum: float


@dataclass(frozen=True)
class ProcessedStats:
    """Immutable snapshot of all derived library statistics."""
    schema_version: int = 1

    # Total time (raw sessions)
    total_minutes: int = 0
    total_hours: float = 0.0
    analogy: str = ""

    # Sessions (merged)
    total_sessions: int = 0
    longest_session_minutes: int = 0
    longest_session_hours: float = 0.0
    longest_session_date: Optional[date] = None
    average_session_minutes: int = 0
    average_session_hours: float = 0.0

    # Streaks
    longest_visit_streak_days: int = 0
    longest_away_streak_days: int = 0
    dataset_span_days: int = 0

    # Earliest arrival / latest departure
    earliest_arrival_hhmm: str = ""
    earliest_arrival_label: str = ""
    latest_departure_hhmm: str = ""
    latest_departure_label: str = ""
    latest_departure_post_midnight: bool = False
    latest_departure_entry_date: Optional[date] = None

    # Calendar breakdowns
    weekday_totals: tuple[WeekdayTotal, ...] = ()
    most_day: str = ""
    least_day: str = ""
    day_of_week_data: tuple[DayOfWeekShare, ...] = ()
    month_totals: tuple[MonthTotal, ...] = ()
    terms: tuple[TermBreakdown, ...] = ()
    outside_term_minutes: int = 0
    outside_term_hours: float = 0.0

    visit_type_breakdown: VisitTypeBreakdown = field(default_factory=VisitTypeBreakdown)
    no_seat: NoSeatSummary = field(default_factory=lambda: NoSeatSummary(max_minutes=15.0))
    orphan_filtering: OrphanFiltering = field(default_factory=OrphanFiltering)

    # Chart data
    top_sessions: tuple[TopSession, ...] = ()
    top_streaks: tuple[Streak, ...] = ()
    best_streak: Streak = field(default_factory=lambda: Streak(days=0, start_date=None, end_date=None))
    hourly_data: tuple[HourlyBucket, ...] = ()
    peak_study_hours: PeakWindow = field(default_factory=lambda: PeakWindow(
        window_start=0, window_end=3, window_share=0.0,
        display_range="", persona="", is_balanced=False,
    ))
    monthly_data: tuple[MonthlySessions, ...] = ()

    debug: Optional[DebugTotals] = None

    @property
    def is_empty(self) -> bool:
        return self.orphan_filtering.raw_sessions == 0

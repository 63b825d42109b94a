"""
Statistics aggregation module.

This module turns raw swipes into the final ProcessedStats snapshot:
- Normalization, pairing, merging and daily/hourly splitting
- Weekday, month and term breakdowns from per-day minutes
- Visit-type and no-seat buckets
- Earliest arrival / latest departure, top sessions and streaks
- Optional cross-check of independently computed totals
"""

import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from library_recap.config import DEFAULT_TERMS, OUTSIDE_TERM_LABEL, EngineConfig, TermDefinition
from library_recap.data_loader import normalize_swipes
from library_recap.merger import build_daily_minutes, build_hourly_minutes, merge_sessions_by_gap
from library_recap.models import (
    DayOfWeekShare,
    DebugTotals,
    MergedSession,
    MonthlySessions,
    MonthTotal,
    NoSeatSummary,
    OrphanFiltering,
    ProcessedStats,
    RawSession,
    RawSwipeRecord,
    Streak,
    TermBreakdown,
    TopSession,
    VisitTypeBreakdown,
    WeekdayTotal,
)
from library_recap.pairing import pair_sessions
from library_recap.peak import build_hourly_data, detect_peak_window, hourly_shares
from library_recap.streaks import find_streaks, top_streaks
from library_recap.timeutil import (
    WEEKDAY_NAMES,
    format_month_label,
    minutes_since_midnight,
    minutes_to_hhmm,
    month_key,
    round_minutes,
    weekday_name,
)


logger = logging.getLogger(__name__)

TOP_SESSION_COUNT = 5
TOP_STREAK_COUNT = 3
INVARIANT_TOLERANCE_MINUTES = 1e-6


class InvariantViolation(AssertionError):
    """Independently computed totals disagree (debug mode only)."""


# =============================================================================
# LABELS
# =============================================================================

def time_of_day_label(minutes: int, kind: str) -> str:
    """Qualitative label for an arrival or departure time of day."""
    if kind == "arrival":
        if minutes <= 8 * 60:
            return "early bird"
        if minutes >= 11 * 60:
            return "late starter"
        return "regular"
    if minutes >= 23 * 60:
        return "night owl"
    if minutes <= 18 * 60:
        return "early finisher"
    return "regular"


def analogy(minutes: float) -> str:
    hours = minutes / 60.0
    return f"~{hours / 8.0:.2f}× 8-hour days, or ~{hours / 40.0:.2f}× 40-hour work weeks"


def study_style(total_hours: float, consistency: float) -> str:
    """Decision table over (hours, share of term days visited)."""
    if total_hours >= 60 and consistency < 0.35:
        return "crammer (high hours, low consistency)"
    if 25 <= total_hours < 60 and consistency >= 0.45:
        return "steady grinder (medium hours, high consistency)"
    if total_hours >= 60 and consistency >= 0.45:
        return "machine (high hours, high consistency)"
    if total_hours < 25 and consistency < 0.35:
        return "dabbler (low hours, low consistency)"
    return "mixed"


# =============================================================================
# CALENDAR BREAKDOWNS
# =============================================================================

def weekday_minutes(daily_minutes: dict[date, float]) -> dict[str, float]:
    totals = {name: 0.0 for name in WEEKDAY_NAMES}
    for day, minutes in daily_minutes.items():
        totals[weekday_name(day)] += minutes
    return totals


def compute_weekday_totals(daily_minutes: dict[date, float]) -> list[WeekdayTotal]:
    totals = weekday_minutes(daily_minutes)
    return [WeekdayTotal(day=name, minutes=round_minutes(totals[name])) for name in WEEKDAY_NAMES]


def compute_day_of_week_data(daily_minutes: dict[date, float]) -> list[DayOfWeekShare]:
    """Per-weekday minutes, visit days, average per visit day and share of the week."""
    totals = weekday_minutes(daily_minutes)
    visit_days = defaultdict(int)
    for day in daily_minutes:
        visit_days[weekday_name(day)] += 1

    week_total = sum(totals.values())
    data = []
    for name in WEEKDAY_NAMES:
        minutes = totals[name]
        visits = visit_days[name]
        share = (minutes / week_total) * 100 if week_total > 0 else 0.0
        data.append(DayOfWeekShare(
            day=name[:3],
            minutes=round_minutes(minutes),
            total_visits=visits,
            average_minutes=round_minutes(minutes / visits) if visits else 0,
            share_percent=round_minutes(share * 10) / 10,
        ))
    return data


def month_minutes(daily_minutes: dict[date, float]) -> dict[str, float]:
    totals = defaultdict(float)
    for day, minutes in daily_minutes.items():
        totals[month_key(day)] += minutes
    return dict(sorted(totals.items()))


def compute_month_totals(daily_minutes: dict[date, float]) -> list[MonthTotal]:
    return [
        MonthTotal(month=key, minutes=round_minutes(minutes))
        for key, minutes in month_minutes(daily_minutes).items()
    ]


def term_index(day: date, terms: Sequence[TermDefinition]) -> Optional[int]:
    """Position of the first term containing ``day``, or None."""
    for idx, term in enumerate(terms):
        if term.contains(day):
            return idx
    return None


def term_label(day: date, terms: Sequence[TermDefinition]) -> str:
    """First term containing ``day`` wins."""
    idx = term_index(day, terms)
    return OUTSIDE_TERM_LABEL if idx is None else terms[idx].name


def compute_term_breakdown(
    daily_minutes: dict[date, float],
    terms: Sequence[TermDefinition]
) -> tuple[list[TermBreakdown], float]:
    """
    Attribute per-day minutes to terms.

    Terms are tracked by position, so two terms sharing a name stay separate.
    Returns the per-term breakdowns and the (unrounded) minutes that fell
    outside every term.
    """
    term_minutes = [0.0] * len(terms)
    outside_minutes = 0.0
    for day, minutes in daily_minutes.items():
        idx = term_index(day, terms)
        if idx is None:
            outside_minutes += minutes
        else:
            term_minutes[idx] += minutes

    visited = {day for day, minutes in daily_minutes.items() if minutes > 0}

    breakdowns = []
    for term, minutes in zip(terms, term_minutes):
        total_days = term.total_days
        visited_days = sum(
            1 for offset in range(total_days)
            if term.start + timedelta(days=offset) in visited
        )
        consistency = visited_days / total_days if total_days else 0.0
        breakdowns.append(TermBreakdown(
            name=term.name,
            start=term.start,
            end=term.end,
            minutes=round_minutes(minutes),
            hours=minutes / 60.0,
            visited_days=visited_days,
            total_days=total_days,
            consistency=consistency,
            style=study_style(minutes / 60.0, consistency),
        ))
    return breakdowns, outside_minutes


# =============================================================================
# SESSION BUCKETS
# =============================================================================

def compute_visit_types(merged: Iterable[MergedSession]) -> VisitTypeBreakdown:
    counts = {"quick": 0, "standard": 0, "long": 0, "marathon": 0}
    for session in merged:
        minutes = session.duration_minutes
        if minutes < 60:
            counts["quick"] += 1
        elif minutes < 180:
            counts["standard"] += 1
        elif minutes < 360:
            counts["long"] += 1
        else:
            counts["marathon"] += 1
    return VisitTypeBreakdown(**counts)


def compute_no_seat(raw: Sequence[RawSession], max_minutes: float) -> NoSeatSummary:
    """Raw sessions at or under ``max_minutes`` are treated as failed seat hunts."""
    no_seat = [s for s in raw if s.duration_minutes <= max_minutes]
    seated = [s for s in raw if s.duration_minutes > max_minutes]
    no_seat_minutes = sum(s.duration_minutes for s in no_seat)
    seated_minutes = sum(s.duration_minutes for s in seated)
    return NoSeatSummary(
        max_minutes=max_minutes,
        count=len(no_seat),
        share_pct_of_raw_sessions=(len(no_seat) / len(raw)) * 100.0 if raw else 0.0,
        total_minutes=round_minutes(no_seat_minutes),
        total_hours=no_seat_minutes / 60.0,
        remaining_raw_sessions_count=len(seated),
        remaining_raw_sessions_total_minutes=round_minutes(seated_minutes),
        remaining_raw_sessions_total_hours=seated_minutes / 60.0,
    )


def pick_latest_departure(merged: Sequence[MergedSession]) -> tuple[MergedSession, int, bool]:
    """
    Latest departure, preferring visits that ran past midnight.

    Returns (session, exit minutes since midnight, post_midnight).
    """
    best = merged[0]
    best_key = (best.exit_time.date() > best.entry_time.date(), minutes_since_midnight(best.exit_time))
    for session in merged[1:]:
        key = (session.exit_time.date() > session.entry_time.date(), minutes_since_midnight(session.exit_time))
        if key > best_key:
            best, best_key = session, key
    return best, best_key[1], best_key[0]


def build_top_sessions(merged: Sequence[MergedSession], limit: int = TOP_SESSION_COUNT) -> list[TopSession]:
    """Longest visits first; equal durations keep chronological order."""
    ranked = sorted(merged, key=lambda s: s.duration_seconds, reverse=True)[:limit]
    return [
        TopSession(
            date=s.entry_time.date(),
            start_hhmm=minutes_to_hhmm(minutes_since_midnight(s.entry_time)),
            end_hhmm=minutes_to_hhmm(minutes_since_midnight(s.exit_time)),
            minutes=round_minutes(s.duration_minutes),
        )
        for s in ranked
    ]


def build_monthly_data(month_totals: Sequence[MonthTotal], merged: Iterable[MergedSession]) -> list[MonthlySessions]:
    sessions_per_month = defaultdict(int)
    for session in merged:
        sessions_per_month[month_key(session.entry_time.date())] += 1
    return [
        MonthlySessions(
            month=format_month_label(m.month),
            minutes=m.minutes,
            sessions=sessions_per_month[m.month],
        )
        for m in month_totals
    ]


# =============================================================================
# INVARIANTS
# =============================================================================

def check_invariants(totals: DebugTotals, tolerance: float = INVARIANT_TOLERANCE_MINUTES) -> None:
    """Raise InvariantViolation if any independently computed total disagrees."""
    values = {
        "raw": totals.total_minutes_raw,
        "merged": totals.total_minutes_merged,
        "daily_split": totals.total_minutes_daily_split,
        "weekday_sum": totals.total_minutes_weekday_sum,
        "month_sum": totals.total_minutes_month_sum,
        "term_sum": totals.total_minutes_term_sum,
    }
    reference = totals.total_minutes_raw
    mismatched = {
        name: value for name, value in values.items()
        if not math.isclose(value, reference, rel_tol=1e-9, abs_tol=tolerance)
    }
    if mismatched:
        logger.error("Total minutes disagree with raw total %.6f: %s", reference, mismatched)
        raise InvariantViolation(
            f"Total minutes disagree with raw total {reference}: {mismatched}"
        )


# =============================================================================
# ENTRY POINT
# =============================================================================

def empty_stats(config: EngineConfig) -> ProcessedStats:
    """Snapshot for inputs that produce no sessions."""
    return ProcessedStats(no_seat=NoSeatSummary(max_minutes=config.no_seat_max_minutes))


def process_library_stats(
    records: Iterable[RawSwipeRecord],
    config: Optional[EngineConfig] = None,
    terms: Sequence[TermDefinition] = DEFAULT_TERMS
) -> ProcessedStats:
    """
    Compute the full statistics snapshot for one user's swipe history.

    Pure function of (records, config, terms); never raises for data-quality
    problems. Zero sessions after pairing gives ``empty_stats``.
    """
    config = config or EngineConfig()
    terms = tuple(terms)

    swipes = normalize_swipes(records)
    pairing = pair_sessions(swipes)
    raw = list(pairing.sessions)

    if not raw:
        logger.info("No complete sessions in %d swipe(s)", len(swipes))
        return empty_stats(config)

    merged = merge_sessions_by_gap(raw, config.merge_gap_minutes)

    raw_total = sum(s.duration_minutes for s in raw)
    merged_total = sum(s.duration_minutes for s in merged)

    daily_minutes = build_daily_minutes(raw)
    visited_dates = sorted(day for day, minutes in daily_minutes.items() if minutes > 0)

    # Sessions (merged)
    longest = max(merged, key=lambda s: s.duration_seconds)
    average_minutes = merged_total / len(merged)

    # Streaks
    streak_summary = find_streaks(visited_dates)
    best_streaks = top_streaks(streak_summary.streaks, TOP_STREAK_COUNT)
    if best_streaks:
        best_streak = best_streaks[0]
    else:
        best_streak = Streak(days=streak_summary.longest_visit_streak, start_date=None, end_date=None)

    # Earliest arrival (raw) / latest departure (merged)
    earliest_arrival = min(minutes_since_midnight(s.entry_time) for s in raw)
    latest_session, latest_departure, post_midnight = pick_latest_departure(merged)

    # Calendar breakdowns
    weekday_totals = compute_weekday_totals(daily_minutes)
    month_totals = compute_month_totals(daily_minutes)
    terms_out, outside_minutes = compute_term_breakdown(daily_minutes, terms)

    # Hour-of-day distribution
    hourly_minutes = build_hourly_minutes(raw)

    debug = None
    if config.debug:
        debug = DebugTotals(
            total_minutes_raw=raw_total,
            total_minutes_merged=merged_total,
            total_minutes_daily_split=sum(daily_minutes.values()),
            total_minutes_weekday_sum=sum(weekday_minutes(daily_minutes).values()),
            total_minutes_month_sum=sum(month_minutes(daily_minutes).values()),
            total_minutes_term_sum=sum(t.hours * 60.0 for t in terms_out) + outside_minutes,
        )
        check_invariants(debug)

    logger.debug(
        "Processed %d raw / %d merged session(s) over %d visited day(s)",
        len(raw), len(merged), len(visited_dates),
    )

    return ProcessedStats(
        total_minutes=round_minutes(raw_total),
        total_hours=raw_total / 60.0,
        analogy=analogy(raw_total),
        total_sessions=len(merged),
        longest_session_minutes=round_minutes(longest.duration_minutes),
        longest_session_hours=longest.duration_minutes / 60.0,
        longest_session_date=longest.entry_time.date(),
        average_session_minutes=round_minutes(average_minutes),
        average_session_hours=average_minutes / 60.0,
        longest_visit_streak_days=streak_summary.longest_visit_streak,
        longest_away_streak_days=streak_summary.longest_away_streak,
        dataset_span_days=streak_summary.span_days,
        earliest_arrival_hhmm=minutes_to_hhmm(earliest_arrival),
        earliest_arrival_label=time_of_day_label(earliest_arrival, "arrival"),
        latest_departure_hhmm=minutes_to_hhmm(latest_departure),
        latest_departure_label=time_of_day_label(latest_departure, "departure"),
        latest_departure_post_midnight=post_midnight,
        latest_departure_entry_date=latest_session.entry_time.date() if post_midnight else None,
        weekday_totals=tuple(weekday_totals),
        most_day=max(weekday_totals, key=lambda w: w.minutes).day,
        least_day=min(weekday_totals, key=lambda w: w.minutes).day,
        day_of_week_data=tuple(compute_day_of_week_data(daily_minutes)),
        month_totals=tuple(month_totals),
        terms=tuple(terms_out),
        outside_term_minutes=round_minutes(outside_minutes),
        outside_term_hours=outside_minutes / 60.0,
        visit_type_breakdown=compute_visit_types(merged),
        no_seat=compute_no_seat(raw, config.no_seat_max_minutes),
        orphan_filtering=OrphanFiltering(
            orphan_out_ignored=pairing.orphan_out_no_in,
            orphan_in_overwritten_ignored=pairing.orphan_in_overwritten,
            orphan_in_at_end_ignored=pairing.orphan_in_at_end,
            raw_sessions=len(raw),
            merged_sessions=len(merged),
        ),
        top_sessions=tuple(build_top_sessions(merged)),
        top_streaks=tuple(best_streaks),
        best_streak=best_streak,
        hourly_data=tuple(build_hourly_data(hourly_minutes)),
        peak_study_hours=detect_peak_window(hourly_shares(hourly_minutes)),
        monthly_data=tuple(build_monthly_data(month_totals, merged)),
        debug=debug,
    )

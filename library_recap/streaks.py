"""
Visit and away streak detection over the set of visited dates.
"""

from datetime import date, timedelta
from typing import Iterable

from library_recap.models import Streak, StreakSummary


MIN_REPORTED_STREAK = 2


def find_streaks(visited_dates: Iterable[date]) -> StreakSummary:
    """
    Find runs of consecutive visited days and the longest gap between visits.

    Only runs of at least two days are listed in ``streaks`` (in scan order),
    but a lone visited day still gives a longest visit streak of 1.
    """
    days = sorted(set(visited_dates))
    if not days:
        return StreakSummary(longest_visit_streak=0, longest_away_streak=0, span_days=0, streaks=())

    first, last = days[0], days[-1]
    span_days = (last - first).days + 1

    streaks = []
    run_start = prev = days[0]
    run_length = 1
    for day in days[1:]:
        if (day - prev).days == 1:
            run_length += 1
        else:
            if run_length >= MIN_REPORTED_STREAK:
                streaks.append(Streak(days=run_length, start_date=run_start, end_date=prev))
            run_length = 1
            run_start = day
        prev = day
    if run_length >= MIN_REPORTED_STREAK:
        streaks.append(Streak(days=run_length, start_date=run_start, end_date=prev))

    longest_visit = max((s.days for s in streaks), default=1)

    visited = set(days)
    longest_away = 0
    current_away = 0
    for offset in range(span_days):
        if first + timedelta(days=offset) in visited:
            longest_away = max(longest_away, current_away)
            current_away = 0
        else:
            current_away += 1
    longest_away = max(longest_away, current_away)

    return StreakSummary(
        longest_visit_streak=longest_visit,
        longest_away_streak=longest_away,
        span_days=span_days,
        streaks=tuple(streaks),
    )


def top_streaks(streaks: Iterable[Streak], limit: int = 3) -> list[Streak]:
    """Longest streaks first; equal lengths keep scan order (earliest first)."""
    return sorted(streaks, key=lambda s: s.days, reverse=True)[:limit]

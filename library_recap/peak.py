"""
Peak study-hours detection.

Hour-of-day minutes are normalised into shares, a circular 3-hour window is
rolled over them, and the winning window's midpoint picks a persona.
"""

from typing import Sequence

from library_recap.models import HourlyBucket, PeakWindow
from library_recap.timeutil import round_minutes


WINDOW_HOURS = 3
BALANCED_MARGIN = 0.10
BALANCED_PERSONA = "balanced"

# (start, end) of each persona band in midpoint hours; night owl wraps midnight
PERSONA_BANDS = (
    (5, 10, "early bird"),
    (10, 14, "daytime studier"),
    (14, 18, "afternoon grinder"),
    (18, 21, "evening warrior"),
)
NIGHT_PERSONA = "night owl"


def hourly_shares(hourly_minutes: Sequence[float]) -> list[float]:
    """Normalise 24 hour buckets to shares summing to 1 (all zero if empty)."""
    total = sum(hourly_minutes)
    if total <= 0:
        return [0.0] * len(hourly_minutes)
    return [m / total for m in hourly_minutes]


def build_hourly_data(hourly_minutes: Sequence[float]) -> list[HourlyBucket]:
    shares = hourly_shares(hourly_minutes)
    return [
        HourlyBucket(hour=hour, total_minutes=round_minutes(hourly_minutes[hour]), share=shares[hour])
        for hour in range(24)
    ]


def rolling_window_shares(shares: Sequence[float], width: int = WINDOW_HOURS) -> list[float]:
    """Share captured by the window starting at each hour, wrapping at midnight."""
    n = len(shares)
    return [sum(shares[(h + k) % n] for k in range(width)) for h in range(n)]


def format_hour(hour: int) -> str:
    if hour == 0:
        return "12am"
    if hour == 12:
        return "12pm"
    return f"{hour}am" if hour < 12 else f"{hour - 12}pm"


def format_hour_range(start_hour: int) -> str:
    """e.g. 19 -> '7pm–10pm'"""
    return f"{format_hour(start_hour)}–{format_hour((start_hour + WINDOW_HOURS) % 24)}"


def persona_for_window(start_hour: int) -> str:
    midpoint = (start_hour + WINDOW_HOURS / 2) % 24
    for low, high, persona in PERSONA_BANDS:
        if low <= midpoint < high:
            return persona
    return NIGHT_PERSONA


def detect_peak_window(shares: Sequence[float]) -> PeakWindow:
    """
    Pick the 3-hour window holding the largest share of study time.

    When the runner-up window is within 10% of the winner the user is
    classed as balanced. Ties go to the earliest start hour.
    """
    windows = rolling_window_shares(shares)
    ranked = sorted(range(len(windows)), key=lambda h: windows[h], reverse=True)
    top = ranked[0]
    top_share = windows[top]
    second_share = windows[ranked[1]] if len(ranked) > 1 else 0.0

    is_balanced = top_share > 0 and (top_share - second_share) / top_share < BALANCED_MARGIN

    return PeakWindow(
        window_start=top,
        window_end=(top + WINDOW_HOURS) % 24,
        window_share=top_share,
        display_range=format_hour_range(top),
        persona=BALANCED_PERSONA if is_balanced else persona_for_window(top),
        is_balanced=is_balanced,
    )


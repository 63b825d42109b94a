"""
Calendar and clock helpers shared by the aggregation stages.

All values are read in UTC; there is no local-time conversion.
"""

from datetime import date, datetime


WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                       "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def round_minutes(value: float) -> int:
    """Round half up, the way minute totals are displayed."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def minutes_since_midnight(ts: datetime) -> int:
    return ts.hour * 60 + ts.minute


def minutes_to_hhmm(minutes: float) -> str:
    hh = int(minutes // 60)
    mm = round_minutes(minutes % 60)
    return f"{hh:02d}:{mm:02d}"


def month_key(day: date) -> str:
    """YYYY-MM"""
    return f"{day.year:04d}-{day.month:02d}"


def format_month_label(key: str) -> str:
    """'2025-03' -> 'Mar 2025'"""
    year, month = key.split("-")
    return f"{MONTH_ABBREVIATIONS[int(month) - 1]} {year}"


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]

"""
Swipe loading and normalization module.

This module handles:
- Loading raw swipe records from JSON or CSV exports
- Parsing DD/MM/YYYY dates and HH:MM[:SS] times into UTC instants
- Mapping direction text to ENTRY / EXIT
- Dropping records that fail any parse step
- Filtering raw records to a date range
"""

import csv
import json
import logging
import re
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from library_recap.models import Direction, NormalizedSwipe, RawSwipeRecord


logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")

SWIPE_REQUIRED_FIELDS = {"date", "time", "direction"}

_DATE_SEPARATORS = re.compile(r"[/\-.]")
_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_DIRECTIONS = {
    "IN": Direction.ENTRY,
    "OUT": Direction.EXIT,
}
_LAST_MINUTE_OF_DAY = 24 * 60 - 1


def parse_date(text: str) -> Optional[date]:
    """
    Parse a day/month/year date. Separators may be '/', '-' or '.'.

    Returns None when the text is not a plausible date.
    """
    if not text:
        return None
    parts = [p.strip() for p in _DATE_SEPARATORS.split(str(text).strip())]
    if len(parts) < 3:
        return None
    try:
        day, month, year = int(parts[0]), int(parts[1]), int(parts[2])
    except ValueError:
        return None
    if not 1900 <= year <= 9999 or not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    # Days past the end of the month roll over: 31/02/2025 -> 2025-03-03
    return date(year, month, 1) + timedelta(days=day - 1)


def parse_time_to_minutes(text: str) -> Optional[int]:
    """Parse HH:MM or HH:MM:SS into minutes since midnight, clamped to [0, 1439]."""
    if not text:
        return None
    match = _TIME_PATTERN.match(str(text).strip())
    if not match:
        return None
    minutes = int(match.group(1)) * 60 + int(match.group(2))
    return min(_LAST_MINUTE_OF_DAY, max(0, minutes))


def parse_direction(text: str) -> Optional[Direction]:
    return _DIRECTIONS.get(str(text).strip().upper())


def build_timestamp(date_text: str, time_text: str) -> Optional[datetime]:
    """Combine date and time text into a UTC instant (seconds are dropped)."""
    day = parse_date(date_text)
    if day is None:
        return None
    minutes = parse_time_to_minutes(time_text)
    if minutes is None:
        return None
    return datetime(day.year, day.month, day.day, tzinfo=UTC) + timedelta(minutes=minutes)


def normalize_swipes(records: Iterable[RawSwipeRecord]) -> list[NormalizedSwipe]:
    """
    Parse raw records into NormalizedSwipes sorted by timestamp.

    Invalid records are dropped. The sort is stable, so swipes sharing a
    timestamp keep their input order.
    """
    swipes = []
    rejected = 0
    for record in records:
        direction = parse_direction(record.direction)
        if direction is None:
            rejected += 1
            continue
        timestamp = build_timestamp(record.date, record.time)
        if timestamp is None:
            rejected += 1
            continue
        swipes.append(NormalizedSwipe(timestamp=timestamp, direction=direction))

    if rejected:
        logger.debug("Dropped %d unparseable swipe record(s)", rejected)

    swipes.sort(key=lambda s: s.timestamp)
    return swipes


def records_from_dicts(entries: list) -> list[RawSwipeRecord]:
    """
    Build RawSwipeRecords from plain mappings.

    Entries missing a required field are skipped with a warning.
    """
    records = []
    skipped = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            skipped.append((idx, f"expected a mapping, got {type(entry).__name__}"))
            continue
        missing_fields = SWIPE_REQUIRED_FIELDS - set(entry.keys())
        if missing_fields:
            skipped.append((idx, f"missing required fields: {', '.join(sorted(missing_fields))}"))
            continue
        records.append(RawSwipeRecord(
            date=str(entry["date"]),
            time=str(entry["time"]),
            direction=str(entry["direction"]),
        ))

    if skipped:
        logger.warning("Skipped %d malformed swipe record(s)", len(skipped))
        for idx, error in skipped:
            logger.debug("  Record %d: %s", idx, error)

    return records


def load_swipe_file(filepath: str) -> list[RawSwipeRecord]:
    """
    Load raw swipes from a JSON or CSV file.

    JSON files must contain a top-level 'swipes' list; CSV files must have a
    date,time,direction header.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()
    if suffix not in (".json", ".csv"):
        raise ValueError(f"Unsupported swipe file type '{suffix}', expected .json or .csv")

    try:
        with open(path, "r", newline="") as f:
            if suffix == ".csv":
                reader = csv.DictReader(f)
                missing = SWIPE_REQUIRED_FIELDS - set(reader.fieldnames or [])
                if missing:
                    raise KeyError(f"CSV header is missing columns: {', '.join(sorted(missing))}")
                return records_from_dicts(list(reader))
            data = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Swipe data file not found: {filepath}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in swipe data file: {e}")

    if not isinstance(data, dict) or "swipes" not in data:
        raise KeyError("Swipe data JSON must contain 'swipes' key")

    if not isinstance(data["swipes"], list):
        raise TypeError(f"'swipes' must be a list, got {type(data['swipes']).__name__}")

    return records_from_dicts(data["swipes"])


def filter_swipes_by_date(
    records: Iterable[RawSwipeRecord],
    start: date,
    end: date
) -> list[RawSwipeRecord]:
    """
    Keep records whose date falls within [start, end].

    Records with unparseable dates are dropped here as well.
    """
    kept = []
    for record in records:
        day = parse_date(record.date)
        if day is not None and start <= day <= end:
            kept.append(record)
    return kept

"""
Configuration for the Library Recap engine.

This module defines:
- EngineConfig: Thresholds and debug switch, validated at construction
- TermDefinition: Named inclusive date range used for term bucketing
- DEFAULT_TERMS: Example three-term academic calendar
- YAML loading for both
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import yaml


OUTSIDE_TERM_LABEL = "Outside term time"


@dataclass(frozen=True)
class EngineConfig:
    """
    Processing thresholds.

    Immutable after construction (frozen dataclass); invalid values are
    rejected before any swipe is processed.
    """

    no_seat_max_minutes: float = 15.0  # raw sessions <= this are "no seat"
    merge_gap_minutes: float = 60.0  # return within this merges visits
    debug: bool = False

    def __post_init__(self):
        """Validate thresholds."""
        for name in ("no_seat_max_minutes", "merge_gap_minutes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    def as_dict(self) -> dict:
        return {
            "no_seat_max_minutes": float(self.no_seat_max_minutes),
            "merge_gap_minutes": float(self.merge_gap_minutes),
            "debug": bool(self.debug),
        }

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "EngineConfig":
        """
        Load configuration from the ``engine`` section of a YAML file.

        Example YAML:
            engine:
              no_seat_max_minutes: 15
              merge_gap_minutes: 60
              debug: false
        """
        data = _read_yaml(yaml_path)
        return cls(**data.get("engine", {}))


@dataclass(frozen=True)
class TermDefinition:
    """Named inclusive date range."""

    name: str
    start: date
    end: date

    def __post_init__(self):
        if not self.name:
            raise ValueError("Term name cannot be empty")
        if self.start > self.end:
            raise ValueError(
                f"Term '{self.name}' starts after it ends: {self.start} > {self.end}"
            )

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


DEFAULT_TERMS: tuple[TermDefinition, ...] = (
    TermDefinition("Spring Term 2025", date(2025, 1, 4), date(2025, 3, 21)),
    TermDefinition("Summer Term 2025", date(2025, 4, 26), date(2025, 6, 27)),
    TermDefinition("Autumn Term 2025", date(2025, 9, 27), date(2025, 12, 12)),
)


def _read_yaml(yaml_path: Path) -> dict:
    try:
        with open(yaml_path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Config file not found: {yaml_path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"Config root must be a mapping, got {type(data).__name__}")
    return data


def _coerce_date(value: Any, term_name: str) -> date:
    # YAML parses unquoted ISO dates into date or datetime objects already
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f"Term '{term_name}': invalid date {value!r}, expected YYYY-MM-DD")


def parse_terms(entries: list) -> tuple[TermDefinition, ...]:
    """Build TermDefinitions from a list of {name, start, end} mappings."""
    if not isinstance(entries, list):
        raise TypeError(f"'terms' must be a list, got {type(entries).__name__}")

    terms = []
    for idx, entry in enumerate(entries):
        missing = {"name", "start", "end"} - set(entry)
        if missing:
            raise ValueError(f"Term {idx}: missing required fields: {', '.join(sorted(missing))}")
        name = str(entry["name"])
        terms.append(TermDefinition(
            name=name,
            start=_coerce_date(entry["start"], name),
            end=_coerce_date(entry["end"], name),
        ))
    return tuple(terms)


def load_terms_yaml(yaml_path: Path, default: Optional[tuple] = DEFAULT_TERMS) -> tuple[TermDefinition, ...]:
    """
    Load term definitions from a YAML file.

    Example YAML:
        terms:
          - name: "Spring Term 2025"
            start: 2025-01-04
            end: 2025-03-21

    Falls back to ``default`` when the file has no ``terms`` key.
    """
    data = _read_yaml(yaml_path)
    if "terms" not in data:
        return tuple(default or ())
    return parse_terms(data["terms"])

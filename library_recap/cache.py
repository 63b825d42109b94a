"""
Caller-side result cache and time-range presets.

The engine is a pure function, so memoisation lives here, keyed by a
fingerprint of (records, config, terms).

Thread Safety:
- Uses threading.Lock around the result dict
- The engine call itself runs outside the lock
"""

import hashlib
import json
import logging
import threading
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from library_recap.aggregator import process_library_stats
from library_recap.config import DEFAULT_TERMS, EngineConfig, TermDefinition
from library_recap.data_loader import filter_swipes_by_date
from library_recap.models import ProcessedStats, RawSwipeRecord


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeRange:
    """Inclusive date range offered to the user."""
    label: str
    start: date
    end: date


def fingerprint(
    records: Sequence[RawSwipeRecord],
    config: EngineConfig,
    terms: Sequence[TermDefinition]
) -> str:
    """SHA-256 over a canonical JSON rendering of the engine inputs."""
    payload = {
        "records": [[r.date, r.time, r.direction] for r in records],
        "config": config.as_dict(),
        "terms": [[t.name, t.start.isoformat(), t.end.isoformat()] for t in terms],
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def time_ranges(year: int, terms: Sequence[TermDefinition] = DEFAULT_TERMS) -> list[TimeRange]:
    """Full calendar year followed by one range per term."""
    ranges = [TimeRange(f"{year} (Full)", date(year, 1, 1), date(year, 12, 31))]
    ranges.extend(TimeRange(t.name, t.start, t.end) for t in terms)
    return ranges


class StatsCache:
    """
    Memoises ProcessedStats per input fingerprint.

    Example:
        >>> cache = StatsCache()
        >>> stats = cache.get_or_compute(records)
        >>> cache.get_or_compute(records) is stats
        True
    """

    def __init__(self, max_entries: int = 32):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._results: dict[str, ProcessedStats] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def get_or_compute(
        self,
        records: Sequence[RawSwipeRecord],
        config: Optional[EngineConfig] = None,
        terms: Sequence[TermDefinition] = DEFAULT_TERMS
    ) -> ProcessedStats:
        config = config or EngineConfig()
        records = tuple(records)
        terms = tuple(terms)
        key = fingerprint(records, config, terms)

        with self._lock:
            cached = self._results.get(key)
        if cached is not None:
            logger.debug("Stats cache hit %s", key[:12])
            return cached

        stats = process_library_stats(records, config, terms)

        with self._lock:
            # another thread may have stored the same key meanwhile
            stats = self._results.setdefault(key, stats)
            while len(self._results) > self.max_entries:
                oldest = next(iter(self._results))
                del self._results[oldest]
        return stats

    def stats_for_range(
        self,
        records: Sequence[RawSwipeRecord],
        time_range: TimeRange,
        config: Optional[EngineConfig] = None,
        terms: Sequence[TermDefinition] = DEFAULT_TERMS
    ) -> ProcessedStats:
        """Recompute (or reuse) stats for the swipes dated within ``time_range``."""
        filtered = filter_swipes_by_date(records, time_range.start, time_range.end)
        return self.get_or_compute(filtered, config, terms)

    def clear(self) -> None:
        with self._lock:
            self._results.clear()

"""Library Recap package.

Turns building-access swipes into library visit statistics. Core modules:
models, config, data_loader, pairing, merger, streaks, peak, aggregator,
cache, reporter.
"""

from library_recap.aggregator import InvariantViolation, process_library_stats
from library_recap.config import DEFAULT_TERMS, EngineConfig, TermDefinition
from library_recap.models import ProcessedStats, RawSwipeRecord

__all__ = [
    'DEFAULT_TERMS',
    'EngineConfig',
    'InvariantViolation',
    'ProcessedStats',
    'RawSwipeRecord',
    'TermDefinition',
    'process_library_stats',
]

"""
Entry/exit pairing.

A single ordered pass over normalized swipes that turns IN->OUT pairs into
RawSessions and counts every swipe that cannot be paired.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from library_recap.models import Direction, NormalizedSwipe, PairingResult, RawSession


logger = logging.getLogger(__name__)


class SessionPairer:
    """
    Two-state machine: idle (``open_entry is None``) or open at an entry time.

    Feed swipes in timestamp order, then call ``finish()``. One instance
    handles exactly one user's timeline.
    """

    def __init__(self):
        self.open_entry: Optional[datetime] = None
        self.sessions: list[RawSession] = []
        self.orphan_in_overwritten = 0
        self.orphan_out_no_in = 0

    def feed(self, swipe: NormalizedSwipe) -> Optional[RawSession]:
        if swipe.direction is Direction.ENTRY:
            if self.open_entry is not None:
                self.orphan_in_overwritten += 1
            self.open_entry = swipe.timestamp
            return None

        # EXIT
        if self.open_entry is None:
            self.orphan_out_no_in += 1
            return None

        entry, self.open_entry = self.open_entry, None
        if swipe.timestamp < entry:
            # exit before its entry: treated as corrupt, both swipes dropped
            logger.debug("Dropped exit at %s preceding entry at %s", swipe.timestamp, entry)
            return None

        session = RawSession(
            entry_time=entry,
            exit_time=swipe.timestamp,
            duration_seconds=(swipe.timestamp - entry).total_seconds(),
        )
        self.sessions.append(session)
        return session

    def finish(self) -> PairingResult:
        orphan_in_at_end = 1 if self.open_entry is not None else 0
        self.open_entry = None
        result = PairingResult(
            sessions=tuple(self.sessions),
            orphan_out_no_in=self.orphan_out_no_in,
            orphan_in_overwritten=self.orphan_in_overwritten,
            orphan_in_at_end=orphan_in_at_end,
        )
        logger.debug(
            "Paired %d session(s); orphans: %d stray exit, %d overwritten entry, %d trailing entry",
            len(result.sessions), result.orphan_out_no_in,
            result.orphan_in_overwritten, result.orphan_in_at_end,
        )
        return result


def pair_sessions(swipes: Iterable[NormalizedSwipe]) -> PairingResult:
    """Pair a sorted swipe stream into RawSessions."""
    pairer = SessionPairer()
    for swipe in swipes:
        pairer.feed(swipe)
    return pairer.finish()

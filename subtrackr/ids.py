"""
Subscription ID generation.

DESIGN DECISION: All new IDs come from one generator. IDs are the current
time in milliseconds, bumped forward whenever that would not be strictly
greater than the last ID handed out, and skipped past any ID already taken.
Two records added in the same millisecond, or a batch of imported records
missing their IDs, can therefore never collide.
"""

import math
import time
from typing import Any, Callable, Collection, Iterable


class IdGenerator:
    """Hands out strictly increasing, time-derived integer IDs."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0

    def observe(self, ids: Iterable[Any]) -> None:
        """Make sure future IDs are greater than every numeric ID seen here."""
        for value in ids:
            if isinstance(value, bool):
                continue
            if isinstance(value, (int, float)) and math.isfinite(value):
                self._last = max(self._last, math.floor(value))

    def next_id(self, taken: Collection[Any] = ()) -> int:
        """
        Next unused ID.

        Args:
            taken: IDs that must not be returned (the current ledger, the
                   batch being imported)
        """
        candidate = max(int(self._clock() * 1000), self._last + 1)
        while candidate in taken:
            candidate += 1
        self._last = candidate
        return candidate

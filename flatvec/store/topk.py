"""Fixed-capacity selector that keeps the nearest candidates seen so far."""

from __future__ import annotations

import math
from bisect import insort
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Candidate:
    """A scanned record that may survive ranking."""

    distance: float
    metadata_offset: int
    metadata_length: int


def _distance_key(candidate: Candidate) -> float:
    # NaN ranks last so it never displaces a comparable candidate.
    if math.isnan(candidate.distance):
        return math.inf
    return candidate.distance


class BoundedTopK:
    """Sorted list of at most ``capacity`` candidates, nearest first.

    When an insertion pushes the size past ``capacity`` the last element,
    which holds the largest distance, is evicted.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = max(int(capacity), 0)
        self._items: list[Candidate] = []

    def __len__(self) -> int:
        return len(self._items)

    @property
    def worst_distance(self) -> float | None:
        """Largest retained distance, or ``None`` when empty."""
        return self._items[-1].distance if self._items else None

    def offer(self, candidate: Candidate) -> None:
        if self.capacity == 0:
            return
        if len(self._items) >= self.capacity and _distance_key(candidate) >= _distance_key(
            self._items[-1]
        ):
            return

        insort(self._items, candidate, key=_distance_key)
        if len(self._items) > self.capacity:
            self._items.pop()

    def drain_ascending(self) -> list[Candidate]:
        """Empty the selector and return its candidates nearest first."""
        drained, self._items = self._items, []
        return drained

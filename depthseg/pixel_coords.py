"""Pixel coordinates and a FIFO queue that remembers what it has seen."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Set


@dataclass(frozen=True)
class PixelCoord:
    """A (row, col) position in an image."""

    row: int = 0
    col: int = 0

    def __add__(self, other: "PixelCoord") -> "PixelCoord":
        if not isinstance(other, PixelCoord):
            return NotImplemented
        return PixelCoord(self.row + other.row, self.col + other.col)


class HashQueue:
    """A FIFO queue of coordinates with membership of everything ever pushed."""

    def __init__(self) -> None:
        self._queue: Deque[PixelCoord] = deque()
        self._seen: Set[PixelCoord] = set()

    def push(self, coord: PixelCoord) -> None:
        """Append ``coord`` to the back of the queue."""
        self._seen.add(coord)
        self._queue.append(coord)

    def pop(self) -> PixelCoord:
        """Remove and return the front coordinate; raise IndexError if empty."""
        if not self._queue:
            raise IndexError("pop from an empty HashQueue")
        return self._queue.popleft()

    def front(self) -> PixelCoord:
        """Return the front coordinate without removing it."""
        if not self._queue:
            raise IndexError("front of an empty HashQueue")
        return self._queue[0]

    def __len__(self) -> int:
        return len(self._queue)

    def __contains__(self, coord: object) -> bool:
        """True if ``coord`` was ever pushed, even if it has been popped since."""
        return coord in self._seen
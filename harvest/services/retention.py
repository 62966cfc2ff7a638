"""
Bounded in-memory history of processed readings.

Readings are kept most-recent-first in a fixed-capacity deque: inserting at
the head of a full store evicts the oldest reading at the tail in O(1). The
store is the sole source of historical context for trend and statistics
queries and for the prediction engine's historical adjustment.

Thread safety: every operation holds a per-instance lock; readers receive
list copies, never the live deque.

CHANGELOG:
- 2026-10-18: Add warm-start from persisted history
- 2026-10-18: Initial creation

TODO:
- None
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterable
from datetime import datetime

from harvest.models import ProcessedReading

DEFAULT_CAPACITY = 200


class RetentionStore:
    """Fixed-capacity, most-recent-first buffer of processed readings.

    Args:
        capacity: Maximum number of readings retained (default 200).
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        self._readings: deque[ProcessedReading] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, reading: ProcessedReading) -> None:
        """Insert *reading* as the newest entry, evicting the oldest if full."""
        with self._lock:
            self._readings.appendleft(reading)

    def extend_from_history(self, readings: Iterable[ProcessedReading]) -> None:
        """Load previously persisted readings given newest-first.

        The newest reading ends up at the head; anything beyond capacity is
        dropped from the oldest end.
        """
        with self._lock:
            for reading in reversed(list(readings)):
                self._readings.appendleft(reading)

    def latest(self, n: int = 1) -> list[ProcessedReading]:
        """Return up to *n* most recent readings, newest first."""
        if n < 1:
            return []
        with self._lock:
            return [r for _, r in zip(range(n), self._readings)]

    def all(self) -> list[ProcessedReading]:
        """Return every retained reading, newest first."""
        with self._lock:
            return list(self._readings)

    def by_time_range(self, start: datetime, end: datetime) -> list[ProcessedReading]:
        """Return readings with ``start <= timestamp <= end``, newest first."""
        with self._lock:
            return [r for r in self._readings if start <= r.timestamp <= end]

    def hours_near(self, hour: int, window: int = 1) -> list[ProcessedReading]:
        """Return readings whose recorded hour is within *window* of *hour*."""
        with self._lock:
            return [r for r in self._readings if abs(r.hour - hour) <= window]

    def count(self) -> int:
        with self._lock:
            return len(self._readings)

    def clear(self) -> None:
        with self._lock:
            self._readings.clear()

    def __len__(self) -> int:
        return self.count()

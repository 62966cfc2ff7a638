"""
Thread-safe in-process cache with per-entry time-to-live.

``get`` never returns an entry whose age has reached the TTL: expired
entries are evicted on access. ``sweep`` proactively discards all expired
entries and is called periodically by the application lifespan.

The clock is injectable so expiry can be tested without sleeping.

CHANGELOG:
- 2026-10-18: Initial creation (replaces the Redis realtime cache)

TODO:
- None
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A cached value and the clock reading at which it was stored."""

    value: V
    created_at: float


class TTLCache(Generic[V]):
    """Key-value cache whose entries expire *ttl_seconds* after insertion.

    Args:
        ttl_seconds: Entry lifetime in seconds. Must be positive.
        clock: Monotonic time source returning seconds.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    def _expired(self, entry: CacheEntry[V], now: float) -> bool:
        return now - entry.created_at >= self.ttl_seconds

    def get(self, key: str) -> V | None:
        """Return the live value for *key*, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return None
            return entry.value

    def put(self, key: str, value: V) -> None:
        """Store *value* under *key*, resetting its age."""
        with self._lock:
            self._entries[key] = CacheEntry(value=value, created_at=self._clock())

    def sweep(self) -> int:
        """Remove all expired entries.

        Returns:
            int: Number of entries removed.
        """
        with self._lock:
            now = self._clock()
            stale = [k for k, e in self._entries.items() if self._expired(e, now)]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

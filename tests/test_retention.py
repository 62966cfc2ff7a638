"""
Tests for the bounded in-memory retention store.

CHANGELOG:
- 2026-10-18: Cover evicting more than one reading
- 2026-10-18: Initial creation

TODO:
- None
"""

import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from harvest.models import ProcessedReading
from harvest.services.retention import DEFAULT_CAPACITY, RetentionStore

BASE_TS = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


class TestCapacity:
    """Tests for capacity and eviction."""

    def test_default_capacity_is_200(self) -> None:
        """The store holds 200 readings unless configured otherwise."""
        assert DEFAULT_CAPACITY == 200
        assert RetentionStore().capacity == 200

    def test_invalid_capacity_rejected(self) -> None:
        """A capacity below one is a configuration error."""
        with pytest.raises(ValueError):
            RetentionStore(0)

    def test_oldest_evicted_when_full(
        self, processed_reading: Callable[..., ProcessedReading]
    ) -> None:
        """Appending beyond capacity drops the oldest reading."""
        store = RetentionStore(capacity=200)
        readings = [processed_reading() for _ in range(201)]
        for reading in readings:
            store.append(reading)

        assert store.count() == 200
        ids = [r.id for r in store.all()]
        assert readings[0].id not in ids
        assert ids[0] == readings[-1].id
        assert ids[-1] == readings[1].id

    def test_many_evictions_keep_newest(
        self, processed_reading: Callable[..., ProcessedReading]
    ) -> None:
        """Overflowing by 50 keeps the 50 new readings then the newest 150 old ones."""
        store = RetentionStore(capacity=200)
        readings = [processed_reading() for _ in range(250)]
        for reading in readings:
            store.append(reading)

        ids = [r.id for r in store.all()]
        assert store.count() == 200
        assert ids[:50] == [r.id for r in reversed(readings[200:])]
        assert ids[50:] == [r.id for r in reversed(readings[50:200])]
        assert not {r.id for r in readings[:50]} & set(ids)


class TestQueries:
    """Tests for latest(), by_time_range() and hours_near()."""

    def test_latest_is_newest_first(
        self, processed_reading: Callable[..., ProcessedReading]
    ) -> None:
        """latest(n) returns the n most recent readings, newest first."""
        store = RetentionStore()
        readings = [processed_reading() for _ in range(5)]
        for reading in readings:
            store.append(reading)

        assert [r.id for r in store.latest(3)] == [r.id for r in readings[::-1][:3]]

    def test_latest_more_than_stored(
        self, processed_reading: Callable[..., ProcessedReading]
    ) -> None:
        """Asking for more than is stored returns everything."""
        store = RetentionStore()
        store.append(processed_reading())
        assert len(store.latest(10)) == 1

    def test_latest_non_positive(self) -> None:
        """latest(0) is empty."""
        assert RetentionStore().latest(0) == []

    def test_time_range_is_inclusive(
        self, processed_reading: Callable[..., ProcessedReading]
    ) -> None:
        """Readings exactly at the range bounds are included."""
        store = RetentionStore()
        for minutes in range(5):
            store.append(processed_reading(timestamp=BASE_TS + timedelta(minutes=minutes)))

        start = BASE_TS + timedelta(minutes=1)
        end = BASE_TS + timedelta(minutes=3)
        result = store.by_time_range(start, end)

        assert [r.timestamp for r in result] == [
            BASE_TS + timedelta(minutes=3),
            BASE_TS + timedelta(minutes=2),
            BASE_TS + timedelta(minutes=1),
        ]

    def test_hours_near_window(
        self, processed_reading: Callable[..., ProcessedReading]
    ) -> None:
        """hours_near() keeps readings within one hour either side."""
        store = RetentionStore()
        for hour in (9, 10, 11, 12, 13):
            store.append(processed_reading(hour=hour))

        assert sorted(r.hour for r in store.hours_near(11)) == [10, 11, 12]

    def test_readers_get_copies(
        self, processed_reading: Callable[..., ProcessedReading]
    ) -> None:
        """Mutating a returned list does not affect the store."""
        store = RetentionStore()
        store.append(processed_reading())
        store.all().clear()
        assert len(store) == 1


class TestWarmStartAndClear:
    """Tests for extend_from_history() and clear()."""

    def test_history_keeps_newest_at_head(
        self, processed_reading: Callable[..., ProcessedReading]
    ) -> None:
        """Newest-first history is loaded so the newest stays at the head."""
        store = RetentionStore(capacity=3)
        history = [processed_reading() for _ in range(5)]  # newest first

        store.extend_from_history(history)

        assert [r.id for r in store.all()] == [r.id for r in history[:3]]

    def test_clear_empties_store(
        self, processed_reading: Callable[..., ProcessedReading]
    ) -> None:
        """clear() removes every reading."""
        store = RetentionStore()
        store.append(processed_reading())
        store.clear()
        assert store.count() == 0


class TestConcurrency:
    """Tests for concurrent appends."""

    def test_concurrent_appends_respect_capacity(
        self, processed_reading: Callable[..., ProcessedReading]
    ) -> None:
        """Parallel writers never push the store beyond capacity."""
        store = RetentionStore(capacity=50)
        reading = processed_reading()

        def _writer() -> None:
            for _ in range(100):
                store.append(reading)

        threads = [threading.Thread(target=_writer) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.count() == 50

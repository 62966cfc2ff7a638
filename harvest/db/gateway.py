"""
Persistence gateway for processed readings and device status.

Readings are appended to ``sensor_readings``; device status is upserted by
device_id into ``device_status``. Writes are fire-and-forget relative to the
ingestion path: :meth:`PersistenceGateway.submit` schedules an asyncio task
and returns immediately. Failures are logged and counted, never surfaced to
the ingestion caller, so the service degrades to memory-only operation when
the store is unavailable.

CHANGELOG:
- 2026-10-18: Add warm-start loaders for readings and status
- 2026-10-18: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from harvest.db.models import DeviceStatusRow, SensorReadingRow
from harvest.errors import PersistenceError
from harvest.models import DeviceStatus, ProcessedReading

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------


def _as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes returned by drivers without tz support."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def reading_to_row(reading: ProcessedReading) -> SensorReadingRow:
    """Map a ProcessedReading onto a SensorReadingRow."""
    data = reading.model_dump(mode="python", exclude={"prediction"})
    data["connection_quality"] = reading.connection_quality.value
    data["prediction"] = (
        reading.prediction.model_dump(mode="json") if reading.prediction else None
    )
    return SensorReadingRow(**data)


def row_to_reading(row: SensorReadingRow) -> ProcessedReading:
    """Map a SensorReadingRow back onto a ProcessedReading."""
    return ProcessedReading(
        id=row.id,
        device_id=row.device_id,
        timestamp=_as_utc(row.timestamp),
        temperature=row.temperature,
        humidity=row.humidity,
        bus_voltage=row.bus_voltage,
        current=row.current,
        power=row.power,
        light_value=row.light_value,
        light_status=row.light_status,
        wind_count=row.wind_count,
        hour=row.hour,
        battery_level=row.battery_level,
        solar_efficiency=row.solar_efficiency,
        wind_efficiency=row.wind_efficiency,
        total_efficiency=row.total_efficiency,
        energy_harvested=row.energy_harvested,
        cost_savings=row.cost_savings,
        carbon_offset=row.carbon_offset,
        is_online=row.is_online,
        connection_quality=row.connection_quality,
        prediction=row.prediction,
        prediction_accuracy=row.prediction_accuracy,
        efficiency_vs_prediction=row.efficiency_vs_prediction,
    )


def status_to_row(status: DeviceStatus) -> DeviceStatusRow:
    return DeviceStatusRow(
        device_id=status.device_id,
        is_online=status.is_online,
        last_seen=status.last_seen,
        battery_level=status.battery_level,
        connection_quality=status.connection_quality.value,
    )


def row_to_status(row: DeviceStatusRow) -> DeviceStatus:
    return DeviceStatus(
        device_id=row.device_id,
        is_online=row.is_online,
        last_seen=_as_utc(row.last_seen),
        battery_level=row.battery_level,
        connection_quality=row.connection_quality,
    )


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------


class PersistenceGateway:
    """Durable sink and warm-start source backed by an async SQLAlchemy store.

    Args:
        session_factory: Factory producing AsyncSession instances.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._tasks: set[asyncio.Task[None]] = set()
        self.failures = 0

    async def write(self, reading: ProcessedReading, status: DeviceStatus) -> None:
        """Append *reading* and upsert *status* in one transaction.

        Raises:
            PersistenceError: If the store is unreachable or the write fails.
        """
        try:
            async with self._session_factory() as session:
                session.add(reading_to_row(reading))
                await session.merge(status_to_row(status))
                await session.commit()
        except Exception as exc:
            raise PersistenceError(
                f"Failed to persist reading {reading.id}: {exc}"
            ) from exc

    async def _write_logged(self, reading: ProcessedReading, status: DeviceStatus) -> None:
        try:
            await self.write(reading, status)
        except PersistenceError:
            self.failures += 1
            logger.warning(
                "Persistence unavailable, continuing memory-only for reading %s",
                reading.id,
                exc_info=True,
            )
        else:
            logger.debug("Persisted reading %s", reading.id)

    def submit(self, reading: ProcessedReading, status: DeviceStatus) -> None:
        """Schedule a background write and return immediately.

        Must be called from within a running event loop; otherwise the write
        is dropped with a warning.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.failures += 1
            logger.warning(
                "No running event loop, reading %s not persisted", reading.id
            )
            return
        task = loop.create_task(self._write_logged(reading, status))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all scheduled writes to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def load_recent(self, device_id: str, limit: int) -> list[ProcessedReading]:
        """Load up to *limit* most recent readings for *device_id*, newest first.

        Raises:
            PersistenceError: If the store cannot be queried.
        """
        stmt = (
            select(SensorReadingRow)
            .where(SensorReadingRow.device_id == device_id)
            .order_by(SensorReadingRow.timestamp.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except Exception as exc:
            raise PersistenceError(f"Failed to load readings: {exc}") from exc
        return [row_to_reading(row) for row in rows]

    async def load_statuses(self) -> list[DeviceStatus]:
        """Load every persisted device status.

        Raises:
            PersistenceError: If the store cannot be queried.
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(DeviceStatusRow))
                rows = result.scalars().all()
        except Exception as exc:
            raise PersistenceError(f"Failed to load device status: {exc}") from exc
        return [row_to_status(row) for row in rows]

"""
Telemetry processing pipeline.

Orchestrates one reading from raw JSON to retained, published record:

    validate -> derive metrics -> attach prediction -> append to history
    -> update device status -> notify subscribers -> submit to persistence

Everything up to the commit point (history append + status update) is pure
computation, so a fault there leaves no partial state behind. Prediction and
persistence failures are isolated: the reading is still accepted.

CHANGELOG:
- 2026-10-18: Attach best-effort predictions to processed readings
- 2026-10-18: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from harvest.config import HarvestSettings
from harvest.errors import InternalError, ReadingValidationError
from harvest.models import DeviceStatus, ProcessedReading
from harvest.services import analytics
from harvest.services.metrics import compute_metrics
from harvest.services.notifications import NotificationBus
from harvest.services.prediction import (
    PredictionEngine,
    efficiency_vs_prediction,
    prediction_accuracy,
)
from harvest.services.retention import RetentionStore
from harvest.services.status import DeviceStatusTracker
from harvest.services.validation import parse_reading

logger = logging.getLogger(__name__)

PersistenceSink = Callable[[ProcessedReading, DeviceStatus], None]


class TelemetryPipeline:
    """Processes raw readings and answers history queries.

    Args:
        store: Bounded history of processed readings.
        tracker: Per-device status tracker.
        bus: Notification bus for newly processed readings.
        engine: Prediction engine; consulted when predictions are attached.
        settings: Service configuration (device id and metric tunables).
        sink: Optional non-blocking persistence hook, called after fan-out.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        store: RetentionStore,
        tracker: DeviceStatusTracker,
        bus: NotificationBus,
        engine: PredictionEngine,
        settings: HarvestSettings,
        sink: PersistenceSink | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(tz=UTC),
    ) -> None:
        self.store = store
        self.tracker = tracker
        self.bus = bus
        self.engine = engine
        self.settings = settings
        self.sink = sink
        self._clock = clock

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def _build(self, raw: Any) -> tuple[ProcessedReading, DeviceStatus]:
        reading = parse_reading(raw)
        settings = self.settings
        metrics = compute_metrics(
            reading,
            wind_scale=settings.wind_scale,
            interval_s=settings.reading_interval_s,
            unit_rate=settings.unit_rate,
            carbon_factor=settings.carbon_factor,
        )

        prediction = None
        accuracy = None
        delta = None
        if settings.attach_predictions:
            prediction = self.engine.predict_from_reading(reading)
            if prediction is not None:
                accuracy = prediction_accuracy(reading.power, prediction.predicted_power)
                delta = efficiency_vs_prediction(
                    metrics.total_efficiency, prediction.predicted_power
                )

        now = self._clock()
        processed = ProcessedReading(
            **reading.model_dump(),
            id=str(uuid.uuid4()),
            timestamp=now,
            device_id=settings.device_id,
            battery_level=metrics.battery_level,
            solar_efficiency=metrics.solar_efficiency,
            wind_efficiency=metrics.wind_efficiency,
            total_efficiency=metrics.total_efficiency,
            energy_harvested=metrics.energy_harvested,
            cost_savings=metrics.cost_savings,
            carbon_offset=metrics.carbon_offset,
            is_online=True,
            connection_quality=metrics.connection_quality,
            prediction=prediction,
            prediction_accuracy=accuracy,
            efficiency_vs_prediction=delta,
        )
        status = DeviceStatus(
            device_id=processed.device_id,
            is_online=True,
            last_seen=now,
            battery_level=processed.battery_level,
            connection_quality=processed.connection_quality,
        )
        return processed, status

    def process(self, raw: Any) -> ProcessedReading:
        """Validate, enrich, retain and publish a raw reading.

        Args:
            raw: Decoded JSON body received from the device.

        Returns:
            ProcessedReading: The stored reading.

        Raises:
            ReadingValidationError: If the reading violates any constraint.
            InternalError: On any unexpected fault before the reading is
                stored; nothing is stored in that case.
        """
        try:
            processed, status = self._build(raw)
        except ReadingValidationError:
            raise
        except Exception as exc:
            logger.error("Failed to process reading", exc_info=True)
            raise InternalError("Failed to process sensor data") from exc

        self.store.append(processed)
        self.tracker.update(status.device_id, status)
        logger.info(
            "Reading %s accepted: power=%.1fmW efficiency=%d%% battery=%d%%",
            processed.id,
            processed.power,
            processed.total_efficiency,
            processed.battery_level,
        )

        self.bus.publish(processed)

        if self.sink is not None:
            try:
                self.sink(processed, status)
            except Exception:
                logger.warning(
                    "Persistence hand-off failed for reading %s",
                    processed.id,
                    exc_info=True,
                )
        return processed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def latest(self, limit: int = 10) -> list[ProcessedReading]:
        return self.store.latest(limit)

    def by_time_range(self, start: datetime, end: datetime) -> list[ProcessedReading]:
        return self.store.by_time_range(start, end)

    def statistics(self) -> analytics.Statistics:
        return analytics.compute_statistics(self.store.all())

    def trend(self) -> analytics.Trend:
        return analytics.compute_trend(self.store.all())

    def hourly_averages(self) -> list[dict]:
        return analytics.hourly_averages(self.store.all())

    def device_statuses(self) -> list[DeviceStatus]:
        return self.tracker.all()

    def snapshot(self) -> dict:
        """Point-in-time view: latest reading, device statuses, statistics."""
        latest = self.store.latest(1)
        return {
            "timestamp": self._clock().isoformat(),
            "sensorData": latest[0].to_wire() if latest else None,
            "deviceStatus": [s.to_wire() for s in self.tracker.all()],
            "statistics": self.statistics().to_wire(),
            "totalCount": self.store.count(),
        }

    def clear(self) -> int:
        """Drop all retained readings, statuses and cached predictions.

        Returns:
            int: Number of readings discarded.
        """
        discarded = self.store.count()
        self.store.clear()
        self.tracker.clear()
        self.engine.clear_cache()
        logger.info("Cleared %d retained reading(s)", discarded)
        return discarded

"""
SQLAlchemy ORM models for the persistence store.

Defines the append-only SensorReadingRow table (one row per processed
reading, every ProcessedReading field mapped to a column) and the
DeviceStatusRow table (one row per device, upserted on every reading).

CHANGELOG:
- 2026-10-18: Store attached predictions as a JSON column
- 2026-10-18: Initial creation

TODO:
- None
"""

import datetime

from sqlalchemy import JSON, Boolean, DateTime, Double, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all harvest ORM models."""

    pass


class SensorReadingRow(Base):
    """A processed reading as persisted in the sensor_readings table.

    Attributes:
        id: UUID of the processed reading.
        device_id: Identifier of the harvesting device.
        timestamp: Processing time in UTC.
        temperature .. hour: Raw fields reported by the device.
        battery_level .. carbon_offset: Derived metrics.
        is_online: Online flag at processing time.
        connection_quality: Link-health class (excellent/good/fair/poor).
        prediction: Attached prediction as JSON (nullable).
        prediction_accuracy: Accuracy of the attached prediction (nullable).
        efficiency_vs_prediction: Efficiency delta vs. prediction (nullable).
    """

    __tablename__ = "sensor_readings"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    device_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    timestamp: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    temperature: Mapped[float] = mapped_column(Double, nullable=False)
    humidity: Mapped[float] = mapped_column(Double, nullable=False)
    bus_voltage: Mapped[float] = mapped_column(Double, nullable=False)
    current: Mapped[float] = mapped_column(Double, nullable=False)
    power: Mapped[float] = mapped_column(Double, nullable=False)
    light_value: Mapped[float] = mapped_column(Double, nullable=False)
    light_status: Mapped[str] = mapped_column(Text, nullable=False)
    wind_count: Mapped[float] = mapped_column(Double, nullable=False)
    hour: Mapped[int] = mapped_column(Integer, nullable=False)
    battery_level: Mapped[int] = mapped_column(Integer, nullable=False)
    solar_efficiency: Mapped[float] = mapped_column(Double, nullable=False)
    wind_efficiency: Mapped[float] = mapped_column(Double, nullable=False)
    total_efficiency: Mapped[int] = mapped_column(Integer, nullable=False)
    energy_harvested: Mapped[float] = mapped_column(Double, nullable=False)
    cost_savings: Mapped[float] = mapped_column(Double, nullable=False)
    carbon_offset: Mapped[float] = mapped_column(Double, nullable=False)
    is_online: Mapped[bool] = mapped_column(Boolean, nullable=False)
    connection_quality: Mapped[str] = mapped_column(Text, nullable=False)
    prediction: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    prediction_accuracy: Mapped[float | None] = mapped_column(Double, nullable=True)
    efficiency_vs_prediction: Mapped[float | None] = mapped_column(
        Double, nullable=True
    )

    def __repr__(self) -> str:
        """Return string representation of the SensorReadingRow."""
        return (
            f"SensorReadingRow(id={self.id!r}, device_id={self.device_id!r}, "
            f"timestamp={self.timestamp!r}, power={self.power!r})"
        )


class DeviceStatusRow(Base):
    """Last-known status of a device, keyed by device_id."""

    __tablename__ = "device_status"

    device_id: Mapped[str] = mapped_column(Text, primary_key=True)
    is_online: Mapped[bool] = mapped_column(Boolean, nullable=False)
    last_seen: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    battery_level: Mapped[int] = mapped_column(Integer, nullable=False)
    connection_quality: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return (
            f"DeviceStatusRow(device_id={self.device_id!r}, "
            f"is_online={self.is_online!r}, last_seen={self.last_seen!r})"
        )

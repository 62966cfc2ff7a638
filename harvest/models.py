"""
Pydantic models for raw and processed harvesting-device telemetry.

Python attributes are snake_case; the JSON wire format is camelCase (the
field names the device firmware and dashboard exchange). Models accept
either form on input.

CHANGELOG:
- 2026-10-18: Add DayForecast for the 24-hour prediction boundary
- 2026-10-18: Initial creation

TODO:
- None
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConnectionQuality(str, Enum):
    """Coarse link-health class inferred from instantaneous power."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class _WireModel(BaseModel):
    """Base model serialising to camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Return a JSON-compatible dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class RawReading(_WireModel):
    """A validated telemetry sample as sent by the device.

    Attributes:
        temperature: Ambient temperature in degrees Celsius.
        humidity: Relative humidity in percent.
        bus_voltage: Supply bus voltage in volts.
        current: Bus current in milliamps (negative while charging).
        power: Instantaneous power in milliwatts.
        light_value: Raw light sensor reading (0-4095).
        light_status: Free-text light classification from the firmware.
        wind_count: Raw anemometer pulse count.
        hour: Local hour of day (0-23) at the device.
    """

    temperature: float
    humidity: float
    bus_voltage: float
    current: float
    power: float
    light_value: float
    light_status: str
    wind_count: float
    hour: int = Field(ge=0, le=23)


class Prediction(_WireModel):
    """Predicted solar power output for one hour of the day."""

    source: str
    temperature: float
    irradiance: float
    humidity: float
    hour: int
    hour_sin: float
    hour_cos: float
    predicted_power: float = Field(ge=0.0)


class DayForecast(_WireModel):
    """Consecutive hourly predictions starting at the current hour."""

    source: str
    forecast: list[Prediction]


class ProcessedReading(RawReading):
    """A raw reading enriched with derived metrics, as retained in memory."""

    id: str
    timestamp: datetime
    device_id: str
    battery_level: int = Field(ge=0, le=100)
    solar_efficiency: float = Field(ge=0.0, le=100.0)
    wind_efficiency: float = Field(ge=0.0, le=100.0)
    total_efficiency: int = Field(ge=0, le=100)
    energy_harvested: float
    cost_savings: float
    carbon_offset: float
    is_online: bool = True
    connection_quality: ConnectionQuality
    prediction: Prediction | None = None
    prediction_accuracy: float | None = None
    efficiency_vs_prediction: float | None = None


class DeviceStatus(_WireModel):
    """Last-known state of a harvesting device."""

    device_id: str
    is_online: bool
    last_seen: datetime
    battery_level: int = Field(ge=0, le=100)
    connection_quality: ConnectionQuality

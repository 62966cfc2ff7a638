"""
Pure functions deriving operational metrics from a validated reading.

No I/O, no clock, no randomness: every output is a deterministic function of
its inputs. Scale constants (wind normalisation, tariff, carbon factor) are
passed in by the caller so they can be recalibrated per deployment.

CHANGELOG:
- 2026-10-18: Make battery curve monotonic through the 3.7V breakpoint
- 2026-10-18: Initial creation

TODO:
- None
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from harvest.models import ConnectionQuality, RawReading

# (voltage, percent) breakpoints of the single-cell Li-ion discharge curve.
BATTERY_CURVE: tuple[tuple[float, float], ...] = (
    (3.0, 0.0),
    (3.7, 50.0),
    (4.2, 100.0),
)

SOLAR_FULL_SCALE_MW = 1000.0
DEFAULT_WIND_SCALE = 20.0
DEFAULT_UNIT_RATE = 0.12
DEFAULT_CARBON_FACTOR = 0.92
DEFAULT_INTERVAL_S = 1.0


@dataclass(frozen=True)
class DerivedMetrics:
    """Metrics computed for a single reading."""

    battery_level: int
    solar_efficiency: float
    wind_efficiency: float
    total_efficiency: int
    energy_harvested: float
    cost_savings: float
    carbon_offset: float
    connection_quality: ConnectionQuality


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def battery_level(voltage: float) -> int:
    """Map bus voltage to an estimated battery percentage.

    Linear interpolation between BATTERY_CURVE breakpoints; clamps to 0
    below the first breakpoint and to 100 at or above the last.
    """
    first_v, first_pct = BATTERY_CURVE[0]
    last_v, last_pct = BATTERY_CURVE[-1]
    if voltage <= first_v:
        return int(first_pct)
    if voltage >= last_v:
        return int(last_pct)
    for (v0, p0), (v1, p1) in zip(BATTERY_CURVE, BATTERY_CURVE[1:]):
        if v0 <= voltage <= v1:
            pct = p0 + (voltage - v0) / (v1 - v0) * (p1 - p0)
            return int(_clamp(round_half_up(pct), 0, 100))
    return 0


def has_usable_light(light_status: str) -> bool:
    """Return True when the firmware's light label reports usable sunlight."""
    label = light_status.strip().lower()
    if label.startswith("no "):
        return False
    return "light available" in label


def solar_efficiency(power_mw: float, light_status: str) -> float:
    """Normalised solar efficiency in [0, 100]."""
    if power_mw <= 0 or not has_usable_light(light_status):
        return 0.0
    return _clamp(power_mw / SOLAR_FULL_SCALE_MW * 100.0, 0.0, 100.0)


def wind_efficiency(wind_signal: float, wind_scale: float = DEFAULT_WIND_SCALE) -> float:
    """Normalised wind efficiency in [0, 100]."""
    if wind_signal <= 0:
        return 0.0
    return _clamp(wind_signal / wind_scale * 100.0, 0.0, 100.0)


def total_efficiency(solar: float, wind: float) -> int:
    """Rounded mean of solar and wind efficiency."""
    return int(_clamp(round_half_up((solar + wind) / 2.0), 0, 100))


def energy_harvested(power_mw: float, interval_s: float = DEFAULT_INTERVAL_S) -> float:
    """Energy attributed to one reading, in kWh.

    Each reading represents *interval_s* seconds of generation at its
    instantaneous power.
    """
    return (power_mw / 1000.0) * (interval_s / 3600.0)


def cost_savings(energy_kwh: float, unit_rate: float = DEFAULT_UNIT_RATE) -> float:
    return energy_kwh * unit_rate


def carbon_offset(energy_kwh: float, carbon_factor: float = DEFAULT_CARBON_FACTOR) -> float:
    return energy_kwh * carbon_factor


def connection_quality(power_mw: float) -> ConnectionQuality:
    """Classify link health from instantaneous power output."""
    if power_mw > 1000:
        return ConnectionQuality.EXCELLENT
    if power_mw > 500:
        return ConnectionQuality.GOOD
    if power_mw > 100:
        return ConnectionQuality.FAIR
    return ConnectionQuality.POOR


def compute_metrics(
    reading: RawReading,
    *,
    wind_scale: float = DEFAULT_WIND_SCALE,
    interval_s: float = DEFAULT_INTERVAL_S,
    unit_rate: float = DEFAULT_UNIT_RATE,
    carbon_factor: float = DEFAULT_CARBON_FACTOR,
) -> DerivedMetrics:
    """Compute every derived metric for a validated reading.

    Args:
        reading: The validated raw reading.
        wind_scale: Wind count mapping to 100% wind efficiency.
        interval_s: Generation time represented by one reading.
        unit_rate: Currency units saved per kWh.
        carbon_factor: kg CO2-equivalent avoided per kWh.

    Returns:
        DerivedMetrics: The computed metrics.
    """
    solar = solar_efficiency(reading.power, reading.light_status)
    wind = wind_efficiency(reading.wind_count, wind_scale)
    energy = energy_harvested(reading.power, interval_s)
    return DerivedMetrics(
        battery_level=battery_level(reading.bus_voltage),
        solar_efficiency=solar,
        wind_efficiency=wind,
        total_efficiency=total_efficiency(solar, wind),
        energy_harvested=energy,
        cost_savings=cost_savings(energy, unit_rate),
        carbon_offset=carbon_offset(energy, carbon_factor),
        connection_quality=connection_quality(reading.power),
    )

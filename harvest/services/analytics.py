"""
Aggregate statistics and trend analysis over retained readings.

Pure functions over a most-recent-first sequence of ProcessedReadings, as
returned by the retention store. Used by the statistics, analysis, status
and stream-snapshot boundaries.

CHANGELOG:
- 2026-10-18: Report a "no_data" trend instead of None below two readings
- 2026-10-18: Group hourly averages by the device-reported hour
- 2026-10-18: Initial creation

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from harvest.models import DeviceStatus, ProcessedReading

TREND_WINDOW = 10
NO_DATA_TREND = "no_data"


@dataclass(frozen=True)
class Statistics:
    """Summary over a set of readings.

    Attributes:
        total_readings: Number of readings summarised.
        avg_temperature: Mean temperature in degrees Celsius.
        avg_humidity: Mean relative humidity in percent.
        avg_power: Mean instantaneous power in milliwatts.
        avg_efficiency: Mean total efficiency.
        total_energy_harvested: Sum of harvested energy in kWh.
        total_cost_savings: Sum of cost savings.
        total_carbon_offset: Sum of carbon offset in kg CO2e.
    """

    total_readings: int
    avg_temperature: float
    avg_humidity: float
    avg_power: float
    avg_efficiency: float
    total_energy_harvested: float
    total_cost_savings: float
    total_carbon_offset: float

    def to_wire(self) -> dict:
        return {
            "totalReadings": self.total_readings,
            "avgTemperature": self.avg_temperature,
            "avgHumidity": self.avg_humidity,
            "avgPower": self.avg_power,
            "avgEfficiency": self.avg_efficiency,
            "totalEnergyHarvested": self.total_energy_harvested,
            "totalCostSavings": self.total_cost_savings,
            "totalCarbonOffset": self.total_carbon_offset,
        }


@dataclass(frozen=True)
class Trend:
    """Comparison of the newest readings against the oldest ones."""

    trend: str
    change: float
    recent_average: float
    older_average: float
    data_points: int

    def to_wire(self) -> dict:
        return {
            "trend": self.trend,
            "change": self.change,
            "recentAverage": self.recent_average,
            "olderAverage": self.older_average,
            "dataPoints": self.data_points,
        }


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_statistics(readings: Sequence[ProcessedReading]) -> Statistics:
    """Summarise *readings*; all averages are 0 for an empty sequence."""
    return Statistics(
        total_readings=len(readings),
        avg_temperature=_mean([r.temperature for r in readings]),
        avg_humidity=_mean([r.humidity for r in readings]),
        avg_power=_mean([r.power for r in readings]),
        avg_efficiency=_mean([r.total_efficiency for r in readings]),
        total_energy_harvested=sum(r.energy_harvested for r in readings),
        total_cost_savings=sum(r.cost_savings for r in readings),
        total_carbon_offset=sum(r.carbon_offset for r in readings),
    )


def compute_trend(
    readings: Sequence[ProcessedReading],
    window: int = TREND_WINDOW,
) -> Trend:
    """Compare mean total efficiency of the newest vs. the oldest readings.

    Args:
        readings: Readings ordered newest first.
        window: Number of readings on each side of the comparison. With
            fewer than ``2 * window`` readings the two sides overlap.

    Returns:
        Trend: The comparison. With fewer than two readings the trend is
        ``"no_data"`` with zeroed averages.
    """
    if len(readings) < 2:
        return Trend(
            trend=NO_DATA_TREND,
            change=0.0,
            recent_average=0.0,
            older_average=0.0,
            data_points=len(readings),
        )

    recent = readings[:window]
    older = readings[-window:]
    recent_avg = _mean([r.total_efficiency for r in recent])
    older_avg = _mean([r.total_efficiency for r in older])
    return Trend(
        trend="increasing" if recent_avg > older_avg else "decreasing",
        change=abs(recent_avg - older_avg),
        recent_average=recent_avg,
        older_average=older_avg,
        data_points=len(readings),
    )


def hourly_averages(readings: Sequence[ProcessedReading]) -> list[dict]:
    """Average temperature, power and efficiency per reported hour of day.

    Returns:
        list[dict]: One entry per hour that has readings, ordered by hour.
    """
    buckets: dict[int, list[ProcessedReading]] = {}
    for reading in readings:
        buckets.setdefault(reading.hour, []).append(reading)

    result = []
    for hour in sorted(buckets):
        stats = compute_statistics(buckets[hour])
        result.append(
            {
                "hour": hour,
                "totalReadings": stats.total_readings,
                "avgTemperature": stats.avg_temperature,
                "avgPower": stats.avg_power,
                "avgEfficiency": stats.avg_efficiency,
            }
        )
    return result


def uptime_percentage(statuses: Sequence[DeviceStatus]) -> str:
    """Share of known devices currently marked online, e.g. ``"100%"``."""
    if not statuses:
        return "0%"
    online = sum(1 for s in statuses if s.is_online)
    return f"{round(online / len(statuses) * 100)}%"


def assess_data_quality(statistics: Statistics) -> str:
    """Heuristic data-quality class from the plausibility of the averages."""
    if statistics.total_readings == 0:
        return "poor"
    temperature = statistics.avg_temperature
    humidity = statistics.avg_humidity
    if -50 < temperature < 100 and 0 <= humidity <= 100:
        return "excellent"
    if -100 < temperature < 150:
        return "good"
    if -200 < temperature < 200:
        return "fair"
    return "poor"

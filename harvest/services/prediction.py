"""
Short-horizon solar power prediction.

A deterministic physical estimate (irradiance x panel efficiency x panel area
x time-of-day factor) is corrected for temperature, humidity and wind, biased
toward recently observed efficiency at similar hours, and finally perturbed
by a bounded random variation. Night hours (18:00-05:59) always predict zero.

Predictions are best-effort: every public entry point catches internal
failures, logs them and returns ``None``. Results for the current hour and
for explicitly requested hours are cached for a fixed time-to-live.

CHANGELOG:
- 2026-10-18: Match irradiance labels exactly; wind of 15 counts as strong
- 2026-10-18: Route 24-hour forecast through the per-hour cache
- 2026-10-18: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
import math
import random
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from harvest.cache.ttl_cache import TTLCache
from harvest.errors import PredictionError
from harvest.models import DayForecast, Prediction, ProcessedReading, RawReading
from harvest.services.retention import RetentionStore

logger = logging.getLogger(__name__)

SOURCE_PREDICTION = "model-prediction"
SOURCE_NIGHT = "model-night"
SOURCE_FORECAST = "model-forecast"

DAY_START_HOUR = 6
NIGHT_START_HOUR = 18
SOLAR_NOON = 12

IRRADIANCE_BUCKETS: dict[str, tuple[float, float]] = {
    "bright": (800.0, 1000.0),
    "good": (600.0, 750.0),
    "moderate": (400.0, 500.0),
    "low": (200.0, 300.0),
}
"""Light label -> (min, max) irradiance in W/m^2."""

DEFAULT_IRRADIANCE = 400.0
DEFAULT_WIND_COUNT = 5.0


@dataclass(frozen=True)
class ModelParameters:
    """Tunables of the physical model.

    The defaults describe a ~20 W hobby panel. They are calibration
    constants, not physical truths, and must be re-fitted for other hardware.
    """

    panel_efficiency: float = 0.15
    panel_area_m2: float = 0.13
    temperature_coefficient: float = -0.004
    reference_temperature_c: float = 25.0
    humidity_derate: float = 0.05
    baseline_efficiency: float = 15.0
    adjustment_min: float = 0.7
    adjustment_max: float = 1.3
    variation_min: float = 0.85
    variation_max: float = 1.15
    history_window_hours: int = 1


# ---------------------------------------------------------------------------
# Model terms
# ---------------------------------------------------------------------------


def is_night(hour: int) -> bool:
    return hour >= NIGHT_START_HOUR or hour < DAY_START_HOUR


def hour_encoding(hour: int) -> tuple[float, float]:
    """Cyclical (sin, cos) encoding of the hour of day."""
    angle = 2 * math.pi * hour / 24
    return math.sin(angle), math.cos(angle)


def estimate_irradiance(light_status: str, rng: random.Random) -> float:
    """Estimate irradiance (W/m^2) from a qualitative light label.

    Only exact bucket names match (case-insensitive, surrounding whitespace
    ignored). Any other label, including free-text firmware labels, yields 400.
    """
    bucket = IRRADIANCE_BUCKETS.get(light_status.strip().lower())
    if bucket is None:
        return DEFAULT_IRRADIANCE
    low, high = bucket
    return rng.uniform(low, high)


def time_of_day_factor(hour: int) -> float:
    """Efficiency factor peaking at solar noon (1.0) and bottoming at 0.4."""
    return math.cos((hour - SOLAR_NOON) * math.pi / 12) * 0.3 + 0.7


def base_power(irradiance: float, hour: int, params: ModelParameters) -> float:
    return irradiance * params.panel_efficiency * params.panel_area_m2 * time_of_day_factor(hour)


def temperature_factor(temperature: float, params: ModelParameters) -> float:
    return 1 + params.temperature_coefficient * (temperature - params.reference_temperature_c)


def humidity_factor(humidity: float, params: ModelParameters) -> float:
    return 1 - (humidity / 100) * params.humidity_derate


def wind_factor(wind: float) -> float:
    """Moderate wind cools the panel; strong wind is treated as a small loss."""
    if wind < 5:
        return 1.0
    if wind < 15:
        return 1.02
    return 0.98


def historical_adjustment(
    similar_hour_readings: Sequence[ProcessedReading],
    params: ModelParameters,
) -> float:
    """Bias factor from the mean efficiency observed at similar hours.

    Args:
        similar_hour_readings: Retained readings near the target hour.
        params: Model parameters supplying the baseline and clamp bounds.

    Returns:
        float: ``clamp(mean / baseline, min, max)``, or 1.0 without history.
    """
    if not similar_hour_readings:
        return 1.0
    mean = sum(r.total_efficiency for r in similar_hour_readings) / len(similar_hour_readings)
    return max(params.adjustment_min, min(params.adjustment_max, mean / params.baseline_efficiency))


def prediction_accuracy(actual_power: float, predicted_power: float) -> float:
    """Percentage agreement between actual and predicted power.

    100 when both are zero, 0 when only the prediction is zero, otherwise
    ``100 - relative error * 100`` floored at 0 and rounded to one decimal.
    """
    if predicted_power == 0:
        return 100.0 if actual_power == 0 else 0.0
    error = abs(actual_power - predicted_power) / predicted_power
    return round(max(0.0, 100.0 - error * 100.0), 1)


def efficiency_vs_prediction(actual_efficiency: float, predicted_power: float) -> float:
    """Actual total efficiency minus the efficiency implied by the prediction.

    The predicted efficiency proxy uses the same 1000 mW full scale as the
    solar efficiency metric.
    """
    if predicted_power == 0:
        return 0.0
    predicted_efficiency = (predicted_power / 1000) * 100
    return round(actual_efficiency - predicted_efficiency, 2)


def synthesize_reading(hour: int, rng: random.Random) -> RawReading:
    """Build a plausible proxy reading for *hour* when no measurement exists."""
    if DAY_START_HOUR <= hour < NIGHT_START_HOUR:
        temperature = 20 + (hour - DAY_START_HOUR) * 0.8 + rng.random() * 5
        humidity = 50 + math.sin((hour - DAY_START_HOUR) * math.pi / 12) * 20 + rng.random() * 10
        if hour < 10:
            light_status, light_value = "bright", 3000 + rng.random() * 1000
        elif hour < 14:
            light_status, light_value = "good", 2000 + rng.random() * 1000
        else:
            light_status, light_value = "moderate", 1000 + rng.random() * 1000
        wind = 3 + rng.random() * 8
    else:
        temperature = 15 + rng.random() * 5
        humidity = 70 + rng.random() * 20
        light_status, light_value = "night", rng.random() * 100
        wind = 2 + rng.random() * 6

    return RawReading(
        temperature=round(temperature, 1),
        humidity=round(min(humidity, 100.0), 1),
        bus_voltage=5.0,
        current=0.0,
        power=0.0,
        light_value=round(light_value, 1),
        light_status=light_status,
        wind_count=round(wind, 1),
        hour=hour,
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class PredictionEngine:
    """Computes and caches power predictions.

    Args:
        store: Retention store used for the historical adjustment and as the
            source of the latest reading for current-hour predictions.
        params: Physical model parameters.
        cache_ttl_s: Lifetime of cached predictions in seconds.
        rng: Random source for irradiance jitter and variation.
        now: Returns the local wall-clock time; its hour selects the
            "current" hour.
        cache_clock: Monotonic time source for cache expiry.
    """

    def __init__(
        self,
        store: RetentionStore,
        params: ModelParameters | None = None,
        cache_ttl_s: float = 300.0,
        rng: random.Random | None = None,
        now: Callable[[], datetime] = datetime.now,
        cache_clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self.params = params or ModelParameters()
        self._rng = rng or random.Random()
        self._now = now
        self._cache: TTLCache[Prediction] = TTLCache(cache_ttl_s, clock=cache_clock)

    # ------------------------------------------------------------------
    # Estimation
    # ------------------------------------------------------------------

    def _night_prediction(self, reading: RawReading, hour: int) -> Prediction:
        hour_sin, hour_cos = hour_encoding(hour)
        return Prediction(
            source=SOURCE_NIGHT,
            temperature=reading.temperature,
            irradiance=0.0,
            humidity=reading.humidity,
            hour=hour,
            hour_sin=hour_sin,
            hour_cos=hour_cos,
            predicted_power=0.0,
        )

    def _estimate(self, reading: RawReading, hour: int) -> Prediction:
        """Run the model for *reading* at *hour*.

        Raises:
            PredictionError: If the model produces a non-finite value.
        """
        if is_night(hour):
            return self._night_prediction(reading, hour)

        params = self.params
        irradiance = estimate_irradiance(reading.light_status, self._rng)
        similar = self._store.hours_near(hour, params.history_window_hours)

        power = (
            base_power(irradiance, hour, params)
            * temperature_factor(reading.temperature, params)
            * humidity_factor(reading.humidity, params)
            * wind_factor(reading.wind_count)
            * historical_adjustment(similar, params)
            * self._rng.uniform(params.variation_min, params.variation_max)
        )
        if not math.isfinite(power):
            raise PredictionError(f"non-finite predicted power for hour {hour}")

        hour_sin, hour_cos = hour_encoding(hour)
        return Prediction(
            source=SOURCE_PREDICTION,
            temperature=reading.temperature,
            irradiance=round(irradiance, 2),
            humidity=reading.humidity,
            hour=hour,
            hour_sin=hour_sin,
            hour_cos=hour_cos,
            predicted_power=round(max(0.0, power), 2),
        )

    def _current_hour(self) -> int:
        return self._now().hour

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def predict_from_reading(self, reading: RawReading) -> Prediction | None:
        """Predict power for the conditions and hour of *reading*.

        The result is cached as the current prediction for that hour.

        Returns:
            Prediction | None: The prediction, or None on internal failure.
        """
        try:
            prediction = self._estimate(reading, reading.hour)
        except Exception:
            logger.error("Prediction from reading failed", exc_info=True)
            return None
        self._cache.put(f"current:{reading.hour}", prediction)
        return prediction

    def current_hour_prediction(self) -> Prediction | None:
        """Return the current-hour prediction, computing it on a cache miss.

        Falls back from the latest retained reading to a synthesized proxy
        reading when no history exists yet.
        """
        try:
            hour = self._current_hour()
            key = f"current:{hour}"
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            latest = self._store.latest(1)
            source = latest[0] if latest else synthesize_reading(hour, self._rng)
            prediction = self._estimate(source, hour)
        except Exception:
            logger.error("Current-hour prediction failed", exc_info=True)
            return None
        self._cache.put(key, prediction)
        return prediction

    def hour_prediction(self, hour: int) -> Prediction | None:
        """Return the prediction for a specific hour of day (0-23).

        Raises:
            ValueError: If *hour* is outside 0-23.
        """
        if not 0 <= hour <= 23:
            raise ValueError(f"hour must be between 0 and 23, got {hour}")
        key = f"hour:{hour}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        try:
            prediction = self._estimate(synthesize_reading(hour, self._rng), hour)
        except Exception:
            logger.error("Prediction for hour %d failed", hour, exc_info=True)
            return None
        self._cache.put(key, prediction)
        return prediction

    def day_forecast(self) -> DayForecast | None:
        """Return 24 hourly predictions starting at the current hour."""
        try:
            start = self._current_hour()
            forecast: list[Prediction] = []
            for offset in range(24):
                prediction = self.hour_prediction((start + offset) % 24)
                if prediction is None:
                    return None
                forecast.append(prediction)
        except Exception:
            logger.error("Day forecast failed", exc_info=True)
            return None
        return DayForecast(source=SOURCE_FORECAST, forecast=forecast)

    def predict_from_inputs(
        self,
        temperature: float,
        humidity: float,
        light_status: str,
        hour: int | None = None,
        wind_count: float = DEFAULT_WIND_COUNT,
    ) -> Prediction | None:
        """Predict power for caller-supplied environmental conditions.

        Args:
            temperature: Ambient temperature in degrees Celsius.
            humidity: Relative humidity in percent.
            light_status: Qualitative light label.
            hour: Target hour; defaults to the current hour.
            wind_count: Anemometer count; defaults to a light breeze.

        Returns:
            Prediction | None: The (uncached) prediction, or None on failure.
        """
        try:
            target = self._current_hour() if hour is None else hour
            reading = RawReading(
                temperature=temperature,
                humidity=humidity,
                bus_voltage=5.0,
                current=0.0,
                power=0.0,
                light_value=0.0,
                light_status=light_status,
                wind_count=wind_count,
                hour=target,
            )
            return self._estimate(reading, target)
        except Exception:
            logger.error("Prediction from supplied inputs failed", exc_info=True)
            return None

    def sweep_cache(self) -> int:
        """Discard expired cache entries; returns how many were removed."""
        removed = self._cache.sweep()
        if removed:
            logger.debug("Swept %d expired prediction(s)", removed)
        return removed

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

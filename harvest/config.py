"""
Service configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Every tunable of the metrics calculator and the prediction model lives here
so that a deployment against different hardware can be recalibrated without
code changes.

CHANGELOG:
- 2026-10-18: Add prediction model tunables and stream keep-alive interval
- 2026-10-18: Initial creation

TODO:
- None
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class HarvestSettings(BaseSettings):
    """Harvest service configuration.

    All values are loaded from environment variables (or a ``.env`` file).
    Nothing is required: without ``DATABASE_URL`` the service runs in
    memory-only mode.

    Attributes:
        database_url: SQLAlchemy async URL of the persistence store. Empty
            disables persistence.
        device_id: Identifier attached to readings from the harvesting device.
        retention_capacity: Number of processed readings kept in memory.
        unit_rate: Electricity price used for cost savings, per kWh.
        carbon_factor: kg CO2-equivalent avoided per kWh harvested.
        reading_interval_s: Notional generation time represented by one reading.
        wind_scale: Wind count that maps to 100% wind efficiency.
        panel_efficiency: Solar panel conversion efficiency (0-1).
        panel_area_m2: Solar panel area in square metres.
        baseline_efficiency: Total efficiency considered "normal" when
            deriving the historical adjustment factor.
        prediction_cache_ttl_s: Lifetime of a cached prediction in seconds.
        cache_sweep_interval_s: Seconds between proactive cache sweeps.
        stream_keepalive_s: Seconds between keep-alive comments on the
            event stream.
        attach_predictions: Attach a prediction to every processed reading.
        load_history_on_startup: Warm the in-memory history from the
            persistence store at startup.
        log_level: Root log level.
        host: Interface the API server binds to.
        port: TCP port the API server listens on.
        cors_origins: Comma-separated list of allowed CORS origins.
    """

    database_url: str = ""
    device_id: str = "ESP32_001"
    retention_capacity: int = 200
    unit_rate: float = 0.12
    carbon_factor: float = 0.92
    reading_interval_s: float = 1.0
    wind_scale: float = 20.0
    panel_efficiency: float = 0.15
    panel_area_m2: float = 0.13
    baseline_efficiency: float = 15.0
    prediction_cache_ttl_s: float = 300.0
    cache_sweep_interval_s: float = 60.0
    stream_keepalive_s: float = 15.0
    attach_predictions: bool = True
    load_history_on_startup: bool = True
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: str = "*"

    @field_validator("retention_capacity")
    @classmethod
    def retention_capacity_must_be_positive(cls, v: int) -> int:
        """Validate the retention store can hold at least one reading."""
        if v < 1:
            raise ValueError("RETENTION_CAPACITY must be >= 1")
        return v

    @field_validator("device_id")
    @classmethod
    def device_id_must_not_be_blank(cls, v: str) -> str:
        """Validate device_id is a non-empty identifier."""
        if not v.strip():
            raise ValueError("DEVICE_ID must not be blank")
        return v.strip()

    @field_validator("wind_scale", "reading_interval_s", "baseline_efficiency")
    @classmethod
    def scale_must_be_positive(cls, v: float) -> float:
        """Validate normalisation constants used as divisors are positive."""
        if v <= 0:
            raise ValueError("scale constants must be > 0")
        return v

    @field_validator("panel_efficiency")
    @classmethod
    def panel_efficiency_must_be_fraction(cls, v: float) -> float:
        """Validate panel efficiency is a fraction in (0, 1]."""
        if v <= 0 or v > 1:
            raise ValueError("PANEL_EFFICIENCY must be > 0 and <= 1")
        return v

    @field_validator(
        "prediction_cache_ttl_s", "cache_sweep_interval_s", "stream_keepalive_s"
    )
    @classmethod
    def interval_must_be_positive(cls, v: float) -> float:
        """Validate timing intervals are strictly positive."""
        if v <= 0:
            raise ValueError("intervals must be > 0 seconds")
        return v

    @field_validator("port")
    @classmethod
    def port_must_be_valid(cls, v: int) -> int:
        """Validate TCP port is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("unit_rate", "carbon_factor", "panel_area_m2")
    @classmethod
    def factor_must_be_non_negative(cls, v: float) -> float:
        """Validate conversion factors are non-negative."""
        if v < 0:
            raise ValueError("conversion factors must be >= 0")
        return v

    @property
    def persistence_enabled(self) -> bool:
        """Return True when a persistence store is configured."""
        return bool(self.database_url)

    @property
    def cors_origin_list(self) -> list[str]:
        """Return CORS origins as a list, ignoring blanks."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

"""
FastAPI application entry point for the harvest telemetry API.

Builds every long-lived collaborator once in the lifespan (retention store,
device status tracker, notification bus, prediction engine, telemetry
pipeline and the optional persistence gateway) and stores them on
``app.state`` for the route handlers. A background task sweeps expired
predictions from the cache every CACHE_SWEEP_INTERVAL_S seconds.

Without DATABASE_URL the service runs memory-only. With it, readings are
persisted fire-and-forget and the in-memory history is warmed from the
store at startup; a store that cannot be reached is logged and the service
continues memory-only.

CHANGELOG:
- 2026-10-18: Register stream and predictions routers
- 2026-10-18: Warm start from the persistence store
- 2026-10-18: Initial creation
"""

import asyncio
import contextlib
import json
import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from harvest.api.health import router as health_router
from harvest.api.predictions import router as predictions_router
from harvest.api.readings import router as readings_router
from harvest.api.status import router as status_router
from harvest.api.stream import router as stream_router
from harvest.config import HarvestSettings
from harvest.db.gateway import PersistenceGateway
from harvest.db.session import create_engine, create_schema, create_session_factory
from harvest.errors import PersistenceError
from harvest.services.notifications import NotificationBus
from harvest.services.pipeline import TelemetryPipeline
from harvest.services.prediction import ModelParameters, PredictionEngine
from harvest.services.retention import RetentionStore
from harvest.services.status import DeviceStatusTracker

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


def configure_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging for the API process.

    Sets up the root logger with a JSON-formatted handler writing to stderr.

    Args:
        level: Root log level name, e.g. ``"INFO"`` or ``"DEBUG"``.
    """

    class _JsonFormatter(logging.Formatter):
        """Minimal JSON log formatter."""

        def format(self, record: logging.LogRecord) -> str:
            log_entry = {
                "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
            }
            if record.exc_info and record.exc_info[1] is not None:
                log_entry["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_entry)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())


# ---------------------------------------------------------------------------
# Lifespan helpers
# ---------------------------------------------------------------------------


async def _sweep_cache_forever(engine: PredictionEngine, interval_s: float) -> None:
    """Periodically discard expired predictions until cancelled."""
    while True:
        await asyncio.sleep(interval_s)
        engine.sweep_cache()


async def _warm_start(
    gateway: PersistenceGateway,
    store: RetentionStore,
    tracker: DeviceStatusTracker,
    settings: HarvestSettings,
) -> None:
    """Load recent history and device status from the persistence store.

    Failures are logged; the service then starts with empty history.
    """
    try:
        readings = await gateway.load_recent(
            settings.device_id, settings.retention_capacity
        )
        statuses = await gateway.load_statuses()
    except PersistenceError:
        logger.warning(
            "Warm start failed, starting with empty history", exc_info=True
        )
        return

    store.extend_from_history(readings)
    for status in statuses:
        tracker.update(status.device_id, status)
    logger.info(
        "Warm start loaded %d reading(s) and %d device status(es)",
        len(readings),
        len(statuses),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: build collaborators, run the cache sweeper.

    Startup:
        - Loads and validates HarvestSettings.
        - Builds store, tracker, bus, prediction engine and pipeline.
        - Connects the persistence gateway and warms history when configured.
        - Starts the periodic prediction cache sweep.

    Shutdown:
        - Cancels the sweeper, waits for pending writes, disposes the engine.
    """
    settings = HarvestSettings()
    configure_logging(settings.log_level)

    store = RetentionStore(settings.retention_capacity)
    tracker = DeviceStatusTracker()
    bus = NotificationBus()
    engine = PredictionEngine(
        store,
        ModelParameters(
            panel_efficiency=settings.panel_efficiency,
            panel_area_m2=settings.panel_area_m2,
            baseline_efficiency=settings.baseline_efficiency,
        ),
        cache_ttl_s=settings.prediction_cache_ttl_s,
    )

    gateway: PersistenceGateway | None = None
    db_engine = None
    if settings.persistence_enabled:
        db_engine = create_engine(settings.database_url)
        gateway = PersistenceGateway(create_session_factory(db_engine))
        if db_engine.dialect.name == "sqlite":
            try:
                await create_schema(db_engine)
            except Exception:
                logger.warning("Could not create SQLite schema", exc_info=True)
        if settings.load_history_on_startup:
            await _warm_start(gateway, store, tracker, settings)
    else:
        logger.warning("DATABASE_URL not set, running memory-only")

    pipeline = TelemetryPipeline(
        store,
        tracker,
        bus,
        engine,
        settings,
        sink=gateway.submit if gateway is not None else None,
    )

    app.state.settings = settings
    app.state.pipeline = pipeline
    app.state.engine = engine
    app.state.bus = bus
    app.state.gateway = gateway

    sweeper = asyncio.create_task(
        _sweep_cache_forever(engine, settings.cache_sweep_interval_s)
    )
    logger.info(
        "Harvest API ready (device=%s, capacity=%d, persistence=%s)",
        settings.device_id,
        settings.retention_capacity,
        "database" if gateway is not None else "memory",
    )
    yield

    logger.info("Harvest API shutting down")
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    if gateway is not None:
        await gateway.drain()
        if gateway.failures:
            logger.warning(
                "%d reading(s) were not persisted this session", gateway.failures
            )
    if db_engine is not None:
        await db_engine.dispose()


app = FastAPI(
    title="Harvest Telemetry API",
    description="Energy-harvesting device telemetry, analytics and power prediction.",
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=HarvestSettings().cors_origin_list,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type"],
)

app.include_router(health_router)
app.include_router(readings_router)
app.include_router(status_router)
app.include_router(stream_router)
app.include_router(predictions_router)


@app.get("/")
async def root() -> dict:
    """Root health check endpoint.

    Returns:
        dict: JSON object with application status.
    """
    return {"status": "ok"}


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    settings = HarvestSettings()
    configure_logging(settings.log_level)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()

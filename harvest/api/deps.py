"""
FastAPI dependency injection providers.

Every long-lived collaborator is built once in the application lifespan and
stored on ``app.state``; these providers hand them to route handlers through
FastAPI's Depends() mechanism so tests can swap them via
``app.dependency_overrides``.

CHANGELOG:
- 2026-10-18: Initial creation
"""

from typing import Annotated

from fastapi import Depends, Request

from harvest.config import HarvestSettings
from harvest.services.notifications import NotificationBus
from harvest.services.pipeline import TelemetryPipeline
from harvest.services.prediction import PredictionEngine


def get_settings(request: Request) -> HarvestSettings:
    """Return the settings loaded at startup."""
    return request.app.state.settings


def get_pipeline(request: Request) -> TelemetryPipeline:
    """Return the telemetry pipeline built at startup."""
    return request.app.state.pipeline


def get_engine(request: Request) -> PredictionEngine:
    """Return the prediction engine built at startup."""
    return request.app.state.engine


def get_bus(request: Request) -> NotificationBus:
    """Return the notification bus built at startup."""
    return request.app.state.bus


# Type aliases for route handler signatures, e.g.
#   async def my_route(pipeline: Pipeline): ...
Settings = Annotated[HarvestSettings, Depends(get_settings)]
Pipeline = Annotated[TelemetryPipeline, Depends(get_pipeline)]
Engine = Annotated[PredictionEngine, Depends(get_engine)]
Bus = Annotated[NotificationBus, Depends(get_bus)]

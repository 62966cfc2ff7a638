"""
Power prediction endpoints.

Exposes the prediction engine: the current-hour prediction, a prediction
for any hour of day, a 24-hour forecast starting at the current hour, and an
uncached prediction for caller-supplied conditions. The engine never raises
for model failures; a missing prediction maps to HTTP 500.

CHANGELOG:
- 2026-10-18: Initial creation

TODO:
- None
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from harvest.api.deps import Engine
from harvest.models import Prediction
from harvest.services.prediction import DEFAULT_WIND_COUNT

router = APIRouter(prefix="/v1/predictions", tags=["predictions"])


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class PredictionRequest(BaseModel):
    """Environmental conditions to predict harvested power for."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    temperature: float
    humidity: float
    light_status: str
    hour: int | None = Field(default=None, ge=0, le=23)
    wind_count: float = DEFAULT_WIND_COUNT


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require(prediction: Prediction | None) -> dict:
    if prediction is None:
        raise HTTPException(status_code=500, detail="Failed to generate prediction.")
    return prediction.to_wire()


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/current")
async def current_prediction(engine: Engine) -> dict:
    """Return the prediction for the current hour of day."""
    return _require(engine.current_hour_prediction())


@router.get("/hour/{hour}")
async def hour_prediction(
    engine: Engine, hour: Annotated[int, Path(ge=0, le=23)]
) -> dict:
    """Return the prediction for *hour* (0-23); other values yield 422."""
    return _require(engine.hour_prediction(hour))


@router.get("/day")
async def day_forecast(engine: Engine) -> dict:
    """Return 24 hourly predictions starting at the current hour."""
    forecast = engine.day_forecast()
    if forecast is None:
        raise HTTPException(status_code=500, detail="Failed to generate forecast.")
    return forecast.to_wire()


@router.post("")
async def predict(payload: PredictionRequest, engine: Engine) -> dict:
    """Predict power for the supplied conditions (never cached).

    Missing or non-numeric fields are rejected with 422 by request
    validation.
    """
    return _require(
        engine.predict_from_inputs(
            temperature=payload.temperature,
            humidity=payload.humidity,
            light_status=payload.light_status,
            hour=payload.hour,
            wind_count=payload.wind_count,
        )
    )

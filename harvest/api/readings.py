"""
Reading ingestion and history endpoints.

POST /v1/readings accepts one JSON reading from the harvesting device, runs
it through the telemetry pipeline and returns the processed record. Invalid
readings are rejected with HTTP 400 and the full list of violations; any
other fault maps to a generic HTTP 500 and nothing is stored.

The GET endpoints answer history queries from the in-memory retention store:
most recent N, inclusive time range, aggregate statistics and a trend /
hourly analysis. DELETE clears the retained history.

CHANGELOG:
- 2026-10-18: Add analysis endpoint and DELETE for history reset
- 2026-10-18: Initial creation

TODO:
- None
"""

import json
import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from harvest.api.deps import Pipeline
from harvest.errors import InternalError, ReadingValidationError
from harvest.services.analytics import assess_data_quality

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["readings"])

MAX_QUERY_LIMIT = 1000


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _as_utc(value: datetime) -> datetime:
    """Interpret naive query datetimes as UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/readings")
async def ingest_reading(request: Request, pipeline: Pipeline) -> JSONResponse:
    """Validate, process and retain one reading.

    Args:
        request: The incoming FastAPI request; its body is the raw reading.
        pipeline: Telemetry pipeline from app.state.

    Returns:
        JSONResponse: 200 with ``{message, data}`` on success, 400 with
        ``{error, errors}`` for invalid readings, 500 on internal failure.
    """
    body = await request.body()
    try:
        raw = json.loads(body)
    except ValueError:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid sensor data",
                "errors": ["Request body must be valid JSON"],
            },
        )

    try:
        processed = pipeline.process(raw)
    except ReadingValidationError as exc:
        logger.info("Rejected reading: %s", "; ".join(exc.violations))
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid sensor data", "errors": exc.violations},
        )
    except InternalError as exc:
        return JSONResponse(status_code=500, content={"error": str(exc)})

    return JSONResponse(
        status_code=200,
        content={
            "message": "Sensor data processed successfully",
            "data": processed.to_wire(),
        },
    )


@router.get("/readings")
async def list_readings(
    pipeline: Pipeline,
    limit: Annotated[int, Query(ge=1, le=MAX_QUERY_LIMIT)] = 10,
    start: datetime | None = None,
    end: datetime | None = None,
    stats: bool = False,
) -> dict:
    """Return the most recent readings, or all readings in a time range.

    Args:
        pipeline: Telemetry pipeline from app.state.
        limit: Number of most recent readings when no range is given.
        start: Inclusive range start (ISO 8601; naive values are UTC).
        end: Inclusive range end; must be given together with ``start``.
        stats: Include aggregate statistics in the response.

    Returns:
        dict: ``data`` newest first, ``count``, ``totalCount`` retained,
        ``lastUpdate`` and optionally ``statistics``.

    Raises:
        HTTPException: 400 if only one range bound is given or start > end.
    """
    if (start is None) != (end is None):
        raise HTTPException(
            status_code=400,
            detail="start and end must be supplied together.",
        )

    if start is not None and end is not None:
        start, end = _as_utc(start), _as_utc(end)
        if start > end:
            raise HTTPException(
                status_code=400,
                detail="start must not be later than end.",
            )
        readings = pipeline.by_time_range(start, end)
    else:
        readings = pipeline.latest(limit)

    data = [r.to_wire() for r in readings]
    body: dict = {
        "data": data,
        "count": len(data),
        "totalCount": pipeline.store.count(),
        "lastUpdate": data[0]["timestamp"] if data else None,
    }
    if stats:
        body["statistics"] = pipeline.statistics().to_wire()
    return body


@router.delete("/readings")
async def clear_readings(pipeline: Pipeline) -> dict:
    """Discard retained readings, device statuses and cached predictions."""
    cleared = pipeline.clear()
    return {"message": f"Cleared {cleared} reading(s)", "cleared": cleared}


@router.get("/readings/statistics")
async def reading_statistics(pipeline: Pipeline) -> dict:
    """Return aggregate statistics over the retained history."""
    return {"statistics": pipeline.statistics().to_wire()}


@router.get("/readings/analysis")
async def reading_analysis(pipeline: Pipeline) -> dict:
    """Return statistics, efficiency trend, hourly averages and data quality.

    ``trends.trend`` is "no_data" with fewer than two retained readings.
    """
    statistics = pipeline.statistics()
    trend = pipeline.trend()
    return {
        "analysis": {
            "statistics": statistics.to_wire(),
            "trends": trend.to_wire(),
            "hourlyAnalysis": pipeline.hourly_averages(),
            "dataQuality": assess_data_quality(statistics),
        }
    }

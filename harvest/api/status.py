"""
GET /v1/status endpoint: device health at a glance.

Returns every tracked device status together with aggregate statistics,
the share of devices online and a heuristic data-quality class.

CHANGELOG:
- 2026-10-18: Initial creation

TODO:
- None
"""

from datetime import UTC, datetime

from fastapi import APIRouter

from harvest.api.deps import Pipeline
from harvest.services.analytics import assess_data_quality, uptime_percentage

router = APIRouter(prefix="/v1", tags=["status"])


@router.get("/status")
async def system_status(pipeline: Pipeline) -> dict:
    """Return device statuses and summary statistics.

    Returns:
        dict: ``timestamp``, ``devices`` and ``statistics`` (aggregate
        statistics plus ``uptime`` and ``dataQuality``).
    """
    statuses = pipeline.device_statuses()
    statistics = pipeline.statistics()
    return {
        "timestamp": datetime.now(tz=UTC).isoformat(),
        "devices": [s.to_wire() for s in statuses],
        "statistics": {
            **statistics.to_wire(),
            "uptime": uptime_percentage(statuses),
            "dataQuality": assess_data_quality(statistics),
        },
    }

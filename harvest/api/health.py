"""
Health check endpoint for the harvest API.

Provides a simple GET /health endpoint for container HEALTHCHECK and
internal monitoring. Also reports whether readings are being persisted or
held in memory only.

CHANGELOG:
- 2026-10-18: Report persistence mode
- 2026-10-18: Initial creation

TODO:
- None
"""

from fastapi import APIRouter

from harvest.api.deps import Settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(settings: Settings) -> dict[str, str]:
    """Return a simple health status.

    Returns:
        dict: ``status`` is always ``"ok"`` while the process serves
        requests; ``persistence`` is ``"database"`` or ``"memory"``.
    """
    return {
        "status": "ok",
        "persistence": "database" if settings.persistence_enabled else "memory",
    }

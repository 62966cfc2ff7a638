"""
Live reading stream and snapshot endpoints.

GET /v1/stream is a server-sent event stream: every reading the pipeline
accepts after the client connects is delivered once as a ``reading`` event
whose ``data:`` line is the processed reading as JSON. While no reading
arrives a ``: keep-alive`` comment is written every STREAM_KEEPALIVE_S
seconds so proxies keep the connection open. The client's bus subscription
is released when the connection closes.

GET /v1/stream/snapshot returns the latest reading, device statuses and
statistics for clients that need an initial state before streaming.

CHANGELOG:
- 2026-10-18: Initial creation

TODO:
- None
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from harvest.api.deps import Bus, Pipeline, Settings
from harvest.models import ProcessedReading
from harvest.services.notifications import NotificationBus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["stream"])

KEEPALIVE_COMMENT = ": keep-alive\n\n"


def format_event(reading: ProcessedReading) -> str:
    """Render *reading* as one server-sent event."""
    return f"event: reading\ndata: {json.dumps(reading.to_wire())}\n\n"


async def event_stream(
    bus: NotificationBus,
    keepalive_s: float,
    is_disconnected: Callable[[], Awaitable[bool]],
) -> AsyncIterator[str]:
    """Yield server-sent events for readings published on *bus*.

    The subscription is taken when iteration starts and released when the
    generator is closed or the client disconnects.

    Args:
        bus: Notification bus to subscribe to.
        keepalive_s: Idle seconds before a keep-alive comment is emitted.
        is_disconnected: Awaitable predicate reporting client disconnect.

    Yields:
        str: SSE frames (events or comments).
    """
    queue: asyncio.Queue[ProcessedReading] = asyncio.Queue()
    loop = asyncio.get_running_loop()

    def _enqueue(reading: ProcessedReading) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, reading)

    unsubscribe = bus.subscribe(_enqueue)
    logger.info("Stream client connected (%d subscriber(s))", bus.subscriber_count)
    try:
        yield ": connected\n\n"
        while not await is_disconnected():
            try:
                reading = await asyncio.wait_for(queue.get(), timeout=keepalive_s)
            except TimeoutError:
                yield KEEPALIVE_COMMENT
                continue
            yield format_event(reading)
    finally:
        unsubscribe()
        logger.info("Stream client disconnected")


@router.get("/stream")
async def stream_readings(
    request: Request, bus: Bus, settings: Settings
) -> StreamingResponse:
    """Open a server-sent event stream of newly processed readings."""
    return StreamingResponse(
        event_stream(bus, settings.stream_keepalive_s, request.is_disconnected),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/stream/snapshot")
async def stream_snapshot(pipeline: Pipeline) -> dict:
    """Return the latest reading, device statuses and statistics."""
    return pipeline.snapshot()

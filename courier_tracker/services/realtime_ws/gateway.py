# courier_tracker/services/realtime_ws/gateway.py
"""
WebSocket gateway for live courier tracking.

Endpoint:
- /ws -- one socket per courier app or admin dashboard

Every frame is {"event": <name>, "data": <payload>}.

Client -> server:
- join-courier-channel  data: courier id (or {"courierId": ...}); alias join-delivery
- join-admin-channel    no data; alias join-admin
- location-update       {courierId, latitude, longitude, accuracy?, speed?}
- ping

Server -> client:
- joined                    {"channel": <key>}
- pong
- delivery-location-update  admin channel only

REST:
- GET /ws/stats -- connection and ingestion counters
"""

from __future__ import annotations

import asyncio
import json
from contextlib import suppress
from typing import Any

from fastapi import APIRouter, Depends, WebSocket
from pydantic import BaseModel

from courier_tracker.common.constants import TypeMsg, WsEvent
from courier_tracker.common.logger import log_error, log_info, log_warning
from courier_tracker.core.tracking.context import TrackingContext
from courier_tracker.core.tracking.exceptions import MalformedPayloadError
from courier_tracker.services.realtime_ws.connection import Connection
from courier_tracker.services.realtime_ws.dependencies import get_tracking_context
from courier_tracker.shared.models.location import normalize_courier_id


LOGGER_NAME = "realtime_ws"

router = APIRouter(tags=["Realtime"])


class StatsResponse(BaseModel):
    """Gateway counters."""
    registry: dict[str, Any]
    ingestion: dict[str, Any]


# === STATS ===

@router.get("/ws/stats", response_model=StatsResponse)
async def get_stats(context: TrackingContext = Depends(get_tracking_context)) -> StatsResponse:
    """Connection and ingestion statistics."""
    return StatsResponse(
        registry=context.registry.get_stats(),
        ingestion=context.coordinator.get_stats(),
    )


# === WEBSOCKET ===

@router.websocket("/ws")
async def tracking_socket(
    websocket: WebSocket,
    context: TrackingContext = Depends(get_tracking_context),
) -> None:
    """Receive loop of one connection. Leaves every channel on disconnect."""
    await websocket.accept()
    connection = Connection(websocket, queue_size=context.send_queue_size)
    sender = asyncio.create_task(connection.run_sender())
    await log_info(f"Connection {connection.id} opened", type_msg=TypeMsg.DEBUG, logger_name=LOGGER_NAME)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            raw = message.get("text")
            if raw is None and message.get("bytes") is not None:
                raw = message["bytes"].decode("utf-8", errors="replace")
            if raw is None:
                continue

            await handle_frame(context, connection, raw)
    finally:
        context.coordinator.handle_disconnect(connection)
        connection.close()
        # location writes already in flight still get stored and published
        await connection.drain(context.drain_timeout)
        sender.cancel()
        with suppress(asyncio.CancelledError):
            await sender
        await log_info(f"Connection {connection.id} closed", type_msg=TypeMsg.DEBUG, logger_name=LOGGER_NAME)


async def handle_frame(context: TrackingContext, connection: Connection, raw: str) -> None:
    """Decodes one frame and dispatches it. Bad frames are logged and ignored."""
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError:
        await log_warning(f"Connection {connection.id} sent a non-JSON frame", logger_name=LOGGER_NAME)
        return

    if not isinstance(frame, dict):
        await log_warning(f"Connection {connection.id} sent a frame that is not an object", logger_name=LOGGER_NAME)
        return

    await dispatch_event(context, connection, frame.get("event"), frame.get("data"))


async def dispatch_event(
    context: TrackingContext,
    connection: Connection,
    event: Any,
    data: Any,
) -> None:
    """Routes one client event to the coordinator."""
    coordinator = context.coordinator

    if event in (WsEvent.JOIN_COURIER_CHANNEL, WsEvent.JOIN_DELIVERY):
        courier_id = data.get("courierId", data.get("deliveryId")) if isinstance(data, dict) else data
        courier_id = normalize_courier_id(courier_id)
        if not isinstance(courier_id, str) or courier_id == "":
            await log_warning(
                f"Connection {connection.id} tried to join a courier channel without a courier id",
                logger_name=LOGGER_NAME,
            )
            return
        channel = coordinator.handle_join_courier(connection, courier_id)
        connection.deliver({"event": WsEvent.JOINED.value, "data": {"channel": channel}})
        await log_info(f"Courier {courier_id} joined {channel}", type_msg=TypeMsg.DEBUG, logger_name=LOGGER_NAME)

    elif event in (WsEvent.JOIN_ADMIN_CHANNEL, WsEvent.JOIN_ADMIN):
        channel = coordinator.handle_join_admin(connection)
        connection.deliver({"event": WsEvent.JOINED.value, "data": {"channel": channel}})
        await log_info(f"Admin connection {connection.id} joined {channel}", type_msg=TypeMsg.DEBUG, logger_name=LOGGER_NAME)

    elif event == WsEvent.LOCATION_UPDATE:
        # runs detached: a slow write must not hold up this socket's next events
        connection.spawn(ingest_location(context, connection, data))

    elif event == WsEvent.PING:
        connection.deliver({"event": WsEvent.PONG.value})

    else:
        await log_warning(f"Connection {connection.id} sent unknown event {event!r}", logger_name=LOGGER_NAME)


async def ingest_location(context: TrackingContext, connection: Connection, data: Any) -> None:
    """Background ingestion of one location-update."""
    try:
        await context.coordinator.handle_location_update(connection, data)
    except MalformedPayloadError as e:
        await log_warning(f"Connection {connection.id}: {e}", logger_name=LOGGER_NAME)
    except Exception as e:
        await log_error(f"Unexpected error while processing location: {e}", logger_name=LOGGER_NAME, exc_info=True)

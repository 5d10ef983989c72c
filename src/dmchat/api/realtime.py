import asyncio
import contextlib

import structlog
from starlette.websockets import WebSocket, WebSocketDisconnect

from ..events import EVENTS
from ..realtime.connection import WebSocketConnection
from .common import get_services

log = structlog.stdlib.get_logger(mod="api.realtime")


async def realtime(websocket: WebSocket) -> None:
    services = get_services(websocket)
    conn = WebSocketConnection(websocket)
    # Registered before accepting, so a client that sees the socket open is
    # already reachable by global broadcasts.
    services.sessions.connect(conn)
    writer: asyncio.Task | None = None
    try:
        await websocket.accept()
        writer = asyncio.create_task(conn.run(), name=f"ws-writer-{conn.id}")
        log.debug("Connection opened", conn=conn.id)
        while True:
            try:
                frame = await websocket.receive_json()
            except (ValueError, KeyError):
                # Not JSON, or a binary frame.
                log.debug("Ignoring malformed frame", conn=conn.id)
                continue
            event = frame.get("event") if isinstance(frame, dict) else None
            if not isinstance(event, str):
                log.debug("Ignoring frame without an event", conn=conn.id)
                continue
            # Handled one at a time so a connection's events keep their order.
            try:
                handled = await EVENTS.dispatch(
                    event, services, conn, frame.get("data")
                )
            except Exception:
                log.exception("Error handling event", event_name=event, conn=conn.id)
                continue
            if not handled:
                log.debug("Unknown event", event_name=event, conn=conn.id)
    except WebSocketDisconnect:
        pass
    finally:
        conn.close()
        if writer is not None:
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await writer
        await services.sessions.disconnect(conn)
        log.debug("Connection closed", conn=conn.id)

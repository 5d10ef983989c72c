import asyncio
import typing
import uuid

import attrs
import structlog
from starlette.websockets import WebSocket

log = structlog.stdlib.get_logger(mod="realtime.connection")


class Connection(typing.Protocol):
    """A live client connection that events can be pushed to."""

    id: str

    def send(self, event: str, data: typing.Any) -> None:
        ...


def _new_id() -> str:
    return uuid.uuid4().hex


@attrs.define(eq=False)
class WebSocketConnection:
    """Queues outgoing events and writes them from a dedicated task.

    send() never blocks, so a slow client can't stall whoever is broadcasting.
    Events queued for a connection that has gone away are dropped.
    """

    websocket: WebSocket
    id: str = attrs.field(factory=_new_id)
    _outbox: asyncio.Queue[tuple[str, typing.Any]] = attrs.field(
        factory=asyncio.Queue
    )
    _closed: bool = False

    def send(self, event: str, data: typing.Any) -> None:
        if self._closed:
            return
        self._outbox.put_nowait((event, data))

    def close(self) -> None:
        self._closed = True

    async def run(self) -> None:
        while not self._closed:
            event, data = await self._outbox.get()
            try:
                await self.websocket.send_json({"event": event, "data": data})
            except Exception:
                log.debug(
                    "Send failed, closing connection", conn=self.id, exc_info=True
                )
                self._closed = True

import typing
from datetime import datetime

import structlog

from ..db import UserStore
from ..models import to_wire
from ..utils.datetime import now
from .connection import Connection
from .dispatcher import USER_STATUS, Dispatcher
from .presence import PresenceTracker
from .router import RoomRouter

log = structlog.stdlib.get_logger(mod="realtime.binding")


class SessionBinding:
    """Ties a live connection to a username for as long as it stays open."""

    def __init__(
        self,
        router: RoomRouter,
        presence: PresenceTracker,
        users: UserStore,
        dispatcher: Dispatcher,
        clock: typing.Callable[[], datetime] = now,
    ) -> None:
        self.router = router
        self.presence = presence
        self.users = users
        self.dispatcher = dispatcher
        self.clock = clock

    def connect(self, conn: Connection) -> None:
        self.router.add(conn)

    async def bind(self, conn: Connection, username: str | None) -> bool:
        if not username:
            return False
        previous = self.router.username_for(conn)
        if previous == username:
            return False
        if previous is not None:
            # Last bind wins.
            await self.unbind(conn)
        self.router.bind(conn, username)
        ts = self.clock()
        self.presence.set_online(username, ts)
        log.info("User joined", username=username, conn=conn.id)
        self.dispatcher.broadcast(
            USER_STATUS, {"username": username, "status": "online"}
        )
        await self._persist_last_seen(username, ts)
        return True

    async def unbind(self, conn: Connection) -> bool:
        username = self.router.unbind(conn)
        if username is None:
            return False
        if self.router.is_online(username):
            log.debug("User still connected elsewhere", username=username)
            return True
        ts = self.clock()
        self.presence.set_offline(username, ts)
        log.info("User left", username=username, conn=conn.id)
        self.dispatcher.broadcast(
            USER_STATUS,
            {"username": username, "status": "offline", "lastSeen": to_wire(ts)},
        )
        await self._persist_last_seen(username, ts)
        return True

    async def disconnect(self, conn: Connection) -> None:
        try:
            await self.unbind(conn)
        finally:
            self.router.remove(conn)

    async def _persist_last_seen(self, username: str, ts: datetime) -> None:
        try:
            await self.users.touch_last_seen(username, ts)
        except Exception:
            # In-memory presence is already updated.
            log.exception("Error saving last seen", username=username)

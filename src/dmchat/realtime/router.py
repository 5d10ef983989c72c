import structlog

from .connection import Connection

log = structlog.stdlib.get_logger(mod="realtime.router")


class RoomRouter:
    """Which live connections belong to which username.

    A room is just the set of connections bound to one username. Rooms appear
    on first bind and vanish when their last connection leaves. Every method
    is synchronous, so on a single event loop each call is atomic.
    """

    def __init__(self) -> None:
        self._connections: set[Connection] = set()
        self._rooms: dict[str, set[Connection]] = {}
        self._usernames: dict[Connection, str] = {}

    def add(self, conn: Connection) -> None:
        self._connections.add(conn)

    def remove(self, conn: Connection) -> str | None:
        username = self.unbind(conn)
        self._connections.discard(conn)
        return username

    def bind(self, conn: Connection, username: str) -> str | None:
        """Put conn in username's room, returning the room it was in before."""
        previous = self._usernames.get(conn)
        if previous == username:
            return previous
        if previous is not None:
            self.unbind(conn)
        self._connections.add(conn)
        self._usernames[conn] = username
        self._rooms.setdefault(username, set()).add(conn)
        log.debug("Bound connection", conn=conn.id, username=username)
        return previous

    def unbind(self, conn: Connection) -> str | None:
        username = self._usernames.pop(conn, None)
        if username is None:
            return None
        room = self._rooms.get(username)
        if room is not None:
            room.discard(conn)
            if not room:
                del self._rooms[username]
        log.debug("Unbound connection", conn=conn.id, username=username)
        return username

    def route(self, username: str) -> frozenset[Connection]:
        return frozenset(self._rooms.get(username, ()))

    def username_for(self, conn: Connection) -> str | None:
        return self._usernames.get(conn)

    def is_online(self, username: str) -> bool:
        return username in self._rooms

    def everyone(self) -> frozenset[Connection]:
        return frozenset(self._connections)

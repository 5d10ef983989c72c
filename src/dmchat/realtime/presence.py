from datetime import datetime

import attrs


@attrs.define
class PresenceStatus:
    username: str
    online: bool = False
    last_seen: datetime | None = None


class PresenceTracker:
    def __init__(self) -> None:
        self._statuses: dict[str, PresenceStatus] = {}

    def set_online(self, username: str, ts: datetime) -> PresenceStatus:
        status = PresenceStatus(username=username, online=True, last_seen=ts)
        self._statuses[username] = status
        return status

    def set_offline(self, username: str, ts: datetime) -> PresenceStatus:
        status = PresenceStatus(username=username, online=False, last_seen=ts)
        self._statuses[username] = status
        return status

    def get(self, username: str) -> PresenceStatus:
        status = self._statuses.get(username)
        if status is None:
            return PresenceStatus(username=username)
        return status

    def is_online(self, username: str) -> bool:
        return self.get(username).online

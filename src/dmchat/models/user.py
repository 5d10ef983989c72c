from datetime import datetime

import attrs

from ..utils.avatar import avatar_or_default


@attrs.define
class User:
    username: str
    password_hash: str = attrs.field(repr=False)
    profile_picture: str = ""
    last_seen: datetime | None = None
    created_at: datetime | None = None

    @property
    def avatar(self) -> str:
        return avatar_or_default(self.username, self.profile_picture)


@attrs.define
class PublicUser:
    """What other users get to see, never includes the password hash."""

    username: str
    profile_picture: str
    last_seen: datetime | None = None
    online: bool = False

    @classmethod
    def from_user(cls, user: User, online: bool = False) -> "PublicUser":
        return cls(
            username=user.username,
            profile_picture=user.avatar,
            last_seen=user.last_seen,
            online=online,
        )

import asyncio
import sqlite3
import typing
from datetime import datetime

import asyncpg
import databases
import sqlalchemy
import structlog

from ..models import User
from ..utils.datetime import from_micros, now, to_micros
from ..utils.passwords import hash_password, verify_password
from .errors import DuplicateIdentity
from .tables import users

log = structlog.stdlib.get_logger(mod="db.users")


def _user_from_row(row: typing.Any) -> User:
    last_seen = row["last_seen"]
    return User(
        username=row["username"],
        password_hash=row["password_hash"],
        profile_picture=row["profile_picture"],
        last_seen=from_micros(last_seen) if last_seen is not None else None,
        created_at=from_micros(row["created_at"]),
    )


class UserStore:
    """Accounts plus the password hash/verify they need."""

    def __init__(
        self,
        database: databases.Database,
        clock: typing.Callable[[], datetime] = now,
    ) -> None:
        self.database = database
        self.clock = clock

    async def create(self, username: str, password: str) -> User:
        if await self.get(username) is not None:
            raise DuplicateIdentity(username)
        # PBKDF2 is deliberately slow, keep it off the event loop.
        password_hash = await asyncio.to_thread(hash_password, password)
        user = User(
            username=username, password_hash=password_hash, created_at=self.clock()
        )
        try:
            await self.database.execute(
                users.insert().values(
                    username=user.username,
                    password_hash=user.password_hash,
                    profile_picture=user.profile_picture,
                    last_seen=None,
                    created_at=to_micros(user.created_at),
                )
            )
        # Lost a race with another registration for the same name.
        except (sqlite3.IntegrityError, asyncpg.exceptions.UniqueViolationError) as exc:
            raise DuplicateIdentity(username) from exc
        log.info("Registered user", username=username)
        return user

    async def verify(self, username: str, password: str) -> User | None:
        user = await self.get(username)
        if user is None:
            return None
        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            return None
        return user

    async def get(self, username: str) -> User | None:
        row = await self.database.fetch_one(
            sqlalchemy.select(users).where(users.c.username == username)
        )
        if row is None:
            return None
        return _user_from_row(row)

    async def set_avatar(self, username: str, profile_picture: str) -> bool:
        if await self.get(username) is None:
            return False
        await self.database.execute(
            users.update()
            .where(users.c.username == username)
            .values(profile_picture=profile_picture)
        )
        return True

    async def touch_last_seen(self, username: str, ts: datetime) -> None:
        await self.database.execute(
            users.update()
            .where(users.c.username == username)
            .values(last_seen=to_micros(ts))
        )

    async def search(
        self, query: str, exclude: str | None = None, limit: int = 20
    ) -> list[User]:
        """Usernames containing query, ignoring case, in username order."""
        if not query:
            return []
        select = sqlalchemy.select(users).order_by(users.c.username)
        if exclude:
            select = select.where(users.c.username != exclude)
        needle = query.casefold()
        rows = await self.database.fetch_all(select)
        # sqlite's lower() only folds ASCII, so match in Python.
        found = [row for row in rows if needle in row["username"].casefold()]
        return [_user_from_row(row) for row in found[:limit]]

import typing
import uuid
from datetime import datetime

import attrs
import databases
import sqlalchemy
import structlog

from ..models import Message, MessageStatus, MessageType, converter
from ..utils.datetime import from_micros, now, to_micros
from .tables import like_pattern, messages

log = structlog.stdlib.get_logger(mod="db.messages")

# Columns that may change after insert.
UPDATABLE_FIELDS = {"message", "status", "read_at"}


def _message_to_row(msg: Message) -> dict[str, typing.Any]:
    row = {
        "id": msg.id,
        "sender": msg.sender,
        "receiver": msg.receiver,
        "type": MessageType(msg.type).value,
        "message": msg.message,
        "reply_id": None,
        "reply_sender": None,
        "reply_snippet": None,
        "status": MessageStatus(msg.status).value,
        "read_at": to_micros(msg.read_at) if msg.read_at is not None else None,
        "created_at": (
            to_micros(msg.created_at) if msg.created_at is not None else None
        ),
    }
    if msg.reply_to is not None:
        row["reply_id"] = msg.reply_to.id
        row["reply_sender"] = msg.reply_to.sender
        row["reply_snippet"] = msg.reply_to.snippet
    return row


def _message_from_row(row: typing.Any) -> Message:
    item = {column.name: row[column.name] for column in messages.columns}
    item.pop("seq")
    reply_id = item.pop("reply_id")
    reply_sender = item.pop("reply_sender")
    reply_snippet = item.pop("reply_snippet")
    if reply_id is not None:
        item["reply_to"] = {
            "id": reply_id,
            "sender": reply_sender or "",
            "snippet": reply_snippet or "",
        }
    if item["read_at"] is not None:
        item["read_at"] = from_micros(item["read_at"])
    item["created_at"] = from_micros(item["created_at"])
    return converter.structure(item, Message)


def _encode_fields(fields: dict[str, typing.Any]) -> dict[str, typing.Any]:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update message fields {sorted(unknown)}")
    values = dict(fields)
    if "status" in values:
        values["status"] = MessageStatus(values["status"]).value
    if values.get("read_at") is not None:
        values["read_at"] = to_micros(values["read_at"])
    return values


def _conversation(user_a: str, user_b: str) -> sqlalchemy.ColumnElement[bool]:
    return sqlalchemy.or_(
        sqlalchemy.and_(messages.c.sender == user_a, messages.c.receiver == user_b),
        sqlalchemy.and_(messages.c.sender == user_b, messages.c.receiver == user_a),
    )


class MessageStore:
    def __init__(
        self,
        database: databases.Database,
        clock: typing.Callable[[], datetime] = now,
    ) -> None:
        self.database = database
        self.clock = clock
        self._last_ts: datetime | None = None

    def _next_timestamp(self) -> datetime:
        # Never hand out a timestamp older than the last one, even if the clock
        # steps backwards.
        ts = self.clock()
        if self._last_ts is not None and ts < self._last_ts:
            ts = self._last_ts
        self._last_ts = ts
        return ts

    async def insert(self, draft: Message) -> Message:
        msg = attrs.evolve(
            draft, id=uuid.uuid4().hex, created_at=self._next_timestamp()
        )
        await self.database.execute(messages.insert().values(**_message_to_row(msg)))
        log.debug("Inserted message", id=msg.id, sender=msg.sender)
        return msg

    async def find_by_id(self, message_id: str) -> Message | None:
        row = await self.database.fetch_one(
            sqlalchemy.select(messages).where(messages.c.id == message_id)
        )
        if row is None:
            return None
        return _message_from_row(row)

    async def update_fields(self, message_id: str, **fields) -> Message | None:
        values = _encode_fields(fields)
        await self.database.execute(
            messages.update().where(messages.c.id == message_id).values(**values)
        )
        return await self.find_by_id(message_id)

    async def delete_by_id(self, message_id: str) -> bool:
        if await self.find_by_id(message_id) is None:
            return False
        await self.database.execute(
            messages.delete().where(messages.c.id == message_id)
        )
        return True

    async def find_conversation(self, user_a: str, user_b: str) -> list[Message]:
        rows = await self.database.fetch_all(
            sqlalchemy.select(messages)
            .where(_conversation(user_a, user_b))
            .order_by(messages.c.created_at, messages.c.seq)
        )
        return [_message_from_row(row) for row in rows]

    async def search_text(
        self,
        user_a: str,
        user_b: str,
        substring: str,
        case_insensitive: bool = True,
    ) -> list[Message]:
        """Text messages in the conversation containing substring, newest first."""
        if not substring:
            return []
        query = (
            sqlalchemy.select(messages)
            .where(
                _conversation(user_a, user_b),
                messages.c.type == MessageType.TEXT.value,
            )
            .order_by(messages.c.created_at.desc(), messages.c.seq.desc())
        )
        if not case_insensitive:
            query = query.where(
                messages.c.message.like(like_pattern(substring), escape="/")
            )
        rows = await self.database.fetch_all(query)
        found = [_message_from_row(row) for row in rows]
        # SQL LIKE and lower() only fold ASCII on sqlite, so match in Python.
        if case_insensitive:
            needle = substring.casefold()
            return [msg for msg in found if needle in msg.message.casefold()]
        return [msg for msg in found if substring in msg.message]

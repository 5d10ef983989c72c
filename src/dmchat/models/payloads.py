"""Inbound realtime event payloads."""

import attrs

from .message import MessageType, ReplyRef


@attrs.define
class SendMessage:
    sender: str | None = None
    receiver: str | None = None
    message: str | None = None
    type: MessageType | None = None
    reply_to: ReplyRef | None = None


@attrs.define
class ReadMessage:
    message_id: str | None = None
    sender: str | None = None


@attrs.define
class EditMessage:
    message_id: str | None = None
    new_message: str | None = None
    receiver: str | None = None


@attrs.define
class DeleteMessage:
    message_id: str | None = None
    receiver: str | None = None

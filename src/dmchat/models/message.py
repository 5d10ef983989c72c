import enum
from datetime import datetime

import attrs


class MessageType(str, enum.Enum):
    TEXT = "text"
    # Content is an opaque encoded blob (base64 voice notes in practice).
    AUDIO = "audio"


class MessageStatus(str, enum.Enum):
    SENT = "sent"
    READ = "read"
    EDITED = "edited"


@attrs.define
class ReplyRef:
    id: str
    sender: str
    snippet: str = ""


@attrs.define
class Message:
    sender: str
    receiver: str
    message: str
    type: MessageType = MessageType.TEXT
    reply_to: ReplyRef | None = None
    status: MessageStatus = MessageStatus.SENT
    read_at: datetime | None = None
    # Both assigned by the store on insert.
    id: str | None = None
    created_at: datetime | None = None

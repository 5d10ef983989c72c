from .message import Message, MessageStatus, MessageType, ReplyRef
from .user import PublicUser, User
from .wire import converter, parse_payload, to_wire

__all__ = [
    "Message",
    "MessageStatus",
    "MessageType",
    "PublicUser",
    "ReplyRef",
    "User",
    "converter",
    "parse_payload",
    "to_wire",
]

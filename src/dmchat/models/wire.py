"""JSON shapes used on the wire, both the realtime channel and the HTTP API."""

import datetime
import typing

import cattrs
import structlog
from cattrs.gen import make_dict_structure_fn, make_dict_unstructure_fn, override

from ..utils.datetime import ensure_utc
from .message import Message
from .payloads import DeleteMessage, EditMessage, ReadMessage, SendMessage
from .user import PublicUser

_T = typing.TypeVar("_T")

log = structlog.stdlib.get_logger(mod="models.wire")

converter = cattrs.Converter()


def cattrs_structure_datetime(
    data: str | datetime.datetime, type_: type
) -> datetime.datetime:
    if isinstance(data, datetime.datetime):
        return ensure_utc(data)
    else:
        return ensure_utc(datetime.datetime.fromisoformat(data))


def cattrs_unstructure_datetime(ts: datetime.datetime) -> str:
    return ensure_utc(ts).isoformat()


# Datetime hooks have to exist before the generated functions below pick them up.
converter.register_structure_hook(datetime.datetime, cattrs_structure_datetime)
converter.register_unstructure_hook(datetime.datetime, cattrs_unstructure_datetime)

converter.register_unstructure_hook(
    Message,
    make_dict_unstructure_fn(
        Message,
        converter,
        id=override(rename="_id"),
        reply_to=override(rename="replyTo"),
        read_at=override(rename="readAt"),
        created_at=override(rename="createdAt"),
    ),
)
converter.register_unstructure_hook(
    PublicUser,
    make_dict_unstructure_fn(
        PublicUser,
        converter,
        profile_picture=override(rename="profilePicture"),
        last_seen=override(rename="lastSeen"),
    ),
)

INBOUND_RENAMES: dict[type, dict[str, str]] = {
    SendMessage: {"reply_to": "replyTo"},
    ReadMessage: {"message_id": "messageId"},
    EditMessage: {"message_id": "messageId", "new_message": "newMessage"},
    DeleteMessage: {"message_id": "messageId"},
}
for cls, renames in INBOUND_RENAMES.items():
    converter.register_structure_hook(
        cls,
        make_dict_structure_fn(
            cls,
            converter,
            **{name: override(rename=wire) for name, wire in renames.items()},
        ),
    )


def to_wire(obj: typing.Any) -> typing.Any:
    return converter.unstructure(obj)


def parse_payload(data: typing.Any, cls: type[_T]) -> _T | None:
    """Structure an inbound payload, or None if it is malformed."""
    if not isinstance(data, dict):
        log.debug("Dropping non-object payload", payload_type=cls.__name__)
        return None
    try:
        return converter.structure(data, cls)
    except (cattrs.BaseValidationError, ValueError, TypeError) as exc:
        log.debug(
            "Dropping malformed payload", payload_type=cls.__name__, error=str(exc)
        )
        return None

import typing
from datetime import datetime

import structlog

from ..db import MessageStore, UserStore
from ..models import Message, MessageStatus, MessageType, ReplyRef, to_wire
from ..utils.avatar import avatar_or_default
from ..utils.datetime import now
from .connection import Connection
from .router import RoomRouter

# Server to client event names.
RECEIVE_MESSAGE = "receive_message"
MESSAGE_READ = "message_read"
MESSAGE_EDITED = "message_edited"
MESSAGE_DELETED = "message_deleted"
DISPLAY_TYPING = "display_typing"
USER_STATUS = "user_status"
PP_UPDATED = "pp_updated"

log = structlog.stdlib.get_logger(mod="realtime.dispatcher")


class Dispatcher:
    """Message lifecycle: sent, then read or edited (either order), then deleted.

    Every operation writes to the store first and only then emits, so clients
    always see the persisted record. Emission is at-most-once: a recipient
    with no live connection simply misses the event.
    """

    def __init__(
        self,
        messages: MessageStore,
        users: UserStore,
        router: RoomRouter,
        clock: typing.Callable[[], datetime] = now,
    ) -> None:
        self.messages = messages
        self.users = users
        self.router = router
        self.clock = clock

    def deliver(
        self, usernames: typing.Iterable[str | None], event: str, data: typing.Any
    ) -> int:
        """Send to every connection in the given rooms, each connection once."""
        targets: set[Connection] = set()
        for username in usernames:
            if username:
                targets |= self.router.route(username)
        for conn in targets:
            conn.send(event, data)
        return len(targets)

    def broadcast(self, event: str, data: typing.Any) -> int:
        targets = self.router.everyone()
        for conn in targets:
            conn.send(event, data)
        return len(targets)

    async def send(
        self,
        sender: str | None,
        receiver: str | None,
        content: str | None,
        type: MessageType = MessageType.TEXT,
        reply_to: ReplyRef | None = None,
    ) -> Message | None:
        if not (sender and receiver and content):
            log.debug("Dropping incomplete message", sender=sender, receiver=receiver)
            return None
        msg = await self.messages.insert(
            Message(
                sender=sender,
                receiver=receiver,
                message=content,
                type=type,
                reply_to=reply_to,
                status=MessageStatus.SENT,
            )
        )
        # The sender's own room too, so their other sessions get the stored id.
        self.deliver([receiver, sender], RECEIVE_MESSAGE, to_wire(msg))
        return msg

    async def mark_read(
        self, message_id: str | None, sender: str | None = None
    ) -> Message | None:
        if not message_id:
            return None
        msg = await self.messages.find_by_id(message_id)
        if msg is None:
            log.debug("Read receipt for unknown message", id=message_id)
            return None
        if msg.status is not MessageStatus.READ:
            updated = await self.messages.update_fields(
                message_id, status=MessageStatus.READ, read_at=self.clock()
            )
            if updated is None:
                # Deleted between the lookup and the update.
                return None
            msg = updated
        # Only the author needs to hear about it, the reader already knows.
        self.deliver(
            [sender or msg.sender],
            MESSAGE_READ,
            {"_id": msg.id, "readAt": to_wire(msg.read_at)},
        )
        return msg

    async def edit(
        self,
        message_id: str | None,
        new_content: str | None,
        acting_user: str | None,
        receiver: str | None,
    ) -> Message | None:
        if not (message_id and new_content):
            return None
        msg = await self.messages.update_fields(
            message_id, message=new_content, status=MessageStatus.EDITED
        )
        if msg is None:
            log.debug("Edit for unknown message", id=message_id)
            return None
        self.deliver(
            [acting_user, receiver],
            MESSAGE_EDITED,
            {"messageId": msg.id, "newMessage": msg.message},
        )
        return msg

    async def delete(
        self, message_id: str | None, acting_user: str | None, receiver: str | None
    ) -> bool:
        if not message_id:
            return False
        if not await self.messages.delete_by_id(message_id):
            log.debug("Delete for unknown message", id=message_id)
            return False
        self.deliver([acting_user, receiver], MESSAGE_DELETED, message_id)
        return True

    def typing(self, data: dict[str, typing.Any]) -> int:
        receiver = data.get("receiver")
        if not receiver:
            return 0
        # Receiver only, the typist's other sessions don't care.
        return self.deliver([receiver], DISPLAY_TYPING, data)

    async def update_avatar(self, username: str | None, profile_picture: str) -> bool:
        if not username:
            return False
        if not await self.users.set_avatar(username, profile_picture):
            log.info("Avatar update for unknown user", username=username)
            return False
        self.broadcast(
            PP_UPDATED,
            {
                "username": username,
                "profilePicture": avatar_or_default(username, profile_picture),
            },
        )
        return True

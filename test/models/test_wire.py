from datetime import datetime

from dmchat.models import (
    Message,
    MessageStatus,
    MessageType,
    PublicUser,
    ReplyRef,
    User,
    parse_payload,
    to_wire,
)
from dmchat.models.payloads import EditMessage, ReadMessage, SendMessage
from dmchat.utils.avatar import default_avatar
from dmchat.utils.datetime import UTC


def test_message_to_wire():
    msg = Message(
        id="abc",
        sender="alice",
        receiver="bob",
        message="hi",
        reply_to=ReplyRef(id="xyz", sender="bob", snippet="hello?"),
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
    )
    assert to_wire(msg) == {
        "_id": "abc",
        "sender": "alice",
        "receiver": "bob",
        "message": "hi",
        "type": "text",
        "replyTo": {"id": "xyz", "sender": "bob", "snippet": "hello?"},
        "status": "sent",
        "readAt": None,
        "createdAt": "2024-05-01T12:00:00+00:00",
    }


def test_public_user_to_wire():
    user = User(username="alice", password_hash="secret")
    data = to_wire(PublicUser.from_user(user, online=True))
    assert data == {
        "username": "alice",
        "profilePicture": default_avatar("alice"),
        "lastSeen": None,
        "online": True,
    }
    assert "secret" not in repr(user)


def test_parse_send_message():
    payload = parse_payload(
        {
            "sender": "alice",
            "receiver": "bob",
            "message": "hi",
            "type": "audio",
            "replyTo": {"id": "xyz", "sender": "bob", "snippet": "hello?"},
            "extra": "ignored",
        },
        SendMessage,
    )
    assert payload == SendMessage(
        sender="alice",
        receiver="bob",
        message="hi",
        type=MessageType.AUDIO,
        reply_to=ReplyRef(id="xyz", sender="bob", snippet="hello?"),
    )


def test_parse_send_message_missing_fields():
    payload = parse_payload({"sender": "alice"}, SendMessage)
    assert payload == SendMessage(sender="alice")


def test_parse_bad_type():
    assert parse_payload({"sender": "a", "type": "video"}, SendMessage) is None


def test_parse_not_an_object():
    assert parse_payload("hello", SendMessage) is None
    assert parse_payload(["a"], SendMessage) is None


def test_parse_renamed_fields():
    assert parse_payload({"messageId": "m1"}, ReadMessage) == ReadMessage(
        message_id="m1"
    )
    assert parse_payload(
        {"messageId": "m1", "newMessage": "fixed", "receiver": "bob"}, EditMessage
    ) == EditMessage(message_id="m1", new_message="fixed", receiver="bob")


def test_status_values():
    assert [s.value for s in MessageStatus] == ["sent", "read", "edited"]

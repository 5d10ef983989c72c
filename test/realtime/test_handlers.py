import pytest

from dmchat.events import EVENTS
from dmchat.models import MessageStatus

# Registers the listeners on EVENTS.
from dmchat.realtime import handlers  # noqa


async def emit(services, conn, event, data):
    return await EVENTS.dispatch(event, services, conn, data)


@pytest.mark.asyncio
async def test_join(services, make_connection):
    conn = make_connection("conn")
    assert await emit(services, conn, "join", "alice") is True
    assert services.router.username_for(conn) == "alice"
    assert conn.events("user_status") == [{"username": "alice", "status": "online"}]


@pytest.mark.asyncio
@pytest.mark.parametrize("data", [None, 42, {"username": "alice"}, "   "])
async def test_join_bad_payload(services, make_connection, data):
    conn = make_connection("conn")
    await emit(services, conn, "join", data)
    assert services.router.username_for(conn) is None
    assert conn.sent == []


@pytest.mark.asyncio
async def test_unknown_event(services, make_connection):
    conn = make_connection("conn")
    assert await emit(services, conn, "self_destruct", {}) is False


@pytest.mark.asyncio
async def test_send_message(services, make_connection):
    alice, bob = make_connection("alice-conn"), make_connection("bob-conn")
    await emit(services, alice, "join", "alice")
    await emit(services, bob, "join", "bob")
    alice.clear()
    bob.clear()

    await emit(
        services,
        alice,
        "send_message",
        {
            "sender": "alice",
            "receiver": "bob",
            "message": "hi",
            "replyTo": {"id": "m0", "sender": "bob", "snippet": "yo"},
        },
    )
    [received] = bob.events("receive_message")
    assert received["message"] == "hi"
    assert received["type"] == "text"
    assert received["replyTo"] == {"id": "m0", "sender": "bob", "snippet": "yo"}
    assert alice.events("receive_message") == [received]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        {"sender": "alice", "receiver": "bob", "message": ""},
        {"sender": "alice", "receiver": "bob"},
        {"sender": "alice", "receiver": "bob", "message": "hi", "type": "video"},
        "hi bob",
        None,
    ],
)
async def test_send_message_invalid_is_dropped(services, make_connection, data):
    alice = make_connection("alice-conn")
    await emit(services, alice, "join", "alice")
    alice.clear()

    await emit(services, alice, "send_message", data)
    assert alice.sent == []
    assert await services.messages.find_conversation("alice", "bob") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("as_object", [True, False])
async def test_read_message(services, make_connection, as_object):
    alice, bob = make_connection("alice-conn"), make_connection("bob-conn")
    await emit(services, alice, "join", "alice")
    await emit(services, bob, "join", "bob")
    msg = await services.dispatcher.send("alice", "bob", "hi")
    alice.clear()
    bob.clear()

    data = {"messageId": msg.id, "sender": "alice"} if as_object else msg.id
    await emit(services, bob, "read_message", data)
    assert [e["_id"] for e in alice.events("message_read")] == [msg.id]
    assert bob.sent == []
    assert (await services.messages.find_by_id(msg.id)).status is MessageStatus.READ


@pytest.mark.asyncio
async def test_edit_and_delete_use_bound_username(services, make_connection):
    alice, bob = make_connection("alice-conn"), make_connection("bob-conn")
    await emit(services, alice, "join", "alice")
    await emit(services, bob, "join", "bob")
    msg = await services.dispatcher.send("alice", "bob", "hi")
    alice.clear()
    bob.clear()

    await emit(
        services,
        alice,
        "edit_message",
        {"messageId": msg.id, "newMessage": "hello", "receiver": "bob"},
    )
    expected = {"messageId": msg.id, "newMessage": "hello"}
    assert alice.events("message_edited") == [expected]
    assert bob.events("message_edited") == [expected]

    await emit(
        services, alice, "delete_message", {"messageId": msg.id, "receiver": "bob"}
    )
    assert alice.events("message_deleted") == [msg.id]
    assert bob.events("message_deleted") == [msg.id]


@pytest.mark.asyncio
async def test_typing(services, make_connection):
    alice, bob = make_connection("alice-conn"), make_connection("bob-conn")
    await emit(services, alice, "join", "alice")
    await emit(services, bob, "join", "bob")
    alice.clear()
    bob.clear()

    data = {"sender": "alice", "receiver": "bob", "isTyping": False}
    await emit(services, alice, "typing", data)
    assert bob.sent == [("display_typing", data)]
    assert alice.sent == []

    await emit(services, alice, "typing", "bob")
    assert len(bob.sent) == 1

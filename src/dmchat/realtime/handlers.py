"""Inbound realtime events, one listener per event name."""

import typing

import structlog

from ..events import EVENTS
from ..models import MessageType, parse_payload
from ..models.payloads import DeleteMessage, EditMessage, ReadMessage, SendMessage
from ..services import Services
from .connection import Connection

log = structlog.stdlib.get_logger(mod="realtime.handlers")


@EVENTS.on("join")
async def on_join(services: Services, conn: Connection, data: typing.Any):
    if not isinstance(data, str):
        log.debug("Dropping join without a username", conn=conn.id)
        return
    await services.sessions.bind(conn, data.strip())


@EVENTS.on("send_message")
async def on_send_message(services: Services, conn: Connection, data: typing.Any):
    payload = parse_payload(data, SendMessage)
    if payload is None:
        return
    await services.dispatcher.send(
        payload.sender,
        payload.receiver,
        payload.message,
        type=payload.type or MessageType.TEXT,
        reply_to=payload.reply_to,
    )


@EVENTS.on("read_message")
async def on_read_message(services: Services, conn: Connection, data: typing.Any):
    # Older clients send the bare message id.
    if isinstance(data, str):
        data = {"messageId": data}
    payload = parse_payload(data, ReadMessage)
    if payload is None:
        return
    await services.dispatcher.mark_read(payload.message_id, payload.sender)


@EVENTS.on("edit_message")
async def on_edit_message(services: Services, conn: Connection, data: typing.Any):
    payload = parse_payload(data, EditMessage)
    if payload is None:
        return
    await services.dispatcher.edit(
        payload.message_id,
        payload.new_message,
        services.router.username_for(conn),
        payload.receiver,
    )


@EVENTS.on("delete_message")
async def on_delete_message(services: Services, conn: Connection, data: typing.Any):
    payload = parse_payload(data, DeleteMessage)
    if payload is None:
        return
    await services.dispatcher.delete(
        payload.message_id, services.router.username_for(conn), payload.receiver
    )


@EVENTS.on("typing")
async def on_typing(services: Services, conn: Connection, data: typing.Any):
    if not isinstance(data, dict):
        return
    services.dispatcher.typing(data)

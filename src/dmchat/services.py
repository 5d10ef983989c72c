import typing
from datetime import datetime

import attrs
import databases

from .db import MessageStore, UserStore
from .realtime.binding import SessionBinding
from .realtime.dispatcher import Dispatcher
from .realtime.presence import PresenceTracker
from .realtime.router import RoomRouter
from .utils.datetime import now


@attrs.define
class Services:
    database: databases.Database
    messages: MessageStore
    users: UserStore
    router: RoomRouter
    presence: PresenceTracker
    dispatcher: Dispatcher
    sessions: SessionBinding


def build_services(
    database: databases.Database, clock: typing.Callable[[], datetime] = now
) -> Services:
    messages = MessageStore(database, clock=clock)
    users = UserStore(database, clock=clock)
    router = RoomRouter()
    presence = PresenceTracker()
    dispatcher = Dispatcher(messages, users, router, clock=clock)
    sessions = SessionBinding(router, presence, users, dispatcher, clock=clock)
    return Services(
        database=database,
        messages=messages,
        users=users,
        router=router,
        presence=presence,
        dispatcher=dispatcher,
        sessions=sessions,
    )

import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable

import attrs
import pytest
import pytest_asyncio

from dmchat.db import create_tables, make_database
from dmchat.services import Services, build_services
from dmchat.utils.datetime import UTC


def pytest_configure(config):
    os.environ["TESTING"] = "true"


class FakeClock:
    """Moves forward a fixed step every time it is read."""

    def __init__(
        self,
        start: datetime = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC),
        step: timedelta = timedelta(seconds=1),
    ) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        ts = self.current
        self.current = self.current + self.step
        return ts


@attrs.define(eq=False)
class RecordingConnection:
    id: str
    sent: list[tuple[str, Any]] = attrs.field(factory=list)

    def send(self, event: str, data: Any) -> None:
        self.sent.append((event, data))

    def events(self, name: str | None = None) -> list[Any]:
        return [data for event, data in self.sent if name is None or event == name]

    def names(self) -> list[str]:
        return [event for event, _ in self.sent]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def database(database_url: str):
    database = make_database(database_url)
    await database.connect()
    await create_tables(database)
    yield database
    await database.disconnect()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def services(database, clock) -> Services:
    return build_services(database, clock=clock)


@pytest.fixture
def make_connection(services: Services) -> Callable[[str], RecordingConnection]:
    """Build a connection that is already registered with the router."""

    def _make_connection(conn_id: str) -> RecordingConnection:
        conn = RecordingConnection(id=conn_id)
        services.sessions.connect(conn)
        return conn

    return _make_connection

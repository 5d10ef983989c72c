import contextlib
import typing

import databases
import structlog
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

from .api import routes
from .db import create_tables, make_database
from .services import build_services

# Imports just to register realtime event listeners.
from .realtime import handlers  # noqa

log = structlog.stdlib.get_logger(mod="app")


@contextlib.asynccontextmanager
async def lifespan(app: Starlette) -> typing.AsyncIterator[None]:
    database = app.state.services.database
    await database.connect()
    await create_tables(database)
    log.info("Database ready", dialect=database.url.dialect)
    try:
        yield
    finally:
        await database.disconnect()


def create_app(
    database: databases.Database | None = None, debug: bool = False
) -> Starlette:
    app = Starlette(
        debug=debug,
        routes=routes,
        lifespan=lifespan,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "HEAD", "POST"],
                allow_headers=["*"],
            ),
        ],
    )
    app.state.services = build_services(database or make_database())
    return app

import logging
import sys
from typing import Optional

import structlog
import typer
import uvicorn

from .app import create_app
from .db import make_database

log = structlog.stdlib.get_logger(mod="main")


def configure_logging(debug: bool = False) -> None:
    structlog.configure(
        processors=[
            # If log level is too low, abort pipeline and throw away log entry.
            structlog.stdlib.filter_by_level,
            # Add the name of the logger to event dict.
            structlog.stdlib.add_logger_name,
            # Add log level to event dict.
            structlog.stdlib.add_log_level,
            # Add a timestamp in ISO 8601 format.
            structlog.processors.TimeStamper(fmt="iso"),
            # If the "stack_info" key in the event dict is true, remove it and
            # render the current stack trace in the "stack" key.
            structlog.processors.StackInfoRenderer(),
            # If the "exc_info" key in the event dict is either true or a
            # sys.exc_info() tuple, remove "exc_info" and render the exception
            # with traceback into the "exception" key.
            structlog.processors.format_exc_info,
            # If some value is in bytes, decode it to a unicode str.
            structlog.processors.UnicodeDecoder(),
            # Render the final event dict as JSON.
            structlog.dev.ConsoleRenderer()
            if sys.stdout.isatty()
            else structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )


def main(
    tls: Optional[str] = None,
    debug: bool = False,
    listen: str = "127.0.0.1:8008",
    database: Optional[str] = None,
):
    configure_logging(debug)

    extra_options = {}
    if tls:
        extra_options.update(
            {
                "ssl_keyfile": f"{tls}/tls.key",
                "ssl_certfile": f"{tls}/tls.crt",
            }
        )

    host, port = listen.split(":")
    log.info("Starting server", host=host, port=port, tls=bool(tls))

    uvicorn.run(
        create_app(make_database(database), debug=debug),
        host=host,
        port=int(port),
        **extra_options,
    )


def run() -> None:
    typer.run(main)


if __name__ == "__main__":
    run()

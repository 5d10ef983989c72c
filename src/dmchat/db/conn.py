import os

import databases

DEFAULT_DATABASE_URL = "sqlite:///dmchat.db"
DEFAULT_TEST_DATABASE_URL = "sqlite:///test.db"


def database_url() -> str:
    if "TESTING" in os.environ:
        return os.environ.get("TEST_DATABASE_URI", DEFAULT_TEST_DATABASE_URL)
    return os.environ.get("DATABASE_URI", DEFAULT_DATABASE_URL)


def make_database(url: str | None = None) -> databases.Database:
    return databases.Database(url or database_url())

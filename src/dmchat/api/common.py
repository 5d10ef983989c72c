import json
import typing

from starlette.requests import HTTPConnection, Request

from ..services import Services


def get_services(conn: HTTPConnection) -> Services:
    return conn.app.state.services


async def read_json(request: Request) -> dict[str, typing.Any]:
    """The request body as a dict, or an empty one if it isn't a JSON object."""
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def get_str(data: dict[str, typing.Any], key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""

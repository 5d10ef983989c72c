import structlog
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..db import DuplicateIdentity
from .common import get_services, get_str, read_json

log = structlog.stdlib.get_logger(mod="api.auth")


async def register(request: Request) -> Response:
    data = await read_json(request)
    username = get_str(data, "username")
    password = data.get("password")
    if not username or not isinstance(password, str) or not password:
        return JSONResponse(
            {"success": False, "message": "Username and password are required"},
            status_code=400,
        )
    try:
        await get_services(request).users.create(username, password)
    except DuplicateIdentity:
        return JSONResponse(
            {"success": False, "message": "Username already exists"},
            status_code=409,
        )
    return JSONResponse({"success": True})


async def login(request: Request) -> Response:
    data = await read_json(request)
    username = get_str(data, "username")
    password = data.get("password")
    user = None
    if username and isinstance(password, str):
        user = await get_services(request).users.verify(username, password)
    if user is None:
        log.info("Failed login", username=username)
        return JSONResponse(
            {"success": False, "message": "Invalid credentials"}, status_code=401
        )
    return JSONResponse(
        {"success": True, "username": user.username, "profilePicture": user.avatar}
    )

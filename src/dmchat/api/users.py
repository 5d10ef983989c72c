from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..models import PublicUser, to_wire
from .common import get_services, get_str, read_json

SEARCH_LIMIT = 20


async def get_user(request: Request) -> Response:
    services = get_services(request)
    user = await services.users.get(request.path_params["username"])
    if user is None:
        return JSONResponse(None, status_code=404)
    online = services.presence.is_online(user.username)
    return JSONResponse(to_wire(PublicUser.from_user(user, online=online)))


async def search_users(request: Request) -> Response:
    services = get_services(request)
    found = await services.users.search(
        request.query_params.get("q", "").strip(),
        exclude=request.query_params.get("exclude") or None,
        limit=SEARCH_LIMIT,
    )
    return JSONResponse(
        [
            to_wire(
                PublicUser.from_user(
                    user, online=services.presence.is_online(user.username)
                )
            )
            for user in found
        ]
    )


async def update_avatar(request: Request) -> Response:
    data = await read_json(request)
    profile_picture = data.get("profilePicture")
    if not isinstance(profile_picture, str):
        profile_picture = ""
    updated = await get_services(request).dispatcher.update_avatar(
        get_str(data, "username"), profile_picture
    )
    return JSONResponse({"success": updated}, status_code=200 if updated else 404)

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..models import to_wire
from .common import get_services


async def history(request: Request) -> Response:
    msgs = await get_services(request).messages.find_conversation(
        request.path_params["user1"], request.path_params["user2"]
    )
    return JSONResponse([to_wire(msg) for msg in msgs])


async def search(request: Request) -> Response:
    case_sensitive = request.query_params.get("caseSensitive", "").lower() in (
        "1",
        "true",
        "yes",
    )
    msgs = await get_services(request).messages.search_text(
        request.path_params["user1"],
        request.path_params["user2"],
        request.query_params.get("q", ""),
        case_insensitive=not case_sensitive,
    )
    return JSONResponse([to_wire(msg) for msg in msgs])

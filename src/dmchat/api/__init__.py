from starlette.routing import Route, WebSocketRoute

from .auth import login, register
from .messages import history, search
from .realtime import realtime
from .users import get_user, search_users, update_avatar

routes = [
    Route("/register", register, methods=["POST"]),
    Route("/login", login, methods=["POST"]),
    Route("/update-pp", update_avatar, methods=["POST"]),
    Route("/user/{username}", get_user),
    Route("/users/search", search_users),
    Route("/messages/{user1}/{user2}", history),
    Route("/messages/{user1}/{user2}/search", search),
    WebSocketRoute("/ws", realtime),
]

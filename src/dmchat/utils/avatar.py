import hashlib
import urllib.parse

AVATAR_BASE_URL = "https://ui-avatars.com/api/"

BACKGROUNDS = ["6366f1", "0ea5e9", "10b981", "f59e0b", "ef4444", "8b5cf6", "ec4899"]


def default_avatar(username: str) -> str:
    # Same username, same colour.
    digest = hashlib.sha1(username.encode()).digest()
    background = BACKGROUNDS[digest[0] % len(BACKGROUNDS)]
    query = urllib.parse.urlencode(
        {"name": username, "background": background, "color": "fff"}
    )
    return f"{AVATAR_BASE_URL}?{query}"


def avatar_or_default(username: str, profile_picture: str | None) -> str:
    return profile_picture or default_avatar(username)

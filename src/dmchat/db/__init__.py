from .conn import make_database
from .errors import DuplicateIdentity
from .messages import MessageStore
from .tables import create_tables
from .users import UserStore

__all__ = [
    "DuplicateIdentity",
    "MessageStore",
    "UserStore",
    "create_tables",
    "make_database",
]

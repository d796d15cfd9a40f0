from .session_store import SessionStore
from .user_store import UserStore

__all__ = ["SessionStore", "UserStore"]

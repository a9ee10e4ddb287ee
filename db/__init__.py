from .engine import Base, get_engine, init_db  # noqa: F401
from .repository import SqlSlot, get_chat_history, save_chat_message, session_scope  # noqa: F401

__all__ = [
    "Base",
    "get_engine",
    "init_db",
    "session_scope",
    "SqlSlot",
    "save_chat_message",
    "get_chat_history",
]

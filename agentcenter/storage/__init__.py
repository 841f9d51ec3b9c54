from .base import SessionStore
from .file import FileSessionStore
from .memory import InMemorySessionStore

__all__ = ["SessionStore", "FileSessionStore", "InMemorySessionStore"]

"""Memory-based session storage."""

from .session_store import MemorySessionStore
from .store import TTLStore

__all__ = [
    "MemorySessionStore",
    "TTLStore",
]

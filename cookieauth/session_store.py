"""
SessionStore interface for server-side ticket storage.

When a session store is configured the cookie only carries an opaque session
key; the full ticket lives in the store.

Concurrency: the engine does not coordinate concurrent requests that share a
session key. Implementations must make ``renew`` and ``remove`` safe to call
concurrently (last writer wins is acceptable).
"""

from abc import ABC, abstractmethod

from .types import AuthenticationTicket


class SessionStore(ABC):
    """Abstract base class for ticket session stores."""

    @abstractmethod
    async def store(self, ticket: AuthenticationTicket) -> str:
        """Store a ticket and return the new session key."""
        pass

    @abstractmethod
    async def retrieve(self, key: str) -> AuthenticationTicket | None:
        """Return the ticket stored under ``key``, or None if missing."""
        pass

    @abstractmethod
    async def renew(self, key: str, ticket: AuthenticationTicket) -> None:
        """Replace the ticket stored under ``key``."""
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete ``key``. Removing an unknown key is not an error."""
        pass

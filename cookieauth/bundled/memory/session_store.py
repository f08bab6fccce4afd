"""Memory-based session store implementation."""

import copy
import logging
import secrets
from typing import Any, Dict

from cookieauth.clock import Clock, SystemClock
from cookieauth.exceptions import SessionStoreError
from cookieauth.session_store import SessionStore
from cookieauth.types import AuthenticationTicket

from .store import TTLStore

logger = logging.getLogger(__name__)


class MemorySessionStore(SessionStore):
    """Process-local session store.

    Tickets are copied on the way in and out so callers never share mutable
    properties with the stored entry. Entries expire with the ticket's
    ``expires_utc``; tickets without an expiry use ``default_ttl``.
    """

    def __init__(self, config: Dict[str, Any] | None = None, clock: Clock | None = None):
        """Initialize memory session store.

        Args:
            config: Store configuration:
                - cleanup_interval: seconds between background sweeps (default 300)
                - default_ttl: TTL in seconds for tickets with no expiry (default None)
                - session_key_length: bytes of randomness per key (default 32)
                - strict_renew: raise on renewing an unknown key (default False)
            clock: Clock used to turn ticket expiry into a TTL
        """
        config = config or {}
        self.clock = clock or SystemClock()
        self._entries = TTLStore(
            cleanup_interval=config.get("cleanup_interval", 300.0),
            time_source=lambda: self.clock.utcnow().timestamp(),
        )
        self.default_ttl = config.get("default_ttl")
        self.session_key_length = config.get("session_key_length", 32)
        self.strict_renew = config.get("strict_renew", False)

        # Start cleanup task
        self._cleanup_started = False

    async def _ensure_cleanup_started(self) -> None:
        """Ensure cleanup task is started."""
        if not self._cleanup_started:
            await self.start_cleanup()

    async def start_cleanup(self) -> None:
        """Start sweeping expired sessions every ``cleanup_interval`` seconds."""
        await self._entries.start_cleanup()
        self._cleanup_started = True

    async def stop_cleanup(self) -> None:
        await self._entries.stop_cleanup()
        self._cleanup_started = False

    def _ttl_for(self, ticket: AuthenticationTicket) -> float | None:
        expires_utc = ticket.properties.expires_utc
        if expires_utc is None:
            return self.default_ttl
        return (expires_utc - self.clock.utcnow()).total_seconds()

    async def store(self, ticket: AuthenticationTicket) -> str:
        await self._ensure_cleanup_started()
        key = secrets.token_urlsafe(self.session_key_length)
        # Ensure unique session key
        while self._entries.exists(key):
            key = secrets.token_urlsafe(self.session_key_length)

        self._entries.set(key, copy.deepcopy(ticket), ttl_seconds=self._ttl_for(ticket))
        return key

    async def retrieve(self, key: str) -> AuthenticationTicket | None:
        ticket = self._entries.get(key)
        return copy.deepcopy(ticket) if ticket is not None else None

    async def renew(self, key: str, ticket: AuthenticationTicket) -> None:
        await self._ensure_cleanup_started()
        if self.strict_renew and not self._entries.exists(key):
            raise SessionStoreError("Cannot renew unknown session", session_key=key)
        self._entries.set(key, copy.deepcopy(ticket), ttl_seconds=self._ttl_for(ticket))

    async def remove(self, key: str) -> None:
        if not self._entries.delete(key):
            logger.debug("Session remove requested for a key that is not stored")

    def __len__(self) -> int:
        return self._entries.size()

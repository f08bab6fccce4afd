"""Thread-safe in-memory key-value store with TTL support."""

import asyncio
import logging
import time
from threading import RLock
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class TTLEntry:
    """Entry in the TTL store with expiration tracking."""

    def __init__(
        self,
        value: Any,
        ttl_seconds: Optional[float] = None,
        now: Optional[float] = None,
    ):
        """Initialize TTL entry.

        Args:
            value: The stored value
            ttl_seconds: Time to live in seconds, None for no expiration
            now: Creation timestamp, defaults to the wall clock
        """
        self.value = value
        self.created_at = now if now is not None else time.time()
        self.expires_at = (
            self.created_at + ttl_seconds if ttl_seconds is not None else None
        )

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check if entry has expired.

        An entry is still live at exactly its expiry instant.
        """
        if self.expires_at is None:
            return False
        return (now if now is not None else time.time()) > self.expires_at


class TTLStore:
    """Thread-safe in-memory key-value store with TTL support.

    This store provides:
    - Thread-safe operations using RLock
    - Lazy expiry on read
    - Optional background cleanup of expired entries
    """

    def __init__(
        self,
        cleanup_interval: float = 300.0,
        time_source: Optional[Callable[[], float]] = None,
    ):
        """Initialize TTL store.

        Args:
            cleanup_interval: Interval between cleanup runs in seconds
            time_source: Returns the current POSIX timestamp (default time.time)
        """
        self._time = time_source or time.time
        self._data: Dict[str, TTLEntry] = {}
        self._lock = RLock()
        self._cleanup_interval = cleanup_interval
        self._cleanup_task: Optional[asyncio.Task] = None
        self._cleanup_running = False

    async def start_cleanup(self) -> None:
        """Start background cleanup task."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_running = True
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop_cleanup(self) -> None:
        """Stop background cleanup task."""
        self._cleanup_running = False
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
        self._cleanup_task = None

    async def _cleanup_loop(self) -> None:
        """Background cleanup loop to remove expired entries."""
        while self._cleanup_running:
            try:
                removed = self.cleanup_expired()
                if removed:
                    logger.debug(f"Removed {removed} expired entries")
                await asyncio.sleep(self._cleanup_interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"TTL store cleanup failed: {e}")
                await asyncio.sleep(self._cleanup_interval)

    def cleanup_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries cleaned up
        """
        now = self._time()
        with self._lock:
            expired_keys = [
                key for key, entry in self._data.items() if entry.is_expired(now)
            ]
            for key in expired_keys:
                del self._data[key]
        return len(expired_keys)

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """Set a value in the store.

        Args:
            key: Key to store under
            value: Value to store
            ttl_seconds: Time to live in seconds, None for no expiration
        """
        with self._lock:
            self._data[key] = TTLEntry(value, ttl_seconds, now=self._time())

    def get(self, key: str) -> Optional[Any]:
        """Get a value from the store.

        Returns:
            Value if found and not expired, None otherwise
        """
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None

            if entry.is_expired(self._time()):
                del self._data[key]
                return None

            return entry.value

    def delete(self, key: str) -> bool:
        """Delete a key from the store.

        Returns:
            True if key was deleted, False if not found
        """
        with self._lock:
            return self._data.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        """Check if a key exists and is not expired."""
        return self.get(key) is not None

    def size(self) -> int:
        """Get number of non-expired entries."""
        with self._lock:
            self.cleanup_expired()
            return len(self._data)

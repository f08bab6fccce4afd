"""Tests for MemorySessionStore through the SessionStore interface."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from cookieauth import (
    AuthenticationProperties,
    AuthenticationTicket,
    Claim,
    ClaimsIdentity,
    FixedClock,
    SessionStoreError,
)
from cookieauth.bundled.memory import MemorySessionStore

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def store_clock():
    return FixedClock(T0)


@pytest_asyncio.fixture
async def store(store_clock):
    """Create a MemorySessionStore sharing the test clock."""
    store = MemorySessionStore({"cleanup_interval": 0.01}, clock=store_clock)
    yield store
    await store.stop_cleanup()


@pytest.fixture
def ticket():
    return AuthenticationTicket(
        ClaimsIdentity([Claim("name", "alice")], "Cookies"),
        AuthenticationProperties(
            issued_utc=T0, expires_utc=T0 + timedelta(hours=1), items={"k": "v"}
        ),
    )


class TestMemorySessionStore:
    """Test MemorySessionStore functionality."""

    @pytest.mark.asyncio
    async def test_store_and_retrieve(self, store, ticket):
        """Test that a stored ticket comes back equal."""
        key = await store.store(ticket)

        assert isinstance(key, str) and key
        assert await store.retrieve(key) == ticket
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_keys_are_unique(self, store, ticket):
        """Test that every store call yields a new key."""
        keys = {await store.store(ticket) for _ in range(20)}

        assert len(keys) == 20

    @pytest.mark.asyncio
    async def test_retrieve_unknown_key(self, store):
        """Test retrieving a key that was never stored."""
        assert await store.retrieve("missing") is None

    @pytest.mark.asyncio
    async def test_retrieved_ticket_is_detached(self, store, ticket):
        """Test that mutating a retrieved ticket does not change the store."""
        key = await store.store(ticket)

        retrieved = await store.retrieve(key)
        retrieved.properties.items["k"] = "changed"

        assert (await store.retrieve(key)).properties.items == {"k": "v"}
        assert ticket.properties.items == {"k": "v"}

    @pytest.mark.asyncio
    async def test_renew_replaces_ticket(self, store, ticket):
        """Test that renew overwrites the stored ticket."""
        key = await store.store(ticket)
        renewed = AuthenticationTicket(
            ticket.identity,
            AuthenticationProperties(
                issued_utc=T0 + timedelta(minutes=40),
                expires_utc=T0 + timedelta(hours=1, minutes=40),
            ),
        )

        await store.renew(key, renewed)

        assert await store.retrieve(key) == renewed

    @pytest.mark.asyncio
    async def test_renew_unknown_key_is_lenient_by_default(self, store, ticket):
        """Test that renewing an unknown key stores it."""
        await store.renew("fresh", ticket)

        assert await store.retrieve("fresh") == ticket

    @pytest.mark.asyncio
    async def test_strict_renew_unknown_key(self, store_clock, ticket):
        """Test that strict stores refuse to renew unknown keys."""
        store = MemorySessionStore({"strict_renew": True}, clock=store_clock)

        with pytest.raises(SessionStoreError) as exc_info:
            await store.renew("missing", ticket)

        assert exc_info.value.session_key == "missing"
        await store.stop_cleanup()

    @pytest.mark.asyncio
    async def test_remove(self, store, ticket):
        """Test removing a key, twice."""
        key = await store.store(ticket)

        await store.remove(key)
        await store.remove(key)

        assert await store.retrieve(key) is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_already_expired_ticket_is_not_kept(self, store, store_clock, ticket):
        """Test that entries live only as long as the ticket."""
        store_clock.now = T0 + timedelta(hours=2)

        key = await store.store(ticket)

        assert await store.retrieve(key) is None

    @pytest.mark.asyncio
    async def test_ticket_without_expiry_uses_default_ttl(self, store_clock):
        """Test that tickets with no expiry fall back to default_ttl."""
        store = MemorySessionStore({"default_ttl": None}, clock=store_clock)
        ticket = AuthenticationTicket(ClaimsIdentity([Claim("name", "bob")], "Cookies"))

        key = await store.store(ticket)

        assert store._entries._data[key].expires_at is None
        assert await store.retrieve(key) == ticket
        await store.stop_cleanup()

    @pytest.mark.asyncio
    async def test_entry_lives_until_ticket_expiry(self, store, store_clock, ticket):
        """Test the store agrees with the ticket's expiry instant."""
        key = await store.store(ticket)

        store_clock.now = T0 + timedelta(hours=1)
        assert await store.retrieve(key) == ticket

        store_clock.advance(timedelta(milliseconds=1))
        assert await store.retrieve(key) is None


class TestCleanup:
    """Test background removal of expired sessions."""

    @pytest.mark.asyncio
    async def test_cleanup_starts_on_first_use(self, store, ticket):
        """Test that storing a ticket starts the sweep task."""
        assert store._entries._cleanup_task is None

        await store.store(ticket)

        task = store._entries._cleanup_task
        assert task is not None and not task.done()

        await store.renew("other", ticket)
        assert store._entries._cleanup_task is task

    @pytest.mark.asyncio
    async def test_expired_sessions_are_swept_without_reads(self, store, store_clock):
        """Test that abandoned sessions do not accumulate."""
        short_lived = AuthenticationTicket(
            ClaimsIdentity([Claim("name", "alice")], "Cookies"),
            AuthenticationProperties(issued_utc=T0, expires_utc=T0 + timedelta(minutes=5)),
        )
        for _ in range(50):
            await store.store(short_lived)
        assert len(store._entries._data) == 50

        store_clock.advance(timedelta(minutes=10))
        await asyncio.sleep(0.1)

        assert store._entries._data == {}

    @pytest.mark.asyncio
    async def test_start_and_stop(self, store_clock):
        """Test explicit cleanup lifecycle."""
        store = MemorySessionStore({"cleanup_interval": 0.01}, clock=store_clock)

        await store.start_cleanup()
        task = store._entries._cleanup_task
        assert task is not None and not task.done()

        await store.stop_cleanup()
        assert store._entries._cleanup_task is None
        assert task.done()

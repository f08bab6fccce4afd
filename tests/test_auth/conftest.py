"""
Pytest configuration and shared fixtures for cookie authentication tests.
"""

from datetime import UTC, datetime, timedelta
from urllib.parse import unquote

import pytest

from cookieauth import (
    AuthenticationManager,
    AuthenticationProperties,
    AuthenticationTicket,
    Claim,
    ClaimsIdentity,
    CookieAuthConfig,
    CookieAuthenticationEvents,
    CookieAuthenticationHandler,
    CookieAuthenticationOptions,
    FixedClock,
    JwtTicketDataFormat,
    Request,
    ResponseBuilder,
    SessionStore,
)

SECRET_KEY = "test-secret-key-must-be-long-enough-for-hs256"
T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)
COOKIE_NAME = ".cookieauth.Cookies"


class RecordingSessionStore(SessionStore):
    """Dict-backed session store that records every call in order."""

    def __init__(self):
        self.tickets = {}
        self.calls = []
        self._next_key = 0

    async def store(self, ticket):
        self._next_key += 1
        key = f"session-{self._next_key}"
        self.tickets[key] = ticket
        self.calls.append(("store", key))
        return key

    async def retrieve(self, key):
        self.calls.append(("retrieve", key))
        return self.tickets.get(key)

    async def renew(self, key, ticket):
        self.calls.append(("renew", key))
        self.tickets[key] = ticket

    async def remove(self, key):
        self.calls.append(("remove", key))
        self.tickets.pop(key, None)

    def count(self, operation):
        return sum(1 for name, _ in self.calls if name == operation)


def build_scope(
    path="/",
    query_string="",
    cookies=None,
    headers=None,
    scheme="http",
    root_path="",
    host="testserver",
):
    raw_headers = [(b"host", host.encode("latin-1"))]
    if cookies:
        cookie_header = "; ".join(f"{name}={value}" for name, value in cookies.items())
        raw_headers.append((b"cookie", cookie_header.encode("latin-1")))
    for name, value in (headers or {}).items():
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    return {
        "type": "http",
        "method": "GET",
        "scheme": scheme,
        "root_path": root_path,
        "path": root_path + path,
        "query_string": query_string.encode("latin-1"),
        "headers": raw_headers,
        "server": (host, 443 if scheme == "https" else 80),
    }


@pytest.fixture
def clock():
    """Provide a clock frozen at T0."""
    return FixedClock(T0)


@pytest.fixture
def config():
    """Provide a config with login/logout paths and a one hour lifetime."""
    return CookieAuthConfig(
        login_path="/login",
        logout_path="/logout",
        expire_time_span=timedelta(hours=1),
    )


@pytest.fixture
def ticket_format():
    return JwtTicketDataFormat(SECRET_KEY)


@pytest.fixture
def events():
    return CookieAuthenticationEvents()


@pytest.fixture
def options(config, ticket_format, events, clock):
    """Provide options without a session store."""
    return CookieAuthenticationOptions(
        config=config, ticket_format=ticket_format, events=events, clock=clock
    )


@pytest.fixture
def session_store():
    return RecordingSessionStore()


@pytest.fixture
def store_options(options, session_store):
    """Provide options backed by a recording session store."""
    options.session_store = session_store
    return options


@pytest.fixture
def handler(options):
    return CookieAuthenticationHandler(options)


@pytest.fixture
def store_handler(store_options):
    return CookieAuthenticationHandler(store_options)


@pytest.fixture
def manager():
    return AuthenticationManager()


@pytest.fixture
def response():
    return ResponseBuilder(200)


@pytest.fixture
def identity():
    return ClaimsIdentity(
        [Claim("name", "alice"), Claim("role", "admin"), Claim("role", "editor")],
        "Cookies",
    )


@pytest.fixture
def make_ticket(identity):
    """Factory for tickets issued relative to T0."""

    def _make(issued=T0, lifetime=timedelta(hours=1), **properties):
        return AuthenticationTicket(
            identity,
            AuthenticationProperties(
                issued_utc=issued,
                expires_utc=issued + lifetime if lifetime is not None else None,
                **properties,
            ),
        )

    return _make


@pytest.fixture
def make_request():
    """Factory for requests built from an ASGI scope."""

    def _make(**kwargs):
        return Request(build_scope(**kwargs))

    return _make


@pytest.fixture
def cookie_request(make_request, ticket_format):
    """Factory for requests carrying a protected ticket cookie."""

    def _make(ticket, **kwargs):
        cookies = {COOKIE_NAME: ticket_format.protect(ticket)}
        return make_request(cookies=cookies, **kwargs)

    return _make


@pytest.fixture
def cookie_values():
    """Extract the unquoted cookie values from a response's Set-Cookie headers."""

    def _extract(response):
        values = []
        for header in response.get_headers("Set-Cookie"):
            first = header.split(";", 1)[0]
            values.append(unquote(first.split("=", 1)[1]))
        return values

    return _extract

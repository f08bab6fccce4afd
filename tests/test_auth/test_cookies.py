"""Tests for cookie transport, the request view and the response head."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from cookieauth import CookieManager, CookieOptions, Request, ResponseBuilder
from cookieauth.cookies import format_set_cookie


class TestFormatSetCookie:
    """Test Set-Cookie rendering."""

    def test_minimal_cookie(self):
        """Test a cookie with default options."""
        assert format_set_cookie("a", "b", CookieOptions()) == "a=b; path=/; httponly"

    def test_all_attributes(self):
        """Test a cookie with every attribute set."""
        options = CookieOptions(
            domain="example.com",
            path="/app",
            http_only=True,
            secure=True,
            same_site="Strict",
            expires=datetime(2024, 1, 1, 13, 0, tzinfo=UTC),
        )

        assert format_set_cookie("sid", "v", options) == (
            "sid=v; domain=example.com; path=/app; "
            "expires=Mon, 01 Jan 2024 13:00:00 GMT; secure; httponly; samesite=Strict"
        )

    def test_value_is_percent_encoded(self):
        """Test that reserved characters in values are encoded."""
        header = format_set_cookie("a", "x;y=z /", CookieOptions(http_only=False))

        assert header == "a=x%3By%3Dz%20%2F; path=/"

    def test_expires_is_rendered_in_gmt(self):
        """Test that non-UTC expiry instants are converted."""
        expires = datetime(2024, 1, 1, 15, 0, tzinfo=timezone(timedelta(hours=2)))

        header = format_set_cookie("a", "b", CookieOptions(expires=expires))

        assert "expires=Mon, 01 Jan 2024 13:00:00 GMT" in header


class TestCookieManager:
    """Test reading and writing the authentication cookie."""

    def test_read_round_trips_encoded_value(self, make_request):
        """Test that an encoded cookie value is decoded on read."""
        request = make_request(cookies={"auth": "x%3By", "other": "1"})

        assert CookieManager().get_request_cookie(request, "auth") == "x;y"
        assert CookieManager().get_request_cookie(request, "missing") is None

    def test_append_keeps_existing_cookies(self):
        """Test that appending does not replace other Set-Cookie headers."""
        response = ResponseBuilder(200, [("Set-Cookie", "lang=en")])

        CookieManager().append_response_cookie(response, "auth", "v", CookieOptions())

        assert response.get_headers("Set-Cookie") == ["lang=en", "auth=v; path=/; httponly"]

    def test_delete_matches_domain_and_path(self):
        """Test that deletion reuses domain and path and expires at the epoch."""
        response = ResponseBuilder()

        CookieManager().delete_cookie(
            response, "auth", CookieOptions(domain="example.com", path="/app", secure=True)
        )

        assert response.get_headers("Set-Cookie") == [
            "auth=; domain=example.com; path=/app; "
            "expires=Thu, 01 Jan 1970 00:00:00 GMT; secure; httponly"
        ]


class TestRequest:
    """Test the ASGI request view."""

    def test_rejects_non_http_scope(self):
        """Test that only HTTP scopes are accepted."""
        with pytest.raises(RuntimeError):
            Request({"type": "websocket"})

    def test_path_is_relative_to_root_path(self, make_request):
        """Test path and path_base under a mounted root path."""
        request = make_request(path="/login", root_path="/app")

        assert request.path_base == "/app"
        assert request.path == "/login"

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/app", ""),
            ("/app/", "/"),
            ("/application", "/application"),
            ("/apples/login", "/apples/login"),
        ],
    )
    def test_root_path_is_stripped_on_segment_boundary(self, path, expected):
        """Test that the root path only matches whole path segments."""
        request = Request({"type": "http", "root_path": "/app", "path": path, "headers": []})

        assert request.path == expected

    def test_query_parameters(self, make_request):
        """Test query parameter access."""
        request = make_request(query_string="a=1&a=2&b=%2Fx")

        assert request.query_param("a") == "1"
        assert request.query_param("b") == "/x"
        assert request.query_param("c") is None
        assert request.query_params == {"a": ["1", "2"], "b": "/x"}

    def test_host_falls_back_to_server(self):
        """Test host resolution without a Host header."""
        request = Request(
            {"type": "http", "scheme": "https", "headers": [], "server": ("example.com", 8443)}
        )

        assert request.host == "example.com:8443"
        assert request.is_secure

    def test_host_omits_default_port(self):
        """Test that default ports are not shown."""
        request = Request({"type": "http", "headers": [], "server": ("example.com", 80)})

        assert request.host == "example.com"

    def test_cookie_without_value(self, make_request):
        """Test that bare cookie names parse as empty values."""
        request = make_request(headers={"Cookie": "flag; a=1"})

        assert request.cookies == {"flag": "", "a": "1"}


class TestResponseBuilder:
    """Test the mutable response head."""

    def test_start_message_round_trip(self):
        """Test conversion from and to ASGI start messages."""
        message = {
            "type": "http.response.start",
            "status": 401,
            "headers": [(b"content-type", b"text/plain")],
        }

        response = ResponseBuilder.from_start_message(message)
        response.header("Set-Cookie", "a=1")
        result = response.to_start_message(message)

        assert result["type"] == "http.response.start"
        assert result["status"] == 401
        assert result["headers"] == [(b"content-type", b"text/plain"), (b"set-cookie", b"a=1")]

    def test_set_header_replaces(self):
        """Test that set_header replaces every existing value."""
        response = ResponseBuilder(200, [("Pragma", "a"), ("pragma", "b")])

        response.set_header("Pragma", "no-cache")

        assert response.get_headers("pragma") == ["no-cache"]

    def test_redirect(self):
        """Test redirect sets status and Location."""
        response = ResponseBuilder()

        response.redirect("/next")

        assert response.status == 302
        assert response.get_header("location") == "/next"

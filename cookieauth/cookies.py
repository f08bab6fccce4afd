"""
Cookie transport for the authentication ticket.

Reads the named cookie from the request and writes ``Set-Cookie`` headers on
the response. A single cookie carries the whole value; values are never split
across several cookies.
"""

from datetime import UTC, datetime
from email.utils import format_datetime
from urllib.parse import quote

from .requests import Request
from .responses import ResponseBuilder
from .types import CookieOptions

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def format_set_cookie(name: str, value: str, options: CookieOptions) -> str:
    """Render a ``Set-Cookie`` header value."""
    parts = [f"{name}={quote(value, safe='')}"]

    if options.domain:
        parts.append(f"domain={options.domain}")
    if options.path:
        parts.append(f"path={options.path}")
    if options.expires is not None:
        expires = options.expires
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=UTC)
        parts.append(f"expires={format_datetime(expires.astimezone(UTC), usegmt=True)}")
    if options.secure:
        parts.append("secure")
    if options.http_only:
        parts.append("httponly")
    if options.same_site:
        parts.append(f"samesite={options.same_site}")

    return "; ".join(parts)


class CookieManager:
    """Reads and writes the authentication cookie."""

    def get_request_cookie(self, request: Request, name: str) -> str | None:
        return request.cookies.get(name)

    def append_response_cookie(
        self,
        response: ResponseBuilder,
        name: str,
        value: str,
        options: CookieOptions,
    ) -> None:
        response.header("Set-Cookie", format_set_cookie(name, value, options))

    def delete_cookie(
        self, response: ResponseBuilder, name: str, options: CookieOptions
    ) -> None:
        """Expire the cookie on the client.

        The domain and path must match the ones used when the cookie was set,
        otherwise the browser keeps the original.
        """
        expired = CookieOptions(
            domain=options.domain,
            path=options.path,
            http_only=options.http_only,
            secure=options.secure,
            same_site=options.same_site,
            expires=UNIX_EPOCH,
        )
        self.append_response_cookie(response, name, "", expired)

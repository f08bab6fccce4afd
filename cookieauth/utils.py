"""
Security utilities for cookie authentication.

Security considerations:
- Return URLs taken from the query string must never leave the current host
- AJAX callers cannot follow a login redirect and need it reported instead
"""

from typing import TYPE_CHECKING
from urllib.parse import quote

if TYPE_CHECKING:
    from .requests import Request


def is_host_relative(path: str | None) -> bool:
    """
    Check that a redirect target stays on the current host.

    Accepts paths such as ``/a/b?c=d`` and rejects protocol-relative
    (``//evil.com``), backslash (``/\\evil.com``) and absolute URLs.

    Args:
        path: Candidate redirect target

    Returns:
        True if the target is a host-relative path
    """
    if not path:
        return False
    if len(path) == 1:
        return path[0] == "/"
    return path[0] == "/" and path[1] != "/" and path[1] != "\\"


def is_ajax_request(request: "Request") -> bool:
    """Check whether the request was issued by XMLHttpRequest."""
    if request.query_param("X-Requested-With") == "XMLHttpRequest":
        return True
    return request.headers.get("x-requested-with") == "XMLHttpRequest"


def build_query_string(name: str, value: str) -> str:
    """Render ``?name=value`` with both parts percent-encoded."""
    return f"?{quote(name, safe='')}={quote(value, safe='')}"

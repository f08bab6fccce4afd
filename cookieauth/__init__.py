"""
Cookie Authentication

Cookie-transported authentication tickets for ASGI applications. Decodes and
validates a signed ticket cookie on every request, issues, renews and revokes
that cookie on sign-in, sign-out and sliding expiration, and redirects
unauthenticated callers to a login page.

Security Notice:
This module handles sensitive security operations.
- Ticket cookies are signed; tampered cookies are treated as anonymous
- With a session store, cookies carry only an opaque session key
- Return URLs are restricted to host-relative paths
"""

from .clock import Clock, FixedClock, SystemClock
from .config import (
    AuthenticationMode,
    CookieAuthConfig,
    CookieSecurePolicy,
    SameSiteMode,
    load_cookie_auth_config,
    parse_cookie_auth_config,
)
from .cookies import CookieManager
from .events import (
    CookieApplyRedirectContext,
    CookieAuthenticationEvents,
    CookieExceptionContext,
    CookieResponseSignedInContext,
    CookieResponseSignInContext,
    CookieResponseSignOutContext,
    CookieValidateIdentityContext,
)
from .exceptions import (
    AuthError,
    ConfigurationError,
    SessionStoreError,
    TicketFormatError,
)
from .handler import CookieAuthenticationHandler
from .manager import AuthenticationManager, get_authentication_manager
from .middleware import CookieAuthenticationMiddleware, get_authentication_ticket
from .options import CookieAuthenticationOptions
from .requests import Request
from .responses import ResponseBuilder
from .session_store import SessionStore
from .ticket_format import JwtTicketDataFormat, TicketDataFormat, TicketSerializer
from .types import (
    NAME_CLAIM_TYPE,
    SESSION_ID_CLAIM,
    AuthenticateResult,
    AuthenticationProperties,
    AuthenticationTicket,
    Claim,
    ClaimsIdentity,
    CookieOptions,
    ExceptionDecision,
    ExceptionLocation,
    PendingRenewal,
)
from .utils import is_host_relative

__all__ = [
    # Data types
    "Claim",
    "ClaimsIdentity",
    "AuthenticationProperties",
    "AuthenticationTicket",
    "AuthenticateResult",
    "PendingRenewal",
    "CookieOptions",
    "ExceptionDecision",
    "ExceptionLocation",
    "NAME_CLAIM_TYPE",
    "SESSION_ID_CLAIM",
    # Engine
    "CookieAuthenticationHandler",
    "CookieAuthenticationMiddleware",
    "CookieAuthenticationOptions",
    "AuthenticationManager",
    "get_authentication_manager",
    "get_authentication_ticket",
    # Hooks
    "CookieAuthenticationEvents",
    "CookieValidateIdentityContext",
    "CookieResponseSignInContext",
    "CookieResponseSignedInContext",
    "CookieResponseSignOutContext",
    "CookieApplyRedirectContext",
    "CookieExceptionContext",
    # Collaborators
    "Clock",
    "SystemClock",
    "FixedClock",
    "CookieManager",
    "SessionStore",
    "TicketDataFormat",
    "TicketSerializer",
    "JwtTicketDataFormat",
    "Request",
    "ResponseBuilder",
    # Configuration
    "AuthenticationMode",
    "CookieAuthConfig",
    "CookieSecurePolicy",
    "SameSiteMode",
    "load_cookie_auth_config",
    "parse_cookie_auth_config",
    # Errors
    "AuthError",
    "ConfigurationError",
    "SessionStoreError",
    "TicketFormatError",
    # Utilities
    "is_host_relative",
]

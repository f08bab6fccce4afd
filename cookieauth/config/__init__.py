"""Configuration system for cookie authentication."""

from .schema import (
    AuthenticationMode,
    CookieAuthConfig,
    CookieSecurePolicy,
    SameSiteMode,
)

from .loader import (
    CookieAuthConfigLoader,
    load_cookie_auth_config,
    parse_cookie_auth_config,
)

__all__ = [
    # Schema models
    "AuthenticationMode",
    "CookieAuthConfig",
    "CookieSecurePolicy",
    "SameSiteMode",
    # Loading
    "CookieAuthConfigLoader",
    "load_cookie_auth_config",
    "parse_cookie_auth_config",
]

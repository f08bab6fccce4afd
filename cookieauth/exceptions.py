"""Exception classes for the cookie authentication engine."""


class AuthError(Exception):
    """Base exception for all cookie-authentication errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(AuthError):
    """Raised when cookie authentication configuration is invalid."""

    pass


class TicketFormatError(AuthError):
    """Raised when a ticket payload cannot be serialized or deserialized."""

    pass


class SessionStoreError(AuthError):
    """Raised when a session store operation fails."""

    def __init__(
        self, message: str, session_key: str | None = None, details: dict | None = None
    ):
        self.session_key = session_key
        super().__init__(message, details)

"""Runtime options: validated configuration plus the collaborators it needs."""

from dataclasses import dataclass, field
from typing import Any

from .clock import Clock, SystemClock
from .config.loader import parse_cookie_auth_config
from .config.schema import CookieAuthConfig
from .cookies import CookieManager
from .events import CookieAuthenticationEvents
from .session_store import SessionStore
from .ticket_format import JwtTicketDataFormat, TicketDataFormat


@dataclass
class CookieAuthenticationOptions:
    """Everything a ``CookieAuthenticationHandler`` needs.

    ``session_store`` is optional; when set, cookies only carry a session key.
    """

    config: CookieAuthConfig
    ticket_format: TicketDataFormat
    session_store: SessionStore | None = None
    events: CookieAuthenticationEvents = field(default_factory=CookieAuthenticationEvents)
    clock: Clock = field(default_factory=SystemClock)
    cookie_manager: CookieManager = field(default_factory=CookieManager)

    @classmethod
    def from_config(
        cls,
        config: CookieAuthConfig | dict[str, Any],
        secret_key: str,
        algorithm: str = "HS256",
        **collaborators: Any,
    ) -> "CookieAuthenticationOptions":
        """Build options that protect tickets as signed JWTs.

        Args:
            config: Validated config or a raw mapping to validate
            secret_key: Key used to sign ticket cookies
            algorithm: JWT signing algorithm
            **collaborators: session_store, events, clock or cookie_manager overrides
        """
        if isinstance(config, dict):
            config = parse_cookie_auth_config(config)
        return cls(
            config=config,
            ticket_format=JwtTicketDataFormat(secret_key, algorithm),
            **collaborators,
        )

"""Core data types for cookie authentication."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


NAME_CLAIM_TYPE = "name"
SESSION_ID_CLAIM = "cookieauth-SessionId"


class ExceptionLocation(Enum):
    """Engine operation in which a contained exception was raised."""

    AUTHENTICATE = "authenticate"
    APPLY_GRANT = "apply_grant"
    APPLY_CHALLENGE = "apply_challenge"


@dataclass(frozen=True)
class Claim:
    """A single ``(type, value)`` statement about the caller."""

    type: str
    value: str


@dataclass(frozen=True)
class ClaimsIdentity:
    """Ordered set of claims plus the authentication type that issued them.

    Claim order is preserved and duplicates are allowed; lookups return the
    first match.
    """

    claims: tuple[Claim, ...] = ()
    authentication_type: str | None = None

    def __post_init__(self):
        # Accept any iterable of claims but store an immutable tuple
        object.__setattr__(self, "claims", tuple(self.claims))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.authentication_type)

    @property
    def name(self) -> str | None:
        claim = self.find_first(NAME_CLAIM_TYPE)
        return claim.value if claim else None

    def find_first(self, claim_type: str) -> Claim | None:
        """Return the first claim of ``claim_type`` or None."""
        for claim in self.claims:
            if claim.type == claim_type:
                return claim
        return None

    def has_claim(self, claim_type: str, value: str | None = None) -> bool:
        return any(
            claim.type == claim_type and (value is None or claim.value == value)
            for claim in self.claims
        )


@dataclass
class AuthenticationProperties:
    """Validity metadata that travels with an identity."""

    issued_utc: datetime | None = None
    expires_utc: datetime | None = None
    allow_refresh: bool | None = None
    is_persistent: bool = False
    redirect_uri: str | None = None
    items: dict[str, str] = field(default_factory=dict)

    def copy(self) -> "AuthenticationProperties":
        """Return a detached copy (the items mapping is copied too)."""
        return replace(self, items=dict(self.items))


@dataclass(frozen=True)
class AuthenticationTicket:
    """An identity paired with its properties.

    ``properties`` is never None; passing None yields empty properties.
    """

    identity: ClaimsIdentity
    properties: AuthenticationProperties = field(
        default_factory=AuthenticationProperties
    )

    def __post_init__(self):
        if self.properties is None:
            object.__setattr__(self, "properties", AuthenticationProperties())


@dataclass
class CookieOptions:
    """Attributes applied to the outgoing authentication cookie."""

    domain: str | None = None
    path: str = "/"
    http_only: bool = True
    secure: bool = False
    same_site: str | None = None
    expires: datetime | None = None


@dataclass(frozen=True)
class PendingRenewal:
    """Renewal decision made by ``authenticate`` for the current request.

    ``session_key`` is the session store key read from the cookie, if any.
    It is carried even when no renewal is due so that sign-in and sign-out
    can clean up the prior store entry.
    """

    should_renew: bool = False
    renew_issued_utc: datetime | None = None
    renew_expires_utc: datetime | None = None
    session_key: str | None = None

    @classmethod
    def none(cls, session_key: str | None = None) -> "PendingRenewal":
        return cls(session_key=session_key)

    def cancel(self) -> "PendingRenewal":
        """Drop the renewal window but keep the session key."""
        return PendingRenewal.none(self.session_key)


@dataclass(frozen=True)
class AuthenticateResult:
    """Outcome of ``authenticate``: the ticket (or None) and the renewal decision."""

    ticket: AuthenticationTicket | None = None
    renewal: PendingRenewal = field(default_factory=PendingRenewal)

    @property
    def is_authenticated(self) -> bool:
        return self.ticket is not None


@dataclass(frozen=True)
class ExceptionDecision:
    """What the exception hook wants done with a contained exception."""

    rethrow: bool = False
    replacement: AuthenticationTicket | None = None

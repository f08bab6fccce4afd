"""
Per-request registry of sign-in, sign-out and challenge requests.

Application code records what it wants to happen to the caller's
authentication on the request's ``AuthenticationManager``; the cookie
handler reads those records when the response starts.
"""

from dataclasses import dataclass, field

from .config.schema import AuthenticationMode
from .requests import Request
from .types import AuthenticationProperties, ClaimsIdentity

SCOPE_KEY = "cookieauth.manager"


@dataclass
class SignInGrant:
    """A sign-in for one identity."""

    identity: ClaimsIdentity
    properties: AuthenticationProperties


@dataclass
class SignOutRevoke:
    """A sign-out for the listed authentication types (all active if empty)."""

    authentication_types: tuple[str, ...] = ()
    properties: AuthenticationProperties = field(default_factory=AuthenticationProperties)


@dataclass
class Challenge:
    """A challenge for the listed authentication types (all active if empty)."""

    authentication_types: tuple[str, ...] = ()
    properties: AuthenticationProperties = field(default_factory=AuthenticationProperties)


def _applies_to(
    authentication_types: tuple[str, ...],
    authentication_type: str,
    mode: AuthenticationMode,
) -> bool:
    if not authentication_types:
        return mode == AuthenticationMode.ACTIVE
    return authentication_type in authentication_types


class AuthenticationManager:
    """Collects authentication decisions made while handling a request."""

    def __init__(self):
        self.identities: tuple[ClaimsIdentity, ...] = ()
        self.sign_in_properties: AuthenticationProperties | None = None
        self.sign_out_request: SignOutRevoke | None = None
        self.challenge_request: Challenge | None = None

    def sign_in(
        self,
        *identities: ClaimsIdentity,
        properties: AuthenticationProperties | None = None,
    ) -> None:
        """Issue a ticket for each identity whose handler is present.

        A later call replaces an earlier one.
        """
        if not identities:
            raise ValueError("sign_in requires at least one identity")
        self.identities = identities
        self.sign_in_properties = properties or AuthenticationProperties()

    def sign_out(
        self,
        *authentication_types: str,
        properties: AuthenticationProperties | None = None,
    ) -> None:
        """Revoke tickets for the given types, or for all active handlers."""
        self.sign_out_request = SignOutRevoke(
            tuple(authentication_types), properties or AuthenticationProperties()
        )

    def challenge(
        self,
        *authentication_types: str,
        properties: AuthenticationProperties | None = None,
    ) -> None:
        """Ask the given handlers (or all active ones) to challenge a 401."""
        self.challenge_request = Challenge(
            tuple(authentication_types), properties or AuthenticationProperties()
        )

    def lookup_sign_in(self, authentication_type: str) -> SignInGrant | None:
        for identity in self.identities:
            if identity.authentication_type == authentication_type:
                # Copied per lookup; sign-in hooks mutate the returned properties
                return SignInGrant(identity, self.sign_in_properties.copy())
        return None

    def lookup_sign_out(
        self, authentication_type: str, mode: AuthenticationMode
    ) -> SignOutRevoke | None:
        revoke = self.sign_out_request
        if revoke is None:
            return None
        return revoke if _applies_to(revoke.authentication_types, authentication_type, mode) else None

    def lookup_challenge(
        self, authentication_type: str, mode: AuthenticationMode
    ) -> Challenge | None:
        challenge = self.challenge_request
        if challenge is None:
            # A bare 401 is an implicit challenge for active handlers
            return Challenge() if mode == AuthenticationMode.ACTIVE else None
        return challenge if _applies_to(challenge.authentication_types, authentication_type, mode) else None


def get_authentication_manager(request: Request) -> AuthenticationManager:
    """Return the manager installed on this request by the middleware.

    Raises:
        RuntimeError: If no cookie authentication middleware handled the request
    """
    manager = request.scope.get(SCOPE_KEY)
    if manager is None:
        raise RuntimeError("No AuthenticationManager on request; is the middleware installed?")
    return manager

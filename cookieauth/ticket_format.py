"""
Ticket serialization and protection.

``TicketSerializer`` maps an ``AuthenticationTicket`` to a JSON-compatible
payload and back. ``JwtTicketDataFormat`` signs that payload as a JWT so the
cookie value cannot be forged or altered without the secret key.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

import jwt

from .exceptions import TicketFormatError
from .types import (
    AuthenticationProperties,
    AuthenticationTicket,
    Claim,
    ClaimsIdentity,
)

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

SUPPORTED_ALGORITHMS = [
    "HS256",
    "HS384",
    "HS512",
]


class TicketDataFormat(ABC):
    """Protects tickets into opaque strings and reverses the process."""

    @abstractmethod
    def protect(self, ticket: AuthenticationTicket) -> str:
        """Encode ``ticket`` as a string safe to place in a cookie."""
        pass

    @abstractmethod
    def unprotect(self, protected_text: str) -> AuthenticationTicket | None:
        """Decode a protected string.

        Returns:
            The ticket, or None if the text is tampered, malformed or was
            protected with a different key.
        """
        pass


def _format_instant(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_instant(value: Any) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TicketFormatError(f"Expected ISO timestamp, got {type(value).__name__}")
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise TicketFormatError(f"Invalid timestamp: {value!r}") from e


class TicketSerializer:
    """Converts tickets to and from plain mappings."""

    def serialize(self, ticket: AuthenticationTicket) -> dict[str, Any]:
        identity = ticket.identity
        properties = ticket.properties
        return {
            "ver": FORMAT_VERSION,
            "auth_type": identity.authentication_type,
            "claims": [[claim.type, claim.value] for claim in identity.claims],
            "props": {
                "issued": _format_instant(properties.issued_utc),
                "expires": _format_instant(properties.expires_utc),
                "refresh": properties.allow_refresh,
                "persistent": properties.is_persistent,
                "redirect": properties.redirect_uri,
                "items": dict(properties.items),
            },
        }

    def deserialize(self, payload: dict[str, Any]) -> AuthenticationTicket:
        if not isinstance(payload, dict):
            raise TicketFormatError("Ticket payload must be a mapping")

        version = payload.get("ver")
        if version != FORMAT_VERSION:
            raise TicketFormatError(
                f"Unsupported ticket format version: {version!r}",
                {"expected": FORMAT_VERSION},
            )

        raw_claims = payload.get("claims", [])
        if not isinstance(raw_claims, list):
            raise TicketFormatError("Ticket claims must be a list")
        claims = []
        for entry in raw_claims:
            if (
                not isinstance(entry, list)
                or len(entry) != 2
                or not all(isinstance(part, str) for part in entry)
            ):
                raise TicketFormatError("Each claim must be a [type, value] pair of strings")
            claims.append(Claim(entry[0], entry[1]))

        auth_type = payload.get("auth_type")
        if auth_type is not None and not isinstance(auth_type, str):
            raise TicketFormatError("Authentication type must be a string")

        props = payload.get("props") or {}
        if not isinstance(props, dict):
            raise TicketFormatError("Ticket properties must be a mapping")
        items = props.get("items") or {}
        if not isinstance(items, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in items.items()
        ):
            raise TicketFormatError("Property items must map strings to strings")

        allow_refresh = props.get("refresh")
        if allow_refresh is not None and not isinstance(allow_refresh, bool):
            raise TicketFormatError("allow_refresh must be a boolean")

        is_persistent = props.get("persistent", False)
        if not isinstance(is_persistent, bool):
            raise TicketFormatError("is_persistent must be a boolean")

        redirect_uri = props.get("redirect")
        if redirect_uri is not None and not isinstance(redirect_uri, str):
            raise TicketFormatError("redirect_uri must be a string")

        properties = AuthenticationProperties(
            issued_utc=_parse_instant(props.get("issued")),
            expires_utc=_parse_instant(props.get("expires")),
            allow_refresh=allow_refresh,
            is_persistent=is_persistent,
            redirect_uri=redirect_uri,
            items=dict(items),
        )
        return AuthenticationTicket(ClaimsIdentity(claims, auth_type), properties)


class JwtTicketDataFormat(TicketDataFormat):
    """Ticket format that signs the serialized ticket as a JWT.

    Expiry is enforced by the authentication handler from the ticket
    properties, so no ``exp`` claim is written.
    One secret both signs and verifies, so only HMAC algorithms are accepted.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        serializer: TicketSerializer | None = None,
    ):
        if not secret_key:
            raise ValueError("JWT ticket format requires a secret key")
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported JWT algorithm: {algorithm}")

        self.secret_key = secret_key
        self.algorithm = algorithm
        self.serializer = serializer or TicketSerializer()

    def protect(self, ticket: AuthenticationTicket) -> str:
        claims = self.serializer.serialize(ticket)
        try:
            return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        except Exception as e:
            raise TicketFormatError(f"Failed to protect ticket: {e}") from e

    def unprotect(self, protected_text: str) -> AuthenticationTicket | None:
        if not protected_text:
            return None
        try:
            payload = jwt.decode(
                protected_text, self.secret_key, algorithms=[self.algorithm]
            )
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected ticket token: {e}")
            return None

        try:
            return self.serializer.deserialize(payload)
        except TicketFormatError as e:
            logger.debug(f"Rejected ticket payload: {e.message}")
            return None

"""
Provider hooks for cookie authentication.

Each extension point is an independent callable on
``CookieAuthenticationEvents``. Hooks receive a context object they may
inspect and mutate; they may be plain functions or coroutine functions.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .requests import Request
from .responses import ResponseBuilder
from .types import (
    AuthenticationProperties,
    AuthenticationTicket,
    ClaimsIdentity,
    CookieOptions,
    ExceptionDecision,
    ExceptionLocation,
)
from .utils import is_ajax_request

if TYPE_CHECKING:
    from .options import CookieAuthenticationOptions


@dataclass
class CookieValidateIdentityContext:
    """Passed to ``validate_identity`` for every decoded, unexpired ticket.

    Setting ``identity`` to None (see ``reject``) makes the request anonymous.
    """

    request: Request
    options: "CookieAuthenticationOptions"
    identity: ClaimsIdentity | None
    properties: AuthenticationProperties

    def reject(self) -> None:
        self.identity = None

    def replace_identity(self, identity: ClaimsIdentity) -> None:
        self.identity = identity


@dataclass
class CookieResponseSignInContext:
    """Passed to ``response_sign_in`` before the sign-in cookie is written."""

    request: Request
    response: ResponseBuilder
    options: "CookieAuthenticationOptions"
    authentication_type: str
    identity: ClaimsIdentity
    properties: AuthenticationProperties
    cookie_options: CookieOptions


@dataclass
class CookieResponseSignedInContext:
    """Passed to ``response_signed_in`` after the sign-in cookie is written."""

    request: Request
    response: ResponseBuilder
    options: "CookieAuthenticationOptions"
    authentication_type: str
    identity: ClaimsIdentity
    properties: AuthenticationProperties


@dataclass
class CookieResponseSignOutContext:
    """Passed to ``response_sign_out`` before the cookie is deleted."""

    request: Request
    response: ResponseBuilder
    options: "CookieAuthenticationOptions"
    cookie_options: CookieOptions


@dataclass
class CookieApplyRedirectContext:
    """Passed to ``apply_redirect`` with a vetted redirect target."""

    request: Request
    response: ResponseBuilder
    options: "CookieAuthenticationOptions"
    redirect_uri: str


@dataclass
class CookieExceptionContext:
    """Passed to ``on_exception`` when an engine operation raises."""

    request: Request
    response: ResponseBuilder | None
    options: "CookieAuthenticationOptions"
    location: ExceptionLocation
    exception: BaseException
    ticket: AuthenticationTicket | None


def _noop(context: Any) -> None:
    return None


def default_apply_redirect(context: CookieApplyRedirectContext) -> None:
    """Redirect the browser, or report the redirect to AJAX callers."""
    if is_ajax_request(context.request):
        body = json.dumps({"status": 401, "headers": {"location": context.redirect_uri}})
        context.response.set_header("X-Responded-JSON", body)
        return
    context.response.redirect(context.redirect_uri)


def default_on_exception(context: CookieExceptionContext) -> ExceptionDecision:
    return ExceptionDecision()


Hook = Callable[[Any], Any]


@dataclass
class CookieAuthenticationEvents:
    """Callbacks invoked by the cookie authentication handler."""

    validate_identity: Hook = field(default=_noop)
    response_sign_in: Hook = field(default=_noop)
    response_signed_in: Hook = field(default=_noop)
    response_sign_out: Hook = field(default=_noop)
    apply_redirect: Hook = field(default=default_apply_redirect)
    on_exception: Hook = field(default=default_on_exception)

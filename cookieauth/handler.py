"""
Cookie authentication handler.

Implements the ticket lifecycle for one authentication type:

- ``authenticate`` decodes and validates the ticket cookie and decides
  whether the ticket should be renewed (sliding expiration)
- ``apply_grant`` writes, renews or deletes the cookie when the response
  starts
- ``apply_challenge`` redirects unauthenticated callers to the login path

The handler holds no per-request state. The renewal decision made by
``authenticate`` is returned in the ``AuthenticateResult`` and passed back to
``apply_grant`` by the caller, so one handler can serve concurrent requests.

Security considerations:
- With a session store the cookie carries only an opaque session key
- Return URLs are only followed when they are host-relative
- Failures are indistinguishable from anonymous requests to the caller
"""

import inspect
import logging
from typing import Any

from .config.schema import CookieAuthConfig, CookieSecurePolicy
from .events import (
    CookieApplyRedirectContext,
    CookieExceptionContext,
    CookieResponseSignedInContext,
    CookieResponseSignInContext,
    CookieResponseSignOutContext,
    CookieValidateIdentityContext,
)
from .manager import AuthenticationManager
from .options import CookieAuthenticationOptions
from .requests import Request
from .responses import ResponseBuilder
from .types import (
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
from .utils import build_query_string, is_host_relative

logger = logging.getLogger(__name__)

HEADER_NAME_CACHE_CONTROL = "Cache-Control"
HEADER_NAME_PRAGMA = "Pragma"
HEADER_NAME_EXPIRES = "Expires"
HEADER_VALUE_NO_CACHE = "no-cache"
HEADER_VALUE_MINUS_ONE = "-1"


async def _invoke(hook, context) -> Any:
    """Call a hook that may be a plain function or a coroutine function."""
    result = hook(context)
    if inspect.isawaitable(result):
        result = await result
    return result


class CookieAuthenticationHandler:
    """Authenticates requests from a ticket cookie and maintains that cookie."""

    def __init__(self, options: CookieAuthenticationOptions):
        self.options = options

    @property
    def config(self) -> CookieAuthConfig:
        return self.options.config

    async def authenticate(self, request: Request) -> AuthenticateResult:
        """
        Resolve the caller's ticket from the request cookie.

        Returns an anonymous result (``ticket is None``) when the cookie is
        missing, cannot be decoded, points at a missing session, has expired
        or is rejected by ``validate_identity``.
        """
        options = self.options
        store = options.session_store
        ticket = None
        renewal = PendingRenewal.none()
        try:
            cookie = options.cookie_manager.get_request_cookie(
                request, self.config.cookie_name
            )
            if not cookie or not cookie.strip():
                return AuthenticateResult()

            ticket = options.ticket_format.unprotect(cookie)
            if ticket is None:
                logger.warning("Unprotect ticket failed")
                return AuthenticateResult()

            if store is not None:
                claim = ticket.identity.find_first(SESSION_ID_CLAIM)
                if claim is None:
                    logger.warning("SessionId missing")
                    return AuthenticateResult()
                renewal = PendingRenewal.none(claim.value)
                ticket = await store.retrieve(claim.value)
                if ticket is None:
                    logger.warning("Identity missing in session store")
                    return AuthenticateResult(renewal=renewal)

            current_utc = options.clock.utcnow()
            properties = ticket.properties

            if properties.expires_utc is not None and properties.expires_utc < current_utc:
                logger.debug("Ticket expired")
                if store is not None:
                    await store.remove(renewal.session_key)
                return AuthenticateResult(renewal=renewal)

            renewal = self._check_sliding_expiration(
                current_utc, properties, renewal.session_key
            )

            context = CookieValidateIdentityContext(
                request, options, ticket.identity, properties
            )
            await _invoke(options.events.validate_identity, context)

            if context.identity is None:
                logger.debug("Ticket rejected by validate_identity")
                return AuthenticateResult(renewal=renewal.cancel())

            return AuthenticateResult(
                AuthenticationTicket(context.identity, context.properties), renewal
            )
        except Exception as e:
            decision = await self._handle_exception(
                ExceptionLocation.AUTHENTICATE, e, request, None, ticket
            )
            if decision.rethrow:
                raise
            if decision.replacement is None:
                renewal = renewal.cancel()
            return AuthenticateResult(decision.replacement, renewal)

    def _check_sliding_expiration(
        self, current_utc, properties: AuthenticationProperties, session_key: str | None
    ) -> PendingRenewal:
        issued_utc = properties.issued_utc
        expires_utc = properties.expires_utc
        if (
            issued_utc is None
            or expires_utc is None
            or not self.config.sliding_expiration
            or properties.allow_refresh is False
        ):
            return PendingRenewal.none(session_key)

        time_elapsed = current_utc - issued_utc
        time_remaining = expires_utc - current_utc
        if time_remaining < time_elapsed:
            logger.debug("Ticket past half its lifetime, renewal pending")
            return PendingRenewal(
                should_renew=True,
                renew_issued_utc=current_utc,
                renew_expires_utc=current_utc + (expires_utc - issued_utc),
                session_key=session_key,
            )
        return PendingRenewal.none(session_key)

    async def apply_grant(
        self,
        request: Request,
        response: ResponseBuilder,
        manager: AuthenticationManager,
        authentication: AuthenticateResult | None = None,
    ) -> None:
        """
        Write, renew or delete the ticket cookie for this response.

        Sign-in takes precedence over sign-out, which takes precedence over a
        pending renewal. Does nothing when none of them applies.

        Args:
            request: The current request
            response: Response head to decorate
            manager: Sign-in and sign-out requests recorded for this request
            authentication: Result of this request's ``authenticate`` call;
                resolved here when not supplied
        """
        options = self.options
        config = self.config
        events = options.events
        store = options.session_store

        if authentication is None:
            authentication = await self.authenticate(request)

        sign_in = manager.lookup_sign_in(config.authentication_type)
        sign_out = manager.lookup_sign_out(
            config.authentication_type, config.authentication_mode
        )
        renewal = authentication.renewal

        if sign_in is None and sign_out is None and not renewal.should_renew:
            return

        model = authentication.ticket
        try:
            cookie_options = self.build_cookie_options(request)

            if sign_in is not None:
                properties = sign_in.properties
                if properties.issued_utc is None:
                    properties.issued_utc = options.clock.utcnow()
                issued_utc = properties.issued_utc
                if properties.expires_utc is None:
                    properties.expires_utc = issued_utc + config.expire_time_span

                sign_in_context = CookieResponseSignInContext(
                    request,
                    response,
                    options,
                    config.authentication_type,
                    sign_in.identity,
                    properties,
                    cookie_options,
                )
                await _invoke(events.response_sign_in, sign_in_context)

                if sign_in_context.properties.is_persistent:
                    sign_in_context.cookie_options.expires = (
                        sign_in_context.properties.expires_utc
                        or issued_utc + config.expire_time_span
                    )

                model = AuthenticationTicket(
                    sign_in_context.identity, sign_in_context.properties
                )
                if store is not None:
                    if renewal.session_key is not None:
                        await store.remove(renewal.session_key)
                    session_key = await store.store(model)
                    model = self._session_ticket(session_key)

                cookie_value = options.ticket_format.protect(model)
                options.cookie_manager.append_response_cookie(
                    response, config.cookie_name, cookie_value, sign_in_context.cookie_options
                )

                signed_in_context = CookieResponseSignedInContext(
                    request,
                    response,
                    options,
                    config.authentication_type,
                    sign_in_context.identity,
                    sign_in_context.properties,
                )
                await _invoke(events.response_signed_in, signed_in_context)
                logger.debug(f"Signed in {config.authentication_type} ticket")

            elif sign_out is not None:
                if store is not None and renewal.session_key is not None:
                    await store.remove(renewal.session_key)

                sign_out_context = CookieResponseSignOutContext(
                    request, response, options, cookie_options
                )
                await _invoke(events.response_sign_out, sign_out_context)

                options.cookie_manager.delete_cookie(
                    response, config.cookie_name, sign_out_context.cookie_options
                )
                logger.debug(f"Signed out {config.authentication_type} ticket")

            elif renewal.should_renew and model is not None:
                properties = model.properties.copy()
                properties.issued_utc = renewal.renew_issued_utc
                properties.expires_utc = renewal.renew_expires_utc
                model = AuthenticationTicket(model.identity, properties)

                if store is not None and renewal.session_key is not None:
                    await store.renew(renewal.session_key, model)
                    model = self._session_ticket(renewal.session_key)

                cookie_value = options.ticket_format.protect(model)

                # Persistence is read from the full ticket, not the session marker
                if properties.is_persistent:
                    cookie_options.expires = renewal.renew_expires_utc

                options.cookie_manager.append_response_cookie(
                    response, config.cookie_name, cookie_value, cookie_options
                )
                logger.debug(f"Renewed {config.authentication_type} ticket")

            response.set_header(HEADER_NAME_CACHE_CONTROL, HEADER_VALUE_NO_CACHE)
            response.set_header(HEADER_NAME_PRAGMA, HEADER_VALUE_NO_CACHE)
            response.set_header(HEADER_NAME_EXPIRES, HEADER_VALUE_MINUS_ONE)

            await self._apply_return_url_redirect(
                request, response, sign_in is not None, sign_out is not None
            )
        except Exception as e:
            decision = await self._handle_exception(
                ExceptionLocation.APPLY_GRANT, e, request, response, model
            )
            if decision.rethrow:
                raise

    async def _apply_return_url_redirect(
        self,
        request: Request,
        response: ResponseBuilder,
        signed_in: bool,
        signed_out: bool,
    ) -> None:
        config = self.config
        should_login_redirect = (
            signed_in and config.login_path is not None and request.path == config.login_path
        )
        should_logout_redirect = (
            signed_out and config.logout_path is not None and request.path == config.logout_path
        )
        if not (should_login_redirect or should_logout_redirect) or response.status != 200:
            return

        redirect_uri = request.query_param(config.return_url_parameter)
        if not redirect_uri or not redirect_uri.strip():
            return
        if not is_host_relative(redirect_uri):
            logger.debug("Ignoring return URL that is not host-relative")
            return

        context = CookieApplyRedirectContext(request, response, self.options, redirect_uri)
        await _invoke(self.options.events.apply_redirect, context)

    async def apply_challenge(
        self,
        request: Request,
        response: ResponseBuilder,
        manager: AuthenticationManager,
    ) -> None:
        """Redirect a 401 response to the login path."""
        config = self.config
        if response.status != 401 or not config.login_path:
            return

        challenge = manager.lookup_challenge(
            config.authentication_type, config.authentication_mode
        )
        try:
            if challenge is not None:
                login_uri = challenge.properties.redirect_uri
                if not login_uri or not login_uri.strip():
                    login_uri = self.build_login_uri(request)

                context = CookieApplyRedirectContext(
                    request, response, self.options, login_uri
                )
                await _invoke(self.options.events.apply_redirect, context)
        except Exception as e:
            decision = await self._handle_exception(
                ExceptionLocation.APPLY_CHALLENGE, e, request, response, None
            )
            if decision.rethrow:
                raise

    async def apply_response(
        self,
        request: Request,
        response: ResponseBuilder,
        manager: AuthenticationManager,
        authentication: AuthenticateResult | None = None,
    ) -> None:
        """Run ``apply_grant`` then ``apply_challenge``."""
        await self.apply_grant(request, response, manager, authentication)
        await self.apply_challenge(request, response, manager)

    def build_login_uri(self, request: Request) -> str:
        """Absolute login URL carrying the current URL as the return URL."""
        config = self.config
        query = f"?{request.query_string}" if request.query_string else ""
        current_uri = request.path_base + request.path + query
        return (
            f"{request.scheme}://{request.host}{request.path_base}{config.login_path}"
            + build_query_string(config.return_url_parameter, current_uri)
        )

    def build_cookie_options(self, request: Request) -> CookieOptions:
        config = self.config
        if config.cookie_secure == CookieSecurePolicy.SAME_AS_REQUEST:
            secure = request.is_secure
        else:
            secure = config.cookie_secure == CookieSecurePolicy.ALWAYS

        return CookieOptions(
            domain=config.cookie_domain,
            path=config.cookie_path or "/",
            http_only=config.cookie_http_only,
            secure=secure,
            same_site=(
                config.cookie_same_site.value.capitalize()
                if config.cookie_same_site
                else None
            ),
        )

    def _session_ticket(self, session_key: str) -> AuthenticationTicket:
        identity = ClaimsIdentity(
            (Claim(SESSION_ID_CLAIM, session_key),), self.config.authentication_type
        )
        return AuthenticationTicket(identity, AuthenticationProperties())

    async def _handle_exception(
        self,
        location: ExceptionLocation,
        exception: Exception,
        request: Request,
        response: ResponseBuilder | None,
        ticket: AuthenticationTicket | None,
    ) -> ExceptionDecision:
        logger.error(f"Cookie authentication error in {location.value}: {exception!r}")
        context = CookieExceptionContext(
            request, response, self.options, location, exception, ticket
        )
        decision = await _invoke(self.options.events.on_exception, context)
        return decision if decision is not None else ExceptionDecision()

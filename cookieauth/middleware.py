"""
ASGI middleware for cookie authentication.

Authenticates each HTTP request before the wrapped application runs and
decorates the response head (cookies, cache headers, redirects) when the
application starts its response.

Several middlewares with different authentication types may be stacked; they
share one ``AuthenticationManager`` per request.
"""

from .handler import CookieAuthenticationHandler
from .manager import SCOPE_KEY, AuthenticationManager
from .options import CookieAuthenticationOptions
from .requests import Request
from .responses import ResponseBuilder
from .types import AuthenticateResult, AuthenticationTicket

SCOPE_AUTH_KEY = "cookieauth.tickets"


class CookieAuthenticationMiddleware:
    """
    Cookie authentication middleware.

    Sets ``scope["cookieauth.tickets"][authentication_type]`` to the
    authenticated ticket (or None) and installs the request's
    ``AuthenticationManager`` under ``scope["cookieauth.manager"]``.
    """

    def __init__(self, app, options: CookieAuthenticationOptions):
        self.app = app
        self.handler = CookieAuthenticationHandler(options)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        manager = scope.setdefault(SCOPE_KEY, AuthenticationManager())
        authentication = await self.enter(request)

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                message = await self.leave(request, manager, authentication, message)
            await send(message)

        await self.app(scope, receive, send_wrapper)

    async def enter(self, request: Request) -> AuthenticateResult:
        """Authenticate the request and publish the ticket in the scope."""
        authentication = await self.handler.authenticate(request)
        tickets = request.scope.setdefault(SCOPE_AUTH_KEY, {})
        tickets[self.handler.config.authentication_type] = authentication.ticket
        return authentication

    async def leave(
        self,
        request: Request,
        manager: AuthenticationManager,
        authentication: AuthenticateResult,
        message: dict,
    ) -> dict:
        """Apply grants and challenges to an ``http.response.start`` message."""
        response = ResponseBuilder.from_start_message(message)
        await self.handler.apply_response(request, response, manager, authentication)
        return response.to_start_message(message)


def get_authentication_ticket(
    request: Request, authentication_type: str = "Cookies"
) -> AuthenticationTicket | None:
    """Return the ticket the middleware authenticated for ``authentication_type``."""
    return request.scope.get(SCOPE_AUTH_KEY, {}).get(authentication_type)

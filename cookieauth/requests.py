from urllib.parse import parse_qs, unquote


class Request:
    """Read-only view of an ASGI HTTP scope.

    ``path`` is relative to ``path_base`` (the ASGI ``root_path``), so a
    configured login path can be compared against it directly.
    """

    def __init__(self, scope, receive=None):
        if scope["type"] != "http":
            raise RuntimeError("Request only supports HTTP scope")

        self.scope = scope
        self._receive = receive

    @property
    def method(self) -> str:
        return self.scope.get("method", "")

    @property
    def scheme(self) -> str:
        return self.scope.get("scheme", "http")

    @property
    def is_secure(self) -> bool:
        return self.scheme in ("https", "wss")

    @property
    def path_base(self) -> str:
        return self.scope.get("root_path", "")

    @property
    def path(self) -> str:
        path = self.scope.get("path", "")
        base = self.path_base
        if base and (path == base or path.startswith(base + "/")):
            path = path[len(base):]
        return path

    @property
    def query_string(self) -> str:
        return self.scope.get("query_string", b"").decode("latin-1")

    @property
    def query_params(self) -> dict:
        return {k: v if len(v) > 1 else v[0] for k, v in parse_qs(self.query_string).items()}

    def query_param(self, name: str) -> str | None:
        """First value of a query parameter, or None."""
        values = parse_qs(self.query_string).get(name)
        return values[0] if values else None

    @property
    def headers(self) -> dict:
        return {
            name.decode("latin-1").lower(): value.decode("latin-1")
            for name, value in self.scope.get("headers", [])
        }

    @property
    def host(self) -> str:
        host = self.headers.get("host")
        if host:
            return host
        server = self.scope.get("server")
        if not server:
            return ""
        name, port = server
        default_port = 443 if self.is_secure else 80
        return name if port in (None, default_port) else f"{name}:{port}"

    @property
    def cookies(self) -> dict:
        cookie_header = self.headers.get("cookie")
        if not cookie_header:
            return {}
        cookies = {}
        for cookie_pair in cookie_header.split(";"):
            cookie_pair = cookie_pair.strip()
            if "=" in cookie_pair:
                name, value = cookie_pair.split("=", 1)
                cookies[name.strip()] = unquote(value.strip())
            elif cookie_pair: # handles cookies with no value
                cookies[cookie_pair.strip()] = ""
        return cookies

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.method} {self.path_base}{self.path}>"

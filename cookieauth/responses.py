"""Mutable response head used while authentication decorates a response."""


class ResponseBuilder:
    """Status code and header list of an outgoing response.

    Headers are kept as an ordered list of ``(name, value)`` pairs so that
    repeated headers such as ``Set-Cookie`` survive.
    """

    __match_args__ = ("status", "headers")

    def __init__(self, status: int = 200, headers: list[tuple[str, str]] | None = None):
        self.status = status
        self.headers: list[tuple[str, str]] = list(headers or [])

    @classmethod
    def from_start_message(cls, message: dict) -> "ResponseBuilder":
        """Build from an ASGI ``http.response.start`` message."""
        return cls(
            message.get("status", 200),
            [
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in message.get("headers", [])
            ],
        )

    def to_start_message(self, message: dict) -> dict:
        """Return a copy of ``message`` carrying this status and headers."""
        return {
            **message,
            "status": self.status,
            "headers": [
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in self.headers
            ],
        }

    def status_code(self, status: int) -> None:
        self.status = status

    def header(self, name: str, value: str) -> None:
        """Append a header, keeping any existing values."""
        self.headers.append((name, value))

    def set_header(self, name: str, value: str) -> None:
        """Replace every value of ``name`` with a single value."""
        self.remove_header(name)
        self.headers.append((name, value))

    def remove_header(self, name: str) -> None:
        lowered = name.lower()
        self.headers = [(n, v) for n, v in self.headers if n.lower() != lowered]

    def get_header(self, name: str) -> str | None:
        lowered = name.lower()
        for header_name, value in self.headers:
            if header_name.lower() == lowered:
                return value
        return None

    def get_headers(self, name: str) -> list[str]:
        lowered = name.lower()
        return [value for header_name, value in self.headers if header_name.lower() == lowered]

    def redirect(self, url: str, status: int = 302) -> None:
        self.status = status
        self.set_header("Location", url)

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} "
            f"status={self.status} "
            f"headers={self.headers}"
            f">"
        )

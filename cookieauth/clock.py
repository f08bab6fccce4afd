"""Clock sources used for ticket expiry math."""

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def utcnow(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def utcnow(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Clock that returns a settable instant. Handy for tests and replays."""

    def __init__(self, now: datetime):
        self.now = now

    def utcnow(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> datetime:
        self.now = self.now + delta
        return self.now

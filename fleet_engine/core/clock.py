"""Time sources for the fleet engine.

Every wall-clock read in the core goes through a :data:`Clock` so that
elapsed duty time can be simulated in tests without sleeping.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


class ManualClock:
    """A clock that only moves when told to.

    Attributes:
        now: The instant returned by the next call.
    """

    __slots__ = ("now",)

    def __init__(self, start: datetime | None = None) -> None:
        self.now: datetime = start if start is not None else system_clock()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        """Move the clock forward by ``timedelta(**kwargs)`` and return it."""
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, instant: datetime) -> None:
        self.now = instant

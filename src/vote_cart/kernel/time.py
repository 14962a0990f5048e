"""
Time provider abstraction

Only persistence looks at the clock (snapshot timestamps and the cart
expiry window), but it must be injectable so expiry can be tested
without sleeping for a day.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class TimeProvider(Protocol):
    """Protocol for time providers"""

    def now(self) -> datetime:
        """Return current UTC datetime"""
        ...


class RealTimeProvider:
    """Production time provider using the system clock"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class TestTimeProvider:
    """
    Controllable clock for deterministic tests

    Starts at a fixed instant and only moves when told to.
    """

    __test__ = False  # not a pytest test class

    def __init__(self, initial_time: datetime | None = None) -> None:
        self._current_time = initial_time or datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._current_time

    def set_time(self, dt: datetime) -> None:
        self._current_time = dt

    def advance(self, delta: timedelta) -> None:
        self._current_time += delta

    def advance_hours(self, hours: float) -> None:
        self.advance(timedelta(hours=hours))

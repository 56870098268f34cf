"""
Clock sources for history entries and validation issues.

A clock is any zero-argument callable returning a timezone-aware
datetime. Successive calls must be monotonically non-decreasing.

The default is the system UTC clock. ManualClock gives deterministic
timestamps for tests and replays.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


class ManualClock:
    """
    Deterministic clock that advances by a fixed step on every read.

    Properties:
        current: the timestamp the next call will return
        step: how far the clock moves after each call

    Example:
        >>> clock = ManualClock(step=timedelta(seconds=1))
        >>> first, second = clock(), clock()
        >>> second - first
        datetime.timedelta(seconds=1)
    """

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(seconds=1)):
        if step < timedelta(0):
            raise ValueError("ManualClock step must not be negative")
        self.current = start or datetime(2000, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now

    def advance(self, delta: timedelta) -> None:
        if delta < timedelta(0):
            raise ValueError("ManualClock cannot move backwards")
        self.current = self.current + delta

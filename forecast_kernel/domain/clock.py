"""
Clock -- the single source of "today" for forecast runs.

Responsibility:
    Engines take their reference date (``as_of``) as an argument and never
    look at the wall clock.  Services that need a default reference date
    receive a Clock by constructor injection and read it once per run.

Architecture position:
    Kernel > Domain -- pure functional core.  ``SystemClock`` is the one
    sanctioned place where wall-clock time is read.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta, timezone


class Clock(ABC):
    """
    Injectable time source.

    Guarantees:
        - ``now()`` is timezone-aware.
        - ``today()`` is the calendar date of ``now()`` in that timezone.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock frozen at a chosen instant, for tests and replays.

    The instant only moves when ``set_time``, ``advance`` or
    ``advance_days`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    @classmethod
    def for_date(cls, day: date) -> "DeterministicClock":
        """Clock reading noon UTC on ``day``."""
        return cls(datetime.combine(day, time(12, 0), tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._current

    def set_time(self, moment: datetime) -> None:
        self._current = moment

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def advance_days(self, days: int) -> None:
        """Move forward by whole days, e.g. to step across a month end."""
        self._current += timedelta(days=days)

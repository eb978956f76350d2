"""Injectable source of "today" for month-window calculations."""

from abc import ABC, abstractmethod
from datetime import date


class Clock(ABC):
    """Abstract wall clock."""

    @abstractmethod
    def today(self) -> date:
        """Return the current calendar date."""


class SystemClock(Clock):
    """Local wall-clock date."""

    def today(self) -> date:
        return date.today()


class FixedClock(Clock):
    """Clock pinned to a given date; used by tests and backfill scripts."""

    def __init__(self, day: date):
        self._day = day

    def today(self) -> date:
        return self._day

    def set(self, day: date) -> None:
        self._day = day


__all__ = ["Clock", "SystemClock", "FixedClock"]

"""Month range policy for the subscription ledger.

Single source of truth for which months are billable and how `YYYY-MM` month
tokens are validated and displayed. The billable window runs from the fixed
subscription start month through the month of `clock.today()`, both inclusive,
so it grows by one month each time the calendar month advances.
"""

import re

from parish_ledger.errors import ValidationError
from parish_ledger.services.clock import Clock, SystemClock
from parish_ledger.services.locale_service import DEFAULT_LOCALE, format_month_name


MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")
DEFAULT_START_MONTH = "2025-07"


def parse_month(token: str) -> tuple[int, int] | None:
    """Parse a `YYYY-MM` token into (year, month), or None when malformed."""
    if not isinstance(token, str) or not MONTH_PATTERN.match(token):
        return None
    year, month = int(token[:4]), int(token[5:])
    if not 1 <= month <= 12:
        return None
    return year, month


def month_token(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


class MonthRangePolicy:
    """Billable month window [start_month, current month]."""

    def __init__(
        self,
        start_month: str = DEFAULT_START_MONTH,
        clock: Clock | None = None,
        locale: str = DEFAULT_LOCALE,
    ):
        """Initialize policy.

        Args:
            start_month: Fixed subscription epoch, `YYYY-MM`
            clock: Source of "today" (defaults to the system clock)
            locale: Babel locale for display names

        Raises:
            ValueError: If start_month is not a valid month token
        """
        parsed = parse_month(start_month)
        if parsed is None:
            raise ValueError(f"Invalid subscription start month: {start_month!r}")
        self._start = parsed
        self.clock = clock or SystemClock()
        self.locale = locale

    @property
    def start_month(self) -> str:
        return month_token(*self._start)

    def _current(self) -> tuple[int, int]:
        today = self.clock.today()
        return today.year, today.month

    def current_month(self) -> str:
        """Month token of the clock's current date."""
        return month_token(*self._current())

    def active_months(self) -> list[str]:
        """All billable months in chronological order.

        Empty when the clock reads a date before the subscription start month.
        """
        year, month = self._start
        end = self._current()
        months: list[str] = []
        while (year, month) <= end:
            months.append(month_token(year, month))
            year, month = (year + 1, 1) if month == 12 else (year, month + 1)
        return months

    def is_valid_month(self, token: str) -> bool:
        """True iff token is a well-formed month inside the billable window."""
        parsed = parse_month(token)
        if parsed is None:
            return False
        return self._start <= parsed <= self._current()

    def is_current_month(self, token: str) -> bool:
        return token == self.current_month()

    def validate_month(self, token: str) -> str:
        """Check a month token against the window.

        Returns:
            The token, unchanged

        Raises:
            ValidationError: For a malformed token, a month before the start
                month, or a month after the current month
        """
        parsed = parse_month(token)
        if parsed is None:
            raise ValidationError("Invalid month format. Use YYYY-MM")
        if parsed < self._start:
            raise ValidationError(f"Month must be {self.format_month(self.start_month)} or later")
        if parsed > self._current():
            raise ValidationError("Month cannot be in the future")
        return token

    def format_month(self, token: str) -> str:
        """Render a month token as 'Month Year' for display.

        Raises:
            ValidationError: If the token is malformed
        """
        parsed = parse_month(token)
        if parsed is None:
            raise ValidationError("Invalid month format. Use YYYY-MM")
        return format_month_name(*parsed, locale=self.locale)

    def month_filter_options(self) -> list[dict[str, str]]:
        """Dropdown options for the active months, most recent first."""
        current = self.current_month()
        options = []
        for token in reversed(self.active_months()):
            label = self.format_month(token)
            if token == current:
                label = f"{label} (This Month)"
            options.append({"label": label, "value": token})
        return options


__all__ = ["MONTH_PATTERN", "MonthRangePolicy", "parse_month", "month_token"]

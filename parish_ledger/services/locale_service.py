"""Locale formatting for months, amounts and dates.

Uses babel so display strings follow the configured locale
(default en_IN / INR).

Example:
    >>> format_month_name(2025, 8)
    'August 2025'
"""

import logging
from datetime import date

from babel import Locale, UnknownLocaleError
from babel.dates import format_date as babel_format_date
from babel.numbers import format_currency as babel_format_currency

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en_IN"
DEFAULT_CURRENCY = "INR"


def resolve_locale(locale_str: str | None) -> str:
    """Validate a locale string, falling back to DEFAULT_LOCALE.

    Args:
        locale_str: Locale identifier (e.g., 'en_IN')

    Returns:
        A locale babel can parse
    """
    if not locale_str:
        return DEFAULT_LOCALE
    try:
        Locale.parse(locale_str)
        return locale_str
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(f"Invalid locale '{locale_str}': {e}. Falling back to '{DEFAULT_LOCALE}'")
        return DEFAULT_LOCALE


def format_month_name(year: int, month: int, locale: str = DEFAULT_LOCALE) -> str:
    """Render a calendar month as 'Month Year' (e.g., 'August 2025')."""
    return babel_format_date(date(year, month, 1), format="MMMM y", locale=locale)


def format_amount(
    amount: int, currency: str = DEFAULT_CURRENCY, locale: str = DEFAULT_LOCALE
) -> str:
    """Format a whole-rupee amount with currency symbol (e.g., '₹25.00')."""
    return babel_format_currency(amount, currency, locale=locale)


def format_payment_date(value: date, locale: str = DEFAULT_LOCALE) -> str:
    """Format a payment date in the locale's medium style."""
    return babel_format_date(value, format="medium", locale=locale)


__all__ = [
    "DEFAULT_LOCALE",
    "DEFAULT_CURRENCY",
    "resolve_locale",
    "format_month_name",
    "format_amount",
    "format_payment_date",
]

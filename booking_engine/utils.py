"""Shared utilities used across the booking engine."""

from datetime import date, datetime
from typing import Union

WEEKDAY_ABBREVIATIONS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def to_date(value: Union[date, str]) -> date:
    """Coerce an ISO ``YYYY-MM-DD`` string (or a date/datetime) to a date.

    Raises:
        ValueError: If the string is not a valid ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def weekday_abbr(value: Union[date, str]) -> str:
    """Return the three-letter weekday abbreviation for a date.

    Examples:
        >>> weekday_abbr("2025-03-15")
        'Sat'
    """
    return WEEKDAY_ABBREVIATIONS[to_date(value).weekday()]


def format_duration(minutes: int) -> str:
    """Short label for a service duration.

    Examples:
        >>> format_duration(90)
        '1.5h'
        >>> format_duration(45)
        '45m'
    """
    if minutes >= 60:
        hours = minutes / 60
        return f"{hours:g}h"
    return f"{minutes}m"

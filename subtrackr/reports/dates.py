"""
Calendar date helpers.

Renewal dates are stored as plain "YYYY-MM-DD" strings. They are parsed into
`datetime.date` values, which carry no time of day and no timezone, so a date
never shifts by one day depending on where the user is.
"""

from datetime import date, timedelta
from typing import Any, Optional


def parse_local_date(value: Any) -> Optional[date]:
    """
    Parse a "YYYY-MM-DD" string into a calendar date.

    Returns None for empty or malformed input, or when any of year, month or
    day is zero. Extra "-" separated components are ignored. Month and day
    values past the end of their range roll over into the following month or
    year, so "2024-02-30" is 1 March 2024.
    """
    if not value or not isinstance(value, str):
        return None

    parts = value.split("-")
    if len(parts) < 3:
        return None

    try:
        year, month, day = (int(part) for part in parts[:3])
    except ValueError:
        return None

    if not year or not month or not day:
        return None

    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        return date(year, month, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return None


def start_of_today() -> date:
    """Today's date on the local calendar."""
    return date.today()


def days_between(a: date, b: date) -> int:
    """Whole days from a to b. Positive when b is after a."""
    return (b - a).days

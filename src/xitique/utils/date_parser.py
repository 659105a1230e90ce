"""Date parsing and schedule arithmetic utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from xitique.domain.entities import Frequency


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "next week", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("next "):
        period = date_str[5:]
        if period == "week":
            # Monday of next week
            return today + timedelta(days=(7 - today.weekday()))
        elif period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=1)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "week":
            return today - timedelta(days=today.weekday())
        elif period == "month":
            return today.replace(day=1)

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def add_period(start: date, frequency: Frequency, count: int) -> date:
    """Advance a date by ``count`` steps of the given frequency.

    Monthly steps are calendar months counted from ``start``, so the 31st
    clamps to the last day of shorter months instead of drifting.

    Args:
        start: Date to advance from
        frequency: Step size
        count: Number of steps (may be zero)

    Returns:
        The shifted date
    """
    if frequency == Frequency.DAILY:
        return start + timedelta(days=count)
    elif frequency == Frequency.WEEKLY:
        return start + timedelta(weeks=count)
    return start + relativedelta(months=count)


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (end - start).days

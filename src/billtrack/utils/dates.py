"""Date and billing-month utilities.

Billing months are strings of the form "YYYY-MM".
"""

import re
from datetime import date, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Accepts "today", "yesterday", "tomorrow" and any absolute date that
    dateutil understands ("2024-01-15", "Jan 15 2024", ...).

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    relative = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in relative:
        return relative[text]

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def format_month(value: date) -> str:
    """Format a date as its billing month."""
    return f"{value.year:04d}-{value.month:02d}"


def current_month(today: Optional[date] = None) -> str:
    """Return the billing month containing today."""
    return format_month(today or date.today())


def month_start(month_str: str) -> date:
    """Return the first day of a "YYYY-MM" month.

    Raises:
        ValueError: If month_str is not a valid month
    """
    match = _MONTH_RE.match(month_str or "")
    if match is None:
        raise ValueError(f"Invalid month '{month_str}': expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month '{month_str}': month must be 01-12")
    return date(year, month, 1)


def parse_month(value: str, today: Optional[date] = None) -> str:
    """Resolve user input to a "YYYY-MM" month.

    Supports "YYYY-MM", "this month", "last month", "next month" and any
    parseable date (its month is used).

    Raises:
        ValueError: If value cannot be resolved
    """
    text = value.strip().lower()
    today = today or date.today()

    if _MONTH_RE.match(text):
        month_start(text)
        return text

    offsets = {"this month": 0, "last month": -1, "next month": 1}
    if text in offsets:
        return format_month(today.replace(day=1) + relativedelta(months=offsets[text]))

    return format_month(parse_date(text, today=today))


def shift_month(month_str: str, months: int) -> str:
    """Move a month forward (or backward for negative values)."""
    return format_month(month_start(month_str) + relativedelta(months=months))


def month_difference(later: date, earlier: date) -> int:
    """Number of calendar months from earlier to later (ignores days)."""
    delta = relativedelta(later.replace(day=1), earlier.replace(day=1))
    return delta.years * 12 + delta.months

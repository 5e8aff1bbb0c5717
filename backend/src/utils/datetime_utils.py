"""
Datetime utilities for consistent timezone handling across the application.

All business dates are in the clinic's timezone (UTC-3). Month arithmetic is
done on plain dates.
"""

import calendar
import logging
from datetime import datetime, timezone, timedelta, date

logger = logging.getLogger(__name__)

# Clinic timezone constant (UTC-3, Brasília)
CLINIC_TZ = timezone(timedelta(hours=-3))


def clinic_now() -> datetime:
    """
    Get current clinic datetime (UTC-3).

    Returns:
        Current datetime with clinic timezone
    """
    return datetime.now(CLINIC_TZ)


def clinic_today() -> date:
    """Get the current date in the clinic timezone."""
    return clinic_now().date()


def start_of_month(d: date) -> date:
    """Return the first day of the month containing d."""
    return d.replace(day=1)


def add_months(d: date, months: int) -> date:
    """
    Add a number of months to a date.

    The day of month is clamped to the last day of the target month
    (e.g. Jan 31 + 1 month = Feb 28/29).
    """
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def previous_month_range(reference: date) -> tuple[date, date]:
    """
    Return the first and last day of the calendar month before reference.

    Used to look up the trailing revenue that selects the card fee tier.
    """
    first_of_current = start_of_month(reference)
    last_of_previous = first_of_current - timedelta(days=1)
    return start_of_month(last_of_previous), last_of_previous


def parse_date_string(date_str: str) -> date:
    """
    Parse a date string in YYYY-MM-DD format.

    Raises:
        ValueError: If date string cannot be parsed
    """
    if not date_str or not date_str.strip():
        raise ValueError("Date string cannot be empty")
    try:
        return datetime.strptime(date_str.strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD): {date_str}") from e

# backend/tracker/utils/date_utils.py
"""
Date utility functions for the Portfolio Time Machine.

Shared calendar helpers used by the date-range deriver and the market
data feed.

Usage:
    from tracker.utils.date_utils import calendar_days

    days = calendar_days(start_date, end_date)
"""

from datetime import date, timedelta


def calendar_days(start_date: date, end_date: date) -> list[date]:
    """
    Get every calendar day in a date range.

    Args:
        start_date: First date in range (inclusive)
        end_date: Last date in range (inclusive)

    Returns:
        List of dates sorted chronologically (empty if start > end)

    Example:
        >>> calendar_days(date(2024, 1, 1), date(2024, 1, 3))
        [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
    """
    days = []
    current = start_date

    while current <= end_date:
        days.append(current)
        current += timedelta(days=1)

    return days


def stepped_days(start_date: date, end_date: date, step_days: int) -> list[date]:
    """
    Get every `step_days`-th day from start_date, always including end_date.

    Returns an empty list if start_date > end_date.
    """
    if step_days < 1:
        raise ValueError(f"step_days must be positive, got {step_days}")

    days = []
    current = start_date

    while current <= end_date:
        days.append(current)
        current += timedelta(days=step_days)

    if days and days[-1] != end_date:
        days.append(end_date)

    return days


def clamp_date(d: date, upper: date) -> date:
    """Return d, or upper if d is later than upper."""
    return upper if d > upper else d

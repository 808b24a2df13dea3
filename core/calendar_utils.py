"""
calendar_utils.py
------------------
Calendar arithmetic for statement dates.

Issuers quote a statement day ("closes on the 31st") that does not exist in
every month. adjust_for_month_end() clips the target day to the last day of
the month, which is how Feb 28/29 and the 30-day months are billed.
"""

import calendar
from datetime import date, datetime

from dateutil.relativedelta import relativedelta


def to_date(value) -> date:
    """Truncates a datetime / Timestamp to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected a date, got {type(value).__name__}")


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def adjust_for_month_end(day: date, target_day: int) -> date:
    """
    Returns the date in the same month as `day` whose day-of-month is
    min(target_day, last day of that month).

    Raises:
        ValueError: If target_day is outside 1–31.
    """
    if not 1 <= target_day <= 31:
        raise ValueError(f"target_day must be between 1 and 31, got {target_day}")

    day = to_date(day)
    last_day = last_day_of_month(day.year, day.month)
    return day.replace(day=min(target_day, last_day))


def add_months(day: date, months: int) -> date:
    """Calendar month arithmetic. Jan 31 + 1 month = Feb 28 (or 29)."""
    return to_date(day) + relativedelta(months=months)

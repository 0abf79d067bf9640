"""
Working-day arithmetic used for all leave accounting.

Pure functions: no database access, no clock. Holiday dates are passed in by
the caller (see holiday_service.get_holiday_set).
"""
from datetime import date, timedelta
from typing import AbstractSet

from approval_engine.core.exceptions import InvalidRangeError

SATURDAY = 5
SUNDAY = 6


def is_weekend(day: date) -> bool:
    return day.weekday() in (SATURDAY, SUNDAY)


def is_working_day(day: date, holidays: AbstractSet[date]) -> bool:
    """A workday is any day that is neither Saturday, Sunday nor a listed holiday."""
    return not is_weekend(day) and day not in holidays


def count_working_days(start: date, end: date, holidays: AbstractSet[date]) -> int:
    """
    Count working days between start and end, both inclusive.

    Raises:
        InvalidRangeError: if start is after end
    """
    if start > end:
        raise InvalidRangeError(f"Start date {start} is after end date {end}")

    count = 0
    current = start
    while current <= end:
        if is_working_day(current, holidays):
            count += 1
        current += timedelta(days=1)
    return count

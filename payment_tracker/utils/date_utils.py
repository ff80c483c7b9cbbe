"""Date manipulation utilities"""

import calendar
from datetime import date, datetime
from typing import Union

from payment_tracker.domain.exceptions import InvalidDate

DateLike = Union[date, datetime, str]


def to_date(value: DateLike) -> date:
    """
    Normalize a date-like value to a plain calendar date.

    Accepts date, datetime (time of day dropped) or an ISO-8601 string.
    Full ISO datetime strings are reduced to their date part.

    Raises:
        InvalidDate: value is None, of another type, or not a valid date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) > 10:
                return datetime.fromisoformat(text).date()
            return date.fromisoformat(text)
        except ValueError as e:
            raise InvalidDate(f"Invalid date: {value!r}") from e
    raise InvalidDate(f"Invalid date: {value!r}")


def month_day(year: int, month: int, day: int) -> date:
    """
    Build a date, rolling month overflow into the next year and clamping
    the day to the last day of the target month (April 31 -> April 30).
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def month_key(value: date) -> str:
    """YYYY-MM bucket for a date"""
    return f"{value.year:04d}-{value.month:02d}"

"""Payment status engine - timeliness classification and due date projection"""

from datetime import date

from payment_tracker.domain.exceptions import InvalidDay
from payment_tracker.domain.models import PaymentStatus, StatusKind
from payment_tracker.utils.date_utils import DateLike, month_day, to_date


def classify(expected_date: DateLike, actual_date: DateLike) -> PaymentStatus:
    """
    Classify a payment by comparing when it was due and when it arrived.

    Both inputs are normalized to calendar dates, so the day offset is a
    whole number and time of day never changes the result.

    Returns:
        late with the days overdue, early with the days ahead, or on_time with 0

    Raises:
        InvalidDate: either input is not a calendar date

    Example:
        classify("2024-03-01", "2024-03-05") → late, 4
    """
    offset = (to_date(actual_date) - to_date(expected_date)).days

    if offset > 0:
        return PaymentStatus(status=StatusKind.LATE, days=offset)
    if offset == 0:
        return PaymentStatus(status=StatusKind.ON_TIME, days=0)
    return PaymentStatus(status=StatusKind.EARLY, days=abs(offset))


def validate_payment_day(payment_day: int) -> int:
    """Reject anything but an integer day of month in [1, 31]"""
    if isinstance(payment_day, bool) or not isinstance(payment_day, int):
        raise InvalidDay(f"Payment day must be an integer, got {payment_day!r}")
    if not 1 <= payment_day <= 31:
        raise InvalidDay(f"Payment day must be between 1 and 31, got {payment_day}")
    return payment_day


def next_due_date(payment_day: int, reference_date: DateLike | None = None) -> date:
    """
    Project a client's next monthly due date strictly after reference_date.

    The due day in the reference month is used unless it is on or before the
    reference date, in which case the same day next month is used. Days past
    the end of a month are clamped to its last day (day 31 in April → April 30).

    Args:
        payment_day: Recurring day of month (1-31)
        reference_date: Date to project from (default: today)

    Raises:
        InvalidDay: payment_day outside [1, 31]
        InvalidDate: reference_date is not a calendar date
    """
    validate_payment_day(payment_day)
    ref = date.today() if reference_date is None else to_date(reference_date)

    candidate = month_day(ref.year, ref.month, payment_day)
    if candidate <= ref:
        candidate = month_day(ref.year, ref.month + 1, payment_day)

    return candidate


def days_until(target: DateLike, reference_date: DateLike) -> int:
    """Signed number of days from reference_date to target"""
    return (to_date(target) - to_date(reference_date)).days

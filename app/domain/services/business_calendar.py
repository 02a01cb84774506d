"""
Business Calendar - Weekend-aware date arithmetic.

Every schedule date is derived from these functions. They are pure:
Saturday and Sunday never count toward a business-day offset, but a zero
offset returns the input unchanged even when it falls on a weekend.

Also owns the ISO yyyy-MM-dd boundary: parse_iso_date() at entry,
format_iso_date() at exit.
"""
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union

from app.domain.exceptions import InvalidDateError, InvalidDurationError

ONE_DAY = timedelta(days=1)

# date.weekday(): Monday=0 ... Saturday=5, Sunday=6
WEEKEND_DAYS = frozenset({5, 6})


def is_business_day(day: date) -> bool:
    """True for Monday through Friday."""
    return day.weekday() not in WEEKEND_DAYS


def _check_offset(n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise InvalidDurationError(n, field="business_days", minimum=0)


def add_business_days(start: date, n: int) -> date:
    """
    Move forward until n business days have been counted.

    Args:
        start: Anchor date (not counted itself)
        n: Number of business days, >= 0

    Returns:
        The date on which the n-th business day after start falls
    """
    _check_offset(n)
    current = start
    counted = 0
    while counted < n:
        current += ONE_DAY
        if is_business_day(current):
            counted += 1
    return current


def subtract_business_days(start: date, n: int) -> date:
    """Mirror of add_business_days, walking backward."""
    _check_offset(n)
    current = start
    counted = 0
    while counted < n:
        current -= ONE_DAY
        if is_business_day(current):
            counted += 1
    return current


def compute_end_date(start: date, duration_days: int) -> date:
    """
    Last working day of a task that starts on `start`.

    The start day is day 1, so the end is (duration - 1) business days later.
    """
    if isinstance(duration_days, bool) or not isinstance(duration_days, int) or duration_days < 1:
        raise InvalidDurationError(duration_days, field="duration_days")
    return add_business_days(start, duration_days - 1)


def compute_start_date(end: date, duration_days: int) -> date:
    """First working day of a task that must finish on `end`."""
    if isinstance(duration_days, bool) or not isinstance(duration_days, int) or duration_days < 1:
        raise InvalidDurationError(duration_days, field="duration_days")
    return subtract_business_days(end, duration_days - 1)


def count_business_days(start: date, end: date) -> int:
    """Business days in the inclusive range [start, end]; 0 when end < start."""
    return sum(1 for day in iter_calendar_days(start, end) if is_business_day(day))


def iter_calendar_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in the inclusive range [start, end]."""
    current = start
    while current <= end:
        yield current
        current += ONE_DAY


def parse_iso_date(value: Union[str, date, None], field: str = "date") -> date:
    """
    Parse an ISO yyyy-MM-dd string.

    date instances pass through; datetimes are truncated to their date.

    Raises:
        InvalidDateError: If the value is missing or malformed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(value, field=field)
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDateError(value, field=field)


def format_iso_date(value: Optional[date]) -> Optional[str]:
    """Render a date as yyyy-MM-dd (None stays None)."""
    if value is None:
        return None
    return value.strftime("%Y-%m-%d")

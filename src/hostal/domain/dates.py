"""Calendar-date interval helpers.

A stay occupies the nights [check_in, check_out): the check-out day itself is
free for the next guest. Every aggregation window in this package is turned
into the same half-open form before comparing.

Dates are date-only values. Strings are parsed as plain YYYY-MM-DD calendar
dates; no timezone is ever applied, so "2024-06-01" can never drift to the
31st by a UTC offset.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Iterator

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

ONE_DAY = timedelta(days=1)


class ValidationError(Exception):
    """Input rejected before any store access."""


class InvalidDateError(ValidationError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid date {value!r}: expected YYYY-MM-DD")


class InvalidDateRangeError(ValidationError):
    def __init__(self, start: date, end: date, message: str | None = None) -> None:
        self.start = start
        self.end = end
        super().__init__(
            message or f"check-out ({end.isoformat()}) must be after check-in ({start.isoformat()})"
        )


def parse_date(value: date | datetime | str) -> date:
    """Normalize a calendar date.

    Accepts a date, a datetime (its date part, taken as-is) or a strict
    YYYY-MM-DD string.

    Raises:
        InvalidDateError: For anything else, including impossible dates.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _ISO_DATE.match(value.strip()):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise InvalidDateError(value)
    raise InvalidDateError(value)


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Half-open overlap: [a_start, a_end) and [b_start, b_end) share a night."""
    return a_start < b_end and b_start < a_end


def occupies_day(check_in: date, check_out: date, day: date) -> bool:
    return check_in <= day < check_out


def validate_stay(check_in: date, check_out: date) -> None:
    """Reject zero-night and inverted stays.

    Raises:
        InvalidDateRangeError: If check_out is not strictly after check_in.
    """
    if check_out <= check_in:
        raise InvalidDateRangeError(check_in, check_out)


def validate_window(start: date, end: date, *, max_days: int | None = None) -> None:
    """Validate an inclusive reporting window [start, end].

    Raises:
        InvalidDateRangeError: If end precedes start or the window is too long.
    """
    if end < start:
        raise InvalidDateRangeError(
            start, end, f"end date ({end.isoformat()}) must not precede start date ({start.isoformat()})"
        )
    if max_days is not None and window_days(start, end) > max_days:
        raise InvalidDateRangeError(start, end, f"Date range cannot exceed {max_days} days")


def next_day(day: date) -> date:
    return day + ONE_DAY


def nights(check_in: date, check_out: date) -> int:
    return (check_out - check_in).days


def window_days(start: date, end: date) -> int:
    """Number of calendar days in the inclusive window [start, end]."""
    return (end - start).days + 1


def inclusive_window(start: date, end: date) -> tuple[date, date]:
    """Turn an inclusive [start, end] window into half-open [start, end + 1)."""
    return start, next_day(end)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day of the inclusive window [start, end]."""
    day = start
    while day <= end:
        yield day
        day += ONE_DAY

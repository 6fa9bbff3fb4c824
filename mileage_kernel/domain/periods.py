"""
Period helpers -- the derived link between trip records and submissions.

A trip record carries no reference to a submission.  The submission that
governs it is found by ``period_of(drive_date)``, and the records a
settlement sums are found by ``month_bounds(year, month)``.  Both are pure.
"""

from __future__ import annotations

import calendar
from datetime import date

from mileage_kernel.exceptions import ValidationError


def validate_period(year: int, month: int) -> None:
    """Raise ValidationError unless month is 1..12 and year is positive."""
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError("month", f"must be between 1 and 12, got {month!r}")
    if not isinstance(year, int) or year < 1:
        raise ValidationError("year", f"must be a positive integer, got {year!r}")


def period_of(drive_date: date) -> tuple[int, int]:
    """(year, month) of a drive date."""
    return drive_date.year, drive_date.month


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month, both inclusive."""
    validate_period(year, month)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def format_period(year: int, month: int) -> str:
    return f"{year}-{month:02d}"

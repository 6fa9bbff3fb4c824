"""
Numeric input parsing shared by drivers, rates, and distances.

Form input arrives as strings, ints, floats, or Decimals.  Everything is
normalised to ``Decimal`` here; floats go through ``str()`` so that 0.1 stays
0.1.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from mileage_kernel.exceptions import ValidationError


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty after stripping."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def try_decimal(value: Any) -> Decimal | None:
    """Parse a finite Decimal, or return None if the value is not a number."""
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not result.is_finite():
        return None
    return result


def parse_decimal(
    value: Any,
    field: str,
    *,
    allow_zero: bool = True,
) -> Decimal:
    """
    Parse a required non-negative number.

    Raises:
        ValidationError: if the value is missing, not a finite number,
            negative, or zero when ``allow_zero`` is False.
    """
    if is_blank(value):
        raise ValidationError(field, "is required")
    result = try_decimal(value)
    if result is None:
        raise ValidationError(field, f"must be a number, got {value!r}")
    if result < 0:
        raise ValidationError(field, f"must not be negative, got {result}")
    if not allow_zero and result == 0:
        raise ValidationError(field, "must be greater than zero")
    return result


def usable_positive(value: Any) -> Decimal | None:
    """The value as a Decimal if it is a number greater than zero, else None."""
    result = try_decimal(value)
    if result is None or result <= 0:
        return None
    return result

"""
Parse-or-default helpers applied at every input boundary.

Config load, config import and form field changes all pass raw values
through these before any arithmetic, so a missing, non-numeric, NaN,
infinite or negative value becomes 0 instead of propagating.
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Union

Number = Union[int, float]

# Ceiling for any single rate, count or distance; keeps every product finite
MAX_INPUT = 10 ** 12


def to_number(value: Any, default: Number = 0) -> Number:
    """
    Parse a value as a finite number, returning `default` when it cannot be.

    Integral results are returned as int so whole-currency amounts stay exact.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip().replace(',', '')
        if not text:
            return default
        try:
            number = float(text)
        except ValueError:
            return default
    else:
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return default

    # Huge ints and "1e400" style strings are not usable amounts
    try:
        as_float = float(number)
    except OverflowError:
        return default
    if not math.isfinite(as_float):
        return default
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def to_non_negative(value: Any) -> Number:
    """Parse a value as a number and clamp it to [0, MAX_INPUT]."""
    return min(max(0, to_number(value)), MAX_INPUT)


def to_quantity(value: Any) -> int:
    """Parse an item quantity: a non-negative whole count."""
    return int(to_non_negative(value))


def to_flag(value: Any, default: bool = False) -> bool:
    """Parse a yes/no input."""
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ('true', 'yes', 'y', '1', 'on'):
            return True
        if text in ('false', 'no', 'n', '0', 'off', ''):
            return False
        return default
    return bool(value)


def to_text(value: Any, default: str = '') -> str:
    if value is None:
        return default
    return str(value)


def round_currency(amount: Number) -> int:
    """Round to the nearest whole currency unit, halves rounding up.

    Amounts that do not fit a float (or are inf/NaN) come back as 0.
    """
    try:
        value = float(amount)
    except OverflowError:
        return 0
    if not math.isfinite(value):
        return 0
    # Floats this large are already whole and exceed Decimal's default precision
    if abs(value) >= 2 ** 53:
        return int(value)
    return int(Decimal(repr(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))

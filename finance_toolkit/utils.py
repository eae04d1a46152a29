"""Utility functions for the finance toolkit.

This module provides helpers for turning user input into ``Decimal`` values.
Calculators never halt on bad numbers: ``to_decimal`` coerces anything
missing, unparsable or non-finite to a documented fallback (``0`` unless the
caller says otherwise). The stricter ``decimal_from_str``, ``parse_amount``
and ``parse_percent`` raise ``ValueError`` and are used where a front end
wants to reject the input instead.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, getcontext
from typing import Optional

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

ZERO = Decimal("0")


def to_decimal(value: object, fallback: Decimal = ZERO) -> Decimal:
    """Coerce ``value`` to a finite ``Decimal`` or return ``fallback``.

    Strings may contain thousands separators (``"25,000"``). ``None``, empty
    strings, booleans, NaN and infinities all map to ``fallback``.
    """
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        # go through str so 0.1 becomes Decimal("0.1"), not its binary expansion
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return fallback
    else:
        cleaned = str(value).replace(",", "").strip()
        if not cleaned:
            return fallback
        try:
            result = Decimal(cleaned)
        except InvalidOperation:
            return fallback
    if not result.is_finite():
        return fallback
    return result


def to_int(value: object, fallback: int = 0) -> int:
    """Coerce ``value`` to an ``int`` via ``to_decimal``, truncating fractions."""
    number = to_decimal(value, Decimal(fallback))
    return int(number)


def clamp(value: Decimal, low: Optional[Decimal] = None, high: Optional[Decimal] = None) -> Decimal:
    """Limit ``value`` to ``[low, high]``; either bound may be omitted."""
    if low is not None and value < low:
        return low
    if high is not None and value > high:
        return high
    return value


def non_negative(value: object) -> Decimal:
    return clamp(to_decimal(value), ZERO)


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails or the value is not
    finite.
    """
    try:
        cleaned = value.replace(",", "")
        result = Decimal(cleaned)
    except Exception as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse a money amount with optional ``k``/``m`` suffixes.

    Accepts plain numbers ("25000", "25,000") and shorthand such as "25k"
    meaning 25 000 or "1.2m" meaning 1 200 000.
    """
    cleaned = value.strip().lower().replace(",", "")
    factor = Decimal("1")
    if cleaned.endswith("k"):
        factor = Decimal("1000")
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = Decimal("1000000")
        cleaned = cleaned[:-1]
    try:
        return decimal_from_str(cleaned) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc


def parse_percent(value: str) -> Decimal:
    """Parse a percentage string such as "6.9" or "6.9%" into percent units."""
    cleaned = value.strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    try:
        return decimal_from_str(cleaned)
    except ValueError as exc:
        raise ValueError(f"Invalid percentage: {value}") from exc

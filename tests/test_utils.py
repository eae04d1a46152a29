from decimal import Decimal

import pytest

from finance_toolkit.utils import (
    clamp,
    decimal_from_str,
    non_negative,
    parse_amount,
    parse_percent,
    to_decimal,
    to_int,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("25,000", Decimal("25000")),
        (" 6.9 ", Decimal("6.9")),
        (0.1, Decimal("0.1")),
        (12, Decimal("12")),
        (Decimal("3.50"), Decimal("3.50")),
    ],
)
def test_to_decimal_parses(value, expected):
    assert to_decimal(value) == expected


@pytest.mark.parametrize("value", [None, "", "abc", float("nan"), float("inf"), "Infinity", True, [1]])
def test_to_decimal_falls_back(value):
    assert to_decimal(value) == 0
    assert to_decimal(value, Decimal("7")) == Decimal("7")


def test_to_int_truncates():
    assert to_int("12.9") == 12
    assert to_int("junk", 3) == 3


def test_clamp_and_non_negative():
    assert clamp(Decimal("150"), Decimal("0"), Decimal("100")) == Decimal("100")
    assert clamp(Decimal("-1"), Decimal("0")) == Decimal("0")
    assert clamp(Decimal("5")) == Decimal("5")
    assert non_negative("-20") == 0
    assert non_negative("20") == Decimal("20")


def test_parse_amount_suffixes():
    assert parse_amount("25k") == Decimal("25000")
    assert parse_amount("1.2m") == Decimal("1200000")
    assert parse_amount("450,000") == Decimal("450000")
    with pytest.raises(ValueError):
        parse_amount("lots")


def test_parse_percent():
    assert parse_percent("6.9%") == Decimal("6.9")
    assert parse_percent("20") == Decimal("20")
    with pytest.raises(ValueError):
        parse_percent("x%")


def test_decimal_from_str_rejects_non_finite():
    with pytest.raises(ValueError):
        decimal_from_str("NaN")

"""Retirement savings projection.

Compounds the current balance and a fixed monthly contribution at a constant
monthly return until retirement, and discounts the result by monthly
inflation to express it in today's money.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List

from .data_models import RetirementProjection, YearlyPoint
from .utils import ZERO, to_decimal


def _whole_units(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def future_value(present: Decimal, contribution: Decimal, rate: Decimal, months: int) -> Decimal:
    """Closed-form future value of ``present`` plus an ordinary annuity."""
    growth = (1 + rate) ** months
    if rate == 0:
        return present * growth + contribution * months
    return present * growth + contribution * (growth - 1) / rate


def project(
    current_age: object,
    retire_age: object,
    current_savings: object,
    monthly_contribution: object,
    annual_return_percent: object,
    annual_inflation_percent: object,
) -> RetirementProjection:
    """Project savings forward to retirement.

    Returns nominal and inflation-adjusted future values plus a yearly
    series sampled every twelfth month and rounded to whole currency units.
    When retirement age is not after the current age the savings are returned
    unchanged with an empty series.
    """
    savings = to_decimal(current_savings)
    contribution = to_decimal(monthly_contribution)
    years = to_decimal(retire_age) - to_decimal(current_age)
    months = max(0, int(years * 12))
    rate = to_decimal(annual_return_percent) / Decimal(1200)
    inflation = to_decimal(annual_inflation_percent) / Decimal(1200)

    if months <= 0:
        return RetirementProjection(
            nominal_future_value=savings,
            real_future_value=savings,
            yearly_series=(),
        )

    nominal = future_value(savings, contribution, rate, months)
    real = nominal / (1 + inflation) ** months if inflation > 0 else nominal

    series: List[YearlyPoint] = []
    balance = savings
    for month in range(1, months + 1):
        balance = balance * (1 + rate) + contribution
        if month % 12 == 0:
            discounted = balance / (1 + inflation) ** month if inflation > 0 else balance
            series.append(
                YearlyPoint(
                    year=month // 12,
                    nominal=_whole_units(balance),
                    real=_whole_units(discounted),
                )
            )

    return RetirementProjection(
        nominal_future_value=nominal,
        real_future_value=real,
        yearly_series=tuple(series),
    )

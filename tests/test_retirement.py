from decimal import Decimal

import pytest

from finance_toolkit.data_models import YearlyPoint
from finance_toolkit.retirement import future_value, project


def test_no_time_to_retirement_returns_savings():
    result = project(65, 60, 1000, 500, 7, 3)
    assert result.nominal_future_value == Decimal("1000")
    assert result.real_future_value == Decimal("1000")
    assert result.yearly_series == ()


def test_zero_return_adds_contributions():
    result = project(30, 31, 1000, 100, 0, 0)
    assert result.nominal_future_value == Decimal("2200")
    assert result.real_future_value == Decimal("2200")
    assert result.yearly_series == (YearlyPoint(year=1, nominal=2200, real=2200),)


def test_closed_form_matches_monthly_simulation():
    result = project(30, 40, 10000, 500, 6, 0)
    assert float(result.nominal_future_value) == pytest.approx(100133.64, abs=0.01)
    assert len(result.yearly_series) == 10
    assert [p.year for p in result.yearly_series] == list(range(1, 11))
    assert abs(result.yearly_series[-1].nominal - float(result.nominal_future_value)) <= 1


def test_inflation_discounts_real_value():
    result = project(30, 40, 10000, 500, 6, 2.5)
    months = 120
    inflation = Decimal("2.5") / Decimal(1200)
    expected = result.nominal_future_value / (1 + inflation) ** months
    assert result.real_future_value == expected
    assert result.real_future_value < result.nominal_future_value
    assert all(p.real < p.nominal for p in result.yearly_series)


def test_series_is_sampled_yearly_and_rounded():
    result = project(40, 42, 0, 1000, 12, 0)
    assert len(result.yearly_series) == 2
    assert all(isinstance(p.nominal, int) for p in result.yearly_series)
    first = future_value(Decimal(0), Decimal(1000), Decimal("0.01"), 12)
    assert result.yearly_series[0].nominal == round(float(first))


def test_invalid_inputs_fall_back_to_zero():
    result = project("x", 35, None, "", 5, "nan")
    assert result.nominal_future_value == 0
    assert len(result.yearly_series) == 35

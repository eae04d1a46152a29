"""Data models for the finance toolkit.

This module defines dataclasses representing the inputs and results of every
calculator: loan terms and extra-payment rules, amortization schedule rows,
mortgage breakdowns, exchange-rate tables, tax brackets, retirement projections
and trade results. Using dataclasses makes it easy to construct, inspect and
serialize these structures. Results are frozen because they are derived once
per computation and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ExtraPayments:
    """Extra money applied to the principal on top of the base instalment.

    Attributes
    ----------
    monthly: Decimal
        Added every month.
    yearly: Decimal
        Added every twelfth month (months 12, 24, ...).
    once_month: int
        Month number of a single one-off payment. ``0`` disables it.
    once_amount: Decimal
        Amount of the one-off payment.
    """

    monthly: Decimal = Decimal("0")
    yearly: Decimal = Decimal("0")
    once_month: int = 0
    once_amount: Decimal = Decimal("0")

    @property
    def active(self) -> bool:
        return (
            self.monthly > 0
            or self.yearly > 0
            or (self.once_month > 0 and self.once_amount > 0)
        )


@dataclass(frozen=True)
class LoanTerms:
    """Inputs of a single amortization computation."""

    principal: Decimal
    annual_rate_percent: Decimal
    term_years: Decimal
    extra: ExtraPayments = field(default_factory=ExtraPayments)


@dataclass(frozen=True)
class ScheduleRow:
    """One month of an amortization schedule.

    ``total_payment`` is the base instalment plus the extra payment for the
    month; ``principal_paid`` is the amount that actually reduced the balance.
    """

    month: int
    base_payment: Decimal
    extra: Decimal
    total_payment: Decimal
    interest: Decimal
    principal_paid: Decimal
    ending_balance: Decimal


@dataclass(frozen=True)
class AmortizationResult:
    base_payment: Decimal
    rows: Tuple[ScheduleRow, ...]
    total_interest: Decimal
    total_paid: Decimal
    months_to_payoff: int
    # True when the schedule was cut by the safety ceiling instead of payoff
    hit_safety_cap: bool = False


@dataclass(frozen=True)
class MortgageResult:
    principal: Decimal
    base_monthly: Decimal
    schedule: AmortizationResult
    total_interest: Decimal
    monthly_extras: Decimal
    total_monthly: Decimal
    total_paid: Decimal


class RateStatus(str, Enum):
    """State of the live exchange-rate refresh."""

    OFFLINE = "offline"
    LOADING = "loading"
    LIVE = "live"


@dataclass(frozen=True)
class RateTable:
    """Exchange rates relative to the pivot currency.

    Attributes
    ----------
    rates: Mapping[str, Decimal]
        Currency code to rate; the pivot currency has rate ``1``.
    fetched_at: Optional[int]
        Epoch milliseconds of the fetch that produced the table, ``None`` for
        the built-in defaults.
    """

    rates: Mapping[str, Decimal]
    fetched_at: Optional[int] = None

    def get(self, code: str) -> Optional[Decimal]:
        return self.rates.get(code.upper())

    def codes(self) -> List[str]:
        return sorted(self.rates)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a live rate fetch: either a table or a failure reason."""

    table: Optional[RateTable] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.table is not None

    @classmethod
    def success(cls, table: RateTable) -> "FetchResult":
        return cls(table=table)

    @classmethod
    def failure(cls, reason: str) -> "FetchResult":
        return cls(error=reason)


@dataclass(frozen=True)
class TaxBracket:
    """A marginal tax bracket.

    ``upper_bound`` of ``None`` marks the unbounded top bracket. ``rate`` is a
    fraction (``Decimal("0.15")`` for 15 %).
    """

    upper_bound: Optional[Decimal]
    rate: Decimal

    @property
    def bounded(self) -> bool:
        return self.upper_bound is not None


@dataclass(frozen=True)
class BracketSlice:
    cap: Decimal
    taxable_slice: Decimal
    rate: Decimal
    tax_due: Decimal


@dataclass(frozen=True)
class TaxResult:
    total_tax: Decimal
    effective_rate: Decimal
    breakdown: Tuple[BracketSlice, ...]


@dataclass(frozen=True)
class YearlyPoint:
    year: int
    nominal: int
    real: int


@dataclass(frozen=True)
class RetirementProjection:
    nominal_future_value: Decimal
    real_future_value: Decimal
    yearly_series: Tuple[YearlyPoint, ...]


@dataclass(frozen=True)
class CryptoTradeResult:
    cost: Decimal
    proceeds: Decimal
    buy_fee: Decimal
    sell_fee: Decimal
    pnl: Decimal
    roi: Decimal
    break_even_price: Decimal


@dataclass(frozen=True)
class StockSplitResult:
    factor: Decimal
    new_shares: Decimal
    new_price: Decimal
    value_before: Decimal
    value_after: Decimal


def as_floats(values: Dict[str, object]) -> Dict[str, object]:
    """Convert ``Decimal`` values of a flat mapping to floats for JSON output."""
    return {k: float(v) if isinstance(v, Decimal) else v for k, v in values.items()}

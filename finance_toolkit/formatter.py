"""Output helpers for the finance toolkit.

This module renders results in a tabular text format for the terminal, formats
money for display and serializes amortization schedules to CSV. We rely on
built-in printing and the ``csv`` module.
"""

from __future__ import annotations

import csv
import io
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Dict, Iterable, List

from .data_models import (
    AmortizationResult,
    MortgageResult,
    RetirementProjection,
    ScheduleRow,
    TaxResult,
)

CURRENCY_OPTIONS = {
    "USD": {"label": "US dollar", "prefix": "$", "suffix": ""},
    "EUR": {"label": "Euro", "prefix": "€", "suffix": ""},
    "GBP": {"label": "British pound", "prefix": "£", "suffix": ""},
    "TRY": {"label": "Turkish lira", "prefix": "₺", "suffix": ""},
    "AUD": {"label": "Australian dollar", "prefix": "A$", "suffix": ""},
    "CAD": {"label": "Canadian dollar", "prefix": "C$", "suffix": ""},
    "JPY": {"label": "Japanese yen", "prefix": "¥", "suffix": ""},
}

CSV_HEADER = ["Month", "Payment", "Interest", "Principal", "Balance"]
CSV_HEADER_EXTENDED = ["Month", "Base Payment", "Extra", "Payment", "Interest", "Principal", "Balance"]


def money(value: Decimal) -> str:
    """Fix a monetary value to two decimals, rounding halves up."""
    return str(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_money(value: object, currency: str = "USD") -> str:
    """Format ``value`` with the currency's symbol, e.g. ``$1,234.50``.

    Unknown codes fall back to a trailing code (``1,234.50 XYZ``).
    """
    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    meta = CURRENCY_OPTIONS.get(currency.upper())
    sign = "-" if amount < 0 else ""
    digits = f"{abs(amount):,.2f}"
    if meta is None:
        return f"{sign}{digits} {currency.upper()}"
    return f"{sign}{meta['prefix']}{digits}{meta['suffix']}"


def schedule_rows(schedule: Iterable[ScheduleRow], extended: bool = False) -> List[List[str]]:
    """Return the schedule as rows of strings, header first."""
    rows: List[List[str]] = [list(CSV_HEADER_EXTENDED if extended else CSV_HEADER)]
    for r in schedule:
        if extended:
            rows.append(
                [
                    str(r.month),
                    money(r.base_payment),
                    money(r.extra),
                    money(r.total_payment),
                    money(r.interest),
                    money(r.principal_paid),
                    money(r.ending_balance),
                ]
            )
        else:
            rows.append(
                [
                    str(r.month),
                    money(r.total_payment),
                    money(r.interest),
                    money(r.principal_paid),
                    money(r.ending_balance),
                ]
            )
    return rows


def schedule_to_csv(schedule: Iterable[ScheduleRow], extended: bool = False) -> str:
    """Serialize a schedule to CSV text.

    Every field is quoted and embedded quotes are doubled; lines are joined
    with ``\\n`` and there is no trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(schedule_rows(schedule, extended))
    return buffer.getvalue().rstrip("\n")


def write_schedule_csv(path: Path, schedule: Iterable[ScheduleRow], extended: bool = False) -> None:
    """Export a schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(schedule_to_csv(schedule, extended))
        f.write("\n")


def print_loan_summary(result: AmortizationResult, currency: str = "USD") -> None:
    """Print the loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Base monthly       : {format_money(result.base_payment, currency)}")
    print(f"Months to payoff   : {result.months_to_payoff}")
    print(f"Total interest     : {format_money(result.total_interest, currency)}")
    print(f"Total paid         : {format_money(result.total_paid, currency)}")
    if result.hit_safety_cap:
        print("Warning            : schedule stopped before payoff; check the inputs")
    print("-" * 72)


def print_comparison(comparison: Dict[str, object], currency: str = "USD") -> None:
    print(f"Baseline interest  : {format_money(comparison['baseline_total_interest'], currency)}")
    print(f"Interest saved     : {format_money(comparison['interest_saved'], currency)}")
    if comparison.get("months_saved"):
        print(f"Term reduction     : {int(comparison['months_saved'])} months")


def print_schedule(schedule: Iterable[ScheduleRow], extended: bool = False) -> None:
    """Print the amortization schedule as a tab separated table."""
    for row in schedule_rows(schedule, extended):
        print("\t".join(row))


def print_mortgage(result: MortgageResult, currency: str = "USD") -> None:
    print("Mortgage")
    print("-" * 72)
    print(f"Loan principal     : {format_money(result.principal, currency)}")
    print(f"Base monthly (P&I) : {format_money(result.base_monthly, currency)}")
    print(f"Monthly extras     : {format_money(result.monthly_extras, currency)}")
    print(f"Total monthly      : {format_money(result.total_monthly, currency)}")
    print(f"Total interest     : {format_money(result.total_interest, currency)}")
    print(f"Total cost         : {format_money(result.total_paid, currency)}")
    print("-" * 72)


def print_tax(result: TaxResult, currency: str = "USD") -> None:
    print(f"{'Cap':>16s} {'Slice':>16s} {'Rate':>8s} {'Tax':>16s}")
    for s in result.breakdown:
        print(f"{s.cap:16,.2f} {s.taxable_slice:16,.2f} {s.rate * 100:7.2f}% {s.tax_due:16,.2f}")
    print("-" * 72)
    print(f"Total tax          : {format_money(result.total_tax, currency)}")
    print(f"Effective rate     : {result.effective_rate * 100:.2f}%")


def print_projection(result: RetirementProjection, currency: str = "USD") -> None:
    print(f"Nominal at retirement : {format_money(result.nominal_future_value, currency)}")
    print(f"In today's money      : {format_money(result.real_future_value, currency)}")
    if result.yearly_series:
        print(f"{'Year':>6s} {'Nominal':>16s} {'Real':>16s}")
        for p in result.yearly_series:
            print(f"{p.year:6d} {p.nominal:16,d} {p.real:16,d}")

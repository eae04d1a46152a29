"""Core calculation engine for loans and mortgages.

This module implements the fixed-payment (annuity) amortization schedule with
optional extra-payment rules, and the mortgage composer that derives the loan
principal from a home price and down payment and adds recurring escrow costs
(property tax, insurance, HOA). Results are returned as frozen dataclasses; a
``loan_summary`` helper flattens them into a dictionary of floats for the
front ends.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, getcontext
from typing import Dict, List, Optional

from .data_models import (
    AmortizationResult,
    ExtraPayments,
    LoanTerms,
    MortgageResult,
    ScheduleRow,
)
from .utils import ZERO, clamp, non_negative, to_decimal, to_int

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

# Months allowed past the nominal term before the schedule is abandoned.
DEFAULT_MAX_EXTRA_MONTHS = 1000

# Balances below half a cent are Decimal noise left by the annuity formula.
_RESIDUAL = Decimal("0.005")


def months_in_term(term_years: Decimal) -> int:
    """Return ``round(term_years * 12)`` rounding halves up."""
    return int((term_years * 12).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Convert an APR in percent to a monthly decimal rate; negatives become 0."""
    if annual_rate_percent > 0:
        return annual_rate_percent / Decimal(1200)
    return ZERO


def calculate_annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return principal / Decimal(term)
    factor = (1 + rate_per_month) ** term
    return principal * (rate_per_month * factor) / (factor - 1)


def _extra_for_month(extra: ExtraPayments, month: int) -> Decimal:
    amount = extra.monthly
    if month % 12 == 0:
        amount += extra.yearly
    if extra.once_month and month == extra.once_month:
        amount += extra.once_amount
    return max(ZERO, amount)


def _normalize_extra(extra: Optional[ExtraPayments]) -> ExtraPayments:
    if extra is None:
        return ExtraPayments()
    return ExtraPayments(
        monthly=non_negative(extra.monthly),
        yearly=non_negative(extra.yearly),
        once_month=max(0, to_int(extra.once_month)),
        once_amount=non_negative(extra.once_amount),
    )


def amortize(
    principal: object,
    annual_rate_percent: object,
    term_years: object,
    extra: Optional[ExtraPayments] = None,
    *,
    max_extra_months: int = DEFAULT_MAX_EXTRA_MONTHS,
) -> AmortizationResult:
    """Compute a fixed-payment amortization schedule.

    Parameters
    ----------
    principal, annual_rate_percent, term_years:
        Loan inputs. Anything unparsable or non-finite is treated as ``0``;
        negative rates are treated as ``0``.
    extra: ExtraPayments, optional
        Monthly, yearly (every 12th month) and one-off extra payments applied
        to the principal.
    max_extra_months: int
        Safety ceiling: the schedule is abandoned once the month counter
        exceeds ``n + max_extra_months`` and the result is flagged with
        ``hit_safety_cap``.

    Returns
    -------
    AmortizationResult
        Rows in increasing month order with a non-increasing balance that
        ends at exactly zero when the loan is paid off.
    """
    balance = to_decimal(principal)
    rate = monthly_rate(to_decimal(annual_rate_percent))
    n = months_in_term(to_decimal(term_years))
    extra = _normalize_extra(extra)

    if balance <= 0:
        return AmortizationResult(
            base_payment=ZERO,
            rows=(),
            total_interest=ZERO,
            total_paid=ZERO,
            months_to_payoff=0,
        )

    if n < 1:
        # A term shorter than half a month is paid off in a single instalment.
        row = ScheduleRow(
            month=1,
            base_payment=balance,
            extra=ZERO,
            total_payment=balance,
            interest=ZERO,
            principal_paid=balance,
            ending_balance=ZERO,
        )
        return AmortizationResult(
            base_payment=balance,
            rows=(row,),
            total_interest=ZERO,
            total_paid=balance,
            months_to_payoff=1,
        )

    payment = calculate_annuity_payment(balance, rate, n)

    rows: List[ScheduleRow] = []
    total_interest = ZERO
    hit_cap = False
    month = 1
    while balance > 0:
        if month > n + max_extra_months:
            hit_cap = True
            logger.warning(
                "Schedule still owes %.2f after %d months (term %d); "
                "check the loan inputs",
                balance,
                month - 1,
                n,
            )
            break

        interest = rate * balance
        extra_now = _extra_for_month(extra, month)
        principal_paid = min(balance, payment - interest + extra_now)
        principal_paid = max(principal_paid, ZERO)
        if balance - principal_paid < _RESIDUAL:
            principal_paid = balance
        ending_balance = max(ZERO, balance - principal_paid)

        rows.append(
            ScheduleRow(
                month=month,
                base_payment=payment,
                extra=extra_now,
                total_payment=payment + extra_now,
                interest=interest,
                principal_paid=principal_paid,
                ending_balance=ending_balance,
            )
        )
        total_interest += interest
        balance = ending_balance
        month += 1

        # Plain fixed-installment division: stop after the nominal term.
        if rate == 0 and not extra.active and month > n:
            break

    total_paid = sum((r.total_payment for r in rows), ZERO)
    return AmortizationResult(
        base_payment=payment,
        rows=tuple(rows),
        total_interest=total_interest,
        total_paid=total_paid,
        months_to_payoff=len(rows),
        hit_safety_cap=hit_cap,
    )


def amortize_terms(terms: LoanTerms, *, max_extra_months: int = DEFAULT_MAX_EXTRA_MONTHS) -> AmortizationResult:
    """Run ``amortize`` on a ``LoanTerms`` snapshot."""
    return amortize(
        terms.principal,
        terms.annual_rate_percent,
        terms.term_years,
        terms.extra,
        max_extra_months=max_extra_months,
    )


def mortgage(
    home_price: object,
    down_payment_percent: object,
    annual_rate_percent: object,
    term_years: object,
    tax_monthly: object = ZERO,
    insurance_monthly: object = ZERO,
    hoa_monthly: object = ZERO,
    *,
    max_extra_months: int = DEFAULT_MAX_EXTRA_MONTHS,
) -> MortgageResult:
    """Compose a mortgage payment breakdown.

    The financed principal is the home price less the down payment
    (``down_payment_percent`` is clamped to ``[0, 100]``). The loan is
    amortized without extra payments, and the monthly escrow items are added
    on top of the principal-and-interest payment for every month until payoff.
    """
    price = to_decimal(home_price)
    down_pct = clamp(to_decimal(down_payment_percent), ZERO, Decimal(100))
    principal = max(ZERO, price - price * down_pct / Decimal(100))

    schedule = amortize(
        principal,
        annual_rate_percent,
        term_years,
        max_extra_months=max_extra_months,
    )

    monthly_extras = (
        non_negative(tax_monthly)
        + non_negative(insurance_monthly)
        + non_negative(hoa_monthly)
    )
    total_paid = schedule.total_paid + monthly_extras * schedule.months_to_payoff
    return MortgageResult(
        principal=principal,
        base_monthly=schedule.base_payment,
        schedule=schedule,
        total_interest=schedule.total_interest,
        monthly_extras=monthly_extras,
        total_monthly=schedule.base_payment + monthly_extras,
        total_paid=total_paid,
    )


def loan_summary(result: AmortizationResult, principal: object = None) -> Dict[str, object]:
    """Aggregate metrics of a schedule as JSON-friendly floats."""
    summary: Dict[str, object] = {
        "base_payment": float(result.base_payment),
        "months_to_payoff": result.months_to_payoff,
        "total_interest": float(result.total_interest),
        "total_paid": float(result.total_paid),
        "hit_safety_cap": result.hit_safety_cap,
    }
    if principal is not None:
        summary["principal"] = float(to_decimal(principal))
    return summary


def compare_with_baseline(
    principal: object,
    annual_rate_percent: object,
    term_years: object,
    extra: ExtraPayments,
) -> Dict[str, object]:
    """Compare a schedule with extra payments against the plain schedule.

    Returns the interest and months saved by the extra-payment rules.
    """
    baseline = amortize(principal, annual_rate_percent, term_years)
    with_extra = amortize(principal, annual_rate_percent, term_years, extra)
    return {
        "baseline_total_interest": float(baseline.total_interest),
        "interest_saved": float(baseline.total_interest - with_extra.total_interest),
        "months_saved": baseline.months_to_payoff - with_extra.months_to_payoff,
    }

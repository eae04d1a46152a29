"""Progressive income-tax calculator.

Brackets are applied in order; each one taxes the slice of income between the
previous cap and its own upper bound. The final bracket may be unbounded, in
which case it absorbs exactly the income that remains.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Sequence

from .data_models import BracketSlice, TaxBracket, TaxResult
from .utils import ZERO, clamp, decimal_from_str, to_decimal

DEFAULT_BRACKETS: tuple = (
    TaxBracket(Decimal("110000"), Decimal("0.15")),
    TaxBracket(Decimal("230000"), Decimal("0.20")),
    TaxBracket(Decimal("870000"), Decimal("0.27")),
    TaxBracket(Decimal("3000000"), Decimal("0.35")),
    TaxBracket(None, Decimal("0.40")),
)

_UNBOUNDED_TOKENS = {"", "inf", "infinity", "none", "unbounded", "*"}


class BracketError(ValueError):
    """Raised when a bracket list is not a valid progressive schedule."""


def validate_brackets(brackets: Sequence[TaxBracket]) -> None:
    """Check that bounds never decrease and only the last bracket is unbounded.

    Raises
    ------
    BracketError
        If a rate lies outside ``[0, 1]``, a bound is negative or lower than
        the previous one, or an unbounded bracket is followed by another.
    """
    previous = ZERO
    for index, bracket in enumerate(brackets):
        if not ZERO <= bracket.rate <= 1:
            raise BracketError(f"Bracket {index + 1}: rate {bracket.rate} is outside [0, 1]")
        if not bracket.bounded:
            if index != len(brackets) - 1:
                raise BracketError(f"Bracket {index + 1}: only the last bracket may be unbounded")
            continue
        if bracket.upper_bound < previous:
            raise BracketError(
                f"Bracket {index + 1}: upper bound {bracket.upper_bound} is below {previous}"
            )
        previous = bracket.upper_bound


def compute_tax(annual_income: object, brackets: Iterable[TaxBracket] = DEFAULT_BRACKETS) -> TaxResult:
    """Apply marginal brackets to ``annual_income``.

    Negative or unparsable income is treated as ``0``. A breakdown row is
    recorded only for brackets that actually tax a positive slice. Income
    above the last bounded cap is untaxed when the list has no unbounded
    bracket.
    """
    brackets = list(brackets)
    validate_brackets(brackets)
    income = max(ZERO, to_decimal(annual_income))

    remaining = income
    last_cap = ZERO
    total_tax = ZERO
    breakdown: List[BracketSlice] = []
    for bracket in brackets:
        if remaining <= 0:
            break
        cap = bracket.upper_bound if bracket.bounded else remaining + last_cap
        taxable = clamp(remaining, ZERO, max(ZERO, cap - last_cap))
        due = taxable * bracket.rate
        if taxable > 0:
            breakdown.append(
                BracketSlice(cap=cap, taxable_slice=taxable, rate=bracket.rate, tax_due=due)
            )
        total_tax += due
        remaining -= taxable
        last_cap = cap

    effective_rate = total_tax / income if income > 0 else ZERO
    return TaxResult(total_tax=total_tax, effective_rate=effective_rate, breakdown=tuple(breakdown))


def parse_brackets(values: Iterable[str]) -> List[TaxBracket]:
    """Build brackets from ``CAP:RATE`` strings such as ``"110000:15"``.

    ``RATE`` is in percent. ``CAP`` may be ``inf`` (or empty) for the
    unbounded top bracket. Entries may also be passed as one comma separated
    string. Raises ``ValueError`` on malformed entries and ``BracketError``
    if the resulting schedule is invalid.
    """
    items: List[str] = []
    for value in values:
        items.extend(p.strip() for p in value.replace("\n", ",").split(","))
    brackets: List[TaxBracket] = []
    for item in items:
        if not item:
            continue
        parts = item.split(":")
        if len(parts) != 2:
            raise ValueError(f"Bracket must be in CAP:RATE format; got {item}")
        cap_str, rate_str = parts
        cap_str = cap_str.strip().lower()
        upper = None if cap_str in _UNBOUNDED_TOKENS else decimal_from_str(cap_str)
        rate = decimal_from_str(rate_str.strip().rstrip("%")) / Decimal(100)
        brackets.append(TaxBracket(upper, rate))
    validate_brackets(brackets)
    return brackets

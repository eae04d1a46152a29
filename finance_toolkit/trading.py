"""Crypto trade P&L and stock split calculators."""

from __future__ import annotations

from decimal import Decimal

from .data_models import CryptoTradeResult, StockSplitResult
from .utils import ZERO, to_decimal

ONE = Decimal("1")


def break_even_price(buy_price: object, fee_percent: object) -> Decimal:
    """Sell price at which proceeds after fees equal the cost including fees.

    Solves ``P * (1 - f) = buy_price * (1 + f)``. Returns ``0`` when the fee
    rate is 100 % or more, since no price can recover the cost.
    """
    fee = to_decimal(fee_percent) / Decimal(100)
    if fee >= 1:
        return ZERO
    return to_decimal(buy_price) * (1 + fee) / (1 - fee)


def crypto_pnl(
    buy_price: object,
    sell_price: object,
    quantity: object,
    fee_percent: object = ZERO,
) -> CryptoTradeResult:
    """Profit and loss of a buy/sell round trip with a percentage fee per trade."""
    buy = to_decimal(buy_price)
    sell = to_decimal(sell_price)
    qty = to_decimal(quantity)
    fee = to_decimal(fee_percent) / Decimal(100)

    buy_fee = buy * qty * fee
    sell_fee = sell * qty * fee
    cost = buy * qty + buy_fee
    proceeds = sell * qty - sell_fee
    pnl = proceeds - cost
    roi = pnl / cost if cost > 0 else ZERO
    break_even = break_even_price(buy, fee_percent) if qty > 0 else ZERO
    return CryptoTradeResult(
        cost=cost,
        proceeds=proceeds,
        buy_fee=buy_fee,
        sell_fee=sell_fee,
        pnl=pnl,
        roi=roi,
        break_even_price=break_even,
    )


def stock_split(shares: object, price: object, ratio_a: object = ONE, ratio_b: object = ONE) -> StockSplitResult:
    """Rebase a position for an ``A:B`` split (``2:1`` doubles the shares).

    Ratio terms below one are raised to one. The position value is unchanged
    by the split.
    """
    qty = to_decimal(shares)
    px = to_decimal(price)
    a = max(ONE, to_decimal(ratio_a, ONE))
    b = max(ONE, to_decimal(ratio_b, ONE))
    factor = a / b
    new_shares = qty * factor
    new_price = px / factor
    return StockSplitResult(
        factor=factor,
        new_shares=new_shares,
        new_price=new_price,
        value_before=qty * px,
        value_after=new_shares * new_price,
    )

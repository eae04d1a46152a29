"""Command-line interface for the finance toolkit.

This module uses the ``click`` library to implement a multi-command interface
over the calculators: loan schedules, mortgages, currency conversion, income
tax, retirement projections, crypto trades and stock splits. Loan schedules
can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import json
from dataclasses import asdict, replace
from pathlib import Path
from typing import Optional, Tuple

import click

from .config import configure_logging, load_settings
from .currency import RateService
from .data_models import AmortizationResult, ExtraPayments, as_floats
from .engine import amortize, compare_with_baseline, loan_summary, mortgage
from .formatter import (
    format_money,
    print_comparison,
    print_loan_summary,
    print_mortgage,
    print_projection,
    print_schedule,
    print_tax,
    write_schedule_csv,
)
from .rate_store import create_store_from_env
from .retirement import project
from .tax import DEFAULT_BRACKETS, parse_brackets, compute_tax
from .trading import crypto_pnl, stock_split
from .utils import decimal_from_str, parse_amount, parse_percent

PREVIEW_ROWS = 12


def _amount(ctx, param, value):
    if value is None:
        return None
    try:
        return parse_amount(str(value))
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def _percent(ctx, param, value):
    if value is None:
        return None
    try:
        return parse_percent(str(value))
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def _number(ctx, param, value):
    if value is None:
        return None
    try:
        return decimal_from_str(str(value))
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def parse_ratio(value: str) -> Tuple[str, str]:
    """Split an ``A:B`` split ratio such as ``"3:1"``."""
    parts = value.split(":")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise click.BadParameter(f"Ratio must be in A:B format; got {value}")
    return parts[0].strip(), parts[1].strip()


def export_to_json(path: Path, result: AmortizationResult, summary: dict) -> None:
    """Export schedule and summary to a JSON file."""
    rows = [
        {
            "month": r.month,
            "base_payment": float(r.base_payment),
            "extra": float(r.extra),
            "payment": float(r.total_payment),
            "interest": float(r.interest),
            "principal": float(r.principal_paid),
            "balance": float(r.ending_balance),
        }
        for r in result.rows
    ]
    with path.open("w", encoding="utf-8") as f:
        json.dump({"summary": summary, "schedule": rows}, f, indent=2)


@click.group()
@click.option("--log-level", "log_level", default=None, help="Logging level (overrides FINANCE_TOOLKIT_LOG_LEVEL)")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """Personal finance calculators: loans, mortgages, currency, tax and more."""
    settings = load_settings()
    if log_level:
        settings = replace(settings, log_level=log_level.upper())
    configure_logging(settings)
    ctx.obj = settings


@cli.command()
@click.option("--principal", "-p", "principal", required=True, callback=_amount, help="Loan amount (accepts 25k, 1.2m)")
@click.option("--rate", "-r", "rate", required=True, callback=_percent, help="APR in percent")
@click.option("--years", "-y", "years", required=True, callback=_number, help="Term in years")
@click.option("--extra-monthly", "extra_monthly", default="0", callback=_amount, help="Extra payment every month")
@click.option("--extra-yearly", "extra_yearly", default="0", callback=_amount, help="Extra payment every 12th month")
@click.option("--once-month", "once_month", default=0, type=click.IntRange(min=0), help="Month of a one-off extra payment")
@click.option("--once-amount", "once_amount", default="0", callback=_amount, help="Amount of the one-off extra payment")
@click.option("--currency", "-c", "currency", default="USD", help="Currency used for display")
@click.option("--full", "full", is_flag=True, help="Print every row instead of the first 12 months")
@click.option("--extended", "extended", is_flag=True, help="Include base and extra payment columns")
@click.option("--output", "-o", "output", type=str, help="Output file path (.json or .csv)")
@click.pass_obj
def loan(
    settings,
    principal,
    rate,
    years,
    extra_monthly,
    extra_yearly,
    once_month: int,
    once_amount,
    currency: str,
    full: bool,
    extended: bool,
    output: Optional[str],
) -> None:
    """Compute a loan amortization schedule."""
    extra = ExtraPayments(
        monthly=extra_monthly,
        yearly=extra_yearly,
        once_month=once_month,
        once_amount=once_amount,
    )
    result = amortize(principal, rate, years, extra, max_extra_months=settings.max_extra_months)
    summary = loan_summary(result, principal)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result, summary)
        elif path.suffix.lower() == ".csv":
            write_schedule_csv(path, result.rows, extended)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return

    print_loan_summary(result, currency)
    if extra.active:
        print_comparison(compare_with_baseline(principal, rate, years, extra), currency)
    rows = result.rows if full else result.rows[:PREVIEW_ROWS]
    if len(rows) < len(result.rows):
        click.echo(f"Schedule has {len(result.rows)} rows; showing first {len(rows)} rows.")
    print_schedule(rows, extended)


@cli.command("mortgage")
@click.option("--price", "price", required=True, callback=_amount, help="Home price")
@click.option("--down", "down", default="20", callback=_percent, help="Down payment percent")
@click.option("--rate", "-r", "rate", required=True, callback=_percent, help="APR in percent")
@click.option("--years", "-y", "years", default="30", callback=_number, help="Term in years")
@click.option("--tax", "tax", default="0", callback=_amount, help="Property tax per month")
@click.option("--insurance", "insurance", default="0", callback=_amount, help="Insurance per month")
@click.option("--hoa", "hoa", default="0", callback=_amount, help="HOA fees per month")
@click.option("--currency", "-c", "currency", default="USD", help="Currency used for display")
@click.pass_obj
def mortgage_cmd(settings, price, down, rate, years, tax, insurance, hoa, currency: str) -> None:
    """Compute a mortgage payment breakdown with escrow extras."""
    result = mortgage(
        price, down, rate, years, tax, insurance, hoa,
        max_extra_months=settings.max_extra_months,
    )
    print_mortgage(result, currency)
    print_schedule(result.schedule.rows[:PREVIEW_ROWS])


@cli.command()
@click.argument("amount", callback=_amount)
@click.argument("from_code")
@click.argument("to_code")
@click.option("--live/--offline", "live", default=True, help="Refresh rates from the network first")
@click.pass_obj
def convert(settings, amount, from_code: str, to_code: str, live: bool) -> None:
    """Convert AMOUNT from FROM_CODE to TO_CODE."""
    store = create_store_from_env(settings.rate_cache_url)
    with RateService(store, url=settings.rates_url, timeout=settings.fetch_timeout) as service:
        if live:
            service.start()
        else:
            service.load_cached()
        result = service.convert(amount, from_code, to_code)
        if result == 0 and amount != 0:
            raise click.ClickException(f"Cannot convert {from_code} to {to_code}: unknown currency")
        click.echo(f"{format_money(result, to_code)} [{service.status.value}]")


@cli.command()
@click.option("--income", "income", required=True, callback=_amount, help="Annual income")
@click.option(
    "--bracket",
    "bracket",
    multiple=True,
    help="Bracket in CAP:RATE format (rate in percent, cap 'inf' for the top bracket)",
)
@click.option("--currency", "-c", "currency", default="USD", help="Currency used for display")
def tax(income, bracket: Tuple[str, ...], currency: str) -> None:
    """Compute progressive income tax."""
    try:
        brackets = parse_brackets(bracket) if bracket else list(DEFAULT_BRACKETS)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    print_tax(compute_tax(income, brackets), currency)


@cli.command()
@click.option("--age", "age", required=True, callback=_number, help="Current age")
@click.option("--retire-age", "retire_age", required=True, callback=_number, help="Retirement age")
@click.option("--savings", "savings", default="0", callback=_amount, help="Current savings")
@click.option("--contribution", "contribution", default="0", callback=_amount, help="Monthly contribution")
@click.option("--return", "annual_return", default="7", callback=_percent, help="Annual return percent")
@click.option("--inflation", "inflation", default="0", callback=_percent, help="Annual inflation percent")
@click.option("--currency", "-c", "currency", default="USD", help="Currency used for display")
def retire(age, retire_age, savings, contribution, annual_return, inflation, currency: str) -> None:
    """Project retirement savings."""
    print_projection(project(age, retire_age, savings, contribution, annual_return, inflation), currency)


@cli.command()
@click.option("--buy", "buy", required=True, callback=_number, help="Buy price per unit")
@click.option("--sell", "sell", required=True, callback=_number, help="Sell price per unit")
@click.option("--qty", "qty", required=True, callback=_number, help="Quantity")
@click.option("--fee", "fee", default="0", callback=_percent, help="Fee percent per trade")
def crypto(buy, sell, qty, fee) -> None:
    """Compute crypto trade P&L and break-even price."""
    result = crypto_pnl(buy, sell, qty, fee)
    for key, value in as_floats(asdict(result)).items():
        click.echo(f"{key:18s} : {value:.6f}")


@cli.command()
@click.option("--shares", "shares", required=True, callback=_number, help="Shares held")
@click.option("--price", "price", required=True, callback=_number, help="Price per share")
@click.option("--ratio", "ratio", default="2:1", help="Split ratio in A:B format")
def split(shares, price, ratio: str) -> None:
    """Rebase shares and price for a stock split."""
    a, b = parse_ratio(ratio)
    result = stock_split(shares, price, a, b)
    click.echo(f"New shares : {result.new_shares.normalize():f}")
    click.echo(f"New price  : {result.new_price:.4f}")
    click.echo(f"Value      : {result.value_after:.2f}")


if __name__ == "__main__":
    cli()

from decimal import Decimal

from finance_toolkit.engine import amortize
from finance_toolkit.formatter import (
    format_money,
    money,
    schedule_rows,
    schedule_to_csv,
    write_schedule_csv,
)
from finance_toolkit.data_models import ExtraPayments


def test_csv_header_and_rows():
    result = amortize(1200, 0, 1)
    lines = schedule_to_csv(result.rows).split("\n")
    assert lines[0] == '"Month","Payment","Interest","Principal","Balance"'
    assert lines[1] == '"1","100.00","0.00","100.00","1100.00"'
    assert lines[-1] == '"12","100.00","0.00","100.00","0.00"'
    assert len(lines) == 13


def test_extended_csv_includes_base_and_extra():
    result = amortize(1200, 0, 1, ExtraPayments(monthly=Decimal("100")))
    lines = schedule_to_csv(result.rows, extended=True).split("\n")
    assert lines[0] == '"Month","Base Payment","Extra","Payment","Interest","Principal","Balance"'
    assert lines[1] == '"1","100.00","100.00","200.00","0.00","200.00","1000.00"'


def test_money_rounds_half_up():
    assert money(Decimal("1.005")) == "1.01"
    assert money(Decimal("2.5")) == "2.50"


def test_schedule_rows_for_empty_schedule():
    assert schedule_rows([]) == [["Month", "Payment", "Interest", "Principal", "Balance"]]


def test_write_schedule_csv(tmp_path):
    path = tmp_path / "schedule.csv"
    write_schedule_csv(path, amortize(25000, 6.9, 5).rows)
    content = path.read_text(encoding="utf-8")
    assert content.startswith('"Month","Payment"')
    assert content.count("\n") == 61


def test_format_money():
    assert format_money(Decimal("1234.5"), "USD") == "$1,234.50"
    assert format_money(91, "eur") == "€91.00"
    assert format_money(-5, "USD") == "-$5.00"
    assert format_money(10, "XYZ") == "10.00 XYZ"

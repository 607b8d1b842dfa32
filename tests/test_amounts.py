from datetime import date
from decimal import Decimal

import pytest

from cardmarket_ledger.amounts import (
    ceil_cents,
    format_amount,
    format_quantity,
    parse_amount,
    parse_date,
    parse_flag,
    to_cents,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("14.49", Decimal("14.49")),
        ("14,49", Decimal("14.49")),
        (" 1.234,56 ", Decimal("1234.56")),
        ("1,234.56", Decimal("1234.56")),
        ("-3,5", Decimal("-3.5")),
        ("12,00 €", Decimal("12.00")),
        ("(12,50)", Decimal("-12.50")),
        (10.5, Decimal("10.5")),
        (7, Decimal("7")),
        (Decimal("0.10"), Decimal("0.10")),
    ],
)
def test_parse_amount_accepts_both_separators(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "NaN", "Infinity", True])
def test_parse_amount_rejects_non_numbers(raw):
    with pytest.raises(ValueError):
        parse_amount(raw)


@pytest.mark.parametrize("raw", ["1e30", "1" * 27, Decimal("1E+40")])
def test_parse_amount_rejects_values_beyond_cent_precision(raw):
    with pytest.raises(ValueError, match="out of range"):
        parse_amount(raw)


def test_to_cents_rounds_half_away_from_zero():
    assert to_cents(Decimal("0.125")) == Decimal("0.13")
    assert to_cents(Decimal("-0.125")) == Decimal("-0.13")
    assert to_cents(Decimal("0.124")) == Decimal("0.12")


def test_ceil_cents_rounds_up():
    assert ceil_cents(Decimal("0.525")) == Decimal("0.53")
    assert ceil_cents(Decimal("0.75")) == Decimal("0.75")
    assert ceil_cents(Decimal("0.7501")) == Decimal("0.76")


def test_decimal_sum_has_no_cent_drift():
    # 0.1 + 0.2 is 0.30000000000000004 with binary floats
    total = sum((parse_amount("0.1") for _ in range(3)), Decimal("0"))
    assert format_amount(total) == "0.30"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("8/29/2025", date(2025, 8, 29)),
        ("8/29/2025 14:10:24", date(2025, 8, 29)),
        ("08/29/25", date(2025, 8, 29)),
        ("2025-08-29", date(2025, 8, 29)),
        ("2025/08/29", date(2025, 8, 29)),
        ("29.08.2025", date(2025, 8, 29)),
        ("2024-01-15T00:00:00.000Z", date(2024, 1, 15)),
        ("2024-01-15 10:00:00", date(2024, 1, 15)),
    ],
)
def test_parse_date_formats(raw, expected):
    assert parse_date(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "not a date", "13/45/2025"])
def test_parse_date_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_date(raw)


def test_parse_flag_tokens():
    assert parse_flag("true") is True
    assert parse_flag("X") is True
    assert parse_flag("0") is False
    assert parse_flag("") is False
    assert parse_flag(None) is False
    with pytest.raises(ValueError):
        parse_flag("maybe")


def test_format_helpers():
    assert format_amount(Decimal("-15")) == "-15.00"
    assert format_amount(Decimal("9.965")) == "9.97"
    assert format_quantity(Decimal("1")) == "1"
    assert format_quantity(Decimal("2.50")) == "2.5"

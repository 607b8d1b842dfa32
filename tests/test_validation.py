from datetime import date
from decimal import Decimal

import pytest

from cardmarket_ledger import validation
from cardmarket_ledger.errors import WarningKind
from cardmarket_ledger.records import SaleOrderRecord
from cardmarket_ledger.validation import (
    validate_article_row,
    validate_csv_row,
    validate_expense_row,
    validate_order,
    validate_sale_row,
)


def _expense_row(**overrides):
    row = {
        "Timestamp": "8/29/2025 14:10:24",
        "Name": "Deutsche Post",
        "Code": "900",
        "Amount": "14,49",
        "Datum": "8/29/2025",
        "Kommentar": "",
    }
    row.update(overrides)
    return row


def _article(**overrides):
    article = {
        "Shipment nr.": "1001",
        "Article": "Black Lotus",
        "Product ID": "42",
        "Expansion": "Alpha",
        "Category": "Magic Single",
        "Amount": "1",
        "Article Value": "15,00",
        "Total": "15,00",
        "Currency": "EUR",
        "Comments": "Near Mint #401",
    }
    article.update(overrides)
    return article


def _order(**overrides):
    order = {
        "OrderID": "1001",
        "Username": "buyer42",
        "Country": "Germany",
        "Is Professional": "",
        "Date of Purchase": "2024-01-15T00:00:00.000Z",
        "Merchandise Value": "25,50",
        "Shipment Costs": "5,00",
        "Commission": "1,28",
        "Currency": "EUR",
        "articles": [_article()],
    }
    order.update(overrides)
    return order


def test_valid_expense_row_is_typed():
    outcome = validate_expense_row(_expense_row())
    assert outcome.warnings == ()
    record = outcome.value
    assert record is not None
    assert record.code == "900"
    assert record.amount == Decimal("14.49")
    assert record.date == date(2025, 8, 29)
    assert record.name == "Deutsche Post"


@pytest.mark.parametrize("missing", ["Code", "Amount", "Datum"])
def test_expense_row_missing_required_field_is_rejected(missing):
    outcome = validate_expense_row(_expense_row(**{missing: ""}))
    assert outcome.value is None
    (warning,) = outcome.warnings
    assert warning.kind is WarningKind.VALIDATION
    assert missing in warning.message
    assert warning.payload is not None and warning.payload["Name"] == "Deutsche Post"


def test_expense_row_with_bad_amount_is_rejected():
    outcome = validate_expense_row(_expense_row(Amount="fourteen"))
    assert outcome.value is None
    assert outcome.warnings[0].kind is WarningKind.VALIDATION


def test_expense_row_with_bad_date_falls_back_to_today(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(validation, "_today", lambda: date(2030, 1, 2))
    outcome = validate_expense_row(_expense_row(Datum="someday"))
    assert outcome.value is not None
    assert outcome.value.date == date(2030, 1, 2)
    (warning,) = outcome.warnings
    assert warning.kind is WarningKind.FALLBACK
    assert warning.context == "date parsing"


def test_expense_row_defaults_name():
    outcome = validate_expense_row(_expense_row(Name=""))
    assert outcome.value is not None
    assert outcome.value.name == "Unknown"


def test_csv_row_detects_columns():
    outcome = validate_csv_row(
        {"Date": "2025-03-01", "Memo": "Coffee", "Sum": "-3,50", "Type": "Food"}
    )
    record = outcome.value
    assert record is not None
    assert record.date == date(2025, 3, 1)
    assert record.description == "Coffee"
    assert record.amount == Decimal("-3.50")
    assert record.category == "Food"


def test_csv_row_defaults_description_and_category():
    record = validate_csv_row({"date": "2025-03-01", "amount": "10"}).value
    assert record is not None
    assert record.description == "Unspecified transaction"
    assert record.category is None


def test_csv_row_without_amount_column_is_rejected():
    outcome = validate_csv_row({"date": "2025-03-01", "description": "x"})
    assert outcome.value is None
    assert "could not detect required fields" in outcome.warnings[0].message


def test_csv_row_with_bad_date_is_rejected():
    outcome = validate_csv_row({"date": "yesterday", "amount": "1"})
    assert outcome.value is None
    assert outcome.warnings[0].kind is WarningKind.VALIDATION


def test_sale_row_requires_currency():
    row = {k: v for k, v in _order().items() if k != "articles"}
    assert validate_sale_row(row).value is not None

    row["Currency"] = ""
    outcome = validate_sale_row(row)
    assert outcome.value is None
    assert "Currency" in outcome.warnings[0].message


def test_article_row_coerces_values():
    record = validate_article_row(_article(Currency="eur", Total="1.234,50")).value
    assert record is not None
    assert record.currency == "EUR"
    assert record.total == Decimal("1234.50")
    assert record.amount == Decimal("1")


def test_article_row_rejects_unparseable_date():
    outcome = validate_article_row(_article(**{"Date of purchase": "sometime"}))
    assert outcome.value is None


def test_validate_order():
    outcome = validate_order(_order())
    order = outcome.value
    assert isinstance(order, SaleOrderRecord)
    assert order.order_id == "1001"
    assert order.date_of_purchase == date(2024, 1, 15)
    assert order.is_professional is False
    assert order.articles[0].comments == "Near Mint #401"


@pytest.mark.parametrize("missing", ["OrderID", "Currency", "articles"])
def test_order_missing_required_field_is_rejected(missing):
    order = _order()
    del order[missing]
    outcome = validate_order(order)
    assert outcome.value is None
    assert missing in outcome.warnings[0].message


def test_order_with_empty_article_list_is_valid():
    order = validate_order(_order(articles=[])).value
    assert order is not None
    assert order.articles == ()


def test_order_with_bad_purchase_date_is_rejected():
    outcome = validate_order(_order(**{"Date of Purchase": "not a date"}))
    assert outcome.value is None
    assert outcome.warnings[0].context == "order validation"


def test_order_with_invalid_article_is_rejected():
    outcome = validate_order(_order(articles=[_article(Total="n/a")]))
    assert outcome.value is None

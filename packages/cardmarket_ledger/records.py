"""Validated input records for the marketplace export shapes.

Every record is an immutable pydantic model whose field aliases are the exact
column names of the marketplace exports (``"OrderID"``, ``"Shipment nr."``,
...). Rows from ``csv.DictReader`` and the JSON intermediates written by the
export splitters validate directly; instances can also be built by field
name. After validation amounts are :class:`~decimal.Decimal` and dates are
:class:`~datetime.date`; no raw strings survive.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from .amounts import parse_amount, parse_date, parse_flag


def _blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def _optional_amount(v: Any) -> Decimal | None:
    return None if _blank(v) else parse_amount(v)


def _optional_date(v: Any) -> dt.date | None:
    return None if _blank(v) else parse_date(v)


def _currency_code(v: Any) -> str | None:
    if _blank(v):
        return None
    s = str(v).strip().upper()
    if len(s) != 3 or not s.isalpha():
        raise ValueError(f"currency must be a 3-letter code: {v!r}")
    return s


def _text(v: Any) -> str:
    return "" if v is None else str(v).strip()


# Reusable coerced field types
Amount = Annotated[Decimal, BeforeValidator(parse_amount)]
OptionalAmount = Annotated[Decimal | None, BeforeValidator(_optional_amount)]
CalendarDate = Annotated[dt.date, BeforeValidator(parse_date)]
OptionalDate = Annotated[dt.date | None, BeforeValidator(_optional_date)]
Flag = Annotated[bool, BeforeValidator(parse_flag)]
Text = Annotated[str, BeforeValidator(_text)]
CurrencyCode = Annotated[str | None, BeforeValidator(_currency_code)]


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )


class ExpenseRecord(_Record):
    """A miscellaneous expense booked against an expense code (``900``...).

    ``date`` is already resolved here; the current-date fallback for an
    unparseable ``Datum`` is applied by the validator before construction.
    """

    timestamp: Text = Field(default="", alias="Timestamp")
    name: Text = Field(default="Unknown", alias="Name")
    code: Text = Field(alias="Code", min_length=1)
    amount: Amount = Field(alias="Amount")
    date: CalendarDate = Field(alias="Datum")
    comment: Text = Field(default="", alias="Kommentar")


class CsvRecord(_Record):
    """A generic bank-style CSV row: date, description, amount and category."""

    date: CalendarDate
    description: Text = "Unspecified transaction"
    amount: Amount
    category: str | None = None


class ArticleRecord(_Record):
    """One line item of an order, as exported per shipment."""

    shipment_nr: Text = Field(default="", alias="Shipment nr.")
    date_of_purchase: OptionalDate = Field(default=None, alias="Date of purchase")
    article: Text = Field(alias="Article", min_length=1)
    product_id: Text = Field(default="", alias="Product ID")
    localized_product_name: Text = Field(default="", alias="Localized Product Name")
    expansion: Text = Field(default="", alias="Expansion")
    category: Text = Field(default="", alias="Category")
    amount: Amount = Field(default=Decimal("1"), alias="Amount")
    article_value: OptionalAmount = Field(default=None, alias="Article Value")
    total: Amount = Field(alias="Total")
    currency: CurrencyCode = Field(default=None, alias="Currency")
    comments: Text = Field(default="", alias="Comments")


class SaleRecord(_Record):
    """One order row of the sales export (without its articles)."""

    order_id: Text = Field(alias="OrderID", min_length=1)
    username: Text = Field(default="", alias="Username")
    name: Text = Field(default="", alias="Name")
    street: Text = Field(default="", alias="Street")
    city: Text = Field(default="", alias="City")
    country: Text = Field(default="", alias="Country")
    is_professional: Flag = Field(default=False, alias="Is Professional")
    vat_number: Text = Field(default="", alias="VAT Number")
    date_of_purchase: CalendarDate = Field(alias="Date of Purchase")
    article_count: OptionalAmount = Field(default=None, alias="Article Count")
    merchandise_value: Amount = Field(default=Decimal("0"), alias="Merchandise Value")
    shipment_costs: Amount = Field(default=Decimal("0"), alias="Shipment Costs")
    total_value: OptionalAmount = Field(default=None, alias="Total Value")
    commission: Amount = Field(default=Decimal("0"), alias="Commission")
    currency: CurrencyCode = Field(alias="Currency")
    description: Text = Field(default="", alias="Description")
    product_id: Text = Field(default="", alias="Product ID")
    localized_product_name: Text = Field(default="", alias="Localized Product Name")

    @field_validator("currency")
    @classmethod
    def _currency_required(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("currency is required")
        return v


class SaleOrderRecord(SaleRecord):
    """An order together with its articles, ready for the sale builder."""

    articles: tuple[ArticleRecord, ...] = Field(alias="articles")


__all__ = [
    "ArticleRecord",
    "CsvRecord",
    "ExpenseRecord",
    "SaleOrderRecord",
    "SaleRecord",
]

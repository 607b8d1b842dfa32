"""Row validation: raw header-keyed maps in, typed records out.

Each ``validate_*`` function takes one raw row (or decoded JSON record) and
returns an :class:`~cardmarket_ledger.errors.Outcome`. A rejected row yields
``Outcome(None, warnings)``; nothing here raises for a bad row, so the batch
always continues.

Date policy
-----------
Expense rows whose ``Datum`` does not parse are booked on the current date
with a ``fallback`` warning. Malformed dates on expenses therefore do not
reject the row; they silently become "today" in the ledger and must be
checked by whoever reviews the warnings. Every other record kind rejects an
unparseable date.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .amounts import parse_amount, parse_date
from .errors import Outcome, RowWarning, WarningKind, warn
from .logging_setup import get_logger
from .records import ArticleRecord, CsvRecord, ExpenseRecord, SaleOrderRecord, SaleRecord

M = TypeVar("M", bound=BaseModel)

_logger = get_logger("cardmarket_ledger.validation")

_EXPENSE_REQUIRED: tuple[str, ...] = ("Code", "Amount", "Datum")
_ORDER_REQUIRED: tuple[str, ...] = ("OrderID", "Currency", "articles")

# Candidate column names for generic CSV rows, tried in order.
DATE_FIELDS: tuple[str, ...] = ("date", "Date", "transaction_date", "TransactionDate")
DESCRIPTION_FIELDS: tuple[str, ...] = ("description", "Description", "memo", "Memo", "note", "Note")
AMOUNT_FIELDS: tuple[str, ...] = ("amount", "Amount", "sum", "Sum", "total", "Total")
CATEGORY_FIELDS: tuple[str, ...] = ("category", "Category", "type", "Type")


def _today() -> date:
    return date.today()


def _is_missing(row: Mapping[str, Any], key: str) -> bool:
    value = row.get(key)
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _describe(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "<record>"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def _validate_model(
    model: type[M], data: Any, *, context: str, payload: Mapping[str, Any]
) -> Outcome[M]:
    try:
        return Outcome(model.model_validate(data))
    except ValidationError as e:
        return Outcome(
            None, (warn(WarningKind.VALIDATION, f"invalid record ({_describe(e)})", context, payload),)
        )


def validate_expense_row(row: Mapping[str, Any]) -> Outcome[ExpenseRecord]:
    """Validate one row of the expenses sheet.

    Columns: ``Timestamp, Name, Code, Amount, Datum, Kommentar``. ``Code``,
    ``Amount`` and ``Datum`` are mandatory. Amounts may use ``,`` as decimal
    separator.
    """

    context = "expense validation"
    payload = dict(row)
    missing = [k for k in _EXPENSE_REQUIRED if _is_missing(row, k)]
    if missing:
        return Outcome(
            None,
            (warn(WarningKind.VALIDATION, f"missing required fields {missing}", context, payload),),
        )

    try:
        amount = parse_amount(row["Amount"])
    except ValueError as e:
        return Outcome(None, (warn(WarningKind.VALIDATION, f"invalid amount: {e}", context, payload),))

    warnings: list[RowWarning] = []
    try:
        booked_on = parse_date(row["Datum"])
    except ValueError as e:
        booked_on = _today()
        warnings.append(
            warn(
                WarningKind.FALLBACK,
                f"unparseable date, using current date {booked_on.isoformat()} ({e})",
                "date parsing",
                payload,
            )
        )

    fields = {
        "Timestamp": row.get("Timestamp") or "",
        "Name": row.get("Name") or "Unknown",
        "Code": str(row["Code"]),
        "Amount": amount,
        "Datum": booked_on,
        "Kommentar": row.get("Kommentar") or "",
    }
    outcome = _validate_model(ExpenseRecord, fields, context=context, payload=payload)
    return Outcome(outcome.value, tuple(warnings) + outcome.warnings)


def _find_field(row: Mapping[str, Any], candidates: Sequence[str]) -> str | None:
    for name in candidates:
        if name in row:
            return name
    return None


def validate_csv_row(row: Mapping[str, Any]) -> Outcome[CsvRecord]:
    """Validate a generic CSV row by detecting its columns.

    The date and amount columns are required. Unlike expenses, an unparseable
    date rejects the row.
    """

    context = "csv validation"
    payload = dict(row)
    date_field = _find_field(row, DATE_FIELDS)
    amount_field = _find_field(row, AMOUNT_FIELDS)
    if date_field is None or amount_field is None:
        return Outcome(
            None,
            (warn(WarningKind.VALIDATION, "could not detect required fields", context, payload),),
        )

    desc_field = _find_field(row, DESCRIPTION_FIELDS)
    category_field = _find_field(row, CATEGORY_FIELDS)
    description = (str(row.get(desc_field) or "").strip() if desc_field else "") or None
    category = (str(row.get(category_field) or "").strip() if category_field else "") or None

    fields: dict[str, Any] = {
        "date": row.get(date_field),
        "amount": row.get(amount_field),
        "category": category,
    }
    if description:
        fields["description"] = description
    return _validate_model(CsvRecord, fields, context=context, payload=payload)


def validate_sale_row(row: Mapping[str, Any]) -> Outcome[SaleRecord]:
    """Validate one order row of the sales export (no articles)."""

    return _validate_model(SaleRecord, row, context="sale validation", payload=dict(row))


def validate_article_row(row: Mapping[str, Any]) -> Outcome[ArticleRecord]:
    """Validate one row of the articles export."""

    return _validate_model(ArticleRecord, row, context="article validation", payload=dict(row))


def validate_order(record: Mapping[str, Any] | SaleOrderRecord) -> Outcome[SaleOrderRecord]:
    """Validate an order mapping that carries its ``articles`` list.

    An order missing its id, currency or article list is rejected, as is an
    order whose purchase date or any article fails validation.
    """

    if isinstance(record, SaleOrderRecord):
        return Outcome(record)

    context = "order validation"
    payload = dict(record)
    missing = [k for k in _ORDER_REQUIRED if _is_missing(record, k)]
    if missing:
        return Outcome(
            None,
            (warn(WarningKind.VALIDATION, f"missing required fields {missing}", context, payload),),
        )
    outcome = _validate_model(SaleOrderRecord, record, context=context, payload=payload)
    if outcome.value is not None:
        _logger.debug(
            "validate_order:ok order_id=%s articles=%d",
            outcome.value.order_id,
            len(outcome.value.articles),
        )
    return outcome


__all__ = [
    "AMOUNT_FIELDS",
    "CATEGORY_FIELDS",
    "DATE_FIELDS",
    "DESCRIPTION_FIELDS",
    "validate_article_row",
    "validate_csv_row",
    "validate_expense_row",
    "validate_order",
    "validate_sale_row",
]

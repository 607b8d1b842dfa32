"""Batch orchestration: rows or order mappings in, a ledger document out.

Each entry point validates every input, builds transactions with the rules in
:mod:`cardmarket_ledger.builder` and appends the ones that pass
:func:`~cardmarket_ledger.serializer.validate_transaction` to a fresh
:class:`~cardmarket_ledger.ledger.LedgerDocument`, in input order. Rejected
inputs are reported through :attr:`BatchResult.warnings`; nothing here raises
for a single bad row or order.

Orders may be processed on a bounded thread pool (``concurrency > 1``). Each
order is independent and results are re-sequenced before they reach the
document, so the output does not depend on ``concurrency``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .accounts import AccountMapper
from .builder import build_csv_transaction, build_expense_transaction, build_sale_transaction
from .errors import Outcome, RowWarning, WarningKind, warn
from .ledger import LedgerDocument, Transaction
from .logging_setup import get_logger
from .pmap import p_map
from .records import SaleOrderRecord
from .serializer import validate_transaction
from .validation import validate_csv_row, validate_expense_row, validate_order

_logger = get_logger("cardmarket_ledger.api")

DEFAULT_CURRENCY = "EUR"


@dataclass(slots=True)
class BatchResult:
    """Outcome of one batch run.

    ``total`` counts inputs seen, ``len(document)`` the transactions written
    and ``warnings`` every row or order that was skipped or needed a fallback.
    """

    document: LedgerDocument = field(default_factory=LedgerDocument)
    warnings: list[RowWarning] = field(default_factory=list)
    total: int = 0

    @property
    def skipped(self) -> int:
        return self.total - len(self.document)


def _append(result: BatchResult, transaction: Transaction, context: str) -> None:
    if validate_transaction(transaction):
        result.document.add_transaction(transaction)
        return
    result.warnings.append(
        warn(
            WarningKind.CONSTRUCTION,
            f"invalid transaction skipped: {transaction.date} {transaction.description!r}",
            context,
        )
    )


def _two_posting_batch(
    rows: Iterable[Mapping[str, Any]],
    *,
    validate: Callable[[Mapping[str, Any]], Outcome[Any]],
    build: Callable[[Any], Transaction],
    context: str,
) -> BatchResult:
    result = BatchResult()
    for row in rows:
        result.total += 1
        outcome = validate(row)
        result.warnings.extend(outcome.warnings)
        if outcome.value is None:
            continue
        try:
            transaction = build(outcome.value)
        except (ValueError, ArithmeticError) as e:
            result.warnings.append(
                warn(WarningKind.CONSTRUCTION, f"failed to create transaction: {e}", context, dict(row))
            )
            continue
        _append(result, transaction, context)
    _logger.info(
        "%s:done total=%d written=%d warnings=%d",
        context.replace(" ", "_"),
        result.total,
        len(result.document),
        len(result.warnings),
    )
    return result


def expenses_to_ledger(
    rows: Iterable[Mapping[str, Any]],
    *,
    mapper: AccountMapper | None = None,
    currency: str = DEFAULT_CURRENCY,
) -> BatchResult:
    """Convert expense-sheet rows to two-posting transactions.

    Rows with an unparseable ``Datum`` are booked on the current date and
    reported with a ``fallback`` warning.
    """

    m = mapper or AccountMapper()
    return _two_posting_batch(
        rows,
        validate=validate_expense_row,
        build=lambda record: build_expense_transaction(record, mapper=m, currency=currency),
        context="expenses import",
    )


def csv_to_ledger(
    rows: Iterable[Mapping[str, Any]],
    *,
    mapper: AccountMapper | None = None,
    currency: str = DEFAULT_CURRENCY,
) -> BatchResult:
    """Convert generic bank-style CSV rows to two-posting transactions."""

    m = mapper or AccountMapper()
    return _two_posting_batch(
        rows,
        validate=validate_csv_row,
        build=lambda record: build_csv_transaction(record, mapper=m, currency=currency),
        context="csv import",
    )


def orders_to_ledger(
    orders: Iterable[Mapping[str, Any] | SaleOrderRecord],
    *,
    mapper: AccountMapper | None = None,
    concurrency: int = 1,
) -> BatchResult:
    """Convert orders (each carrying its ``articles``) to consolidated transactions.

    Raises ``ValueError`` only for a non-positive ``concurrency``.
    """

    m = mapper or AccountMapper()
    items = list(orders)

    def _process(order: Mapping[str, Any] | SaleOrderRecord) -> Outcome[Transaction]:
        validated = validate_order(order)
        if validated.value is None:
            return Outcome(None, validated.warnings)
        built = build_sale_transaction(validated.value, mapper=m)
        return Outcome(built.value, validated.warnings + built.warnings)

    outcomes = p_map(items, _process, concurrency=concurrency, thread_name_prefix="cml-order")

    result = BatchResult(total=len(items))
    for outcome in outcomes:
        result.warnings.extend(outcome.warnings)
        if outcome.value is not None:
            _append(result, outcome.value, "sales import")
    _logger.info(
        "orders_to_ledger:done total=%d written=%d warnings=%d concurrency=%d",
        result.total,
        len(result.document),
        len(result.warnings),
        concurrency,
    )
    return result


__all__ = [
    "DEFAULT_CURRENCY",
    "BatchResult",
    "csv_to_ledger",
    "expenses_to_ledger",
    "orders_to_ledger",
]

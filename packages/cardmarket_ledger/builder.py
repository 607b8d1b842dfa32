"""Transaction construction: expense/CSV two-posting rule and consolidated sales.

Two rules, chosen by the caller from the record type it holds:

Two-posting rule
    Expense and generic CSV records become one transaction with the expense
    account at ``+amount`` and its balancing account at ``-amount``.

Consolidated sale rule
    An order and all of its articles become one transaction. Per article,
    three postings keyed by the article's box id (the first ``#<digits>`` in
    its comment, ``Uncategorized`` otherwise)::

        Revenue:<ns>:Sales:<box>         -total
        Expenses:<ns>:Commission:<box>   ceil_cents(total * 0.05)
        Assets:<ns>:Receivable:<box>     round_cents(-(-total + commission))

    followed by the shared shipping pair and one final
    ``Assets:<ns>:Receivable`` posting without an amount, which the ledger
    tool balances. Each article's three postings sum to zero on their own.

The reported order commission is compared with the sum of the per-article
commissions and the difference is logged. No adjusting posting is emitted for
it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal

from .accounts import AccountMapper
from .amounts import ceil_cents, format_amount, format_quantity, to_cents
from .errors import ConstructionError, Outcome, WarningKind, warn
from .ledger import Posting, Transaction
from .logging_setup import get_logger
from .records import ArticleRecord, CsvRecord, ExpenseRecord, SaleOrderRecord

COMMISSION_RATE = Decimal("0.05")
UNCATEGORIZED_BOX = "Uncategorized"

_BOX_ID_RE = re.compile(r"#(\d+)")

_logger = get_logger("cardmarket_ledger.builder")


# ---- Two-posting rule ------------------------------------------------------


def build_expense_transaction(
    record: ExpenseRecord, *, mapper: AccountMapper, currency: str
) -> Transaction:
    """Book an expense against the accounts of its code.

    The provenance (code and original timestamp) is kept as a single
    ``comment`` tag.
    """

    accounts = mapper.lookup(record.code)
    amount = to_cents(record.amount)
    return Transaction(
        date=record.date.isoformat(),
        description=record.name,
        postings=(
            Posting(account=accounts.expense, amount=amount, currency=currency),
            Posting(account=accounts.balancing, amount=-amount, currency=currency),
        ),
        tags={"comment": f"Code: {record.code} | Timestamp: {record.timestamp}"},
    )


def build_csv_transaction(
    record: CsvRecord, *, mapper: AccountMapper, currency: str
) -> Transaction:
    amount = to_cents(record.amount)
    return Transaction(
        date=record.date.isoformat(),
        description=record.description,
        postings=(
            Posting(
                account=mapper.category_account(record.category),
                amount=amount,
                currency=currency,
            ),
            Posting(
                account=mapper.category_balancing_account(record.category),
                amount=-amount,
                currency=currency,
            ),
        ),
    )


# ---- Consolidated sale rule ------------------------------------------------


def extract_box_id(comment: str | None) -> str | None:
    """Return the digits of the first ``#<digits>`` token in ``comment``."""

    if not comment:
        return None
    m = _BOX_ID_RE.search(comment)
    return m.group(1) if m else None


def commission_for(total: Decimal) -> Decimal:
    """Platform commission for one article, rounded up to the cent."""

    return ceil_cents(total * COMMISSION_RATE)


def receivable_for(total: Decimal, commission: Decimal) -> Decimal:
    """Amount owed by the platform for one article: sale price minus commission."""

    revenue = -total
    return to_cents((revenue + commission) * -1)


@dataclass(frozen=True, slots=True)
class CommissionCheck:
    """Reported order commission versus the sum of per-article commissions."""

    order_id: str
    reported: Decimal
    computed: Decimal

    @property
    def delta(self) -> Decimal:
        return self.reported - self.computed

    @property
    def matches(self) -> bool:
        return self.delta == 0


def _article_postings(
    article: ArticleRecord, *, mapper: AccountMapper, order_currency: str
) -> tuple[str | None, Decimal, list[Posting]]:
    box_id = extract_box_id(article.comments)
    box = box_id or UNCATEGORIZED_BOX
    currency = article.currency or order_currency
    total = to_cents(article.total)
    commission = commission_for(total)

    comment_parts = [f"Box #{box_id}"] if box_id else []
    comment_parts.append(f"{format_quantity(article.amount)}x {article.article}")
    comment_parts.append(f"{format_amount(total)} {currency}")

    postings = [
        Posting(
            account=mapper.sale_account("revenue", box),
            amount=-total,
            currency=currency,
            comment=" | ".join(comment_parts),
        ),
        Posting(
            account=mapper.sale_account("commission", box),
            amount=commission,
            currency=currency,
        ),
        Posting(
            account=mapper.sale_account("receivable", box),
            amount=receivable_for(total, commission),
            currency=currency,
        ),
    ]
    return box_id, commission, postings


def _sale_transaction(order: SaleOrderRecord, mapper: AccountMapper) -> Transaction:
    if not order.order_id:
        raise ConstructionError("order has no id")
    if not order.currency:
        raise ConstructionError(f"order {order.order_id} has no currency")

    postings: list[Posting] = []
    box_ids: list[str] = []
    commission_total = Decimal("0")

    for article in order.articles:
        box_id, commission, article_postings = _article_postings(
            article, mapper=mapper, order_currency=order.currency
        )
        postings.extend(article_postings)
        commission_total += commission
        if box_id and box_id not in box_ids:
            box_ids.append(box_id)

    check = CommissionCheck(
        order_id=order.order_id,
        reported=to_cents(order.commission),
        computed=commission_total,
    )
    if not check.matches:
        _logger.info(
            "build_sale:commission_mismatch order_id=%s reported=%s computed=%s delta=%s",
            check.order_id,
            format_amount(check.reported),
            format_amount(check.computed),
            format_amount(check.delta),
        )

    shipping = to_cents(order.shipment_costs)
    postings.append(
        Posting(account=mapper.sale_account("shipping_revenue"), amount=-shipping, currency=order.currency)
    )
    postings.append(
        Posting(account=mapper.sale_account("shipping_receivable"), amount=shipping, currency=order.currency)
    )
    postings.append(Posting(account=mapper.sale_account("balance")))

    tags = {
        "orderId": order.order_id,
        "username": order.username,
        "country": order.country,
        "isProfessional": "true" if order.is_professional else "false",
    }
    if box_ids:
        tags["boxIds"] = ",".join(box_ids)

    return Transaction(
        date=order.date_of_purchase.isoformat(),
        description=f"Cardmarket Sale - {order.username} ({order.order_id})",
        postings=tuple(postings),
        tags=tags,
    )


def build_sale_transaction(
    order: SaleOrderRecord, *, mapper: AccountMapper
) -> Outcome[Transaction]:
    """Build the consolidated transaction for one order.

    Never raises for a malformed order: the failure is logged and returned as
    a ``construction`` warning with ``None`` as the value, so the caller can
    skip the order and continue the batch.
    """

    try:
        return Outcome(_sale_transaction(order, mapper))
    except (ConstructionError, AttributeError, TypeError, ValueError, ArithmeticError) as e:
        order_id = getattr(order, "order_id", None)
        payload = order.model_dump(mode="json", by_alias=True) if isinstance(order, SaleOrderRecord) else None
        return Outcome(
            None,
            (
                warn(
                    WarningKind.CONSTRUCTION,
                    f"failed to create transaction for order {order_id!r}: {e}",
                    "sale transaction",
                    payload,
                ),
            ),
        )


__all__ = [
    "COMMISSION_RATE",
    "UNCATEGORIZED_BOX",
    "CommissionCheck",
    "build_csv_transaction",
    "build_expense_transaction",
    "build_sale_transaction",
    "commission_for",
    "extract_box_id",
    "receivable_for",
]

"""Double-entry ledger model: postings, transactions and the batch document."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

_DATE_RE = re.compile(r"^\d{4}[/-]\d{2}[/-]\d{2}$")


@dataclass(frozen=True, slots=True)
class Posting:
    """One account/amount line of a transaction.

    A posting without ``amount`` is the balancing posting; the ledger tool
    infers its value as the negative sum of the other postings sharing its
    currency.
    """

    account: str
    amount: Decimal | None = None
    currency: str | None = None
    comment: str | None = None

    @property
    def is_balancing(self) -> bool:
        return self.amount is None


@dataclass(frozen=True, slots=True)
class Transaction:
    """A dated, described group of postings.

    ``postings`` keeps the caller's order; it is stored as a tuple. ``tags``
    are written as ``; key: value`` comment lines after the postings.

    Invariants (checked on construction, ``ValueError`` otherwise):
    - at least two postings
    - at most one posting without an amount
    - ``date`` is ``YYYY-MM-DD`` or ``YYYY/MM/DD``
    """

    date: str
    description: str
    postings: tuple[Posting, ...]
    tags: Mapping[str, str] | None = field(default=None)

    def __post_init__(self) -> None:
        if not isinstance(self.postings, tuple):
            object.__setattr__(self, "postings", tuple(self.postings))
        if len(self.postings) < 2:
            raise ValueError("Transaction requires at least two postings")
        if sum(1 for p in self.postings if p.amount is None) > 1:
            raise ValueError("Transaction allows at most one posting without an amount")
        if not _DATE_RE.fullmatch(self.date or ""):
            raise ValueError(f"Transaction date must be YYYY-MM-DD or YYYY/MM/DD: {self.date!r}")
        if self.tags is not None:
            object.__setattr__(self, "tags", dict(self.tags))


def implied_balance(transaction: Transaction) -> dict[str | None, Decimal]:
    """Return, per currency, the value the ledger tool gives the balancing posting.

    The result is the negative sum of all specified amounts in each currency.
    For a transaction without a balancing posting every value is ``0`` when the
    transaction balances.
    """

    totals: dict[str | None, Decimal] = {}
    for p in transaction.postings:
        if p.amount is None:
            continue
        totals[p.currency] = totals.get(p.currency, Decimal("0")) + p.amount
    return {cur: -total for cur, total in totals.items()}


def is_balanced(transaction: Transaction) -> bool:
    """True when the transaction sums to zero in every currency.

    A balancing posting absorbs the residue of every currency, so such
    transactions always balance.
    """

    if any(p.amount is None for p in transaction.postings):
        return True
    return all(v == 0 for v in implied_balance(transaction).values())


class LedgerDocument:
    """Append-only, ordered accumulator of the transactions of one batch run."""

    __slots__ = ("_transactions",)

    def __init__(self, transactions: Iterable[Transaction] = ()) -> None:
        self._transactions: list[Transaction] = list(transactions)

    def add_transaction(self, transaction: Transaction) -> None:
        self._transactions.append(transaction)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(tuple(self._transactions))

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"LedgerDocument(transactions={len(self._transactions)})"


__all__ = ["LedgerDocument", "Posting", "Transaction", "implied_balance", "is_balanced"]

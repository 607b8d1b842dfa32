"""Render a :class:`~cardmarket_ledger.ledger.LedgerDocument` as journal text.

Output follows the plain-text transaction syntax of hledger/ledger::

    2025-08-29 Deutsche Post
        Expenses:Cardmarket:Shipping:stamps  14.49 EUR
        Assets:Cardmarket:Receivable:Shipping  -14.49 EUR
        ; comment: Code: 900 | Timestamp: 8/29/2025 14:10:24

Transactions are separated by one blank line; an empty document renders as
the empty string.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from os import PathLike

from .amounts import format_amount
from .ledger import LedgerDocument, Posting, Transaction

INDENT = "    "
_DATE_RE = re.compile(r"^(\d{4})[/-](\d{2})[/-](\d{2})$")
_LINE_BREAK_RE = re.compile(r"\s*[\r\n]+\s*")


def _one_line(text: str) -> str:
    """Fold embedded line breaks so a value cannot start a new journal line."""

    return _LINE_BREAK_RE.sub(" ", text).strip()


def format_posting(posting: Posting) -> str:
    line = f"{INDENT}{_one_line(posting.account)}"
    if posting.amount is not None:
        line += f"  {format_amount(posting.amount)}"
        if posting.currency:
            line += f" {posting.currency}"
    if posting.comment:
        line += f"  ; {_one_line(posting.comment)}"
    return line


def format_transaction(transaction: Transaction) -> str:
    lines = [f"{transaction.date} {_one_line(transaction.description)}"]
    lines.extend(format_posting(p) for p in transaction.postings)
    if transaction.tags:
        lines.extend(
            f"{INDENT}; {_one_line(key)}: {_one_line(str(value))}"
            for key, value in transaction.tags.items()
        )
    return "\n".join(lines)


def serialize(document: LedgerDocument | Iterable[Transaction]) -> str:
    return "\n\n".join(format_transaction(t) for t in document)


def validate_transaction(transaction: Transaction) -> bool:
    """Check the fields the ledger tool needs before a transaction is written."""

    if not transaction.date or not transaction.description or len(transaction.postings) < 2:
        return False
    return _DATE_RE.fullmatch(transaction.date) is not None


def write_ledger(document: LedgerDocument, path: str | PathLike[str]) -> int:
    """Serialize ``document`` to ``path`` (UTF-8) and return the character count."""

    from .ingest.utils import write_text

    content = serialize(document)
    write_text(path, content)
    return len(content)


__all__ = [
    "format_posting",
    "format_transaction",
    "serialize",
    "validate_transaction",
    "write_ledger",
]

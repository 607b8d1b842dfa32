"""Account paths for expense codes and sale postings.

All account naming lives in this module as data. Expense codes resolve through
``EXPENSE_CODE_TABLE``; any code not listed falls back to one
product-per-code pattern. Sale postings use the ``SALE_ACCOUNTS`` templates
keyed by role. ``{ns}`` is the marketplace namespace segment (``Cardmarket``
by default), ``{code}`` the expense code and ``{box}`` the box id.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

DEFAULT_NAMESPACE = "Cardmarket"


@dataclass(frozen=True, slots=True)
class AccountPair:
    """Where an expense is booked and which account balances it."""

    expense: str
    balancing: str


# code -> (expense template, balancing template)
EXPENSE_CODE_TABLE: Mapping[str, tuple[str, str]] = {
    "900": ("Expenses:{ns}:Shipping:stamps", "Assets:{ns}:Receivable:Shipping"),
    "901": ("Expenses:{ns}:Shipping:Stationary", "Assets:{ns}:Receivable:Shipping"),
    "902": ("Expenses:{ns}:TCGPowerTools", "Assets:{ns}:Receivable:Operations"),
}

FALLBACK_EXPENSE_TEMPLATE: tuple[str, str] = (
    "Expenses:{ns}:Product:{code}",
    "Assets:{ns}:Receivable:{code}",
)

SALE_ACCOUNTS: Mapping[str, str] = {
    "revenue": "Revenue:{ns}:Sales:{box}",
    "commission": "Expenses:{ns}:Commission:{box}",
    "receivable": "Assets:{ns}:Receivable:{box}",
    "shipping_revenue": "Revenue:{ns}:Shipping",
    "shipping_receivable": "Assets:{ns}:Receivable:shipping",
    "balance": "Assets:{ns}:Receivable",
}

# Generic CSV rows (bank-style exports) outside the marketplace namespace.
CSV_BALANCING_ACCOUNT = "Assets:Checking"
CSV_UNCATEGORIZED_ACCOUNT = "Expenses:Uncategorized"


@dataclass(frozen=True, slots=True)
class AccountMapper:
    """Pure code -> :class:`AccountPair` lookup.

    ``overrides`` come from the optional account-mapping file (see
    :mod:`cardmarket_ledger.config`) and take precedence over the built-in
    table. An override may replace only one side of the pair; the other side
    keeps its table or fallback value.
    """

    namespace: str = DEFAULT_NAMESPACE
    overrides: Mapping[str, AccountPair | str] = field(default_factory=dict)

    def lookup(self, code: str) -> AccountPair:
        key = str(code).strip()
        expense_tpl, balancing_tpl = EXPENSE_CODE_TABLE.get(key, FALLBACK_EXPENSE_TEMPLATE)
        pair = AccountPair(
            expense=expense_tpl.format(ns=self.namespace, code=key),
            balancing=balancing_tpl.format(ns=self.namespace, code=key),
        )

        override = self.overrides.get(key)
        if override is None:
            return pair
        if isinstance(override, str):
            return AccountPair(expense=override, balancing=pair.balancing)
        return AccountPair(
            expense=override.expense or pair.expense,
            balancing=override.balancing or pair.balancing,
        )

    def expense_account(self, code: str) -> str:
        return self.lookup(code).expense

    def balancing_account(self, code: str) -> str:
        return self.lookup(code).balancing

    def sale_account(self, role: str, box_id: str | None = None) -> str:
        """Account for a sale posting ``role`` (see ``SALE_ACCOUNTS``)."""

        try:
            template = SALE_ACCOUNTS[role]
        except KeyError as exc:
            raise KeyError(f"unknown sale account role: {role!r}") from exc
        return template.format(ns=self.namespace, box=box_id or "")

    def category_account(self, category: str | None) -> str:
        """Expense account for a generic CSV category."""

        if not category:
            return CSV_UNCATEGORIZED_ACCOUNT
        override = self.overrides.get(category)
        if isinstance(override, str):
            return override
        if isinstance(override, AccountPair) and override.expense:
            return override.expense
        return f"Expenses:{category}"

    def category_balancing_account(self, category: str | None) -> str:
        if category:
            override = self.overrides.get(category)
            if isinstance(override, AccountPair) and override.balancing:
                return override.balancing
        return CSV_BALANCING_ACCOUNT


__all__ = [
    "CSV_BALANCING_ACCOUNT",
    "CSV_UNCATEGORIZED_ACCOUNT",
    "DEFAULT_NAMESPACE",
    "EXPENSE_CODE_TABLE",
    "FALLBACK_EXPENSE_TEMPLATE",
    "SALE_ACCOUNTS",
    "AccountMapper",
    "AccountPair",
]

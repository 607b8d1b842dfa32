"""Public interface for the ``cardmarket_ledger`` package.

Converts Cardmarket exports (sales orders with their articles) and expense
sheets into balanced double-entry transactions and renders them as hledger
journal text. This module only re-exports the stable import surface.
"""

__version__ = "1.0.0"

from .accounts import AccountMapper, AccountPair  # noqa: E402
from .api import BatchResult, csv_to_ledger, expenses_to_ledger, orders_to_ledger  # noqa: E402
from .builder import (  # noqa: E402
    build_csv_transaction,
    build_expense_transaction,
    build_sale_transaction,
    extract_box_id,
)
from .errors import (  # noqa: E402
    ConfigError,
    ConstructionError,
    LedgerError,
    LedgerIOError,
    Outcome,
    RowWarning,
    WarningKind,
)
from .ledger import LedgerDocument, Posting, Transaction, implied_balance, is_balanced  # noqa: E402
from .records import (  # noqa: E402
    ArticleRecord,
    CsvRecord,
    ExpenseRecord,
    SaleOrderRecord,
    SaleRecord,
)
from .serializer import serialize, validate_transaction, write_ledger  # noqa: E402

__all__ = [
    "__version__",
    # API
    "csv_to_ledger",
    "expenses_to_ledger",
    "orders_to_ledger",
    "BatchResult",
    # Builder and mapping
    "AccountMapper",
    "AccountPair",
    "build_csv_transaction",
    "build_expense_transaction",
    "build_sale_transaction",
    "extract_box_id",
    # Ledger model
    "LedgerDocument",
    "Posting",
    "Transaction",
    "implied_balance",
    "is_balanced",
    "serialize",
    "validate_transaction",
    "write_ledger",
    # Records
    "ArticleRecord",
    "CsvRecord",
    "ExpenseRecord",
    "SaleOrderRecord",
    "SaleRecord",
    # Errors
    "ConfigError",
    "ConstructionError",
    "LedgerError",
    "LedgerIOError",
    "Outcome",
    "RowWarning",
    "WarningKind",
]

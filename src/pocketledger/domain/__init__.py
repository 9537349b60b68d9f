"""Domain layer for pocketledger.

Services live in their own modules (``pocketledger.domain.billing``,
``pocketledger.domain.csv_import`` and so on) and are imported from there;
this package only re-exports the entities and errors they share.
"""

from pocketledger.domain.entities import (
    Account,
    AccountType,
    BillStatus,
    Category,
    CreditCardBill,
    CreditCardSettings,
    EntryTransaction,
    ImportOptions,
    Payee,
    ReportFilters,
    Transaction,
    TransactionStatus,
    TransactionType,
    TransferTransaction,
)
from pocketledger.domain.errors import (
    ConflictError,
    DependencyError,
    DomainError,
    NotFoundError,
    RowImportError,
    ValidationError,
)

__all__ = [
    "Account",
    "AccountType",
    "BillStatus",
    "Category",
    "CreditCardBill",
    "CreditCardSettings",
    "EntryTransaction",
    "ImportOptions",
    "Payee",
    "ReportFilters",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "TransferTransaction",
    "ConflictError",
    "DependencyError",
    "DomainError",
    "NotFoundError",
    "RowImportError",
    "ValidationError",
]

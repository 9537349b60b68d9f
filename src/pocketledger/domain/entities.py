"""Domain model entities for pocketledger.

These are pure data classes representing business concepts, independent of
database schema. Every stored entity carries the id of the owner it belongs
to; stores and services never return records of another owner.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Union

CENTS = Decimal("0.01")


def quantize_amount(value: Decimal) -> Decimal:
    """Round a money value to two decimal places."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


class AccountType(str, Enum):
    """Kinds of accounts a user can hold."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"
    CASH = "cash"
    INVESTMENT = "investment"
    LOAN = "loan"
    OTHER = "other"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Currency(str, Enum):
    INR = "INR"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BillStatus(str, Enum):
    """Credit card bill status.

    SENT is reserved for a notification collaborator; no payment transition
    produces it.
    """

    GENERATED = "generated"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    PARTIAL = "partial"


class TimeGrouping(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class GroupBy(str, Enum):
    """Grouping options for exports."""

    NONE = "none"
    ACCOUNT = "account"
    CATEGORY = "category"
    PAYEE = "payee"
    TYPE = "type"
    STATUS = "status"
    MONTH = "month"


@dataclass(frozen=True)
class CreditCardSettings:
    """Bill generation settings of a credit card account.

    Rates are fractions: 0.18 means 18% a year, 0.05 means 5% of the bill.
    """

    bill_generation_day: int
    bill_due_day: int
    interest_rate: Decimal = Decimal("0")
    minimum_payment_percentage: Decimal = Decimal("0.05")
    credit_limit: Optional[Decimal] = None


@dataclass(frozen=True)
class Account:
    """Account domain entity."""

    id: int
    owner_id: int
    name: str
    account_type: AccountType
    currency: Currency
    initial_balance: Decimal
    current_balance: Decimal
    status: AccountStatus
    created_at: datetime
    credit_card: Optional[CreditCardSettings] = None

    @property
    def is_credit_card(self) -> bool:
        return self.account_type == AccountType.CREDIT_CARD


@dataclass(frozen=True)
class Category:
    """Category domain entity.

    ``name`` is the machine slug derived from ``display_name``.
    """

    id: int
    owner_id: int
    name: str
    display_name: str
    description: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Payee:
    """Payee domain entity."""

    id: int
    owner_id: int
    name: str
    display_name: str
    description: Optional[str]
    category_hint: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class EntryTransaction:
    """Deposit or withdrawal posted against a single account."""

    id: int
    owner_id: int
    type: TransactionType
    date: date
    status: TransactionStatus
    amount: Decimal
    account_id: int
    payee_id: Optional[int]
    category_id: Optional[int]
    notes: Optional[str]
    created_at: datetime

    @property
    def account_ids(self) -> tuple[int, ...]:
        return (self.account_id,)


@dataclass(frozen=True)
class TransferTransaction:
    """Movement of money between two accounts of the same owner."""

    id: int
    owner_id: int
    date: date
    status: TransactionStatus
    amount: Decimal
    from_account_id: int
    to_account_id: int
    notes: Optional[str]
    created_at: datetime
    type: TransactionType = field(default=TransactionType.TRANSFER, init=False)

    @property
    def account_ids(self) -> tuple[int, ...]:
        return (self.from_account_id, self.to_account_id)


Transaction = Union[EntryTransaction, TransferTransaction]


@dataclass(frozen=True)
class CreditCardBill:
    """Credit card bill domain entity.

    ``status`` is derived from the payment fields and the due date when the
    bill is read; it is never stored.
    """

    id: int
    owner_id: int
    account_id: int
    billing_period_start: date
    billing_period_end: date
    bill_generation_date: date
    bill_due_date: date
    bill_amount: Decimal
    transaction_count: int
    interest_rate: Decimal
    minimum_payment_percentage: Decimal
    is_paid: bool
    paid_amount: Optional[Decimal]
    paid_date: Optional[date]
    notes: Optional[str]
    status: BillStatus
    created_at: datetime
    # Unpaid balance of earlier bills carried into this one
    previous_balance: Decimal = Decimal("0")
    late_fee: Decimal = Decimal("0")

    @property
    def minimum_payment(self) -> Decimal:
        return quantize_amount(self.bill_amount * self.minimum_payment_percentage)

    @property
    def outstanding_amount(self) -> Decimal:
        if not self.is_paid:
            return self.bill_amount
        return max(self.bill_amount - (self.paid_amount or Decimal("0")), Decimal("0"))

    @property
    def interest_charges(self) -> Decimal:
        """One month of interest on the carried balance at the bill's annual rate."""
        return quantize_amount(self.previous_balance * self.interest_rate / 12)

    @property
    def total_due(self) -> Decimal:
        """New charges plus carried balance, interest and late fee."""
        return self.bill_amount + self.previous_balance + self.interest_charges + self.late_fee

    def days_overdue(self, today: Optional[date] = None) -> int:
        """Number of days past the due date, 0 when paid or not yet due."""
        today = today or date.today()
        if self.is_paid or today <= self.bill_due_date:
            return 0
        return (today - self.bill_due_date).days


@dataclass(frozen=True)
class BillGenerationResult:
    success: bool
    bill: Optional[CreditCardBill]
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class BillsSummary:
    """Dashboard view over all bills of an owner."""

    total_outstanding: Decimal
    total_overdue: Decimal
    upcoming_due: Decimal
    total_count: int
    paid_count: int
    unpaid_count: int
    overdue_count: int
    next_due_date: Optional[date]


@dataclass(frozen=True)
class Budget:
    id: int
    owner_id: int
    category_id: int
    month: date
    amount: Decimal
    created_at: datetime


@dataclass(frozen=True)
class BudgetUsage:
    """A budget with its spending computed for the month."""

    budget: Budget
    category_name: str
    spent: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.budget.amount - self.spent

    @property
    def percent_used(self) -> float:
        if self.budget.amount == 0:
            return 0.0
        return float(self.spent / self.budget.amount * 100)


@dataclass(frozen=True)
class ImportOptions:
    create_missing_categories: bool = False
    create_missing_payees: bool = False
    skip_duplicates: bool = False
    dry_run: bool = False


@dataclass(frozen=True)
class ParsedTransaction:
    """One CSV data row after parsing, before reconciliation."""

    row_number: int
    source_id: str
    date: Optional[date]
    account: str
    payee: str
    category: str
    withdrawal: Decimal
    deposit: Decimal
    notes: str
    type: TransactionType
    amount: Decimal
    is_transfer: bool
    transfer_to_account: Optional[str]
    validation_errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors


@dataclass(frozen=True)
class ImportResult:
    """Outcome of importing one parsed row."""

    success: bool
    transaction: ParsedTransaction
    created_category: bool = False
    created_payee: bool = False
    skipped: bool = False
    error: Optional[str] = None
    transaction_id: Optional[int] = None


@dataclass(frozen=True)
class ImportSummary:
    total: int
    successful: int
    failed: int
    skipped: int
    deposits: int
    withdrawals: int
    transfers: int
    created_categories: int
    created_payees: int
    errors: tuple[str, ...] = ()


class RecordImportStatus(str, Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class RecordImportResult:
    """Outcome of one line of an account, category or payee import."""

    line_number: int
    name: str
    status: RecordImportStatus
    record_id: Optional[int] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class RecordImportSummary:
    total: int
    created: int
    duplicates: int
    failed: int
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReportFilters:
    """Report filter criteria.

    Empty collections and None values mean "no restriction" on that
    dimension, so ``ReportFilters()`` matches everything.
    """

    date_range: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    account_ids: tuple[int, ...] = ()
    category_ids: tuple[int, ...] = ()
    payee_ids: tuple[int, ...] = ()
    transaction_types: tuple[TransactionType, ...] = ()
    transaction_statuses: tuple[TransactionStatus, ...] = ()
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    account_types: tuple[AccountType, ...] = ()
    search_term: Optional[str] = None
    include_notes: bool = False


@dataclass(frozen=True)
class TransactionSummary:
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    transaction_count: int
    average_amount: Decimal
    start_date: Optional[date]
    end_date: Optional[date]


@dataclass(frozen=True)
class CategoryBreakdown:
    category_id: Optional[int]
    category_name: str
    amount: Decimal
    percentage: float
    transaction_count: int


@dataclass(frozen=True)
class TimeSeriesPoint:
    key: str
    label: str
    start: date
    income: Decimal
    expenses: Decimal
    net: Decimal
    transaction_count: int


@dataclass(frozen=True)
class AccountPerformance:
    account_id: int
    account_name: str
    account_type: AccountType
    starting_balance: Decimal
    ending_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    net_change: Decimal
    transaction_count: int


@dataclass(frozen=True)
class PayeeAnalysis:
    payee_id: int
    payee_name: str
    total_amount: Decimal
    transaction_count: int
    average_amount: Decimal
    last_transaction_date: date
    categories: tuple[str, ...]


@dataclass(frozen=True)
class TransactionGroup:
    key: str
    label: str
    transactions: tuple[Transaction, ...]
    total_amount: Decimal

    @property
    def count(self) -> int:
        return len(self.transactions)

"""Abstract database interface.

Every accessor is keyed by owner id. Records belonging to another owner are
treated exactly like missing records.
"""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from pocketledger.domain.entities import (
    Account,
    AccountType,
    Budget,
    Category,
    CreditCardBill,
    CreditCardSettings,
    Currency,
    Payee,
    Transaction,
    TransactionStatus,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for pocketledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        owner_id: int,
        name: str,
        account_type: AccountType,
        currency: Currency,
        initial_balance: Decimal,
        credit_card: Optional[CreditCardSettings] = None,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, owner_id: int, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, owner_id: int, account_type: Optional[AccountType] = None) -> list[Account]:
        """List accounts of an owner, optionally of one type."""
        pass

    @abstractmethod
    def update_account_name(self, owner_id: int, account_id: int, name: str) -> None:
        """Rename an account."""
        pass

    @abstractmethod
    def update_credit_card_settings(
        self, owner_id: int, account_id: int, settings: CreditCardSettings
    ) -> None:
        """Replace the bill settings of a credit card account."""
        pass

    @abstractmethod
    def delete_account(self, owner_id: int, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, owner_id: int, account_id: int) -> int:
        """Count transactions referencing an account on either side."""
        pass

    @abstractmethod
    def get_account_bill_count(self, owner_id: int, account_id: int) -> int:
        """Count credit card bills of an account."""
        pass

    @abstractmethod
    def recalculate_account_balance(self, owner_id: int, account_id: int) -> Decimal:
        """Recompute and store the current balance of an account. Returns it."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self, owner_id: int, name: str, display_name: str, description: Optional[str] = None
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, owner_id: int, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self, owner_id: int, active_only: bool = False) -> list[Category]:
        """List categories ordered by display name."""
        pass

    @abstractmethod
    def update_category(
        self,
        owner_id: int,
        category_id: int,
        name: Optional[str] = None,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update category fields. None leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_category(self, owner_id: int, category_id: int) -> None:
        """Delete a category."""
        pass

    @abstractmethod
    def count_category_references(self, owner_id: int, category_id: int) -> dict[str, int]:
        """Count records referencing a category, keyed by record kind."""
        pass

    # Payee operations
    @abstractmethod
    def create_payee(
        self,
        owner_id: int,
        name: str,
        display_name: str,
        description: Optional[str] = None,
        category_hint: Optional[str] = None,
    ) -> int:
        """Create a payee. Returns payee ID."""
        pass

    @abstractmethod
    def get_payee(self, owner_id: int, payee_id: int) -> Optional[Payee]:
        """Get payee by ID."""
        pass

    @abstractmethod
    def list_payees(self, owner_id: int, active_only: bool = False) -> list[Payee]:
        """List payees ordered by display name."""
        pass

    @abstractmethod
    def update_payee(
        self,
        owner_id: int,
        payee_id: int,
        name: Optional[str] = None,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
        category_hint: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update payee fields. None leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_payee(self, owner_id: int, payee_id: int) -> None:
        """Delete a payee."""
        pass

    @abstractmethod
    def count_payee_references(self, owner_id: int, payee_id: int) -> dict[str, int]:
        """Count records referencing a payee, keyed by record kind."""
        pass

    # Transaction operations
    @abstractmethod
    def create_entry_transaction(
        self,
        owner_id: int,
        transaction_type: TransactionType,
        date: date,
        amount: Decimal,
        account_id: int,
        payee_id: Optional[int] = None,
        category_id: Optional[int] = None,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        notes: Optional[str] = None,
    ) -> int:
        """Create a deposit or withdrawal. Returns transaction ID."""
        pass

    @abstractmethod
    def create_transfer_transaction(
        self,
        owner_id: int,
        date: date,
        amount: Decimal,
        from_account_id: int,
        to_account_id: int,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        notes: Optional[str] = None,
    ) -> int:
        """Create a transfer. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, owner_id: int, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        owner_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        transaction_type: Optional[TransactionType] = None,
        status: Optional[TransactionStatus] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters.

        Args:
            owner_id: Owner of the transactions
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            account_id: Optional account filter, matching either side of a transfer
            category_id: Optional category ID filter
            transaction_type: Optional type filter
            status: Optional status filter
        """
        pass

    @abstractmethod
    def find_matching_transaction(
        self,
        owner_id: int,
        transaction_type: TransactionType,
        date: date,
        amount: Decimal,
        account_id: Optional[int] = None,
        payee_id: Optional[int] = None,
        category_id: Optional[int] = None,
        from_account_id: Optional[int] = None,
        to_account_id: Optional[int] = None,
    ) -> Optional[Transaction]:
        """Find a non-cancelled transaction with the same shape, if any.

        Entries match on account and counterparty: the payee when given, else
        the category, and a row with neither only matches one with neither.
        Transfers match on both accounts.
        """
        pass

    @abstractmethod
    def update_transaction(
        self,
        owner_id: int,
        transaction_id: int,
        status: Optional[TransactionStatus] = None,
        category_id: Optional[int] = None,
        notes: Optional[str] = None,
        update_category: bool = False,
    ) -> None:
        """Update the mutable fields of a transaction.

        Args:
            update_category: If True, update category_id even if it's None (to clear it)
        """
        pass

    @abstractmethod
    def delete_transaction(self, owner_id: int, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    # Credit card bill operations
    @abstractmethod
    def create_bill(
        self,
        owner_id: int,
        account_id: int,
        billing_period_start: date,
        billing_period_end: date,
        bill_generation_date: date,
        bill_due_date: date,
        bill_amount: Decimal,
        transaction_count: int,
        interest_rate: Decimal,
        minimum_payment_percentage: Decimal,
        notes: Optional[str] = None,
        previous_balance: Decimal = Decimal("0"),
        late_fee: Decimal = Decimal("0"),
    ) -> int:
        """Create a credit card bill. Returns bill ID."""
        pass

    @abstractmethod
    def get_bill(self, owner_id: int, bill_id: int, today: Optional[date] = None) -> Optional[CreditCardBill]:
        """Get bill by ID with its status derived as of ``today``."""
        pass

    @abstractmethod
    def list_bills(
        self, owner_id: int, account_id: Optional[int] = None, today: Optional[date] = None
    ) -> list[CreditCardBill]:
        """List bills, newest billing period first."""
        pass

    @abstractmethod
    def update_bill_payment(
        self,
        owner_id: int,
        bill_id: int,
        is_paid: bool,
        paid_amount: Optional[Decimal],
        paid_date: Optional[date],
    ) -> None:
        """Set the payment fields of a bill."""
        pass

    @abstractmethod
    def delete_bill(self, owner_id: int, bill_id: int) -> None:
        """Delete a bill."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(self, owner_id: int, category_id: int, month: date, amount: Decimal) -> int:
        """Create a monthly budget. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, owner_id: int, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def list_budgets(self, owner_id: int, month: Optional[date] = None) -> list[Budget]:
        """List budgets, optionally for a single month."""
        pass

    @abstractmethod
    def update_budget_amount(self, owner_id: int, budget_id: int, amount: Decimal) -> None:
        """Change the amount of a budget."""
        pass

    @abstractmethod
    def delete_budget(self, owner_id: int, budget_id: int) -> None:
        """Delete a budget."""
        pass

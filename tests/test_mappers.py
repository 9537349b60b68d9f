"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from pocketledger.database.models import (
    Account as ORMAccount,
    Budget as ORMBudget,
    Category as ORMCategory,
    CreditCardBill as ORMCreditCardBill,
    Payee as ORMPayee,
    Transaction as ORMTransaction,
)
from pocketledger.database.mappers import (
    account_to_domain,
    bill_to_domain,
    budget_to_domain,
    category_to_domain,
    payee_to_domain,
    transaction_to_domain,
)
from pocketledger.domain.entities import (
    Account,
    AccountType,
    BillStatus,
    Category,
    Currency,
    EntryTransaction,
    TransactionStatus,
    TransactionType,
    TransferTransaction,
)


class TestAccountMapper:
    """Tests for Account mapper."""

    def test_account_to_domain(self):
        """Test converting ORM Account to domain Account."""
        orm_account = ORMAccount(
            id=1,
            owner_id=7,
            name="Wallet",
            account_type="cash",
            currency="USD",
            initial_balance=Decimal("100"),
            current_balance=Decimal("80.5"),
            status="active",
            created_at=datetime.now(UTC),
        )
        domain_account = account_to_domain(orm_account)

        assert isinstance(domain_account, Account)
        assert domain_account.owner_id == 7
        assert domain_account.account_type == AccountType.CASH
        assert domain_account.currency == Currency.USD
        assert domain_account.current_balance == Decimal("80.50")
        assert domain_account.credit_card is None
        assert domain_account.created_at == orm_account.created_at

    def test_credit_card_settings(self):
        """Test that bill settings map to CreditCardSettings."""
        orm_account = ORMAccount(
            id=2,
            owner_id=7,
            name="Visa",
            account_type="credit_card",
            currency="INR",
            initial_balance=Decimal("0"),
            current_balance=Decimal("0"),
            status="active",
            bill_generation_day=5,
            bill_due_day=25,
            interest_rate=Decimal("0.3600"),
            minimum_payment_percentage=Decimal("0.0500"),
            credit_limit=None,
            created_at=datetime.now(UTC),
        )
        settings = account_to_domain(orm_account).credit_card

        assert settings.bill_generation_day == 5
        assert settings.bill_due_day == 25
        assert settings.interest_rate == Decimal("0.36")
        assert settings.minimum_payment_percentage == Decimal("0.05")
        assert settings.credit_limit is None


class TestCategoryAndPayeeMappers:
    """Tests for Category and Payee mappers."""

    def test_category_to_domain(self):
        orm_category = ORMCategory(
            id=1,
            owner_id=1,
            name="dining-out",
            display_name="Dining Out",
            description=None,
            is_active=True,
            created_at=datetime.now(UTC),
        )
        domain_category = category_to_domain(orm_category)

        assert isinstance(domain_category, Category)
        assert domain_category.name == "dining-out"
        assert domain_category.display_name == "Dining Out"
        assert domain_category.description is None

    def test_payee_to_domain(self):
        orm_payee = ORMPayee(
            id=3,
            owner_id=1,
            name="big-store",
            display_name="Big Store",
            description="Weekly shop",
            category_hint="Groceries",
            is_active=False,
            created_at=datetime.now(UTC),
        )
        domain_payee = payee_to_domain(orm_payee)

        assert domain_payee.display_name == "Big Store"
        assert domain_payee.category_hint == "Groceries"
        assert domain_payee.is_active is False


class TestTransactionMapper:
    """Tests for Transaction mapper."""

    def test_entry_transaction(self):
        """Test that deposits and withdrawals map to EntryTransaction."""
        orm_transaction = ORMTransaction(
            id=1,
            owner_id=1,
            type="withdrawal",
            date=date(2024, 1, 15),
            status="pending",
            amount=Decimal("50"),
            account_id=4,
            payee_id=None,
            category_id=2,
            notes="Test notes",
            created_at=datetime.now(UTC),
        )
        domain_transaction = transaction_to_domain(orm_transaction)

        assert isinstance(domain_transaction, EntryTransaction)
        assert domain_transaction.type == TransactionType.WITHDRAWAL
        assert domain_transaction.status == TransactionStatus.PENDING
        assert domain_transaction.amount == Decimal("50.00")
        assert domain_transaction.account_ids == (4,)
        assert domain_transaction.payee_id is None
        assert domain_transaction.notes == "Test notes"

    def test_transfer_transaction(self):
        """Test that transfer rows map to TransferTransaction."""
        orm_transaction = ORMTransaction(
            id=2,
            owner_id=1,
            type="transfer",
            date=date(2024, 1, 15),
            status="completed",
            amount=Decimal("250.00"),
            from_account_id=4,
            to_account_id=5,
            notes=None,
            created_at=datetime.now(UTC),
        )
        domain_transaction = transaction_to_domain(orm_transaction)

        assert isinstance(domain_transaction, TransferTransaction)
        assert domain_transaction.type == TransactionType.TRANSFER
        assert domain_transaction.account_ids == (4, 5)


class TestBillMapper:
    """Tests for CreditCardBill mapper."""

    def _orm_bill(self, **overrides):
        values = dict(
            id=1,
            owner_id=1,
            account_id=2,
            billing_period_start=date(2024, 1, 5),
            billing_period_end=date(2024, 2, 4),
            bill_generation_date=date(2024, 2, 5),
            bill_due_date=date(2024, 2, 25),
            bill_amount=Decimal("1000.00"),
            transaction_count=3,
            interest_rate=Decimal("0.3600"),
            minimum_payment_percentage=Decimal("0.0500"),
            is_paid=False,
            paid_amount=None,
            paid_date=None,
            notes=None,
            created_at=datetime.now(UTC),
        )
        values.update(overrides)
        return ORMCreditCardBill(**values)

    def test_status_derived_from_due_date(self):
        assert bill_to_domain(self._orm_bill(), today=date(2024, 2, 25)).status == BillStatus.GENERATED
        assert bill_to_domain(self._orm_bill(), today=date(2024, 2, 26)).status == BillStatus.OVERDUE

    def test_status_derived_from_payment(self):
        partial = self._orm_bill(is_paid=True, paid_amount=Decimal("400"), paid_date=date(2024, 2, 20))
        bill = bill_to_domain(partial, today=date(2024, 3, 1))
        assert bill.status == BillStatus.PARTIAL
        assert bill.outstanding_amount == Decimal("600.00")
        assert bill.minimum_payment == Decimal("50.00")


def test_budget_to_domain():
    orm_budget = ORMBudget(
        id=1,
        owner_id=1,
        category_id=3,
        month=date(2024, 3, 1),
        amount=Decimal("5000"),
        created_at=datetime.now(UTC),
    )
    budget = budget_to_domain(orm_budget)

    assert budget.month == date(2024, 3, 1)
    assert budget.amount == Decimal("5000.00")

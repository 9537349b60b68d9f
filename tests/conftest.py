"""Shared pytest fixtures for pocketledger tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from pocketledger.database.factories import create_sqlite_database
from pocketledger.domain.account import AccountService
from pocketledger.domain.billing import BillService
from pocketledger.domain.budget import BudgetService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.csv_import import TransactionImportService
from pocketledger.domain.entities import AccountType, CreditCardSettings, TransactionType
from pocketledger.domain.payee import PayeeService
from pocketledger.domain.report import ReportService
from pocketledger.domain.transaction import TransactionService


OWNER = 1
OTHER_OWNER = 2


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def owner_id():
    return OWNER


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    return CategoryService(temp_db)


@pytest.fixture
def payee_service(temp_db):
    return PayeeService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    return TransactionService(temp_db)


@pytest.fixture
def bill_service(temp_db):
    return BillService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    return BudgetService(temp_db)


@pytest.fixture
def import_service(temp_db):
    return TransactionImportService(temp_db)


@pytest.fixture
def report_service(temp_db):
    return ReportService(temp_db)


@pytest.fixture
def wallet(account_service):
    """A cash account named Wallet with no opening balance."""
    account_id = account_service.create_account(OWNER, "Wallet", account_type=AccountType.CASH)
    return account_service.get_account(OWNER, account_id)


@pytest.fixture
def savings(account_service):
    account_id = account_service.create_account(
        OWNER, "Savings", account_type=AccountType.SAVINGS, initial_balance=Decimal("10000")
    )
    return account_service.get_account(OWNER, account_id)


@pytest.fixture
def credit_card(account_service):
    """A credit card billed on the 1st and due on the 21st."""
    account_id = account_service.create_account(
        OWNER,
        "Visa Card",
        account_type=AccountType.CREDIT_CARD,
        credit_card=CreditCardSettings(
            bill_generation_day=1,
            bill_due_day=21,
            interest_rate=Decimal("0.36"),
            minimum_payment_percentage=Decimal("0.05"),
            credit_limit=Decimal("100000"),
        ),
    )
    return account_service.get_account(OWNER, account_id)


@pytest.fixture
def sample_categories(category_service):
    """Create a few categories and return their IDs by display name."""
    return {
        name: category_service.create_category(OWNER, name)
        for name in ("Groceries", "Dining Out", "Salary", "Transport")
    }


@pytest.fixture
def sample_payees(payee_service):
    return {name: payee_service.create_payee(OWNER, name) for name in ("Big Store", "Employer", "Cafe")}


@pytest.fixture
def sample_transactions(transaction_service, wallet, savings, sample_categories, sample_payees):
    """A small March 2024 history across Wallet and Savings."""
    create = transaction_service.create_transaction
    ids = [
        create(
            OWNER,
            TransactionType.DEPOSIT,
            date(2024, 3, 1),
            Decimal("50000"),
            savings.id,
            category_id=sample_categories["Salary"],
            payee_id=sample_payees["Employer"],
        ),
        create(
            OWNER,
            TransactionType.WITHDRAWAL,
            date(2024, 3, 5),
            Decimal("1200"),
            wallet.id,
            category_id=sample_categories["Groceries"],
            payee_id=sample_payees["Big Store"],
        ),
        create(
            OWNER,
            TransactionType.WITHDRAWAL,
            date(2024, 3, 12),
            Decimal("450"),
            wallet.id,
            category_id=sample_categories["Dining Out"],
            payee_id=sample_payees["Cafe"],
            notes="team lunch",
        ),
        create(
            OWNER,
            TransactionType.WITHDRAWAL,
            date(2024, 3, 20),
            Decimal("800"),
            wallet.id,
            category_id=sample_categories["Groceries"],
            payee_id=sample_payees["Big Store"],
        ),
        transaction_service.create_transfer(OWNER, date(2024, 3, 2), Decimal("5000"), savings.id, wallet.id),
    ]
    return ids


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"

"""Tests for accounts: service rules, balances and commands."""

from datetime import date
from decimal import Decimal

import pytest

from pocketledger.cli.main import cli
from pocketledger.domain.account import validate_credit_card_settings
from pocketledger.domain.entities import AccountType, CreditCardSettings, TransactionStatus, TransactionType
from pocketledger.domain.errors import ConflictError, DependencyError, NotFoundError, ValidationError


OWNER = 1
OTHER_OWNER = 2


class TestAccountService:
    def test_create_and_get(self, account_service):
        account_id = account_service.create_account(OWNER, "Wallet", initial_balance=Decimal("150.5"))
        account = account_service.get_account(OWNER, account_id)
        assert account.name == "Wallet"
        assert account.account_type == AccountType.CHECKING
        assert account.initial_balance == Decimal("150.50")
        assert account.current_balance == Decimal("150.50")
        assert account.credit_card is None

    def test_duplicate_name_ignores_case(self, account_service, wallet):
        with pytest.raises(ConflictError, match="already exists"):
            account_service.create_account(OWNER, "wallet")

    def test_same_name_for_other_owner(self, account_service, wallet):
        account_id = account_service.create_account(OTHER_OWNER, "Wallet")
        assert account_id != wallet.id

    def test_other_owner_cannot_see_account(self, account_service, wallet):
        assert account_service.get_account(OTHER_OWNER, wallet.id) is None
        assert account_service.list_accounts(OTHER_OWNER) == []

    def test_empty_name(self, account_service):
        with pytest.raises(ValidationError):
            account_service.create_account(OWNER, "   ")

    def test_credit_card_requires_settings(self, account_service):
        with pytest.raises(ValidationError, match="bill generation"):
            account_service.create_account(OWNER, "Card", account_type=AccountType.CREDIT_CARD)

    def test_settings_only_for_credit_cards(self, account_service):
        with pytest.raises(ValidationError):
            account_service.create_account(
                OWNER, "Bank", credit_card=CreditCardSettings(bill_generation_day=1, bill_due_day=20)
            )

    def test_credit_card_settings_stored(self, credit_card):
        assert credit_card.is_credit_card
        assert credit_card.credit_card.bill_generation_day == 1
        assert credit_card.credit_card.bill_due_day == 21
        assert credit_card.credit_card.interest_rate == Decimal("0.3600")
        assert credit_card.credit_card.credit_limit == Decimal("100000.00")

    def test_list_credit_cards(self, account_service, wallet, credit_card):
        assert [a.id for a in account_service.list_credit_cards(OWNER)] == [credit_card.id]

    def test_rename(self, account_service, wallet, savings):
        account_service.rename_account(OWNER, wallet.id, "Cash Wallet")
        assert account_service.get_account(OWNER, wallet.id).name == "Cash Wallet"
        with pytest.raises(ConflictError):
            account_service.rename_account(OWNER, wallet.id, "SAVINGS")

    def test_rename_missing(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.rename_account(OWNER, 999, "X")

    def test_update_credit_card_settings_keeps_omitted_values(self, account_service, credit_card):
        settings = account_service.update_credit_card_settings(OWNER, credit_card.id, bill_due_day=25)
        assert settings.bill_due_day == 25
        assert settings.bill_generation_day == 1
        assert settings.interest_rate == Decimal("0.3600")
        stored = account_service.get_account(OWNER, credit_card.id).credit_card
        assert stored.bill_due_day == 25

    def test_update_settings_rejects_non_credit_card(self, account_service, wallet):
        with pytest.raises(NotFoundError):
            account_service.update_credit_card_settings(OWNER, wallet.id, bill_due_day=10)

    def test_delete_unused_account(self, account_service, wallet):
        account_service.delete_account(OWNER, wallet.id)
        assert account_service.get_account(OWNER, wallet.id) is None

    def test_delete_blocked_by_transactions(self, account_service, wallet, sample_transactions):
        with pytest.raises(DependencyError, match="transaction"):
            account_service.delete_account(OWNER, wallet.id)


class TestValidateCreditCardSettings:
    def test_valid(self):
        validate_credit_card_settings(CreditCardSettings(bill_generation_day=25, bill_due_day=15))

    def test_collects_every_problem(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_credit_card_settings(
                CreditCardSettings(
                    bill_generation_day=0,
                    bill_due_day=32,
                    interest_rate=Decimal("18"),
                    minimum_payment_percentage=Decimal("-0.1"),
                    credit_limit=Decimal("-1"),
                )
            )
        problems = exc_info.value.problems
        assert set(problems) == {
            "bill_generation_day",
            "bill_due_day",
            "interest_rate",
            "minimum_payment_percentage",
            "credit_limit",
        }

    def test_same_generation_and_due_day(self):
        with pytest.raises(ValidationError, match="must differ"):
            validate_credit_card_settings(CreditCardSettings(bill_generation_day=5, bill_due_day=5))


class TestBalances:
    def test_balances_follow_transactions(self, account_service, wallet, savings, sample_transactions):
        assert account_service.get_account(OWNER, savings.id).current_balance == Decimal("55000.00")
        assert account_service.get_account(OWNER, wallet.id).current_balance == Decimal("2550.00")

    def test_pending_and_cancelled_do_not_count(
        self, account_service, transaction_service, wallet, sample_categories
    ):
        txn_id = transaction_service.create_transaction(
            OWNER,
            TransactionType.DEPOSIT,
            date(2024, 3, 1),
            Decimal("100"),
            wallet.id,
            status=TransactionStatus.PENDING,
        )
        assert account_service.get_account(OWNER, wallet.id).current_balance == Decimal("0.00")

        transaction_service.update_status(OWNER, txn_id, TransactionStatus.COMPLETED)
        assert account_service.get_account(OWNER, wallet.id).current_balance == Decimal("100.00")

        transaction_service.update_status(OWNER, txn_id, TransactionStatus.CANCELLED)
        assert account_service.get_account(OWNER, wallet.id).current_balance == Decimal("0.00")

    def test_recalculate(self, account_service, wallet, savings, sample_transactions):
        balances = account_service.recalculate_balances(OWNER)
        assert balances == {wallet.id: Decimal("2550.00"), savings.id: Decimal("55000.00")}


def test_account_create_command(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "create", "Wallet", "--type", "cash"]
    )

    assert result.exit_code == 0
    assert "Created account 'Wallet'" in result.output
    assert "ID:" in result.output


def test_account_create_credit_card_command(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "account",
            "create",
            "Visa",
            "--type",
            "credit_card",
            "--bill-day",
            "5",
            "--due-day",
            "25",
            "--interest-rate",
            "0.42",
        ],
    )
    assert result.exit_code == 0

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])
    assert "bill day 5, due day 25" in result.output


def test_account_create_credit_card_needs_days(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "create", "Visa", "--type", "credit_card"]
    )
    assert result.exit_code == 1
    assert "--bill-day" in result.output


def test_account_create_lists_every_settings_problem(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "account",
            "create",
            "Visa",
            "--type",
            "credit_card",
            "--bill-day",
            "40",
            "--due-day",
            "40",
        ],
    )
    assert result.exit_code == 1
    assert "Error: Invalid input" in result.output
    assert "bill_generation_day: must be between 1 and 31" in result.output
    assert "bill_due_day: must differ from bill_generation_day" in result.output


def test_account_list_empty(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 0
    assert "No accounts found" in result.output


def test_account_list_is_scoped_to_owner(cli_runner, temp_db, wallet):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])
    assert "Wallet" in result.output

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "--owner", "2", "account", "list"])
    assert "No accounts found" in result.output


def test_account_create_duplicate(cli_runner, temp_db):
    result1 = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "create", "Wallet"])
    assert result1.exit_code == 0

    result2 = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "create", "WALLET"])

    assert result2.exit_code == 1
    assert "already exists" in result2.output.lower()


def test_account_delete_blocked(cli_runner, temp_db, wallet, sample_transactions):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "delete", "Wallet", "--yes"]
    )
    assert result.exit_code == 1
    assert "Cannot delete account" in result.output


def test_account_rename_unknown(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "rename", "Nope", "Other"]
    )
    assert result.exit_code == 1
    assert "not found" in result.output

"""Tests for transactions and the add, transfer and transaction commands."""

from datetime import date
from decimal import Decimal

import pytest

from pocketledger.cli.main import cli
from pocketledger.domain.entities import (
    EntryTransaction,
    TransactionStatus,
    TransactionType,
    TransferTransaction,
)
from pocketledger.domain.errors import NotFoundError, ValidationError

OWNER = 1
OTHER_OWNER = 2


class TestTransactionService:
    def test_create_withdrawal(self, transaction_service, wallet, sample_categories, sample_payees):
        txn_id = transaction_service.create_transaction(
            OWNER,
            TransactionType.WITHDRAWAL,
            date(2024, 3, 15),
            Decimal("500"),
            wallet.id,
            category_id=sample_categories["Groceries"],
            payee_id=sample_payees["Big Store"],
            notes="lunch",
        )
        txn = transaction_service.get_transaction(OWNER, txn_id)
        assert isinstance(txn, EntryTransaction)
        assert txn.type == TransactionType.WITHDRAWAL
        assert txn.amount == Decimal("500.00")
        assert txn.status == TransactionStatus.COMPLETED
        assert txn.notes == "lunch"

    def test_withdrawal_requires_category(self, transaction_service, wallet):
        with pytest.raises(ValidationError, match="Category is required"):
            transaction_service.create_transaction(
                OWNER, TransactionType.WITHDRAWAL, date(2024, 3, 15), Decimal("10"), wallet.id
            )

    def test_deposit_without_category(self, transaction_service, wallet):
        txn_id = transaction_service.create_transaction(
            OWNER, TransactionType.DEPOSIT, date(2024, 3, 15), Decimal("10"), wallet.id
        )
        assert transaction_service.get_transaction(OWNER, txn_id).category_id is None

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_amount_must_be_positive(self, transaction_service, wallet, amount):
        with pytest.raises(ValidationError, match="must be positive"):
            transaction_service.create_transaction(
                OWNER, TransactionType.DEPOSIT, date(2024, 3, 15), amount, wallet.id
            )

    def test_transfer_type_rejected(self, transaction_service, wallet):
        with pytest.raises(ValidationError):
            transaction_service.create_transaction(
                OWNER, TransactionType.TRANSFER, date(2024, 3, 15), Decimal("10"), wallet.id
            )

    def test_references_must_belong_to_owner(self, transaction_service, category_service, wallet):
        foreign_category = category_service.create_category(OTHER_OWNER, "Groceries")
        with pytest.raises(NotFoundError):
            transaction_service.create_transaction(
                OWNER,
                TransactionType.WITHDRAWAL,
                date(2024, 3, 15),
                Decimal("10"),
                wallet.id,
                category_id=foreign_category,
            )
        with pytest.raises(NotFoundError):
            transaction_service.create_transaction(
                OTHER_OWNER, TransactionType.DEPOSIT, date(2024, 3, 15), Decimal("10"), wallet.id
            )

    def test_create_transfer(self, transaction_service, wallet, savings):
        txn_id = transaction_service.create_transfer(
            OWNER, date(2024, 3, 2), Decimal("750"), savings.id, wallet.id, notes="top up"
        )
        txn = transaction_service.get_transaction(OWNER, txn_id)
        assert isinstance(txn, TransferTransaction)
        assert txn.from_account_id == savings.id
        assert txn.to_account_id == wallet.id

    def test_transfer_to_same_account(self, transaction_service, wallet):
        with pytest.raises(ValidationError, match="same account"):
            transaction_service.create_transfer(OWNER, date(2024, 3, 2), Decimal("1"), wallet.id, wallet.id)

    def test_list_filters(self, transaction_service, wallet, savings, sample_categories, sample_transactions):
        all_txns = transaction_service.list_transactions(OWNER)
        assert len(all_txns) == 5
        assert all_txns[0].date == date(2024, 3, 20)

        wallet_txns = transaction_service.list_transactions(OWNER, account_id=wallet.id)
        assert len(wallet_txns) == 4

        groceries = transaction_service.list_transactions(OWNER, category_id=sample_categories["Groceries"])
        assert {t.amount for t in groceries} == {Decimal("1200.00"), Decimal("800.00")}

        early = transaction_service.list_transactions(
            OWNER, start_date=date(2024, 3, 1), end_date=date(2024, 3, 5)
        )
        assert len(early) == 3

        transfers = transaction_service.list_transactions(OWNER, transaction_type=TransactionType.TRANSFER)
        assert len(transfers) == 1

        assert transaction_service.list_transactions(OTHER_OWNER) == []

    def test_list_rejects_inverted_range(self, transaction_service):
        with pytest.raises(ValidationError):
            transaction_service.list_transactions(OWNER, start_date=date(2024, 3, 5), end_date=date(2024, 3, 1))

    def test_update_category(self, transaction_service, sample_categories, sample_transactions):
        withdrawal_id = sample_transactions[1]
        transaction_service.update_category(OWNER, withdrawal_id, sample_categories["Dining Out"])
        assert transaction_service.get_transaction(OWNER, withdrawal_id).category_id == sample_categories["Dining Out"]

        with pytest.raises(ValidationError, match="required"):
            transaction_service.update_category(OWNER, withdrawal_id, None)

        deposit_id = sample_transactions[0]
        transaction_service.update_category(OWNER, deposit_id, None)
        assert transaction_service.get_transaction(OWNER, deposit_id).category_id is None

    def test_update_category_of_transfer(self, transaction_service, sample_categories, sample_transactions):
        with pytest.raises(ValidationError):
            transaction_service.update_category(OWNER, sample_transactions[4], sample_categories["Groceries"])

    def test_update_notes(self, transaction_service, sample_transactions):
        transaction_service.update_notes(OWNER, sample_transactions[2], "client lunch")
        assert transaction_service.get_transaction(OWNER, sample_transactions[2]).notes == "client lunch"

    def test_delete_updates_balance(self, transaction_service, account_service, wallet, sample_transactions):
        transaction_service.delete_transaction(OWNER, sample_transactions[1])
        assert transaction_service.get_transaction(OWNER, sample_transactions[1]) is None
        assert account_service.get_account(OWNER, wallet.id).current_balance == Decimal("3750.00")

    def test_delete_other_owner(self, transaction_service, sample_transactions):
        with pytest.raises(NotFoundError):
            transaction_service.delete_transaction(OTHER_OWNER, sample_transactions[0])


def test_add_command(cli_runner, temp_db, wallet, sample_categories, sample_payees):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "add",
            "--account",
            "Wallet",
            "--amount",
            "250",
            "--date",
            "15-03-2024",
            "--category",
            "Groceries",
            "--payee",
            "Big Store",
        ],
    )

    assert result.exit_code == 0
    assert "Created transaction" in result.output
    assert "Balance: -250.00" in result.output


def test_add_command_unknown_category(cli_runner, temp_db, wallet):
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "add", "--account", "Wallet", "--amount", "10", "--category", "Nope"],
    )
    assert result.exit_code == 1
    assert "Category not found: Nope" in result.output


def test_add_withdrawal_without_category(cli_runner, temp_db, wallet):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "add", "--account", "Wallet", "--amount", "10"]
    )
    assert result.exit_code == 1
    assert "Category is required for withdrawals" in result.output


def test_transfer_command(cli_runner, temp_db, wallet, savings):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "transfer", "Savings", "Wallet", "--amount", "1,000"]
    )
    assert result.exit_code == 0
    assert "1,000.00 from Savings to Wallet" in result.output


def test_transaction_list_command(cli_runner, temp_db, sample_transactions):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "transaction", "list", "--account", "Wallet"]
    )
    assert result.exit_code == 0
    assert "Found 4 transaction(s)" in result.output
    assert "Savings -> Wallet" in result.output
    assert "Withdrawals: 2,450.00" in result.output


def test_transaction_status_command(cli_runner, temp_db, sample_transactions):
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "transaction", "status", str(sample_transactions[1]), "cancelled"],
    )
    assert result.exit_code == 0
    assert "is now cancelled" in result.output


def test_transaction_delete_missing(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "transaction", "delete", "99", "--yes"]
    )
    assert result.exit_code == 1
    assert "Transaction 99 not found" in result.output

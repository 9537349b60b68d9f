"""Transaction domain service."""

import logging
from typing import Optional
from datetime import date
from decimal import Decimal

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    Transaction as TransactionEntity,
    TransactionStatus,
    TransactionType,
    TransferTransaction,
    quantize_amount,
)
from pocketledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    payee_not_found,
    transaction_not_found,
)

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    @staticmethod
    def _check_amount(amount: Decimal) -> Decimal:
        if amount <= 0:
            raise ValidationError("Transaction amount must be positive")
        return quantize_amount(amount)

    def _check_account(self, owner_id: int, account_id: int) -> None:
        if self.db.get_account(owner_id, account_id) is None:
            raise NotFoundError(account_not_found(account_id))

    def create_transaction(
        self,
        owner_id: int,
        transaction_type: TransactionType,
        date: date,
        amount: Decimal,
        account_id: int,
        category_id: Optional[int] = None,
        payee_id: Optional[int] = None,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        notes: Optional[str] = None,
    ) -> int:
        """Create a deposit or withdrawal.

        Args:
            owner_id: Owner of the transaction
            transaction_type: DEPOSIT or WITHDRAWAL
            date: Transaction date
            amount: Positive amount
            account_id: Account ID
            category_id: Category ID, required for withdrawals
            payee_id: Optional payee ID
            status: Initial status
            notes: Optional notes

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount is not positive, the type is a
                transfer or a withdrawal has no category
            NotFoundError: If a referenced account, category or payee is
                missing or belongs to another owner
        """
        if transaction_type == TransactionType.TRANSFER:
            raise ValidationError("Use create_transfer for transfers")
        amount = self._check_amount(amount)
        if transaction_type == TransactionType.WITHDRAWAL and category_id is None:
            raise ValidationError("Category is required for withdrawals")

        self._check_account(owner_id, account_id)
        if category_id is not None and self.db.get_category(owner_id, category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        if payee_id is not None and self.db.get_payee(owner_id, payee_id) is None:
            raise NotFoundError(payee_not_found(payee_id))

        transaction_id = self.db.create_entry_transaction(
            owner_id=owner_id,
            transaction_type=transaction_type,
            date=date,
            amount=amount,
            account_id=account_id,
            payee_id=payee_id,
            category_id=category_id,
            status=status,
            notes=notes,
        )
        logger.debug("Created %s %d of %s on account %d", transaction_type.value, transaction_id, amount, account_id)
        return transaction_id

    def create_transfer(
        self,
        owner_id: int,
        date: date,
        amount: Decimal,
        from_account_id: int,
        to_account_id: int,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        notes: Optional[str] = None,
    ) -> int:
        """Move money between two accounts of the same owner.

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount is not positive or both accounts are the same
            NotFoundError: If either account is missing
        """
        amount = self._check_amount(amount)
        if from_account_id == to_account_id:
            raise ValidationError("Transfer cannot be to the same account")
        self._check_account(owner_id, from_account_id)
        self._check_account(owner_id, to_account_id)

        transaction_id = self.db.create_transfer_transaction(
            owner_id=owner_id,
            date=date,
            amount=amount,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            status=status,
            notes=notes,
        )
        logger.debug(
            "Created transfer %d of %s from account %d to %d",
            transaction_id,
            amount,
            from_account_id,
            to_account_id,
        )
        return transaction_id

    def get_transaction(self, owner_id: int, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(owner_id, transaction_id)

    def _require(self, owner_id: int, transaction_id: int) -> TransactionEntity:
        transaction = self.db.get_transaction(owner_id, transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def update_status(self, owner_id: int, transaction_id: int, status: TransactionStatus) -> None:
        """Change the status of a transaction; balances follow."""
        self._require(owner_id, transaction_id)
        self.db.update_transaction(owner_id, transaction_id, status=status)

    def update_category(self, owner_id: int, transaction_id: int, category_id: Optional[int]) -> None:
        """Set or clear the category of a deposit or withdrawal.

        Raises:
            NotFoundError: If transaction or category not found
            ValidationError: If the transaction is a transfer, or the category
                would be cleared on a withdrawal
        """
        transaction = self._require(owner_id, transaction_id)
        if isinstance(transaction, TransferTransaction):
            raise ValidationError("Transfers do not have a category")
        if category_id is None:
            if transaction.type == TransactionType.WITHDRAWAL:
                raise ValidationError("Category is required for withdrawals")
        elif self.db.get_category(owner_id, category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        self.db.update_transaction(owner_id, transaction_id, category_id=category_id, update_category=True)

    def update_notes(self, owner_id: int, transaction_id: int, notes: Optional[str]) -> None:
        """Update transaction notes. An empty string clears them."""
        self._require(owner_id, transaction_id)
        self.db.update_transaction(owner_id, transaction_id, notes=notes if notes is not None else "")

    def delete_transaction(self, owner_id: int, transaction_id: int) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction not found
        """
        self._require(owner_id, transaction_id)
        self.db.delete_transaction(owner_id, transaction_id)

    def list_transactions(
        self,
        owner_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        transaction_type: Optional[TransactionType] = None,
        status: Optional[TransactionStatus] = None,
    ) -> list[TransactionEntity]:
        """List transactions with filters, newest first.

        Args:
            owner_id: Owner of the transactions
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            account_id: Optional account ID filter, either side of a transfer
            category_id: Optional category ID filter
            transaction_type: Optional type filter
            status: Optional status filter

        Returns:
            List of transaction entities
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")
        return self.db.list_transactions(
            owner_id,
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            category_id=category_id,
            transaction_type=transaction_type,
            status=status,
        )

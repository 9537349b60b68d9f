"""Account domain service."""

import logging
from decimal import Decimal
from typing import Optional

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    Account as AccountEntity,
    AccountType,
    CreditCardSettings,
    Currency,
    quantize_amount,
)
from pocketledger.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_not_found,
    credit_card_not_found,
    delete_blocked,
    duplicate_name,
)

logger = logging.getLogger(__name__)


def validate_credit_card_settings(settings: CreditCardSettings) -> None:
    """Check bill settings, collecting every problem into one ValidationError.

    Days must be in 1..31 and differ from each other; rates are fractions in
    [0, 1]. A due day lower than the generation day is allowed and means the
    due date falls in the month after the statement.
    """
    problems: dict[str, list[str]] = {}
    for field_name in ("bill_generation_day", "bill_due_day"):
        day = getattr(settings, field_name)
        if not 1 <= day <= 31:
            problems.setdefault(field_name, []).append("must be between 1 and 31")
    if settings.bill_generation_day == settings.bill_due_day:
        problems.setdefault("bill_due_day", []).append("must differ from bill_generation_day")
    for field_name in ("interest_rate", "minimum_payment_percentage"):
        rate = getattr(settings, field_name)
        if not Decimal("0") <= rate <= Decimal("1"):
            problems.setdefault(field_name, []).append("must be a fraction between 0 and 1")
    if settings.credit_limit is not None and settings.credit_limit < 0:
        problems.setdefault("credit_limit", []).append("cannot be negative")
    if problems:
        raise ValidationError.from_problems(problems)


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_name_available(self, owner_id: int, name: str, exclude_id: Optional[int] = None) -> None:
        for acc in self.db.list_accounts(owner_id):
            if acc.id != exclude_id and acc.name.lower() == name.lower():
                raise ConflictError(duplicate_name("Account", name))

    def create_account(
        self,
        owner_id: int,
        name: str,
        account_type: AccountType = AccountType.CHECKING,
        currency: Currency = Currency.INR,
        initial_balance: Decimal = Decimal("0"),
        credit_card: Optional[CreditCardSettings] = None,
    ) -> int:
        """Create a new account.

        Args:
            owner_id: Owner of the account
            name: Account name, unique per owner ignoring case
            account_type: Kind of account
            currency: Account currency
            initial_balance: Opening balance
            credit_card: Bill settings, required for credit card accounts

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty or the bill settings are invalid
            ConflictError: If account name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Account name cannot be empty")
        if account_type == AccountType.CREDIT_CARD:
            if credit_card is None:
                raise ValidationError("Credit card accounts need bill generation and due days")
            validate_credit_card_settings(credit_card)
        elif credit_card is not None:
            raise ValidationError("Bill settings only apply to credit card accounts")

        self._check_name_available(owner_id, name)
        account_id = self.db.create_account(
            owner_id=owner_id,
            name=name,
            account_type=account_type,
            currency=currency,
            initial_balance=quantize_amount(initial_balance),
            credit_card=credit_card,
        )
        logger.info("Created %s account %d '%s' for owner %d", account_type.value, account_id, name, owner_id)
        return account_id

    def get_account(self, owner_id: int, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(owner_id, account_id)

    def require_account(self, owner_id: int, account_id: int) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(owner_id, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, owner_id: int, account_type: Optional[AccountType] = None) -> list[AccountEntity]:
        """List accounts of an owner, optionally of one type."""
        return self.db.list_accounts(owner_id, account_type=account_type)

    def list_credit_cards(self, owner_id: int) -> list[AccountEntity]:
        return self.db.list_accounts(owner_id, account_type=AccountType.CREDIT_CARD)

    def rename_account(self, owner_id: int, account_id: int, name: str) -> None:
        """Rename an account.

        Raises:
            NotFoundError: If account not found
            ConflictError: If name already exists
        """
        self.require_account(owner_id, account_id)
        name = name.strip()
        if not name:
            raise ValidationError("Account name cannot be empty")
        self._check_name_available(owner_id, name, exclude_id=account_id)
        self.db.update_account_name(owner_id, account_id, name)

    def update_credit_card_settings(
        self,
        owner_id: int,
        account_id: int,
        bill_generation_day: Optional[int] = None,
        bill_due_day: Optional[int] = None,
        interest_rate: Optional[Decimal] = None,
        minimum_payment_percentage: Optional[Decimal] = None,
        credit_limit: Optional[Decimal] = None,
    ) -> CreditCardSettings:
        """Change the bill settings of a credit card account.

        Omitted values keep their current setting. Bills already generated keep
        the rates they were generated with.

        Returns:
            The settings now stored on the account

        Raises:
            NotFoundError: If the account is missing or not a credit card
            ValidationError: If the resulting settings are invalid
        """
        account = self.db.get_account(owner_id, account_id)
        if account is None or not account.is_credit_card:
            raise NotFoundError(credit_card_not_found(account_id))

        current = account.credit_card or CreditCardSettings(bill_generation_day=1, bill_due_day=21)
        settings = CreditCardSettings(
            bill_generation_day=(
                bill_generation_day if bill_generation_day is not None else current.bill_generation_day
            ),
            bill_due_day=bill_due_day if bill_due_day is not None else current.bill_due_day,
            interest_rate=interest_rate if interest_rate is not None else current.interest_rate,
            minimum_payment_percentage=(
                minimum_payment_percentage
                if minimum_payment_percentage is not None
                else current.minimum_payment_percentage
            ),
            credit_limit=credit_limit if credit_limit is not None else current.credit_limit,
        )
        validate_credit_card_settings(settings)
        self.db.update_credit_card_settings(owner_id, account_id, settings)
        logger.info("Updated bill settings of account %d", account_id)
        return settings

    def delete_account(self, owner_id: int, account_id: int) -> None:
        """Delete an account.

        Raises:
            NotFoundError: If account not found
            DependencyError: If transactions or bills still reference the account
        """
        self.require_account(owner_id, account_id)

        counts = {
            "transaction": self.db.get_account_transaction_count(owner_id, account_id),
            "bill": self.db.get_account_bill_count(owner_id, account_id),
        }
        if any(counts.values()):
            raise DependencyError(delete_blocked("account", account_id, counts))

        self.db.delete_account(owner_id, account_id)

    def recalculate_balances(self, owner_id: int) -> dict[int, Decimal]:
        """Recompute the current balance of every account of an owner.

        Returns:
            Mapping of account ID to its recomputed balance
        """
        return {
            acc.id: self.db.recalculate_account_balance(owner_id, acc.id)
            for acc in self.db.list_accounts(owner_id)
        }

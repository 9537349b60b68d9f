"""CSV import domain service.

Import files carry one transaction per row with the columns
``Date, Account, Payee, Category, Withdrawal, Deposit`` and optionally
``ID, Number, Status, Tags, Notes, Last Updated, SN``. A payee starting with
``>`` marks a transfer to the account named after it, e.g. ``> Savings``.

Rows are reconciled one at a time against the owner's accounts, categories
and payees. A row that fails never stops the batch, and rows imported before
a failure stay imported.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Iterable, Iterator, Optional, Sequence

from pocketledger.database.base import Database
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import (
    Account,
    Category,
    ImportOptions,
    ImportResult,
    ImportSummary,
    ParsedTransaction,
    Payee,
    TransactionType,
)
from pocketledger.domain.errors import DomainError, RowImportError, ValidationError
from pocketledger.domain.payee import PayeeService
from pocketledger.domain.transaction import TransactionService
from pocketledger.utils.account_resolver import find_account_by_name
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_dmy_date
from pocketledger.utils.names import find_by_name

logger = logging.getLogger(__name__)

REQUIRED_HEADERS = ("Date", "Account", "Payee", "Category", "Withdrawal", "Deposit")
OPTIONAL_HEADERS = ("ID", "Number", "Status", "Tags", "Notes", "Last Updated", "SN")
TRANSFER_PREFIX = ">"

ProgressCallback = Callable[[int, int], None]


def _parse_row_amount(text: str) -> Decimal:
    """Amount cells that are empty or not numbers count as zero."""
    if not text:
        return Decimal("0")
    try:
        return parse_amount(text)
    except ValueError:
        return Decimal("0")


def _parse_row(row_number: int, row: list[str], columns: dict[str, int]) -> ParsedTransaction:
    def cell(name: str) -> str:
        index = columns.get(name)
        if index is None or index >= len(row):
            return ""
        return row[index]

    errors = []

    txn_date = None
    try:
        txn_date = parse_dmy_date(cell("Date"))
    except ValueError:
        errors.append("Invalid date format")

    withdrawal = _parse_row_amount(cell("Withdrawal"))
    deposit = _parse_row_amount(cell("Deposit"))
    if withdrawal < 0:
        errors.append("Withdrawal amount cannot be negative")
    if deposit < 0:
        errors.append("Deposit amount cannot be negative")

    account = cell("Account")
    if not account:
        errors.append("Account is required")

    payee = cell("Payee")
    transfer_to_account = None
    is_transfer = payee.startswith(TRANSFER_PREFIX)
    if is_transfer:
        transfer_to_account = payee[len(TRANSFER_PREFIX):].strip()
        if not transfer_to_account:
            errors.append("Transfer destination account is required")
        amount = withdrawal if withdrawal > 0 else deposit
        transaction_type = TransactionType.TRANSFER
        withdrawal = deposit = Decimal("0")
    else:
        if withdrawal <= 0 and deposit <= 0:
            errors.append("Transaction must have either withdrawal or deposit amount")
        elif withdrawal > 0 and deposit > 0:
            errors.append("Transaction cannot have both withdrawal and deposit amounts")
        if withdrawal > 0:
            amount, transaction_type = withdrawal, TransactionType.WITHDRAWAL
        else:
            amount, transaction_type = deposit, TransactionType.DEPOSIT

    return ParsedTransaction(
        row_number=row_number,
        source_id=cell("ID") or f"import-{row_number}",
        date=txn_date,
        account=account,
        payee=payee,
        category=cell("Category"),
        withdrawal=withdrawal,
        deposit=deposit,
        notes=cell("Notes"),
        type=transaction_type,
        amount=amount,
        is_transfer=is_transfer,
        transfer_to_account=transfer_to_account,
        validation_errors=tuple(errors),
    )


def parse_csv(content: str) -> list[ParsedTransaction]:
    """Parse import file content into one ParsedTransaction per data row.

    Blank lines are ignored and the first non-blank row is the header. Rows
    with problems are kept and carry their problems in ``validation_errors``.

    Args:
        content: Full text of the CSV file

    Returns:
        Parsed rows in file order

    Raises:
        ValidationError: If the content is empty or required headers are missing
    """
    if content.startswith("\ufeff"):
        content = content[1:]

    rows = [
        [value.strip() for value in row]
        for row in csv.reader(io.StringIO(content))
        if any(value.strip() for value in row)
    ]
    if not rows:
        raise ValidationError("CSV file is empty")

    header, data_rows = rows[0], rows[1:]
    columns: dict[str, int] = {}
    for index, name in enumerate(header):
        columns.setdefault(name, index)

    missing = [name for name in REQUIRED_HEADERS if name not in columns]
    if missing:
        raise ValidationError(f"Missing required headers: {', '.join(missing)}")

    return [_parse_row(i, row, columns) for i, row in enumerate(data_rows, start=1)]


def generate_import_summary(results: Sequence[ImportResult]) -> ImportSummary:
    """Summarize a batch. ``successful + failed + skipped == total`` always holds."""
    successful = [r for r in results if r.success]
    skipped = sum(1 for r in results if r.skipped)
    failed = [r for r in results if not r.success and not r.skipped]

    def imported(transaction_type: TransactionType) -> int:
        return sum(1 for r in successful if r.transaction.type == transaction_type)

    return ImportSummary(
        total=len(results),
        successful=len(successful),
        failed=len(failed),
        skipped=skipped,
        deposits=imported(TransactionType.DEPOSIT),
        withdrawals=imported(TransactionType.WITHDRAWAL),
        transfers=imported(TransactionType.TRANSFER),
        created_categories=sum(1 for r in results if r.created_category),
        created_payees=sum(1 for r in results if r.created_payee),
        errors=tuple(f"Row {r.transaction.row_number}: {r.error}" for r in failed),
    )


@dataclass
class _ImportContext:
    """Working state shared by the rows of one batch."""

    owner_id: int
    accounts: list[Account]
    categories: list[Category]
    payees: list[Payee]
    options: ImportOptions
    # Names a dry run would create, so they are flagged only once
    planned_categories: set[str] = field(default_factory=set)
    planned_payees: set[str] = field(default_factory=set)


@dataclass
class _RowOutcome:
    created_category: bool = False
    created_payee: bool = False
    skipped: bool = False
    transaction_id: Optional[int] = None


class TransactionImportService:
    """Service for importing parsed CSV rows as transactions."""

    def __init__(self, db: Database):
        """Initialize import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transaction_service = TransactionService(db)
        self.category_service = CategoryService(db)
        self.payee_service = PayeeService(db)

    def iter_import(
        self,
        owner_id: int,
        rows: Iterable[ParsedTransaction],
        accounts: Sequence[Account],
        categories: Sequence[Category],
        payees: Sequence[Payee],
        options: Optional[ImportOptions] = None,
    ) -> Iterator[ImportResult]:
        """Reconcile rows one at a time, yielding a result per row.

        Categories and payees created for a row are added to the working
        lists, so later rows in the same batch find them by name.
        """
        context = _ImportContext(
            owner_id=owner_id,
            accounts=list(accounts),
            categories=list(categories),
            payees=list(payees),
            options=options or ImportOptions(),
        )
        for row in rows:
            yield self._import_row(context, row)

    def import_transactions_batch(
        self,
        owner_id: int,
        rows: Sequence[ParsedTransaction],
        accounts: Sequence[Account],
        categories: Sequence[Category],
        payees: Sequence[Payee],
        options: Optional[ImportOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> list[ImportResult]:
        """Import a batch of parsed rows.

        Args:
            owner_id: Owner the transactions are created for
            rows: Parsed rows, imported in order
            accounts: Accounts that rows may reference by name
            categories: Known categories
            payees: Known payees
            options: Creation, duplicate and dry run options
            on_progress: Called with (completed, total) after each row

        Returns:
            One ImportResult per row, in row order
        """
        total = len(rows)
        results = []
        for result in self.iter_import(owner_id, rows, accounts, categories, payees, options):
            results.append(result)
            if on_progress is not None:
                on_progress(len(results), total)

        summary = generate_import_summary(results)
        logger.info(
            "Imported %d of %d rows for owner %d (%d failed, %d skipped)",
            summary.successful,
            summary.total,
            owner_id,
            summary.failed,
            summary.skipped,
        )
        return results

    def import_csv(
        self,
        owner_id: int,
        content: str,
        options: Optional[ImportOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> list[ImportResult]:
        """Parse CSV content and import it against the owner's current records.

        Raises:
            ValidationError: If the content is empty or required headers are missing
        """
        rows = parse_csv(content)
        return self.import_transactions_batch(
            owner_id,
            rows,
            self.db.list_accounts(owner_id),
            self.db.list_categories(owner_id),
            self.db.list_payees(owner_id),
            options=options,
            on_progress=on_progress,
        )

    def _import_row(self, context: _ImportContext, row: ParsedTransaction) -> ImportResult:
        outcome = _RowOutcome()
        try:
            self._reconcile_row(context, row, outcome)
        except DomainError as e:
            logger.warning("Row %d failed: %s", row.row_number, e)
            return self._failure(row, outcome, str(e))
        except Exception as e:
            logger.exception("Row %d failed unexpectedly", row.row_number)
            return self._failure(row, outcome, str(e))

        if outcome.skipped:
            logger.debug("Row %d skipped as duplicate", row.row_number)
        return ImportResult(
            success=not outcome.skipped,
            transaction=row,
            created_category=outcome.created_category,
            created_payee=outcome.created_payee,
            skipped=outcome.skipped,
            transaction_id=outcome.transaction_id,
        )

    @staticmethod
    def _failure(row: ParsedTransaction, outcome: _RowOutcome, error: str) -> ImportResult:
        return ImportResult(
            success=False,
            transaction=row,
            created_category=outcome.created_category,
            created_payee=outcome.created_payee,
            error=error,
        )

    def _reconcile_row(self, context: _ImportContext, row: ParsedTransaction, outcome: _RowOutcome) -> None:
        errors = list(row.validation_errors)

        account = None
        if row.account:
            account = find_account_by_name(context.accounts, row.account)
            if account is None:
                errors.append(f"Account not found: {row.account}")

        destination = None
        if row.is_transfer and row.transfer_to_account:
            destination = find_account_by_name(context.accounts, row.transfer_to_account)
            if destination is None:
                errors.append(f"Transfer destination account not found: {row.transfer_to_account}")
            elif account is not None and destination.id == account.id:
                errors.append("Transfer cannot be to the same account")

        if row.is_valid and row.amount <= 0:
            errors.append("Transaction amount must be positive")

        if errors:
            raise RowImportError(", ".join(errors))

        if row.is_transfer:
            self._import_transfer(context, row, account, destination, outcome)
        else:
            self._import_entry(context, row, account, outcome)

    def _import_transfer(
        self,
        context: _ImportContext,
        row: ParsedTransaction,
        account: Account,
        destination: Account,
        outcome: _RowOutcome,
    ) -> None:
        if context.options.skip_duplicates and self.db.find_matching_transaction(
            context.owner_id,
            TransactionType.TRANSFER,
            row.date,
            row.amount,
            from_account_id=account.id,
            to_account_id=destination.id,
        ):
            outcome.skipped = True
            return
        if context.options.dry_run:
            return
        outcome.transaction_id = self.transaction_service.create_transfer(
            context.owner_id,
            row.date,
            row.amount,
            from_account_id=account.id,
            to_account_id=destination.id,
            notes=row.notes or None,
        )

    def _import_entry(
        self, context: _ImportContext, row: ParsedTransaction, account: Account, outcome: _RowOutcome
    ) -> None:
        if row.type == TransactionType.WITHDRAWAL and not row.category:
            raise RowImportError("Category is required for withdrawals")

        # Look both names up before creating either, so a failing row creates nothing
        options = context.options
        category = self._lookup(context.categories, row.category, "Category", options.create_missing_categories)
        payee = self._lookup(context.payees, row.payee, "Payee", options.create_missing_payees)

        category_id = category.id if category is not None else None
        if row.category and category is None:
            category_id = self._create_category(context, row, outcome)
        payee_id = payee.id if payee is not None else None
        if row.payee and payee is None:
            payee_id = self._create_payee(context, row, outcome)

        # A name only planned in a dry run cannot match a stored transaction
        planned = (bool(row.category) and category_id is None) or (bool(row.payee) and payee_id is None)
        if options.skip_duplicates and not planned and self.db.find_matching_transaction(
            context.owner_id,
            row.type,
            row.date,
            row.amount,
            account_id=account.id,
            payee_id=payee_id,
            category_id=category_id,
        ):
            outcome.skipped = True
            return
        if context.options.dry_run:
            return
        outcome.transaction_id = self.transaction_service.create_transaction(
            context.owner_id,
            row.type,
            row.date,
            row.amount,
            account.id,
            category_id=category_id,
            payee_id=payee_id,
            notes=row.notes or None,
        )

    @staticmethod
    def _lookup(records, name: str, label: str, create_missing: bool):
        """Find a category or payee by name. None when the row has no name or it will be created."""
        if not name:
            return None
        match = find_by_name(records, name)
        if match is None and not create_missing:
            raise RowImportError(f"{label} not found: {name}")
        return match

    def _create_category(
        self, context: _ImportContext, row: ParsedTransaction, outcome: _RowOutcome
    ) -> Optional[int]:
        """Create the row's missing category. Returns None in a dry run."""
        if context.options.dry_run:
            key = row.category.lower()
            outcome.created_category = key not in context.planned_categories
            context.planned_categories.add(key)
            return None

        category_id = self.category_service.create_category(context.owner_id, row.category)
        context.categories.append(self.db.get_category(context.owner_id, category_id))
        outcome.created_category = True
        logger.info("Created category '%s' while importing row %d", row.category, row.row_number)
        return category_id

    def _create_payee(
        self, context: _ImportContext, row: ParsedTransaction, outcome: _RowOutcome
    ) -> Optional[int]:
        """Create the row's missing payee. Returns None in a dry run."""
        if context.options.dry_run:
            key = row.payee.lower()
            outcome.created_payee = key not in context.planned_payees
            context.planned_payees.add(key)
            return None

        payee_id = self.payee_service.create_payee(
            context.owner_id, row.payee, category_hint=row.category or None
        )
        context.payees.append(self.db.get_payee(context.owner_id, payee_id))
        outcome.created_payee = True
        logger.info("Created payee '%s' while importing row %d", row.payee, row.row_number)
        return payee_id

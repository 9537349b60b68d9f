"""Bulk import of accounts, categories and payees.

Category and payee files hold one name per line, optionally under a header
line such as ``Category`` or ``Name``. Account files are CSV with a ``Name``
column and optional ``Type, Currency, Initial Balance, Bill Generation Date,
Payment Due Date, Interest Rate, Credit Limit`` columns.

Names repeated within a file, and names the owner already uses, are
reported as duplicates and left alone.
"""

import csv
import io
import logging
import re
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence

from pocketledger.database.base import Database
from pocketledger.domain.account import AccountService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import (
    AccountType,
    CreditCardSettings,
    Currency,
    RecordImportResult,
    RecordImportStatus,
    RecordImportSummary,
)
from pocketledger.domain.errors import ConflictError, DomainError, ValidationError
from pocketledger.domain.payee import PayeeService
from pocketledger.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50

CATEGORY_HEADER = re.compile(r"^(category|name|display)", re.IGNORECASE)
PAYEE_HEADER = re.compile(r"^(payee|name|display)", re.IGNORECASE)


def _non_blank_rows(content: str) -> list[tuple[int, list[str]]]:
    if content.startswith("\ufeff"):
        content = content[1:]
    rows = []
    for line_number, row in enumerate(csv.reader(io.StringIO(content)), start=1):
        cells = [cell.strip() for cell in row]
        if any(cells):
            rows.append((line_number, cells))
    return rows


def parse_name_list(content: str, header: re.Pattern) -> list[tuple[int, str]]:
    """Read one name per line, skipping a leading header line.

    Only the first column of each line is used.

    Returns:
        (line_number, name) pairs in file order
    """
    rows = _non_blank_rows(content)
    if rows and header.match(rows[0][1][0]):
        rows = rows[1:]
    return [(line_number, cells[0].strip("\"'").strip()) for line_number, cells in rows]


def summarize_record_import(results: Sequence[RecordImportResult]) -> RecordImportSummary:
    failed = [r for r in results if r.status == RecordImportStatus.FAILED]
    return RecordImportSummary(
        total=len(results),
        created=sum(1 for r in results if r.status == RecordImportStatus.CREATED),
        duplicates=sum(1 for r in results if r.status == RecordImportStatus.DUPLICATE),
        failed=len(failed),
        errors=tuple(f"Line {r.line_number} ({r.name}): {r.error}" for r in failed),
    )


def _parse_account_type(text: str) -> AccountType:
    normalized = re.sub(r"\s+", "_", text.strip().lower()) or AccountType.CHECKING.value
    try:
        return AccountType(normalized)
    except ValueError:
        raise ValidationError(f"Invalid account type: {text}")


def _parse_currency(text: str) -> Currency:
    try:
        return Currency(text.strip().upper() or Currency.INR.value)
    except ValueError:
        raise ValidationError(f"Invalid currency: {text}")


def _parse_day(text: str, label: str) -> Optional[int]:
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise ValidationError(f"Invalid {label}: {text}")


def _parse_optional_amount(text: str, label: str) -> Optional[Decimal]:
    if not text:
        return None
    try:
        return parse_amount(text)
    except ValueError:
        raise ValidationError(f"Invalid {label}: {text}")


class RecordImportService:
    """Service for creating accounts, categories and payees from files."""

    def __init__(self, db: Database):
        """Initialize record import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.account_service = AccountService(db)
        self.category_service = CategoryService(db)
        self.payee_service = PayeeService(db)

    def import_categories(self, owner_id: int, content: str) -> list[RecordImportResult]:
        """Create a category for every new name in a name list."""
        entries = [(line_number, name, None) for line_number, name in parse_name_list(content, CATEGORY_HEADER)]
        results = self._import_names(
            entries, lambda name, _: self.category_service.create_category(owner_id, name)
        )
        self._log("categories", owner_id, results)
        return results

    def import_payees(self, owner_id: int, content: str) -> list[RecordImportResult]:
        """Create a payee for every new name in a name list."""
        entries = [(line_number, name, None) for line_number, name in parse_name_list(content, PAYEE_HEADER)]
        results = self._import_names(
            entries, lambda name, _: self.payee_service.create_payee(owner_id, name)
        )
        self._log("payees", owner_id, results)
        return results

    def import_accounts(self, owner_id: int, content: str) -> list[RecordImportResult]:
        """Create accounts from CSV rows.

        Raises:
            ValidationError: If the file is empty or has no Name column
        """
        rows = _non_blank_rows(content)
        if not rows:
            raise ValidationError("CSV file is empty")
        header = rows[0][1]
        if "Name" not in header:
            raise ValidationError("Missing required headers: Name")

        entries = []
        for line_number, cells in rows[1:]:
            values = {column: cells[i] if i < len(cells) else "" for i, column in enumerate(header)}
            entries.append((line_number, values["Name"], values))

        results = self._import_names(
            entries, lambda name, values: self._create_account(owner_id, name, values)
        )
        self._log("accounts", owner_id, results)
        return results

    def _create_account(self, owner_id: int, name: str, values: dict[str, str]) -> int:
        errors = []
        parsed = {}
        parsers = (
            ("type", lambda: _parse_account_type(values.get("Type", ""))),
            ("currency", lambda: _parse_currency(values.get("Currency", ""))),
            ("balance", lambda: _parse_optional_amount(values.get("Initial Balance", ""), "initial balance")),
            ("bill_day", lambda: _parse_day(values.get("Bill Generation Date", ""), "bill generation day")),
            ("due_day", lambda: _parse_day(values.get("Payment Due Date", ""), "payment due day")),
            ("rate", lambda: _parse_optional_amount(values.get("Interest Rate", ""), "interest rate")),
            ("limit", lambda: _parse_optional_amount(values.get("Credit Limit", ""), "credit limit")),
        )
        for key, parse in parsers:
            try:
                parsed[key] = parse()
            except ValidationError as e:
                errors.append(str(e))
        if errors:
            raise ValidationError(", ".join(errors))

        credit_card = None
        if parsed["type"] == AccountType.CREDIT_CARD and None not in (parsed["bill_day"], parsed["due_day"]):
            credit_card = CreditCardSettings(
                bill_generation_day=parsed["bill_day"],
                bill_due_day=parsed["due_day"],
                interest_rate=parsed["rate"] or Decimal("0"),
                credit_limit=parsed["limit"],
            )
        return self.account_service.create_account(
            owner_id,
            name,
            account_type=parsed["type"],
            currency=parsed["currency"],
            initial_balance=parsed["balance"] or Decimal("0"),
            credit_card=credit_card,
        )

    def _import_names(
        self,
        entries: Sequence[tuple[int, str, Any]],
        create: Callable[[str, Any], int],
    ) -> list[RecordImportResult]:
        """Create one record per entry, in order. Entries are (line_number, name, payload)."""
        seen: set[str] = set()
        results = []
        for line_number, name, payload in entries:
            if not MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH:
                results.append(
                    RecordImportResult(
                        line_number,
                        name,
                        RecordImportStatus.FAILED,
                        error=f"Name must be between {MIN_NAME_LENGTH} and {MAX_NAME_LENGTH} characters",
                    )
                )
                continue
            key = name.lower()
            if key in seen:
                results.append(
                    RecordImportResult(line_number, name, RecordImportStatus.DUPLICATE, error="Repeated in file")
                )
                continue
            seen.add(key)

            try:
                record_id = create(name, payload)
            except ConflictError as e:
                results.append(RecordImportResult(line_number, name, RecordImportStatus.DUPLICATE, error=str(e)))
            except DomainError as e:
                results.append(RecordImportResult(line_number, name, RecordImportStatus.FAILED, error=str(e)))
            else:
                results.append(
                    RecordImportResult(line_number, name, RecordImportStatus.CREATED, record_id=record_id)
                )
        return results

    @staticmethod
    def _log(kind: str, owner_id: int, results: Sequence[RecordImportResult]) -> None:
        summary = summarize_record_import(results)
        logger.info(
            "Imported %d of %d %s for owner %d (%d duplicate, %d failed)",
            summary.created,
            summary.total,
            kind,
            owner_id,
            summary.duplicates,
            summary.failed,
        )

"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic.

    Carries an optional mapping of field name to problem messages so callers
    can show per-field feedback.
    """

    def __init__(self, message: str, problems: Optional[dict[str, list[str]]] = None):
        super().__init__(message)
        self.problems = problems or {}

    @classmethod
    def from_problems(cls, problems: dict[str, list[str]]) -> "ValidationError":
        """Build a single error out of collected per-field problems."""
        parts = [f"{field}: {msg}" for field, msgs in problems.items() for msg in msgs]
        return cls("; ".join(parts), problems)


class NotFoundError(DomainError):
    """Requested domain entity does not exist or belongs to another owner."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class RowImportError(DomainError):
    """A single import row could not be reconciled."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def credit_card_not_found(account_id: int) -> str:
    """Return message for a missing or non credit-card account."""
    return f"Credit card account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def payee_not_found(payee_id: int) -> str:
    """Return message for missing payee by ID."""
    return f"Payee {payee_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def bill_not_found(bill_id: int) -> str:
    """Return message for missing credit card bill."""
    return f"Bill {bill_id} not found"


def budget_not_found(budget_id: int) -> str:
    """Return message for missing budget."""
    return f"Budget {budget_id} not found"


def duplicate_name(kind: str, display_name: str) -> str:
    """Return message for a name already used by the same owner."""
    return f"{kind} with name '{display_name}' already exists"


def duplicate_budget(category_name: str, month: str) -> str:
    """Return message for a second budget on the same category and month."""
    return f"A budget for '{category_name}' in {month} already exists"


def duplicate_bill(account_id: int, start: str, end: str) -> str:
    """Return message when a bill already covers the exact period."""
    return f"Bill already exists for account {account_id} for period {start} to {end}"


def delete_blocked(kind: str, entity_id: int, counts: dict[str, int]) -> str:
    """Return message when an entity still has dependent records."""
    parts = [
        f"{count} {label}{'s' if count != 1 else ''}"
        for label, count in counts.items()
        if count > 0
    ]
    return (
        f"Cannot delete {kind} {entity_id}: it has {', '.join(parts)}. "
        "Please reassign or delete them first."
    )

"""Monthly budget domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    Budget,
    BudgetUsage,
    TransactionStatus,
    TransactionType,
    quantize_amount,
)
from pocketledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    budget_not_found,
    category_not_found,
    duplicate_budget,
)
from pocketledger.utils.date_parser import first_of_month


class BudgetService:
    """Service for monthly spending limits per category."""

    def __init__(self, db: Database):
        self.db = db

    def create_budget(self, owner_id: int, category_id: int, month: date, amount: Decimal) -> int:
        """Create a budget for a category in a month.

        Args:
            owner_id: Owner of the budget
            category_id: Category the limit applies to
            month: Any date in the month; stored as the first of the month
            amount: Positive limit

        Returns:
            Budget ID

        Raises:
            ValidationError: If the amount is not positive
            NotFoundError: If the category does not exist
            ConflictError: If the category already has a budget that month
        """
        if amount <= 0:
            raise ValidationError("Budget amount must be positive")
        category = self.db.get_category(owner_id, category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))

        month = first_of_month(month)
        for existing in self.db.list_budgets(owner_id, month=month):
            if existing.category_id == category_id:
                raise ConflictError(duplicate_budget(category.display_name, month.strftime("%B %Y")))
        return self.db.create_budget(owner_id, category_id, month, quantize_amount(amount))

    def get_budget(self, owner_id: int, budget_id: int) -> Optional[Budget]:
        return self.db.get_budget(owner_id, budget_id)

    def update_budget_amount(self, owner_id: int, budget_id: int, amount: Decimal) -> None:
        if amount <= 0:
            raise ValidationError("Budget amount must be positive")
        if self.db.get_budget(owner_id, budget_id) is None:
            raise NotFoundError(budget_not_found(budget_id))
        self.db.update_budget_amount(owner_id, budget_id, quantize_amount(amount))

    def delete_budget(self, owner_id: int, budget_id: int) -> None:
        if self.db.get_budget(owner_id, budget_id) is None:
            raise NotFoundError(budget_not_found(budget_id))
        self.db.delete_budget(owner_id, budget_id)

    def get_spent(self, owner_id: int, category_id: int, month: date) -> Decimal:
        """Sum non-cancelled withdrawals of a category within a month."""
        start = first_of_month(month)
        end = start + relativedelta(months=1, days=-1)
        withdrawals = self.db.list_transactions(
            owner_id,
            start_date=start,
            end_date=end,
            category_id=category_id,
            transaction_type=TransactionType.WITHDRAWAL,
        )
        return quantize_amount(
            sum(
                (t.amount for t in withdrawals if t.status != TransactionStatus.CANCELLED),
                Decimal("0"),
            )
        )

    def list_budget_usage(self, owner_id: int, month: date) -> list[BudgetUsage]:
        """List the budgets of a month with the amount spent against each.

        Returns:
            Budgets ordered by category name
        """
        month = first_of_month(month)
        usage = []
        for budget in self.db.list_budgets(owner_id, month=month):
            category = self.db.get_category(owner_id, budget.category_id)
            usage.append(
                BudgetUsage(
                    budget=budget,
                    category_name=category.display_name if category else "Unknown",
                    spent=self.get_spent(owner_id, budget.category_id, month),
                )
            )
        return sorted(usage, key=lambda u: u.category_name.lower())

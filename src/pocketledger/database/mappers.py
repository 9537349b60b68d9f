"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the single transactions table
can stay flat while the domain works with a tagged union.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pocketledger.domain import entities as domain
from pocketledger.domain.bill_status import derive_bill_status
from pocketledger.database.models import (
    Account as ORMAccount,
    Budget as ORMBudget,
    Category as ORMCategory,
    CreditCardBill as ORMCreditCardBill,
    Payee as ORMPayee,
    Transaction as ORMTransaction,
)


def _decimal(value) -> Decimal:
    return domain.quantize_amount(Decimal(value if value is not None else 0))


def _rate(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    credit_card = None
    if orm_account.bill_generation_day is not None and orm_account.bill_due_day is not None:
        credit_card = domain.CreditCardSettings(
            bill_generation_day=orm_account.bill_generation_day,
            bill_due_day=orm_account.bill_due_day,
            interest_rate=_rate(orm_account.interest_rate),
            minimum_payment_percentage=_rate(orm_account.minimum_payment_percentage),
            credit_limit=(
                _decimal(orm_account.credit_limit) if orm_account.credit_limit is not None else None
            ),
        )
    return domain.Account(
        id=orm_account.id,
        owner_id=orm_account.owner_id,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        currency=domain.Currency(orm_account.currency),
        initial_balance=_decimal(orm_account.initial_balance),
        current_balance=_decimal(orm_account.current_balance),
        status=domain.AccountStatus(orm_account.status),
        created_at=orm_account.created_at,
        credit_card=credit_card,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        owner_id=orm_category.owner_id,
        name=orm_category.name,
        display_name=orm_category.display_name,
        description=orm_category.description,
        is_active=orm_category.is_active,
        created_at=orm_category.created_at,
    )


def payee_to_domain(orm_payee: ORMPayee) -> domain.Payee:
    """Convert SQLAlchemy Payee model to domain Payee entity."""
    return domain.Payee(
        id=orm_payee.id,
        owner_id=orm_payee.owner_id,
        name=orm_payee.name,
        display_name=orm_payee.display_name,
        description=orm_payee.description,
        category_hint=orm_payee.category_hint,
        is_active=orm_payee.is_active,
        created_at=orm_payee.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert a transactions row to the matching domain variant."""
    transaction_type = domain.TransactionType(orm_transaction.type)
    if transaction_type == domain.TransactionType.TRANSFER:
        return domain.TransferTransaction(
            id=orm_transaction.id,
            owner_id=orm_transaction.owner_id,
            date=orm_transaction.date,
            status=domain.TransactionStatus(orm_transaction.status),
            amount=_decimal(orm_transaction.amount),
            from_account_id=orm_transaction.from_account_id,
            to_account_id=orm_transaction.to_account_id,
            notes=orm_transaction.notes,
            created_at=orm_transaction.created_at,
        )
    return domain.EntryTransaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        type=transaction_type,
        date=orm_transaction.date,
        status=domain.TransactionStatus(orm_transaction.status),
        amount=_decimal(orm_transaction.amount),
        account_id=orm_transaction.account_id,
        payee_id=orm_transaction.payee_id,
        category_id=orm_transaction.category_id,
        notes=orm_transaction.notes,
        created_at=orm_transaction.created_at,
    )


def bill_to_domain(orm_bill: ORMCreditCardBill, today: Optional[date] = None) -> domain.CreditCardBill:
    """Convert SQLAlchemy CreditCardBill model, deriving its status as of ``today``."""
    bill_amount = _decimal(orm_bill.bill_amount)
    paid_amount = _decimal(orm_bill.paid_amount) if orm_bill.paid_amount is not None else None
    return domain.CreditCardBill(
        id=orm_bill.id,
        owner_id=orm_bill.owner_id,
        account_id=orm_bill.account_id,
        billing_period_start=orm_bill.billing_period_start,
        billing_period_end=orm_bill.billing_period_end,
        bill_generation_date=orm_bill.bill_generation_date,
        bill_due_date=orm_bill.bill_due_date,
        bill_amount=bill_amount,
        transaction_count=orm_bill.transaction_count,
        interest_rate=_rate(orm_bill.interest_rate),
        minimum_payment_percentage=_rate(orm_bill.minimum_payment_percentage),
        is_paid=orm_bill.is_paid,
        paid_amount=paid_amount,
        paid_date=orm_bill.paid_date,
        notes=orm_bill.notes,
        status=derive_bill_status(
            orm_bill.is_paid, paid_amount, bill_amount, orm_bill.bill_due_date, today
        ),
        created_at=orm_bill.created_at,
        previous_balance=_decimal(orm_bill.previous_balance),
        late_fee=_decimal(orm_bill.late_fee),
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(
        id=orm_budget.id,
        owner_id=orm_budget.owner_id,
        category_id=orm_budget.category_id,
        month=orm_budget.month,
        amount=_decimal(orm_budget.amount),
        created_at=orm_budget.created_at,
    )

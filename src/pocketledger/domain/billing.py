"""Credit card bill generation and payment tracking.

A bill covers one billing period of a credit card account: the sum of the
completed withdrawals posted to the card within the period. Unpaid amounts
of earlier bills are carried in as the previous balance, which accrues one
month of interest, and a late fee is added while an earlier bill is past due
and not fully paid. Bills snapshot the interest rate and minimum payment
percentage of the account when they are generated, so later settings changes
do not alter issued bills.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    Account,
    BillGenerationResult,
    BillStatus,
    BillsSummary,
    CreditCardBill,
    CreditCardSettings,
    TransactionStatus,
    TransactionType,
    quantize_amount,
)
from pocketledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    bill_not_found,
    credit_card_not_found,
    duplicate_bill,
)
from pocketledger.utils.date_parser import clamp_day

logger = logging.getLogger(__name__)

UPCOMING_DUE_WINDOW_DAYS = 7
LATE_FEE = Decimal("35.00")
LATE_FEE_WARNING = "Late fees applied due to previous overdue bill"


def current_statement_date(bill_generation_day: int, today: date) -> date:
    """Latest date on or before ``today`` falling on the bill generation day.

    Short months use their last day when the generation day does not exist.
    """
    candidate = clamp_day(today.year, today.month, bill_generation_day)
    if candidate > today:
        previous = today.replace(day=1) - relativedelta(months=1)
        candidate = clamp_day(previous.year, previous.month, bill_generation_day)
    return candidate


def default_billing_period(settings: CreditCardSettings, today: date) -> tuple[date, date]:
    """Most recent full billing cycle as of ``today``.

    Returns:
        (period_start, period_end): from the previous statement date to the
        day before the current statement date
    """
    statement = current_statement_date(settings.bill_generation_day, today)
    previous_month = statement.replace(day=1) - relativedelta(months=1)
    period_start = clamp_day(previous_month.year, previous_month.month, settings.bill_generation_day)
    return period_start, statement - timedelta(days=1)


def compute_due_date(period_end: date, settings: CreditCardSettings) -> date:
    """Due date of a bill whose period ends on ``period_end``.

    The statement is dated the day after the period ends. The bill is due on
    the due day of the statement month, or of the following month when the
    due day does not come after the generation day.
    """
    statement = period_end + timedelta(days=1)
    if settings.bill_due_day <= settings.bill_generation_day:
        statement = statement.replace(day=1) + relativedelta(months=1)
    return clamp_day(statement.year, statement.month, settings.bill_due_day)


def _overlaps(bill: CreditCardBill, start: date, end: date) -> bool:
    return bill.billing_period_start <= end and start <= bill.billing_period_end


class BillService:
    """Service for generating and settling credit card bills."""

    def __init__(self, db: Database):
        """Initialize bill service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_credit_card(self, owner_id: int, account_id: int) -> tuple[Account, CreditCardSettings]:
        account = self.db.get_account(owner_id, account_id)
        if account is None or not account.is_credit_card or account.credit_card is None:
            raise NotFoundError(credit_card_not_found(account_id))
        return account, account.credit_card

    def _require_bill(self, owner_id: int, bill_id: int, today: Optional[date] = None) -> CreditCardBill:
        bill = self.db.get_bill(owner_id, bill_id, today=today)
        if bill is None:
            raise NotFoundError(bill_not_found(bill_id))
        return bill

    def generate_bill(
        self,
        owner_id: int,
        account_id: int,
        period_start: Optional[date] = None,
        period_end: Optional[date] = None,
        today: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> BillGenerationResult:
        """Generate the bill of a credit card for a billing period.

        Args:
            owner_id: Owner of the account
            account_id: Credit card account ID
            period_start: First day of the period; defaults to the start of the
                most recent full cycle
            period_end: Last day of the period; defaults to the day before the
                current statement date
            today: Generation date, defaults to the current date
            notes: Optional notes stored on the bill

        Returns:
            BillGenerationResult with the stored bill and any warnings (zero
            amount, overlap with another bill's period, late fee
            for an earlier bill left overdue or partly paid)

        Raises:
            NotFoundError: If the account is missing, owned by someone else or
                not a configured credit card
            ValidationError: If the period starts after it ends
            ConflictError: If a bill already covers exactly this period
        """
        today = today or date.today()
        account, settings = self._require_credit_card(owner_id, account_id)

        if period_start is None or period_end is None:
            default_start, default_end = default_billing_period(settings, today)
            period_start = period_start or default_start
            period_end = period_end or default_end
        if period_start > period_end:
            raise ValidationError(
                f"Billing period start {period_start.isoformat()} is after end {period_end.isoformat()}"
            )

        warnings = []
        previous_balance = Decimal("0")
        late = False
        for existing in self.db.list_bills(owner_id, account_id=account_id, today=today):
            if (
                existing.billing_period_start == period_start
                and existing.billing_period_end == period_end
            ):
                raise ConflictError(
                    duplicate_bill(account_id, period_start.isoformat(), period_end.isoformat())
                )
            if _overlaps(existing, period_start, period_end):
                warnings.append(
                    f"Billing period overlaps bill {existing.id} "
                    f"({existing.billing_period_start.isoformat()} to "
                    f"{existing.billing_period_end.isoformat()})"
                )
            elif existing.billing_period_end < period_start:
                previous_balance += existing.outstanding_amount
                if existing.bill_due_date < today and existing.status in (
                    BillStatus.OVERDUE,
                    BillStatus.PARTIAL,
                ):
                    late = True

        withdrawals = self.db.list_transactions(
            owner_id,
            start_date=period_start,
            end_date=period_end,
            account_id=account_id,
            transaction_type=TransactionType.WITHDRAWAL,
            status=TransactionStatus.COMPLETED,
        )
        bill_amount = quantize_amount(sum((t.amount for t in withdrawals), Decimal("0")))
        if bill_amount == 0:
            warnings.append("No completed withdrawals in the billing period; bill amount is 0")
        late_fee = LATE_FEE if late else Decimal("0")
        if late:
            warnings.append(LATE_FEE_WARNING)

        bill_id = self.db.create_bill(
            owner_id=owner_id,
            account_id=account_id,
            billing_period_start=period_start,
            billing_period_end=period_end,
            bill_generation_date=today,
            bill_due_date=compute_due_date(period_end, settings),
            bill_amount=bill_amount,
            transaction_count=len(withdrawals),
            interest_rate=settings.interest_rate,
            minimum_payment_percentage=settings.minimum_payment_percentage,
            previous_balance=previous_balance,
            late_fee=late_fee,
            notes=notes,
        )
        bill = self._require_bill(owner_id, bill_id, today)
        logger.info(
            "Generated bill %d for '%s' (%s to %s): %s across %d transactions, due %s",
            bill_id,
            account.name,
            period_start,
            period_end,
            bill_amount,
            bill.transaction_count,
            bill.bill_due_date,
        )
        for warning in warnings:
            logger.warning("Bill %d: %s", bill_id, warning)
        return BillGenerationResult(success=True, bill=bill, warnings=tuple(warnings))

    def auto_generate_bills(self, owner_id: int, today: Optional[date] = None) -> list[BillGenerationResult]:
        """Generate the latest cycle's bill for every credit card that lacks one.

        Returns:
            One result per bill generated; cards already billed for the cycle
            are left alone
        """
        today = today or date.today()
        results = []
        for account in self.db.list_accounts(owner_id):
            if not account.is_credit_card or account.credit_card is None:
                continue
            start, end = default_billing_period(account.credit_card, today)
            already_billed = any(
                b.billing_period_start == start and b.billing_period_end == end
                for b in self.db.list_bills(owner_id, account_id=account.id, today=today)
            )
            if already_billed:
                logger.debug("Account %d already billed for %s to %s", account.id, start, end)
                continue
            results.append(self.generate_bill(owner_id, account.id, start, end, today=today))
        return results

    def get_bill(self, owner_id: int, bill_id: int, today: Optional[date] = None) -> Optional[CreditCardBill]:
        return self.db.get_bill(owner_id, bill_id, today=today)

    def list_bills(
        self, owner_id: int, account_id: Optional[int] = None, today: Optional[date] = None
    ) -> list[CreditCardBill]:
        """List bills, newest billing period first."""
        if account_id is not None:
            self._require_credit_card(owner_id, account_id)
        return self.db.list_bills(owner_id, account_id=account_id, today=today)

    def mark_paid(
        self,
        owner_id: int,
        bill_id: int,
        paid_amount: Optional[Decimal] = None,
        paid_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> CreditCardBill:
        """Record a payment against a bill.

        Args:
            owner_id: Owner of the bill
            bill_id: Bill ID
            paid_amount: Amount paid; defaults to the full bill amount
            paid_date: Payment date; defaults to today
            today: Reference date for the returned status

        Returns:
            The updated bill; its status is PAID when the payment covers the
            bill and PARTIAL otherwise

        Raises:
            NotFoundError: If bill not found
            ValidationError: If paid_amount is negative
        """
        today = today or date.today()
        bill = self._require_bill(owner_id, bill_id, today)
        if paid_amount is not None and paid_amount < 0:
            raise ValidationError("Paid amount cannot be negative")
        amount = quantize_amount(paid_amount) if paid_amount is not None else bill.bill_amount
        self.db.update_bill_payment(
            owner_id, bill_id, is_paid=True, paid_amount=amount, paid_date=paid_date or today
        )
        updated = self._require_bill(owner_id, bill_id, today)
        logger.info("Bill %d marked %s with %s", bill_id, updated.status.value, amount)
        return updated

    def mark_unpaid(self, owner_id: int, bill_id: int, today: Optional[date] = None) -> CreditCardBill:
        """Clear the payment of a bill."""
        self._require_bill(owner_id, bill_id, today)
        self.db.update_bill_payment(owner_id, bill_id, is_paid=False, paid_amount=None, paid_date=None)
        logger.info("Bill %d marked unpaid", bill_id)
        return self._require_bill(owner_id, bill_id, today)

    def delete_bill(self, owner_id: int, bill_id: int) -> None:
        self._require_bill(owner_id, bill_id)
        self.db.delete_bill(owner_id, bill_id)

    def get_bills_summary(self, owner_id: int, today: Optional[date] = None) -> BillsSummary:
        """Totals over all bills of an owner as of ``today``."""
        today = today or date.today()
        bills = self.db.list_bills(owner_id, today=today)
        window_end = today + timedelta(days=UPCOMING_DUE_WINDOW_DAYS)

        zero = Decimal("0")
        unpaid = [b for b in bills if not b.is_paid]
        overdue = [b for b in bills if b.status == BillStatus.OVERDUE]
        upcoming = [b for b in unpaid if today <= b.bill_due_date <= window_end]
        due_dates = sorted(b.bill_due_date for b in unpaid if b.bill_due_date >= today)

        return BillsSummary(
            total_outstanding=sum((b.outstanding_amount for b in bills), zero),
            total_overdue=sum((b.outstanding_amount for b in overdue), zero),
            upcoming_due=sum((b.outstanding_amount for b in upcoming), zero),
            total_count=len(bills),
            paid_count=len(bills) - len(unpaid),
            unpaid_count=len(unpaid),
            overdue_count=len(overdue),
            next_due_date=due_dates[0] if due_dates else None,
        )

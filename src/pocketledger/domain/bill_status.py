"""Credit card bill status derivation."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pocketledger.domain.entities import BillStatus


def derive_bill_status(
    is_paid: bool,
    paid_amount: Optional[Decimal],
    bill_amount: Decimal,
    bill_due_date: date,
    today: Optional[date] = None,
) -> BillStatus:
    """Compute the status of a bill from its payment fields.

    A paid bill is PAID when the paid amount covers the bill and PARTIAL
    otherwise. An unpaid bill is OVERDUE once ``today`` is past the due
    date and GENERATED before that.
    """
    today = today or date.today()
    if is_paid:
        if (paid_amount or Decimal("0")) >= bill_amount:
            return BillStatus.PAID
        return BillStatus.PARTIAL
    if today > bill_due_date:
        return BillStatus.OVERDUE
    return BillStatus.GENERATED

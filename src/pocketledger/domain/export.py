"""Transaction export to CSV and Excel."""

import csv
import io
import re
from decimal import Decimal
from pathlib import Path
from typing import Sequence, Union

from openpyxl import Workbook
from openpyxl.styles import Font

from pocketledger.domain.entities import GroupBy, Transaction, TransferTransaction
from pocketledger.domain.report import EntityLookup, group_transactions

EXPORT_COLUMNS = [
    "Date",
    "Type",
    "Amount",
    "Account",
    "Category",
    "Payee",
    "From Account",
    "To Account",
    "Status",
    "Notes",
]
GROUP_COLUMN = "Group"
SUMMARY_COLUMNS = ["Group", "Total Amount", "Transaction Count", "Avg Amount"]
MAX_SHEET_NAME_LENGTH = 31
ALL_TRANSACTIONS_SHEET = "All Transactions"
SUMMARY_SHEET = "Summary"


def transaction_row(txn: Transaction, lookup: EntityLookup) -> list:
    """Export values of one transaction, in EXPORT_COLUMNS order."""
    if isinstance(txn, TransferTransaction):
        account = category = payee = ""
        from_account = lookup.account_name(txn.from_account_id)
        to_account = lookup.account_name(txn.to_account_id)
    else:
        account = lookup.account_name(txn.account_id)
        category = lookup.category_name(txn.category_id) if txn.category_id is not None else ""
        payee = lookup.payee_name(txn.payee_id) if txn.payee_id is not None else ""
        from_account = to_account = ""
    return [
        txn.date.isoformat(),
        txn.type.value,
        txn.amount,
        account,
        category,
        payee,
        from_account,
        to_account,
        txn.status.value,
        txn.notes or "",
    ]


def export_csv(
    transactions: Sequence[Transaction],
    lookup: EntityLookup,
    group_by: GroupBy = GroupBy.NONE,
) -> str:
    """Render transactions as CSV text with every field quoted.

    When grouped, rows are ordered group by group and start with a Group column.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
    if group_by == GroupBy.NONE:
        writer.writerow(EXPORT_COLUMNS)
        for txn in transactions:
            writer.writerow(transaction_row(txn, lookup))
    else:
        writer.writerow([GROUP_COLUMN] + EXPORT_COLUMNS)
        for group in group_transactions(transactions, group_by, lookup):
            for txn in group.transactions:
                writer.writerow([group.label] + transaction_row(txn, lookup))
    return buffer.getvalue()


def sanitize_sheet_name(name: str, used: set[str], fallback: str) -> str:
    """Make a valid, unique worksheet title out of a group label.

    Drops characters other than letters, digits, whitespace, underscores and
    hyphens, cuts to 31 characters and appends a counter on collisions.
    """
    cleaned = re.sub(r"[^\w\s-]", "", name).strip()[:MAX_SHEET_NAME_LENGTH] or fallback
    candidate = cleaned
    counter = 2
    while candidate.lower() in used:
        suffix = f" ({counter})"
        candidate = cleaned[: MAX_SHEET_NAME_LENGTH - len(suffix)] + suffix
        counter += 1
    used.add(candidate.lower())
    return candidate


def _write_sheet(sheet, header: list[str], rows) -> None:
    sheet.append(header)
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for row in rows:
        sheet.append([float(v) if isinstance(v, Decimal) else v for v in row])


def build_workbook(
    transactions: Sequence[Transaction],
    lookup: EntityLookup,
    group_by: GroupBy = GroupBy.NONE,
) -> Workbook:
    """Build an Excel workbook of the transactions.

    Ungrouped exports have a single "All Transactions" sheet. Grouped exports
    have a "Summary" sheet, one sheet per group and an "All Transactions"
    sheet with a leading Group column.
    """
    workbook = Workbook()
    sheet = workbook.active

    if group_by == GroupBy.NONE:
        sheet.title = ALL_TRANSACTIONS_SHEET
        _write_sheet(sheet, EXPORT_COLUMNS, (transaction_row(t, lookup) for t in transactions))
        return workbook

    groups = group_transactions(transactions, group_by, lookup)
    sheet.title = SUMMARY_SHEET
    _write_sheet(
        sheet,
        SUMMARY_COLUMNS,
        (
            [g.label, g.total_amount, g.count, g.total_amount / g.count if g.count else 0]
            for g in groups
        ),
    )

    used = {SUMMARY_SHEET.lower(), ALL_TRANSACTIONS_SHEET.lower()}
    for index, group in enumerate(groups, start=1):
        title = sanitize_sheet_name(group.label, used, f"Group_{index}")
        _write_sheet(
            workbook.create_sheet(title),
            EXPORT_COLUMNS,
            (transaction_row(t, lookup) for t in group.transactions),
        )

    _write_sheet(
        workbook.create_sheet(ALL_TRANSACTIONS_SHEET),
        [GROUP_COLUMN] + EXPORT_COLUMNS,
        ([g.label] + transaction_row(t, lookup) for g in groups for t in g.transactions),
    )
    return workbook


def export_xlsx(
    transactions: Sequence[Transaction],
    lookup: EntityLookup,
    path: Union[str, Path],
    group_by: GroupBy = GroupBy.NONE,
) -> Path:
    """Write the workbook to ``path``. Returns the path written."""
    path = Path(path)
    build_workbook(transactions, lookup, group_by).save(path)
    return path

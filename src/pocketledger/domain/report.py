"""Report filtering and aggregation.

The functions here are pure: they take transactions already loaded from the
store and an EntityLookup for names and account types. ReportService loads
both for an owner.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    Account,
    AccountPerformance,
    AccountType,
    Category,
    CategoryBreakdown,
    EntryTransaction,
    GroupBy,
    Payee,
    PayeeAnalysis,
    ReportFilters,
    TimeGrouping,
    TimeSeriesPoint,
    Transaction,
    TransactionGroup,
    TransactionSummary,
    TransactionType,
    TransferTransaction,
    quantize_amount,
)
from pocketledger.utils.date_parser import get_date_range, normalize_preset

ZERO = Decimal("0")
DEFAULT_TOP_CATEGORIES = 8
OTHERS_LABEL = "Others"
UNCATEGORIZED_LABEL = "Uncategorized"
UNKNOWN_PAYEE_LABEL = "Unknown Payee"
UNKNOWN_ACCOUNT_LABEL = "Unknown Account"


@dataclass(frozen=True)
class EntityLookup:
    """Id to record maps used to label transactions."""

    accounts: Mapping[int, Account] = field(default_factory=dict)
    categories: Mapping[int, Category] = field(default_factory=dict)
    payees: Mapping[int, Payee] = field(default_factory=dict)

    @classmethod
    def from_records(
        cls,
        accounts: Iterable[Account] = (),
        categories: Iterable[Category] = (),
        payees: Iterable[Payee] = (),
    ) -> "EntityLookup":
        return cls(
            accounts={a.id: a for a in accounts},
            categories={c.id: c for c in categories},
            payees={p.id: p for p in payees},
        )

    def account_name(self, account_id: Optional[int]) -> str:
        account = self.accounts.get(account_id)
        return account.name if account else UNKNOWN_ACCOUNT_LABEL

    def category_name(self, category_id: Optional[int]) -> str:
        category = self.categories.get(category_id)
        return category.display_name if category else UNCATEGORIZED_LABEL

    def payee_name(self, payee_id: Optional[int]) -> str:
        payee = self.payees.get(payee_id)
        return payee.display_name if payee else UNKNOWN_PAYEE_LABEL

    def account_type(self, account_id: Optional[int]) -> Optional[AccountType]:
        account = self.accounts.get(account_id)
        return account.account_type if account else None


def resolve_filter_dates(
    filters: ReportFilters, today: Optional[date] = None
) -> tuple[Optional[date], Optional[date]]:
    """Concrete (start, end) of a filter; a preset wins over explicit dates unless it is ``custom``."""
    if filters.date_range and normalize_preset(filters.date_range) != "custom":
        return get_date_range(filters.date_range, today)
    return filters.start_date, filters.end_date


def _primary_account_id(transaction: Transaction) -> int:
    if isinstance(transaction, TransferTransaction):
        return transaction.from_account_id
    return transaction.account_id


def _search_text(transaction: Transaction, lookup: EntityLookup, include_notes: bool) -> list[str]:
    if isinstance(transaction, TransferTransaction):
        texts = [
            lookup.account_name(transaction.from_account_id),
            lookup.account_name(transaction.to_account_id),
        ]
    else:
        texts = [lookup.account_name(transaction.account_id)]
        if transaction.payee_id is not None:
            texts.append(lookup.payee_name(transaction.payee_id))
        if transaction.category_id is not None:
            texts.append(lookup.category_name(transaction.category_id))
    if include_notes and transaction.notes:
        texts.append(transaction.notes)
    return texts


def filter_transactions(
    transactions: Sequence[Transaction],
    filters: ReportFilters,
    lookup: Optional[EntityLookup] = None,
    today: Optional[date] = None,
) -> list[Transaction]:
    """Keep the transactions matching every criterion of ``filters``.

    Empty collections and None values put no restriction on their dimension,
    so a default ReportFilters returns the input unchanged. Transfers have no
    category or payee and never match a category or payee filter.

    Args:
        transactions: Transactions to filter
        filters: Criteria, AND-combined
        lookup: Names and account types for search and account type filters
        today: Reference date for preset date ranges

    Returns:
        Matching transactions in their original order
    """
    lookup = lookup or EntityLookup()
    start, end = resolve_filter_dates(filters, today)
    account_ids = set(filters.account_ids)
    category_ids = set(filters.category_ids)
    payee_ids = set(filters.payee_ids)
    types = set(filters.transaction_types)
    statuses = set(filters.transaction_statuses)
    account_types = set(filters.account_types)
    term = (filters.search_term or "").strip().lower()

    result = []
    for txn in transactions:
        if start is not None and txn.date < start:
            continue
        if end is not None and txn.date > end:
            continue
        if account_ids and not account_ids.intersection(txn.account_ids):
            continue
        if category_ids and getattr(txn, "category_id", None) not in category_ids:
            continue
        if payee_ids and getattr(txn, "payee_id", None) not in payee_ids:
            continue
        if types and txn.type not in types:
            continue
        if statuses and txn.status not in statuses:
            continue
        if filters.min_amount is not None and txn.amount < filters.min_amount:
            continue
        if filters.max_amount is not None and txn.amount > filters.max_amount:
            continue
        if account_types and lookup.account_type(_primary_account_id(txn)) not in account_types:
            continue
        if term and not any(
            term in text.lower() for text in _search_text(txn, lookup, filters.include_notes)
        ):
            continue
        result.append(txn)
    return result


def generate_transaction_summary(
    transactions: Sequence[Transaction],
    filters: Optional[ReportFilters] = None,
    today: Optional[date] = None,
) -> TransactionSummary:
    """Income, expenses and net over the transactions. Transfers count but move no money."""
    income = sum((t.amount for t in transactions if t.type == TransactionType.DEPOSIT), ZERO)
    expenses = sum((t.amount for t in transactions if t.type == TransactionType.WITHDRAWAL), ZERO)
    count = len(transactions)
    average = quantize_amount((income + expenses) / count) if count else ZERO

    start, end = resolve_filter_dates(filters, today) if filters else (None, None)
    if start is None and transactions:
        start = min(t.date for t in transactions)
    if end is None and transactions:
        end = max(t.date for t in transactions)

    return TransactionSummary(
        total_income=income,
        total_expenses=expenses,
        net_income=income - expenses,
        transaction_count=count,
        average_amount=average,
        start_date=start,
        end_date=end,
    )


def _percentage(part: Decimal, whole: Decimal) -> float:
    return float(part / whole * 100) if whole > 0 else 0.0


def generate_category_breakdown(
    transactions: Sequence[Transaction],
    lookup: Optional[EntityLookup] = None,
    top_n: Optional[int] = DEFAULT_TOP_CATEGORIES,
) -> list[CategoryBreakdown]:
    """Spending per category, largest first.

    Only categorized withdrawals count. When there are more than ``top_n``
    categories the smaller ones are rolled into a single "Others" entry.
    """
    lookup = lookup or EntityLookup()
    amounts: dict[int, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[int, int] = defaultdict(int)
    for txn in transactions:
        if txn.type != TransactionType.WITHDRAWAL or txn.category_id is None:
            continue
        amounts[txn.category_id] += txn.amount
        counts[txn.category_id] += 1

    total = sum(amounts.values(), ZERO)
    breakdown = sorted(
        (
            CategoryBreakdown(
                category_id=category_id,
                category_name=lookup.category_name(category_id),
                amount=amount,
                percentage=_percentage(amount, total),
                transaction_count=counts[category_id],
            )
            for category_id, amount in amounts.items()
        ),
        key=lambda item: item.amount,
        reverse=True,
    )

    if top_n is None or len(breakdown) <= top_n:
        return breakdown
    rest = breakdown[top_n:]
    others_amount = sum((item.amount for item in rest), ZERO)
    return breakdown[:top_n] + [
        CategoryBreakdown(
            category_id=None,
            category_name=OTHERS_LABEL,
            amount=others_amount,
            percentage=_percentage(others_amount, total),
            transaction_count=sum(item.transaction_count for item in rest),
        )
    ]


def time_bucket(value: date, grouping: TimeGrouping) -> tuple[str, str, date]:
    """Return (key, label, bucket start) of the period containing ``value``.

    Weeks start on Monday.
    """
    if grouping == TimeGrouping.DAILY:
        return value.isoformat(), value.strftime("%b %d"), value
    if grouping == TimeGrouping.WEEKLY:
        start = value - timedelta(days=value.weekday())
        year, week, _ = start.isocalendar()
        return f"{year}-W{week:02d}", start.strftime("%b %d"), start
    if grouping == TimeGrouping.MONTHLY:
        start = value.replace(day=1)
        return start.strftime("%Y-%m"), start.strftime("%b %Y"), start
    if grouping == TimeGrouping.QUARTERLY:
        quarter = (value.month - 1) // 3 + 1
        start = date(value.year, 3 * quarter - 2, 1)
        return f"{value.year}-Q{quarter}", f"Q{quarter} {value.year}", start
    if grouping == TimeGrouping.YEARLY:
        start = date(value.year, 1, 1)
        return str(value.year), str(value.year), start
    raise ValueError(f"Unsupported grouping: {grouping}")


def generate_time_series(
    transactions: Sequence[Transaction], grouping: TimeGrouping = TimeGrouping.MONTHLY
) -> list[TimeSeriesPoint]:
    """Income and expenses per calendar bucket, oldest bucket first."""
    buckets: dict[str, dict] = {}
    for txn in transactions:
        key, label, start = time_bucket(txn.date, grouping)
        bucket = buckets.setdefault(
            key, {"label": label, "start": start, "income": ZERO, "expenses": ZERO, "count": 0}
        )
        bucket["count"] += 1
        if txn.type == TransactionType.DEPOSIT:
            bucket["income"] += txn.amount
        elif txn.type == TransactionType.WITHDRAWAL:
            bucket["expenses"] += txn.amount

    points = [
        TimeSeriesPoint(
            key=key,
            label=data["label"],
            start=data["start"],
            income=data["income"],
            expenses=data["expenses"],
            net=data["income"] - data["expenses"],
            transaction_count=data["count"],
        )
        for key, data in buckets.items()
    ]
    return sorted(points, key=lambda p: p.start)


def generate_account_performance(
    transactions: Sequence[Transaction], accounts: Sequence[Account]
) -> list[AccountPerformance]:
    """Income, expenses and net change per account, best performer first.

    Every account is listed, including those without transactions. Transfers
    count as an expense of the source and income of the destination.
    Transactions on accounts not in ``accounts`` are ignored.
    """
    totals = {a.id: {"income": ZERO, "expenses": ZERO, "count": 0} for a in accounts}

    def book(account_id: int, amount: Decimal, is_income: bool) -> None:
        entry = totals.get(account_id)
        if entry is None:
            return
        entry["count"] += 1
        entry["income" if is_income else "expenses"] += amount

    for txn in transactions:
        if isinstance(txn, TransferTransaction):
            book(txn.from_account_id, txn.amount, is_income=False)
            book(txn.to_account_id, txn.amount, is_income=True)
        else:
            book(txn.account_id, txn.amount, is_income=txn.type == TransactionType.DEPOSIT)

    performance = [
        AccountPerformance(
            account_id=account.id,
            account_name=account.name,
            account_type=account.account_type,
            starting_balance=account.initial_balance,
            ending_balance=account.current_balance,
            total_income=totals[account.id]["income"],
            total_expenses=totals[account.id]["expenses"],
            net_change=totals[account.id]["income"] - totals[account.id]["expenses"],
            transaction_count=totals[account.id]["count"],
        )
        for account in accounts
    ]
    return sorted(performance, key=lambda p: p.net_change, reverse=True)


def generate_payee_analysis(
    transactions: Sequence[Transaction], lookup: Optional[EntityLookup] = None
) -> list[PayeeAnalysis]:
    """Spending per payee over withdrawals, largest total first."""
    lookup = lookup or EntityLookup()
    grouped: dict[int, list[EntryTransaction]] = defaultdict(list)
    for txn in transactions:
        if txn.type == TransactionType.WITHDRAWAL and txn.payee_id is not None:
            grouped[txn.payee_id].append(txn)

    analysis = []
    for payee_id, payee_transactions in grouped.items():
        total = sum((t.amount for t in payee_transactions), ZERO)
        categories: list[str] = []
        for txn in payee_transactions:
            if txn.category_id is None:
                continue
            name = lookup.category_name(txn.category_id)
            if name not in categories:
                categories.append(name)
        analysis.append(
            PayeeAnalysis(
                payee_id=payee_id,
                payee_name=lookup.payee_name(payee_id),
                total_amount=total,
                transaction_count=len(payee_transactions),
                average_amount=quantize_amount(total / len(payee_transactions)),
                last_transaction_date=max(t.date for t in payee_transactions),
                categories=tuple(categories),
            )
        )
    return sorted(analysis, key=lambda a: a.total_amount, reverse=True)


def _group_key(txn: Transaction, group_by: GroupBy, lookup: EntityLookup) -> tuple[str, str]:
    if group_by == GroupBy.ACCOUNT:
        if isinstance(txn, TransferTransaction):
            key = f"{txn.from_account_id}->{txn.to_account_id}"
            label = f"{lookup.account_name(txn.from_account_id)} → {lookup.account_name(txn.to_account_id)}"
            return key, label
        return str(txn.account_id), lookup.account_name(txn.account_id)
    if group_by == GroupBy.CATEGORY:
        category_id = getattr(txn, "category_id", None)
        if category_id is None:
            return "uncategorized", UNCATEGORIZED_LABEL
        return str(category_id), lookup.category_name(category_id)
    if group_by == GroupBy.PAYEE:
        payee_id = getattr(txn, "payee_id", None)
        if payee_id is None:
            return "unknown", UNKNOWN_PAYEE_LABEL
        return str(payee_id), lookup.payee_name(payee_id)
    if group_by == GroupBy.TYPE:
        return txn.type.value, txn.type.value.capitalize()
    if group_by == GroupBy.STATUS:
        return txn.status.value, txn.status.value.capitalize()
    if group_by == GroupBy.MONTH:
        return txn.date.strftime("%Y-%m"), txn.date.strftime("%b %Y")
    raise ValueError(f"Unsupported grouping: {group_by}")


def group_transactions(
    transactions: Sequence[Transaction],
    group_by: GroupBy,
    lookup: Optional[EntityLookup] = None,
) -> list[TransactionGroup]:
    """Split transactions into labelled groups, largest total first.

    GroupBy.NONE returns a single "All Transactions" group.
    """
    lookup = lookup or EntityLookup()
    if group_by == GroupBy.NONE:
        groups = {"all": ("All Transactions", list(transactions))}
    else:
        groups = {}
        for txn in transactions:
            key, label = _group_key(txn, group_by, lookup)
            groups.setdefault(key, (label, []))[1].append(txn)

    result = [
        TransactionGroup(
            key=key,
            label=label,
            transactions=tuple(members),
            total_amount=sum((t.amount for t in members), ZERO),
        )
        for key, (label, members) in groups.items()
    ]
    return sorted(result, key=lambda g: g.total_amount, reverse=True)


class ReportService:
    """Loads an owner's records for the report functions."""

    def __init__(self, db: Database):
        self.db = db

    def build_lookup(self, owner_id: int) -> EntityLookup:
        return EntityLookup.from_records(
            self.db.list_accounts(owner_id),
            self.db.list_categories(owner_id),
            self.db.list_payees(owner_id),
        )

    def get_filtered_transactions(
        self, owner_id: int, filters: ReportFilters, today: Optional[date] = None
    ) -> tuple[list[Transaction], EntityLookup]:
        """Load the owner's transactions matching ``filters``, oldest first.

        Returns:
            (transactions, lookup) so callers can label the results
        """
        start, end = resolve_filter_dates(filters, today)
        transactions = self.db.list_transactions(owner_id, start_date=start, end_date=end)
        lookup = self.build_lookup(owner_id)
        filtered = filter_transactions(transactions, filters, lookup, today)
        return sorted(filtered, key=lambda t: (t.date, t.id)), lookup

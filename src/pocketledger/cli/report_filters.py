"""Shared report filter options for the report and export commands."""

import functools

import click

from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.date_filters import PERIOD_CHOICE, resolve_cli_date_range
from pocketledger.domain.account import AccountService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import AccountType, ReportFilters, TransactionStatus, TransactionType
from pocketledger.domain.payee import PayeeService
from pocketledger.utils.amount_parser import parse_amount

FILTER_OPTION_NAMES = (
    "start_date",
    "end_date",
    "period",
    "accounts",
    "categories",
    "payees",
    "types",
    "statuses",
    "min_amount",
    "max_amount",
    "account_types",
    "search",
    "include_notes",
)


def report_filter_options(func):
    """Add the transaction filter options to a command.

    The wrapped command receives a ``filters`` keyword argument holding the
    resolved ReportFilters instead of the individual options.
    """

    @click.option("--start-date", help="Start date (YYYY-MM-DD, DD-MM-YYYY or relative)")
    @click.option("--end-date", help="End date (YYYY-MM-DD, DD-MM-YYYY or relative)")
    @click.option("--period", type=PERIOD_CHOICE, help="Named period such as this-month or last-quarter")
    @click.option("--account", "accounts", multiple=True, help="Account name or ID (repeatable)")
    @click.option("--category", "categories", multiple=True, help="Category name (repeatable)")
    @click.option("--payee", "payees", multiple=True, help="Payee name (repeatable)")
    @click.option(
        "--type",
        "types",
        multiple=True,
        type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
        help="Transaction type (repeatable)",
    )
    @click.option(
        "--status",
        "statuses",
        multiple=True,
        type=click.Choice([s.value for s in TransactionStatus], case_sensitive=False),
        help="Transaction status (repeatable)",
    )
    @click.option("--min-amount", help="Smallest amount to include")
    @click.option("--max-amount", help="Largest amount to include")
    @click.option(
        "--account-type",
        "account_types",
        multiple=True,
        type=click.Choice([t.value for t in AccountType], case_sensitive=False),
        help="Account type (repeatable)",
    )
    @click.option("--search", help="Text to find in account, payee or category names")
    @click.option("--include-notes", is_flag=True, help="Also search transaction notes")
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        options = {name: kwargs.pop(name) for name in FILTER_OPTION_NAMES}
        kwargs["filters"] = build_report_filters(ctx, **options)
        return func(*args, **kwargs)

    return wrapper


def _parse_bound(ctx, value: str | None, label: str):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def build_report_filters(
    ctx,
    *,
    start_date: str | None = None,
    end_date: str | None = None,
    period: str | None = None,
    accounts: tuple[str, ...] = (),
    categories: tuple[str, ...] = (),
    payees: tuple[str, ...] = (),
    types: tuple[str, ...] = (),
    statuses: tuple[str, ...] = (),
    min_amount: str | None = None,
    max_amount: str | None = None,
    account_types: tuple[str, ...] = (),
    search: str | None = None,
    include_notes: bool = False,
) -> ReportFilters:
    """Resolve CLI filter values to ReportFilters, exiting on unknown names."""
    db = ctx.obj["db"]
    owner_id = ctx.obj["owner_id"]
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

    account_service = AccountService(db)
    account_ids = tuple(resolve_account_or_exit(ctx, account_service, a) for a in accounts)

    category_ids = []
    category_service = CategoryService(db)
    for name in categories:
        category = category_service.find_category(owner_id, name)
        if category is None:
            click.echo(f"Error: Category not found: {name}", err=True)
            ctx.exit(1)
        category_ids.append(category.id)

    payee_ids = []
    payee_service = PayeeService(db)
    for name in payees:
        payee = payee_service.find_payee(owner_id, name)
        if payee is None:
            click.echo(f"Error: Payee not found: {name}", err=True)
            ctx.exit(1)
        payee_ids.append(payee.id)

    return ReportFilters(
        start_date=start,
        end_date=end,
        account_ids=account_ids,
        category_ids=tuple(category_ids),
        payee_ids=tuple(payee_ids),
        transaction_types=tuple(TransactionType(t.lower()) for t in types),
        transaction_statuses=tuple(TransactionStatus(s.lower()) for s in statuses),
        min_amount=_parse_bound(ctx, min_amount, "minimum amount"),
        max_amount=_parse_bound(ctx, max_amount, "maximum amount"),
        account_types=tuple(AccountType(t.lower()) for t in account_types),
        search_term=search,
        include_notes=include_notes,
    )

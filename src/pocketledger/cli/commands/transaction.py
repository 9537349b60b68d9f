"""Transaction viewing and editing commands."""

from decimal import Decimal

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.date_filters import PERIOD_CHOICE, resolve_cli_date_range
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.account import AccountService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import TransactionStatus, TransactionType, TransferTransaction
from pocketledger.domain.errors import DomainError
from pocketledger.domain.report import ReportService
from pocketledger.domain.transaction import TransactionService


@click.group()
def transaction_group():
    """View and edit transactions."""
    pass


@transaction_group.command("list")
@click.option("--account", help="Filter by account name or ID")
@click.option("--category", help="Filter by category name")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    help="Filter by transaction type",
)
@click.option(
    "--status",
    type=click.Choice([s.value for s in TransactionStatus], case_sensitive=False),
    help="Filter by status",
)
@click.option("--start-date", help="Start date (YYYY-MM-DD, DD-MM-YYYY or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD, DD-MM-YYYY or relative)")
@click.option("--period", type=PERIOD_CHOICE, help="Named period such as this-month or last-30-days")
@click.option("--limit", type=int, help="Show at most this many transactions")
@click.pass_context
def list_transactions(
    ctx,
    account: str | None,
    category: str | None,
    transaction_type: str | None,
    status: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    limit: int | None,
) -> None:
    """List transactions, newest first.

    Examples:
        pocketledger transaction list --period this-month
        pocketledger transaction list --account Wallet --type withdrawal
    """
    db = ctx.obj["db"]
    owner_id = ctx.obj["owner_id"]

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    category_id = None
    if category:
        category_obj = CategoryService(db).find_category(owner_id, category)
        if category_obj is None:
            click.echo(f"Error: Category not found: {category}", err=True)
            ctx.exit(1)
        category_id = category_obj.id

    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

    try:
        transactions = TransactionService(db).list_transactions(
            owner_id,
            start_date=start,
            end_date=end,
            account_id=account_id,
            category_id=category_id,
            transaction_type=TransactionType(transaction_type.lower()) if transaction_type else None,
            status=TransactionStatus(status.lower()) if status else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if limit is not None:
        transactions = transactions[:limit]
    if not transactions:
        click.echo("No transactions found.")
        return

    lookup = ReportService(db).build_lookup(owner_id)
    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Type':<11} {'Amount':>12}  {'Account':<22} {'Category':<20} {'Status':<10}"
    )
    click.echo("-" * 110)
    for txn in transactions:
        if isinstance(txn, TransferTransaction):
            account_name = f"{lookup.account_name(txn.from_account_id)} -> {lookup.account_name(txn.to_account_id)}"
            category_name = ""
        else:
            account_name = lookup.account_name(txn.account_id)
            category_name = lookup.category_name(txn.category_id) if txn.category_id is not None else ""
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {txn.type.value:<11} {txn.amount:>12,.2f}  "
            f"{account_name[:22]:<22} {category_name[:20]:<20} {txn.status.value:<10}"
        )

    active = [t for t in transactions if t.status != TransactionStatus.CANCELLED]
    deposits = sum((t.amount for t in active if t.type == TransactionType.DEPOSIT), Decimal("0"))
    withdrawals = sum((t.amount for t in active if t.type == TransactionType.WITHDRAWAL), Decimal("0"))
    click.echo("-" * 110)
    click.echo(
        f"{'TOTAL':<6} Deposits: {deposits:,.2f} | Withdrawals: {withdrawals:,.2f} | Count: {len(transactions)}"
    )


@transaction_group.command("status")
@click.argument("transaction_id", type=int)
@click.argument("status", type=click.Choice([s.value for s in TransactionStatus], case_sensitive=False))
@click.pass_context
def set_status(ctx, transaction_id: int, status: str) -> None:
    """Change the status of a transaction.

    Account balances only count completed transactions.

    Examples:
        pocketledger transaction status 12 cancelled
    """
    db = ctx.obj["db"]
    try:
        TransactionService(db).update_status(ctx.obj["owner_id"], transaction_id, TransactionStatus(status.lower()))
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction {transaction_id} is now {status.lower()}")


@transaction_group.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("category", required=False)
@click.pass_context
def set_category(ctx, transaction_id: int, category: str | None) -> None:
    """Set the category of a deposit or withdrawal.

    Leave CATEGORY out to clear the category of a deposit.

    Examples:
        pocketledger transaction categorize 12 Groceries
    """
    db = ctx.obj["db"]
    owner_id = ctx.obj["owner_id"]

    category_id = None
    if category:
        category_obj = CategoryService(db).find_category(owner_id, category)
        if category_obj is None:
            click.echo(f"Error: Category not found: {category}", err=True)
            ctx.exit(1)
        category_id = category_obj.id

    try:
        TransactionService(db).update_category(owner_id, transaction_id, category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if category:
        click.echo(f"Categorized transaction {transaction_id} as '{category}'")
    else:
        click.echo(f"Cleared category of transaction {transaction_id}")


@transaction_group.command("notes")
@click.argument("transaction_id", type=int)
@click.argument("notes", default="")
@click.pass_context
def set_notes(ctx, transaction_id: int, notes: str) -> None:
    """Replace the notes of a transaction. Empty NOTES clears them."""
    db = ctx.obj["db"]
    try:
        TransactionService(db).update_notes(ctx.obj["owner_id"], transaction_id, notes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated notes of transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        pocketledger transaction delete 1
    """
    db = ctx.obj["db"]
    owner_id = ctx.obj["owner_id"]
    transaction_service = TransactionService(db)

    txn = transaction_service.get_transaction(owner_id, transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        transaction_service.delete_transaction(owner_id, transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")

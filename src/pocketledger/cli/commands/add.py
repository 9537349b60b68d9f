"""Add transaction and transfer commands."""

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.account import AccountService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import TransactionStatus, TransactionType
from pocketledger.domain.errors import DomainError
from pocketledger.domain.payee import PayeeService
from pocketledger.domain.transaction import TransactionService
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date

STATUS_CHOICE = click.Choice([s.value for s in TransactionStatus], case_sensitive=False)


def _parse_date_or_exit(ctx, value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def _parse_amount_or_exit(ctx, value: str):
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@click.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([TransactionType.WITHDRAWAL.value, TransactionType.DEPOSIT.value], case_sensitive=False),
    default=TransactionType.WITHDRAWAL.value,
    show_default=True,
)
@click.option("--amount", required=True, help="Positive transaction amount (e.g., 123.45)")
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD, DD-MM-YYYY or relative like 'today', 'yesterday')",
)
@click.option("--category", help="Category name (required for withdrawals)")
@click.option("--payee", help="Payee name")
@click.option("--status", type=STATUS_CHOICE, default=TransactionStatus.COMPLETED.value, show_default=True)
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    transaction_type: str,
    amount: str,
    date: str,
    category: str | None,
    payee: str | None,
    status: str,
    notes: str | None,
):
    """Add a deposit or withdrawal manually.

    Examples:
        pocketledger add --account Wallet --amount 250 --category Groceries --payee "Big Store"
        pocketledger add --account Bank --type deposit --amount 50000 --category Salary
    """
    db = ctx.obj["db"]
    owner_id = ctx.obj["owner_id"]
    account_service = AccountService(db)
    category_service = CategoryService(db)
    payee_service = PayeeService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    txn_date = _parse_date_or_exit(ctx, date)
    txn_amount = _parse_amount_or_exit(ctx, amount)

    category_id = None
    if category:
        category_obj = category_service.find_category(owner_id, category)
        if category_obj is None:
            click.echo(f"Error: Category not found: {category}", err=True)
            ctx.exit(1)
        category_id = category_obj.id

    payee_id = None
    if payee:
        payee_obj = payee_service.find_payee(owner_id, payee)
        if payee_obj is None:
            click.echo(f"Error: Payee not found: {payee}", err=True)
            ctx.exit(1)
        payee_id = payee_obj.id

    try:
        transaction_id = TransactionService(db).create_transaction(
            owner_id,
            TransactionType(transaction_type.lower()),
            txn_date,
            txn_amount,
            account_id,
            category_id=category_id,
            payee_id=payee_id,
            status=TransactionStatus(status.lower()),
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    account_obj = account_service.get_account(owner_id, account_id)
    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Account: {account_obj.name}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: {txn_amount:,.2f} ({transaction_type.lower()})")
    if category:
        click.echo(f"  Category: {category}")
    click.echo(f"  Balance: {account_obj.current_balance:,.2f}")


@click.command("transfer")
@click.argument("from_account", metavar="FROM_ACCOUNT")
@click.argument("to_account", metavar="TO_ACCOUNT")
@click.option("--amount", required=True, help="Positive amount to move")
@click.option("--date", default="today", show_default=True, help="Transfer date")
@click.option("--status", type=STATUS_CHOICE, default=TransactionStatus.COMPLETED.value, show_default=True)
@click.option("--notes", help="Notes")
@click.pass_context
def add_transfer(ctx, from_account: str, to_account: str, amount: str, date: str, status: str, notes: str | None):
    """Move money between two accounts.

    Examples:
        pocketledger transfer Bank Wallet --amount 2000
    """
    db = ctx.obj["db"]
    owner_id = ctx.obj["owner_id"]
    account_service = AccountService(db)

    from_id = resolve_account_or_exit(ctx, account_service, from_account)
    to_id = resolve_account_or_exit(ctx, account_service, to_account)
    txn_date = _parse_date_or_exit(ctx, date)
    txn_amount = _parse_amount_or_exit(ctx, amount)

    try:
        transaction_id = TransactionService(db).create_transfer(
            owner_id,
            txn_date,
            txn_amount,
            from_id,
            to_id,
            status=TransactionStatus(status.lower()),
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created transfer {transaction_id}: {txn_amount:,.2f} from {from_account} to {to_account}")


def register_commands(cli):
    """Register add and transfer commands with main CLI."""
    cli.add_command(add_transaction)
    cli.add_command(add_transfer)

"""Account management commands."""

from dataclasses import replace
from decimal import Decimal

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.cli.record_import import run_record_import
from pocketledger.domain.account import AccountService
from pocketledger.domain.entities import AccountType, CreditCardSettings, Currency
from pocketledger.domain.errors import DomainError
from pocketledger.domain.record_import import RecordImportService
from pocketledger.utils.amount_parser import parse_amount


def _parse_optional_amount(ctx, value: str | None, label: str) -> Decimal | None:
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType], case_sensitive=False),
    default=AccountType.CHECKING.value,
    show_default=True,
    help="Account type",
)
@click.option(
    "--currency",
    type=click.Choice([c.value for c in Currency], case_sensitive=False),
    default=Currency.INR.value,
    show_default=True,
)
@click.option("--initial-balance", default="0", help="Opening balance")
@click.option("--bill-day", type=int, help="Bill generation day (credit cards)")
@click.option("--due-day", type=int, help="Bill due day (credit cards)")
@click.option("--interest-rate", help="Yearly interest rate as a fraction, e.g. 0.36")
@click.option("--min-payment", help="Minimum payment as a fraction of the bill, e.g. 0.05")
@click.option("--credit-limit", help="Credit limit (credit cards)")
@click.pass_context
def create_account(
    ctx,
    name: str,
    account_type: str,
    currency: str,
    initial_balance: str,
    bill_day: int | None,
    due_day: int | None,
    interest_rate: str | None,
    min_payment: str | None,
    credit_limit: str | None,
):
    """Create a new account.

    Credit card accounts need --bill-day and --due-day.

    Examples:
        pocketledger account create "Wallet" --type cash
        pocketledger account create "HDFC Card" --type credit_card --bill-day 1 --due-day 21
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    kind = AccountType(account_type.lower())
    opening = _parse_optional_amount(ctx, initial_balance, "initial balance")
    credit_card = None
    if kind == AccountType.CREDIT_CARD:
        if bill_day is None or due_day is None:
            click.echo("Error: Credit card accounts need --bill-day and --due-day", err=True)
            ctx.exit(1)
        credit_card = CreditCardSettings(
            bill_generation_day=bill_day,
            bill_due_day=due_day,
            credit_limit=_parse_optional_amount(ctx, credit_limit, "credit limit"),
        )
        if interest_rate is not None:
            credit_card = replace(
                credit_card, interest_rate=_parse_optional_amount(ctx, interest_rate, "interest rate")
            )
        if min_payment is not None:
            credit_card = replace(
                credit_card,
                minimum_payment_percentage=_parse_optional_amount(ctx, min_payment, "minimum payment"),
            )

    try:
        account_id = service.create_account(
            ctx.obj["owner_id"],
            name,
            account_type=kind,
            currency=Currency(currency.upper()),
            initial_balance=opening,
            credit_card=credit_card,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their balances."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(ctx.obj["owner_id"])
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        line = (
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account_type.value:12s} | "
            f"{acc.currency.value} {acc.current_balance:>12,.2f}"
        )
        if acc.credit_card is not None:
            line += f" | bill day {acc.credit_card.bill_generation_day}, due day {acc.credit_card.bill_due_day}"
        click.echo(line)


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_account(ctx, account: str, new_name: str) -> None:
    """Rename an account.

    ACCOUNT can be an account name or ID.

    Examples:
        pocketledger account rename "Wallet" "Cash Wallet"
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.rename_account(ctx.obj["owner_id"], account_id, new_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Renamed account to '{new_name}'")


@account_group.command("settings")
@click.argument("account", metavar="ACCOUNT")
@click.option("--bill-day", type=int, help="Bill generation day")
@click.option("--due-day", type=int, help="Bill due day")
@click.option("--interest-rate", help="Yearly interest rate as a fraction")
@click.option("--min-payment", help="Minimum payment as a fraction of the bill")
@click.option("--credit-limit", help="Credit limit")
@click.pass_context
def update_settings(
    ctx,
    account: str,
    bill_day: int | None,
    due_day: int | None,
    interest_rate: str | None,
    min_payment: str | None,
    credit_limit: str | None,
) -> None:
    """Change the bill settings of a credit card account.

    Examples:
        pocketledger account settings "HDFC Card" --due-day 18 --interest-rate 0.42
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        settings = service.update_credit_card_settings(
            ctx.obj["owner_id"],
            account_id,
            bill_generation_day=bill_day,
            bill_due_day=due_day,
            interest_rate=_parse_optional_amount(ctx, interest_rate, "interest rate"),
            minimum_payment_percentage=_parse_optional_amount(ctx, min_payment, "minimum payment"),
            credit_limit=_parse_optional_amount(ctx, credit_limit, "credit limit"),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Bill day {settings.bill_generation_day}, due day {settings.bill_due_day}, "
        f"interest {settings.interest_rate}, minimum payment {settings.minimum_payment_percentage}"
    )


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID. The account can only be deleted if
    no transactions or bills reference it.

    Examples:
        pocketledger account delete "Wallet"
        pocketledger account delete 1 --yes
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    owner_id = ctx.obj["owner_id"]
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(owner_id, account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(owner_id, account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account '{account_obj.name}'")


@account_group.command("recalculate")
@click.pass_context
def recalculate_balances(ctx) -> None:
    """Recompute every account balance from its transactions."""
    db = ctx.obj["db"]
    service = AccountService(db)
    owner_id = ctx.obj["owner_id"]

    balances = service.recalculate_balances(owner_id)
    for acc in service.list_accounts(owner_id):
        click.echo(f"{acc.name:20s} {balances[acc.id]:>12,.2f}")


@account_group.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_accounts(ctx, csv_file: str):
    """Create accounts from a CSV file.

    The file needs a Name column. Type, Currency, Initial Balance, Interest
    Rate and Credit Limit are optional; credit cards also need Bill
    Generation Date and Payment Due Date (days of the month). Accounts whose
    name already exists are reported and skipped.

    Example:
        pocketledger account import accounts.csv
    """
    run_record_import(ctx, csv_file, "accounts", RecordImportService(ctx.obj["db"]).import_accounts)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")

"""Credit card bill commands."""

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.account import AccountService
from pocketledger.domain.billing import BillService
from pocketledger.domain.entities import CreditCardBill
from pocketledger.domain.errors import DomainError
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date


def _parse_optional_date(ctx, value: str | None, label: str):
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _echo_bill(bill: CreditCardBill, account_name: str) -> None:
    click.echo(
        f"ID: {bill.id:3d} | {account_name:18s} | {bill.billing_period_start} to {bill.billing_period_end} | "
        f"{bill.bill_amount:>12,.2f} | due {bill.bill_due_date} | {bill.status.value}"
    )


@click.group()
def bill_group():
    """Generate and track credit card bills."""
    pass


@bill_group.command("generate")
@click.argument("account", metavar="ACCOUNT")
@click.option("--start-date", help="Billing period start (defaults to the last full cycle)")
@click.option("--end-date", help="Billing period end (defaults to the last full cycle)")
@click.option("--notes", help="Notes to store on the bill")
@click.pass_context
def generate_bill(ctx, account: str, start_date: str | None, end_date: str | None, notes: str | None) -> None:
    """Generate the bill of a credit card.

    Without dates, the bill covers the most recent full billing cycle.

    Examples:
        pocketledger bill generate "HDFC Card"
        pocketledger bill generate "HDFC Card" --start-date 2024-01-01 --end-date 2024-01-31
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    period_start = _parse_optional_date(ctx, start_date, "start date")
    period_end = _parse_optional_date(ctx, end_date, "end date")

    try:
        result = BillService(db).generate_bill(
            ctx.obj["owner_id"], account_id, period_start, period_end, notes=notes
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    bill = result.bill
    click.echo(f"Generated bill {bill.id} for {bill.billing_period_start} to {bill.billing_period_end}")
    click.echo(f"  Amount: {bill.bill_amount:,.2f} ({bill.transaction_count} transaction(s))")
    if bill.previous_balance or bill.late_fee:
        click.echo(f"  Previous balance: {bill.previous_balance:,.2f}")
        click.echo(f"  Interest: {bill.interest_charges:,.2f}")
        click.echo(f"  Late fee: {bill.late_fee:,.2f}")
        click.echo(f"  Total due: {bill.total_due:,.2f}")
    click.echo(f"  Minimum payment: {bill.minimum_payment:,.2f}")
    click.echo(f"  Due date: {bill.bill_due_date}")
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)


@bill_group.command("auto")
@click.pass_context
def auto_generate(ctx) -> None:
    """Generate the latest cycle's bill for every credit card missing one."""
    db = ctx.obj["db"]
    owner_id = ctx.obj["owner_id"]
    accounts = {a.id: a.name for a in AccountService(db).list_credit_cards(owner_id)}

    try:
        results = BillService(db).auto_generate_bills(owner_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not results:
        click.echo("All credit cards are already billed for the latest cycle.")
        return
    for result in results:
        _echo_bill(result.bill, accounts.get(result.bill.account_id, "Unknown"))
        for warning in result.warnings:
            click.echo(f"  Warning: {warning}", err=True)


@bill_group.command("list")
@click.option("--account", help="Only bills of this credit card")
@click.option("--unpaid", is_flag=True, help="Only bills that are not paid")
@click.pass_context
def list_bills(ctx, account: str | None, unpaid: bool) -> None:
    """List bills, newest first."""
    db = ctx.obj["db"]
    owner_id = ctx.obj["owner_id"]
    account_service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, account_service, account) if account else None

    try:
        bills = BillService(db).list_bills(owner_id, account_id=account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if unpaid:
        bills = [b for b in bills if not b.is_paid]
    if not bills:
        click.echo("No bills found.")
        return

    accounts = {a.id: a.name for a in account_service.list_accounts(owner_id)}
    click.echo("\nBills:")
    click.echo("-" * 100)
    for bill in bills:
        _echo_bill(bill, accounts.get(bill.account_id, "Unknown"))


@bill_group.command("pay")
@click.argument("bill_id", type=int)
@click.option("--amount", help="Amount paid (defaults to the full bill)")
@click.option("--date", "paid_date", help="Payment date (defaults to today)")
@click.pass_context
def pay_bill(ctx, bill_id: int, amount: str | None, paid_date: str | None) -> None:
    """Record a payment against a bill.

    Examples:
        pocketledger bill pay 3
        pocketledger bill pay 3 --amount 1500 --date 2024-02-15
    """
    db = ctx.obj["db"]
    paid_amount = None
    if amount is not None:
        try:
            paid_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    try:
        bill = BillService(db).mark_paid(
            ctx.obj["owner_id"],
            bill_id,
            paid_amount=paid_amount,
            paid_date=_parse_optional_date(ctx, paid_date, "payment date"),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Bill {bill.id} is {bill.status.value}: paid {bill.paid_amount:,.2f} of {bill.bill_amount:,.2f}"
    )


@bill_group.command("unpay")
@click.argument("bill_id", type=int)
@click.pass_context
def unpay_bill(ctx, bill_id: int) -> None:
    """Clear the recorded payment of a bill."""
    db = ctx.obj["db"]
    try:
        bill = BillService(db).mark_unpaid(ctx.obj["owner_id"], bill_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Bill {bill.id} is {bill.status.value}")


@bill_group.command("summary")
@click.pass_context
def bills_summary(ctx) -> None:
    """Show outstanding, overdue and upcoming bill totals."""
    db = ctx.obj["db"]
    summary = BillService(db).get_bills_summary(ctx.obj["owner_id"])

    click.echo(f"Bills: {summary.total_count} ({summary.paid_count} paid, {summary.unpaid_count} unpaid)")
    click.echo(f"  Outstanding: {summary.total_outstanding:,.2f}")
    click.echo(f"  Overdue: {summary.total_overdue:,.2f} ({summary.overdue_count} bill(s))")
    click.echo(f"  Due in the next week: {summary.upcoming_due:,.2f}")
    if summary.next_due_date is not None:
        click.echo(f"  Next due date: {summary.next_due_date}")


@bill_group.command("delete")
@click.argument("bill_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_bill(ctx, bill_id: int, yes: bool) -> None:
    """Delete a bill."""
    db = ctx.obj["db"]
    if not yes and not click.confirm(f"Are you sure you want to delete bill {bill_id}?"):
        click.echo("Deletion cancelled.")
        return
    try:
        BillService(db).delete_bill(ctx.obj["owner_id"], bill_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted bill {bill_id}")


def register_commands(cli):
    """Register bill commands with main CLI."""
    cli.add_command(bill_group, name="bill")

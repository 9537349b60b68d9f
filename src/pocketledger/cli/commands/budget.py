"""Monthly budget commands."""

from datetime import date

import click
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.budget import BudgetService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.errors import DomainError
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import first_of_month, parse_date


def _parse_month(ctx, value: str | None) -> date:
    if value is None:
        return first_of_month(date.today())
    try:
        # Accept YYYY-MM as well as any full date within the month
        if len(value) == 7 and value[4] == "-":
            value = f"{value}-01"
        return first_of_month(parse_date(value))
    except ValueError as e:
        click.echo(f"Error: Invalid month: {e}", err=True)
        ctx.exit(1)


@click.group()
def budget_group():
    """Manage monthly category budgets."""
    pass


@budget_group.command("set")
@click.argument("category", metavar="CATEGORY")
@click.argument("amount")
@click.option("--month", help="Month as YYYY-MM (defaults to the current month)")
@click.pass_context
def set_budget(ctx, category: str, amount: str, month: str | None) -> None:
    """Set the spending limit of a category for a month.

    An existing budget for the same category and month gets the new amount.

    Examples:
        pocketledger budget set Groceries 8000
        pocketledger budget set "Dining Out" 3000 --month 2024-03
    """
    db = ctx.obj["db"]
    owner_id = ctx.obj["owner_id"]
    service = BudgetService(db)

    category_obj = CategoryService(db).find_category(owner_id, category)
    if category_obj is None:
        click.echo(f"Error: Category not found: {category}", err=True)
        ctx.exit(1)
    try:
        limit = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
    budget_month = _parse_month(ctx, month)

    existing = next(
        (u.budget for u in service.list_budget_usage(owner_id, budget_month) if u.budget.category_id == category_obj.id),
        None,
    )
    try:
        if existing is not None:
            service.update_budget_amount(owner_id, existing.id, limit)
            budget_id = existing.id
        else:
            budget_id = service.create_budget(owner_id, category_obj.id, budget_month, limit)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Budget {budget_id}: {category_obj.display_name} {limit:,.2f} for {budget_month.strftime('%B %Y')}"
    )


@budget_group.command("list")
@click.option("--month", help="Month as YYYY-MM (defaults to the current month)")
@click.pass_context
def list_budgets(ctx, month: str | None) -> None:
    """Show the budgets of a month with their spending."""
    db = ctx.obj["db"]
    budget_month = _parse_month(ctx, month)
    usage = BudgetService(db).list_budget_usage(ctx.obj["owner_id"], budget_month)
    if not usage:
        click.echo(f"No budgets for {budget_month.strftime('%B %Y')}.")
        return

    click.echo(f"\nBudgets for {budget_month.strftime('%B %Y')}:")
    click.echo("-" * 84)
    click.echo(f"{'ID':<5} {'Category':<24} {'Budget':>12} {'Spent':>12} {'Remaining':>12} {'Used':>8}")
    click.echo("-" * 84)
    for item in usage:
        marker = " !" if item.remaining < 0 else ""
        click.echo(
            f"{item.budget.id:<5} {item.category_name[:24]:<24} {item.budget.amount:>12,.2f} "
            f"{item.spent:>12,.2f} {item.remaining:>12,.2f} {item.percent_used:>7.1f}%{marker}"
        )


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.pass_context
def delete_budget(ctx, budget_id: int) -> None:
    """Delete a budget."""
    db = ctx.obj["db"]
    try:
        BudgetService(db).delete_budget(ctx.obj["owner_id"], budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted budget {budget_id}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")

"""Payee management commands."""

import click
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.cli.record_import import run_record_import
from pocketledger.domain.errors import DomainError, NotFoundError
from pocketledger.domain.payee import PayeeService
from pocketledger.domain.record_import import RecordImportService


@click.group()
def payee_group():
    """Manage payees."""
    pass


@payee_group.command("list")
@click.pass_context
def list_payees(ctx):
    """List all payees."""
    db = ctx.obj["db"]
    service = PayeeService(db)

    payees = service.list_payees(ctx.obj["owner_id"])
    if not payees:
        click.echo("No payees found.")
        return

    click.echo("\nPayees:")
    for payee in payees:
        hint = f" -> {payee.category_hint}" if payee.category_hint else ""
        click.echo(f"ID: {payee.id:3d} | {payee.display_name}{hint}")


@payee_group.command("create")
@click.argument("name")
@click.option("--description", help="Optional description")
@click.option("--category-hint", help="Category usually used with this payee")
@click.pass_context
def create_payee(ctx, name: str, description: str | None, category_hint: str | None):
    """Create a new payee."""
    db = ctx.obj["db"]
    service = PayeeService(db)

    try:
        payee_id = service.create_payee(
            ctx.obj["owner_id"], name, description=description, category_hint=category_hint
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created payee '{name}' (ID: {payee_id})")


@payee_group.command("delete")
@click.argument("name")
@click.pass_context
def delete_payee(ctx, name: str):
    """Delete a payee by name or slug."""
    db = ctx.obj["db"]
    service = PayeeService(db)
    owner_id = ctx.obj["owner_id"]

    try:
        payee = service.find_payee(owner_id, name)
        if payee is None:
            raise NotFoundError(f"Payee not found: {name}")
        service.delete_payee(owner_id, payee.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted payee '{payee.display_name}'")


@payee_group.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_payees(ctx, csv_file: str):
    """Create payees from a file with one name per line.

    A first line such as "Payee" or "Name" is treated as a header.
    Names that already exist are reported and skipped.
    """
    run_record_import(ctx, csv_file, "payees", RecordImportService(ctx.obj["db"]).import_payees)


def register_commands(cli):
    """Register payee commands with main CLI."""
    cli.add_command(payee_group, name="payee")

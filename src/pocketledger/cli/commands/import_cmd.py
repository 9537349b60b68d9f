"""CSV import command."""

from pathlib import Path

import click
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.csv_import import TransactionImportService, generate_import_summary, parse_csv
from pocketledger.domain.entities import ImportOptions
from pocketledger.domain.errors import DomainError


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--create-categories", is_flag=True, help="Create categories that do not exist yet")
@click.option("--create-payees", is_flag=True, help="Create payees that do not exist yet")
@click.option("--skip-duplicates", is_flag=True, help="Skip rows matching an existing transaction")
@click.option("--dry-run", is_flag=True, help="Reconcile rows without writing anything")
@click.option("--show-errors/--hide-errors", default=True, help="List the rows that failed")
@click.pass_context
def import_csv(
    ctx,
    csv_file: str,
    create_categories: bool,
    create_payees: bool,
    skip_duplicates: bool,
    dry_run: bool,
    show_errors: bool,
):
    """Import transactions from a CSV file.

    The file needs the columns Date, Account, Payee, Category, Withdrawal and
    Deposit. Dates are DD-MM-YYYY. A payee such as "> Savings" imports the
    row as a transfer to the Savings account.

    Examples:
        pocketledger import statement.csv --create-categories --create-payees
        pocketledger import statement.csv --skip-duplicates --dry-run
    """
    db = ctx.obj["db"]
    owner_id = ctx.obj["owner_id"]
    service = TransactionImportService(db)
    options = ImportOptions(
        create_missing_categories=create_categories,
        create_missing_payees=create_payees,
        skip_duplicates=skip_duplicates,
        dry_run=dry_run,
    )

    content = Path(csv_file).read_text(encoding="utf-8")
    try:
        rows = parse_csv(content)
    except DomainError as e:
        handle_domain_error(ctx, e)

    with click.progressbar(length=len(rows), label="Importing rows") as bar:
        results = service.import_transactions_batch(
            owner_id,
            rows,
            db.list_accounts(owner_id),
            db.list_categories(owner_id),
            db.list_payees(owner_id),
            options=options,
            on_progress=lambda done, total: bar.update(1),
        )

    summary = generate_import_summary(results)
    click.echo(f"\nImport {'dry run ' if dry_run else ''}complete:")
    click.echo(f"  Rows: {summary.total}")
    click.echo(f"  Imported: {summary.successful}")
    click.echo(f"    Deposits: {summary.deposits}")
    click.echo(f"    Withdrawals: {summary.withdrawals}")
    click.echo(f"    Transfers: {summary.transfers}")
    click.echo(f"  Skipped: {summary.skipped} duplicates")
    click.echo(f"  Failed: {summary.failed}")
    if summary.created_categories:
        click.echo(f"  Categories created: {summary.created_categories}")
    if summary.created_payees:
        click.echo(f"  Payees created: {summary.created_payees}")
    if show_errors and summary.errors:
        click.echo("\nErrors:", err=True)
        for error in summary.errors:
            click.echo(f"  {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)

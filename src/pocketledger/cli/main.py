"""Main CLI entry point."""

import logging

import click
from pocketledger.database.factories import DB_PATH_ENV_VAR, create_sqlite_database

# Import and register all commands at module level
from pocketledger.cli.commands import (
    account,
    add,
    bill,
    budget,
    category,
    export,
    import_cmd,
    payee,
    report,
    transaction,
)

OWNER_ENV_VAR = "POCKETLEDGER_OWNER"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV_VAR} environment variable)",
    envvar=DB_PATH_ENV_VAR,
)
@click.option(
    "--owner",
    "owner_id",
    type=int,
    default=1,
    show_default=True,
    envvar=OWNER_ENV_VAR,
    help=f"Owner whose records are used (or set {OWNER_ENV_VAR})",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, owner_id: int, verbose: bool):
    """Pocketledger - personal finance tracker.

    Track accounts, transactions and budgets, import bank exports from CSV,
    generate credit card bills and build reports.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj["owner_id"] = owner_id

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
payee.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
import_cmd.register_commands(cli)
bill.register_commands(cli)
budget.register_commands(cli)
report.register_commands(cli)
export.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()

"""Category management commands."""

import click
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.cli.record_import import run_record_import
from pocketledger.domain.category import CategoryService
from pocketledger.domain.errors import DomainError, NotFoundError
from pocketledger.domain.record_import import RecordImportService


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--active-only", is_flag=True, help="Hide inactive categories")
@click.pass_context
def list_categories(ctx, active_only: bool):
    """List all categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories(ctx.obj["owner_id"], active_only=active_only)
    if not categories:
        click.echo("No categories found. Use 'category create' to add one.")
        return

    click.echo("\nCategories:")
    for cat in categories:
        status = "" if cat.is_active else " (inactive)"
        click.echo(f"ID: {cat.id:3d} | {cat.display_name} [{cat.name}]{status}")


@category_group.command("create")
@click.argument("name")
@click.option("--description", help="Optional description")
@click.pass_context
def create_category(ctx, name: str, description: str | None):
    """Create a new category."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category_id = service.create_category(ctx.obj["owner_id"], name, description=description)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{name}' (ID: {category_id})")


@category_group.command("delete")
@click.argument("name")
@click.pass_context
def delete_category(ctx, name: str):
    """Delete a category by name or slug.

    Categories still used by transactions or budgets cannot be deleted.
    """
    db = ctx.obj["db"]
    service = CategoryService(db)
    owner_id = ctx.obj["owner_id"]

    try:
        category = service.find_category(owner_id, name)
        if category is None:
            raise NotFoundError(f"Category not found: {name}")
        service.delete_category(owner_id, category.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted category '{category.display_name}'")


@category_group.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_categories(ctx, csv_file: str):
    """Create categories from a file with one name per line.

    A first line such as "Category" or "Name" is treated as a header.
    Names that already exist are reported and skipped.
    """
    run_record_import(ctx, csv_file, "categories", RecordImportService(ctx.obj["db"]).import_categories)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")

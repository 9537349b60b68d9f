"""Transaction export commands."""

from pathlib import Path

import click
from pocketledger.cli.report_filters import report_filter_options
from pocketledger.domain.entities import GroupBy, ReportFilters
from pocketledger.domain.export import export_csv, export_xlsx
from pocketledger.domain.report import ReportService

GROUP_BY_CHOICE = click.Choice([g.value for g in GroupBy], case_sensitive=False)


@click.group()
def export_group():
    """Export transactions to CSV or Excel."""
    pass


@export_group.command("csv")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="File to write (defaults to stdout)")
@click.option("--group-by", type=GROUP_BY_CHOICE, default=GroupBy.NONE.value, show_default=True)
@report_filter_options
@click.pass_context
def export_csv_command(ctx, output: str | None, group_by: str, filters: ReportFilters) -> None:
    """Export filtered transactions as CSV.

    Examples:
        pocketledger export csv --period last-month -o last-month.csv
        pocketledger export csv --group-by category
    """
    db = ctx.obj["db"]
    transactions, lookup = ReportService(db).get_filtered_transactions(ctx.obj["owner_id"], filters)
    content = export_csv(transactions, lookup, GroupBy(group_by.lower()))

    if output is None:
        click.echo(content, nl=False)
        return
    Path(output).write_text(content, encoding="utf-8")
    click.echo(f"Exported {len(transactions)} transaction(s) to {output}")


@export_group.command("xlsx")
@click.option("--output", "-o", type=click.Path(dir_okay=False), required=True, help="Workbook to write")
@click.option("--group-by", type=GROUP_BY_CHOICE, default=GroupBy.NONE.value, show_default=True)
@report_filter_options
@click.pass_context
def export_xlsx_command(ctx, output: str, group_by: str, filters: ReportFilters) -> None:
    """Export filtered transactions as an Excel workbook.

    Grouped workbooks get a Summary sheet and one sheet per group.

    Examples:
        pocketledger export xlsx -o 2024.xlsx --period last-year --group-by month
    """
    db = ctx.obj["db"]
    transactions, lookup = ReportService(db).get_filtered_transactions(ctx.obj["owner_id"], filters)
    path = export_xlsx(transactions, lookup, output, GroupBy(group_by.lower()))
    click.echo(f"Exported {len(transactions)} transaction(s) to {path}")


def register_commands(cli):
    """Register export commands with main CLI."""
    cli.add_command(export_group, name="export")

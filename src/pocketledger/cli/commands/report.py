"""Report commands."""

import click
from pocketledger.cli.report_filters import report_filter_options
from pocketledger.domain.entities import ReportFilters, TimeGrouping
from pocketledger.domain.report import (
    DEFAULT_TOP_CATEGORIES,
    ReportService,
    generate_account_performance,
    generate_category_breakdown,
    generate_payee_analysis,
    generate_time_series,
    generate_transaction_summary,
)


def _load(ctx, filters: ReportFilters):
    db = ctx.obj["db"]
    return ReportService(db).get_filtered_transactions(ctx.obj["owner_id"], filters)


@click.group()
def report_group():
    """Summaries and breakdowns of transactions."""
    pass


@report_group.command("summary")
@report_filter_options
@click.pass_context
def summary_report(ctx, filters: ReportFilters) -> None:
    """Show income, expenses and net income.

    Examples:
        pocketledger report summary --period this-month
        pocketledger report summary --account Wallet --type withdrawal
    """
    transactions, _ = _load(ctx, filters)
    summary = generate_transaction_summary(transactions, filters)

    period = ""
    if summary.start_date and summary.end_date:
        period = f" ({summary.start_date} to {summary.end_date})"
    click.echo(f"\nSummary{period}")
    click.echo("=" * 40)
    click.echo(f"{'Income:':<16}{summary.total_income:>16,.2f}")
    click.echo(f"{'Expenses:':<16}{summary.total_expenses:>16,.2f}")
    click.echo(f"{'Net income:':<16}{summary.net_income:>16,.2f}")
    click.echo(f"{'Transactions:':<16}{summary.transaction_count:>16d}")
    click.echo(f"{'Average:':<16}{summary.average_amount:>16,.2f}")


@report_group.command("categories")
@click.option("--top", type=int, default=DEFAULT_TOP_CATEGORIES, show_default=True, help="Categories before 'Others'")
@report_filter_options
@click.pass_context
def categories_report(ctx, top: int, filters: ReportFilters) -> None:
    """Show spending per category."""
    transactions, lookup = _load(ctx, filters)
    breakdown = generate_category_breakdown(transactions, lookup, top_n=top)
    if not breakdown:
        click.echo("No categorized spending found.")
        return

    click.echo(f"\n{'Category':<28} {'Amount':>14} {'Share':>8} {'Count':>6}")
    click.echo("-" * 60)
    for item in breakdown:
        click.echo(
            f"{item.category_name[:28]:<28} {item.amount:>14,.2f} {item.percentage:>7.1f}% {item.transaction_count:>6d}"
        )


@report_group.command("timeseries")
@click.option(
    "--group-by",
    "grouping",
    type=click.Choice([g.value for g in TimeGrouping], case_sensitive=False),
    default=TimeGrouping.MONTHLY.value,
    show_default=True,
)
@report_filter_options
@click.pass_context
def timeseries_report(ctx, grouping: str, filters: ReportFilters) -> None:
    """Show income and expenses per period."""
    transactions, _ = _load(ctx, filters)
    points = generate_time_series(transactions, TimeGrouping(grouping.lower()))
    if not points:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{'Period':<12} {'Income':>14} {'Expenses':>14} {'Net':>14} {'Count':>6}")
    click.echo("-" * 64)
    for point in points:
        click.echo(
            f"{point.label:<12} {point.income:>14,.2f} {point.expenses:>14,.2f} "
            f"{point.net:>14,.2f} {point.transaction_count:>6d}"
        )


@report_group.command("accounts")
@report_filter_options
@click.pass_context
def accounts_report(ctx, filters: ReportFilters) -> None:
    """Show income, expenses and net change per account."""
    db = ctx.obj["db"]
    transactions, _ = _load(ctx, filters)
    performance = generate_account_performance(transactions, db.list_accounts(ctx.obj["owner_id"]))
    if not performance:
        click.echo("No accounts found.")
        return

    click.echo(f"\n{'Account':<22} {'Income':>14} {'Expenses':>14} {'Net change':>14} {'Balance':>14}")
    click.echo("-" * 82)
    for item in performance:
        click.echo(
            f"{item.account_name[:22]:<22} {item.total_income:>14,.2f} {item.total_expenses:>14,.2f} "
            f"{item.net_change:>14,.2f} {item.ending_balance:>14,.2f}"
        )


@report_group.command("payees")
@click.option("--limit", type=int, default=10, show_default=True, help="Payees to show")
@report_filter_options
@click.pass_context
def payees_report(ctx, limit: int, filters: ReportFilters) -> None:
    """Show spending per payee."""
    transactions, lookup = _load(ctx, filters)
    analysis = generate_payee_analysis(transactions, lookup)[:limit]
    if not analysis:
        click.echo("No payee spending found.")
        return

    click.echo(f"\n{'Payee':<24} {'Total':>14} {'Count':>6} {'Average':>12} {'Last':<12} Categories")
    click.echo("-" * 90)
    for item in analysis:
        click.echo(
            f"{item.payee_name[:24]:<24} {item.total_amount:>14,.2f} {item.transaction_count:>6d} "
            f"{item.average_amount:>12,.2f} {str(item.last_transaction_date):<12} {', '.join(item.categories)}"
        )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")

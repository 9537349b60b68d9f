"""Shared output for the account, category and payee import commands."""

from pathlib import Path
from typing import Callable

import click
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.entities import RecordImportResult, RecordImportStatus
from pocketledger.domain.errors import DomainError
from pocketledger.domain.record_import import summarize_record_import


def run_record_import(
    ctx: click.Context,
    csv_file: str,
    label: str,
    importer: Callable[[int, str], list[RecordImportResult]],
) -> None:
    """Import records from ``csv_file`` and print a summary.

    Args:
        ctx: Click context with ``db`` and ``owner_id``
        csv_file: Path of the file to read
        label: Plural record name used in the output, e.g. "categories"
        importer: Service method taking (owner_id, content)
    """
    content = Path(csv_file).read_text(encoding="utf-8")
    try:
        results = importer(ctx.obj["owner_id"], content)
    except DomainError as e:
        handle_domain_error(ctx, e)

    summary = summarize_record_import(results)
    click.echo(f"Imported {summary.created} of {summary.total} {label}")
    if summary.duplicates:
        click.echo(f"  Duplicates skipped: {summary.duplicates}")
        for result in results:
            if result.status == RecordImportStatus.DUPLICATE:
                click.echo(f"    Line {result.line_number} ({result.name}): {result.error}")
    if summary.failed:
        click.echo(f"  Failed: {summary.failed}")
        for error in summary.errors:
            click.echo(f"    {error}", err=True)

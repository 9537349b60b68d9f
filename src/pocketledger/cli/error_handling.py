"""CLI rendering of domain errors."""

import logging

import click

from pocketledger.domain.errors import DomainError, ValidationError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print a domain error to stderr and exit with status 1.

    Validation errors carrying several field problems are listed one per line.
    """
    logger.debug("Command %s failed: %r", ctx.command_path, error)
    problems = error.problems if isinstance(error, ValidationError) else {}
    if sum(len(messages) for messages in problems.values()) > 1:
        click.echo("Error: Invalid input", err=True)
        for field_name, messages in problems.items():
            for message in messages:
                click.echo(f"  {field_name}: {message}", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)

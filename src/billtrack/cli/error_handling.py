"""CLI error handling helpers."""

import click

from billtrack.domain.errors import DomainError, ImportFailedError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, ImportFailedError) and error.cause is not None:
        click.echo(f"Cause: {error.cause}", err=True)
    ctx.exit(1)

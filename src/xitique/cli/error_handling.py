"""CLI error handling helpers."""

import click

from xitique.domain.errors import DomainError, PersistenceError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_persistence_error(ctx: click.Context, error: PersistenceError) -> None:
    """Render a storage failure as a retryable notice and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    click.echo("Nothing was changed. Please retry.", err=True)
    ctx.exit(1)

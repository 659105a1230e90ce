"""Main CLI entry point."""

import logging

import click
from xitique.database.factories import create_sqlite_database

# Import and register all commands at module level
from xitique.cli.commands import (
    circle,
    participant,
    payout,
    ledger,
    notify,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides XITIQUE_DB_PATH environment variable)",
    envvar="XITIQUE_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="XITIQUE_LOG_LEVEL",
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Xitique - Savings circle tracker.

    Run rotating savings circles (who pays in, who receives when) and
    individual savings goals. Every balance is derived from an append-only
    transaction log.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
circle.register_commands(cli)
participant.register_commands(cli)
payout.register_commands(cli)
ledger.register_commands(cli)
notify.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()

"""Deposit, withdrawal and history commands."""

import click
from xitique.cli.circle_resolution import resolve_circle_or_exit
from xitique.cli.error_handling import handle_domain_error, handle_persistence_error
from xitique.domain.circle import CircleService
from xitique.domain.errors import DomainError, PersistenceError
from xitique.domain.ledger import calculate_balance
from xitique.utils.amount_parser import parse_amount
from xitique.utils.formatting import format_currency


@click.command("deposit")
@click.argument("circle", metavar="CIRCLE")
@click.option("--amount", help="Amount (defaults to the circle's contribution amount)")
@click.option("--description", help="Description")
@click.pass_context
def deposit(ctx, circle: str, amount: str | None, description: str | None):
    """Record a deposit.

    Examples:
        xitique deposit "New phone"
        xitique deposit "New phone" --amount 400
    """
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)

    try:
        value = parse_amount(amount) if amount else None
    except ValueError as e:
        handle_domain_error(ctx, e)

    try:
        txn = service.deposit(c.id, value, description)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    click.echo(f"Deposited {format_currency(txn.amount)} into '{c.name}'")
    click.echo(f"  Balance: {format_currency(service.get_balance(c.id))}")


@click.command("withdraw")
@click.argument("circle", metavar="CIRCLE")
@click.option("--amount", required=True, help="Amount to withdraw")
@click.option("--description", help="Description")
@click.pass_context
def withdraw(ctx, circle: str, amount: str, description: str | None):
    """Record a withdrawal; refused if the balance is too low."""
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)

    try:
        value = parse_amount(amount)
    except ValueError as e:
        handle_domain_error(ctx, e)

    try:
        txn = service.withdraw(c.id, value, description)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    click.echo(f"Withdrew {format_currency(txn.amount)} from '{c.name}'")
    click.echo(f"  Balance: {format_currency(service.get_balance(c.id))}")


@click.command("history")
@click.argument("circle", metavar="CIRCLE")
@click.pass_context
def history(ctx, circle: str):
    """Show a circle's transaction log, newest first."""
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)

    if not c.transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{len(c.transactions)} transaction(s) for '{c.name}':")
    click.echo("-" * 90)
    for txn in reversed(c.transactions):
        line = (
            f"{txn.timestamp:%Y-%m-%d %H:%M} {txn.type.value:<16} "
            f"{format_currency(txn.amount):>16}  {txn.description or ''}"
        )
        if txn.reference_id:
            line += f" (reverses {txn.reference_id[:8]})"
        click.echo(line)
    click.echo("-" * 90)
    click.echo(f"Balance: {format_currency(calculate_balance(c.transactions))}")


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(deposit)
    cli.add_command(withdraw)
    cli.add_command(history)

"""Payout commands."""

import click
from xitique.cli.circle_resolution import resolve_circle_or_exit, resolve_participant_or_exit
from xitique.cli.error_handling import handle_domain_error, handle_persistence_error
from xitique.domain.circle import CircleService
from xitique.domain.entities import TransactionType
from xitique.domain.errors import DomainError, PersistenceError
from xitique.utils.formatting import format_currency


@click.group()
def payout_group():
    """Record payouts to participants."""
    pass


@payout_group.command("toggle")
@click.argument("circle", metavar="CIRCLE")
@click.argument("participant", metavar="PARTICIPANT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def toggle_payout(ctx, circle: str, participant: str, yes: bool):
    """Mark a participant as paid, or reverse their payout.

    A reversal never deletes the payout; it adds a correcting entry.
    """
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)
    participant_id = resolve_participant_or_exit(ctx, c, participant)
    p = c.get_participant(participant_id)

    action = "Reverse the payout of" if p.received else "Pay out"
    if not yes and not click.confirm(f"{action} '{p.name}'?"):
        click.echo("Cancelled.")
        return

    try:
        txn = service.toggle_payout(c.id, participant_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    if txn.type == TransactionType.PAYOUT:
        click.echo(f"Paid {format_currency(txn.amount)} to '{p.name}'")
    else:
        click.echo(f"Reversed payout of {format_currency(txn.amount)} to '{p.name}'")
    click.echo(f"Circle status: {service.require_circle(c.id).status.value}")


@payout_group.command("all")
@click.argument("circle", metavar="CIRCLE")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def pay_all(ctx, circle: str, yes: bool):
    """Mark every pending participant as paid."""
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)

    if not yes and not click.confirm(f"Mark all remaining participants of '{c.name}' as paid?"):
        click.echo("Cancelled.")
        return

    try:
        transactions = service.mark_all_received(c.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    click.echo(f"Recorded {len(transactions)} payout(s)")
    click.echo(f"Circle status: {service.require_circle(c.id).status.value}")


def register_commands(cli):
    """Register payout commands with main CLI."""
    cli.add_command(payout_group, name="payout")

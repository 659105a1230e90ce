"""Participant and rotation order commands."""

import random

import click
from xitique.cli.circle_resolution import (
    resolve_circle_or_exit,
    resolve_locks_or_exit,
    resolve_participant_or_exit,
)
from xitique.cli.error_handling import handle_domain_error, handle_persistence_error
from xitique.domain.circle import CircleService
from xitique.domain.errors import DomainError, PersistenceError
from xitique.domain.rotation import ordered_participants
from xitique.utils.amount_parser import parse_amount
from xitique.utils.date_parser import parse_date


def echo_order(circle) -> None:
    """Print the rotation order of a circle."""
    for p in ordered_participants(circle):
        click.echo(f"  {p.position}. {p.name} ({p.payout_date or 'TBD'})")


@click.group()
def participant_group():
    """Manage circle participants and rotation order."""
    pass


@participant_group.command("add")
@click.argument("circle", metavar="CIRCLE")
@click.argument("name", metavar="NAME")
@click.option("--contribution", help="Custom contribution (defaults to the circle's base amount)")
@click.pass_context
def add_participant(ctx, circle: str, name: str, contribution: str | None):
    """Add a participant at the end of the rotation."""
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)

    try:
        amount = parse_amount(contribution) if contribution else None
    except ValueError as e:
        handle_domain_error(ctx, e)

    try:
        updated = service.add_participant(c.id, name, custom_contribution=amount)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    added = ordered_participants(updated)[-1]
    click.echo(f"Added '{added.name}' at position {added.position} (payout {added.payout_date})")


@participant_group.command("remove")
@click.argument("circle", metavar="CIRCLE")
@click.argument("participant", metavar="PARTICIPANT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def remove_participant(ctx, circle: str, participant: str, yes: bool):
    """Remove a participant; later positions move up.

    PARTICIPANT can be a position, name or ID.
    """
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)
    participant_id = resolve_participant_or_exit(ctx, c, participant)
    name = c.get_participant(participant_id).name

    if not yes and not click.confirm(f"Remove '{name}' from '{c.name}'?"):
        click.echo("Removal cancelled.")
        return

    try:
        updated = service.remove_participant(c.id, participant_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    click.echo(f"Removed '{name}'. New order:")
    echo_order(updated)


@participant_group.command("move")
@click.argument("circle", metavar="CIRCLE")
@click.argument("participant", metavar="PARTICIPANT")
@click.argument("position", type=int)
@click.option("--lock", "locks", multiple=True, help="Participant whose position must not change (repeatable)")
@click.pass_context
def move_participant(ctx, circle: str, participant: str, position: int, locks: tuple[str, ...]):
    """Move a participant to another rotation position.

    Examples:
        xitique participant move "Family" Ana 3
        xitique participant move "Family" 4 1 --lock 2
    """
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)
    participant_id = resolve_participant_or_exit(ctx, c, participant)
    locked_ids = resolve_locks_or_exit(ctx, c, locks)

    try:
        updated = service.move_participant(c.id, participant_id, position, locked_ids)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    click.echo("Order updated:")
    echo_order(updated)


@participant_group.command("edit")
@click.argument("circle", metavar="CIRCLE")
@click.argument("participant", metavar="PARTICIPANT")
@click.option("--name", help="New name")
@click.option("--date", "payout_date", help="Manual payout date")
@click.option("--contribution", help="Custom contribution")
@click.pass_context
def edit_participant(ctx, circle: str, participant: str, name: str | None, payout_date: str | None, contribution: str | None):
    """Edit a participant's name, payout date or contribution.

    A manual payout date is kept when other participants move.
    """
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)
    participant_id = resolve_participant_or_exit(ctx, c, participant)

    try:
        new_date = parse_date(payout_date) if payout_date else None
        amount = parse_amount(contribution) if contribution else None
    except ValueError as e:
        handle_domain_error(ctx, e)

    try:
        updated = service.edit_participant(
            c.id, participant_id, name=name, payout_date=new_date, custom_contribution=amount
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    edited = updated.get_participant(participant_id)
    click.echo(f"Updated '{edited.name}' (circle status: {updated.status.value})")


@participant_group.command("shuffle")
@click.argument("circle", metavar="CIRCLE")
@click.option("--lock", "locks", multiple=True, help="Participant whose position must not change (repeatable)")
@click.option("--seed", type=int, help="Random seed, for a reproducible order")
@click.pass_context
def shuffle_participants(ctx, circle: str, locks: tuple[str, ...], seed: int | None):
    """Randomize the rotation order."""
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)
    locked_ids = resolve_locks_or_exit(ctx, c, locks)

    try:
        updated = service.shuffle_participants(
            c.id, locked_ids, rng=random.Random(seed) if seed is not None else None
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    click.echo("Shuffled order:")
    echo_order(updated)


def register_commands(cli):
    """Register participant commands with main CLI."""
    cli.add_command(participant_group, name="participant")

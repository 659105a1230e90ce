"""Circle and savings goal management commands."""

import click
from xitique.cli.circle_resolution import resolve_circle_or_exit, resolve_locks_or_exit
from xitique.cli.error_handling import handle_domain_error, handle_persistence_error
from xitique.domain.circle import CircleService
from xitique.domain.entities import CircleKind, Frequency, PaymentMethod
from xitique.domain.errors import DomainError, PersistenceError
from xitique.domain.ledger import calculate_balance
from xitique.domain.pot import calculate_cycle_pot, effective_contribution
from xitique.domain.rotation import ordered_participants
from xitique.domain.status import effective_status
from xitique.utils.amount_parser import parse_amount
from xitique.utils.date_parser import parse_date
from xitique.utils.formatting import format_currency

FREQUENCY_CHOICE = click.Choice([f.value for f in Frequency], case_sensitive=False)
METHOD_CHOICE = click.Choice([m.value for m in PaymentMethod], case_sensitive=False)


def parse_member(member: str):
    """Split a ``NAME`` or ``NAME=AMOUNT`` member option."""
    if "=" not in member:
        return member, None
    name, amount = member.rsplit("=", 1)
    return name, parse_amount(amount)


@click.group()
def circle_group():
    """Manage savings circles and goals."""
    pass


@circle_group.command("create")
@click.argument("name", metavar="CIRCLE_NAME")
@click.option("--amount", required=True, help="Base contribution per participant per round")
@click.option("--frequency", type=FREQUENCY_CHOICE, default="MONTHLY", show_default=True)
@click.option("--start-date", default="today", show_default=True, help="Payout date of position 1")
@click.option("--member", "members", multiple=True, help="Participant, as NAME or NAME=AMOUNT (repeatable, in rotation order)")
@click.option("--method", type=METHOD_CHOICE, help="Payment method")
@click.pass_context
def create_circle(ctx, name: str, amount: str, frequency: str, start_date: str, members: tuple[str, ...], method: str | None):
    """Create a group circle.

    Examples:
        xitique circle create "Family" --amount 1000 --member Ana --member Bea --member Carlos
        xitique circle create "Work" --amount 500 --frequency weekly --member "Ana=750" --member Bea
    """
    service = CircleService(ctx.obj["db"])

    try:
        base_amount = parse_amount(amount)
        start = parse_date(start_date)
        participants = [parse_member(m) for m in members]
    except ValueError as e:
        handle_domain_error(ctx, e)

    try:
        circle = service.create_group(
            name=name,
            base_amount=base_amount,
            frequency=Frequency(frequency.upper()),
            start_date=start,
            participants=participants,
            payment_method=PaymentMethod(method.upper()) if method else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    click.echo(f"Created circle '{circle.name}' (ID: {circle.id})")
    click.echo(f"  Participants: {len(circle.participants)}")
    click.echo(f"  Pot per round: {format_currency(calculate_cycle_pot(circle.base_amount, circle.participants))}")


@circle_group.command("create-goal")
@click.argument("name", metavar="GOAL_NAME")
@click.option("--amount", required=True, help="Regular deposit amount")
@click.option("--frequency", type=FREQUENCY_CHOICE, default="WEEKLY", show_default=True)
@click.option("--target", help="Target amount")
@click.option("--method", type=METHOD_CHOICE, help="Payment method")
@click.pass_context
def create_goal(ctx, name: str, amount: str, frequency: str, target: str | None, method: str | None):
    """Create an individual savings goal.

    Examples:
        xitique circle create-goal "New phone" --amount 250 --target 5000
    """
    service = CircleService(ctx.obj["db"])

    try:
        contribution = parse_amount(amount)
        target_amount = parse_amount(target) if target else None
    except ValueError as e:
        handle_domain_error(ctx, e)

    try:
        goal = service.create_goal(
            name=name,
            contribution_amount=contribution,
            frequency=Frequency(frequency.upper()),
            target_amount=target_amount,
            payment_method=PaymentMethod(method.upper()) if method else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    click.echo(f"Created goal '{goal.name}' (ID: {goal.id})")


@circle_group.command("list")
@click.option("--all", "include_archived", is_flag=True, help="Include archived circles")
@click.pass_context
def list_circles(ctx, include_archived: bool):
    """List circles and goals."""
    service = CircleService(ctx.obj["db"])

    circles = service.list_circles(include_archived=include_archived)
    if not circles:
        click.echo("No circles found.")
        return

    click.echo("\nCircles:")
    click.echo("-" * 90)
    for c in circles:
        if c.kind == CircleKind.GROUP:
            detail = f"{len(c.participants)} members, pot {format_currency(calculate_cycle_pot(c.base_amount, c.participants))}"
        else:
            detail = f"balance {format_currency(calculate_balance(c.transactions))}"
        click.echo(
            f"{c.id[:8]} | {c.name:20s} | {c.kind.value:10s} | {effective_status(c).value:9s} | {detail}"
        )


@circle_group.command("show")
@click.argument("circle", metavar="CIRCLE")
@click.pass_context
def show_circle(ctx, circle: str):
    """Show a circle's schedule, status and balance.

    CIRCLE can be a circle name or ID.
    """
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)

    click.echo(f"\n{c.name} ({c.kind.value.lower()})")
    click.echo(f"  ID: {c.id}")
    click.echo(f"  Status: {effective_status(c).value}")
    click.echo(f"  Frequency: {c.frequency.value.lower()}")
    click.echo(f"  Contribution: {format_currency(c.base_amount)}")
    click.echo(f"  Balance: {format_currency(calculate_balance(c.transactions))}")
    if c.payment_method:
        click.echo(f"  Method: {c.payment_method.value}")

    if c.kind == CircleKind.INDIVIDUAL:
        if c.target_amount is not None:
            click.echo(f"  Target: {format_currency(c.target_amount)}")
        return

    click.echo(f"  Start date: {c.start_date}")
    click.echo(f"  Pot per round: {format_currency(calculate_cycle_pot(c.base_amount, c.participants))}")
    if not c.participants:
        click.echo("\nNo participants yet.")
        return

    click.echo("-" * 80)
    click.echo(f"{'#':<4} {'Name':<20} {'Payout date':<14} {'Contribution':<16} {'Status':<8}")
    click.echo("-" * 80)
    for p in ordered_participants(c):
        payout_date = str(p.payout_date) if p.payout_date else "TBD"
        if p.date_override:
            payout_date += "*"
        state = "PAID" if p.received else "PENDING"
        click.echo(
            f"{p.position:<4} {p.name:<20} {payout_date:<14} "
            f"{format_currency(effective_contribution(c.base_amount, p)):<16} {state:<8}"
        )


@circle_group.command("rename")
@click.argument("circle", metavar="CIRCLE")
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_circle(ctx, circle: str, new_name: str):
    """Rename a circle."""
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)

    try:
        service.rename_circle(c.id, new_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)
    click.echo(f"Renamed circle to '{new_name}'")


@circle_group.command("edit")
@click.argument("circle", metavar="CIRCLE")
@click.option("--start-date", help="New start date; reschedules every participant")
@click.option("--amount", help="New base contribution")
@click.pass_context
def edit_circle(ctx, circle: str, start_date: str | None, amount: str | None):
    """Edit a group's start date or base contribution.

    Examples:
        xitique circle edit "Family" --start-date 2025-03-01
        xitique circle edit "Family" --amount 1200
    """
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)

    try:
        start = parse_date(start_date) if start_date else None
        base_amount = parse_amount(amount) if amount else None
    except ValueError as e:
        handle_domain_error(ctx, e)

    try:
        updated = service.edit_group(c.id, start_date=start, base_amount=base_amount)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)
    click.echo(f"Updated circle '{updated.name}' (status: {updated.status.value})")


@circle_group.command("archive")
@click.argument("circle", metavar="CIRCLE")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def archive_circle(ctx, circle: str, yes: bool):
    """Archive a circle.

    Archived circles keep their full history but no longer appear in
    listings or reminders.
    """
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)

    if not yes and not click.confirm(f"Are you sure you want to archive '{c.name}'?"):
        click.echo("Archive cancelled.")
        return

    try:
        service.archive_circle(c.id)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)
    click.echo(f"Archived circle '{c.name}'")


@circle_group.command("approve-risk")
@click.argument("circle", metavar="CIRCLE")
@click.pass_context
def approve_risk(ctx, circle: str):
    """Accept unequal contributions and mark the circle ACTIVE."""
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)

    try:
        service.approve_risk(c.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)
    click.echo(f"Circle '{c.name}' is now ACTIVE")


@circle_group.command("renew")
@click.argument("circle", metavar="CIRCLE")
@click.option("--start-date", help="First payout of the new cycle (defaults to the next free slot)")
@click.option("--keep-order", is_flag=True, help="Keep last cycle's order instead of shuffling")
@click.option("--lock", "locks", multiple=True, help="Participant (position, name or ID) that keeps their position")
@click.pass_context
def renew_circle(ctx, circle: str, start_date: str | None, keep_order: bool, locks: tuple[str, ...]):
    """Start a new cycle with the same participants."""
    service = CircleService(ctx.obj["db"])
    c = resolve_circle_or_exit(ctx, service, circle)
    locked_ids = resolve_locks_or_exit(ctx, c, locks)

    try:
        start = parse_date(start_date) if start_date else None
    except ValueError as e:
        handle_domain_error(ctx, e)

    try:
        renewed = service.renew_circle(
            c.id, start_date=start, reshuffle=not keep_order, locked_ids=locked_ids
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)
    click.echo(f"Renewed '{c.name}' as a new circle (ID: {renewed.id})")
    click.echo(f"  Starts: {renewed.start_date}")


def register_commands(cli):
    """Register circle commands with main CLI."""
    cli.add_command(circle_group, name="circle")

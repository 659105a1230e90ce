"""CLI helpers for circle and participant resolution."""

from __future__ import annotations

import click
from xitique.domain.circle import CircleService
from xitique.domain.entities import Circle
from xitique.utils.circle_resolver import resolve_circle, resolve_participant


def resolve_circle_or_exit(ctx: click.Context, circle_service: CircleService, circle: str) -> Circle:
    """Resolve circle name or ID to a loaded circle, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return circle_service.require_circle(resolve_circle(circle_service, circle))
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_participant_or_exit(ctx: click.Context, circle: Circle, participant: str) -> str:
    """Resolve participant position, name or ID, or exit with a CLI error."""
    try:
        return resolve_participant(circle, participant)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_locks_or_exit(ctx: click.Context, circle: Circle, locks: tuple[str, ...]) -> frozenset[str]:
    """Resolve every --lock value to a participant ID."""
    return frozenset(resolve_participant_or_exit(ctx, circle, lock) for lock in locks)

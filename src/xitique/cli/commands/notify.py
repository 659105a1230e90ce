"""Notification commands."""

import click
from xitique.cli.error_handling import handle_domain_error, handle_persistence_error
from xitique.domain.errors import DomainError, PersistenceError
from xitique.domain.notification import NotificationService

SEVERITY_MARKERS = {"info": "i", "warning": "!", "success": "*"}


def echo_notification(notification) -> None:
    """Print one notification."""
    marker = SEVERITY_MARKERS.get(notification.severity.value, " ")
    unread = "" if notification.read else " [new]"
    click.echo(f"[{marker}] {notification.title}{unread}")
    click.echo(f"    {notification.message}")
    click.echo(f"    id: {notification.id}")


@click.group()
def notify_group():
    """Generate and read reminders."""
    pass


@notify_group.command("check")
@click.pass_context
def check(ctx):
    """Scan circles and store any new reminders."""
    service = NotificationService(ctx.obj["db"])

    try:
        generated = service.check_and_generate()
    except PersistenceError as e:
        handle_persistence_error(ctx, e)

    if not generated:
        click.echo("No new notifications.")
        return
    click.echo(f"{len(generated)} new notification(s):")
    for notification in generated:
        echo_notification(notification)


@notify_group.command("list")
@click.option("--unread", is_flag=True, help="Only unread notifications")
@click.pass_context
def list_notifications(ctx, unread: bool):
    """List stored notifications."""
    service = NotificationService(ctx.obj["db"])

    notifications = service.list_notifications(unread_only=unread)
    if not notifications:
        click.echo("No notifications found.")
        return
    for notification in notifications:
        echo_notification(notification)


@notify_group.command("read")
@click.argument("notification_id", required=False)
@click.option("--all", "mark_all", is_flag=True, help="Mark every notification read")
@click.pass_context
def mark_read(ctx, notification_id: str | None, mark_all: bool):
    """Mark a notification (or all of them) as read."""
    service = NotificationService(ctx.obj["db"])

    if not mark_all and notification_id is None:
        click.echo("Error: Give a notification ID or --all.", err=True)
        ctx.exit(1)

    try:
        if mark_all:
            count = service.mark_all_read()
            click.echo(f"Marked {count} notification(s) read")
        else:
            service.mark_read(notification_id)
            click.echo(f"Marked '{notification_id}' read")
    except DomainError as e:
        handle_domain_error(ctx, e)
    except PersistenceError as e:
        handle_persistence_error(ctx, e)


def register_commands(cli):
    """Register notification commands with main CLI."""
    cli.add_command(notify_group, name="notify")

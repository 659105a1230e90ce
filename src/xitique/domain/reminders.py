"""Notification generator.

Reminders are derived from each circle's schedule and the current date.
Every reminder has a deterministic ID, and an ID already present in
``existing_ids`` is never emitted again, so scanning repeatedly is safe.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, MutableSet

from xitique.domain.entities import (
    Circle,
    CircleKind,
    CircleStatus,
    Notification,
    NotificationSeverity,
)
from xitique.domain.ledger import calculate_balance
from xitique.domain.pot import calculate_cycle_pot
from xitique.domain.status import effective_status
from xitique.utils.date_parser import days_between
from xitique.utils.formatting import format_currency

SCANNED_STATUSES = {CircleStatus.ACTIVE, CircleStatus.PLANNING, CircleStatus.RISK}
UPCOMING_WINDOW_DAYS = 2
OVERDUE_WINDOW_DAYS = 30
REMINDER_INTERVAL_DAYS = 7


def _group_reminders(circle: Circle, now: datetime) -> list[Notification]:
    pot = format_currency(calculate_cycle_pot(circle.base_amount, circle.participants))
    today = now.date()
    notifications = []

    for p in circle.participants:
        if p.received or p.payout_date is None:
            continue
        days = days_between(today, p.payout_date)

        if 0 < days <= UPCOMING_WINDOW_DAYS:
            notifications.append(
                Notification(
                    id=f"contrib-{circle.id}-{p.id}-{days}",
                    title=f"Upcoming Rotation: {p.name}",
                    message=(
                        f"Preparation time! The group needs to collect contributions "
                        f"for {p.name} in {days} days."
                    ),
                    created_at=now,
                    severity=NotificationSeverity.INFO,
                    circle_id=circle.id,
                )
            )
        elif days == 0:
            notifications.append(
                Notification(
                    id=f"payout-{circle.id}-{p.id}",
                    title=f"Payout Day: {p.name}",
                    message=(
                        f"Today is the day! Please ensure {p.name} receives {pot}. "
                        "Mark as paid when done."
                    ),
                    created_at=now,
                    severity=NotificationSeverity.SUCCESS,
                    circle_id=circle.id,
                )
            )
        elif -OVERDUE_WINDOW_DAYS < days < 0:
            notifications.append(
                Notification(
                    id=f"overdue-{circle.id}-{p.id}",
                    title="Attention: Overdue Payout",
                    message=(
                        f"{p.name} was scheduled to receive {pot} on "
                        f"{p.payout_date.isoformat()}. Has this been settled?"
                    ),
                    created_at=now,
                    severity=NotificationSeverity.WARNING,
                    circle_id=circle.id,
                )
            )

    return notifications


def _goal_reminders(circle: Circle, now: datetime) -> list[Notification]:
    days = days_between(circle.created_at.date(), now.date())
    if days <= 0 or days % REMINDER_INTERVAL_DAYS != 0:
        return []

    # Goals without a target keep getting reminders until something is saved.
    target = circle.target_amount if circle.target_amount is not None else Decimal("1")
    if calculate_balance(circle.transactions) >= target:
        return []

    return [
        Notification(
            id=f"ind-reminder-{circle.id}-{days}",
            title="Savings Goal Reminder",
            message=(
                f"It's been another week on your '{circle.name}' goal. "
                "Keep going! Every Metical counts."
            ),
            created_at=now,
            severity=NotificationSeverity.SUCCESS,
            circle_id=circle.id,
        )
    ]


def generate_notifications(
    circles: Iterable[Circle], existing_ids: MutableSet[str], now: datetime
) -> list[Notification]:
    """Derive new reminders for the given circles.

    Args:
        circles: Circles and goals to scan; archived and completed ones are skipped
        existing_ids: IDs already generated. Updated in place with every
            newly emitted ID.
        now: Reference time; day differences are taken between calendar dates

    Returns:
        Notifications whose IDs were not in ``existing_ids``
    """
    generated = []
    for circle in circles:
        if effective_status(circle) not in SCANNED_STATUSES:
            continue

        if circle.kind == CircleKind.GROUP:
            candidates = _group_reminders(circle, now)
        else:
            candidates = _goal_reminders(circle, now)

        for notification in candidates:
            if notification.id in existing_ids:
                continue
            existing_ids.add(notification.id)
            generated.append(notification)

    return generated

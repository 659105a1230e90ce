"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain entities stay
free of storage concerns such as row sequence numbers and naive SQLite
timestamps.
"""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from xitique.domain import entities as domain
from xitique.database.models import (
    Circle as ORMCircle,
    Participant as ORMParticipant,
    Transaction as ORMTransaction,
    Notification as ORMNotification,
)


def _aware(value: datetime) -> datetime:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(value)


def participant_to_domain(orm_participant: ORMParticipant) -> domain.Participant:
    """Convert SQLAlchemy Participant model to domain Participant entity."""
    return domain.Participant(
        id=orm_participant.id,
        name=orm_participant.name,
        position=orm_participant.position,
        payout_date=orm_participant.payout_date,
        received=orm_participant.received,
        custom_contribution=_decimal(orm_participant.custom_contribution),
        date_override=orm_participant.date_override,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        type=domain.TransactionType(orm_transaction.type),
        amount=_decimal(orm_transaction.amount),
        timestamp=_aware(orm_transaction.timestamp),
        description=orm_transaction.description,
        reference_id=orm_transaction.reference_id,
        participant_id=orm_transaction.participant_id,
    )


def circle_to_domain(orm_circle: ORMCircle) -> domain.Circle:
    """Convert SQLAlchemy Circle model, with its children, to a domain Circle."""
    return domain.Circle(
        id=orm_circle.id,
        name=orm_circle.name,
        kind=domain.CircleKind(orm_circle.kind),
        base_amount=_decimal(orm_circle.base_amount),
        frequency=domain.Frequency(orm_circle.frequency),
        start_date=orm_circle.start_date,
        created_at=_aware(orm_circle.created_at),
        status=domain.CircleStatus(orm_circle.status),
        archived=orm_circle.archived,
        participants=tuple(participant_to_domain(p) for p in orm_circle.participants),
        transactions=tuple(transaction_to_domain(t) for t in orm_circle.transactions),
        target_amount=_decimal(orm_circle.target_amount),
        payment_method=(
            domain.PaymentMethod(orm_circle.payment_method) if orm_circle.payment_method else None
        ),
    )


def notification_to_domain(orm_notification: ORMNotification) -> domain.Notification:
    """Convert SQLAlchemy Notification model to domain Notification entity."""
    return domain.Notification(
        id=orm_notification.id,
        title=orm_notification.title,
        message=orm_notification.message,
        created_at=_aware(orm_notification.created_at),
        severity=domain.NotificationSeverity(orm_notification.severity),
        read=orm_notification.read,
        circle_id=orm_notification.circle_id,
    )

"""Domain model entities for xitique.

These are pure data classes representing savings circles, their
participants and their transaction logs, independent of the database
schema. Every entity is immutable: operations return a new entity built
with ``dataclasses.replace`` instead of mutating the old one, so a failed
save never leaves a half-applied change behind.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Kinds of money movement recorded in a circle's log."""

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    PAYOUT = "PAYOUT"
    PAYOUT_REVERSAL = "PAYOUT_REVERSAL"


class Frequency(str, Enum):
    """Contribution and payout cadence."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class CircleKind(str, Enum):
    """Rotating group circle or solo savings goal."""

    GROUP = "GROUP"
    INDIVIDUAL = "INDIVIDUAL"


class CircleStatus(str, Enum):
    """Circle lifecycle status.

    ARCHIVED is never stored in the status column. It is reported for
    circles whose ``archived`` flag is set.
    """

    PLANNING = "PLANNING"
    ACTIVE = "ACTIVE"
    RISK = "RISK"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class PaymentMethod(str, Enum):
    """How contributions are collected."""

    CASH = "CASH"
    MPESA = "MPESA"
    EMOLA = "EMOLA"


class NotificationSeverity(str, Enum):
    """Display severity of a notification."""

    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"


class EditMode(str, Enum):
    """Editing mode of a circle's detail view.

    Payout toggles are refused while the group is in BULK_EDIT.
    """

    VIEW = "VIEW"
    BULK_EDIT = "BULK_EDIT"


@dataclass(frozen=True)
class Transaction:
    """Immutable ledger entry."""

    id: str
    type: TransactionType
    amount: Decimal
    timestamp: datetime
    description: Optional[str] = None
    reference_id: Optional[str] = None
    participant_id: Optional[str] = None


@dataclass(frozen=True)
class Participant:
    """Member of a group circle."""

    id: str
    name: str
    position: int
    payout_date: Optional[date] = None
    received: bool = False
    custom_contribution: Optional[Decimal] = None
    date_override: bool = False


@dataclass(frozen=True)
class Circle:
    """Group circle or individual savings goal with its transaction log."""

    id: str
    name: str
    kind: CircleKind
    base_amount: Decimal
    frequency: Frequency
    start_date: date
    created_at: datetime
    status: CircleStatus = CircleStatus.PLANNING
    archived: bool = False
    participants: tuple[Participant, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    target_amount: Optional[Decimal] = None
    payment_method: Optional[PaymentMethod] = None

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        """Return the participant with the given ID, or None."""
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None


@dataclass(frozen=True)
class Notification:
    """Reminder derived from a circle's schedule."""

    id: str
    title: str
    message: str
    created_at: datetime
    severity: NotificationSeverity
    read: bool = False
    circle_id: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a business-rule check."""

    valid: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(valid=False, error=error)


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a scheduler or payout operation.

    When ``valid`` is False, ``circle`` is the unchanged input circle.
    """

    circle: Circle
    valid: bool = True
    error: Optional[str] = None
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)

    @classmethod
    def rejected(cls, circle: Circle, error: str) -> "MutationResult":
        return cls(circle=circle, valid=False, error=error)

"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as an operation on the wrong kind of circle."""


class PersistenceError(RuntimeError):
    """Storage failed while saving or loading an entity.

    The operation may be retried; nothing was written.
    """


class InvariantViolation(AssertionError):
    """A ledger or rotation invariant was broken by the caller."""


AMOUNT_NOT_POSITIVE = "Amount must be positive."
INSUFFICIENT_FUNDS = "Insufficient funds."
POSITION_LOCKED = "Position is locked."
EDIT_MODE_BLOCKED = "Payouts cannot be changed while editing the group."
CIRCLE_COMPLETED = "Circle is completed."
CIRCLE_ARCHIVED = "Circle is archived."


def circle_not_found(circle_id: str) -> str:
    """Return message for missing circle."""
    return f"Circle {circle_id} not found"


def participant_not_found(participant_id: str, circle_id: str) -> str:
    """Return message for a participant that is not part of a circle."""
    return f"Participant {participant_id} not found in circle {circle_id}"


def notification_not_found(notification_id: str) -> str:
    """Return message for missing notification."""
    return f"Notification '{notification_id}' not found"


def wrong_circle_kind(circle_id: str, expected: str) -> str:
    """Return message when an operation needs a different circle kind."""
    return f"Circle {circle_id} is not a {expected.lower()} circle"


def invalid_position(position: int, count: int) -> str:
    """Return message for a position outside 1..N."""
    return f"Position {position} is out of range (1-{count})"


def circle_not_completed(circle_id: str) -> str:
    """Return message when only a finished circle can be renewed."""
    return f"Circle {circle_id} is not completed; only finished circles can be renewed"

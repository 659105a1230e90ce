"""Payout toggle state machine.

Each participant is PENDING or RECEIVED. Moving forward appends a PAYOUT
to the circle's log, moving back appends a PAYOUT_REVERSAL that references
the payout it cancels. The circle status is recomputed after every toggle.
A COMPLETED circle accepts no further toggles.
"""

from dataclasses import replace
from typing import Optional

from xitique.domain.entities import (
    Circle,
    CircleStatus,
    EditMode,
    MutationResult,
    TransactionType,
)
from xitique.domain.errors import (
    CIRCLE_ARCHIVED,
    CIRCLE_COMPLETED,
    EDIT_MODE_BLOCKED,
    NotFoundError,
    participant_not_found,
)
from xitique.domain.ledger import (
    Clock,
    IdFactory,
    append_transaction,
    create_transaction,
    find_open_payout,
)
from xitique.domain.pot import calculate_dynamic_pot
from xitique.domain.status import recompute_status


def _guard(circle: Circle, mode: EditMode) -> Optional[str]:
    if mode == EditMode.BULK_EDIT:
        return EDIT_MODE_BLOCKED
    if circle.archived:
        return CIRCLE_ARCHIVED
    if circle.status == CircleStatus.COMPLETED:
        return CIRCLE_COMPLETED
    return None


def toggle_payout(
    circle: Circle,
    participant_id: str,
    mode: EditMode = EditMode.VIEW,
    *,
    clock: Optional[Clock] = None,
    id_factory: Optional[IdFactory] = None,
) -> MutationResult:
    """Record or reverse a participant's payout.

    Args:
        circle: Group circle
        participant_id: Recipient
        mode: Current edit mode; BULK_EDIT blocks the toggle
        clock: Timestamp source for the new transaction
        id_factory: ID source for the new transaction

    Returns:
        MutationResult carrying the updated circle and the appended
        transaction, or a rejection when the toggle is not allowed

    Raises:
        NotFoundError: If the participant is not in the circle
    """
    participant = circle.get_participant(participant_id)
    if participant is None:
        raise NotFoundError(participant_not_found(participant_id, circle.id))

    error = _guard(circle, mode)
    if error is not None:
        return MutationResult.rejected(circle, error)

    if not participant.received:
        txn = create_transaction(
            TransactionType.PAYOUT,
            calculate_dynamic_pot(circle, participant),
            f"Payout: {participant.name}",
            participant_id=participant.id,
            clock=clock,
            id_factory=id_factory,
        )
    else:
        original = find_open_payout(circle, participant.id)
        amount = original.amount if original else calculate_dynamic_pot(circle, participant)
        txn = create_transaction(
            TransactionType.PAYOUT_REVERSAL,
            amount,
            f"Correction (Reversal): {participant.name}",
            reference_id=original.id if original else None,
            participant_id=participant.id,
            clock=clock,
            id_factory=id_factory,
        )

    flipped = replace(participant, received=not participant.received)
    updated = append_transaction(circle, txn)
    updated = replace(
        updated,
        participants=tuple(flipped if p.id == participant.id else p for p in updated.participants),
    )
    return MutationResult(circle=recompute_status(updated), transactions=(txn,))


def mark_all_received(
    circle: Circle,
    mode: EditMode = EditMode.VIEW,
    *,
    clock: Optional[Clock] = None,
    id_factory: Optional[IdFactory] = None,
) -> MutationResult:
    """Pay out every participant still pending, as one mutation."""
    error = _guard(circle, mode)
    if error is not None:
        return MutationResult.rejected(circle, error)

    updated = circle
    appended = ()
    for participant in circle.participants:
        if participant.received:
            continue
        result = toggle_payout(
            updated, participant.id, mode, clock=clock, id_factory=id_factory
        )
        updated = result.circle
        appended += result.transactions
    return MutationResult(circle=updated, transactions=appended)

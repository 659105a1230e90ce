"""Rotation scheduler: participant order, payout dates and position locks.

Locked participants are passed in as a set of IDs rather than stored on
the participant, so every operation here is a pure function of the
circle, the lock set and the instruction. Results are returned as
``MutationResult``; a refused move is an invalid result, not an exception.

Payout dates follow ``start_date + step * (position - 1)``. A date set by
hand through ``edit_participant`` survives moves of other participants and
is recomputed only when that participant's own position changes or the
group's start date is edited.
"""

import random
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import AbstractSet, Mapping, Optional

from xitique.domain.entities import Circle, CircleStatus, Frequency, MutationResult, Participant
from xitique.domain.errors import (
    AMOUNT_NOT_POSITIVE,
    POSITION_LOCKED,
    InvariantViolation,
    NotFoundError,
    invalid_position,
    participant_not_found,
)
from xitique.domain.ledger import IdFactory, new_id, to_cents
from xitique.domain.status import recompute_status
from xitique.utils.date_parser import add_period

NAME_REQUIRED = "Name is required."
SHUFFLE_NEEDS_TWO = "At least two unlocked positions are needed to shuffle."
SHUFFLE_ATTEMPTS = 20


def payout_date_for(start_date: date, frequency: Frequency, position: int) -> date:
    """Scheduled payout date for a 1-based rotation position."""
    return add_period(start_date, frequency, position - 1)


def check_positions(participants) -> None:
    """Ensure positions are exactly 1..N.

    Raises:
        InvariantViolation: On gaps or duplicate positions
    """
    positions = sorted(p.position for p in participants)
    if positions != list(range(1, len(positions) + 1)):
        raise InvariantViolation(f"Participant positions must be 1..N, got {positions}")


def ordered_participants(circle: Circle) -> list[Participant]:
    """Participants sorted by rotation position."""
    return sorted(circle.participants, key=lambda p: p.position)


def _require_participant(circle: Circle, participant_id: str) -> Participant:
    participant = circle.get_participant(participant_id)
    if participant is None:
        raise NotFoundError(participant_not_found(participant_id, circle.id))
    return participant


def _renumber(circle: Circle, order: list[Participant]) -> Circle:
    """Assign dense positions in the given order and refresh payout dates."""
    participants = []
    for position, participant in enumerate(order, start=1):
        if participant.date_override and participant.position == position:
            participants.append(participant)
            continue
        participants.append(
            replace(
                participant,
                position=position,
                payout_date=payout_date_for(circle.start_date, circle.frequency, position),
                date_override=False,
            )
        )
    check_positions(participants)
    return replace(circle, participants=tuple(participants))


def _restatus(circle: Circle) -> Circle:
    """Re-derive status after a membership change; a circle still in PLANNING stays there."""
    if circle.status == CircleStatus.PLANNING:
        return circle
    return recompute_status(circle)


def _place(order: list[Participant], locked_ids: AbstractSet[str], movable: list[Participant]) -> list[Participant]:
    """Put ``movable`` back into the unlocked slots of ``order``."""
    placed = list(order)
    slots = [i for i, p in enumerate(order) if p.id not in locked_ids]
    for slot, participant in zip(slots, movable):
        placed[slot] = participant
    return placed


def reorder(
    circle: Circle,
    participant_id: str,
    target_position: int,
    locked_ids: AbstractSet[str] = frozenset(),
) -> MutationResult:
    """Move a participant to a new rotation position.

    Locked participants keep their positions; everyone else shifts through
    the remaining slots.

    Args:
        circle: Group circle
        participant_id: Participant to move
        target_position: 1-based destination
        locked_ids: IDs of participants whose positions are pinned

    Returns:
        MutationResult with the reordered circle, or rejected with
        POSITION_LOCKED when the subject or the destination is locked

    Raises:
        NotFoundError: If the participant is not in the circle
    """
    subject = _require_participant(circle, participant_id)
    order = ordered_participants(circle)

    if not 1 <= target_position <= len(order):
        return MutationResult.rejected(circle, invalid_position(target_position, len(order)))
    if subject.id in locked_ids or order[target_position - 1].id in locked_ids:
        return MutationResult.rejected(circle, POSITION_LOCKED)
    if subject.position == target_position:
        return MutationResult(circle=circle)

    movable = [p for p in order if p.id not in locked_ids]
    slots = [i for i, p in enumerate(order) if p.id not in locked_ids]
    movable.remove(subject)
    movable.insert(slots.index(target_position - 1), subject)

    return MutationResult(circle=_renumber(circle, _place(order, locked_ids, movable)))


def move_up(circle: Circle, participant_id: str, locked_ids: AbstractSet[str] = frozenset()) -> MutationResult:
    """Swap a participant with the one scheduled just before them."""
    subject = _require_participant(circle, participant_id)
    return reorder(circle, participant_id, subject.position - 1, locked_ids)


def move_down(circle: Circle, participant_id: str, locked_ids: AbstractSet[str] = frozenset()) -> MutationResult:
    """Swap a participant with the one scheduled just after them."""
    subject = _require_participant(circle, participant_id)
    return reorder(circle, participant_id, subject.position + 1, locked_ids)


def add_participant(
    circle: Circle,
    name: str,
    custom_contribution: Optional[Decimal] = None,
    *,
    id_factory: Optional[IdFactory] = None,
) -> MutationResult:
    """Append a participant at the end of the rotation.

    The new participant contributes the circle's current base amount
    unless ``custom_contribution`` is given. A started circle has its status
    re-derived, so a completed circle with a new pending member reopens.
    """
    if not name or not name.strip():
        return MutationResult.rejected(circle, NAME_REQUIRED)
    if custom_contribution is not None:
        custom_contribution = to_cents(custom_contribution)
    if custom_contribution is not None and custom_contribution <= 0:
        return MutationResult.rejected(circle, AMOUNT_NOT_POSITIVE)

    position = len(circle.participants) + 1
    participant = Participant(
        id=(id_factory or new_id)(),
        name=name.strip(),
        position=position,
        payout_date=payout_date_for(circle.start_date, circle.frequency, position),
        custom_contribution=(
            custom_contribution if custom_contribution is not None else circle.base_amount
        ),
    )
    participants = tuple(ordered_participants(circle)) + (participant,)
    return MutationResult(circle=_restatus(replace(circle, participants=participants)))


def remove_participant(circle: Circle, participant_id: str) -> MutationResult:
    """Remove a participant, close the gap in the rotation and re-derive status."""
    subject = _require_participant(circle, participant_id)
    order = [p for p in ordered_participants(circle) if p.id != subject.id]
    return MutationResult(circle=_restatus(_renumber(circle, order)))


def edit_group(
    circle: Circle,
    start_date: Optional[date] = None,
    base_amount: Optional[Decimal] = None,
    name: Optional[str] = None,
) -> MutationResult:
    """Save a bulk edit of the circle's global settings.

    A new start date reschedules every participant, manual dates included.
    The status is re-derived on every save.
    """
    if base_amount is not None:
        base_amount = to_cents(base_amount)
    if base_amount is not None and base_amount <= 0:
        return MutationResult.rejected(circle, AMOUNT_NOT_POSITIVE)
    if name is not None and not name.strip():
        return MutationResult.rejected(circle, NAME_REQUIRED)

    updated = circle
    if name is not None:
        updated = replace(updated, name=name.strip())
    if base_amount is not None:
        updated = replace(updated, base_amount=base_amount)
    if start_date is not None and start_date != circle.start_date:
        updated = replace(updated, start_date=start_date)
        updated = replace(
            updated,
            participants=tuple(
                replace(
                    p,
                    payout_date=payout_date_for(start_date, updated.frequency, p.position),
                    date_override=False,
                )
                for p in ordered_participants(updated)
            ),
        )

    return MutationResult(circle=recompute_status(updated))


def edit_participant(
    circle: Circle,
    participant_id: str,
    name: Optional[str] = None,
    payout_date: Optional[date] = None,
    custom_contribution: Optional[Decimal] = None,
) -> MutationResult:
    """Save a manual edit of one participant.

    An explicit payout date is kept as an override until this participant
    changes position or the group's start date is edited.
    """
    subject = _require_participant(circle, participant_id)
    if name is not None and not name.strip():
        return MutationResult.rejected(circle, NAME_REQUIRED)
    if custom_contribution is not None:
        custom_contribution = to_cents(custom_contribution)
    if custom_contribution is not None and custom_contribution <= 0:
        return MutationResult.rejected(circle, AMOUNT_NOT_POSITIVE)

    changes = {}
    if name is not None:
        changes["name"] = name.strip()
    if payout_date is not None:
        changes["payout_date"] = payout_date
        changes["date_override"] = True
    if custom_contribution is not None:
        changes["custom_contribution"] = custom_contribution

    edited = replace(subject, **changes)
    participants = tuple(edited if p.id == subject.id else p for p in circle.participants)
    return MutationResult(circle=recompute_status(replace(circle, participants=participants)))


def shuffle(
    circle: Circle,
    locked_ids: AbstractSet[str] = frozenset(),
    previous_positions: Optional[Mapping[str, int]] = None,
    rng: Optional[random.Random] = None,
) -> MutationResult:
    """Randomly reassign unlocked participants to the unlocked positions.

    Args:
        circle: Group circle
        locked_ids: IDs of participants whose positions are pinned
        previous_positions: Participant name -> position in the previous
            cycle. When given, several permutations are tried and the one
            that repeats the fewest previous positions wins.
        rng: Random source (a seeded ``random.Random`` in tests)
    """
    rng = rng or random.Random()
    order = ordered_participants(circle)
    slots = [i for i, p in enumerate(order) if p.id not in locked_ids]
    if len(slots) < 2:
        return MutationResult.rejected(circle, SHUFFLE_NEEDS_TWO)

    people = [order[i] for i in slots]
    attempts = SHUFFLE_ATTEMPTS if previous_positions and len(slots) > 2 else 1

    best = people
    best_collisions = None
    for _ in range(attempts):
        candidate = list(people)
        rng.shuffle(candidate)
        collisions = 0
        if previous_positions:
            collisions = sum(
                1
                for slot, p in zip(slots, candidate)
                if previous_positions.get(p.name) == slot + 1
            )
        if best_collisions is None or collisions < best_collisions:
            best, best_collisions = candidate, collisions
        if collisions == 0:
            break

    return MutationResult(circle=_renumber(circle, _place(order, locked_ids, best)))

"""Cycle pot calculations for group circles."""

from decimal import Decimal
from typing import Iterable

from xitique.domain.entities import Circle, Participant
from xitique.domain.errors import NotFoundError, participant_not_found


def effective_contribution(base_amount: Decimal, participant: Participant) -> Decimal:
    """Return what a participant pays each round."""
    if participant.custom_contribution is not None:
        return participant.custom_contribution
    return base_amount


def calculate_cycle_pot(base_amount: Decimal, participants: Iterable[Participant]) -> Decimal:
    """Sum every participant's effective contribution for one round."""
    return sum(
        (effective_contribution(base_amount, p) for p in participants), Decimal("0")
    )


def calculate_dynamic_pot(circle: Circle, participant: Participant) -> Decimal:
    """Return the pot paid out on the given participant's turn.

    The recipient receives the whole cycle pot as currently configured,
    their own contribution included.

    Raises:
        NotFoundError: If the participant is not part of the circle
    """
    if circle.get_participant(participant.id) is None:
        raise NotFoundError(participant_not_found(participant.id, circle.id))
    return calculate_cycle_pot(circle.base_amount, circle.participants)


def has_unequal_contributions(circle: Circle) -> bool:
    """True if any participant pays something other than the base amount."""
    return any(
        effective_contribution(circle.base_amount, p) != circle.base_amount
        for p in circle.participants
    )

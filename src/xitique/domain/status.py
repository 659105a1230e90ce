"""Circle status derivation.

The stored status is the only cached value in a circle. It is rewritten
by ``recompute_status`` after payout toggles, edit saves and membership
changes; ARCHIVED is a separate soft-delete flag that overrides whatever
is stored.
"""

from dataclasses import replace

from xitique.domain.entities import Circle, CircleStatus
from xitique.domain.pot import has_unequal_contributions


def derive_status(circle: Circle) -> CircleStatus:
    """Compute status from participant state.

    Returns COMPLETED once every participant has received their payout,
    RISK when contributions are unequal, otherwise ACTIVE.
    """
    participants = circle.participants
    if participants and all(p.received for p in participants):
        return CircleStatus.COMPLETED
    if has_unequal_contributions(circle):
        return CircleStatus.RISK
    return CircleStatus.ACTIVE


def recompute_status(circle: Circle) -> Circle:
    """Write the derived status back into the circle."""
    status = derive_status(circle)
    if status == circle.status:
        return circle
    return replace(circle, status=status)


def effective_status(circle: Circle) -> CircleStatus:
    """Status as shown to users, with the archive flag taking precedence."""
    if circle.archived:
        return CircleStatus.ARCHIVED
    return circle.status


def approve_risk(circle: Circle) -> Circle:
    """Accept unequal contributions and mark a RISK circle ACTIVE.

    The approval lasts until the next status recomputation.
    """
    if circle.status != CircleStatus.RISK:
        return circle
    return replace(circle, status=CircleStatus.ACTIVE)


def archive(circle: Circle) -> Circle:
    """Soft-delete a circle. Its log and participants are kept."""
    return replace(circle, archived=True)

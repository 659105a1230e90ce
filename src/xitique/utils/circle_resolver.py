"""Utility for resolving circle and participant references to IDs."""

from xitique.domain.circle import CircleService
from xitique.domain.entities import Circle

MIN_PREFIX_LENGTH = 6


def resolve_circle(circle_service: CircleService, circle: str) -> str:
    """Resolve circle name or ID to circle ID.

    Args:
        circle_service: CircleService instance
        circle: Full ID, ID prefix (6+ characters) or exact name of an
            active circle

    Returns:
        Circle ID

    Raises:
        ValueError: If no circle matches, or the name/prefix is ambiguous
    """
    if circle_service.get_circle(circle) is not None:
        return circle

    circles = circle_service.list_circles()

    by_name = [c for c in circles if c.name == circle]
    if len(by_name) == 1:
        return by_name[0].id
    if len(by_name) > 1:
        raise ValueError(f"Several circles are named '{circle}'; use the circle ID")

    if len(circle) >= MIN_PREFIX_LENGTH:
        by_prefix = [c for c in circles if c.id.startswith(circle)]
        if len(by_prefix) == 1:
            return by_prefix[0].id
        if len(by_prefix) > 1:
            raise ValueError(f"Circle ID prefix '{circle}' is ambiguous")

    raise ValueError(f"Circle '{circle}' not found")


def resolve_participant(circle: Circle, participant: str) -> str:
    """Resolve a participant position, ID or name within a circle.

    Args:
        circle: Circle to search
        participant: Rotation position ("3"), participant ID or exact name

    Returns:
        Participant ID

    Raises:
        ValueError: If no participant matches, or the name is ambiguous
    """
    # Try to parse as a position
    try:
        position = int(participant)
    except (ValueError, TypeError):
        position = None
    if position is not None:
        for p in circle.participants:
            if p.position == position:
                return p.id
        raise ValueError(f"No participant at position {position}")

    if circle.get_participant(participant) is not None:
        return participant

    matches = [p for p in circle.participants if p.name == participant]
    if len(matches) == 1:
        return matches[0].id
    if len(matches) > 1:
        raise ValueError(f"Several participants are named '{participant}'; use the position")

    raise ValueError(f"Participant '{participant}' not found in '{circle.name}'")

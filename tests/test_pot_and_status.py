"""Tests for pot calculation and status derivation."""

from dataclasses import replace
from decimal import Decimal

import pytest

from xitique.domain.entities import CircleStatus, Participant
from xitique.domain.errors import NotFoundError
from xitique.domain.pot import (
    calculate_cycle_pot,
    calculate_dynamic_pot,
    effective_contribution,
    has_unequal_contributions,
)
from xitique.domain.status import (
    approve_risk,
    archive,
    derive_status,
    effective_status,
    recompute_status,
)


def test_cycle_pot_equal_contributions(make_circle):
    """Test that three members paying 100 make a pot of 300."""
    circle = make_circle(count=3, base_amount="100")

    assert calculate_cycle_pot(circle.base_amount, circle.participants) == Decimal("300")
    assert derive_status(circle) == CircleStatus.ACTIVE


def test_cycle_pot_with_custom_contribution(make_circle):
    """Test that custom contributions replace the base amount."""
    circle = make_circle(count=3, base_amount="100", contributions={2: "150"})

    assert calculate_cycle_pot(circle.base_amount, circle.participants) == Decimal("350")
    assert effective_contribution(circle.base_amount, circle.participants[1]) == Decimal("150")


def test_cycle_pot_empty():
    """Test that a circle without participants has an empty pot."""
    assert calculate_cycle_pot(Decimal("100"), []) == Decimal("0")


def test_dynamic_pot_is_cycle_pot(make_circle):
    """Test that the recipient receives the whole cycle pot."""
    circle = make_circle(count=4, base_amount="250")

    assert calculate_dynamic_pot(circle, circle.participants[0]) == Decimal("1000")


def test_dynamic_pot_rejects_outsider(make_circle):
    """Test that a participant from another circle is refused."""
    circle = make_circle()
    outsider = Participant(id="zz", name="Zed", position=1)

    with pytest.raises(NotFoundError):
        calculate_dynamic_pot(circle, outsider)


def test_unequal_contributions_give_risk(make_circle):
    """Test that one higher contribution flags the circle as RISK."""
    circle = make_circle(contributions={1: "150"})

    assert has_unequal_contributions(circle)
    assert derive_status(circle) == CircleStatus.RISK
    assert recompute_status(circle).status == CircleStatus.RISK


def test_custom_contribution_equal_to_base_is_not_risk(make_circle):
    """Test that an explicit contribution equal to the base amount is not unequal."""
    circle = make_circle(contributions={1: "100"})

    assert not has_unequal_contributions(circle)
    assert derive_status(circle) == CircleStatus.ACTIVE


def test_all_received_is_completed(make_circle):
    """Test that a circle where everyone received is COMPLETED, even with unequal contributions."""
    circle = make_circle(contributions={1: "150"})
    circle = replace(
        circle, participants=tuple(replace(p, received=True) for p in circle.participants)
    )

    assert derive_status(circle) == CircleStatus.COMPLETED


def test_empty_circle_is_not_completed(make_circle):
    """Test that a circle without participants is never COMPLETED."""
    assert derive_status(make_circle(count=0)) == CircleStatus.ACTIVE


def test_recompute_returns_same_object_when_unchanged(make_circle):
    """Test that recomputation is a no-op when the status is already current."""
    circle = replace(make_circle(), status=CircleStatus.ACTIVE)

    assert recompute_status(circle) is circle


def test_approve_risk(make_circle):
    """Test that approving a RISK circle makes it ACTIVE and leaves others alone."""
    risky = recompute_status(make_circle(contributions={1: "150"}))

    assert approve_risk(risky).status == CircleStatus.ACTIVE

    planning = make_circle()
    assert approve_risk(planning) is planning


def test_archive_overrides_status(make_circle):
    """Test that archived circles report ARCHIVED but keep their stored status."""
    circle = recompute_status(make_circle())
    archived = archive(circle)

    assert archived.archived
    assert archived.status == CircleStatus.ACTIVE
    assert effective_status(archived) == CircleStatus.ARCHIVED
    assert effective_status(circle) == CircleStatus.ACTIVE

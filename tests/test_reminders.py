"""Tests for the notification generator."""

from dataclasses import replace
from datetime import date, datetime, timedelta, UTC
from decimal import Decimal

from xitique.domain.entities import (
    Circle,
    CircleKind,
    CircleStatus,
    Frequency,
    NotificationSeverity,
    Transaction,
    TransactionType,
)
from xitique.domain.reminders import generate_notifications


def _at(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, 8, 0, tzinfo=UTC)


def _goal(target="5000", created=datetime(2025, 1, 1, 10, 0, tzinfo=UTC), transactions=()):
    return Circle(
        id="g1",
        name="New phone",
        kind=CircleKind.INDIVIDUAL,
        base_amount=Decimal("100"),
        frequency=Frequency.WEEKLY,
        start_date=created.date(),
        created_at=created,
        target_amount=Decimal(target) if target is not None else None,
        transactions=transactions,
    )


def test_upcoming_payout_reminder(make_circle):
    """Test the contribution reminder one and two days ahead."""
    circle = make_circle(count=3)  # P2 is due on 2025-02-01

    def upcoming(day):
        generated = generate_notifications([circle], set(), _at(day))
        return [n for n in generated if n.id.startswith("contrib-")]

    two_days = upcoming(date(2025, 1, 30))
    one_day = upcoming(date(2025, 1, 31))

    assert [n.id for n in two_days] == ["contrib-c1-p2-2"]
    assert [n.id for n in one_day] == ["contrib-c1-p2-1"]
    assert two_days[0].severity == NotificationSeverity.INFO
    assert two_days[0].circle_id == "c1"
    assert upcoming(date(2025, 1, 29)) == []


def test_payout_day_reminder(make_circle):
    """Test the payout-day reminder mentions the pot."""
    circle = make_circle(count=3)

    generated = generate_notifications([circle], set(), _at(date(2025, 2, 1)))

    ids = [n.id for n in generated]
    assert "payout-c1-p2" in ids
    payout_day = generated[ids.index("payout-c1-p2")]
    assert payout_day.severity == NotificationSeverity.SUCCESS
    assert "300.00 MT" in payout_day.message


def test_overdue_reminder_window(make_circle):
    """Test overdue warnings inside the 30-day window only."""
    circle = make_circle(count=1)  # P1 is due on 2025-01-01

    day_29 = generate_notifications([circle], set(), _at(date(2025, 1, 30)))
    day_30 = generate_notifications([circle], set(), _at(date(2025, 1, 31)))

    assert [n.id for n in day_29] == ["overdue-c1-p1"]
    assert day_29[0].severity == NotificationSeverity.WARNING
    assert day_30 == []


def test_received_participants_are_skipped(make_circle):
    """Test that paid participants get no reminders."""
    circle = make_circle(count=1)
    circle = replace(
        circle, participants=tuple(replace(p, received=True) for p in circle.participants)
    )

    assert generate_notifications([circle], set(), _at(date(2025, 1, 1))) == []


def test_generation_is_idempotent(make_circle):
    """Test that a second scan with the same known IDs emits nothing."""
    circle = make_circle(count=3)
    existing = set()
    now = _at(date(2025, 2, 1))

    first = generate_notifications([circle], existing, now)
    second = generate_notifications([circle], existing, now)

    assert first
    assert second == []
    assert existing == {n.id for n in first}


def test_archived_and_completed_circles_are_skipped(make_circle):
    """Test that archived and completed circles are not scanned."""
    archived = replace(make_circle(count=3), archived=True)
    completed = replace(make_circle(count=3), status=CircleStatus.COMPLETED)

    assert generate_notifications([archived, completed], set(), _at(date(2025, 2, 1))) == []


def test_goal_weekly_reminder_only_on_day_seven():
    """Test that daily deposits over a week trigger one reminder, on day 7."""
    created = datetime(2025, 1, 1, 10, 0, tzinfo=UTC)
    goal = _goal(created=created)
    existing = set()
    emitted = {}

    for day in range(1, 8):
        now = created + timedelta(days=day)
        goal = replace(
            goal,
            transactions=goal.transactions
            + (
                Transaction(
                    id=f"t{day}",
                    type=TransactionType.DEPOSIT,
                    amount=Decimal("100"),
                    timestamp=now,
                ),
            ),
        )
        emitted[day] = generate_notifications([goal], existing, now)

    assert all(emitted[day] == [] for day in range(1, 7))
    assert [n.id for n in emitted[7]] == ["ind-reminder-g1-7"]
    assert emitted[7][0].severity == NotificationSeverity.SUCCESS


def test_goal_reached_gets_no_reminder():
    """Test that a goal at or above its target is not reminded."""
    goal = _goal(
        target="500",
        transactions=(
            Transaction(
                id="t1",
                type=TransactionType.DEPOSIT,
                amount=Decimal("500"),
                timestamp=datetime(2025, 1, 2, tzinfo=UTC),
            ),
        ),
    )

    assert generate_notifications([goal], set(), _at(date(2025, 1, 8))) == []


def test_goal_without_target_reminds_until_first_deposit():
    """Test that a goal without target is reminded only while empty."""
    empty = _goal(target=None)
    saved = replace(
        empty,
        transactions=(
            Transaction(
                id="t1",
                type=TransactionType.DEPOSIT,
                amount=Decimal("1"),
                timestamp=datetime(2025, 1, 2, tzinfo=UTC),
            ),
        ),
    )

    assert [n.id for n in generate_notifications([empty], set(), _at(date(2025, 1, 15)))] == [
        "ind-reminder-g1-14"
    ]
    assert generate_notifications([saved], set(), _at(date(2025, 1, 15))) == []

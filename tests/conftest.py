"""Shared pytest fixtures for xitique tests."""

import itertools
import os
import tempfile
from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from xitique.database.factories import create_sqlite_database
from xitique.domain.circle import CircleService
from xitique.domain.entities import Circle, CircleKind, Frequency, Participant
from xitique.domain.notification import NotificationService
from xitique.domain.rotation import payout_date_for


class FakeClock:
    """Settable clock for deterministic timestamps."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    """Clock fixed at 2025-01-01 09:00 UTC."""
    return FakeClock(datetime(2025, 1, 1, 9, 0, tzinfo=UTC))


@pytest.fixture
def id_factory():
    """Sequential IDs: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def circle_service(temp_db, clock):
    """Create a CircleService with a temporary database."""
    return CircleService(temp_db, clock=clock)


@pytest.fixture
def notification_service(temp_db, clock):
    """Create a NotificationService with a temporary database."""
    return NotificationService(temp_db, clock=clock)


@pytest.fixture
def make_circle():
    """Build an in-memory group circle with participants P1..Pn."""

    def _make(count=3, base_amount="100", start=date(2025, 1, 1), frequency=Frequency.MONTHLY, contributions=None):
        contributions = contributions or {}
        participants = tuple(
            Participant(
                id=f"p{i}",
                name=f"P{i}",
                position=i,
                payout_date=payout_date_for(start, frequency, i),
                custom_contribution=(
                    Decimal(contributions[i]) if i in contributions else None
                ),
            )
            for i in range(1, count + 1)
        )
        return Circle(
            id="c1",
            name="Family",
            kind=CircleKind.GROUP,
            base_amount=Decimal(base_amount),
            frequency=frequency,
            start_date=start,
            created_at=datetime(2024, 12, 1, tzinfo=UTC),
            participants=participants,
        )

    return _make


@pytest.fixture
def sample_circle(circle_service):
    """Create a saved monthly group circle with three members."""
    return circle_service.create_group(
        name="Family",
        base_amount=Decimal("100"),
        frequency=Frequency.MONTHLY,
        start_date=date(2025, 1, 1),
        participants=[("Ana", None), ("Bea", None), ("Carlos", None)],
    )


@pytest.fixture
def sample_goal(circle_service):
    """Create a saved weekly savings goal."""
    return circle_service.create_goal(
        name="New phone",
        contribution_amount=Decimal("100"),
        frequency=Frequency.WEEKLY,
        target_amount=Decimal("5000"),
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()

"""Tests for the SQLAlchemy database implementation."""

from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from xitique.database.factories import create_sqlite_database
from xitique.domain.entities import (
    Notification,
    NotificationSeverity,
    PaymentMethod,
    Transaction,
    TransactionType,
)
from xitique.domain.errors import InvariantViolation, PersistenceError
from xitique.domain.ledger import append_transaction
from xitique.domain.rotation import reorder

NOW = datetime(2025, 1, 5, 12, 30, tzinfo=UTC)


def _deposit(id, amount="100"):
    return Transaction(id=id, type=TransactionType.DEPOSIT, amount=Decimal(amount), timestamp=NOW)


def test_round_trip(temp_db, make_circle):
    """Test that a saved circle loads back equal, log order included."""
    circle = replace(
        make_circle(contributions={2: "150.50"}),
        payment_method=PaymentMethod.MPESA,
        transactions=(_deposit("t1"), _deposit("t2", "20.25")),
    )

    temp_db.save_circle(circle)
    loaded = temp_db.load_circle(circle.id)

    assert loaded == circle
    assert loaded.created_at.tzinfo is not None
    assert [t.id for t in loaded.transactions] == ["t1", "t2"]


def test_load_missing_circle(temp_db):
    """Test that an unknown ID loads as None."""
    assert temp_db.load_circle("missing") is None


def test_saving_again_appends_only_new_transactions(temp_db, make_circle):
    """Test that re-saving keeps stored rows and appends the rest."""
    circle = append_transaction(make_circle(), _deposit("t1"))
    temp_db.save_circle(circle)

    circle = append_transaction(circle, _deposit("t2"))
    temp_db.save_circle(circle)

    assert [t.id for t in temp_db.load_circle(circle.id).transactions] == ["t1", "t2"]


def test_dropping_a_stored_transaction_is_refused(temp_db, make_circle):
    """Test that the stored log cannot shrink or be rewritten."""
    circle = append_transaction(make_circle(), _deposit("t1"))
    temp_db.save_circle(circle)

    with pytest.raises(InvariantViolation):
        temp_db.save_circle(replace(circle, transactions=()))
    with pytest.raises(InvariantViolation):
        temp_db.save_circle(replace(circle, transactions=(_deposit("other"),)))

    assert temp_db.load_circle(circle.id) == circle


def test_participant_swap_is_saved(temp_db, make_circle):
    """Test that reordered positions persist despite the unique constraint."""
    circle = make_circle(count=3)
    temp_db.save_circle(circle)

    moved = reorder(circle, "p3", 1).circle
    temp_db.save_circle(moved)

    loaded = temp_db.load_circle(circle.id)
    assert [p.id for p in loaded.participants] == ["p3", "p1", "p2"]
    assert loaded == moved


def test_participant_cannot_change_circle(temp_db, make_circle):
    """Test that a participant ID owned by another circle is refused."""
    temp_db.save_circle(make_circle())
    other = replace(make_circle(), id="c2")

    with pytest.raises(InvariantViolation):
        temp_db.save_circle(other)

    assert temp_db.load_circle("c2") is None


def test_failed_commit_leaves_state_unchanged(temp_db, make_circle, monkeypatch):
    """Test that a storage failure raises PersistenceError and writes nothing."""
    circle = make_circle()
    temp_db.save_circle(circle)
    session = temp_db._get_session()

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "commit", failing_commit)

    with pytest.raises(PersistenceError):
        temp_db.save_circle(append_transaction(circle, _deposit("t1")))

    monkeypatch.undo()
    assert temp_db.load_circle(circle.id) == circle


def test_list_circles_excludes_archived(temp_db, make_circle):
    """Test listing with and without archived circles."""
    active = make_circle()
    archived = replace(make_circle(), id="c2", name="Old", archived=True, participants=())
    temp_db.save_circle(active)
    temp_db.save_circle(archived)

    assert [c.id for c in temp_db.list_circles()] == ["c1"]
    assert [c.id for c in temp_db.list_circles(include_archived=True)] == ["c1", "c2"]


def test_notifications(temp_db, make_circle):
    """Test storing, listing and marking notifications read."""
    temp_db.save_circle(make_circle())
    older = Notification(
        id="n1",
        title="First",
        message="m",
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
        severity=NotificationSeverity.INFO,
        circle_id="c1",
    )
    newer = replace(older, id="n2", title="Second", created_at=datetime(2025, 1, 2, tzinfo=UTC))

    temp_db.add_notifications([older, newer])

    assert temp_db.get_notification_ids() == {"n1", "n2"}
    assert [n.id for n in temp_db.list_notifications()] == ["n2", "n1"]
    assert temp_db.mark_notification_read("n1")
    assert not temp_db.mark_notification_read("missing")
    assert [n.id for n in temp_db.list_notifications(unread_only=True)] == ["n2"]
    assert temp_db.list_notifications()[1].read


def test_factory_uses_environment_path(tmp_path, monkeypatch):
    """Test that XITIQUE_DB_PATH selects the database file."""
    db_path = tmp_path / "env.db"
    monkeypatch.setenv("XITIQUE_DB_PATH", str(db_path))

    db = create_sqlite_database()

    assert db.database_url == f"sqlite:///{db_path}"
    assert db_path.exists()
    db.disconnect()


def test_dates_survive_round_trip(temp_db, make_circle):
    """Test that payout dates and start dates are stored as dates."""
    circle = make_circle(start=date(2025, 1, 31))
    temp_db.save_circle(circle)

    loaded = temp_db.load_circle(circle.id)

    assert loaded.start_date == date(2025, 1, 31)
    assert loaded.participants[1].payout_date == date(2025, 2, 28)

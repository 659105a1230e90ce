"""SQLAlchemy models for xitique database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Circle(Base):
    """Group circle or individual goal model."""

    __tablename__ = "circles"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    kind = Column(String, nullable=False)
    base_amount = Column(Numeric(12, 2), nullable=False)
    target_amount = Column(Numeric(12, 2), nullable=True)
    frequency = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    status = Column(String, nullable=False)
    archived = Column(Boolean, default=False, nullable=False)
    payment_method = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    participants = relationship(
        "Participant",
        back_populates="circle",
        cascade="all, delete-orphan",
        order_by="Participant.position",
    )
    transactions = relationship(
        "Transaction",
        back_populates="circle",
        order_by="Transaction.sequence",
    )


class Participant(Base):
    """Participant of a group circle."""

    __tablename__ = "participants"

    id = Column(String, primary_key=True)
    circle_id = Column(String, ForeignKey("circles.id"), nullable=False)
    name = Column(String, nullable=False)
    position = Column(Integer, nullable=False)
    payout_date = Column(Date, nullable=True)
    date_override = Column(Boolean, default=False, nullable=False)
    received = Column(Boolean, default=False, nullable=False)
    custom_contribution = Column(Numeric(12, 2), nullable=True)

    __table_args__ = (UniqueConstraint("circle_id", "position", name="uq_circle_position"),)

    # Relationships
    circle = relationship("Circle", back_populates="participants")


class Transaction(Base):
    """Ledger entry. Rows are only ever inserted."""

    __tablename__ = "transactions"

    id = Column(String, primary_key=True)
    circle_id = Column(String, ForeignKey("circles.id"), nullable=False)
    sequence = Column(Integer, nullable=False)
    type = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    description = Column(String, nullable=True)
    reference_id = Column(String, ForeignKey("transactions.id"), nullable=True)
    participant_id = Column(String, nullable=True)

    __table_args__ = (UniqueConstraint("circle_id", "sequence", name="uq_circle_sequence"),)

    # Relationships
    circle = relationship("Circle", back_populates="transactions")


class Notification(Base):
    """Generated reminder with its read state."""

    __tablename__ = "notifications"

    id = Column(String, primary_key=True)
    circle_id = Column(String, ForeignKey("circles.id"), nullable=True)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    severity = Column(String, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

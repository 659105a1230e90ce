"""Circle domain service."""

import logging
import random
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import AbstractSet, Optional, Sequence

from xitique.database.base import Database
from xitique.domain import ledger, payout, rotation, status
from xitique.domain.entities import (
    Circle,
    CircleKind,
    CircleStatus,
    EditMode,
    Frequency,
    MutationResult,
    Participant,
    PaymentMethod,
    Transaction,
    TransactionType,
)
from xitique.domain.errors import (
    AMOUNT_NOT_POSITIVE,
    ConflictError,
    NotFoundError,
    ValidationError,
    circle_not_completed,
    circle_not_found,
    wrong_circle_kind,
)
from xitique.domain.ledger import Clock, IdFactory
from xitique.utils.date_parser import add_period

logger = logging.getLogger(__name__)


class CircleService:
    """Service for managing circles, goals and their ledgers.

    Every mutation loads the whole circle, computes the new state with the
    pure domain functions and saves the whole circle back. Entities are
    immutable, so a failed save leaves the caller's objects untouched.
    """

    def __init__(
        self,
        db: Database,
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        """Initialize circle service.

        Args:
            db: Database instance
            clock: Source of the current time (defaults to UTC now)
            id_factory: Source of new entity IDs (defaults to uuid4)
        """
        self.db = db
        self.clock = clock or ledger.utc_now
        self.id_factory = id_factory or ledger.new_id

    # Creation and lookup
    def create_group(
        self,
        name: str,
        base_amount: Decimal,
        frequency: Frequency,
        start_date: date,
        participants: Sequence[tuple[str, Optional[Decimal]]] = (),
        payment_method: Optional[PaymentMethod] = None,
    ) -> Circle:
        """Create a group circle in PLANNING status.

        Args:
            name: Circle name
            base_amount: Contribution per participant per round
            frequency: Round frequency
            start_date: Payout date of the first position
            participants: (name, custom contribution or None) in rotation order
            payment_method: Optional collection method

        Returns:
            The saved circle

        Raises:
            ValidationError: If name is empty or an amount is not positive
        """
        base_amount = self._check_new_circle(name, base_amount)
        members = []
        for position, (member_name, contribution) in enumerate(participants, start=1):
            if not member_name or not member_name.strip():
                raise ValidationError(rotation.NAME_REQUIRED)
            if contribution is not None:
                contribution = self._positive_cents(contribution)
            members.append(
                Participant(
                    id=self.id_factory(),
                    name=member_name.strip(),
                    position=position,
                    payout_date=rotation.payout_date_for(start_date, frequency, position),
                    custom_contribution=contribution,
                )
            )

        circle = Circle(
            id=self.id_factory(),
            name=name.strip(),
            kind=CircleKind.GROUP,
            base_amount=base_amount,
            frequency=frequency,
            start_date=start_date,
            created_at=self.clock(),
            participants=tuple(members),
            payment_method=payment_method,
        )
        self.db.save_circle(circle)
        logger.info("Created group circle %s with %d participants", circle.id, len(members))
        return circle

    def create_goal(
        self,
        name: str,
        contribution_amount: Decimal,
        frequency: Frequency,
        target_amount: Optional[Decimal] = None,
        start_date: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> Circle:
        """Create an individual savings goal.

        Raises:
            ValidationError: If name is empty or an amount is not positive
        """
        contribution_amount = self._check_new_circle(name, contribution_amount)
        if target_amount is not None:
            target_amount = self._positive_cents(target_amount)

        now = self.clock()
        circle = Circle(
            id=self.id_factory(),
            name=name.strip(),
            kind=CircleKind.INDIVIDUAL,
            base_amount=contribution_amount,
            frequency=frequency,
            start_date=start_date or now.date(),
            created_at=now,
            target_amount=target_amount,
            payment_method=payment_method,
        )
        self.db.save_circle(circle)
        logger.info("Created savings goal %s", circle.id)
        return circle

    def _check_new_circle(self, name: str, amount: Decimal) -> Decimal:
        if not name or not name.strip():
            raise ValidationError(rotation.NAME_REQUIRED)
        return self._positive_cents(amount)

    def _positive_cents(self, amount: Decimal) -> Decimal:
        """Round an amount to cents, refusing anything that rounds to zero or below."""
        amount = ledger.to_cents(amount)
        if amount <= 0:
            raise ValidationError(AMOUNT_NOT_POSITIVE)
        return amount

    def get_circle(self, circle_id: str) -> Optional[Circle]:
        """Get circle by ID, archived circles included.

        Returns:
            Circle entity or None if not found
        """
        return self.db.load_circle(circle_id)

    def require_circle(self, circle_id: str) -> Circle:
        """Get circle by ID.

        Raises:
            NotFoundError: If the circle does not exist
        """
        circle = self.db.load_circle(circle_id)
        if circle is None:
            raise NotFoundError(circle_not_found(circle_id))
        return circle

    def _require_group(self, circle_id: str) -> Circle:
        circle = self.require_circle(circle_id)
        if circle.kind != CircleKind.GROUP:
            raise ConflictError(wrong_circle_kind(circle_id, CircleKind.GROUP.value))
        return circle

    def list_circles(self, include_archived: bool = False) -> list[Circle]:
        """List circles; archived ones only when asked for."""
        return self.db.list_circles(include_archived=include_archived)

    def get_balance(self, circle_id: str) -> Decimal:
        """Current balance, folded from the circle's log."""
        return ledger.calculate_balance(self.require_circle(circle_id).transactions)

    # Whole-circle edits
    def _commit(self, result: MutationResult, action: str) -> Circle:
        """Save a successful mutation or raise its rejection."""
        if not result.valid:
            logger.warning("Rejected %s on circle %s: %s", action, result.circle.id, result.error)
            raise ValidationError(result.error)
        self.db.save_circle(result.circle)
        logger.info("Applied %s on circle %s", action, result.circle.id)
        return result.circle

    def rename_circle(self, circle_id: str, name: str) -> Circle:
        """Rename a circle without touching its status."""
        circle = self.require_circle(circle_id)
        if not name or not name.strip():
            raise ValidationError(rotation.NAME_REQUIRED)
        return self._commit(MutationResult(circle=replace(circle, name=name.strip())), "rename")

    def edit_group(
        self,
        circle_id: str,
        start_date: Optional[date] = None,
        base_amount: Optional[Decimal] = None,
    ) -> Circle:
        """Save a bulk edit of start date and/or base amount."""
        circle = self._require_group(circle_id)
        return self._commit(
            rotation.edit_group(circle, start_date=start_date, base_amount=base_amount),
            "group edit",
        )

    def archive_circle(self, circle_id: str) -> Circle:
        """Soft-delete a circle; it stays loadable by ID."""
        circle = self.require_circle(circle_id)
        return self._commit(MutationResult(circle=status.archive(circle)), "archive")

    def approve_risk(self, circle_id: str) -> Circle:
        """Accept unequal contributions and move a RISK circle to ACTIVE."""
        circle = self._require_group(circle_id)
        if circle.status != CircleStatus.RISK:
            raise ValidationError(f"Circle {circle_id} is not at risk")
        return self._commit(MutationResult(circle=status.approve_risk(circle)), "risk approval")

    # Ledger
    def _record(self, circle_id: str, type: TransactionType, amount: Decimal, description: str) -> Transaction:
        circle = self.require_circle(circle_id)
        if circle.archived:
            raise ValidationError(f"Circle {circle_id} is archived")
        check = ledger.validate_transaction(circle, type, amount)
        if not check.valid:
            logger.warning("Rejected %s of %s on circle %s: %s", type.value, amount, circle_id, check.error)
            raise ValidationError(check.error)

        txn = ledger.create_transaction(
            type, amount, description, clock=self.clock, id_factory=self.id_factory
        )
        self.db.save_circle(ledger.append_transaction(circle, txn))
        logger.info("Recorded %s of %s on circle %s", type.value, amount, circle_id)
        return txn

    def deposit(
        self, circle_id: str, amount: Optional[Decimal] = None, description: Optional[str] = None
    ) -> Transaction:
        """Record a deposit; defaults to the circle's contribution amount.

        Raises:
            ValidationError: If the amount is not positive
        """
        if amount is None:
            amount = self.require_circle(circle_id).base_amount
        return self._record(circle_id, TransactionType.DEPOSIT, amount, description or "Deposit")

    def withdraw(self, circle_id: str, amount: Decimal, description: Optional[str] = None) -> Transaction:
        """Record a withdrawal.

        Raises:
            ValidationError: If the amount is not positive or exceeds the balance
        """
        return self._record(circle_id, TransactionType.WITHDRAWAL, amount, description or "Withdrawal")

    # Payouts
    def toggle_payout(
        self, circle_id: str, participant_id: str, mode: EditMode = EditMode.VIEW
    ) -> Transaction:
        """Pay out a pending participant, or reverse a received payout.

        Returns:
            The PAYOUT or PAYOUT_REVERSAL transaction appended to the log

        Raises:
            ValidationError: If the circle is completed, archived or in bulk edit mode
        """
        circle = self._require_group(circle_id)
        result = payout.toggle_payout(
            circle, participant_id, mode, clock=self.clock, id_factory=self.id_factory
        )
        self._commit(result, "payout toggle")
        return result.transactions[0]

    def mark_all_received(self, circle_id: str, mode: EditMode = EditMode.VIEW) -> list[Transaction]:
        """Pay out every pending participant."""
        circle = self._require_group(circle_id)
        result = payout.mark_all_received(
            circle, mode, clock=self.clock, id_factory=self.id_factory
        )
        self._commit(result, "bulk payout")
        return list(result.transactions)

    # Rotation
    def add_participant(
        self, circle_id: str, name: str, custom_contribution: Optional[Decimal] = None
    ) -> Circle:
        """Append a participant at the end of the rotation."""
        circle = self._require_group(circle_id)
        return self._commit(
            rotation.add_participant(
                circle, name, custom_contribution, id_factory=self.id_factory
            ),
            "participant add",
        )

    def remove_participant(self, circle_id: str, participant_id: str) -> Circle:
        """Remove a participant and renumber the rest."""
        circle = self._require_group(circle_id)
        return self._commit(rotation.remove_participant(circle, participant_id), "participant removal")

    def move_participant(
        self,
        circle_id: str,
        participant_id: str,
        target_position: int,
        locked_ids: AbstractSet[str] = frozenset(),
    ) -> Circle:
        """Move a participant to another rotation position.

        Raises:
            ValidationError: If the participant or target position is locked
        """
        circle = self._require_group(circle_id)
        return self._commit(
            rotation.reorder(circle, participant_id, target_position, locked_ids), "reorder"
        )

    def edit_participant(
        self,
        circle_id: str,
        participant_id: str,
        name: Optional[str] = None,
        payout_date: Optional[date] = None,
        custom_contribution: Optional[Decimal] = None,
    ) -> Circle:
        """Save a manual edit of one participant."""
        circle = self._require_group(circle_id)
        return self._commit(
            rotation.edit_participant(
                circle,
                participant_id,
                name=name,
                payout_date=payout_date,
                custom_contribution=custom_contribution,
            ),
            "participant edit",
        )

    def shuffle_participants(
        self,
        circle_id: str,
        locked_ids: AbstractSet[str] = frozenset(),
        rng: Optional[random.Random] = None,
    ) -> Circle:
        """Randomize the rotation order, keeping locked participants in place."""
        circle = self._require_group(circle_id)
        return self._commit(rotation.shuffle(circle, locked_ids, rng=rng), "shuffle")

    def renew_circle(
        self,
        circle_id: str,
        start_date: Optional[date] = None,
        reshuffle: bool = True,
        locked_ids: AbstractSet[str] = frozenset(),
        rng: Optional[random.Random] = None,
    ) -> Circle:
        """Start a new cycle with the same members as a finished one.

        Members get fresh IDs and pending payouts. When ``reshuffle`` is set,
        the new order avoids repeating last cycle's positions where it can;
        ``locked_ids`` (IDs from the old circle) keep their old positions.

        Args:
            circle_id: Circle to renew
            start_date: First payout of the new cycle; defaults to one step
                after the last position of the old cycle

        Returns:
            The new circle, in PLANNING status

        Raises:
            ValidationError: If the circle is not COMPLETED
        """
        old = self._require_group(circle_id)
        if old.status != CircleStatus.COMPLETED:
            logger.warning("Rejected renewal of unfinished circle %s", circle_id)
            raise ValidationError(circle_not_completed(circle_id))
        order = rotation.ordered_participants(old)
        start = start_date or add_period(old.start_date, old.frequency, len(order))

        id_map = {p.id: self.id_factory() for p in order}
        renewed = Circle(
            id=self.id_factory(),
            name=old.name,
            kind=CircleKind.GROUP,
            base_amount=old.base_amount,
            frequency=old.frequency,
            start_date=start,
            created_at=self.clock(),
            participants=tuple(
                Participant(
                    id=id_map[p.id],
                    name=p.name,
                    position=p.position,
                    payout_date=rotation.payout_date_for(start, old.frequency, p.position),
                    custom_contribution=p.custom_contribution,
                )
                for p in order
            ),
            payment_method=old.payment_method,
        )

        if reshuffle and len(order) > 1:
            result = rotation.shuffle(
                renewed,
                {id_map[i] for i in locked_ids if i in id_map},
                previous_positions={p.name: p.position for p in order},
                rng=rng,
            )
            if result.valid:
                renewed = result.circle

        self.db.save_circle(renewed)
        logger.info("Renewed circle %s as %s", old.id, renewed.id)
        return renewed

"""Transaction log, balance calculator and transaction validator.

Balances are always folded from the log. A circle's log only grows:
corrections are PAYOUT_REVERSAL entries referencing the payout they cancel.
"""

import uuid
from dataclasses import replace
from datetime import datetime, UTC
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, Optional

from xitique.domain.entities import (
    Circle,
    Transaction,
    TransactionType,
    ValidationResult,
)
from xitique.domain.errors import AMOUNT_NOT_POSITIVE, INSUFFICIENT_FUNDS

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]

CENT = Decimal("0.01")

_SIGNS = {
    TransactionType.DEPOSIT: 1,
    TransactionType.WITHDRAWAL: -1,
    TransactionType.PAYOUT: -1,
    TransactionType.PAYOUT_REVERSAL: 1,
}


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


def new_id() -> str:
    """Default unique-id generator."""
    return str(uuid.uuid4())


def to_cents(amount) -> Decimal:
    """Round an amount to whole cents, the precision amounts are stored at."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_balance(transactions: Optional[Iterable[Transaction]]) -> Decimal:
    """Fold a transaction log into the current balance.

    Args:
        transactions: Transactions in any order, or None

    Returns:
        Balance (deposits and reversals add, withdrawals and payouts subtract)
    """
    if not transactions:
        return Decimal("0")
    return sum((_SIGNS[txn.type] * txn.amount for txn in transactions), Decimal("0"))


def validate_transaction(
    circle: Circle, type: TransactionType, amount: Decimal
) -> ValidationResult:
    """Check business rules before a transaction is appended.

    Args:
        circle: Circle or goal the transaction would belong to
        type: Transaction type
        amount: Proposed amount

    Returns:
        ValidationResult; invalid for amounts not positive once rounded
        to cents, and for
        withdrawals larger than the current balance
    """
    amount = to_cents(amount)
    if amount <= 0:
        return ValidationResult.fail(AMOUNT_NOT_POSITIVE)

    if type == TransactionType.WITHDRAWAL:
        if calculate_balance(circle.transactions) < amount:
            return ValidationResult.fail(INSUFFICIENT_FUNDS)

    return ValidationResult.ok()


def create_transaction(
    type: TransactionType,
    amount: Decimal,
    description: Optional[str] = None,
    reference_id: Optional[str] = None,
    participant_id: Optional[str] = None,
    *,
    clock: Optional[Clock] = None,
    id_factory: Optional[IdFactory] = None,
) -> Transaction:
    """Build a transaction with a generated ID and timestamp.

    The amount is rounded to cents.
    """
    return Transaction(
        id=(id_factory or new_id)(),
        type=type,
        amount=to_cents(amount),
        timestamp=(clock or utc_now)(),
        description=description,
        reference_id=reference_id,
        participant_id=participant_id,
    )


def append_transaction(circle: Circle, transaction: Transaction) -> Circle:
    """Return a copy of the circle with the transaction appended to its log."""
    return replace(circle, transactions=circle.transactions + (transaction,))


def find_open_payout(circle: Circle, participant_id: str) -> Optional[Transaction]:
    """Find the participant's latest payout that has not been reversed."""
    reversed_ids = {
        txn.reference_id
        for txn in circle.transactions
        if txn.type == TransactionType.PAYOUT_REVERSAL and txn.reference_id
    }
    for txn in reversed(circle.transactions):
        if (
            txn.type == TransactionType.PAYOUT
            and txn.participant_id == participant_id
            and txn.id not in reversed_ids
        ):
            return txn
    return None

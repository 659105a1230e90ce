"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "1500"
    - "1500.50"
    - "1,500.50"
    - "1500 MT"
    - "MZN 1500"

    Sign is preserved; positivity is a business rule checked by the
    ledger, not here.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove currency markers
    cleaned = re.sub(r"(?i)mzn|mt|[$€£]", "", amount_str)

    # Remove thousands separators and whitespace
    cleaned = cleaned.replace(",", "").strip()

    try:
        return Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

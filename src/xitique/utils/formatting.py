"""Display formatting helpers."""

from decimal import Decimal

CURRENCY_SUFFIX = "MT"


def format_currency(amount: Decimal) -> str:
    """Format an amount in meticais, e.g. ``1,234.50 MT``."""
    return f"{amount:,.2f} {CURRENCY_SUFFIX}"

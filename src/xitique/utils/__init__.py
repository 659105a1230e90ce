"""Utility functions for xitique."""

from xitique.utils.date_parser import parse_date, add_period
from xitique.utils.amount_parser import parse_amount
from xitique.utils.formatting import format_currency

__all__ = ["parse_date", "add_period", "parse_amount", "format_currency"]

"""Tests for date and amount parsing utilities."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from xitique.domain.entities import Frequency
from xitique.utils.amount_parser import parse_amount
from xitique.utils.date_parser import add_period, days_between, parse_date
from xitique.utils.formatting import format_currency


def test_parse_absolute_dates():
    """Test parsing absolute date formats."""
    assert parse_date("2025-01-15") == date(2025, 1, 15)
    assert parse_date("January 15, 2025") == date(2025, 1, 15)


def test_parse_relative_dates():
    """Test parsing relative date keywords."""
    today = date.today()

    assert parse_date("today") == today
    assert parse_date("Yesterday") == today - timedelta(days=1)
    assert parse_date("tomorrow") == today + timedelta(days=1)
    assert parse_date("this month") == today.replace(day=1)
    assert parse_date("next week").weekday() == 0


def test_parse_invalid_date():
    """Test that garbage raises ValueError."""
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_add_period():
    """Test schedule arithmetic for each frequency."""
    start = date(2024, 1, 31)

    assert add_period(start, Frequency.DAILY, 0) == start
    assert add_period(start, Frequency.DAILY, 1) == date(2024, 2, 1)
    assert add_period(start, Frequency.WEEKLY, 4) == date(2024, 2, 28)
    assert add_period(start, Frequency.MONTHLY, 1) == date(2024, 2, 29)
    assert add_period(start, Frequency.MONTHLY, 2) == date(2024, 3, 31)


def test_days_between():
    """Test signed day differences."""
    assert days_between(date(2025, 1, 1), date(2025, 1, 8)) == 7
    assert days_between(date(2025, 1, 8), date(2025, 1, 1)) == -7


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1500", Decimal("1500")),
        ("1,500.50", Decimal("1500.50")),
        ("1500 MT", Decimal("1500")),
        ("MZN 250", Decimal("250")),
        ("-20", Decimal("-20")),
    ],
)
def test_parse_amount(text, expected):
    """Test parsing amounts with currency markers and separators."""
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc"])
def test_parse_amount_invalid(text):
    """Test that unparseable amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(text)


def test_format_currency():
    """Test meticais formatting."""
    assert format_currency(Decimal("1234.5")) == "1,234.50 MT"
    assert format_currency(Decimal("0")) == "0.00 MT"

"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from billtrack.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1500", Decimal("1500")),
        ("₱1,500.50", Decimal("1500.50")),
        ("$123.45", Decimal("123.45")),
        ("(123.45)", Decimal("-123.45")),
        (" 42 ", Decimal("42")),
    ],
)
def test_parse_amount(text, expected):
    """Test supported amount formats."""
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "Infinity"])
def test_parse_amount_invalid(text):
    """Test that non-amounts are rejected."""
    with pytest.raises(ValueError):
        parse_amount(text)

"""
Unit tests for the agent utilities module.
"""

from decimal import Decimal

from agent.utils import (
    format_currency,
    from_smallest_unit,
    percent_change,
    short_mint,
    to_smallest_unit,
)


class TestSmallestUnit:
    """Test conversions between whole units and base units."""

    def test_to_smallest_unit_sol(self):
        assert to_smallest_unit(Decimal("1.5"), 9) == 1_500_000_000

    def test_to_smallest_unit_rounds_down(self):
        assert to_smallest_unit(Decimal("1.2345679"), 6) == 1_234_567

    def test_to_smallest_unit_usdc(self):
        assert to_smallest_unit(Decimal("100"), 6) == 100_000_000

    def test_from_smallest_unit(self):
        assert from_smallest_unit(195_370_000, 6) == Decimal("195.37")

    def test_from_smallest_unit_string(self):
        assert from_smallest_unit("2500000000", 9) == Decimal("2.5")


class TestFormatCurrency:
    """Test the format_currency function."""

    def test_format_usd(self):
        result = format_currency(Decimal("1234.56"))
        assert result == "$1,234.56"

    def test_format_token(self):
        result = format_currency(Decimal("1.5"), "SOL")
        assert result == "1.5 SOL"

    def test_format_zero(self):
        result = format_currency(Decimal("0"))
        assert result == "$0.00"


class TestPercentChange:
    """Test the percent_change function."""

    def test_increase(self):
        assert percent_change(Decimal("103"), Decimal("100")) == Decimal("3")

    def test_decrease(self):
        assert percent_change(Decimal("97"), Decimal("100")) == Decimal("-3")


def test_short_mint():
    assert short_mint("So11111111111111111111111111111111111111112") == "So111111..."

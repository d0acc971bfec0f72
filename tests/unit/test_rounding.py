"""Tests for Decimal coercion and minor-unit rounding."""

from decimal import Decimal

import pytest

from stock_kernel.domain.rounding import round_minor, to_decimal


class TestToDecimal:
    def test_decimal_passthrough(self):
        value = Decimal("1.25")

        assert to_decimal(value) is value

    def test_float_goes_through_str(self):
        """1000.49 keeps its decimal digits, not its binary expansion."""
        assert to_decimal(1000.49) == Decimal("1000.49")

    def test_int_and_str(self):
        assert to_decimal(7) == Decimal("7")
        assert to_decimal("0.10") == Decimal("0.10")

    @pytest.mark.parametrize("value", ["abc", True, None])
    def test_invalid_rejected(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)


class TestRoundMinor:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1000.49", 1000),
            ("1000.5", 1001),
            ("199.6", 200),
            ("120.4", 120),
            ("-2.5", -3),
            ("-2.4", -2),
            (0, 0),
        ],
    )
    def test_half_away_from_zero(self, value, expected):
        assert round_minor(value) == expected

    def test_returns_int(self):
        assert isinstance(round_minor(Decimal("3.7")), int)

"""
Test suite for money module

Tests conversion of caller amounts to Decimal with minor-unit precision.
All monetary calculations must use Decimal precision.
"""

import pytest
from decimal import Decimal

from payment_system.errors import InvalidAmount
from payment_system.money import (
    format_amount, quantum, require_non_negative, require_positive, to_amount
)


class TestToAmount:
    """Test amount conversion"""

    def test_decimal_passthrough(self):
        """Test Decimal input keeps its value"""
        assert to_amount(Decimal('100.50')) == Decimal('100.50')

    def test_int_and_string(self):
        """Test ints and numeric strings are accepted"""
        assert to_amount(1000) == Decimal('1000.00')
        assert to_amount(" 12.3 ") == Decimal('12.30')

    def test_float_uses_shortest_repr(self):
        """Test floats do not carry binary noise into the amount"""
        assert to_amount(0.1) == Decimal('0.10')
        assert to_amount(1.25) == Decimal('1.25')

    def test_trailing_zeros_accepted(self):
        """Test extra zero places do not count as finer amounts"""
        assert to_amount("10.000") == Decimal('10.00')
        assert to_amount(Decimal('1E+3')) == Decimal('1000.00')
        assert to_amount("101.0", precision=0) == Decimal('101')

    @pytest.mark.parametrize("value", ["0.004", "0.005", "100.555", Decimal('0.001'), 1.005])
    def test_rejects_sub_minor_unit_amounts(self, value):
        """Test amounts finer than one minor unit are rejected, not rounded"""
        with pytest.raises(InvalidAmount, match="decimal places"):
            to_amount(value)

    def test_precision_is_configurable(self):
        """Test the precision argument sets the smallest accepted unit"""
        assert to_amount("0.125", precision=3) == Decimal('0.125')
        with pytest.raises(InvalidAmount):
            to_amount("100.7", precision=0)

    def test_quantum(self):
        """Test smallest unit per precision"""
        assert quantum(2) == Decimal('0.01')
        assert quantum(0) == Decimal('1')

    @pytest.mark.parametrize("value", [None, True, False, "", "abc", "NaN", "inf", float('inf'), [1]])
    def test_rejects_non_numbers(self, value):
        """Test anything that is not a finite number is rejected"""
        with pytest.raises(InvalidAmount):
            to_amount(value)

    def test_rejects_out_of_range(self):
        """Test values beyond Decimal context precision are rejected"""
        with pytest.raises(InvalidAmount, match="precision"):
            to_amount("1e40")


class TestAmountChecks:
    """Test sign checks"""

    def test_require_positive(self):
        assert require_positive(Decimal('0.01')) == Decimal('0.01')
        with pytest.raises(InvalidAmount):
            require_positive(Decimal('0'))

    def test_require_non_negative(self):
        assert require_non_negative(Decimal('0')) == Decimal('0')
        with pytest.raises(InvalidAmount) as exc_info:
            require_non_negative(Decimal('-1'))
        assert exc_info.value.amount == Decimal('-1')

    def test_format_amount(self):
        """Test display formatting"""
        assert format_amount(Decimal("1234567.5")) == "1,234,567.50"
        assert format_amount(Decimal("0.005")) == "0.01"

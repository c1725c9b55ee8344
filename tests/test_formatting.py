"""
Unit tests for display formatting helpers.
"""

import math

import pytest

from utils.formatting import (
    format_currency,
    format_percent,
    format_ratio,
    format_multiple,
    format_velocity,
    format_count,
)


class TestFormatting:
    """Test formatting of numbers for display"""

    def test_currency(self):
        assert format_currency(1234567.8) == "$1,234,568"
        assert format_currency(1234.5, decimals=2) == "$1,234.50"
        assert format_currency(-1500) == "-$1,500"

    def test_percent(self):
        assert format_percent(66.6666) == "66.7%"
        assert format_percent(1234.5, decimals=0) == "1,234%"

    def test_ratio(self):
        assert format_ratio(0.6667) == "66.7%"

    def test_multiple(self):
        assert format_multiple(1.2345) == "1.23x"

    def test_velocity(self):
        assert format_velocity(4.5) == "4.50%/mo"

    def test_count(self):
        assert format_count(12345) == "12,345"

    @pytest.mark.parametrize("formatter", [
        format_currency, format_percent, format_ratio,
        format_multiple, format_velocity, format_count,
    ])
    @pytest.mark.parametrize("value", [None, math.nan, "abc"])
    def test_missing_values_blank(self, formatter, value):
        assert formatter(value) == ""

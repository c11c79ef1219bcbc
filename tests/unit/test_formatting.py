"""Tests for credit and currency formatting."""

import pytest

from workflow_pricing.shared.errors import PreconditionViolation
from workflow_pricing.shared.formatting import (
    convert_currency,
    credits_to_currency,
    format_credits,
    format_currency,
    get_currency,
)


class TestCurrencyConversion:
    def test_credits_to_usd(self):
        assert credits_to_currency(250) == pytest.approx(2.5)
        assert credits_to_currency(250, credit_price=0.02) == pytest.approx(5.0)

    def test_convert_currency(self):
        assert convert_currency(10.0, "EUR") == pytest.approx(9.2)
        assert convert_currency(10.0, "usd") == 10.0

    def test_unsupported_currency(self):
        with pytest.raises(PreconditionViolation, match="XYZ"):
            get_currency("XYZ")


class TestFormatting:
    def test_format_usd(self):
        assert format_currency(1234.5) == "$1,234.50"

    def test_format_other_currencies(self):
        assert format_currency(100, "CAD") == "C$136.00"
        assert format_currency(1, "INR") == "₹83.12"
        assert format_currency(100, "EUR", decimals=0) == "€92"

    def test_format_infinity(self):
        assert format_currency(float("inf")) == "∞"

    def test_format_credits(self):
        assert format_credits(1.253) == "1.2530C"
        assert format_credits(10051.566, decimals=2) == "10,051.57C"

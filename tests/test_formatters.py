from __future__ import annotations

from datetime import date
from decimal import Decimal

from vat401.utils.formatters import format_roc_date, format_twd


class TestFormatTwd:
    def test_simple(self):
        assert format_twd("1000") == "NT$ 1,000"

    def test_large(self):
        assert format_twd("1234567") == "NT$ 1,234,567"

    def test_zero(self):
        assert format_twd("0") == "NT$ 0"

    def test_rounds(self):
        assert format_twd(Decimal("1499.6")) == "NT$ 1,500"

    def test_negative(self):
        assert format_twd(-2500) == "-NT$ 2,500"


class TestFormatRocDate:
    def test_simple(self):
        assert format_roc_date(date(2024, 1, 15)) == "113/01/15"

    def test_three_digit_padding(self):
        assert format_roc_date(date(2000, 12, 31)) == "089/12/31"

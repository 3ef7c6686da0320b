from __future__ import annotations

from datetime import date, timedelta

import pytest

from vat401.services.exceptions import InvalidPeriodError
from vat401.utils.period import (
    calculate_tax_period,
    format_year_month,
    iter_tax_periods,
    period_for_date,
    to_roc_year,
)


class TestCalculateTaxPeriod:
    def test_first_bi_month_leap_year(self):
        period = calculate_tax_period(2024, 1)
        assert period.year == 2024
        assert period.bi_month == 1
        assert period.start_date == date(2024, 1, 1)
        assert period.end_date == date(2024, 2, 29)

    def test_first_bi_month_common_year(self):
        assert calculate_tax_period(2023, 1).end_date == date(2023, 2, 28)
        assert calculate_tax_period(2025, 1).end_date == date(2025, 2, 28)

    def test_century_rule(self):
        assert calculate_tax_period(2000, 1).end_date == date(2000, 2, 29)
        assert calculate_tax_period(2100, 1).end_date == date(2100, 2, 28)

    def test_last_bi_month(self):
        period = calculate_tax_period(2024, 6)
        assert period.start_date == date(2024, 11, 1)
        assert period.end_date == date(2024, 12, 31)
        assert period.roc_year_month == "11312"

    @pytest.mark.parametrize(
        ("bi_month", "start", "end"),
        [
            (1, date(2024, 1, 1), date(2024, 2, 29)),
            (2, date(2024, 3, 1), date(2024, 4, 30)),
            (3, date(2024, 5, 1), date(2024, 6, 30)),
            (4, date(2024, 7, 1), date(2024, 8, 31)),
            (5, date(2024, 9, 1), date(2024, 10, 31)),
            (6, date(2024, 11, 1), date(2024, 12, 31)),
        ],
    )
    def test_all_bi_months(self, bi_month, start, end):
        period = calculate_tax_period(2024, bi_month)
        assert period.start_date == start
        assert period.end_date == end

    def test_period_code_uses_closing_month(self):
        assert calculate_tax_period(2024, 1).roc_year_month == "11302"

    @pytest.mark.parametrize("year", [2023, 2024])
    def test_periods_cover_year_without_gaps(self, year):
        periods = list(iter_tax_periods(year))
        assert len(periods) == 6
        assert periods[0].start_date == date(year, 1, 1)
        assert periods[-1].end_date == date(year, 12, 31)
        for prev, nxt in zip(periods, periods[1:]):
            assert nxt.start_date == prev.end_date + timedelta(days=1)

    @pytest.mark.parametrize("bi_month", [0, 7, -1, 1.5, True])
    def test_out_of_range_raises(self, bi_month):
        with pytest.raises(InvalidPeriodError) as exc_info:
            calculate_tax_period(2024, bi_month)
        assert exc_info.value.field == "bi_month"

    def test_invalid_period_is_value_error(self):
        with pytest.raises(ValueError, match="between 1 and 6"):
            calculate_tax_period(2024, 13)

    def test_contains(self):
        period = calculate_tax_period(2024, 2)
        assert period.contains(date(2024, 3, 1))
        assert period.contains(date(2024, 4, 30))
        assert not period.contains(date(2024, 5, 1))
        assert period.start_month == 3
        assert period.end_month == 4


class TestRocYear:
    def test_current(self):
        assert to_roc_year(2024) == 113

    def test_first_year(self):
        assert to_roc_year(1912) == 1


class TestFormatYearMonth:
    def test_december(self):
        assert format_year_month(2024, 12) == "11312"

    def test_pads_month(self):
        assert format_year_month(2024, 1) == "11301"

    def test_pads_roc_year(self):
        assert format_year_month(1999, 6) == "08806"

    def test_next_year(self):
        assert format_year_month(2025, 6) == "11406"

    def test_bad_month(self):
        with pytest.raises(InvalidPeriodError):
            format_year_month(2024, 13)

    def test_year_before_roc(self):
        with pytest.raises(InvalidPeriodError):
            format_year_month(1911, 1)


class TestPeriodForDate:
    def test_odd_month(self):
        assert period_for_date(date(2024, 3, 10)).bi_month == 2

    def test_even_month(self):
        assert period_for_date(date(2024, 12, 31)).bi_month == 6

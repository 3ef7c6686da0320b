from __future__ import annotations

import calendar
from collections.abc import Iterator
from datetime import date

from vat401.models.period import TaxPeriod
from vat401.services.exceptions import InvalidPeriodError

ROC_EPOCH = 1911


def to_roc_year(year: int) -> int:
    """Convert a Gregorian year to the Republic of China calendar year."""
    return year - ROC_EPOCH


def format_year_month(year: int, month: int) -> str:
    """Format a Gregorian year/month as 5 digits: ROC year (3) + month (2).

    Example: 2024-12 -> "11312"
    """
    if not 1 <= month <= 12:
        raise InvalidPeriodError(f"Month must be between 1 and 12, got {month}", field="month")
    roc_year = to_roc_year(year)
    if not 1 <= roc_year <= 999:
        raise InvalidPeriodError(f"Year {year} has no 3-digit ROC year", field="year")
    return f"{roc_year:03d}{month:02d}"


def calculate_tax_period(year: int, bi_month: int) -> TaxPeriod:
    """Return the filing window for bi-month 1-6 of *year*.

    Bi-month n covers months 2n-1 and 2n; the period code is that of the
    closing month.
    """
    if isinstance(bi_month, bool) or not isinstance(bi_month, int) or not 1 <= bi_month <= 6:
        raise InvalidPeriodError(
            f"bi_month must be between 1 and 6, got {bi_month!r}", field="bi_month"
        )
    start_month = 2 * bi_month - 1
    end_month = 2 * bi_month
    last_day = calendar.monthrange(year, end_month)[1]
    return TaxPeriod(
        year=year,
        bi_month=bi_month,
        start_date=date(year, start_month, 1),
        end_date=date(year, end_month, last_day),
        roc_year_month=format_year_month(year, end_month),
    )


def iter_tax_periods(year: int) -> Iterator[TaxPeriod]:
    """Yield the six filing periods of *year* in order."""
    for bi_month in range(1, 7):
        yield calculate_tax_period(year, bi_month)


def period_for_date(d: date) -> TaxPeriod:
    return calculate_tax_period(d.year, (d.month + 1) // 2)

from __future__ import annotations

from datetime import date
from decimal import Decimal

from vat401.utils.period import to_roc_year


def format_twd(value: Decimal | int | str) -> str:
    """Format an amount as NT$ X,XXX (whole dollars)."""
    d = Decimal(str(value))
    sign = "-" if d < 0 else ""
    return f"{sign}NT$ {abs(d):,.0f}"


def format_roc_date(d: date) -> str:
    """Format a date in the ROC calendar, e.g. 2024-01-15 -> 113/01/15."""
    return f"{to_roc_year(d.year):03d}/{d.month:02d}/{d.day:02d}"

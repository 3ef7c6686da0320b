from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class TaxPeriod:
    """A bi-monthly filing window (Jan-Feb, Mar-Apr, ..., Nov-Dec)."""

    year: int
    bi_month: int
    start_date: date
    end_date: date
    roc_year_month: str  # ROC year + closing month, e.g. "11302"

    @property
    def start_month(self) -> int:
        return self.start_date.month

    @property
    def end_month(self) -> int:
        return self.end_date.month

    def contains(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from vat401.models.tax_code import TaxCategory


class Direction(Enum):
    OUTPUT = "OUTPUT"  # sales
    INPUT = "INPUT"  # purchases


@dataclass(frozen=True)
class InvoiceDetail:
    """One classified invoice as the filing core sees it.

    total_amount is expected to equal untaxed_amount + tax_amount; the core
    never re-derives it.
    """

    invoice_id: str
    invoice_number: str
    date: date
    counterparty_tax_id: str | None
    untaxed_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    tax_category: TaxCategory
    is_deductible: bool
    is_fixed_asset: bool
    direction: Direction
    counterparty_name: str = ""
    is_summary: bool = False

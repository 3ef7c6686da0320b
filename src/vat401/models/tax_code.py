from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class TaxType(Enum):
    """Tax treatment carried by a tax code."""

    TAXABLE = "TAXABLE"
    ZERO_RATED = "ZERO_RATED"
    EXEMPT = "EXEMPT"


class TaxCategory(Enum):
    """Statutory category of an invoice on the 401 return."""

    TAXABLE_5 = "TAXABLE_5"
    ZERO_RATED = "ZERO_RATED"
    EXEMPT = "EXEMPT"
    NON_TAXABLE = "NON_TAXABLE"  # no tax code assigned yet


@dataclass(frozen=True)
class TaxCode:
    """A resolved entry of the company's tax-code table."""

    code: str
    tax_type: TaxType
    is_deductible: bool = True
    tax_rate: Decimal = Decimal("0")
    name: str = ""

    @classmethod
    def from_dict(cls, code: str, d: dict) -> TaxCode:
        """Create a TaxCode from a YAML-loaded dict keyed by *code*."""
        tax_type = TaxType(str(d["tax_type"]).upper())
        default_rate = "0.05" if tax_type is TaxType.TAXABLE else "0"
        return cls(
            code=code,
            tax_type=tax_type,
            is_deductible=bool(d.get("is_deductible", True)),
            tax_rate=Decimal(str(d.get("tax_rate", default_rate))),
            name=d.get("name", ""),
        )

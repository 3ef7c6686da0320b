from __future__ import annotations

from dataclasses import dataclass

from vat401.models.media import InvoiceFormat


@dataclass(frozen=True)
class CompanyProfile:
    """The business entity filing the return."""

    tax_id: str  # 8-digit unified business number
    name: str
    branch_code: str = "0"  # 0 = head office
    invoice_format: InvoiceFormat = InvoiceFormat.E_INVOICE

    @classmethod
    def from_dict(cls, d: dict) -> CompanyProfile:
        """Create a CompanyProfile from a YAML-loaded dict, applying defaults."""
        return cls(
            tax_id=str(d["tax_id"]).zfill(8),
            name=d["name"],
            branch_code=str(d.get("branch_code", "0")),
            invoice_format=InvoiceFormat(str(d.get("invoice_format", "E_INVOICE")).upper()),
        )

    @property
    def tax_registration_number(self) -> str:
        return self.tax_id + self.branch_code

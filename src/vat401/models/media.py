from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class InvoiceFormat(Enum):
    E_INVOICE = "E_INVOICE"
    THREE_COPY = "THREE_COPY"


@dataclass(frozen=True)
class MediaFileOptions:
    """Scope of one encoding run.

    tax_registration_number is the 8-digit unified business number. A 9-digit
    value is taken as number + branch code and overrides branch_code.
    """

    tax_registration_number: str
    year: int
    bi_month: int
    invoice_format: InvoiceFormat = InvoiceFormat.E_INVOICE
    branch_code: str = "0"

    @property
    def business_id(self) -> str:
        return self.tax_registration_number[:8]

    @property
    def registration_field(self) -> str:
        """The 9-character registration value written to every record.

        Values that are neither 8 nor 9 characters are returned unchanged so
        the encoder rejects them.
        """
        if len(self.tax_registration_number) == 8:
            return self.tax_registration_number + self.branch_code[:1]
        return self.tax_registration_number


@dataclass(frozen=True)
class MediaFileResult:
    content: str
    record_count: int
    output_count: int
    input_count: int
    output_amount: Decimal
    input_amount: Decimal
    output_tax: Decimal
    input_tax: Decimal
    net_tax: Decimal
    is_refund: bool

    def to_bytes(self) -> bytes:
        """Return the content as the ASCII byte sequence handed to the authority."""
        return self.content.encode("ascii")

    def to_dict(self) -> dict:
        return {
            "record_count": self.record_count,
            "output_count": self.output_count,
            "input_count": self.input_count,
            "output_amount": str(self.output_amount),
            "input_amount": str(self.input_amount),
            "output_tax": str(self.output_tax),
            "input_tax": str(self.input_tax),
            "net_tax": str(self.net_tax),
            "is_refund": self.is_refund,
        }


@dataclass(frozen=True)
class MediaValidationResult:
    valid: bool
    record_count: int
    errors: tuple[str, ...] = ()

"""Encoder for one record of the 401 media file (營業稅離線建檔 format).

Every record is RECORD_LENGTH ASCII characters with no line separator:

    pos    len  field
    1-2     2   format code (direction x invoice format)
    3-11    9   tax registration number (business id 8 + branch code 1)
    12-18   7   sequence number, from 0000001
    19-23   5   period: ROC year (3) + closing month of the bi-month (2)
    24-31   8   buyer tax id
    32-39   8   seller tax id
    40-49  10   invoice number, separators removed
    50-61  12   sales amount (untaxed)
    62      1   tax type code
    63-72  10   tax amount
    73      1   deduction code (purchases only)
    74      1   summary mark: "A" for summarised entries
    75      1   customs clearance mark (zero-rated only)
    76-81   6   reserved

RECORD_LENGTH and the field widths change together or not at all.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from vat401.models.invoice import Direction, InvoiceDetail
from vat401.models.media import InvoiceFormat, MediaFileOptions
from vat401.models.tax_code import TaxCategory
from vat401.services.classifier import deduction_code, tax_type_code
from vat401.services.exceptions import MediaEncodingError
from vat401.utils.period import calculate_tax_period

RECORD_LENGTH = 81

REGISTRATION_WIDTH = 9
SEQUENCE_WIDTH = 7
TAX_ID_WIDTH = 8
INVOICE_NUMBER_WIDTH = 10
AMOUNT_WIDTH = 12
TAX_WIDTH = 10
RESERVED_WIDTH = 6

MAX_SEQUENCE = 10**SEQUENCE_WIDTH - 1

# Authority catalogue of format codes; only E_INVOICE and THREE_COPY are emitted.
FORMAT_CODES = {
    Direction.INPUT: {
        "THREE_COPY": "21",
        "TWO_COPY": "22",
        "THREE_COPY_RETURN": "23",
        "TWO_COPY_RETURN": "24",
        "E_INVOICE": "25",
        "SUMMARY_THREE": "26",
        "SUMMARY_TWO": "27",
        "CUSTOMS": "28",
        "CUSTOMS_REFUND": "29",
    },
    Direction.OUTPUT: {
        "THREE_COPY": "31",
        "TWO_COPY": "32",
        "THREE_COPY_RETURN": "33",
        "TWO_COPY_RETURN": "34",
        "E_INVOICE": "35",
        "NO_INVOICE": "36",
        "SPECIAL": "37",
        "SPECIAL_RETURN": "38",
    },
}

VALID_FORMAT_CODES = frozenset(
    code for codes in FORMAT_CODES.values() for code in codes.values()
)

_SEPARATORS = re.compile(r"[-\s]")
_DIGITS = re.compile(r"\d+")


def format_code(direction: Direction, invoice_format: InvoiceFormat) -> str:
    try:
        return FORMAT_CODES[direction][invoice_format.name]
    except (KeyError, AttributeError):
        raise MediaEncodingError(
            f"No format code for {direction} / {invoice_format}", field="invoice_format"
        ) from None


def pad_number(value: Decimal | int | float, width: int, field: str = "amount") -> str:
    """Right-align a non-negative amount, rounded half-up to a whole unit, zero-padded."""
    try:
        d = Decimal(str(value))
        if not d.is_finite():
            raise InvalidOperation
    except InvalidOperation:
        raise MediaEncodingError(f"{field}: not a number: {value!r}", field=field) from None
    if d < 0:
        raise MediaEncodingError(f"{field}: negative amount {value}", field=field)
    digits = str(int(d.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))
    if len(digits) > width:
        raise MediaEncodingError(f"{field}: {value} exceeds {width} digits", field=field)
    return digits.zfill(width)


def pad_text(value: str | None, width: int, field: str = "text") -> str:
    """Left-align text, space-padded or truncated to *width*. None renders as spaces."""
    text = (value or "")[:width]
    if not text.isascii():
        raise MediaEncodingError(f"{field}: non-ASCII text {value!r}", field=field)
    return text.ljust(width)


def clean_invoice_number(invoice_number: str | None) -> str:
    """AB-12345678 -> AB12345678"""
    return _SEPARATORS.sub("", invoice_number or "")


def generate_media_line(
    invoice: InvoiceDetail,
    options: MediaFileOptions,
    sequence_number: int,
) -> str:
    """Encode *invoice* as one RECORD_LENGTH-character media record."""
    registration = options.registration_field
    if len(registration) != REGISTRATION_WIDTH or not _DIGITS.fullmatch(registration):
        raise MediaEncodingError(
            f"Tax registration number must be 8 digits plus a branch digit, got "
            f"'{options.tax_registration_number}'",
            field="tax_registration_number",
        )
    if not 1 <= sequence_number <= MAX_SEQUENCE:
        raise MediaEncodingError(
            f"Sequence number out of range: {sequence_number}", field="sequence_number"
        )

    period_code = calculate_tax_period(options.year, options.bi_month).roc_year_month

    own_id = pad_text(options.business_id, TAX_ID_WIDTH, "tax_registration_number")
    counterparty = pad_text(invoice.counterparty_tax_id, TAX_ID_WIDTH, "counterparty_tax_id")
    if invoice.direction is Direction.INPUT:
        buyer, seller = own_id, counterparty
        deduction = deduction_code(invoice.is_deductible, invoice.is_fixed_asset)
    else:
        buyer, seller = counterparty, own_id
        deduction = " "

    line = "".join(
        [
            format_code(invoice.direction, options.invoice_format),
            registration,
            pad_number(sequence_number, SEQUENCE_WIDTH, "sequence_number"),
            period_code,
            buyer,
            seller,
            pad_text(
                clean_invoice_number(invoice.invoice_number),
                INVOICE_NUMBER_WIDTH,
                "invoice_number",
            ),
            pad_number(invoice.untaxed_amount, AMOUNT_WIDTH, "untaxed_amount"),
            tax_type_code(invoice.tax_category),
            pad_number(invoice.tax_amount, TAX_WIDTH, "tax_amount"),
            deduction,
            "A" if invoice.is_summary else " ",
            "1" if invoice.tax_category is TaxCategory.ZERO_RATED else " ",
            " " * RESERVED_WIDTH,
        ]
    )

    if len(line) != RECORD_LENGTH:
        raise MediaEncodingError(
            f"Record length {len(line)} != {RECORD_LENGTH} for invoice {invoice.invoice_number}"
        )
    return line

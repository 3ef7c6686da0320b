from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from vat401.models.invoice import Direction, InvoiceDetail
from vat401.models.media import MediaFileOptions, MediaFileResult, MediaValidationResult
from vat401.models.report import ZERO
from vat401.services.aggregator import counts_as_input_tax, counts_as_output_tax, tax_amounts
from vat401.services.exceptions import MediaEncodingError
from vat401.services.media_encoder import (
    RECORD_LENGTH,
    SEQUENCE_WIDTH,
    VALID_FORMAT_CODES,
    generate_media_line,
)

logger = logging.getLogger(__name__)

_SEQUENCE_SLICE = slice(11, 11 + SEQUENCE_WIDTH)


def order_for_filing(
    sales_invoices: Iterable[InvoiceDetail],
    purchase_invoices: Iterable[InvoiceDetail],
) -> list[InvoiceDetail]:
    """Sales first, then purchases, each in invoice-date order (stable)."""
    return sorted(sales_invoices, key=lambda inv: inv.date) + sorted(
        purchase_invoices, key=lambda inv: inv.date
    )


def generate_media_file(
    invoices: Iterable[InvoiceDetail],
    options: MediaFileOptions,
) -> MediaFileResult:
    """Encode *invoices* in the given order and total them in the same pass.

    Record order is kept verbatim; sequence numbers follow it from 1.
    """
    records: list[str] = []
    output_count = input_count = 0
    output_amount = input_amount = ZERO
    output_tax = input_tax = ZERO

    for sequence_number, invoice in enumerate(invoices, start=1):
        records.append(generate_media_line(invoice, options, sequence_number))
        if invoice.direction is Direction.OUTPUT:
            output_count += 1
            output_amount += invoice.untaxed_amount
            if counts_as_output_tax(invoice):
                output_tax += invoice.tax_amount
        else:
            input_count += 1
            input_amount += invoice.untaxed_amount
            if counts_as_input_tax(invoice):
                input_tax += invoice.tax_amount

    content = "".join(records)
    record_count = len(records)
    if len(content) != record_count * RECORD_LENGTH:
        raise MediaEncodingError(
            f"Media content is {len(content)} characters for {record_count} records"
        )

    amounts = tax_amounts(output_tax, input_tax)
    logger.debug(
        "Media file for %s/%s: %d records (%d output, %d input)",
        options.year,
        options.bi_month,
        record_count,
        output_count,
        input_count,
    )
    return MediaFileResult(
        content=content,
        record_count=record_count,
        output_count=output_count,
        input_count=input_count,
        output_amount=output_amount,
        input_amount=input_amount,
        output_tax=amounts.output_tax,
        input_tax=amounts.input_tax,
        net_tax=amounts.net_tax,
        is_refund=amounts.is_refund,
    )


def iter_records(content: str) -> Iterator[str]:
    """Split media content into RECORD_LENGTH-character records (a short tail included)."""
    for start in range(0, len(content), RECORD_LENGTH):
        yield content[start : start + RECORD_LENGTH]


def validate_media_file(content: str | bytes, strict: bool = False) -> MediaValidationResult:
    """Check that *content* is a whole number of records.

    With strict=True each record's format code and sequence number are
    checked as well. Problems are reported in the result, never raised.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("ascii")
        except UnicodeDecodeError as e:
            return MediaValidationResult(
                valid=False,
                record_count=0,
                errors=(f"Content is not ASCII (byte {e.start})",),
            )

    if not content:
        return MediaValidationResult(valid=True, record_count=0)

    errors: list[str] = []
    if len(content) % RECORD_LENGTH != 0:
        errors.append(
            f"File length {len(content)} is not a multiple of the {RECORD_LENGTH}-byte record"
        )
    record_count = len(content) // RECORD_LENGTH

    if strict:
        for index in range(record_count):
            record = content[index * RECORD_LENGTH : (index + 1) * RECORD_LENGTH]
            code = record[:2]
            if code not in VALID_FORMAT_CODES:
                errors.append(f"Record {index + 1}: unknown format code '{code}'")
            expected = str(index + 1).zfill(SEQUENCE_WIDTH)
            actual = record[_SEQUENCE_SLICE]
            if actual != expected:
                errors.append(
                    f"Record {index + 1}: sequence number '{actual}', expected '{expected}'"
                )

    return MediaValidationResult(
        valid=not errors,
        record_count=record_count,
        errors=tuple(errors),
    )

"""Filing run: turn raw invoice rows into a Form 401 summary and a media file.

This is the boundary between loosely typed rows (YAML/JSON exports, DB
rows) and the strictly typed filing core.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from vat401.config import get_output_dir, load_company, load_tax_codes
from vat401.models.company import CompanyProfile
from vat401.models.invoice import Direction, InvoiceDetail
from vat401.models.media import MediaFileOptions, MediaFileResult
from vat401.models.period import TaxPeriod
from vat401.models.report import Form401Summary, Form403Summary
from vat401.models.tax_code import TaxCategory
from vat401.services.aggregator import build_form401, build_form403
from vat401.services.classifier import (
    TaxCodeProvider,
    determine_tax_category,
    is_deductible,
    resolve_tax_code,
)
from vat401.services.exceptions import MediaEncodingError
from vat401.services.media_file import generate_media_file, order_for_filing, validate_media_file
from vat401.utils.period import calculate_tax_period
from vat401.utils.validators import (
    validate_date,
    validate_invoice_number,
    validate_monetary,
    validate_tax_id,
    validate_tax_registration_number,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedFiling:
    """Everything produced by one filing run."""

    company: CompanyProfile
    period: TaxPeriod
    options: MediaFileOptions
    sales: tuple[InvoiceDetail, ...]
    purchases: tuple[InvoiceDetail, ...]
    form401: Form401Summary
    form403: Form403Summary
    media: MediaFileResult

    @property
    def filename(self) -> str:
        return f"{self.company.tax_id}.TXT"


def load_invoice_rows(path: Path) -> list[dict[str, Any]]:
    """Read invoice rows from a YAML or JSON file (a list, or {"invoices": [...]})."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or []
    if isinstance(data, dict):
        data = data.get("invoices", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of invoices")
    return data


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def invoice_from_row(row: dict[str, Any], tax_codes: TaxCodeProvider) -> InvoiceDetail:
    """Translate one loosely typed invoice row into an InvoiceDetail.

    Raises ValueError (or UnknownTaxCodeError) naming the offending field.
    """
    number = row.get("number") or row.get("invoice_number")
    direction = Direction(str(row["direction"]).upper())
    invoice_number = validate_invoice_number(number)

    counterparty = row.get("counterparty_tax_id")
    counterparty_tax_id = validate_tax_id(counterparty) if counterparty else None

    untaxed = validate_monetary(row.get("untaxed_amount", 0))
    tax = validate_monetary(row.get("tax_amount", 0))
    total = row.get("total_amount")
    total_amount = validate_monetary(total) if total is not None else untaxed + tax

    tax_code = resolve_tax_code(tax_codes, row.get("tax_code"))
    return InvoiceDetail(
        invoice_id=str(row.get("id") or invoice_number),
        invoice_number=invoice_number,
        date=validate_date(row["date"]),
        counterparty_tax_id=counterparty_tax_id,
        untaxed_amount=untaxed,
        tax_amount=tax,
        total_amount=total_amount,
        tax_category=determine_tax_category(tax_code),
        is_deductible=is_deductible(tax_code),
        is_fixed_asset=_flag(row.get("is_fixed_asset", False)),
        direction=direction,
        counterparty_name=str(row.get("counterparty_name") or ""),
        is_summary=_flag(row.get("is_summary", False)),
    )


def _split_by_direction(
    invoices: Iterable[InvoiceDetail],
) -> tuple[list[InvoiceDetail], list[InvoiceDetail]]:
    sales: list[InvoiceDetail] = []
    purchases: list[InvoiceDetail] = []
    for inv in invoices:
        (sales if inv.direction is Direction.OUTPUT else purchases).append(inv)
    return sales, purchases


def prepare_filing(
    rows: Iterable[dict[str, Any]],
    year: int,
    bi_month: int,
    company: CompanyProfile | None = None,
    tax_codes: TaxCodeProvider | None = None,
    skip_out_of_period: bool = False,
) -> PreparedFiling:
    """Classify, aggregate and encode one period's invoices.

    Rows dated outside the period raise ValueError unless skip_out_of_period
    is set, in which case they are logged and left out.
    """
    if company is None:
        company = load_company()
    if tax_codes is None:
        tax_codes = load_tax_codes()
    validate_tax_registration_number(company.tax_registration_number)
    period = calculate_tax_period(year, bi_month)

    invoices: list[InvoiceDetail] = []
    for index, row in enumerate(rows, start=1):
        try:
            inv = invoice_from_row(row, tax_codes)
        except (KeyError, ValueError) as e:
            raise ValueError(f"Invoice row {index}: {e}") from e
        if not period.contains(inv.date):
            if not skip_out_of_period:
                raise ValueError(
                    f"Invoice {inv.invoice_number} dated {inv.date} is outside "
                    f"{period.start_date}..{period.end_date}"
                )
            logger.warning("Skipping %s: dated %s, outside period", inv.invoice_number, inv.date)
            continue
        invoices.append(inv)

    sales, purchases = _split_by_direction(invoices)
    form401 = build_form401(sales, purchases, period, company)
    form403 = build_form403(sales, period, company)

    unclassified = [
        inv.invoice_number for inv in invoices if inv.tax_category is TaxCategory.NON_TAXABLE
    ]
    if unclassified:
        logger.warning("%d invoice(s) without a tax code", len(unclassified))
        raise MediaEncodingError(
            f"Invoices without a tax code cannot be filed: {', '.join(unclassified)}",
            field="tax_code",
        )

    options = MediaFileOptions(
        tax_registration_number=company.tax_id,
        year=year,
        bi_month=bi_month,
        invoice_format=company.invoice_format,
        branch_code=company.branch_code,
    )
    media = generate_media_file(order_for_filing(sales, purchases), options)

    return PreparedFiling(
        company=company,
        period=period,
        options=options,
        sales=tuple(sales),
        purchases=tuple(purchases),
        form401=form401,
        form403=form403,
        media=media,
    )


def save_media_file(filing: PreparedFiling, out_dir: Path | None = None) -> Path:
    """Validate and write the media file as <tax_id>.TXT (atomic write)."""
    result = validate_media_file(filing.media.content, strict=True)
    if not result.valid:
        raise ValueError("Media file failed validation: " + "; ".join(result.errors))

    out_dir = Path(out_dir) if out_dir is not None else get_output_dir()
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / filing.filename
    tmp = path.with_suffix(".tmp")
    tmp.write_bytes(filing.media.to_bytes())
    os.replace(tmp, path)
    logger.info("Wrote %d records to %s", filing.media.record_count, path)
    return path

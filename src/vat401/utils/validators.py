from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

MIN_YEAR = 2000
MAX_YEAR = 2100


def validate_tax_id(value: str) -> str:
    """Validate a unified business number: exactly 8 digits."""
    value = str(value).strip()
    if not re.fullmatch(r"\d{8}", value):
        raise ValueError(f"Tax id must be 8 digits: '{value}'")
    return value


def validate_tax_registration_number(value: str) -> str:
    """Validate a tax registration number: 8 digits, optionally followed by a branch digit."""
    value = str(value).strip()
    if not re.fullmatch(r"\d{8,9}", value):
        raise ValueError(f"Tax registration number must be 8 or 9 digits: '{value}'")
    return value


def validate_invoice_number(value: str) -> str:
    """Validate a uniform invoice number: 2 letters + 8 digits, separators allowed.

    Returns the value with separators removed.
    """
    cleaned = re.sub(r"[-\s]", "", str(value or ""))
    if not re.fullmatch(r"[A-Z]{2}\d{8}", cleaned):
        raise ValueError(f"Invalid invoice number: '{value}'. Use AB-12345678.")
    return cleaned


def validate_monetary(value: object) -> Decimal:
    """Parse a non-negative monetary amount.

    Raises ValueError for non-numeric or negative values.
    """
    try:
        d = Decimal(str(value).replace(",", ""))
        if not d.is_finite():
            raise InvalidOperation
    except InvalidOperation:
        raise ValueError(f"Invalid amount: '{value}'") from None
    if d < 0:
        raise ValueError(f"Amount must not be negative: '{value}'")
    return d


def validate_date(value: object) -> date:
    """Accept a date or an ISO date string (YYYY-MM-DD)."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f"Invalid date: '{value}'. Use YYYY-MM-DD.") from None


def validate_year(value: object) -> int:
    try:
        year = int(str(value))
    except ValueError:
        raise ValueError(f"Invalid year: '{value}'") from None
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}")
    return year


def validate_bi_month(value: object) -> int:
    try:
        bi_month = int(str(value))
    except ValueError:
        raise ValueError(f"Invalid bi-month: '{value}'") from None
    if not 1 <= bi_month <= 6:
        raise ValueError("Bi-month must be between 1 and 6")
    return bi_month

"""Tax classification of invoices for the 401 return.

Tax codes are resolved by the caller (or through an injected
TaxCodeProvider) and passed in explicitly; nothing here looks them up on
its own.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from vat401.models.tax_code import TaxCategory, TaxCode, TaxType
from vat401.services.exceptions import MediaEncodingError, UnknownTaxCodeError

_CATEGORY_BY_TAX_TYPE = {
    TaxType.TAXABLE: TaxCategory.TAXABLE_5,
    TaxType.ZERO_RATED: TaxCategory.ZERO_RATED,
    TaxType.EXEMPT: TaxCategory.EXEMPT,
}

# 課稅別 (tax type) field of the media record
TAX_TYPE_CODES = {
    TaxCategory.TAXABLE_5: "1",
    TaxCategory.ZERO_RATED: "2",
    TaxCategory.EXEMPT: "3",
}

# 扣抵代號 (deduction code), keyed by (is_deductible, is_fixed_asset)
DEDUCTION_CODES = {
    (True, False): "1",
    (False, False): "2",
    (True, True): "3",
    (False, True): "4",
}


class TaxCodeProvider(Protocol):
    def get(self, code: str) -> TaxCode | None: ...


class MappingTaxCodeProvider:
    """TaxCodeProvider backed by an in-memory table."""

    def __init__(self, codes: Mapping[str, TaxCode]) -> None:
        self._codes = dict(codes)

    def get(self, code: str) -> TaxCode | None:
        return self._codes.get(code)

    def codes(self) -> list[str]:
        return sorted(self._codes)

    def __len__(self) -> int:
        return len(self._codes)


def resolve_tax_code(provider: TaxCodeProvider, code: str | None) -> TaxCode | None:
    """Look up *code*; a blank code means "not classified yet" and yields None."""
    if code is None or not str(code).strip():
        return None
    tax_code = provider.get(str(code).strip())
    if tax_code is None:
        raise UnknownTaxCodeError(f"Unknown tax code: '{code}'", field="tax_code")
    return tax_code


def determine_tax_category(tax_code: TaxCode | None) -> TaxCategory:
    if tax_code is None:
        return TaxCategory.NON_TAXABLE
    return _CATEGORY_BY_TAX_TYPE[tax_code.tax_type]


def is_deductible(tax_code: TaxCode | None) -> bool:
    """Unclassified purchases are presumed deductible until flagged otherwise."""
    if tax_code is None:
        return True
    return tax_code.is_deductible


def deduction_code(is_deductible: bool, is_fixed_asset: bool) -> str:
    return DEDUCTION_CODES[(bool(is_deductible), bool(is_fixed_asset))]


def tax_type_code(category: TaxCategory) -> str:
    """Return the media-record tax type code. NON_TAXABLE has none."""
    try:
        return TAX_TYPE_CODES[category]
    except KeyError:
        raise MediaEncodingError(
            f"Tax category {category.name} has no tax type code; assign a tax code first",
            field="tax_category",
        ) from None

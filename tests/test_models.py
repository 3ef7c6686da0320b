from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from vat401.models.company import CompanyProfile
from vat401.models.media import InvoiceFormat, MediaFileOptions, MediaFileResult
from vat401.models.tax_code import TaxCode, TaxType
from vat401.utils.period import calculate_tax_period

# --- CompanyProfile ---


class TestCompanyProfile:
    def test_from_dict(self, company_dict):
        c = CompanyProfile.from_dict(company_dict)
        assert c.tax_id == "12345678"
        assert c.name == "Example Trading Co., Ltd."
        assert c.invoice_format is InvoiceFormat.E_INVOICE

    def test_from_dict_defaults(self):
        c = CompanyProfile.from_dict({"tax_id": "12345678", "name": "X"})
        assert c.branch_code == "0"
        assert c.invoice_format is InvoiceFormat.E_INVOICE

    def test_from_dict_pads_numeric_tax_id(self):
        # YAML reads an unquoted 01234567 as an int and drops the leading zero.
        c = CompanyProfile.from_dict({"tax_id": 1234567, "name": "X"})
        assert c.tax_id == "01234567"

    def test_from_dict_lowercase_format(self):
        c = CompanyProfile.from_dict(
            {"tax_id": "12345678", "name": "X", "invoice_format": "three_copy"}
        )
        assert c.invoice_format is InvoiceFormat.THREE_COPY

    def test_from_dict_missing_name(self):
        with pytest.raises(KeyError):
            CompanyProfile.from_dict({"tax_id": "12345678"})

    def test_from_dict_bad_format(self):
        with pytest.raises(ValueError):
            CompanyProfile.from_dict({"tax_id": "12345678", "name": "X", "invoice_format": "PAPER"})

    def test_tax_registration_number(self, company):
        assert company.tax_registration_number == "123456780"


# --- TaxCode ---


class TestTaxCode:
    def test_from_dict(self):
        code = TaxCode.from_dict("TX5", {"name": "Taxable", "tax_type": "taxable"})
        assert code.code == "TX5"
        assert code.tax_type is TaxType.TAXABLE
        assert code.is_deductible is True
        assert code.tax_rate == Decimal("0.05")
        assert code.name == "Taxable"

    def test_from_dict_zero_rated_default_rate(self):
        code = TaxCode.from_dict("TX0", {"tax_type": "ZERO_RATED"})
        assert code.tax_rate == Decimal("0")

    def test_from_dict_non_deductible(self):
        code = TaxCode.from_dict("EXE", {"tax_type": "EXEMPT", "is_deductible": False})
        assert code.is_deductible is False

    def test_from_dict_unknown_type(self):
        with pytest.raises(ValueError):
            TaxCode.from_dict("X", {"tax_type": "LUXURY"})


# --- Media ---


class TestMediaFileOptions:
    def test_registration_field_appends_branch(self, options):
        assert options.registration_field == "123456780"
        assert options.business_id == "12345678"

    def test_registration_field_nine_digits(self):
        opts = MediaFileOptions("123456783", 2024, 1, branch_code="5")
        assert opts.registration_field == "123456783"
        assert opts.business_id == "12345678"

    def test_registration_field_too_long_unchanged(self):
        opts = MediaFileOptions("1234567890", 2024, 1)
        assert opts.registration_field == "1234567890"

    def test_frozen(self, options):
        with pytest.raises(AttributeError):
            options.year = 2025  # type: ignore[misc]


class TestMediaFileResult:
    def _result(self, content: str) -> MediaFileResult:
        return MediaFileResult(
            content=content,
            record_count=0,
            output_count=0,
            input_count=0,
            output_amount=Decimal("0"),
            input_amount=Decimal("0"),
            output_tax=Decimal("0"),
            input_tax=Decimal("0"),
            net_tax=Decimal("0"),
            is_refund=False,
        )

    def test_to_bytes_ascii(self):
        assert self._result("35 ").to_bytes() == b"35 "

    def test_to_bytes_rejects_non_ascii(self):
        with pytest.raises(UnicodeEncodeError):
            self._result("測").to_bytes()

    def test_to_dict_amounts_are_strings(self):
        d = self._result("").to_dict()
        assert d["net_tax"] == "0"
        assert d["is_refund"] is False


# --- TaxPeriod ---


class TestTaxPeriod:
    def test_contains(self):
        period = calculate_tax_period(2024, 1)
        assert period.contains(date(2024, 1, 1))
        assert period.contains(date(2024, 2, 29))
        assert not period.contains(date(2024, 3, 1))
        assert not period.contains(date(2023, 12, 31))

    def test_months(self):
        period = calculate_tax_period(2024, 3)
        assert period.start_month == 5
        assert period.end_month == 6

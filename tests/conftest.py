from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
import yaml

from vat401.models.company import CompanyProfile
from vat401.models.invoice import Direction, InvoiceDetail
from vat401.models.media import MediaFileOptions
from vat401.models.tax_code import TaxCategory, TaxCode, TaxType
from vat401.services.classifier import MappingTaxCodeProvider


def make_invoice(
    untaxed: int | str = 10000,
    tax: int | str = 500,
    category: TaxCategory = TaxCategory.TAXABLE_5,
    direction: Direction = Direction.OUTPUT,
    *,
    number: str = "AB-12345678",
    on: date = date(2024, 1, 15),
    counterparty: str | None = "87654321",
    deductible: bool = True,
    fixed_asset: bool = False,
    summary: bool = False,
) -> InvoiceDetail:
    untaxed_amount = Decimal(str(untaxed))
    tax_amount = Decimal(str(tax))
    return InvoiceDetail(
        invoice_id=f"inv-{number}",
        invoice_number=number,
        date=on,
        counterparty_tax_id=counterparty,
        untaxed_amount=untaxed_amount,
        tax_amount=tax_amount,
        total_amount=untaxed_amount + tax_amount,
        tax_category=category,
        is_deductible=deductible,
        is_fixed_asset=fixed_asset,
        direction=direction,
        is_summary=summary,
    )


# --- Invoice fixtures ---


@pytest.fixture
def sale() -> InvoiceDetail:
    return make_invoice()


@pytest.fixture
def purchase() -> InvoiceDetail:
    return make_invoice(
        5000,
        250,
        direction=Direction.INPUT,
        number="CD-87654321",
        on=date(2024, 1, 20),
        counterparty="11223344",
    )


@pytest.fixture
def options() -> MediaFileOptions:
    return MediaFileOptions(tax_registration_number="12345678", year=2024, bi_month=1)


# --- Tax code fixtures ---


@pytest.fixture
def tax_codes_dict() -> dict:
    return {
        "tax_codes": {
            "TX5": {"name": "Taxable 5%", "tax_type": "TAXABLE", "tax_rate": 0.05},
            "TX0": {"name": "Zero-rated", "tax_type": "ZERO_RATED", "tax_rate": 0},
            "EXE": {"name": "Exempt", "tax_type": "EXEMPT", "is_deductible": False},
            "NDT": {"name": "Non-deductible", "tax_type": "TAXABLE", "is_deductible": False},
        }
    }


@pytest.fixture
def tax_codes() -> MappingTaxCodeProvider:
    return MappingTaxCodeProvider(
        {
            "TX5": TaxCode("TX5", TaxType.TAXABLE, True, Decimal("0.05")),
            "TX0": TaxCode("TX0", TaxType.ZERO_RATED, True),
            "EXE": TaxCode("EXE", TaxType.EXEMPT, False),
            "NDT": TaxCode("NDT", TaxType.TAXABLE, False, Decimal("0.05")),
        }
    )


# --- Company fixtures ---


@pytest.fixture
def company_dict() -> dict:
    return {
        "tax_id": "12345678",
        "name": "Example Trading Co., Ltd.",
        "branch_code": "0",
        "invoice_format": "E_INVOICE",
    }


@pytest.fixture
def company(company_dict: dict) -> CompanyProfile:
    return CompanyProfile.from_dict(company_dict)


# --- Invoice row fixtures ---


@pytest.fixture
def invoice_rows() -> list[dict]:
    return [
        {
            "id": "inv-001",
            "direction": "OUTPUT",
            "number": "AB-12345678",
            "date": "2024-01-15",
            "counterparty_tax_id": "87654321",
            "untaxed_amount": 10000,
            "tax_amount": 500,
            "total_amount": 10500,
            "tax_code": "TX5",
        },
        {
            "id": "inv-002",
            "direction": "INPUT",
            "number": "CD-87654321",
            "date": "2024-01-20",
            "counterparty_tax_id": "11223344",
            "untaxed_amount": 5000,
            "tax_amount": 250,
            "total_amount": 5250,
            "tax_code": "TX5",
        },
    ]


# --- Config dir fixture ---


@pytest.fixture
def config_dir(tmp_path, company_dict, tax_codes_dict):
    cfg = tmp_path / "config"
    cfg.mkdir()
    (cfg / "company.yaml").write_text(yaml.dump(company_dict))
    (cfg / "tax_codes.yaml").write_text(yaml.dump(tax_codes_dict))
    return cfg

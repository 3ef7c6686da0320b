from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from vat401.models.invoice import InvoiceDetail
from vat401.models.period import TaxPeriod

ZERO = Decimal("0")


@dataclass(frozen=True)
class TaxAmounts:
    output_tax: Decimal
    input_tax: Decimal
    net_tax: Decimal  # negative means refund
    is_refund: bool


@dataclass(frozen=True)
class InvoiceBucket:
    """Invoices sharing one line of the return, with their sums."""

    count: int = 0
    untaxed_amount: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total_amount: Decimal = ZERO
    invoices: tuple[InvoiceDetail, ...] = ()


@dataclass(frozen=True)
class SalesBreakdown:
    taxable: InvoiceBucket = field(default_factory=InvoiceBucket)
    zero_rated: InvoiceBucket = field(default_factory=InvoiceBucket)
    exempt: InvoiceBucket = field(default_factory=InvoiceBucket)
    # Sales without a tax code; reported so they are never silently dropped.
    unclassified: InvoiceBucket = field(default_factory=InvoiceBucket)


@dataclass(frozen=True)
class PurchaseBreakdown:
    deductible: InvoiceBucket = field(default_factory=InvoiceBucket)
    non_deductible: InvoiceBucket = field(default_factory=InvoiceBucket)


@dataclass(frozen=True)
class Form401Summary:
    """Form 401 figures for one period, ready for display by a reporting layer."""

    period: TaxPeriod
    sales: SalesBreakdown
    purchases: PurchaseBreakdown
    tax: TaxAmounts
    total_sales_count: int
    total_sales_amount: Decimal
    total_purchases_count: int
    total_purchases_amount: Decimal
    tax_id: str = ""
    company_name: str = ""

    def to_dict(self) -> dict:
        def bucket(b: InvoiceBucket) -> dict:
            return {
                "count": b.count,
                "untaxed_amount": str(b.untaxed_amount),
                "tax_amount": str(b.tax_amount),
            }

        return {
            "year": self.period.year,
            "bi_month": self.period.bi_month,
            "period": self.period.roc_year_month,
            "tax_id": self.tax_id,
            "company_name": self.company_name,
            "sales": {
                "taxable": bucket(self.sales.taxable),
                "zero_rated": bucket(self.sales.zero_rated),
                "exempt": bucket(self.sales.exempt),
                "unclassified": bucket(self.sales.unclassified),
            },
            "purchases": {
                "deductible": bucket(self.purchases.deductible),
                "non_deductible": bucket(self.purchases.non_deductible),
            },
            "output_tax": str(self.tax.output_tax),
            "input_tax": str(self.tax.input_tax),
            "net_tax": str(self.tax.net_tax),
            "is_refund": self.tax.is_refund,
            "total_sales_count": self.total_sales_count,
            "total_sales_amount": str(self.total_sales_amount),
            "total_purchases_count": self.total_purchases_count,
            "total_purchases_amount": str(self.total_purchases_amount),
        }


@dataclass(frozen=True)
class Form403Summary:
    """Zero-rated sales list filed alongside the 401 return."""

    period: TaxPeriod
    zero_rated: InvoiceBucket
    tax_id: str = ""
    company_name: str = ""

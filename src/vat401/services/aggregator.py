from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from vat401.models.company import CompanyProfile
from vat401.models.invoice import InvoiceDetail
from vat401.models.period import TaxPeriod
from vat401.models.report import (
    ZERO,
    Form401Summary,
    Form403Summary,
    InvoiceBucket,
    PurchaseBreakdown,
    SalesBreakdown,
    TaxAmounts,
)
from vat401.models.tax_code import TaxCategory
from vat401.services.exceptions import NegativeAmountError


def counts_as_output_tax(invoice: InvoiceDetail) -> bool:
    """Only 5% taxable sales carry output tax, whatever their tax_amount says."""
    return invoice.tax_category is TaxCategory.TAXABLE_5


def counts_as_input_tax(invoice: InvoiceDetail) -> bool:
    return invoice.is_deductible


def _tax_of(invoice: InvoiceDetail) -> Decimal:
    if invoice.tax_amount < 0:
        raise NegativeAmountError(
            f"Invoice {invoice.invoice_number}: negative tax_amount {invoice.tax_amount}",
            field="tax_amount",
        )
    return invoice.tax_amount


def calculate_tax_amounts(
    sales_invoices: Iterable[InvoiceDetail],
    purchase_invoices: Iterable[InvoiceDetail],
) -> TaxAmounts:
    """Aggregate output tax, deductible input tax and the net payable/refund.

    Amounts are summed as given; per-invoice rounding is the caller's job.
    """
    output_tax = sum(
        (_tax_of(inv) for inv in sales_invoices if counts_as_output_tax(inv)), ZERO
    )
    input_tax = sum(
        (_tax_of(inv) for inv in purchase_invoices if counts_as_input_tax(inv)), ZERO
    )
    return tax_amounts(output_tax, input_tax)


def tax_amounts(output_tax: Decimal, input_tax: Decimal) -> TaxAmounts:
    net_tax = output_tax - input_tax
    return TaxAmounts(
        output_tax=output_tax,
        input_tax=input_tax,
        net_tax=net_tax,
        is_refund=net_tax < 0,
    )


def summarize_invoices(invoices: Iterable[InvoiceDetail]) -> InvoiceBucket:
    """Count and sum a group of invoices."""
    items = tuple(invoices)
    return InvoiceBucket(
        count=len(items),
        untaxed_amount=sum((inv.untaxed_amount for inv in items), ZERO),
        tax_amount=sum((inv.tax_amount for inv in items), ZERO),
        total_amount=sum((inv.total_amount for inv in items), ZERO),
        invoices=items,
    )


def build_form401(
    sales_invoices: Iterable[InvoiceDetail],
    purchase_invoices: Iterable[InvoiceDetail],
    period: TaxPeriod,
    company: CompanyProfile | None = None,
) -> Form401Summary:
    """Bucket a period's invoices into the lines of the 401 return."""
    sales = list(sales_invoices)
    purchases = list(purchase_invoices)

    by_category: dict[TaxCategory, list[InvoiceDetail]] = {c: [] for c in TaxCategory}
    for inv in sales:
        by_category[inv.tax_category].append(inv)

    sales_breakdown = SalesBreakdown(
        taxable=summarize_invoices(by_category[TaxCategory.TAXABLE_5]),
        zero_rated=summarize_invoices(by_category[TaxCategory.ZERO_RATED]),
        exempt=summarize_invoices(by_category[TaxCategory.EXEMPT]),
        unclassified=summarize_invoices(by_category[TaxCategory.NON_TAXABLE]),
    )
    purchase_breakdown = PurchaseBreakdown(
        deductible=summarize_invoices(inv for inv in purchases if counts_as_input_tax(inv)),
        non_deductible=summarize_invoices(
            inv for inv in purchases if not counts_as_input_tax(inv)
        ),
    )

    return Form401Summary(
        period=period,
        sales=sales_breakdown,
        purchases=purchase_breakdown,
        tax=calculate_tax_amounts(sales, purchases),
        total_sales_count=len(sales),
        total_sales_amount=sum((inv.untaxed_amount for inv in sales), ZERO),
        total_purchases_count=len(purchases),
        total_purchases_amount=sum((inv.untaxed_amount for inv in purchases), ZERO),
        tax_id=company.tax_id if company else "",
        company_name=company.name if company else "",
    )


def build_form403(
    sales_invoices: Iterable[InvoiceDetail],
    period: TaxPeriod,
    company: CompanyProfile | None = None,
) -> Form403Summary:
    """Collect the period's zero-rated sales."""
    zero_rated = summarize_invoices(
        inv for inv in sales_invoices if inv.tax_category is TaxCategory.ZERO_RATED
    )
    return Form403Summary(
        period=period,
        zero_rated=zero_rated,
        tax_id=company.tax_id if company else "",
        company_name=company.name if company else "",
    )

"""
Flat-rate tax policy.

Computes per-line and aggregate tax and decides whether a receipt must be
labelled a tax invoice. Pure functions of their inputs and the TaxConfig
the policy was built with.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import NamedTuple

from .business_numbers import abn_error
from .config import TaxConfig
from .models import LineItem, Receipt
from .money_utils import ZERO, round_money


class TaxTotals(NamedTuple):
    subtotal: Decimal
    tax: Decimal
    total: Decimal


class TaxPolicy:
    """Tax rules for a single flat rate and tax-invoice threshold."""

    def __init__(self, config: TaxConfig | None = None) -> None:
        self.config = config or TaxConfig()

    @property
    def rate(self) -> Decimal:
        return self.config.rate

    @property
    def threshold(self) -> Decimal:
        return self.config.invoice_threshold

    @property
    def tax_name(self) -> str:
        return self.config.tax_name

    def line_tax(self, line: LineItem, apply_tax: bool) -> Decimal:
        """Tax on one line; zero when tax is off or the product is exempt."""
        if not apply_tax or not line.tax_applicable:
            return ZERO
        return round_money(line.unit_price * line.quantity * self.rate)

    def aggregate(self, lines: Iterable[LineItem], apply_tax: bool) -> TaxTotals:
        """Subtotal, tax and total, each rounded from already-rounded parts."""
        lines = list(lines)
        subtotal = round_money(sum((line.line_total for line in lines), ZERO))
        tax = round_money(sum((self.line_tax(line, apply_tax) for line in lines), ZERO))
        return TaxTotals(subtotal=subtotal, tax=tax, total=round_money(subtotal + tax))

    def is_tax_invoice(self, total: Decimal, apply_tax: bool, force: bool = False) -> bool:
        """
        Whether the document must be labelled a tax invoice.

        Forcing is ignored when no tax is applied to the transaction.
        """
        if not apply_tax:
            return False
        return total >= self.threshold or force

    def compliance_warnings(self, receipt: Receipt) -> list[str]:
        """
        Missing or invalid details on a tax invoice.

        Advisory only; an empty list for plain receipts.
        """
        if not receipt.is_tax_invoice:
            return []

        warnings: list[str] = []
        seller_number = receipt.seller_snapshot.business_number
        if not seller_number or not seller_number.strip():
            warnings.append("Tax invoice requires the seller business number")
        elif self.config.validate_business_numbers:
            if error := abn_error(seller_number):
                warnings.append(f"Invalid seller business number: {error}")

        if not receipt.customer_snapshot.display_name:
            warnings.append("Tax invoice requires the customer name")

        customer_number = receipt.customer_snapshot.business_number
        if self.config.validate_business_numbers and (error := abn_error(customer_number)):
            warnings.append(f"Invalid customer business number: {error}")

        return warnings

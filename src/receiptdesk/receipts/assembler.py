"""
Receipt assembly.

Turns a creation request into a fully-formed, unpersisted Receipt. All
validation happens before anything is built, so a rejected request has
no side effects.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from uuid import uuid4

import structlog

from .collaborators import CustomerDirectory, ProductCatalog, SellerProfileSource
from .exceptions import (
    CustomerNotFoundError,
    EmptyLineItemsError,
    InvalidQuantityError,
    ProductsNotFoundError,
    SellerProfileUnavailableError,
)
from .models import (
    CreateReceiptRequest,
    CustomerSnapshot,
    LineItem,
    Product,
    Receipt,
    SellerSnapshot,
)
from .tax import TaxPolicy

logger = structlog.get_logger(__name__)


def _new_receipt_id() -> str:
    return str(uuid4())


class ReceiptAssembler:
    """Resolve line items against the catalog and build the receipt record."""

    def __init__(
        self,
        customers: CustomerDirectory,
        catalog: ProductCatalog,
        seller: SellerProfileSource,
        tax_policy: TaxPolicy | None = None,
        id_factory: Callable[[], str] = _new_receipt_id,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self.customers = customers
        self.catalog = catalog
        self.seller = seller
        self.tax_policy = tax_policy or TaxPolicy()
        self.id_factory = id_factory
        self.clock = clock

    def assemble(self, request: CreateReceiptRequest) -> Receipt:
        """
        Build a receipt for ``request``.

        Raises:
            EmptyLineItemsError: no line items were requested
            InvalidQuantityError: a quantity is below 1
            CustomerNotFoundError: the customer id does not resolve
            ProductsNotFoundError: one or more product ids do not resolve (all listed)
            SellerProfileUnavailableError: no seller profile is configured
        """
        if not request.line_items:
            raise EmptyLineItemsError()

        for line in request.line_items:
            if line.quantity < 1:
                raise InvalidQuantityError(
                    f"Quantity for product {line.product_id} must be at least 1, "
                    f"got {line.quantity}",
                    product_id=line.product_id,
                    quantity=line.quantity,
                )

        customer = self.customers.get_customer_by_id(request.customer_id)
        if customer is None:
            raise CustomerNotFoundError(
                f"Customer with ID {request.customer_id} not found",
                customer_id=request.customer_id,
            )

        products = self._resolve_products([line.product_id for line in request.line_items])

        profile = self.seller.get_seller_profile()
        if profile is None:
            raise SellerProfileUnavailableError()

        line_items = tuple(
            LineItem.from_product(products[line.product_id], line.quantity)
            for line in request.line_items
        )
        totals = self.tax_policy.aggregate(line_items, request.apply_tax)
        is_tax_invoice = self.tax_policy.is_tax_invoice(
            totals.total, request.apply_tax, request.force_tax_invoice
        )

        receipt = Receipt(
            receipt_id=self.id_factory(),
            customer_id=request.customer_id,
            date_of_purchase=request.date_of_purchase,
            line_items=line_items,
            subtotal=totals.subtotal,
            tax_amount=totals.tax,
            total=totals.total,
            is_tax_invoice=is_tax_invoice,
            seller_snapshot=SellerSnapshot.from_profile(profile),
            customer_snapshot=CustomerSnapshot.from_customer(customer),
            created_at=self.clock(),
        )
        logger.debug(
            "Receipt assembled",
            receipt_id=receipt.receipt_id,
            subtotal=str(receipt.subtotal),
            tax_amount=str(receipt.tax_amount),
            total=str(receipt.total),
            is_tax_invoice=receipt.is_tax_invoice,
        )
        return receipt

    def _resolve_products(self, product_ids: list[str]) -> dict[str, Product]:
        """Look up every distinct id, failing once with all misses."""
        resolved: dict[str, Product] = {}
        missing: list[str] = []
        for product_id in dict.fromkeys(product_ids):
            product = self.catalog.get_product_by_id(product_id)
            if product is None:
                missing.append(product_id)
            else:
                resolved[product_id] = product

        if missing:
            raise ProductsNotFoundError(
                f"Products not found: {', '.join(missing)}",
                product_ids=missing,
            )
        return resolved

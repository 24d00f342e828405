"""
Receipt domain models.

Live entities (Product, Customer, SellerProfile) belong to external
collaborators and are only read here. Everything a receipt owns
(line items, snapshots, the receipt itself) is frozen once built.
"""

from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .money_utils import round_money


class CustomerType(str, Enum):
    """Customer kind."""

    INDIVIDUAL = "individual"
    BUSINESS = "business"


def _join_name(first: str | None, last: str | None) -> str:
    return f"{first or ''} {last or ''}".strip()


# ============================================================
# Collaborator-owned entities
# ============================================================


class Product(BaseModel):
    """Catalog product. Prices exclude tax."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str | None = None
    unit_price: Decimal = Field(..., ge=0)
    tax_applicable: bool = True


class Customer(BaseModel):
    """Customer record as held by the customer directory."""

    model_config = ConfigDict(frozen=True)

    id: str
    customer_type: CustomerType = CustomerType.INDIVIDUAL
    first_name: str | None = None
    last_name: str | None = None
    business_name: str | None = None
    business_number: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None


class SellerProfile(BaseModel):
    """The business issuing receipts (singleton)."""

    model_config = ConfigDict(frozen=True)

    name: str
    business_address: str
    business_number: str
    contact_email: str
    phone: str | None = None
    logo_url: str | None = None


# ============================================================
# Receipt-owned value types
# ============================================================


class SellerSnapshot(BaseModel):
    """Seller details copied at receipt creation time."""

    model_config = ConfigDict(frozen=True)

    name: str
    business_address: str
    business_number: str
    contact_email: str
    phone: str | None = None
    logo_url: str | None = None

    @classmethod
    def from_profile(cls, profile: SellerProfile) -> "SellerSnapshot":
        return cls(**profile.model_dump())


class CustomerSnapshot(BaseModel):
    """Customer details copied at receipt creation time, without the id."""

    model_config = ConfigDict(frozen=True)

    customer_type: CustomerType
    first_name: str | None = None
    last_name: str | None = None
    business_name: str | None = None
    business_number: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    @classmethod
    def from_customer(cls, customer: Customer) -> "CustomerSnapshot":
        return cls(**customer.model_dump(exclude={"id"}))

    @property
    def contact_name(self) -> str:
        return _join_name(self.first_name, self.last_name)

    @property
    def display_name(self) -> str:
        """Business name for business customers, otherwise first and last name."""
        if self.customer_type == CustomerType.BUSINESS:
            return self.business_name or self.contact_name
        return self.contact_name


class LineItem(BaseModel):
    """One resolved product/quantity pairing with price fixed at sale time."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    description: str = ""
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)
    line_total: Decimal
    tax_applicable: bool

    @classmethod
    def from_product(cls, product: Product, quantity: int) -> "LineItem":
        return cls(
            product_id=product.id,
            product_name=product.name,
            description=product.description or "",
            quantity=quantity,
            unit_price=product.unit_price,
            line_total=round_money(product.unit_price * quantity),
            tax_applicable=product.tax_applicable,
        )


class Receipt(BaseModel):
    """Root receipt record."""

    model_config = ConfigDict(frozen=True)

    receipt_id: str
    customer_id: str
    date_of_purchase: date
    line_items: tuple[LineItem, ...] = Field(..., min_length=1)
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    is_tax_invoice: bool
    seller_snapshot: SellerSnapshot
    customer_snapshot: CustomerSnapshot
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def shows_tax(self) -> bool:
        """Whether documents include the tax column and tax totals line."""
        return self.tax_amount > 0 or self.is_tax_invoice


# ============================================================
# Requests and results
# ============================================================


class LineItemRequest(BaseModel):
    """Requested product and quantity, unresolved."""

    product_id: str
    quantity: int


class CreateReceiptRequest(BaseModel):
    """Input to receipt creation."""

    customer_id: str
    date_of_purchase: date
    line_items: list[LineItemRequest] = Field(default_factory=list)
    apply_tax: bool = True
    force_tax_invoice: bool = False

    @field_validator("line_items", mode="before")
    @classmethod
    def _accept_pairs(cls, v: Any) -> Any:
        # Allow [("prod-1", 2), ...] in addition to dicts/models.
        if isinstance(v, list):
            return [
                {"product_id": item[0], "quantity": item[1]} if isinstance(item, tuple) else item
                for item in v
            ]
        return v


class GenerationState(str, Enum):
    """Coordinator states for one creation request."""

    VALIDATING = "validating"
    RENDERING = "rendering"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class ReceiptResult(BaseModel):
    """Outcome of a creation request."""

    success: bool
    state: GenerationState
    receipt: Receipt | None = None
    document_location: str | None = None
    error_message: str | None = None
    error_code: str | None = None
    error_context: dict[str, Any] = Field(default_factory=dict)
    failed_during: GenerationState | None = None

    @property
    def receipt_id(self) -> str | None:
        return self.receipt.receipt_id if self.receipt else None

"""
Lookup contracts consumed by the receipt engine.

Customer, product and seller data are owned elsewhere; the engine only
reads them through these protocols. In-memory implementations serve
tests and embedding, JSON-file implementations back the CLI.
"""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog
from pydantic import TypeAdapter, ValidationError

from .models import Customer, Product, SellerProfile

logger = structlog.get_logger(__name__)


@runtime_checkable
class CustomerDirectory(Protocol):
    def get_customer_by_id(self, customer_id: str) -> Customer | None: ...


@runtime_checkable
class ProductCatalog(Protocol):
    def get_product_by_id(self, product_id: str) -> Product | None: ...


@runtime_checkable
class SellerProfileSource(Protocol):
    def get_seller_profile(self) -> SellerProfile | None: ...


class InMemoryCustomerDirectory:
    def __init__(self, customers: Iterable[Customer] = ()) -> None:
        self._customers = {c.id: c for c in customers}

    def add(self, customer: Customer) -> None:
        self._customers[customer.id] = customer

    def get_customer_by_id(self, customer_id: str) -> Customer | None:
        return self._customers.get(customer_id)


class InMemoryProductCatalog:
    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products = {p.id: p for p in products}

    def add(self, product: Product) -> None:
        self._products[product.id] = product

    def get_product_by_id(self, product_id: str) -> Product | None:
        return self._products.get(product_id)


class StaticSellerProfileSource:
    def __init__(self, profile: SellerProfile | None = None) -> None:
        self.profile = profile

    def get_seller_profile(self) -> SellerProfile | None:
        return self.profile


def _read_json(path: Path) -> Any | None:
    """Parsed JSON content, or None when the file does not exist."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Data file not found", path=str(path))
        return None


class JsonCustomerDirectory:
    """Customers from a JSON array file, re-read on every lookup."""

    _adapter = TypeAdapter(list[Customer])

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def get_customer_by_id(self, customer_id: str) -> Customer | None:
        data = _read_json(self.path)
        if data is None:
            return None
        for customer in self._adapter.validate_python(data):
            if customer.id == customer_id:
                return customer
        return None


class JsonProductCatalog:
    """Products from a JSON array file, re-read on every lookup."""

    _adapter = TypeAdapter(list[Product])

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def get_product_by_id(self, product_id: str) -> Product | None:
        data = _read_json(self.path)
        if data is None:
            return None
        for product in self._adapter.validate_python(data):
            if product.id == product_id:
                return product
        return None


class JsonSellerProfileSource:
    """Seller profile from a JSON object file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def get_seller_profile(self) -> SellerProfile | None:
        data = _read_json(self.path)
        if data is None:
            return None
        try:
            return SellerProfile.model_validate(data)
        except ValidationError as exc:
            logger.error("Seller profile file is invalid", path=str(self.path), error=str(exc))
            return None

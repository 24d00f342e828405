"""
Receipt generation engine.

Provides:
- Receipt assembly from catalog, customer and seller data
- Flat-rate tax computation and tax invoice classification
- Paginated PDF document rendering
- Append-only receipt record storage
- Document retrieval for presentation layers
"""

from receiptdesk.receipts.assembler import ReceiptAssembler
from receiptdesk.receipts.config import (
    CurrencyConfig,
    DocumentConfig,
    ReceiptConfig,
    TaxConfig,
    get_receipt_config,
    set_receipt_config,
)
from receiptdesk.receipts.exceptions import (
    CustomerNotFoundError,
    EmptyLineItemsError,
    InvalidQuantityError,
    ProductsNotFoundError,
    ReceiptConfigurationError,
    ReceiptError,
    ReceiptStoreError,
    ReceiptValidationError,
    RenderError,
    SellerProfileUnavailableError,
)
from receiptdesk.receipts.models import (
    CreateReceiptRequest,
    Customer,
    CustomerSnapshot,
    CustomerType,
    GenerationState,
    LineItem,
    LineItemRequest,
    Product,
    Receipt,
    ReceiptResult,
    SellerProfile,
    SellerSnapshot,
)
from receiptdesk.receipts.renderer import DocumentRenderer, RenderOutcome
from receiptdesk.receipts.retrieval import ReceiptDocuments
from receiptdesk.receipts.service import ReceiptGenerationService, build_receipt_service
from receiptdesk.receipts.store import InMemoryReceiptStore, JsonFileReceiptStore, ReceiptStore
from receiptdesk.receipts.tax import TaxPolicy, TaxTotals

__all__ = [
    # Exceptions
    "ReceiptError",
    "ReceiptValidationError",
    "EmptyLineItemsError",
    "InvalidQuantityError",
    "CustomerNotFoundError",
    "ProductsNotFoundError",
    "SellerProfileUnavailableError",
    "RenderError",
    "ReceiptStoreError",
    "ReceiptConfigurationError",
    # Configuration
    "TaxConfig",
    "CurrencyConfig",
    "DocumentConfig",
    "ReceiptConfig",
    "get_receipt_config",
    "set_receipt_config",
    # Models
    "CustomerType",
    "Product",
    "Customer",
    "SellerProfile",
    "SellerSnapshot",
    "CustomerSnapshot",
    "LineItem",
    "Receipt",
    "LineItemRequest",
    "CreateReceiptRequest",
    "GenerationState",
    "ReceiptResult",
    # Engine
    "TaxPolicy",
    "TaxTotals",
    "ReceiptAssembler",
    "DocumentRenderer",
    "RenderOutcome",
    "ReceiptStore",
    "JsonFileReceiptStore",
    "InMemoryReceiptStore",
    "ReceiptGenerationService",
    "build_receipt_service",
    "ReceiptDocuments",
]

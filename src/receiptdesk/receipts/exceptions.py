"""
Receipt engine exceptions.

Custom exceptions for receipt generation with clear error messages.
Every error carries a machine-readable code, a status code, structured
context identifying the offending input, and a recovery hint.
"""

from typing import Any, Literal


class ReceiptError(Exception):
    """
    Base receipt engine error with enhanced context.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for API responses
        status_code: HTTP status code for this error type
        context: Additional context data about the error
        recovery_hint: Suggested action to resolve the error
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int = 400,
        context: dict[str, Any] | None = None,
        recovery_hint: str | None = None,
    ):
        self.message = message
        self.error_code = error_code or "RECEIPT_ERROR"
        self.status_code = status_code
        self.context = context or {}
        self.recovery_hint = recovery_hint
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "status_code": self.status_code,
            "context": self.context,
            "recovery_hint": self.recovery_hint,
        }


class ReceiptValidationError(ReceiptError):
    """Creation request rejected before any side effect."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        recovery_hint: str | None = None,
    ):
        super().__init__(
            message,
            "RECEIPT_VALIDATION_ERROR",
            status_code=400,
            context=context,
            recovery_hint=recovery_hint,
        )


class EmptyLineItemsError(ReceiptValidationError):
    """Request carries no line items."""

    def __init__(self, message: str = "A receipt must contain at least one line item") -> None:
        super().__init__(message, recovery_hint="Add at least one product to the receipt")
        self.error_code = "EMPTY_LINE_ITEMS"


class InvalidQuantityError(ReceiptValidationError):
    """Line item quantity below one."""

    def __init__(self, message: str, product_id: str, quantity: Any) -> None:
        super().__init__(
            message,
            context={"product_id": product_id, "quantity": quantity},
            recovery_hint="Quantities must be whole numbers of at least 1",
        )
        self.error_code = "INVALID_QUANTITY"


class CustomerNotFoundError(ReceiptValidationError):
    """Customer lookup failed."""

    def __init__(self, message: str, customer_id: str) -> None:
        super().__init__(
            message,
            context={"customer_id": customer_id},
            recovery_hint="Verify the customer ID and ensure the customer exists",
        )
        self.error_code = "CUSTOMER_NOT_FOUND"
        self.status_code = 404


class ProductsNotFoundError(ReceiptValidationError):
    """One or more products could not be resolved from the catalog."""

    def __init__(self, message: str, product_ids: list[str]) -> None:
        super().__init__(
            message,
            context={"product_ids": list(product_ids)},
            recovery_hint="Refresh the product list and remove products that no longer exist",
        )
        self.error_code = "PRODUCTS_NOT_FOUND"
        self.status_code = 404
        self.product_ids = list(product_ids)


class SellerProfileUnavailableError(ReceiptValidationError):
    """Seller profile is not configured or could not be read."""

    def __init__(self, message: str = "Seller profile is not configured") -> None:
        super().__init__(
            message,
            recovery_hint="Configure the seller profile before issuing receipts",
        )
        self.error_code = "SELLER_PROFILE_UNAVAILABLE"
        self.status_code = 503


RenderOrigin = Literal["stream", "layout"]


class RenderError(ReceiptError):
    """
    Document production failed.

    ``origin`` separates I/O failures on the output stream ("stream") from
    failures in the document-construction logic ("layout").
    """

    def __init__(
        self,
        message: str,
        origin: RenderOrigin,
        receipt_id: str | None = None,
    ) -> None:
        context: dict[str, Any] = {"origin": origin}
        if receipt_id:
            context["receipt_id"] = receipt_id
        hint = (
            "Check free disk space and permissions on the document directory"
            if origin == "stream"
            else "Inspect the receipt data for values the document layout cannot draw"
        )
        super().__init__(
            f"Document {origin} error: {message}",
            "RENDER_ERROR",
            status_code=500,
            context=context,
            recovery_hint=hint,
        )
        self.origin = origin


class ReceiptStoreError(ReceiptError):
    """Receipt record storage failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        context = {}
        if path:
            context["path"] = path
        super().__init__(
            message,
            "RECEIPT_STORE_ERROR",
            status_code=500,
            context=context,
            recovery_hint="Check the receipt data file is readable, writable and valid JSON",
        )


class ReceiptConfigurationError(ReceiptError):
    """Receipt engine configuration error."""

    def __init__(self, message: str, config_key: str | None = None) -> None:
        context = {}
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message,
            "RECEIPT_CONFIG_ERROR",
            status_code=500,
            context=context,
            recovery_hint="Check receipt configuration settings and environment variables",
        )

"""Tests for the receipt error taxonomy."""

import pytest

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


@pytest.mark.unit
class TestReceiptError:
    """Tests for the base error."""

    def test_defaults(self):
        """Test default code, status and context."""
        error = ReceiptError("Something failed")

        assert str(error) == "Something failed"
        assert error.error_code == "RECEIPT_ERROR"
        assert error.status_code == 400
        assert error.context == {}
        assert error.recovery_hint is None

    def test_to_dict(self):
        """Test conversion to an API-style dictionary."""
        error = ReceiptError(
            "Bad thing",
            error_code="BAD",
            status_code=422,
            context={"field": "x"},
            recovery_hint="Fix x",
        )

        assert error.to_dict() == {
            "error_code": "BAD",
            "message": "Bad thing",
            "status_code": 422,
            "context": {"field": "x"},
            "recovery_hint": "Fix x",
        }


@pytest.mark.unit
class TestValidationErrors:
    """Tests for validation error kinds."""

    @pytest.mark.parametrize(
        "error,code,status",
        [
            (EmptyLineItemsError(), "EMPTY_LINE_ITEMS", 400),
            (InvalidQuantityError("bad", product_id="p1", quantity=0), "INVALID_QUANTITY", 400),
            (CustomerNotFoundError("missing", customer_id="c1"), "CUSTOMER_NOT_FOUND", 404),
            (ProductsNotFoundError("missing", product_ids=["a"]), "PRODUCTS_NOT_FOUND", 404),
            (SellerProfileUnavailableError(), "SELLER_PROFILE_UNAVAILABLE", 503),
        ],
    )
    def test_codes(self, error, code, status):
        """Test each validation kind has a stable code and status."""
        assert isinstance(error, ReceiptValidationError)
        assert error.error_code == code
        assert error.status_code == status
        assert error.recovery_hint

    def test_products_not_found_lists_ids(self):
        """Test every missing product id is kept."""
        error = ProductsNotFoundError("Products not found: a, b", product_ids=["a", "b"])

        assert error.product_ids == ["a", "b"]
        assert error.context == {"product_ids": ["a", "b"]}


@pytest.mark.unit
class TestOperationalErrors:
    """Tests for render, store and configuration errors."""

    def test_render_error_stream(self):
        """Test stream render errors name their origin."""
        error = RenderError("disk full", "stream", receipt_id="r1")

        assert error.message == "Document stream error: disk full"
        assert error.origin == "stream"
        assert error.context == {"origin": "stream", "receipt_id": "r1"}
        assert error.status_code == 500
        assert not isinstance(error, ReceiptValidationError)

    def test_render_error_layout(self):
        """Test layout render errors get a layout hint."""
        error = RenderError("bad value", "layout")

        assert error.message == "Document layout error: bad value"
        assert "receipt_id" not in error.context
        assert "layout" in error.recovery_hint

    def test_store_error(self):
        """Test store errors carry the path."""
        error = ReceiptStoreError("write failed", path="/tmp/receipts.json")

        assert error.error_code == "RECEIPT_STORE_ERROR"
        assert error.context == {"path": "/tmp/receipts.json"}

    def test_configuration_error(self):
        """Test configuration errors carry the config key."""
        error = ReceiptConfigurationError("bad rate", config_key="tax")

        assert error.error_code == "RECEIPT_CONFIG_ERROR"
        assert error.context == {"config_key": "tax"}

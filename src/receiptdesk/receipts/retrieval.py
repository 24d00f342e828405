"""
Receipt lookup for presentation layers.

Lookups resolve the receipt record first and then its document at the
canonical location. Missing records and I/O failures give a negative
result (None or an empty list) instead of raising.
"""

from pathlib import Path

import structlog

from .exceptions import ReceiptStoreError
from .models import Receipt
from .service import document_path_for
from .store import ReceiptStore

logger = structlog.get_logger(__name__)


class ReceiptDocuments:
    """Read-only access to stored receipts and their documents."""

    def __init__(self, store: ReceiptStore, document_dir: Path) -> None:
        self.store = store
        self.document_dir = Path(document_dir)

    def _all(self) -> list[Receipt]:
        try:
            return self.store.list()
        except ReceiptStoreError as exc:
            logger.error("Failed to load receipts", error=exc.message, **exc.context)
            return []

    def list_receipts(self, newest_first: bool = True) -> list[Receipt]:
        """All receipts ordered by purchase date; ties keep storage order."""
        receipts = self._all()
        if newest_first:
            receipts.sort(key=lambda r: r.date_of_purchase, reverse=True)
        return receipts

    def get_receipt(self, receipt_id: str) -> Receipt | None:
        for receipt in self._all():
            if receipt.receipt_id == receipt_id:
                return receipt
        return None

    def document_location(self, receipt_id: str) -> Path | None:
        """Path of the receipt's document, or None if either is missing."""
        receipt = self.get_receipt(receipt_id)
        if receipt is None:
            logger.debug("Receipt not found", receipt_id=receipt_id)
            return None

        path = document_path_for(self.document_dir, receipt.receipt_id)
        try:
            if path.is_file():
                return path
        except OSError as exc:
            logger.warning("Failed to check receipt document", path=str(path), error=str(exc))
            return None
        logger.warning("Receipt document missing", receipt_id=receipt_id, path=str(path))
        return None

    def document_bytes(self, receipt_id: str) -> bytes | None:
        """Contents of the receipt's document, or None if it cannot be read."""
        path = self.document_location(receipt_id)
        if path is None:
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            logger.error("Failed to read receipt document", path=str(path), error=str(exc))
            return None

"""
Receipt generation service.

Coordinates one creation request through validation, rendering and
persistence. A receipt is appended to the store only after its document
has been completely written, so a stored record always has a document.
Failures come back as a ReceiptResult; nothing is raised to the caller.
"""

from pathlib import Path

import structlog

from .assembler import ReceiptAssembler
from .collaborators import JsonCustomerDirectory, JsonProductCatalog, JsonSellerProfileSource
from .config import ReceiptConfig
from .exceptions import ReceiptError, ReceiptStoreError, ReceiptValidationError
from .models import CreateReceiptRequest, GenerationState, Receipt, ReceiptResult
from .renderer import DocumentRenderer
from .store import JsonFileReceiptStore, ReceiptStore
from .tax import TaxPolicy

logger = structlog.get_logger(__name__)


def document_path_for(document_dir: Path, receipt_id: str) -> Path:
    """Canonical document location for a receipt id."""
    return Path(document_dir) / f"{receipt_id}.pdf"


class ReceiptGenerationService:
    """Create receipts: assemble, render the document, then persist the record."""

    def __init__(
        self,
        assembler: ReceiptAssembler,
        renderer: DocumentRenderer,
        store: ReceiptStore,
        document_dir: Path,
    ) -> None:
        self.assembler = assembler
        self.renderer = renderer
        self.store = store
        self.document_dir = Path(document_dir)

    def document_path(self, receipt_id: str) -> Path:
        return document_path_for(self.document_dir, receipt_id)

    def create_receipt(self, request: CreateReceiptRequest) -> ReceiptResult:
        """
        Create a receipt and its document.

        Args:
            request: Customer, purchase date, line items and tax flags

        Returns:
            ReceiptResult with the receipt and document location on success,
            or the error details and the state that failed
        """
        log = logger.bind(customer_id=request.customer_id)
        log.debug("Receipt generation state", state=GenerationState.VALIDATING.value)

        try:
            receipt = self.assembler.assemble(request)
        except ReceiptValidationError as exc:
            log.warning(
                "Receipt request rejected",
                error_code=exc.error_code,
                error=exc.message,
                **exc.context,
            )
            return self._failed(exc, GenerationState.VALIDATING)
        except ReceiptError as exc:
            log.error("Receipt assembly failed", error_code=exc.error_code, error=exc.message)
            return self._failed(exc, GenerationState.VALIDATING)
        except Exception as exc:
            log.exception("Unexpected error assembling receipt")
            return self._unexpected(exc, GenerationState.VALIDATING)

        log = log.bind(receipt_id=receipt.receipt_id)
        self._log_compliance(receipt, log)

        path = self.document_path(receipt.receipt_id)
        log.debug("Receipt generation state", state=GenerationState.RENDERING.value)
        outcome = self.renderer.render_to_path(receipt, path)
        if not outcome.ok:
            self._discard_artifact(path, log)
            return self._failed(outcome.error, GenerationState.RENDERING)

        log.debug("Receipt generation state", state=GenerationState.PERSISTING.value)
        try:
            self.store.append(receipt)
        except Exception as exc:
            # The document exists without a record; leave it for reconciliation.
            log.error(
                "Receipt store write failed, orphaned document",
                document_location=str(path),
                error=str(exc),
            )
            if not isinstance(exc, ReceiptStoreError):
                exc = ReceiptStoreError(f"Failed to store receipt: {exc}")
            return self._failed(exc, GenerationState.PERSISTING, receipt=receipt)

        log.info(
            "Receipt generated",
            state=GenerationState.DONE.value,
            document_location=str(path),
            total=str(receipt.total),
            is_tax_invoice=receipt.is_tax_invoice,
            pages=outcome.pages,
        )
        return ReceiptResult(
            success=True,
            state=GenerationState.DONE,
            receipt=receipt,
            document_location=str(path),
        )

    def _log_compliance(self, receipt: Receipt, log) -> None:
        policy = self.assembler.tax_policy
        for warning in policy.compliance_warnings(receipt):
            log.warning("Tax invoice compliance warning", warning=warning)

    def _discard_artifact(self, path: Path, log) -> None:
        """Best-effort removal of a partially written document."""
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            log.warning(
                "Failed to remove partial receipt document", path=str(path), error=str(exc)
            )
        else:
            log.debug("Removed partial receipt document", path=str(path))

    @staticmethod
    def _failed(
        error: ReceiptError, during: GenerationState, receipt: Receipt | None = None
    ) -> ReceiptResult:
        return ReceiptResult(
            success=False,
            state=GenerationState.FAILED,
            failed_during=during,
            receipt=receipt,
            error_message=error.message,
            error_code=error.error_code,
            error_context=error.context,
        )

    @staticmethod
    def _unexpected(exc: Exception, during: GenerationState) -> ReceiptResult:
        return ReceiptResult(
            success=False,
            state=GenerationState.FAILED,
            failed_during=during,
            error_message=f"Unexpected error: {exc}",
            error_code="INTERNAL_ERROR",
        )


def build_receipt_service(
    settings=None, config: ReceiptConfig | None = None
) -> ReceiptGenerationService:
    """Service wired to the JSON-file collaborators and store named in settings."""
    from receiptdesk.settings import get_settings

    settings = settings or get_settings()
    config = config or ReceiptConfig.from_settings(settings)
    storage = settings.storage

    assembler = ReceiptAssembler(
        customers=JsonCustomerDirectory(storage.customers_path),
        catalog=JsonProductCatalog(storage.products_path),
        seller=JsonSellerProfileSource(storage.seller_path),
        tax_policy=TaxPolicy(config.tax),
    )
    return ReceiptGenerationService(
        assembler=assembler,
        renderer=DocumentRenderer(config),
        store=JsonFileReceiptStore(config.receipts_path),
        document_dir=config.documents.output_dir,
    )

"""
Receipt record storage.

Append-only list of receipts. The JSON-file store rewrites the whole
collection on every append: it reads the current list, adds the record and
writes the result to a temporary file that atomically replaces the old one.
Appends through one store instance are serialized with a lock; separate
processes sharing a file still race, and the last write wins.
"""

from __future__ import annotations

import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog
from pydantic import TypeAdapter, ValidationError

from .exceptions import ReceiptStoreError
from .models import Receipt

logger = structlog.get_logger(__name__)

_receipts_adapter = TypeAdapter(list[Receipt])


@runtime_checkable
class ReceiptStore(Protocol):
    def list(self) -> list[Receipt]: ...

    def append(self, receipt: Receipt) -> None: ...


class InMemoryReceiptStore:
    """Process-local store, mainly for tests and embedding."""

    def __init__(self) -> None:
        self._receipts: list[Receipt] = []
        self._lock = threading.Lock()

    def list(self) -> list[Receipt]:
        with self._lock:
            return list(self._receipts)

    def append(self, receipt: Receipt) -> None:
        with self._lock:
            self._receipts.append(receipt)


class JsonFileReceiptStore:
    """Receipts kept as a JSON array in a single file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def list(self) -> list[Receipt]:
        """All receipts in storage order; empty when the file does not exist yet."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.debug("Receipts file not found, returning empty list", path=str(self.path))
            return []
        except OSError as exc:
            raise ReceiptStoreError(
                f"Failed to read receipts data: {exc}", path=str(self.path)
            ) from exc

        if not raw.strip():
            return []
        try:
            return _receipts_adapter.validate_json(raw)
        except ValidationError as exc:
            raise ReceiptStoreError(
                f"Receipts data is corrupt: {exc.error_count()} validation errors",
                path=str(self.path),
            ) from exc

    def append(self, receipt: Receipt) -> None:
        """Read the current list, add ``receipt`` and write the whole list back."""
        with self._lock:
            receipts = self.list()
            receipts.append(receipt)
            self._write(receipts)
        logger.info(
            "Receipt stored",
            receipt_id=receipt.receipt_id,
            path=str(self.path),
            count=len(receipts),
        )

    def _write(self, receipts: list[Receipt]) -> None:
        payload = _receipts_adapter.dump_json(receipts, indent=2)
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise ReceiptStoreError(
                f"Failed to write receipts data: {exc}", path=str(self.path)
            ) from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

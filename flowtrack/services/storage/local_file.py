"""
Local File Storage Implementation

DESIGN DECISION: The ledger lives in a single JSON document on the
user's device. The document is a keyed collection (like browser
local storage): the transaction list sits under one well-known key and
other keys are left untouched.

TRADEOFFS:
- Every save rewrites the whole document (fine for a personal ledger)
- No cross-process locking (there is exactly one writer)

Writes go to a temporary file in the same directory and are moved into
place with os.replace, so a crash mid-write never leaves a half-written
document behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from flowtrack.config import get_settings
from flowtrack.models.transaction import Transaction
from flowtrack.observability import get_logger
from flowtrack.services.storage.codec import dump_transactions, parse_transactions
from flowtrack.services.storage.interface import (
    CorruptDataError,
    LedgerStorageInterface,
    StorageReadError,
    StorageWriteError,
)


logger = get_logger(__name__)


class LocalFileStorage(LedgerStorageInterface):
    """
    JSON-file implementation of ledger storage.

    The document looks like:

        {"flowtrack-transactions": [{"id": "...", "type": "income", ...}]}
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        key: Optional[str] = None,
    ):
        """
        Initialize file storage.

        Args:
            path: JSON document location. Defaults to the configured path.
            key: Key the ledger is stored under. Defaults to the configured key.
        """
        if path is None or key is None:
            settings = get_settings().storage
            path = path if path is not None else settings.path
            key = key if key is not None else settings.key
        self._path = Path(path).expanduser()
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key(self) -> str:
        return self._key

    def _read_document(self) -> dict[str, Any]:
        """Read the whole keyed collection. A missing file is an empty one."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as e:
            raise CorruptDataError(f"{self._path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageReadError(f"Failed to read {self._path}: {e}") from e

        if not text.strip():
            return {}

        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"{self._path} is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise CorruptDataError(
                f"{self._path} should hold a JSON object, got {type(document).__name__}"
            )
        return document

    def _write_document(self, document: dict[str, Any]) -> None:
        """Atomically replace the document on disk."""
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageWriteError(f"Failed to write {self._path}: {e}") from e

    def _read_for_update(self) -> dict[str, Any]:
        # A corrupt document is replaced on the next write rather than
        # blocking every future save.
        try:
            return self._read_document()
        except StorageReadError as e:
            logger.warning(
                "storage_document_replaced",
                path=str(self._path),
                error=str(e),
            )
            return {}

    async def load(self) -> Optional[list[Transaction]]:
        """Read the transaction list stored under the ledger key."""
        document = self._read_document()
        if self._key not in document:
            return None
        return parse_transactions(document[self._key])

    async def save_all(self, transactions: list[Transaction]) -> None:
        """Write the full list under the ledger key."""
        document = self._read_for_update()
        document[self._key] = dump_transactions(transactions)
        self._write_document(document)
        logger.debug(
            "storage_saved",
            path=str(self._path),
            count=len(transactions),
        )

    async def clear(self) -> None:
        """Remove the ledger key; remove the file once nothing else is stored."""
        document = self._read_for_update()
        if not self._path.exists():
            return

        document.pop(self._key, None)
        if document:
            self._write_document(document)
            return

        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {self._path}: {e}") from e
        logger.debug("storage_cleared", path=str(self._path))

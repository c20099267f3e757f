"""
Ledger Store

Owns the authoritative, ordered list of transactions (most recently
added first) and keeps the persisted copy in sync with it.

Every mutation follows the same steps:
1. Read the current list
2. Compute the new list
3. Persist the complete new list (never a partial update)
4. Swap the in-memory reference

A failed write does not roll back the in-memory change. The store
remembers that disk is behind (has_unsaved_changes) so the caller can
tell the user their changes may not be saved. The next successful
write catches disk up because it always writes the whole list.
"""

from typing import Callable, Optional, Union
from uuid import uuid4

from flowtrack.models.transaction import (
    ALL_TYPES,
    Transaction,
    TransactionDraft,
    TransactionType,
    TypeFilter,
    ValidationResult,
    parse_type_filter,
)
from flowtrack.observability import get_logger
from flowtrack.services.storage import (
    LedgerStorageInterface,
    StorageError,
    StorageReadError,
)
from flowtrack.validation import TransactionValidationError, TransactionValidator


logger = get_logger(__name__)


def generate_transaction_id() -> str:
    """Create a new opaque transaction id."""
    return str(uuid4())


class LedgerStore:
    """
    In-memory transaction ledger backed by a storage adapter.

    Call load() once at startup before using the other operations.
    """

    # Guard against an id factory that keeps returning taken ids
    MAX_ID_ATTEMPTS = 10

    def __init__(
        self,
        storage: LedgerStorageInterface,
        validator: Optional[TransactionValidator] = None,
        id_factory: Callable[[], str] = generate_transaction_id,
    ):
        self._storage = storage
        self._validator = validator or TransactionValidator()
        self._id_factory = id_factory
        self._transactions: list[Transaction] = []
        self._unsaved_changes = False

    @property
    def has_unsaved_changes(self) -> bool:
        """True if the last write failed and disk is behind memory."""
        return self._unsaved_changes

    def __len__(self) -> int:
        return len(self._transactions)

    def __contains__(self, transaction_id: object) -> bool:
        return any(tx.id == transaction_id for tx in self._transactions)

    async def load(self) -> list[Transaction]:
        """
        Replace the in-memory list with the persisted one.

        Missing data gives an empty ledger. Unreadable or corrupt data is
        logged and also gives an empty ledger; it never raises.
        """
        try:
            stored = await self._storage.load()
        except StorageReadError as e:
            logger.error(
                "ledger_load_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            stored = None

        transactions: list[Transaction] = []
        seen_ids: set[str] = set()
        for tx in stored or []:
            if tx.id in seen_ids:
                logger.warning("duplicate_transaction_id", transaction_id=tx.id)
                continue
            seen_ids.add(tx.id)
            transactions.append(tx)

        self._transactions = transactions
        self._unsaved_changes = False
        logger.info("ledger_loaded", count=len(transactions))
        return self.list_all()

    async def add(self, draft: TransactionDraft) -> Transaction:
        """
        Validate a draft and prepend it to the ledger.

        Returns:
            The created transaction with its generated id

        Raises:
            TransactionValidationError: If the draft is missing required
                fields; the ledger is left untouched
        """
        transaction, _ = await self.add_with_result(draft)
        return transaction

    async def add_with_result(
        self,
        draft: TransactionDraft,
    ) -> tuple[Transaction, ValidationResult]:
        """Same as add(), also returning the validation result (with warnings)."""
        result = self._validator.validate(draft)
        if not result.is_valid:
            logger.info(
                "transaction_rejected",
                type=draft.type.value,
                fields=result.error_fields,
            )
            raise TransactionValidationError(result)

        transaction = draft.to_transaction(self._new_id())
        updated = [transaction, *self._transactions]
        await self._persist(updated)
        self._transactions = updated

        logger.info(
            "transaction_added",
            transaction_id=transaction.id,
            type=transaction.type,
            count=len(updated),
        )
        return transaction, result

    async def delete(self, transaction_id: str) -> bool:
        """
        Remove the transaction with this id.

        Deleting an unknown id is a no-op, not an error.

        Returns:
            True if a transaction was removed
        """
        updated = [tx for tx in self._transactions if tx.id != transaction_id]
        if len(updated) == len(self._transactions):
            logger.debug("transaction_delete_noop", transaction_id=transaction_id)
            return False

        await self._persist(updated)
        self._transactions = updated

        logger.info(
            "transaction_deleted",
            transaction_id=transaction_id,
            count=len(updated),
        )
        return True

    def list_all(self) -> list[Transaction]:
        """All transactions, most recently added first."""
        return list(self._transactions)

    def list_by_type(
        self,
        type_filter: Union[TypeFilter, str] = ALL_TYPES,
    ) -> list[Transaction]:
        """
        Transactions matching a type filter, in ledger order.

        Raises:
            ValueError: If the filter is not "all" or a transaction type
        """
        type_filter = parse_type_filter(type_filter)
        if type_filter == ALL_TYPES:
            return self.list_all()
        return [tx for tx in self._transactions if tx.type == type_filter]

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for tx in self._transactions:
            if tx.id == transaction_id:
                return tx
        return None

    def count_by_type(self) -> dict[TransactionType, int]:
        """Number of records per type, for the history filter labels."""
        counts = {t: 0 for t in TransactionType}
        for tx in self._transactions:
            counts[tx.transaction_type] += 1
        return counts

    def _new_id(self) -> str:
        taken = {tx.id for tx in self._transactions}
        for _ in range(self.MAX_ID_ATTEMPTS):
            candidate = self._id_factory()
            if candidate and candidate not in taken:
                return candidate
        raise RuntimeError(
            f"Could not generate a unique transaction id after {self.MAX_ID_ATTEMPTS} attempts"
        )

    async def _persist(self, transactions: list[Transaction]) -> None:
        """Write the complete list, or clear storage when the list is empty."""
        try:
            if transactions:
                await self._storage.save_all(transactions)
            else:
                await self._storage.clear()
        except StorageError as e:
            self._unsaved_changes = True
            logger.error(
                "ledger_save_failed",
                error=str(e),
                error_type=type(e).__name__,
                count=len(transactions),
            )
            return
        self._unsaved_changes = False

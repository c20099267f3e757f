"""
Main Orchestrator for FlowTrack

This module ties the ledger to whatever presentation layer is in front
of it and defines the four user-facing interactions:
1. Submit a stock movement (in / out)
2. Submit a payment (income / expense)
3. Request history (optionally filtered by type)
4. Request deletion of one record

DESIGN DECISION: The presentation layer never talks to the ledger or
storage directly. It gets plain result objects back, including whether
the change reached disk, and never has to catch ledger exceptions.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import ValidationError

from flowtrack.config import Settings, get_settings
from flowtrack.ledger import LedgerStore
from flowtrack.models.transaction import (
    ALL_TYPES,
    DeletionResult,
    PaymentDirection,
    StockDirection,
    SubmissionResult,
    Transaction,
    TransactionDraft,
    TransactionType,
    TypeFilter,
    ValidationIssue,
    ValidationResult,
)
from flowtrack.observability import configure_logging, get_logger
from flowtrack.services.storage import (
    InMemoryStorage,
    LedgerStorageInterface,
    LocalFileStorage,
)
from flowtrack.validation import TransactionValidationError, TransactionValidator


logger = get_logger(__name__)

UNSAVED_MESSAGE = "Changes may not be saved: the ledger could not be written to disk."


class LedgerFlow:
    """
    Presentation-facing entry point to the ledger.

    Wraps a loaded LedgerStore and translates form submissions into
    drafts, and ledger outcomes into result objects.
    """

    def __init__(
        self,
        store: LedgerStore,
        validator: Optional[TransactionValidator] = None,
    ):
        self._store = store
        self._validator = validator or TransactionValidator()

    @property
    def store(self) -> LedgerStore:
        return self._store

    async def submit_stock_movement(
        self,
        name: str,
        item: Optional[str],
        quantity: Optional[int],
        direction: Union[StockDirection, str],
        date: date,
        notes: Optional[str] = None,
    ) -> SubmissionResult:
        """Record goods received (direction "in") or dispensed ("out")."""
        return await self._submit(
            type=StockDirection(direction).transaction_type,
            name=name,
            item=item,
            quantity=quantity,
            notes=notes,
            date=date,
        )

    async def submit_payment(
        self,
        name: str,
        amount: Optional[Union[Decimal, str, float]],
        direction: Union[PaymentDirection, str],
        date: date,
        notes: Optional[str] = None,
    ) -> SubmissionResult:
        """Record money received ("income") or spent ("expense")."""
        return await self._submit(
            type=PaymentDirection(direction).transaction_type,
            name=name,
            amount=amount,
            notes=notes,
            date=date,
        )

    def request_history(
        self,
        type_filter: Union[TypeFilter, str] = ALL_TYPES,
    ) -> list[Transaction]:
        """Ledger records, newest first, optionally narrowed to one type."""
        return self._store.list_by_type(type_filter)

    async def request_deletion(self, transaction_id: str) -> DeletionResult:
        """Delete one record by id. Unknown ids are acknowledged, not errors."""
        deleted = await self._store.delete(transaction_id)
        saved = not self._store.has_unsaved_changes

        if not deleted:
            message = "Nothing to delete."
        elif saved:
            message = "Transaction deleted."
        else:
            message = UNSAVED_MESSAGE

        return DeletionResult(
            transaction_id=transaction_id,
            deleted=deleted,
            saved=saved,
            message=message,
        )

    def summarize_validation(self, result: SubmissionResult) -> str:
        """User-facing text for a submission's validation outcome."""
        return self._validator.get_user_friendly_summary(result.validation)

    async def _submit(self, **fields: Any) -> SubmissionResult:
        try:
            draft = TransactionDraft(**fields)
        except ValidationError as e:
            # Form values that cannot even be parsed (e.g. "abc" as quantity)
            return SubmissionResult(
                success=False,
                validation=_parse_errors_to_result(e),
                saved=False,
                message="Please check the highlighted fields.",
            )

        try:
            transaction, validation = await self._store.add_with_result(draft)
        except TransactionValidationError as e:
            return SubmissionResult(
                success=False,
                validation=e.result,
                saved=False,
                message="Please fill in all required fields.",
            )

        saved = not self._store.has_unsaved_changes
        label = TransactionType(transaction.type).label
        return SubmissionResult(
            success=True,
            transaction=transaction,
            validation=validation,
            saved=saved,
            message=f"{label} recorded." if saved else UNSAVED_MESSAGE,
        )


def _parse_errors_to_result(error: ValidationError) -> ValidationResult:
    issues = [
        ValidationIssue(
            field=".".join(str(part) for part in err["loc"]) or "draft",
            issue_type="invalid_format",
            message=err["msg"],
            severity="error",
        )
        for err in error.errors()
    ]
    return ValidationResult(schema_valid=False, is_valid=False, issues=issues)


def create_storage(settings: Optional[Settings] = None) -> LedgerStorageInterface:
    """Build the storage adapter selected in settings."""
    storage_settings = (settings or get_settings()).storage
    if storage_settings.backend == "memory":
        return InMemoryStorage(key=storage_settings.key)
    return LocalFileStorage(path=storage_settings.path, key=storage_settings.key)


async def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[LedgerStorageInterface] = None,
) -> LedgerFlow:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from. Defaults to get_settings().
        storage: Use this adapter instead of the configured one.

    Returns:
        A LedgerFlow whose store has already been loaded
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(
        level=app_settings.effective_log_level,
        json_logs=app_settings.json_logs,
    )

    storage = storage or create_storage(settings)
    validator = TransactionValidator(app_settings)
    store = LedgerStore(storage, validator=validator)
    await store.load()

    logger.info(
        "app_components_created",
        storage=type(storage).__name__,
        environment=app_settings.app_environment,
    )
    return LedgerFlow(store, validator=validator)

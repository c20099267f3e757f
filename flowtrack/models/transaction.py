"""
Core Data Models for FlowTrack

These models define the strict schemas for everything the ledger holds.
They are designed to:
1. Make an invalid stock/payment combination impossible to construct
2. Provide clear validation error messages
3. Round-trip losslessly through the persisted JSON form

DESIGN DECISION: A transaction is a tagged variant, one model per type,
discriminated on the `type` field. Stock records carry item + quantity,
payment records carry amount, and neither can carry the other's fields.
Stored records are frozen; the ledger never edits them in place.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionCategory(str, Enum):
    """Which group of fields a transaction carries."""
    STOCK = "stock"
    PAYMENT = "payment"


class TransactionType(str, Enum):
    """
    The four kinds of events a user can record.

    Values match the persisted `type` field exactly.
    """
    STOCK_IN = "stock-in"
    STOCK_OUT = "stock-out"
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def category(self) -> TransactionCategory:
        if self in (TransactionType.STOCK_IN, TransactionType.STOCK_OUT):
            return TransactionCategory.STOCK
        return TransactionCategory.PAYMENT

    @property
    def is_stock(self) -> bool:
        return self.category is TransactionCategory.STOCK

    @property
    def label(self) -> str:
        """Human readable name, e.g. 'Stock In'."""
        return self.value.replace("-", " ").title()


class StockDirection(str, Enum):
    """Direction chosen on the stock movement form."""
    IN = "in"
    OUT = "out"

    @property
    def transaction_type(self) -> TransactionType:
        if self is StockDirection.IN:
            return TransactionType.STOCK_IN
        return TransactionType.STOCK_OUT


class PaymentDirection(str, Enum):
    """Direction chosen on the payment form."""
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def transaction_type(self) -> TransactionType:
        return TransactionType(self.value)


ALL_TYPES = "all"

TypeFilter = Union[Literal["all"], TransactionType]


def parse_type_filter(value: Union[str, TransactionType]) -> TypeFilter:
    """
    Normalize a history filter.

    Accepts "all", a TransactionType, or a type's string value.
    Raises ValueError for anything else.
    """
    if isinstance(value, TransactionType):
        return value
    if value == ALL_TYPES:
        return ALL_TYPES
    try:
        return TransactionType(value)
    except ValueError:
        allowed = [ALL_TYPES] + [t.value for t in TransactionType]
        raise ValueError(f"Unknown type filter: {value!r}. Allowed: {allowed}") from None


def _coerce_calendar_date(value):
    """
    Accept ISO datetime strings where a calendar date is expected.

    Older clients persisted full timestamps such as
    "2024-01-05T10:30:00.000Z"; only the calendar date is kept. Those were
    UTC instants of a local-time pick, so aware values are read back in
    the local time zone.
    """
    if isinstance(value, str) and "T" in value:
        value = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


# =============================================================================
# DRAFT - what the caller submits before validation
# =============================================================================

class TransactionDraft(BaseModel):
    """
    A caller-supplied transaction payload before id assignment.

    CRITICAL: This is UNVALIDATED data. Every field except type and date
    is optional here so that gaps surface as validation issues instead of
    construction errors. Only TransactionValidator decides whether a
    draft may become a Transaction.
    """
    model_config = ConfigDict(frozen=True)

    type: TransactionType = Field(
        ...,
        description="Which kind of event this is"
    )
    name: str = Field(
        default="",
        description="Counterparty, source or expense description"
    )
    item: Optional[str] = Field(
        default=None,
        description="Item moved (stock types only)"
    )
    quantity: Optional[int] = Field(
        default=None,
        description="Units moved (stock types only)"
    )
    amount: Optional[Decimal] = Field(
        default=None,
        description="Currency value (payment types only)"
    )
    notes: Optional[str] = None
    date: dt.date = Field(
        ...,
        description="Calendar date of the event"
    )

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v):
        return _coerce_calendar_date(v)

    def to_transaction(self, transaction_id: str) -> "Transaction":
        """
        Build the typed record for this draft.

        Only the fields belonging to the draft's category are copied.
        Raises pydantic.ValidationError if the draft is incomplete; call
        TransactionValidator first to get readable issues instead.
        """
        variant = TRANSACTION_VARIANTS[self.type]
        fields = {
            "id": transaction_id,
            "name": self.name,
            "notes": self.notes,
            "date": self.date,
        }
        if self.type.is_stock:
            fields.update(item=self.item, quantity=self.quantity)
        else:
            fields.update(amount=self.amount)
        return variant(**fields)


# =============================================================================
# STORED TRANSACTIONS - one model per type
# =============================================================================

class _TransactionBase(BaseModel):
    """Fields shared by every transaction type."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique identifier, assigned at creation"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Counterparty, source or expense description"
    )
    notes: Optional[str] = Field(
        default=None,
        description="Free text; None and '' are kept distinct"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the event"
    )

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v):
        return _coerce_calendar_date(v)

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be blank")
        return v

    @property
    def transaction_type(self) -> TransactionType:
        return TransactionType(self.type)


class StockMovement(_TransactionBase):
    """Goods received or dispensed."""

    item: str = Field(
        ...,
        min_length=1,
        description="What was moved"
    )
    quantity: int = Field(
        ...,
        gt=0,
        description="How many units were moved"
    )

    @field_validator('item')
    @classmethod
    def item_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Item cannot be blank")
        return v


class Payment(_TransactionBase):
    """Money received or spent."""

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Currency value"
    )


class StockInTransaction(StockMovement):
    type: Literal["stock-in"] = "stock-in"


class StockOutTransaction(StockMovement):
    type: Literal["stock-out"] = "stock-out"


class IncomeTransaction(Payment):
    type: Literal["income"] = "income"


class ExpenseTransaction(Payment):
    type: Literal["expense"] = "expense"


Transaction = Annotated[
    Union[
        StockInTransaction,
        StockOutTransaction,
        IncomeTransaction,
        ExpenseTransaction,
    ],
    Field(discriminator="type"),
]

TRANSACTION_VARIANTS: dict[TransactionType, type[_TransactionBase]] = {
    TransactionType.STOCK_IN: StockInTransaction,
    TransactionType.STOCK_OUT: StockOutTransaction,
    TransactionType.INCOME: IncomeTransaction,
    TransactionType.EXPENSE: ExpenseTransaction,
}


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found on a draft."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage draft validation.

    Stage 1: Schema validation (required fields, category fields)
    Stage 2: Semantic validation (sanity checks, warnings only)
    """

    validated_at: dt.datetime = Field(
        default_factory=dt.datetime.now
    )

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_fields(self) -> list[str]:
        return [issue.field for issue in self.issues if issue.severity == "error"]


# =============================================================================
# FLOW RESULTS (what the presentation layer receives)
# =============================================================================

class SubmissionResult(BaseModel):
    """Outcome of submitting a stock movement or payment form."""

    success: bool
    transaction: Optional[Transaction] = None
    validation: ValidationResult
    saved: bool = Field(
        default=False,
        description="False if the ledger could not be written to disk"
    )
    message: str = Field(
        ...,
        description="Short message suitable for showing to the user"
    )


class DeletionResult(BaseModel):
    """Acknowledgement of a deletion request."""

    transaction_id: str
    deleted: bool = Field(
        ...,
        description="False if no record had this id (not an error)"
    )
    saved: bool = True
    message: str

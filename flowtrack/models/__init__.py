"""
Data Models Package

This package contains all Pydantic models used in FlowTrack.
All data flowing through the ledger must conform to these schemas.
"""

from flowtrack.models.transaction import (
    ALL_TYPES,
    TRANSACTION_VARIANTS,
    DeletionResult,
    ExpenseTransaction,
    IncomeTransaction,
    Payment,
    PaymentDirection,
    StockDirection,
    StockInTransaction,
    StockMovement,
    StockOutTransaction,
    SubmissionResult,
    Transaction,
    TransactionCategory,
    TransactionDraft,
    TransactionType,
    TypeFilter,
    ValidationIssue,
    ValidationResult,
    parse_type_filter,
)

__all__ = [
    # Transaction models
    "ALL_TYPES",
    "TRANSACTION_VARIANTS",
    "ExpenseTransaction",
    "IncomeTransaction",
    "Payment",
    "PaymentDirection",
    "StockDirection",
    "StockInTransaction",
    "StockMovement",
    "StockOutTransaction",
    "Transaction",
    "TransactionCategory",
    "TransactionDraft",
    "TransactionType",
    "TypeFilter",
    "parse_type_filter",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Flow results
    "DeletionResult",
    "SubmissionResult",
]

"""
Two-Stage Draft Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Name present
- Category fields present and positive (item + quantity, or amount)
- No fields from the other category
- Errors here block the save

STAGE 2 - SEMANTIC VALIDATION:
- Dates far in the future
- Absurd amounts or quantities
- Warnings only; the user decides

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the form can re-prompt.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from flowtrack.config import AppSettings, get_settings
from flowtrack.models.transaction import (
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)


class TransactionValidator:
    """
    Validates transaction drafts before they reach the ledger.

    Stage 1: Schema validation (required and category fields)
    Stage 2: Semantic validation (sanity warnings)
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        """
        Args:
            settings: Thresholds for the semantic stage.
                      Defaults to the configured application settings.
        """
        self._settings = settings or get_settings().app

    def _validate_schema(
        self,
        draft: TransactionDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not draft.name or not draft.name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Name is required",
                severity="error",
                suggested_fix="Enter who the transaction was with or what it was for",
            ))

        if draft.type.is_stock:
            issues.extend(self._check_stock_fields(draft))
        else:
            issues.extend(self._check_payment_fields(draft))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _check_stock_fields(self, draft: TransactionDraft) -> list[ValidationIssue]:
        issues = []

        if draft.item is None or not draft.item.strip():
            issues.append(ValidationIssue(
                field="item",
                issue_type="missing",
                message="Item is required for stock movements",
                severity="error",
                suggested_fix="Enter the item that was received or dispensed",
            ))

        if draft.quantity is None:
            issues.append(ValidationIssue(
                field="quantity",
                issue_type="missing",
                message="Quantity is required for stock movements",
                severity="error",
            ))
        elif draft.quantity <= 0:
            issues.append(ValidationIssue(
                field="quantity",
                issue_type="invalid_value",
                message="Quantity must be greater than zero",
                severity="error",
            ))

        if draft.amount is not None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_applicable",
                message="Stock movements do not carry an amount",
                severity="error",
                suggested_fix="Record the payment separately as income or expense",
            ))

        return issues

    def _check_payment_fields(self, draft: TransactionDraft) -> list[ValidationIssue]:
        issues = []

        if draft.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required for payments",
                severity="error",
            ))
        elif not draft.amount.is_finite() or draft.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))

        for field in ("item", "quantity"):
            if getattr(draft, field) is not None:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="not_applicable",
                    message=f"Payments do not carry {field}",
                    severity="error",
                    suggested_fix="Record goods separately as a stock movement",
                ))

        return issues

    def _validate_semantic(
        self,
        draft: TransactionDraft,
    ) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Only produces warnings; a draft that passed stage 1 is always savable.
        """
        issues = []
        today = date.today()

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if draft.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({draft.date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        max_amount = Decimal(str(self._settings.max_reasonable_amount))
        if draft.amount is not None and draft.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=(
                    f"Amount ({self._settings.currency_symbol}{draft.amount:,.2f}) "
                    "seems unusually high"
                ),
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if (
            draft.quantity is not None
            and draft.quantity > self._settings.max_reasonable_quantity
        ):
            issues.append(ValidationIssue(
                field="quantity",
                issue_type="suspicious_value",
                message=f"Quantity ({draft.quantity:,}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify the quantity",
            ))

        return issues

    def validate(self, draft: TransactionDraft) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            draft: The draft to validate

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(draft)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        if schema_valid:
            all_issues.extend(self._validate_semantic(draft))

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        return ValidationResult(
            schema_valid=schema_valid,
            is_valid=schema_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what the entry forms show under the submit button.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if result.has_errors:
            lines.append("❌ Some required information is missing or invalid:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)


class TransactionValidationError(ValueError):
    """A draft failed schema validation and was not added to the ledger."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Invalid transaction: {messages}")

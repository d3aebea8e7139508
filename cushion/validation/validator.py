"""
Two-Stage Transaction Validation

STAGE 1 - SCHEMA VALIDATION:
- Amount present, numeric and positive
- Type is one of expense / income / transfer
- Date is a date or a YYYY-MM-DD string

STAGE 2 - SEMANTIC VALIDATION (only when stage 1 passes):
- Absurd amount detection
- Far-future date detection
- Category outside the defaults for the type
- Same day / amount / category already in the log

Stage 1 errors block the save. Stage 2 only produces warnings: the
transaction is still built, the user just gets told.

Missing description and category are not issues; the Transaction model
fills in the sentinel defaults.
"""

from datetime import date, datetime, timedelta
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from cushion.config import get_settings
from cushion.models.transaction import (
    EXPENSE_CATEGORIES,
    FUND_CATEGORY,
    INCOME_CATEGORIES,
    Transaction,
    TransactionLog,
    TransactionType,
)
from cushion.models.views import ValidationIssue, ValidationResult
from cushion.utils.dates import parse_date_key
from cushion.utils.numbers import parse_number


class TransactionValidator:
    """
    Validates a transaction draft and builds the Transaction.

    Used for both add and edit: pass transaction_id and created_at to keep
    an existing record's identity on edit.
    """

    def __init__(self, max_amount: Optional[float] = None, future_tolerance_days: Optional[int] = None):
        settings = get_settings().app
        self._max_amount = max_amount if max_amount is not None else settings.max_transaction_amount
        self._future_days = (
            future_tolerance_days
            if future_tolerance_days is not None
            else settings.future_date_tolerance_days
        )

    def _validate_schema(
        self,
        raw_date: Any,
        raw_amount: Any,
        raw_type: Any,
    ) -> tuple[dict, list[ValidationIssue]]:
        """
        Stage 1: parse the fields the engine cannot do without.

        Returns: (parsed_fields, list_of_issues)
        """
        issues = []
        parsed = {}

        try:
            amount = parse_number(raw_amount)
        except ValueError:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount must be a number, got {raw_amount!r}",
                severity="error",
                suggested_fix="Enter the amount using digits only",
            ))
        else:
            if amount <= 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount must be greater than zero",
                    severity="error",
                    suggested_fix="Pick the type to record money going out instead of a negative amount",
                ))
            else:
                parsed["amount"] = amount

        try:
            parsed["type"] = TransactionType(raw_type)
        except ValueError:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message=f"Unknown transaction type: {raw_type!r}",
                severity="error",
                suggested_fix="Use expense, income or transfer",
            ))

        if isinstance(raw_date, datetime):
            parsed["date"] = raw_date.date()
        elif isinstance(raw_date, date):
            parsed["date"] = raw_date
        else:
            try:
                parsed["date"] = parse_date_key(str(raw_date))
            except ValueError:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="invalid_value",
                    message=f"Date must be YYYY-MM-DD, got {raw_date!r}",
                    severity="error",
                ))

        return parsed, issues

    def _validate_semantic(
        self,
        transaction: Transaction,
        today: date,
        existing_log: Optional[TransactionLog],
    ) -> list[ValidationIssue]:
        """Stage 2: warnings about plausible but suspicious data."""
        issues = []

        if transaction.amount > self._max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({transaction.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if transaction.date > today + timedelta(days=self._future_days):
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({transaction.date}) is far in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        known = INCOME_CATEGORIES if transaction.type is TransactionType.INCOME else EXPENSE_CATEGORIES
        if transaction.category not in known and transaction.category != FUND_CATEGORY:
            issues.append(ValidationIssue(
                field="category",
                issue_type="custom_category",
                message=f"Category '{transaction.category}' is not one of the defaults",
                severity="info",
            ))

        if existing_log:
            for other in existing_log.get(transaction.date_key, []):
                if (
                    other.id != transaction.id
                    and other.amount == transaction.amount
                    and other.category == transaction.category
                ):
                    issues.append(ValidationIssue(
                        field="duplicate",
                        issue_type="potential_duplicate",
                        message=(
                            f"A {transaction.category} movement of {transaction.amount:,.2f} "
                            f"already exists on {transaction.date_key}"
                        ),
                        severity="warning",
                        suggested_fix="Please verify this isn't a duplicate entry",
                    ))
                    break

        return issues

    def validate(
        self,
        tx_date: Any,
        amount: Any,
        tx_type: Any = TransactionType.EXPENSE,
        description: Optional[str] = None,
        category: Optional[str] = None,
        *,
        transaction_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        user_id: str = "",
        existing_log: Optional[TransactionLog] = None,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run the validation pipeline.

        Returns:
            ValidationResult; its transaction is set whenever there are no
            error-level issues
        """
        parsed, issues = self._validate_schema(tx_date, amount, tx_type)
        if any(issue.severity == "error" for issue in issues):
            return ValidationResult(is_valid=False, issues=issues)

        fields = {
            "date": parsed["date"],
            "amount": parsed["amount"],
            "type": parsed["type"],
            "description": description,
            "category": category,
            "user_id": user_id,
        }
        if transaction_id:
            fields["id"] = transaction_id
        if created_at is not None:
            fields["created_at"] = created_at
        try:
            transaction = Transaction(**fields)
        except PydanticValidationError as e:
            for error in e.errors():
                issues.append(ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]) or "transaction",
                    issue_type="invalid_value",
                    message=error["msg"],
                    severity="error",
                ))
            return ValidationResult(is_valid=False, issues=issues)

        issues.extend(self._validate_semantic(transaction, today or date.today(), existing_log))
        return ValidationResult(is_valid=True, issues=issues, transaction=transaction)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Summary shown next to the entry form."""
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []
        if result.has_errors:
            lines.append("❌ The movement could not be saved:")
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

"""Tests for the Pydantic models: transactions, profile, results and audit events."""

import json
from datetime import date, datetime, timezone
from uuid import uuid4

import pytest

from cushion.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from cushion.models.profile import FinancialProfile, FundKey
from cushion.models.transaction import (
    DEFAULT_CATEGORY,
    DEFAULT_EXPENSE_DESCRIPTION,
    DEFAULT_INCOME_DESCRIPTION,
    Transaction,
    TransactionType,
    flatten_log,
    log_to_records,
)
from cushion.models.views import OperationResult, ValidationIssue, ValidationResult


class TestTransactionType:
    """Tests for the central balance/spending rules."""

    def test_balance_signs(self):
        """Income adds; expense and transfer subtract."""
        assert TransactionType.INCOME.balance_sign == 1
        assert TransactionType.EXPENSE.balance_sign == -1
        assert TransactionType.TRANSFER.balance_sign == -1

    def test_only_expense_is_spending(self):
        """Transfers move money to a fund; they are not spending."""
        assert TransactionType.EXPENSE.is_spending is True
        assert TransactionType.INCOME.is_spending is False
        assert TransactionType.TRANSFER.is_spending is False


class TestTransaction:
    """Tests for the Transaction model."""

    def test_missing_category_and_description_take_defaults(self):
        """Test sentinel defaults for an expense."""
        tx = Transaction(date=date(2024, 3, 5), amount=10)
        assert tx.category == DEFAULT_CATEGORY
        assert tx.description == DEFAULT_EXPENSE_DESCRIPTION
        assert tx.type is TransactionType.EXPENSE

    def test_income_default_description(self):
        tx = Transaction(date=date(2024, 3, 5), amount=10, type="income", description=None)
        assert tx.description == DEFAULT_INCOME_DESCRIPTION

    def test_rejects_non_positive_amount(self):
        """Direction is carried by type, never by sign."""
        with pytest.raises(ValueError):
            Transaction(date=date(2024, 3, 5), amount=-5)
        with pytest.raises(ValueError):
            Transaction(date=date(2024, 3, 5), amount=0)

    def test_signed_amount(self):
        assert Transaction(date=date(2024, 3, 5), amount=30, type="transfer").signed_amount == -30
        assert Transaction(date=date(2024, 3, 5), amount=30, type="income").signed_amount == 30

    def test_is_adjustment(self):
        """Checkpoint marker in the description flags an adjustment."""
        tx = Transaction(date=date(2024, 3, 5), amount=1, description="🔄 Balance adjustment (Checkpoint)")
        assert tx.is_adjustment is True
        assert Transaction(date=date(2024, 3, 5), amount=1).is_adjustment is False

    def test_record_is_camel_case(self):
        """Test the serialized record uses camelCase keys and ISO dates."""
        tx = Transaction(
            date=date(2024, 3, 5),
            amount=12.5,
            user_id="u1",
            created_at=datetime(2024, 3, 5, 9, 0, tzinfo=timezone.utc),
        )
        record = tx.to_record()
        assert record["date"] == "2024-03-05"
        assert record["userId"] == "u1"
        assert "createdAt" in record
        assert "user_id" not in record

    def test_loads_from_camel_case_record(self):
        tx = Transaction.model_validate({
            "id": "abc",
            "date": "2024-03-05",
            "amount": 3,
            "type": "income",
            "userId": "u1",
            "createdAt": "2024-03-05T10:00:00Z",
        })
        assert tx.user_id == "u1"
        assert tx.date_key == "2024-03-05"

    def test_flatten_log_orders_by_day(self, make_tx):
        later = make_tx("2024-03-10", 1)
        earlier = make_tx("2024-03-02", 2)
        log = {"2024-03-10": [later], "2024-03-02": [earlier]}
        assert flatten_log(log) == [earlier, later]
        assert list(log_to_records(log)) == ["2024-03-10", "2024-03-02"]


class TestFinancialProfile:
    """Tests for the FinancialProfile model."""

    def test_defaults(self):
        profile = FinancialProfile()
        assert profile.monthly_salary == 0
        assert profile.payday == 1
        assert profile.currency == "EUR"
        assert profile.budgets["Comidas"] == 0
        assert profile.last_distribution_month is None

    def test_nulls_load_as_zero(self):
        """Missing or null values are treated as zero / empty."""
        profile = FinancialProfile.model_validate({
            "monthlySalary": None,
            "payday": None,
            "fundBalances": {"travel": None},
            "pockets": None,
        })
        assert profile.monthly_salary == 0
        assert profile.payday == 1
        assert profile.fund_balances == {"travel": 0.0}
        assert profile.pockets == {}

    def test_payday_bounds(self):
        with pytest.raises(ValueError):
            FinancialProfile(payday=32)

    def test_fund_keys_builtin_first(self):
        profile = FinancialProfile(pockets={"car": 50, "travel": 20})
        assert profile.fund_keys == [
            FundKey.INVESTMENTS.value,
            FundKey.TRAVEL.value,
            FundKey.FLEXIBLE.value,
            "car",
        ]

    def test_totals(self):
        profile = FinancialProfile(fund_balances={"a": 10, "b": 5}, pockets={"a": 3, "b": 4})
        assert profile.total_fund_balance == 15
        assert profile.total_pockets == 7

    def test_record_round_trips_through_json(self):
        profile = FinancialProfile(monthly_salary=1500, last_distribution_month="2024-03")
        record = json.loads(json.dumps(profile.to_record()))
        assert record["monthlySalary"] == 1500
        assert FinancialProfile.model_validate(record) == profile


class TestResults:
    """Tests for validation and handler result models."""

    def test_validation_result_has_errors(self):
        result = ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount must be greater than zero",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_warnings_do_not_count_as_errors(self):
        result = ValidationResult(
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.warnings == ["Date in future"]

    def test_issue_severity_is_checked(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")

    def test_operation_result_first_transaction(self, make_tx):
        tx = make_tx("2024-03-05", 5)
        assert OperationResult(success=True, transactions=[tx]).transaction is tx
        assert OperationResult(success=False).transaction is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.FUND_ADJUSTED,
            description="Fund adjusted",
            details={"fund": "travel"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "fund_adjusted"
        assert log_dict["details"]["fund"] == "travel"

    def test_audit_event_to_sheets_row(self):
        event = AuditEvent(
            event_type=AuditEventType.PROFILE_SAVED,
            description="Profile saved",
            user_id="u1",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 12
        assert row[2] == "profile_saved"
        assert row[6] == "u1"
        assert row[11] == "True"

    def test_builder_transaction_added(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.transaction_added(
            transaction_id="t1",
            tx_type="expense",
            amount=12.5,
            date_key="2024-03-05",
            user_id="u1",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.entity_id == "t1"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_builder_checkpoint_without_adjustment_is_skipped(self):
        event = AuditEventBuilder.checkpoint(
            target_date="2024-03-31",
            calculated=60,
            actual=60,
            difference=0,
            adjustment_id=None,
            user_id="u1",
            correlation_id=None,
        )
        assert event.event_type == AuditEventType.CHECKPOINT_SKIPPED

    def test_builder_plan_source(self):
        event = AuditEventBuilder.profile_saved(user_id="u1", correlation_id=None, source="plan")
        assert event.event_type == AuditEventType.PLAN_IMPORTED

    def test_builder_save_failed_is_error(self):
        event = AuditEventBuilder.save_failed(
            operation="add_transaction",
            entity_id="t1",
            error_message="quota exceeded",
            user_id="u1",
            correlation_id=None,
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "quota exceeded"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

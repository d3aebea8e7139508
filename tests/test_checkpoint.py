"""Tests for checkpoint reconciliation."""

from datetime import date, datetime, timezone

import pytest

from cushion.engine.aggregation import cushion_at
from cushion.engine.checkpoint import create_checkpoint
from cushion.engine.exceptions import CheckpointValidationError
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import TransactionType


class TestCheckpoint:
    """Tests for create_checkpoint."""

    def test_positive_difference_emits_income(self, march_log):
        result = create_checkpoint(
            march_log,
            FinancialProfile(),
            date(2024, 3, 31),
            actual_balance=100,
            user_id="u1",
        )
        assert result.calculated_balance == 60
        assert result.difference == 40

        adjustment = result.adjustment
        assert adjustment.type is TransactionType.INCOME
        assert adjustment.amount == 40
        assert adjustment.date == date(2024, 3, 31)
        assert adjustment.is_adjustment is True
        assert adjustment.category == "Otros"
        assert adjustment.user_id == "u1"
        assert result.log["2024-03-31"] == [adjustment]

    def test_negative_difference_emits_expense(self, march_log):
        result = create_checkpoint(march_log, FinancialProfile(), date(2024, 3, 31), actual_balance="45,5")
        assert result.adjustment.type is TransactionType.EXPENSE
        assert result.adjustment.amount == pytest.approx(14.5)

    def test_input_log_not_mutated(self, march_log):
        before = {key: list(txs) for key, txs in march_log.items()}
        create_checkpoint(march_log, FinancialProfile(), date(2024, 3, 31), actual_balance=100)
        assert march_log == before

    def test_idempotent(self, march_log):
        """A second checkpoint with the same balance adds nothing."""
        profile = FinancialProfile()
        now = datetime(2024, 3, 31, 12, tzinfo=timezone.utc)
        first = create_checkpoint(march_log, profile, date(2024, 3, 31), actual_balance=100, now=now)
        second = create_checkpoint(first.log, first.profile, date(2024, 3, 31), actual_balance=100, now=now)

        assert second.adjustment is None
        assert second.reconciled_without_adjustment is True
        assert second.log == first.log
        assert cushion_at(second.log, profile, date(2024, 3, 31)) == 100

    def test_within_tolerance(self, march_log):
        result = create_checkpoint(march_log, FinancialProfile(), date(2024, 3, 31), actual_balance=60.005)
        assert result.adjustment is None

    def test_accounts_are_summed_and_stored(self, march_log):
        result = create_checkpoint(
            march_log,
            FinancialProfile(accounts={"cash": 5}),
            date(2024, 3, 31),
            accounts={"bank": 70, "revolut": "30"},
        )
        assert result.actual_balance == 100
        assert result.profile.accounts == {"cash": 5, "bank": 70, "revolut": 30}
        assert result.adjustment.amount == 40

    def test_non_numeric_balance_rejected(self, march_log):
        with pytest.raises(CheckpointValidationError):
            create_checkpoint(march_log, FinancialProfile(), date(2024, 3, 31), actual_balance="lots")

    def test_non_numeric_account_rejected(self, march_log):
        with pytest.raises(CheckpointValidationError, match="account bank"):
            create_checkpoint(march_log, FinancialProfile(), date(2024, 3, 31), accounts={"bank": "?"})

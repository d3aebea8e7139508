"""
Tests for the ledger session handlers.

Every handler applies its change in memory first; a failing store must
leave the in-memory change in place and surface as persisted=False.
"""

import asyncio
import json
from datetime import date

import pytest

from cushion.audit import AuditLogger
from cushion.engine.funds import FundMode
from cushion.models.audit import AuditEventType
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import TransactionType
from cushion.orchestrator import LedgerSession, create_session
from cushion.services.storage import (
    InMemoryAuditStorage,
    InMemoryProfileStorage,
    InMemoryTransactionStorage,
    StorageError,
)

TODAY = date(2024, 3, 15)


@pytest.fixture
def stores():
    return InMemoryTransactionStorage(), InMemoryProfileStorage(), InMemoryAuditStorage()


@pytest.fixture
def session(stores):
    transactions, profiles, audit = stores
    return LedgerSession(
        user_id="u1",
        transaction_storage=transactions,
        profile_storage=profiles,
        audit_logger=AuditLogger(audit, user_id="u1"),
    )


def _event_types(audit):
    return [event.event_type for event in audit.events]


class TestTransactionHandlers:
    """Tests for add / edit / delete."""

    def test_add(self, session, stores):
        transactions, _, audit = stores
        result = asyncio.run(session.add_transaction("2024-03-10", "12,5", "expense", "Lunch", "Comidas", today=TODAY))

        assert result.success is True
        assert result.persisted is True
        assert session.log["2024-03-10"] == [result.transaction]
        assert result.transaction.user_id == "u1"
        assert len(transactions) == 1
        assert _event_types(audit) == [AuditEventType.TRANSACTION_ADDED]

    def test_add_with_long_description(self, session):
        result = asyncio.run(session.add_transaction(
            "2024-03-10", 10, "expense", "x" * 600, "Comidas", today=TODAY
        ))
        assert result.success is True
        assert session.log["2024-03-10"][0].description == "x" * 600

    def test_invalid_add_changes_nothing(self, session, stores):
        transactions, _, audit = stores
        result = asyncio.run(session.add_transaction("2024-03-10", "abc", today=TODAY))

        assert result.success is False
        assert result.issues
        assert session.log == {}
        assert len(transactions) == 0
        assert _event_types(audit) == [AuditEventType.VALIDATION_FAILED]

    def test_failed_save_keeps_in_memory_change(self, session, stores):
        transactions, _, audit = stores
        transactions.fail_with = StorageError("offline")

        result = asyncio.run(session.add_transaction("2024-03-10", 5, today=TODAY))

        assert result.success is True
        assert result.persisted is False
        assert "2024-03-10" in session.log
        assert AuditEventType.SAVE_FAILED in _event_types(audit)

    def test_edit_moves_day_and_keeps_identity(self, session):
        added = asyncio.run(session.add_transaction("2024-03-10", 5, today=TODAY)).transaction
        result = asyncio.run(session.edit_transaction(added.id, "2024-03-12", 8, "income", today=TODAY))

        assert result.success is True
        edited = result.transaction
        assert edited.id == added.id
        assert edited.created_at == added.created_at
        assert edited.type is TransactionType.INCOME
        assert "2024-03-10" not in session.log
        assert session.log["2024-03-12"] == [edited]

    def test_edit_unknown(self, session):
        result = asyncio.run(session.edit_transaction("missing", "2024-03-12", 8))
        assert result.success is False

    def test_delete(self, session, stores):
        transactions, _, _ = stores
        added = asyncio.run(session.add_transaction("2024-03-10", 5, today=TODAY)).transaction
        result = asyncio.run(session.delete_transaction(added.id))

        assert result.success is True
        assert session.log == {}
        assert len(transactions) == 0
        assert asyncio.run(session.delete_transaction(added.id)).success is False


class TestProfileAndFunds:
    """Tests for profile, checkpoint, fund and distribution handlers."""

    def test_save_profile(self, session, stores):
        _, profiles, _ = stores
        asyncio.run(session.save_profile(FinancialProfile(monthly_salary=900)))
        assert asyncio.run(profiles.load_profile("u1")).monthly_salary == 900

    def test_checkpoint(self, session, march_log):
        session._log = march_log
        result = asyncio.run(session.create_checkpoint(date(2024, 3, 31), 100))
        assert result.success is True
        assert result.transaction.amount == 40
        again = asyncio.run(session.create_checkpoint(date(2024, 3, 31), 100))
        assert again.transactions == []

    def test_checkpoint_invalid_balance(self, session, stores):
        _, _, audit = stores
        result = asyncio.run(session.create_checkpoint(date(2024, 3, 31), "lots"))
        assert result.success is False
        assert session.log == {}
        assert _event_types(audit) == [AuditEventType.VALIDATION_FAILED]

    def test_adjust_fund_set_mode(self, session, stores):
        _, profiles, _ = stores
        result = asyncio.run(session.adjust_fund(
            "travel", 250, impact_main_balance=True, mode=FundMode.SET, today=TODAY,
        ))
        assert result.success is True
        assert session.profile.fund_balances["travel"] == 250
        assert result.transaction.type is TransactionType.TRANSFER
        assert asyncio.run(profiles.load_profile("u1")).fund_balances["travel"] == 250

    def test_adjust_fund_invalid(self, session):
        assert asyncio.run(session.adjust_fund("", 5, impact_main_balance=False)).success is False

    def test_distribution_once_per_month(self, session, stores):
        _, _, audit = stores
        session._profile = FinancialProfile(pockets={"travel": 100, "investments": 50})

        first = asyncio.run(session.run_distribution(today=TODAY))
        second = asyncio.run(session.run_distribution(today=date(2024, 3, 20)))

        assert first.success is True
        assert len(first.transactions) == 2
        assert second.success is False
        assert len(session.log[TODAY.isoformat()]) == 2
        assert _event_types(audit) == [
            AuditEventType.DISTRIBUTION_EXECUTED,
            AuditEventType.DISTRIBUTION_SKIPPED,
        ]


class TestImportExport:
    """Tests for backup and plan handlers."""

    def test_backup_round_trip(self, session, stores):
        transactions, _, _ = stores
        asyncio.run(session.add_transaction("2024-03-10", 5, today=TODAY))
        document = asyncio.run(session.export_backup())

        other = LedgerSession(user_id="u1", transaction_storage=transactions)
        result = asyncio.run(other.import_backup(document))
        assert result.success is True
        assert other.log == session.log

    def test_malformed_backup_changes_nothing(self, session):
        asyncio.run(session.add_transaction("2024-03-10", 5, today=TODAY))
        before = session.log
        result = asyncio.run(session.import_backup("{broken"))
        assert result.success is False
        assert session.log is before

    def test_backup_keeps_profile_when_absent(self, session):
        session._profile = FinancialProfile(monthly_salary=10)
        text = json.dumps({"2024-03-01": [{"amount": 3}]})
        asyncio.run(session.import_backup(text))
        assert session.profile.monthly_salary == 10
        assert session.log["2024-03-01"][0].user_id == "u1"

    def test_import_plan(self, session, stores):
        _, _, audit = stores
        rows = [["Month", "Ingreso (€)", "Comidas"], ["March 2024", "1800", "250"]]
        result = asyncio.run(session.import_plan(rows, today=TODAY))
        assert result.success is True
        assert session.profile.monthly_salary == 1800
        assert session.profile.budgets["Comidas"] == 250
        assert _event_types(audit) == [AuditEventType.PLAN_IMPORTED]

    def test_import_plan_without_reader(self, session):
        assert asyncio.run(session.import_plan()).success is False

    def test_import_plan_missing_month(self, session):
        result = asyncio.run(session.import_plan([["Month"], ["January 2024"]], today=TODAY))
        assert result.success is False
        assert "January 2024" in result.message


class TestSessionFactory:
    """Tests for create_session."""

    def test_loads_from_stores(self, make_tx):
        transactions = InMemoryTransactionStorage([make_tx("2024-03-05", 10, user_id="u1")])
        profiles = InMemoryProfileStorage()
        asyncio.run(profiles.save_profile(FinancialProfile(payday=25), "u1"))

        session = asyncio.run(create_session(
            "u1",
            use_storage=False,
            transaction_storage=transactions,
            profile_storage=profiles,
        ))
        assert list(session.log) == ["2024-03-05"]
        assert session.profile.payday == 25

    def test_offline_session_is_empty(self):
        session = asyncio.run(create_session("u1", use_storage=False))
        assert session.log == {}
        assert session.profile == FinancialProfile()

    def test_view(self, march_log):
        session = LedgerSession(user_id="u1", log=march_log)
        view = session.view(date(2024, 3, 1), today=date(2024, 4, 2))
        assert view.monthly_stats.balance == 60
        assert view.month_end_cushion == 60

"""Tests for the storage backends and the audit logger."""

import asyncio
import json
from unittest.mock import MagicMock

import pytest

from cushion.audit import AuditLogger
from cushion.models.audit import AuditEventBuilder, AuditEventType
from cushion.models.profile import FinancialProfile
from cushion.orchestrator import create_session
from cushion.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsProfileStorage,
    GoogleSheetsTransactionStorage,
    InMemoryAuditStorage,
    InMemoryProfileStorage,
    InMemoryTransactionStorage,
    StorageError,
)
from cushion.services.storage.google_sheets import TRANSACTION_COLUMNS


def _sheet(rows):
    sheet = MagicMock()
    sheet.get_all_values.return_value = rows
    return sheet


class TestInMemoryStorage:
    """Tests for the in-memory backend."""

    def test_transactions_filtered_by_user(self, make_tx):
        storage = InMemoryTransactionStorage([
            make_tx("2024-03-05", 10, user_id="u1"),
            make_tx("2024-03-05", 20, user_id="u2"),
        ])
        log = asyncio.run(storage.load_transactions("u1"))
        assert [tx.amount for tx in log["2024-03-05"]] == [10]

    def test_save_is_upsert(self, make_tx):
        storage = InMemoryTransactionStorage()
        tx = make_tx("2024-03-05", 10, user_id="u1")
        asyncio.run(storage.save_transaction(tx))
        asyncio.run(storage.save_transaction(tx.model_copy(update={"amount": 15.0})))
        assert len(storage) == 1

    def test_save_all_replaces_only_that_user(self, make_tx, make_log):
        storage = InMemoryTransactionStorage([
            make_tx("2024-03-05", 10, user_id="u1"),
            make_tx("2024-03-05", 20, user_id="u2"),
        ])
        replacement = make_log(make_tx("2024-03-09", 5, user_id="u1"))
        asyncio.run(storage.save_all_transactions(replacement, "u1"))
        assert len(storage) == 2
        assert list(asyncio.run(storage.load_transactions("u1"))) == ["2024-03-09"]

    def test_fail_switch(self, make_tx):
        storage = InMemoryTransactionStorage()
        storage.fail_with = StorageError("offline")
        with pytest.raises(StorageError):
            asyncio.run(storage.save_transaction(make_tx("2024-03-05", 1)))

    def test_profile_round_trip(self):
        storage = InMemoryProfileStorage()
        assert asyncio.run(storage.load_profile("u1")) is None
        asyncio.run(storage.save_profile(FinancialProfile(monthly_salary=10), "u1"))
        assert asyncio.run(storage.load_profile("u1")).monthly_salary == 10


class TestGoogleSheetsStorage:
    """Tests for the Google Sheets backend with a mocked client."""

    def test_load_skips_other_users_and_bad_rows(self):
        rows = [
            TRANSACTION_COLUMNS,
            ["t1", "u1", "2024-03-05", "income", "100.0", "Nómina", "Salary", "2024-03-05T09:00:00+00:00"],
            ["t2", "u2", "2024-03-05", "expense", "5", "Otros", "x", ""],
            ["t3", "u1", "2024-03-06", "expense", "-4", "Otros", "negative", ""],
            ["t4", "u1", "2024-03-07", "expense", "4"],
        ]
        client = MagicMock()
        client.get_transactions_sheet.return_value = _sheet(rows)

        log = asyncio.run(GoogleSheetsTransactionStorage(client).load_transactions("u1"))
        assert sorted(log) == ["2024-03-05", "2024-03-07"]
        assert log["2024-03-05"][0].amount == 100
        assert log["2024-03-07"][0].category == "Otros"

    def test_save_updates_existing_row(self, make_tx):
        tx = make_tx("2024-03-05", 10, id="t1", user_id="u1")
        sheet = _sheet([TRANSACTION_COLUMNS, ["t0"], ["t1", "u1"]])
        client = MagicMock()
        client.get_transactions_sheet.return_value = sheet

        asyncio.run(GoogleSheetsTransactionStorage(client).save_transaction(tx))

        sheet.update.assert_called_once()
        assert sheet.update.call_args.kwargs["range_name"] == "A3:H3"
        sheet.append_row.assert_not_called()

    def test_save_appends_new_row(self, make_tx):
        sheet = _sheet([TRANSACTION_COLUMNS])
        client = MagicMock()
        client.get_transactions_sheet.return_value = sheet

        asyncio.run(GoogleSheetsTransactionStorage(client).save_transaction(make_tx("2024-03-05", 10)))
        row = sheet.append_row.call_args.args[0]
        assert row[2] == "2024-03-05"
        assert row[4] == "10.0"

    def test_delete_row(self):
        sheet = _sheet([TRANSACTION_COLUMNS, ["t1"], ["t2"]])
        client = MagicMock()
        client.get_transactions_sheet.return_value = sheet

        storage = GoogleSheetsTransactionStorage(client)
        assert asyncio.run(storage.delete_transaction("t2")) is True
        sheet.delete_rows.assert_called_once_with(3)
        assert asyncio.run(storage.delete_transaction("missing")) is False

    def test_profile_stored_as_json(self):
        profile = FinancialProfile(monthly_salary=1200)
        sheet = _sheet([["user_id", "updated_at", "profile_json"]])
        client = MagicMock()
        client.get_profiles_sheet.return_value = sheet

        storage = GoogleSheetsProfileStorage(client)
        asyncio.run(storage.save_profile(profile, "u1"))
        row = sheet.append_row.call_args.args[0]
        assert json.loads(row[2])["monthlySalary"] == 1200

        sheet.get_all_values.return_value = [["user_id", "updated_at", "profile_json"], row]
        assert asyncio.run(storage.load_profile("u1")) == profile

    def test_corrupt_profile_raises_storage_error(self):
        sheet = _sheet([["user_id", "updated_at", "profile_json"], ["u1", "x", "{not json"]])
        client = MagicMock()
        client.get_profiles_sheet.return_value = sheet

        with pytest.raises(StorageError):
            asyncio.run(GoogleSheetsProfileStorage(client).load_profile("u1"))

        sheet.get_all_values.return_value = [
            ["user_id", "updated_at", "profile_json"],
            ["u1", "x", json.dumps({"payday": 99})],
        ]
        with pytest.raises(StorageError):
            asyncio.run(GoogleSheetsProfileStorage(client).load_profile("u1"))

    def test_session_opens_despite_corrupt_profile(self):
        client = MagicMock()
        client.get_profiles_sheet.return_value = _sheet(
            [["user_id", "updated_at", "profile_json"], ["u1", "x", "{not json"]]
        )
        session = asyncio.run(create_session(
            "u1",
            use_storage=False,
            profile_storage=GoogleSheetsProfileStorage(client),
        ))
        assert session.profile.monthly_salary == 0
        assert session.log == {}

    def test_save_all_writes_before_clearing_leftovers(self, make_tx, make_log):
        existing = [
            TRANSACTION_COLUMNS,
            ["t1", "u1", "2024-03-05", "expense", "1", "Otros", "a", ""],
            ["t2", "u2", "2024-03-05", "expense", "2", "Otros", "b", ""],
            ["t3", "u1", "2024-03-06", "expense", "3", "Otros", "c", ""],
        ]
        sheet = _sheet(existing)
        client = MagicMock()
        client.get_transactions_sheet.return_value = sheet

        log = make_log(make_tx("2024-03-07", 9, id="t9", user_id="u1"))
        asyncio.run(GoogleSheetsTransactionStorage(client).save_all_transactions(log, "u1"))

        sheet.clear.assert_not_called()
        values = sheet.update.call_args.kwargs["values"]
        assert [row[0] for row in values] == ["id", "t2", "t9"]
        sheet.batch_clear.assert_called_once_with(["A4:H4"])
        calls = [c[0] for c in sheet.method_calls]
        assert calls.index("update") < calls.index("batch_clear")

    def test_save_all_failure_leaves_rows(self):
        sheet = _sheet([TRANSACTION_COLUMNS, ["t1", "u1"]])
        sheet.update.side_effect = RuntimeError("quota")
        client = MagicMock()
        client.get_transactions_sheet.return_value = sheet

        with pytest.raises(StorageError):
            asyncio.run(GoogleSheetsTransactionStorage(client).save_all_transactions({}, "u1"))
        sheet.clear.assert_not_called()
        sheet.batch_clear.assert_not_called()

    def test_audit_rows_parse_back(self):
        original = AuditEventBuilder.profile_saved(user_id="u1", correlation_id=None)
        sheet = _sheet([["header"], original.to_sheets_row(), ["not-a-uuid", "x"]])
        client = MagicMock()
        client.get_audit_sheet.return_value = sheet

        events = asyncio.run(GoogleSheetsAuditStorage(client).get_events_by_entity("profile", "u1"))
        assert [e.event_id for e in events] == [original.event_id]


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_events_reach_storage(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage, user_id="u1")
        asyncio.run(logger.log_profile_saved())
        assert storage.events[0].event_type == AuditEventType.PROFILE_SAVED
        assert storage.events[0].user_id == "u1"

    def test_storage_failure_is_swallowed(self):
        storage = InMemoryAuditStorage()
        storage.fail_with = StorageError("quota")
        logger = AuditLogger(storage, user_id="u1")
        event = AuditEventBuilder.profile_saved(user_id="u1", correlation_id=None)
        assert asyncio.run(logger.log(event)) is False

    def test_local_only_logger(self):
        assert asyncio.run(AuditLogger().log_backup(imported=False, transaction_count=0)) is None

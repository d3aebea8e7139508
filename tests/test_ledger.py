"""Tests for transaction log operations."""

import pytest

from cushion.engine.exceptions import TransactionNotFoundError
from cushion.engine.ledger import (
    add_transaction,
    find_transaction,
    month_transactions,
    remove_transaction,
    replace_transaction,
)


class TestLedger:
    """Tests for add/replace/remove on the day-keyed log."""

    def test_add_appends_without_mutating(self, make_tx, march_log):
        tx = make_tx("2024-03-10", 5)
        new_log = add_transaction(march_log, tx)
        assert new_log["2024-03-10"][-1] is tx
        assert len(march_log["2024-03-10"]) == 1

    def test_find(self, march_log):
        tx = march_log["2024-03-05"][0]
        assert find_transaction(march_log, tx.id) is tx
        assert find_transaction(march_log, "missing") is None

    def test_replace_same_day_keeps_position(self, make_tx, make_log):
        a = make_tx("2024-03-10", 5)
        b = make_tx("2024-03-10", 6)
        edited = a.model_copy(update={"amount": 7.0})
        log = replace_transaction(make_log(a, b), edited)
        assert log["2024-03-10"] == [edited, b]

    def test_replace_moves_day(self, make_tx, make_log):
        a = make_tx("2024-03-10", 5)
        moved = make_tx("2024-03-12", 5, id=a.id)
        log = replace_transaction(make_log(a), moved)
        assert "2024-03-10" not in log
        assert log["2024-03-12"] == [moved]

    def test_replace_unknown_id(self, make_tx, march_log):
        with pytest.raises(TransactionNotFoundError):
            replace_transaction(march_log, make_tx("2024-03-10", 1))

    def test_remove_prunes_empty_day(self, march_log):
        tx = march_log["2024-03-10"][0]
        log, removed = remove_transaction(march_log, tx.id)
        assert removed is tx
        assert "2024-03-10" not in log
        assert "2024-03-10" in march_log

    def test_remove_unknown_id(self, march_log):
        log, removed = remove_transaction(march_log, "missing")
        assert removed is None
        assert log == march_log

    def test_month_transactions(self, make_tx, make_log):
        log = make_log(make_tx("2024-02-29", 1), make_tx("2024-03-01", 2))
        assert [tx.amount for tx in month_transactions(log, 2024, 3)] == [2]

"""
Transaction log operations.

The log maps "YYYY-MM-DD" to a non-empty list of transactions. Every
function here returns a NEW log; the caller's mapping and lists are never
mutated, so an aborted operation leaves no partial change behind.
"""

from typing import Iterable, List, Optional

from cushion.engine.exceptions import TransactionNotFoundError
from cushion.models.transaction import Transaction, TransactionLog, flatten_log


def copy_log(log: TransactionLog) -> TransactionLog:
    """Shallow copy: new mapping and new day lists, same transaction objects"""
    return {key: list(txs) for key, txs in log.items() if txs}


def add_transactions(log: TransactionLog, transactions: Iterable[Transaction]) -> TransactionLog:
    """Append transactions under their own date keys"""
    new_log = copy_log(log)
    for tx in transactions:
        new_log.setdefault(tx.date_key, []).append(tx)
    return new_log


def add_transaction(log: TransactionLog, transaction: Transaction) -> TransactionLog:
    return add_transactions(log, [transaction])


def find_transaction(log: TransactionLog, transaction_id: str) -> Optional[Transaction]:
    for txs in log.values():
        for tx in txs:
            if tx.id == transaction_id:
                return tx
    return None


def replace_transaction(log: TransactionLog, transaction: Transaction) -> TransactionLog:
    """
    Full-record replace by id.

    A same-day edit keeps the transaction's position; a date change moves
    it to the end of the new day.

    Raises:
        TransactionNotFoundError: If no transaction has that id
    """
    new_log: TransactionLog = {}
    found = False
    moved = False

    for key, txs in log.items():
        kept = []
        for tx in txs:
            if tx.id != transaction.id:
                kept.append(tx)
                continue
            found = True
            if transaction.date_key == key:
                kept.append(transaction)
            else:
                moved = True
        if kept:
            new_log[key] = kept

    if not found:
        raise TransactionNotFoundError(f"Transaction not found: {transaction.id}")

    if moved:
        new_log.setdefault(transaction.date_key, []).append(transaction)
    return new_log


def remove_transaction(
    log: TransactionLog,
    transaction_id: str,
) -> tuple[TransactionLog, Optional[Transaction]]:
    """
    Delete by id, pruning the day if it becomes empty.

    Returns:
        (new_log, removed) - removed is None if the id was not in the log
    """
    new_log: TransactionLog = {}
    removed = None
    for key, txs in log.items():
        kept = []
        for tx in txs:
            if tx.id == transaction_id and removed is None:
                removed = tx
            else:
                kept.append(tx)
        if kept:
            new_log[key] = kept
    return new_log, removed


def transactions_in_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> List[Transaction]:
    return [tx for tx in transactions if tx.date.year == year and tx.date.month == month]


def month_transactions(log: TransactionLog, year: int, month: int) -> List[Transaction]:
    """Flattened transactions of one month"""
    return transactions_in_month(flatten_log(log), year, month)

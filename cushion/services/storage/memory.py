"""
In-memory storage.

Implements every storage interface with plain dicts. Used by the tests and
for running a session without Google credentials. Records are copied on
the way in so callers cannot mutate stored state by accident.

Set `fail_with` to an exception to make every write raise it; tests use
this to exercise the orchestrator's failed-save path.
"""

from typing import Optional
from uuid import UUID

from cushion.models.audit import AuditEvent
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import Transaction, TransactionLog, flatten_log
from cushion.services.storage.interface import (
    AuditStorageInterface,
    ProfileStorageInterface,
    StorageError,
    TransactionStorageInterface,
)


class _FailSwitch:
    fail_with: Optional[StorageError] = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with


class InMemoryTransactionStorage(_FailSwitch, TransactionStorageInterface):

    def __init__(self, transactions: Optional[list[Transaction]] = None):
        self._records: dict[str, Transaction] = {}
        for tx in transactions or []:
            self._records[tx.id] = tx.model_copy()

    async def load_transactions(self, user_id: str) -> TransactionLog:
        log: TransactionLog = {}
        for tx in self._records.values():
            if tx.user_id == user_id:
                log.setdefault(tx.date_key, []).append(tx.model_copy())
        return log

    async def save_transaction(self, transaction: Transaction) -> bool:
        self._check()
        self._records[transaction.id] = transaction.model_copy()
        return True

    async def delete_transaction(self, transaction_id: str) -> bool:
        self._check()
        return self._records.pop(transaction_id, None) is not None

    async def save_all_transactions(self, log: TransactionLog, user_id: str) -> bool:
        self._check()
        self._records = {
            tx_id: tx for tx_id, tx in self._records.items() if tx.user_id != user_id
        }
        for tx in flatten_log(log):
            self._records[tx.id] = tx.model_copy()
        return True

    def __len__(self) -> int:
        return len(self._records)


class InMemoryProfileStorage(_FailSwitch, ProfileStorageInterface):

    def __init__(self):
        self._profiles: dict[str, FinancialProfile] = {}

    async def load_profile(self, user_id: str) -> Optional[FinancialProfile]:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    async def save_profile(self, profile: FinancialProfile, user_id: str) -> bool:
        self._check()
        self._profiles[user_id] = profile.model_copy(deep=True)
        return True


class InMemoryAuditStorage(_FailSwitch, AuditStorageInterface):

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._check()
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return sorted(
            (e for e in self.events if e.correlation_id == correlation_id),
            key=lambda e: e.timestamp,
        )

    async def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return sorted(
            (e for e in self.events if e.entity_type == entity_type and e.entity_id == entity_id),
            key=lambda e: e.timestamp,
        )

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return sorted(self.events, key=lambda e: e.timestamp, reverse=True)[:limit]

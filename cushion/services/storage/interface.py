"""
Abstract Storage Interface

The engine never talks to a store. The session orchestrator persists
through these interfaces after applying each change in memory, so the
backend can be Google Sheets, the in-memory store used by tests, or a
real database later without touching business logic.

The interface is intentionally small: the ledger is loaded whole at
session start and written one record at a time afterwards.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from cushion.models.audit import AuditEvent
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import Transaction, TransactionLog


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage.

    Records are keyed by transaction id and scoped by the owner's user id.
    """

    @abstractmethod
    async def load_transactions(self, user_id: str) -> TransactionLog:
        """
        Load a user's full transaction log.

        Returns:
            Mapping of YYYY-MM-DD to that day's transactions; empty when the
            user has none

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def save_transaction(self, transaction: Transaction) -> bool:
        """
        Insert or replace one transaction by id.

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> bool:
        """
        Delete a transaction by id.

        Returns:
            True if a record was deleted, False if none had that id
        """
        pass

    @abstractmethod
    async def save_all_transactions(self, log: TransactionLog, user_id: str) -> bool:
        """
        Replace every stored transaction of a user with the given log.

        Used when a backup is imported.
        """
        pass


class ProfileStorageInterface(ABC):
    """Abstract interface for the per-user financial profile."""

    @abstractmethod
    async def load_profile(self, user_id: str) -> Optional[FinancialProfile]:
        """
        Returns:
            The stored profile, or None if the user has never saved one
        """
        pass

    @abstractmethod
    async def save_profile(self, profile: FinancialProfile, user_id: str) -> bool:
        """
        Replace the user's profile wholesale.

        Raises:
            StorageError: If save fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one ledger session).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Args:
            entity_type: Type of entity (e.g., 'transaction', 'fund')
            entity_id: The entity's ID

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass

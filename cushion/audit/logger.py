"""
Audit Logger

Every ledger mutation is logged: added, edited and deleted transactions,
profile saves, checkpoints, fund moves, distributions and backups. Failed
saves are logged too, since the in-memory state stays ahead of the store
when persistence fails.

The audit logger:
- Is async so it can share the handlers' event loop
- Never raises if the audit store fails; it logs the failure and moves on
- Supports correlation IDs to group the events of one session
"""

from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from cushion.models.audit import AuditEvent, AuditEventBuilder
from cushion.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit store, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
        user_id: Optional[str] = None,
    ):
        """
        Args:
            storage: Storage backend for persistence.
                     If None, only logs locally.
            user_id: Ledger owner stamped on every event
        """
        self._storage = storage
        self._user_id = user_id
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transaction_added(
        self,
        transaction_id: str,
        tx_type: str,
        amount: float,
        date_key: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            tx_type=tx_type,
            amount=amount,
            date_key=date_key,
            user_id=self._user_id,
            correlation_id=correlation_id,
        ))

    async def log_transaction_updated(
        self,
        transaction_id: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_updated(
            transaction_id=transaction_id,
            changes=changes,
            user_id=self._user_id,
            correlation_id=correlation_id,
        ))

    async def log_transaction_deleted(
        self,
        transaction_id: str,
        date_key: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            date_key=date_key,
            user_id=self._user_id,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        operation: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(
            operation=operation,
            issues=issues,
            user_id=self._user_id,
            correlation_id=correlation_id,
        ))

    async def log_profile_saved(
        self,
        source: str = "user",
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.profile_saved(
            user_id=self._user_id,
            correlation_id=correlation_id,
            source=source,
        ))

    async def log_checkpoint(
        self,
        target_date: str,
        calculated: float,
        actual: float,
        difference: float,
        adjustment_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.checkpoint(
            target_date=target_date,
            calculated=calculated,
            actual=actual,
            difference=difference,
            adjustment_id=adjustment_id,
            user_id=self._user_id,
            correlation_id=correlation_id,
        ))

    async def log_fund_adjusted(
        self,
        fund: str,
        previous: float,
        new: float,
        transaction_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.fund_adjusted(
            fund=fund,
            previous=previous,
            new=new,
            transaction_id=transaction_id,
            user_id=self._user_id,
            correlation_id=correlation_id,
        ))

    async def log_distribution(
        self,
        month: str,
        executed: bool,
        total: float,
        funds: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.distribution(
            month=month,
            executed=executed,
            total=total,
            funds=funds,
            user_id=self._user_id,
            correlation_id=correlation_id,
        ))

    async def log_backup(
        self,
        imported: bool,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.backup(
            imported=imported,
            transaction_count=transaction_count,
            user_id=self._user_id,
            correlation_id=correlation_id,
        ))

    async def log_save_failed(
        self,
        operation: str,
        entity_id: Optional[str],
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a store write that failed after the in-memory change was applied."""
        await self.log(AuditEventBuilder.save_failed(
            operation=operation,
            entity_id=entity_id,
            error_message=error_message,
            user_id=self._user_id,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use one per ledger session and pass it to every handler call.
    """
    return uuid4()

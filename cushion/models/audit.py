"""
Audit Models for Cushion

Every mutation of the ledger is logged for audit purposes.
This provides:
1. Traceability of every balance change
2. A record of persistence failures (which are never rolled back)
3. The ability to reconstruct what the user did in a session

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every mutation handler has its own event type.
    """
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    VALIDATION_FAILED = "validation_failed"

    # Profile
    PROFILE_SAVED = "profile_saved"
    PLAN_IMPORTED = "plan_imported"

    # Reconciliation
    CHECKPOINT_CREATED = "checkpoint_created"
    CHECKPOINT_SKIPPED = "checkpoint_skipped"

    # Funds
    FUND_ADJUSTED = "fund_adjusted"
    DISTRIBUTION_EXECUTED = "distribution_executed"
    DISTRIBUTION_SKIPPED = "distribution_skipped"

    # Backups
    BACKUP_IMPORTED = "backup_imported"
    BACKUP_EXPORTED = "backup_exported"

    # Persistence
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'profile', 'fund')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    user_id: Optional[str] = Field(
        default=None,
        description="Owner of the ledger"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one session)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         user_id, correlation_id, description, details_json, error_message,
         is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            self.user_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(tx, correlation_id)
        event = AuditEventBuilder.save_failed("save_transaction", tx.id, err, correlation_id)
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        tx_type: str,
        amount: float,
        date_key: str,
        user_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"{tx_type.capitalize()} of {amount:.2f} added on {date_key}",
            details={
                "type": tx_type,
                "amount": amount,
                "date": date_key,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_updated(
        transaction_id: str,
        changes: dict[str, Any],
        user_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Transaction updated ({', '.join(sorted(changes)) or 'no changes'})",
            details={"changes": changes},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        date_key: str,
        user_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Transaction deleted from {date_key}",
            details={"date": date_key},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        operation: str,
        issues: list[dict],
        user_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"{operation} rejected with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def profile_saved(
        user_id: Optional[str],
        correlation_id: Optional[UUID],
        source: str = "user",
    ) -> AuditEvent:
        event_type = (
            AuditEventType.PLAN_IMPORTED if source == "plan" else AuditEventType.PROFILE_SAVED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type="profile",
            entity_id=user_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Financial profile saved (source: {source})",
            details={"source": source},
            is_user_action=True,
        )

    @staticmethod
    def checkpoint(
        target_date: str,
        calculated: float,
        actual: float,
        difference: float,
        adjustment_id: Optional[str],
        user_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        if adjustment_id:
            event_type = AuditEventType.CHECKPOINT_CREATED
            description = f"Checkpoint on {target_date} adjusted balance by {difference:+.2f}"
        else:
            event_type = AuditEventType.CHECKPOINT_SKIPPED
            description = f"Checkpoint on {target_date} already reconciled"
        return AuditEvent(
            event_type=event_type,
            entity_type="transaction",
            entity_id=adjustment_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=description,
            details={
                "target_date": target_date,
                "calculated_balance": calculated,
                "actual_balance": actual,
                "difference": difference,
            },
            is_user_action=True,
        )

    @staticmethod
    def fund_adjusted(
        fund: str,
        previous: float,
        new: float,
        transaction_id: Optional[str],
        user_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FUND_ADJUSTED,
            entity_type="fund",
            entity_id=fund,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Fund {fund}: {previous:.2f} -> {new:.2f}",
            details={
                "previous_balance": previous,
                "new_balance": new,
                "transaction_id": transaction_id,
            },
            is_user_action=True,
        )

    @staticmethod
    def distribution(
        month: str,
        executed: bool,
        total: float,
        funds: list[str],
        user_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.DISTRIBUTION_EXECUTED
                if executed
                else AuditEventType.DISTRIBUTION_SKIPPED
            ),
            entity_type="distribution",
            entity_id=month,
            user_id=user_id,
            correlation_id=correlation_id,
            description=(
                f"Distributed {total:.2f} to {len(funds)} funds for {month}"
                if executed
                else f"Nothing to distribute for {month}"
            ),
            details={"funds": funds, "total": total},
            is_user_action=True,
        )

    @staticmethod
    def backup(
        imported: bool,
        transaction_count: int,
        user_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.BACKUP_IMPORTED if imported else AuditEventType.BACKUP_EXPORTED
            ),
            entity_type="backup",
            user_id=user_id,
            correlation_id=correlation_id,
            description=(
                f"Backup {'imported' if imported else 'exported'} "
                f"with {transaction_count} transactions"
            ),
            details={"transaction_count": transaction_count},
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        operation: str,
        entity_id: Optional[str],
        error_message: str,
        user_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_id=entity_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Persistence failed: {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

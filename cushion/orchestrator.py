"""
Ledger Session Orchestrator

Ties the pure engine to the collaborators (stores, audit trail, backup and
plan import) and defines the mutation handlers the UI calls.

DESIGN DECISION: every handler is optimistic.
- The change is computed by the engine and applied in memory FIRST
- Only then is the store awaited
- A store failure is logged and audited, never rolled back, never raised

The in-memory log and profile are therefore always authoritative for the
running session; a failed write surfaces as OperationResult.persisted=False.
"""

from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Optional
from uuid import UUID

import structlog

from cushion.audit import AuditLogger, create_correlation_id
from cushion.config import get_settings
from cushion.engine.checkpoint import create_checkpoint
from cushion.engine.exceptions import (
    CheckpointValidationError,
    FundOperationError,
    TransactionNotFoundError,
)
from cushion.engine.funds import FundMode, adjust_fund, execute_distribution
from cushion.engine.ledger import add_transaction, find_transaction, remove_transaction, replace_transaction
from cushion.engine.view import recompute
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import Transaction, TransactionLog, TransactionType
from cushion.models.views import DerivedView, OperationResult
from cushion.services.storage import (
    AuditStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsProfileStorage,
    GoogleSheetsTransactionStorage,
    ProfileStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from cushion.services.transfer.backup import (
    BackupFormatError,
    export_backup,
    import_backup,
)
from cushion.services.transfer.plan_sheet import (
    GoogleSheetsPlanReader,
    PlanColumns,
    PlanImportError,
    apply_plan,
    parse_plan_rows,
)
from cushion.validation import TransactionValidator


class LedgerSession:
    """
    One user's open ledger.

    Holds the transaction log and profile in memory and exposes one async
    handler per user action. Read the current state through `log`,
    `profile` and `view()`.
    """

    def __init__(
        self,
        user_id: str,
        log: Optional[TransactionLog] = None,
        profile: Optional[FinancialProfile] = None,
        transaction_storage: Optional[TransactionStorageInterface] = None,
        profile_storage: Optional[ProfileStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[TransactionValidator] = None,
        plan_reader: Optional[GoogleSheetsPlanReader] = None,
        correlation_id: Optional[UUID] = None,
    ):
        self.user_id = user_id
        self._log: TransactionLog = log or {}
        self._profile = profile or FinancialProfile(currency=get_settings().app.default_currency)
        self._transaction_storage = transaction_storage
        self._profile_storage = profile_storage
        self._audit_logger = audit_logger or AuditLogger(user_id=user_id)
        self._validator = validator or TransactionValidator()
        self._plan_reader = plan_reader
        self._correlation_id = correlation_id or create_correlation_id()
        self._logger = structlog.get_logger().bind(user_id=user_id)

    @property
    def log(self) -> TransactionLog:
        return self._log

    @property
    def profile(self) -> FinancialProfile:
        return self._profile

    def view(self, view_date: Optional[date] = None, today: Optional[date] = None) -> DerivedView:
        """Recompute every derived figure for the viewed month."""
        today = today or date.today()
        return recompute(self._log, self._profile, view_date or today, today)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def _save_failed(self, operation: str, entity_id: Optional[str], error: Exception) -> None:
        self._logger.error(
            "save_failed",
            operation=operation,
            entity_id=entity_id,
            error=str(error),
        )
        await self._audit_logger.log_save_failed(
            operation=operation,
            entity_id=entity_id,
            error_message=str(error),
            correlation_id=self._correlation_id,
        )

    async def _persist_transactions(self, operation: str, transactions: Iterable[Transaction]) -> bool:
        if not self._transaction_storage:
            return True
        persisted = True
        for tx in transactions:
            try:
                await self._transaction_storage.save_transaction(tx)
            except StorageError as e:
                await self._save_failed(operation, tx.id, e)
                persisted = False
        return persisted

    async def _persist_deletion(self, transaction_id: str) -> bool:
        if not self._transaction_storage:
            return True
        try:
            await self._transaction_storage.delete_transaction(transaction_id)
        except StorageError as e:
            await self._save_failed("delete_transaction", transaction_id, e)
            return False
        return True

    async def _persist_log(self, operation: str) -> bool:
        if not self._transaction_storage:
            return True
        try:
            await self._transaction_storage.save_all_transactions(self._log, self.user_id)
        except StorageError as e:
            await self._save_failed(operation, None, e)
            return False
        return True

    async def _persist_profile(self, operation: str) -> bool:
        if not self._profile_storage:
            return True
        try:
            await self._profile_storage.save_profile(self._profile, self.user_id)
        except StorageError as e:
            await self._save_failed(operation, self.user_id, e)
            return False
        return True

    async def _rejected(self, operation: str, issues: list, message: str) -> OperationResult:
        await self._audit_logger.log_validation_failed(
            operation=operation,
            issues=[
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in issues
            ],
            correlation_id=self._correlation_id,
        )
        return OperationResult(success=False, message=message, persisted=False, issues=issues)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def add_transaction(
        self,
        tx_date: Any,
        amount: Any,
        tx_type: Any = TransactionType.EXPENSE,
        description: Optional[str] = None,
        category: Optional[str] = None,
        today: Optional[date] = None,
    ) -> OperationResult:
        """Validate a new movement and append it to its day."""
        result = self._validator.validate(
            tx_date,
            amount,
            tx_type,
            description,
            category,
            user_id=self.user_id,
            existing_log=self._log,
            today=today,
        )
        message = self._validator.get_user_friendly_summary(result)
        if not result.is_valid:
            return await self._rejected("add_transaction", result.issues, message)

        transaction = result.transaction
        self._log = add_transaction(self._log, transaction)

        await self._audit_logger.log_transaction_added(
            transaction_id=transaction.id,
            tx_type=transaction.type.value,
            amount=transaction.amount,
            date_key=transaction.date_key,
            correlation_id=self._correlation_id,
        )
        persisted = await self._persist_transactions("add_transaction", [transaction])

        return OperationResult(
            success=True,
            message=message,
            persisted=persisted,
            transactions=[transaction],
            issues=result.issues,
        )

    async def edit_transaction(
        self,
        transaction_id: str,
        tx_date: Any,
        amount: Any,
        tx_type: Any = TransactionType.EXPENSE,
        description: Optional[str] = None,
        category: Optional[str] = None,
        today: Optional[date] = None,
    ) -> OperationResult:
        """
        Replace a movement wholesale, keeping its id and creation time.

        Changing the date moves it to the new day.
        """
        existing = find_transaction(self._log, transaction_id)
        if existing is None:
            return OperationResult(
                success=False,
                message=f"Transaction not found: {transaction_id}",
                persisted=False,
            )

        result = self._validator.validate(
            tx_date,
            amount,
            tx_type,
            description,
            category,
            transaction_id=existing.id,
            created_at=existing.created_at,
            user_id=existing.user_id or self.user_id,
            existing_log=self._log,
            today=today,
        )
        message = self._validator.get_user_friendly_summary(result)
        if not result.is_valid:
            return await self._rejected("edit_transaction", result.issues, message)

        transaction = result.transaction
        try:
            self._log = replace_transaction(self._log, transaction)
        except TransactionNotFoundError as e:
            return OperationResult(success=False, message=str(e), persisted=False)

        changes = {
            name: {"old": str(getattr(existing, name)), "new": str(getattr(transaction, name))}
            for name in ("date", "amount", "type", "category", "description")
            if getattr(existing, name) != getattr(transaction, name)
        }
        await self._audit_logger.log_transaction_updated(
            transaction_id=transaction.id,
            changes=changes,
            correlation_id=self._correlation_id,
        )
        persisted = await self._persist_transactions("edit_transaction", [transaction])

        return OperationResult(
            success=True,
            message=message,
            persisted=persisted,
            transactions=[transaction],
            issues=result.issues,
        )

    async def delete_transaction(self, transaction_id: str) -> OperationResult:
        self._log, removed = remove_transaction(self._log, transaction_id)
        if removed is None:
            return OperationResult(
                success=False,
                message=f"Transaction not found: {transaction_id}",
                persisted=False,
            )

        await self._audit_logger.log_transaction_deleted(
            transaction_id=removed.id,
            date_key=removed.date_key,
            correlation_id=self._correlation_id,
        )
        persisted = await self._persist_deletion(removed.id)
        return OperationResult(
            success=True,
            message="Movement deleted",
            persisted=persisted,
            transactions=[removed],
        )

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    async def save_profile(self, profile: FinancialProfile, source: str = "user") -> OperationResult:
        """Replace the whole profile."""
        self._profile = profile
        await self._audit_logger.log_profile_saved(source=source, correlation_id=self._correlation_id)
        persisted = await self._persist_profile("save_profile")
        return OperationResult(success=True, message="Profile saved", persisted=persisted)

    # -------------------------------------------------------------------------
    # Reconciliation and funds
    # -------------------------------------------------------------------------

    async def create_checkpoint(
        self,
        target_date: date,
        actual_balance: Any = None,
        accounts: Optional[Mapping[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """Reconcile the log with the balance the user actually holds."""
        try:
            result = create_checkpoint(
                self._log,
                self._profile,
                target_date,
                actual_balance=actual_balance,
                accounts=accounts,
                user_id=self.user_id,
                now=now,
                tolerance=get_settings().app.checkpoint_tolerance,
            )
        except CheckpointValidationError as e:
            await self._audit_logger.log_validation_failed(
                operation="create_checkpoint",
                issues=[{"field": "balance", "type": "invalid_value", "message": str(e)}],
                correlation_id=self._correlation_id,
            )
            return OperationResult(success=False, message=str(e), persisted=False)

        self._log = result.log
        self._profile = result.profile

        adjustment = result.adjustment
        await self._audit_logger.log_checkpoint(
            target_date=target_date.isoformat(),
            calculated=result.calculated_balance,
            actual=result.actual_balance,
            difference=result.difference,
            adjustment_id=adjustment.id if adjustment else None,
            correlation_id=self._correlation_id,
        )

        persisted = True
        if adjustment:
            persisted = await self._persist_transactions("create_checkpoint", [adjustment])
        if accounts is not None:
            persisted = await self._persist_profile("create_checkpoint") and persisted

        if adjustment:
            message = f"Balance adjusted by {result.difference:+.2f}"
        else:
            message = "Balance already matches, no adjustment needed"
        return OperationResult(
            success=True,
            message=message,
            persisted=persisted,
            transactions=[adjustment] if adjustment else [],
        )

    async def adjust_fund(
        self,
        fund: str,
        amount: Any,
        *,
        impact_main_balance: bool,
        mode: FundMode = FundMode.ADD,
        today: Optional[date] = None,
    ) -> OperationResult:
        try:
            result = adjust_fund(
                self._log,
                self._profile,
                fund,
                amount,
                impact_main_balance=impact_main_balance,
                mode=mode,
                today=today,
                user_id=self.user_id,
            )
        except FundOperationError as e:
            return OperationResult(success=False, message=str(e), persisted=False)

        if not result.changed:
            return OperationResult(success=True, message=f"Fund {fund} unchanged")

        self._log = result.log
        self._profile = result.profile

        transaction = result.transaction
        await self._audit_logger.log_fund_adjusted(
            fund=fund,
            previous=result.previous_balance,
            new=result.new_balance,
            transaction_id=transaction.id if transaction else None,
            correlation_id=self._correlation_id,
        )

        persisted = await self._persist_profile("adjust_fund")
        if transaction:
            persisted = await self._persist_transactions("adjust_fund", [transaction]) and persisted

        return OperationResult(
            success=True,
            message=f"Fund {fund}: {result.previous_balance:.2f} -> {result.new_balance:.2f}",
            persisted=persisted,
            transactions=[transaction] if transaction else [],
        )

    async def run_distribution(
        self,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """Move this month's pocket amounts into their funds."""
        result = execute_distribution(
            self._log,
            self._profile,
            today=today,
            user_id=self.user_id,
            now=now or datetime.now(timezone.utc),
        )
        if not result.executed:
            await self._audit_logger.log_distribution(
                month=result.month,
                executed=False,
                total=0.0,
                funds=[],
                correlation_id=self._correlation_id,
            )
            return OperationResult(success=False, message=result.message, persisted=False)

        self._log = result.log
        self._profile = result.profile

        await self._audit_logger.log_distribution(
            month=result.month,
            executed=True,
            total=result.total_distributed,
            funds=[fund for fund, pocket in self._profile.pockets.items() if pocket > 0],
            correlation_id=self._correlation_id,
        )

        persisted = await self._persist_transactions("run_distribution", result.transactions)
        persisted = await self._persist_profile("run_distribution") and persisted

        return OperationResult(
            success=True,
            message=result.message,
            persisted=persisted,
            transactions=result.transactions,
        )

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    async def export_backup(self) -> str:
        """Serialize the whole ledger to a JSON backup document."""
        document = export_backup(self._log, self._profile)
        await self._audit_logger.log_backup(
            imported=False,
            transaction_count=sum(len(txs) for txs in self._log.values()),
            correlation_id=self._correlation_id,
        )
        return document

    async def import_backup(self, text: str) -> OperationResult:
        """
        Replace the log (and the profile, when the backup has one) with the
        contents of a backup document. Nothing changes if it is malformed.
        """
        try:
            contents = import_backup(text, self.user_id)
        except BackupFormatError as e:
            await self._audit_logger.log_error(
                error_type="backup_format",
                error_message=str(e),
                correlation_id=self._correlation_id,
            )
            return OperationResult(success=False, message=str(e), persisted=False)

        self._log = contents.log
        if contents.profile is not None:
            self._profile = contents.profile

        await self._audit_logger.log_backup(
            imported=True,
            transaction_count=contents.transaction_count,
            correlation_id=self._correlation_id,
        )

        persisted = await self._persist_log("import_backup")
        if contents.profile is not None:
            persisted = await self._persist_profile("import_backup") and persisted

        return OperationResult(
            success=True,
            message=f"Imported {contents.transaction_count} movements",
            persisted=persisted,
        )

    async def import_plan(
        self,
        rows: Optional[list[list]] = None,
        today: Optional[date] = None,
        columns: Optional[PlanColumns] = None,
    ) -> OperationResult:
        """
        Load this month's salary, savings target, starting cash and budgets
        from the plan spreadsheet.

        Args:
            rows: Raw sheet rows; read from the plan reader when omitted
        """
        try:
            if rows is None:
                if self._plan_reader is None:
                    return OperationResult(
                        success=False,
                        message="No plan sheet configured",
                        persisted=False,
                    )
                rows = self._plan_reader.read_rows()
            plan = parse_plan_rows(rows, today=today, columns=columns)
        except (PlanImportError, StorageError) as e:
            await self._audit_logger.log_error(
                error_type="plan_import",
                error_message=str(e),
                correlation_id=self._correlation_id,
            )
            return OperationResult(success=False, message=str(e), persisted=False)

        self._profile = apply_plan(self._profile, plan)
        await self._audit_logger.log_profile_saved(source="plan", correlation_id=self._correlation_id)
        persisted = await self._persist_profile("import_plan")

        return OperationResult(
            success=True,
            message=f"Plan for {plan.month_label} imported",
            persisted=persisted,
        )


async def create_session(
    user_id: str,
    use_storage: bool = True,
    transaction_storage: Optional[TransactionStorageInterface] = None,
    profile_storage: Optional[ProfileStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> LedgerSession:
    """
    Factory function to open a ledger session.

    Args:
        use_storage: Whether to initialize Google Sheets storage for any
                     store not passed explicitly. Set to False for tests
                     and offline sessions.

    A store that cannot be reached at load time leaves the session empty
    but usable; the failure is logged.
    """
    logger = structlog.get_logger().bind(user_id=user_id)
    plan_reader = None

    if use_storage and not (transaction_storage and profile_storage):
        try:
            sheets_client = GoogleSheetsClient()
            transaction_storage = transaction_storage or GoogleSheetsTransactionStorage(sheets_client)
            profile_storage = profile_storage or GoogleSheetsProfileStorage(sheets_client)
            audit_storage = audit_storage or GoogleSheetsAuditStorage(sheets_client)
            plan_reader = GoogleSheetsPlanReader(sheets_client)
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))

    audit_logger = AuditLogger(audit_storage, user_id=user_id)

    log: TransactionLog = {}
    profile = None
    try:
        if transaction_storage:
            log = await transaction_storage.load_transactions(user_id)
        if profile_storage:
            profile = await profile_storage.load_profile(user_id)
    except StorageError as e:
        logger.error("session_load_failed", error=str(e))
        await audit_logger.log_error(error_type="session_load", error_message=str(e))

    logger.info("session_opened", transactions=sum(len(txs) for txs in log.values()))

    return LedgerSession(
        user_id=user_id,
        log=log,
        profile=profile,
        transaction_storage=transaction_storage,
        profile_storage=profile_storage,
        audit_logger=audit_logger,
        plan_reader=plan_reader,
    )

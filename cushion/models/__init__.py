"""
Data Models Package

This package contains all Pydantic models used in Cushion.
All data flowing through the engine must conform to these schemas.
"""

from cushion.models.transaction import (
    CHECKPOINT_MARKER,
    DEFAULT_CATEGORY,
    EXPENSE_CATEGORIES,
    FUND_CATEGORY,
    INCOME_CATEGORIES,
    SALARY_CATEGORY,
    Transaction,
    TransactionLog,
    TransactionType,
    flatten_log,
    log_to_records,
)
from cushion.models.profile import FinancialProfile, FundKey
from cushion.models.views import (
    BudgetStatus,
    CalendarDay,
    CategoryDetail,
    CheckpointResult,
    DaySummary,
    DerivedView,
    DistributionResult,
    FundAdjustment,
    Insight,
    InsightType,
    MonthlyStats,
    OperationResult,
    PaydayOutlook,
    Projection,
    ValidationIssue,
    ValidationResult,
)
from cushion.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "CHECKPOINT_MARKER",
    "DEFAULT_CATEGORY",
    "EXPENSE_CATEGORIES",
    "FUND_CATEGORY",
    "INCOME_CATEGORIES",
    "SALARY_CATEGORY",
    "Transaction",
    "TransactionLog",
    "TransactionType",
    "flatten_log",
    "log_to_records",
    # Profile
    "FinancialProfile",
    "FundKey",
    # Views and results
    "BudgetStatus",
    "CalendarDay",
    "CategoryDetail",
    "CheckpointResult",
    "DaySummary",
    "DerivedView",
    "DistributionResult",
    "FundAdjustment",
    "Insight",
    "InsightType",
    "MonthlyStats",
    "OperationResult",
    "PaydayOutlook",
    "Projection",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

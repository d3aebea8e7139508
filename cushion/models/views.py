"""
Derived View and Result Models

Everything the engine hands back to a caller. These are read-only
snapshots: they are rebuilt from the transaction log and profile on every
change and never persisted.

Mutation results (checkpoint, fund adjustment, distribution) carry the NEW
log and profile. The inputs are never modified in place.
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from cushion.models.profile import FinancialProfile
from cushion.models.transaction import Transaction, TransactionLog


# =============================================================================
# CALENDAR
# =============================================================================

class CalendarDay(BaseModel):
    """One cell of the 6x7 month grid."""

    date: dt.date
    is_current_month: bool
    date_key: str


class DaySummary(BaseModel):
    """What a calendar cell shows for one day."""

    date_key: str
    net: float = Field(description="Income minus expenses and transfers")
    transaction_count: int = Field(ge=0)
    has_adjustment: bool = Field(
        default=False,
        description="Day holds a checkpoint adjustment"
    )


# =============================================================================
# AGGREGATES
# =============================================================================

class MonthlyStats(BaseModel):
    """Income and spending of one month. Transfers are in neither."""

    month: str = Field(description="YYYY-MM")
    income: float = 0.0
    expense: float = 0.0
    balance: float = 0.0


class Projection(BaseModel):
    """
    Linear extrapolation for a month after the current one.

    Assumes constant salary and budgets; ignores future-dated transactions.
    """

    months_ahead: int = Field(gt=0)
    fund_balances: dict[str, float] = Field(default_factory=dict)
    disposable_balance: float
    total_cushion: float


class PaydayOutlook(BaseModel):
    """Payday countdown and savings outlook for the viewed month."""

    next_payday: dt.date
    days_until_payday: int = Field(ge=0)
    salary_received: bool
    projected_balance: float
    savings_progress: float = Field(ge=0.0, le=100.0)


class BudgetStatus(BaseModel):
    """Spend against limit for one category in one month."""

    category: str
    month: str
    limit: float
    spent: float
    percentage: float = Field(ge=0.0, le=100.0)
    is_over_budget: bool

    @property
    def remaining(self) -> float:
        return self.limit - self.spent


class CategoryDetail(BaseModel):
    """A category's transactions for one month, newest first."""

    category: str
    month: str
    transactions: list[Transaction] = Field(default_factory=list)
    total: float = 0.0


# =============================================================================
# INSIGHTS
# =============================================================================

class InsightType(str, Enum):
    """How an insight should be presented."""
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"
    ACTION = "action"
    NEUTRAL = "neutral"


class Insight(BaseModel):
    """A scored observation produced by one rule."""

    rule_id: str = Field(description="Registry id of the rule that produced it")
    type: InsightType
    title: str
    text: str
    details: str = ""
    score: int = Field(gt=0, description="Higher ranks first")


# =============================================================================
# MUTATION RESULTS
# =============================================================================

class CheckpointResult(BaseModel):
    """Outcome of reconciling a declared balance against the log."""

    log: TransactionLog
    profile: FinancialProfile
    target_date: dt.date
    calculated_balance: float
    actual_balance: float
    difference: float
    adjustment: Optional[Transaction] = None

    @property
    def reconciled_without_adjustment(self) -> bool:
        return self.adjustment is None


class FundAdjustment(BaseModel):
    """Outcome of a manual fund add/withdraw/set."""

    log: TransactionLog
    profile: FinancialProfile
    fund: str
    previous_balance: float
    new_balance: float
    delta: float
    transaction: Optional[Transaction] = None

    @property
    def changed(self) -> bool:
        return self.delta != 0


class DistributionResult(BaseModel):
    """Outcome of the monthly pocket distribution."""

    log: TransactionLog
    profile: FinancialProfile
    executed: bool
    month: str
    transactions: list[Transaction] = Field(default_factory=list)
    total_distributed: float = 0.0
    message: str = ""


# =============================================================================
# VALIDATION
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix for the issue"
    )


class ValidationResult(BaseModel):
    """Result of validating a transaction draft."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    transaction: Optional[Transaction] = Field(
        default=None,
        description="The built transaction when validation passed"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]


# =============================================================================
# FULL VIEW
# =============================================================================

class DerivedView(BaseModel):
    """
    Everything the UI needs for one viewed month.

    Produced by cushion.engine.view.recompute; memoize on the caller side.
    """

    month: str
    calendar: list[CalendarDay]
    day_summaries: dict[str, DaySummary] = Field(default_factory=dict)
    weekly_totals: list[float] = Field(default_factory=list)
    monthly_stats: MonthlyStats
    month_end_cushion: float
    realtime_cushion: float
    total_net_worth: float
    projection: Optional[Projection] = None
    payday: PaydayOutlook
    budgets: list[BudgetStatus] = Field(default_factory=list)
    spending_by_category: dict[str, float] = Field(default_factory=dict)
    insights: list[Insight] = Field(default_factory=list)
    distribution_pending: bool = False


# =============================================================================
# HANDLER RESULTS
# =============================================================================

class OperationResult(BaseModel):
    """
    What a session handler reports back to the UI.

    success is about the in-memory change. persisted is False when the
    change was applied but the store write failed.
    """

    success: bool
    message: str = ""
    persisted: bool = True
    transactions: list[Transaction] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def transaction(self) -> Optional[Transaction]:
        return self.transactions[0] if self.transactions else None

"""
Derived-financial-state engine.

Pure functions folding a transaction log and a financial profile into
calendar aggregates, the cushion, projections, budget consumption and
ranked insights. Nothing in this package performs I/O.
"""

from cushion.engine.aggregation import (
    cushion_at,
    month_end_cushion,
    monthly_stats,
    payday_outlook,
    project_future,
    realtime_cushion,
    spending_by_category,
    total_net_worth,
    week_total,
)
from cushion.engine.budget import budget_overview, budget_status, budget_total
from cushion.engine.calendar import build_calendar_days, split_weeks
from cushion.engine.checkpoint import create_checkpoint
from cushion.engine.exceptions import (
    CheckpointValidationError,
    CushionError,
    FundOperationError,
    TransactionNotFoundError,
)
from cushion.engine.funds import FundMode, adjust_fund, execute_distribution, is_distribution_pending
from cushion.engine.insights import generate_insights
from cushion.engine.view import recompute

__all__ = [
    "cushion_at",
    "month_end_cushion",
    "monthly_stats",
    "payday_outlook",
    "project_future",
    "realtime_cushion",
    "spending_by_category",
    "total_net_worth",
    "week_total",
    "budget_overview",
    "budget_status",
    "budget_total",
    "build_calendar_days",
    "split_weeks",
    "create_checkpoint",
    "CheckpointValidationError",
    "CushionError",
    "FundOperationError",
    "TransactionNotFoundError",
    "FundMode",
    "adjust_fund",
    "execute_distribution",
    "is_distribution_pending",
    "generate_insights",
    "recompute",
]

"""
Derived view assembly.

recompute() is the single entry point the UI calls after every change: it
rebuilds every figure for the viewed month from the log and profile. It
holds no state; memoize on the caller side if needed.
"""

from datetime import date
from typing import Optional

from cushion.engine.aggregation import (
    day_summaries,
    month_end_cushion,
    monthly_stats,
    payday_outlook,
    project_future,
    realtime_cushion,
    spending_by_category,
    total_net_worth,
    weekly_totals,
)
from cushion.engine.budget import budget_overview
from cushion.engine.calendar import build_calendar_days, split_weeks
from cushion.engine.funds import is_distribution_pending
from cushion.engine.insights import generate_insights
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import TransactionLog, flatten_log
from cushion.models.views import DerivedView
from cushion.utils.dates import month_key


def recompute(
    log: TransactionLog,
    profile: FinancialProfile,
    view_date: date,
    today: Optional[date] = None,
) -> DerivedView:
    """
    Build every derived figure for the month containing view_date.

    The net worth shown is the month-end cushion plus funds for past and
    current months; insights measure runway against the same month-end
    cushion.
    """
    today = today or date.today()
    year, month = view_date.year, view_date.month

    calendar = build_calendar_days(view_date)
    month_end = month_end_cushion(log, profile, year, month)

    return DerivedView(
        month=month_key(year, month),
        calendar=calendar,
        day_summaries=day_summaries(log, calendar),
        weekly_totals=weekly_totals(log, split_weeks(calendar)),
        monthly_stats=monthly_stats(log, year, month),
        month_end_cushion=month_end,
        realtime_cushion=realtime_cushion(log, profile, today),
        total_net_worth=total_net_worth(month_end, profile),
        projection=project_future(log, profile, year, month, today),
        payday=payday_outlook(log, profile, year, month, today),
        budgets=budget_overview(log, profile, year, month),
        spending_by_category=spending_by_category(log, year, month),
        insights=generate_insights(flatten_log(log), year, month, profile, month_end, today),
        distribution_pending=is_distribution_pending(profile, today),
    )

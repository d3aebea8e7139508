"""
Aggregation engine - folds the transaction log into totals and balances.

Inclusion rules (see TransactionType):
- day net, cushion: income adds, expense AND transfer subtract
- week total, monthly expense, category spending: expense only
- monthly income: income only

Everything here is a pure read. Missing profile values count as zero.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from cushion.engine.budget import budget_total
from cushion.engine.ledger import month_transactions, transactions_in_month
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import (
    DEFAULT_CATEGORY,
    SALARY_CATEGORY,
    Transaction,
    TransactionLog,
    TransactionType,
    flatten_log,
)
from cushion.models.views import (
    CalendarDay,
    CategoryDetail,
    DaySummary,
    MonthlyStats,
    PaydayOutlook,
    Projection,
)
from cushion.utils.dates import last_of_month, month_key, months_between

# An income at least this share of the salary counts as the salary
SALARY_MATCH_RATIO = 0.9


# =============================================================================
# DAYS AND WEEKS
# =============================================================================

def day_net(log: TransactionLog, date_key: str) -> float:
    """Income minus expenses and transfers for one day"""
    return sum(tx.signed_amount for tx in log.get(date_key, []))


def day_summary(log: TransactionLog, date_key: str) -> DaySummary:
    txs = log.get(date_key, [])
    return DaySummary(
        date_key=date_key,
        net=sum(tx.signed_amount for tx in txs),
        transaction_count=len(txs),
        has_adjustment=any(tx.is_adjustment for tx in txs),
    )


def day_summaries(log: TransactionLog, days: Iterable[CalendarDay]) -> Dict[str, DaySummary]:
    """Summaries for the grid days that hold at least one transaction"""
    return {day.date_key: day_summary(log, day.date_key) for day in days if log.get(day.date_key)}


def week_total(log: TransactionLog, week: Iterable[CalendarDay]) -> float:
    """Spending across the days of one grid row; income and transfers excluded"""
    return sum(
        tx.amount
        for day in week
        for tx in log.get(day.date_key, [])
        if tx.type.is_spending
    )


def weekly_totals(log: TransactionLog, weeks: Iterable[List[CalendarDay]]) -> List[float]:
    return [week_total(log, week) for week in weeks]


# =============================================================================
# MONTHS
# =============================================================================

def monthly_stats(log: TransactionLog, year: int, month: int) -> MonthlyStats:
    """Income, expense and their difference for one month. Transfers are in neither."""
    income = 0.0
    expense = 0.0
    for tx in month_transactions(log, year, month):
        if tx.type is TransactionType.INCOME:
            income += tx.amount
        elif tx.type.is_spending:
            expense += tx.amount
    return MonthlyStats(
        month=month_key(year, month),
        income=income,
        expense=expense,
        balance=income - expense,
    )


def spending_by_category(log: TransactionLog, year: int, month: int) -> Dict[str, float]:
    """Expense-only totals per category for the analytics chart"""
    totals: Dict[str, float] = {}
    for tx in month_transactions(log, year, month):
        if tx.type.is_spending:
            category = tx.category or DEFAULT_CATEGORY
            totals[category] = totals.get(category, 0.0) + tx.amount
    return totals


def category_transactions(
    log: TransactionLog,
    category: str,
    year: int,
    month: int,
) -> CategoryDetail:
    """All of a month's transactions in a category, newest first"""
    matching = [tx for tx in month_transactions(log, year, month) if tx.category == category]
    matching.sort(key=lambda tx: tx.date, reverse=True)
    return CategoryDetail(
        category=category,
        month=month_key(year, month),
        transactions=matching,
        total=sum(tx.amount for tx in matching),
    )


# =============================================================================
# CUSHION (POINT-IN-TIME BALANCE)
# =============================================================================

def balance_of(transactions: Iterable[Transaction], initial_base: float, cutoff: date) -> float:
    """initial_base plus the signed amounts of every transaction dated on or before cutoff"""
    return initial_base + sum(tx.signed_amount for tx in transactions if tx.date <= cutoff)


def cushion_at(log: TransactionLog, profile: FinancialProfile, cutoff: date) -> float:
    return balance_of(flatten_log(log), profile.initial_base, cutoff)


def realtime_cushion(log: TransactionLog, profile: FinancialProfile, today: Optional[date] = None) -> float:
    """Cushion as of today"""
    return cushion_at(log, profile, today or date.today())


def month_end_cushion(log: TransactionLog, profile: FinancialProfile, year: int, month: int) -> float:
    """Cushion at the last day of a month (historical balance for the viewed month)"""
    return cushion_at(log, profile, last_of_month(year, month))


def total_net_worth(balance: float, profile: FinancialProfile) -> float:
    """A cushion value plus every fund balance"""
    return balance + profile.total_fund_balance


# =============================================================================
# PROJECTIONS
# =============================================================================

def project_future(
    log: TransactionLog,
    profile: FinancialProfile,
    year: int,
    month: int,
    today: Optional[date] = None,
) -> Optional[Projection]:
    """
    Linear projection for a month strictly after the current one.

    Returns None for the current month and the past.
    """
    today = today or date.today()
    months_ahead = months_between(today.year, today.month, year, month)
    if months_ahead <= 0:
        return None

    balance = realtime_cushion(log, profile, today)
    fund_balances = {
        fund: profile.fund_balances.get(fund, 0.0) + profile.pockets.get(fund, 0.0) * months_ahead
        for fund in profile.fund_keys
    }
    disposable = balance + (profile.monthly_salary - profile.total_pockets) * months_ahead
    total = (balance + profile.total_fund_balance) + (
        profile.monthly_salary - budget_total(profile, year, month)
    ) * months_ahead

    return Projection(
        months_ahead=months_ahead,
        fund_balances=fund_balances,
        disposable_balance=disposable,
        total_cushion=total,
    )


def next_payday(today: date, payday: int) -> date:
    """
    Next date the salary arrives, today included.

    A payday past the end of a month falls on that month's last day.
    """
    day = min(payday, last_of_month(today.year, today.month).day)
    if today.day <= day:
        return today.replace(day=day)
    following = last_of_month(today.year, today.month) + timedelta(days=1)
    return following.replace(day=min(payday, last_of_month(following.year, following.month).day))


def payday_outlook(
    log: TransactionLog,
    profile: FinancialProfile,
    year: int,
    month: int,
    today: Optional[date] = None,
) -> PaydayOutlook:
    """
    Payday countdown and the projected savings of the viewed month.

    If the salary has not shown up as an income yet, it is assumed to
    arrive and added to the projection.
    """
    today = today or date.today()
    payday = next_payday(today, profile.payday)

    income = 0.0
    expense = 0.0
    salary_received = False
    for tx in transactions_in_month(flatten_log(log), year, month):
        if tx.type is TransactionType.INCOME:
            income += tx.amount
            if tx.category == SALARY_CATEGORY or (
                profile.monthly_salary > 0
                and tx.amount >= profile.monthly_salary * SALARY_MATCH_RATIO
            ):
                salary_received = True
        else:
            expense += tx.amount

    projected = income - expense
    if not salary_received:
        projected += profile.monthly_salary

    progress = 0.0
    if profile.savings_target > 0:
        progress = max(0.0, min(projected / profile.savings_target * 100, 100.0))

    return PaydayOutlook(
        next_payday=payday,
        days_until_payday=(payday - today).days,
        salary_received=salary_received,
        projected_balance=projected,
        savings_progress=progress,
    )

"""
Budget tracker - category spend against configured limits.

Limit resolution for one category: the month-specific override
(monthly_budgets["YYYY-MM"][category]) wins, then the default budget,
then zero.

KNOWN QUIRK (kept on purpose): spend per category sums EVERY transaction
type in that category, not only expenses. An income or checkpoint
adjustment filed under a spending category therefore counts as spend.
Monthly stats, by contrast, exclude transfers. Whether budgets should
follow the same rule is an open product question; see DESIGN.md.
"""

from typing import Dict, Iterable, List

from cushion.engine.ledger import month_transactions
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import DEFAULT_CATEGORY, EXPENSE_CATEGORIES, TransactionLog
from cushion.models.views import BudgetStatus
from cushion.utils.dates import month_key


def effective_limit(profile: FinancialProfile, category: str, year: int, month: int) -> float:
    override = profile.monthly_budgets.get(month_key(year, month), {})
    if category in override:
        return override[category]
    return profile.budgets.get(category, 0.0)


def budget_total(profile: FinancialProfile, year: int, month: int) -> float:
    """
    Sum of the month's budget limits.

    A month override replaces the default mapping as a whole here, unlike
    effective_limit which resolves per category.
    """
    override = profile.monthly_budgets.get(month_key(year, month))
    return sum((override or profile.budgets or {}).values())


def category_spend(log: TransactionLog, year: int, month: int) -> Dict[str, float]:
    """Per-category sums over all transaction types (see module docstring)"""
    totals: Dict[str, float] = {}
    for tx in month_transactions(log, year, month):
        category = tx.category or DEFAULT_CATEGORY
        totals[category] = totals.get(category, 0.0) + tx.amount
    return totals


def _status(category: str, year: int, month: int, limit: float, spent: float) -> BudgetStatus:
    percentage = min(spent / limit * 100, 100.0) if limit > 0 else 0.0
    return BudgetStatus(
        category=category,
        month=month_key(year, month),
        limit=limit,
        spent=spent,
        percentage=max(percentage, 0.0),
        is_over_budget=spent > limit and limit > 0,
    )


def budget_status(
    log: TransactionLog,
    profile: FinancialProfile,
    category: str,
    year: int,
    month: int,
) -> BudgetStatus:
    spent = category_spend(log, year, month).get(category, 0.0)
    return _status(category, year, month, effective_limit(profile, category, year, month), spent)


def budget_overview(
    log: TransactionLog,
    profile: FinancialProfile,
    year: int,
    month: int,
    categories: Iterable[str] = EXPENSE_CATEGORIES,
) -> List[BudgetStatus]:
    """
    One status per default expense category, then any other budgeted category.
    """
    names = list(categories)
    configured = list(profile.budgets) + list(profile.monthly_budgets.get(month_key(year, month), {}))
    for name in configured:
        if name not in names:
            names.append(name)

    spend = category_spend(log, year, month)
    return [
        _status(name, year, month, effective_limit(profile, name, year, month), spend.get(name, 0.0))
        for name in names
    ]

"""
Shared precomputed inputs for the insight rules.

Built once per generate_insights call so every rule reads the same
month totals instead of refolding the transactions itself.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from cushion.engine.budget import budget_total
from cushion.engine.ledger import transactions_in_month
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import DEFAULT_CATEGORY, Transaction, TransactionType
from cushion.utils.dates import days_in_month


def matches_any(text: Optional[str], keywords: Iterable[str]) -> bool:
    """Case-insensitive substring match of any keyword"""
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in keywords)


@dataclass
class InsightContext:
    """Month totals every rule can read."""

    year: int
    month: int
    profile: FinancialProfile
    cushion: float
    transactions: list[Transaction]
    expenses: list[Transaction]
    total_spent: float
    total_income: float
    is_current_month: bool
    days_in_month: int
    current_day: int
    budget_total: float
    category_totals: dict[str, float] = field(default_factory=dict)
    daily_spend: list[float] = field(default_factory=list)

    @property
    def remaining_days(self) -> int:
        return self.days_in_month - self.current_day

    @property
    def savings(self) -> float:
        return self.total_income - self.total_spent

    @property
    def savings_rate(self) -> float:
        """Percent of income kept; 0 without income"""
        if self.total_income <= 0:
            return 0.0
        return self.savings / self.total_income * 100

    @property
    def daily_average(self) -> float:
        return self.total_spent / self.current_day

    @property
    def currency(self) -> str:
        return self.profile.currency

    def money(self, amount: float, digits: int = 0) -> str:
        return f"{amount:.{digits}f} {self.currency}"

    def spend_on(self, day: int) -> float:
        """Expense total of one day of the month (1-based)"""
        if 1 <= day <= len(self.daily_spend):
            return self.daily_spend[day - 1]
        return 0.0

    def keyword_expenses(self, keywords: Iterable[str]) -> list[Transaction]:
        keywords = tuple(keywords)
        return [tx for tx in self.expenses if matches_any(tx.description, keywords)]

    def keyword_spend(self, keywords: Iterable[str]) -> float:
        return sum(tx.amount for tx in self.keyword_expenses(keywords))


def build_context(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    profile: FinancialProfile,
    cushion: float,
    today: date,
) -> InsightContext:
    """
    Fold one month's transactions into an InsightContext.

    For the current month the elapsed day count is today's day; for any
    other month the whole month counts as elapsed.
    """
    month_txs = transactions_in_month(transactions, year, month)
    expenses = [tx for tx in month_txs if tx.type.is_spending]
    length = days_in_month(year, month)
    is_current = today.year == year and today.month == month

    category_totals: dict[str, float] = {}
    daily_spend = [0.0] * length
    for tx in expenses:
        category = tx.category or DEFAULT_CATEGORY
        category_totals[category] = category_totals.get(category, 0.0) + tx.amount
        daily_spend[tx.date.day - 1] += tx.amount

    return InsightContext(
        year=year,
        month=month,
        profile=profile,
        cushion=cushion,
        transactions=month_txs,
        expenses=expenses,
        total_spent=sum(tx.amount for tx in expenses),
        total_income=sum(tx.amount for tx in month_txs if tx.type is TransactionType.INCOME),
        is_current_month=is_current,
        days_in_month=length,
        current_day=today.day if is_current else length,
        budget_total=budget_total(profile, year, month),
        category_totals=category_totals,
        daily_spend=daily_spend,
    )

"""Runs the registered insight rules and ranks their findings."""

from datetime import date
from typing import Any, Iterable, Mapping, Optional

import structlog

from cushion.engine.insights import rules as _rules  # noqa: F401  registers rules
from cushion.engine.insights.config import resolve_config
from cushion.engine.insights.context import build_context
from cushion.engine.insights.registry import InsightRule, registered_rules
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import Transaction
from cushion.models.views import Insight

logger = structlog.get_logger()


def generate_insights(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    profile: FinancialProfile,
    cushion: float,
    today: Optional[date] = None,
    config: Optional[Mapping[str, Mapping[str, Any]]] = None,
    rules: Optional[Iterable[InsightRule]] = None,
) -> list[Insight]:
    """
    Evaluate every rule for one month and rank the results.

    Args:
        transactions: Flat transactions; only the given month is read
        cushion: Accumulated balance the runway rules measure against
        config: Per-rule overrides merged over RULE_CONFIG
        rules: Rule subset to run; defaults to every registered rule

    Returns:
        Insights sorted by descending score. Ties keep rule order. The
        list is never truncated.
    """
    ctx = build_context(transactions, year, month, profile, cushion, today or date.today())
    table = resolve_config(config)

    insights = []
    for rule in (registered_rules() if rules is None else rules):
        insight = rule.run(ctx, table.get(rule.id, {}))
        if insight is not None:
            insights.append(insight)

    insights.sort(key=lambda insight: insight.score, reverse=True)
    logger.debug(
        "insights_generated",
        month=f"{year:04d}-{month:02d}",
        count=len(insights),
    )
    return insights

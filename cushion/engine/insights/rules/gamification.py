"""Gamification and lifestyle rules"""

from cushion.engine.insights.config import KEYWORDS, TREATS_CATEGORY
from cushion.engine.insights.context import InsightContext
from cushion.engine.insights.registry import Finding, register
from cushion.models.transaction import (
    DEFAULT_EXPENSE_DESCRIPTION,
    DEFAULT_INCOME_DESCRIPTION,
    TransactionType,
)
from cushion.models.views import InsightType


def saver_level(rate: float, levels, base_level: str) -> str:
    """Highest level whose threshold the savings rate exceeds"""
    level = base_level
    for threshold, name in levels:
        if rate > threshold:
            level = name
    return level


@register("saver_level", "gamification")
def saver_level_rule(ctx: InsightContext, cfg):
    if ctx.total_income <= 0:
        return None
    rate = ctx.savings_rate
    level = saver_level(rate, cfg["levels"], cfg["base_level"])
    return Finding(
        InsightType.SUCCESS,
        f"🏅 Level: {level}",
        f"Your {rate:.0f}% savings rate earns you the rank of {level}.",
        "Keep levelling up!",
        cfg["score"],
    )


@register("yearly_forecast", "gamification")
def yearly_forecast(ctx: InsightContext, cfg):
    if ctx.total_income <= ctx.total_spent:
        return None
    return Finding(
        InsightType.INFO,
        "🔮 Crystal ball",
        f"At this pace you will save {ctx.money(ctx.savings * 12)} in a year.",
        "What would you do with that money?",
        cfg["score"],
    )


@register("retail_therapy", "gamification")
def retail_therapy(ctx: InsightContext, cfg):
    treats = ctx.category_totals.get(TREATS_CATEGORY, 0.0)
    if treats <= 0 or treats <= ctx.total_spent * cfg["min_share"]:
        return None
    return Finding(
        InsightType.INFO,
        "🛍️ Retail therapy",
        "High spending on treats detected.",
        "Are you buying out of need or emotion?",
        cfg["score"],
    )


@register("pocket_funding_gap", "gamification")
def pocket_funding_gap(ctx: InsightContext, cfg):
    """Monthly pocket amounts not yet covered by the pocket account's balance"""
    account = cfg["account"]
    gap = ctx.profile.total_pockets - ctx.profile.accounts.get(account, 0.0)
    if gap <= 0:
        return None
    return Finding(
        InsightType.ACTION,
        "💸 Transfer recommended",
        f"Move money to {account} to cover your pockets.",
        f"{account} is {ctx.money(gap)} short.",
        cfg["score"],
    )


@register("description_quality", "gamification")
def description_quality(ctx: InsightContext, cfg):
    placeholders = {"", DEFAULT_EXPENSE_DESCRIPTION, DEFAULT_INCOME_DESCRIPTION}
    count = sum(1 for tx in ctx.transactions if tx.description in placeholders)
    if count < cfg["min_count"]:
        return None
    return Finding(
        InsightType.NEUTRAL,
        "📝 Improve your data",
        f"{count} movements have no meaningful description.",
        "Add details so the insights get sharper.",
        cfg["score"],
    )


@register("income_diversity", "gamification")
def income_diversity(ctx: InsightContext, cfg):
    sources = {tx.category for tx in ctx.transactions if tx.type is TransactionType.INCOME}
    if len(sources) < cfg["min_sources"]:
        return None
    return Finding(
        InsightType.SUCCESS,
        "🌱 Diversified income",
        "You have more than one source of income.",
        "Diversification lowers financial risk.",
        cfg["score"],
    )


@register("taxes_paid", "gamification")
def taxes_paid(ctx: InsightContext, cfg):
    taxes = ctx.keyword_spend(KEYWORDS["tax"])
    if taxes <= 0:
        return None
    return Finding(
        InsightType.INFO,
        "🏛️ Civic duty",
        f"You paid {ctx.money(taxes, 2)} in taxes.",
        "Worth planning for in the emergency fund.",
        cfg["score"],
    )


@register("health_spending", "gamification")
def health_spending(ctx: InsightContext, cfg):
    spend = ctx.keyword_spend(KEYWORDS["health"])
    if spend > 0:
        return Finding(
            InsightType.SUCCESS,
            "❤️ Investing in health",
            f"You dedicated {ctx.money(spend)} to looking after yourself.",
            "Your body is the best investment.",
            cfg["score_spent"],
        )
    if ctx.total_spent > cfg["nudge_min_spent"]:
        return Finding(
            InsightType.INFO,
            "🏃 What about health?",
            "No health or sport spending detected.",
            "Prevention is cheaper than cure.",
            cfg["score_nudge"],
        )
    return None


@register("pet_spending", "gamification")
def pet_spending(ctx: InsightContext, cfg):
    spend = ctx.keyword_spend(KEYWORDS["pets"])
    if spend <= 0:
        return None
    return Finding(
        InsightType.INFO,
        "🐾 Furry expenses",
        f"Your pet cost {ctx.money(spend)} this month.",
        "Unconditional love, with running costs.",
        cfg["score"],
    )


@register("education_spending", "gamification")
def education_spending(ctx: InsightContext, cfg):
    spend = ctx.keyword_spend(KEYWORDS["education"])
    if spend <= 0:
        return None
    return Finding(
        InsightType.SUCCESS,
        "🧠 Brain in shape",
        f"You invested {ctx.money(spend)} in learning.",
        "Knowledge pays the best interest.",
        cfg["score"],
    )

"""Category mix and keyword family rules"""

from cushion.engine.insights.config import (
    FOOD_CATEGORY,
    GIFTS_CATEGORY,
    KEYWORDS,
    SUBSCRIPTION_CATEGORY,
    WANTS_CATEGORIES,
)
from cushion.engine.insights.context import InsightContext, matches_any
from cushion.engine.insights.registry import Finding, register
from cushion.models.transaction import DEFAULT_CATEGORY
from cushion.models.views import InsightType


def _subscriptions(ctx: InsightContext):
    return [tx for tx in ctx.expenses if tx.category == SUBSCRIPTION_CATEGORY]


@register("uncategorised_share", "categories")
def uncategorised_share(ctx: InsightContext, cfg):
    if ctx.total_spent <= 0:
        return None
    share = ctx.category_totals.get(DEFAULT_CATEGORY, 0.0) / ctx.total_spent
    if share <= cfg["min_share"]:
        return None
    return Finding(
        InsightType.WARNING,
        "🕳️ Black hole",
        f"Over {cfg['min_share'] * 100:.0f}% of your spending is filed under \"{DEFAULT_CATEGORY}\".",
        "Categorise better to see where the money goes.",
        cfg["score"],
    )


@register("wants_over_needs", "categories")
def wants_over_needs(ctx: InsightContext, cfg):
    wants = sum(ctx.category_totals.get(category, 0.0) for category in WANTS_CATEGORIES)
    needs = ctx.total_spent - wants
    if ctx.total_spent <= 0 or wants <= needs:
        return None
    return Finding(
        InsightType.WARNING,
        "⚖️ Wants vs needs imbalance",
        "You spend more on wants than on needs.",
        "Review your priorities if you want to save more.",
        cfg["score"],
    )


@register("subscription_fatigue", "categories")
def subscription_fatigue(ctx: InsightContext, cfg):
    count = len(_subscriptions(ctx))
    if count < cfg["min_count"]:
        return None
    return Finding(
        InsightType.WARNING,
        "📺 Subscription fatigue",
        f"You have {count} separate subscription charges.",
        "Do you really use all of those services?",
        cfg["score"],
    )


@register("food_lover", "categories")
def food_lover(ctx: InsightContext, cfg):
    if ctx.category_totals.get(FOOD_CATEGORY, 0.0) <= cfg["baseline"] * cfg["factor"]:
        return None
    return Finding(
        InsightType.INFO,
        "🍔 Food lover",
        f"Your food spending is {(cfg['factor'] - 1) * 100:.0f}% above the baseline.",
        "Cooking at home could save you a lot.",
        cfg["score"],
    )


@register("generous_gifts", "categories")
def generous_gifts(ctx: InsightContext, cfg):
    gifts = ctx.category_totals.get(GIFTS_CATEGORY, 0.0)
    if gifts <= cfg["min_amount"]:
        return None
    return Finding(
        InsightType.SUCCESS,
        "🎁 Generous spirit",
        f"You spent {ctx.money(gifts)} on others.",
        "Generosity is good, but keep an eye on your budget.",
        cfg["score"],
    )


@register("concentrated_spending", "categories")
def concentrated_spending(ctx: InsightContext, cfg):
    if len(ctx.category_totals) > cfg["max_categories"] or ctx.total_spent <= cfg["min_spent"]:
        return None
    return Finding(
        InsightType.INFO,
        "🎯 Single-minded spending",
        "Your spending is concentrated in very few categories.",
        "A very specific consumption pattern.",
        cfg["score"],
    )


@register("latte_factor", "categories")
def latte_factor(ctx: InsightContext, cfg):
    count = sum(
        1 for tx in ctx.expenses
        if tx.category == FOOD_CATEGORY and tx.amount < cfg["max_amount"]
    )
    if count < cfg["min_count"]:
        return None
    return Finding(
        InsightType.INFO,
        "☕ Latte factor",
        f"You made {count} tiny food or coffee purchases.",
        "Those small amounts add up by the end of the month.",
        cfg["score"],
    )


@register("streaming_wars", "categories")
def streaming_wars(ctx: InsightContext, cfg):
    count = sum(1 for tx in _subscriptions(ctx) if matches_any(tx.description, KEYWORDS["streaming"]))
    if count < cfg["min_count"]:
        return None
    return Finding(
        InsightType.INFO,
        "🎬 Streaming wars",
        f"You pay for {count} video or music platforms.",
        "Do you have time to watch it all?",
        cfg["score"],
    )


@register("gamer", "categories")
def gamer(ctx: InsightContext, cfg):
    spend = ctx.keyword_spend(KEYWORDS["gaming"])
    if spend <= cfg["min_amount"]:
        return None
    return Finding(
        InsightType.INFO,
        "🎮 Gamer detected",
        f"You put {ctx.money(spend)} into video games.",
        "GG WP!",
        cfg["score"],
    )


@register("fashionista", "categories")
def fashionista(ctx: InsightContext, cfg):
    spend = ctx.keyword_spend(KEYWORDS["fashion"])
    if spend <= cfg["min_amount"]:
        return None
    return Finding(
        InsightType.INFO,
        "👗 Fashionista",
        f"You spent {ctx.money(spend)} at well-known clothing brands.",
        "Refreshing your wardrobe?",
        cfg["score"],
    )


@register("fast_food", "categories")
def fast_food(ctx: InsightContext, cfg):
    count = len(ctx.keyword_expenses(KEYWORDS["fast_food"]))
    if count < cfg["min_count"]:
        return None
    return Finding(
        InsightType.WARNING,
        "🍟 Fast food lover",
        f"You ordered fast food {count} times.",
        "Your health and your wallet will thank you for cooking more.",
        cfg["score"],
    )


@register("mobility_cost", "categories")
def mobility_cost(ctx: InsightContext, cfg):
    spend = ctx.keyword_spend(KEYWORDS["transport"])
    if spend <= cfg["min_amount"]:
        return None
    return Finding(
        InsightType.INFO,
        "⛽ High mobility cost",
        f"Getting around cost you {ctx.money(spend)}.",
        "Could you optimise your routes?",
        cfg["score"],
    )

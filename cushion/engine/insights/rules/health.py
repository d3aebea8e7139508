"""Financial health ratio rules"""

from cushion.engine.insights.config import KEYWORDS
from cushion.engine.insights.context import InsightContext
from cushion.engine.insights.registry import Finding, register
from cushion.models.views import InsightType


@register("savings_rule", "health")
def savings_rule(ctx: InsightContext, cfg):
    """50/30/20: keep at least the target share of income"""
    if ctx.total_income <= 0:
        return None
    rate = ctx.savings_rate
    if rate >= cfg["target_rate"]:
        return Finding(
            InsightType.SUCCESS,
            "📘 50/30/20 rule",
            f"You meet the {cfg['target_rate']:.0f}% savings rule!",
            f"You are saving {rate:.1f}% of your income.",
            cfg["score_met"],
        )
    return Finding(
        InsightType.INFO,
        "📘 50/30/20 rule",
        f"Current savings: {rate:.1f}% (goal: {cfg['target_rate']:.0f}%)",
        "Trim variable spending to reach the goal.",
        cfg["score_missed"],
    )


@register("runway", "health")
def runway(ctx: InsightContext, cfg):
    """Months of spending the cushion covers at the current burn"""
    if ctx.cushion <= 0 or ctx.total_spent <= 0:
        return None
    monthly_burn = ctx.daily_average * ctx.days_in_month if ctx.is_current_month else ctx.total_spent
    months = ctx.cushion / monthly_burn

    if months < cfg["danger_months"]:
        return Finding(
            InsightType.WARNING,
            "🚨 Danger zone",
            "Less than one month of spending is covered.",
            "Top priority: build an emergency fund.",
            cfg["score_danger"],
        )
    if months < cfg["thin_months"]:
        return Finding(
            InsightType.WARNING,
            "⚠️ Thin cushion",
            f"You have {months:.1f} months covered.",
            "Aim for 3 to 6 months of safety.",
            cfg["score_thin"],
        )
    if months >= cfg["strong_months"]:
        return Finding(
            InsightType.SUCCESS,
            "🏰 Financial fortress",
            f"You have {months:.1f} months of freedom.",
            "Consider investing the surplus.",
            cfg["score_strong"],
        )
    return None


@register("spending_acceleration", "health")
def spending_acceleration(ctx: InsightContext, cfg):
    split = cfg["split_day"]
    if not ctx.is_current_month or ctx.current_day <= split:
        return None
    first_half = sum(ctx.spend_on(day) for day in range(1, split + 1)) / split
    second_half = sum(ctx.spend_on(day) for day in range(split + 1, ctx.days_in_month + 1)) / (
        ctx.current_day - split
    )
    if second_half <= first_half * cfg["factor"]:
        return None
    return Finding(
        InsightType.WARNING,
        "📈 Spending is speeding up",
        "You are spending much faster in the second half of the month.",
        "Ease off a little!",
        cfg["score"],
    )


@register("investment_capacity", "health")
def investment_capacity(ctx: InsightContext, cfg):
    if ctx.cushion <= cfg["min_cushion"] or ctx.savings <= cfg["min_surplus"]:
        return None
    return Finding(
        InsightType.ACTION,
        "🚀 Investment opportunity",
        "You have a solid cushion and a monthly surplus.",
        "Have you considered index funds or a term deposit?",
        cfg["score"],
    )


@register("days_of_freedom", "health")
def days_of_freedom(ctx: InsightContext, cfg):
    if ctx.total_income <= 0 or ctx.total_spent <= 0 or ctx.savings <= 0:
        return None
    days = ctx.savings / ctx.daily_average
    return Finding(
        InsightType.SUCCESS,
        "⏳ Time bought",
        f"This month you \"bought\" {days:.1f} days of future freedom.",
        "Your savings translate into time you do not have to work.",
        cfg["score"],
    )


@register("housing_ratio", "health")
def housing_ratio(ctx: InsightContext, cfg):
    housing = ctx.keyword_spend(KEYWORDS["housing"])
    if ctx.total_income <= 0 or housing <= 0:
        return None
    ratio = housing / ctx.total_income * 100
    if ratio <= cfg["max_percent"]:
        return None
    return Finding(
        InsightType.WARNING,
        "🏠 Housing burden",
        f"Housing takes {ratio:.0f}% of your income.",
        "The usual advice is to stay under 30-35%.",
        cfg["score"],
    )


@register("safe_daily_limit", "health")
def safe_daily_limit(ctx: InsightContext, cfg):
    if not ctx.is_current_month or ctx.remaining_days <= 0 or ctx.budget_total <= 0:
        return None
    safe = max(0.0, (ctx.budget_total - ctx.total_spent) / ctx.remaining_days)
    return Finding(
        InsightType.NEUTRAL,
        "🛡️ Safe daily limit",
        f"You can spend {ctx.money(safe)}/day for the rest of the month.",
        "Stay there and you will meet your budget.",
        cfg["score"],
    )

"""Timing and calendar pattern rules"""

from cushion.engine.insights.context import InsightContext
from cushion.engine.insights.registry import Finding, register
from cushion.models.views import InsightType

SATURDAY = 5
SUNDAY = 6
MONDAY = 0
FRIDAY = 4


def _weekday_spend(ctx: InsightContext, *weekdays: int) -> float:
    return sum(tx.amount for tx in ctx.expenses if tx.date.weekday() in weekdays)


@register("projection_overrun", "timing")
def projection_overrun(ctx: InsightContext, cfg):
    if not ctx.is_current_month or ctx.current_day < cfg["min_day"]:
        return None
    projected = ctx.daily_average * ctx.days_in_month
    if ctx.budget_total <= 0 or projected <= ctx.budget_total:
        return None
    daily_allowance = max(0.0, (ctx.budget_total - ctx.total_spent) / max(ctx.remaining_days, 1))
    return Finding(
        InsightType.WARNING,
        "⚠️ Projection alert",
        f"Projected spend: {ctx.money(projected)} (budget: {ctx.money(ctx.budget_total)})",
        f"Cut your daily spend to {ctx.money(daily_allowance)} to stay on budget.",
        cfg["score"],
    )


@register("weekend_share", "timing")
def weekend_share(ctx: InsightContext, cfg):
    if ctx.total_spent <= 0:
        return None
    share = _weekday_spend(ctx, SATURDAY, SUNDAY) / ctx.total_spent
    if share <= cfg["min_share"]:
        return None
    return Finding(
        InsightType.INFO,
        "🎉 Saturday night fever",
        f"{share * 100:.0f}% of your spending happens at the weekend.",
        "Your weekdays are frugal but the weekend gets away from you.",
        cfg["score"],
    )


@register("monday_share", "timing")
def monday_share(ctx: InsightContext, cfg):
    if ctx.total_spent <= 0:
        return None
    if _weekday_spend(ctx, MONDAY) / ctx.total_spent <= cfg["min_share"]:
        return None
    return Finding(
        InsightType.INFO,
        "☕ Costly Mondays",
        "You spend a lot on Mondays.",
        "Emotional compensation for the start of the week?",
        cfg["score"],
    )


@register("front_loaded_month", "timing")
def front_loaded_month(ctx: InsightContext, cfg):
    if ctx.total_spent <= 0:
        return None
    first_week = sum(tx.amount for tx in ctx.expenses if tx.date.day <= cfg["first_week_days"])
    if first_week / ctx.total_spent <= cfg["min_share"]:
        return None
    return Finding(
        InsightType.WARNING,
        "🏎️ False start",
        f"You spent {cfg['min_share'] * 100:.0f}% of your money in the first week.",
        "Pace yourself so the end of the month does not hurt.",
        cfg["score"],
    )


@register("survival_mode", "timing")
def survival_mode(ctx: InsightContext, cfg):
    if not ctx.is_current_month or ctx.current_day < cfg["min_day"]:
        return None
    if ctx.total_spent / (ctx.total_income or 1) <= cfg["max_spend_ratio"]:
        return None
    return Finding(
        InsightType.WARNING,
        "🆘 Survival mode",
        "Less than 10% of your income is left.",
        "Avoid small impulse buys for the rest of the month.",
        cfg["score"],
    )


@register("night_purchases", "timing")
def night_purchases(ctx: InsightContext, cfg):
    count = sum(
        1 for tx in ctx.expenses
        if tx.created_at.hour >= cfg["start_hour"] or tx.created_at.hour <= cfg["end_hour"]
    )
    if count < cfg["min_count"]:
        return None
    return Finding(
        InsightType.INFO,
        "🦉 Night owl spending",
        f"You made {count} purchases in the small hours.",
        "Late-night purchases tend to be impulsive.",
        cfg["score"],
    )


@register("no_spend_streak", "timing")
def no_spend_streak(ctx: InsightContext, cfg):
    spend_days = {tx.date.day for tx in ctx.expenses if tx.date.day <= ctx.current_day}
    zero_days = ctx.current_day - len(spend_days)
    if zero_days < cfg["min_days"]:
        return None
    return Finding(
        InsightType.SUCCESS,
        "🛡️ Savings shield",
        f"{zero_days} days without spending anything.",
        "Excellent discipline!",
        cfg["score"],
    )


@register("daily_cost", "timing")
def daily_cost(ctx: InsightContext, cfg):
    return Finding(
        InsightType.NEUTRAL,
        "📅 Daily cost of living",
        f"Each day costs you {ctx.money(ctx.daily_average, 1)}.",
        "All your spending averaged over the elapsed days.",
        cfg["score"],
    )


@register("payday_splurge", "timing")
def payday_splurge(ctx: InsightContext, cfg):
    payday = ctx.profile.payday
    payday_spend = sum(tx.amount for tx in ctx.expenses if tx.date.day == payday)
    if payday_spend <= ctx.total_spent * cfg["min_share"]:
        return None
    return Finding(
        InsightType.WARNING,
        "💸 Payday euphoria",
        f"You spent over {cfg['min_share'] * 100:.0f}% of the month on the day you got paid.",
        "Watch out for the instant-wealth effect.",
        cfg["score"],
    )


@register("friday_share", "timing")
def friday_share(ctx: InsightContext, cfg):
    if _weekday_spend(ctx, FRIDAY) <= ctx.total_spent * cfg["min_share"]:
        return None
    return Finding(
        InsightType.INFO,
        "🍻 TGIF",
        f"Fridays take {cfg['min_share'] * 100:.0f}% of your budget.",
        "Dinners out or drinks?",
        cfg["score"],
    )

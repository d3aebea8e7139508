"""Statistical rules over the month's daily spend series"""

import math
import statistics
from datetime import date

from cushion.engine.insights.config import BASIC_NEEDS_CATEGORIES, KEYWORDS
from cushion.engine.insights.context import InsightContext, matches_any
from cushion.engine.insights.registry import Finding, register
from cushion.models.views import InsightType
from cushion.utils.dates import is_weekend


def least_squares_slope(points: list[tuple[float, float]]) -> float:
    n = len(points)
    sum_x = sum(x for x, _ in points)
    sum_y = sum(y for _, y in points)
    sum_xy = sum(x * y for x, y in points)
    sum_xx = sum(x * x for x, _ in points)
    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def _elapsed_spend(ctx: InsightContext) -> list[float]:
    return [ctx.spend_on(day) for day in range(1, ctx.current_day + 1)]


@register("volatility", "statistics")
def volatility(ctx: InsightContext, cfg):
    if ctx.current_day < cfg["min_day"]:
        return None
    mean = ctx.daily_average
    std = statistics.pstdev(_elapsed_spend(ctx), mean)
    if std > mean * cfg["high_factor"]:
        return Finding(
            InsightType.WARNING,
            "📊 Volatile spending",
            f"Your standard deviation is high ({ctx.money(std)}).",
            "Your daily spending is very unpredictable.",
            cfg["score_high"],
        )
    if std < mean * cfg["low_factor"] and ctx.total_spent > 0:
        return Finding(
            InsightType.SUCCESS,
            "📏 Consistent spending",
            "Your daily spending is very stable.",
            "That makes planning much easier.",
            cfg["score_low"],
        )
    return None


@register("spending_trend", "statistics")
def spending_trend(ctx: InsightContext, cfg):
    """Slope of the cumulative spend line against the plain daily average"""
    if ctx.current_day < cfg["min_day"]:
        return None
    points = []
    cumulative = 0.0
    for day, spend in enumerate(_elapsed_spend(ctx), start=1):
        cumulative += spend
        points.append((day, cumulative))
    if least_squares_slope(points) <= ctx.daily_average * cfg["factor"]:
        return None
    return Finding(
        InsightType.WARNING,
        "📈 Upward trend",
        "Your pace of spending is accelerating.",
        "You are spending more in recent days than at the start.",
        cfg["score"],
    )


@register("pareto", "statistics")
def pareto(ctx: InsightContext, cfg):
    if ctx.total_spent <= 0:
        return None
    ranked = sorted(ctx.category_totals.values(), reverse=True)
    share = 0.0
    count = 0
    for amount in ranked:
        share += amount / ctx.total_spent
        count += 1
        if share >= cfg["share"]:
            break
    total = len(ranked)
    if total < cfg["min_categories"] or count > math.ceil(total * cfg["top_fraction"]):
        return None
    return Finding(
        InsightType.INFO,
        "📐 Pareto principle",
        f"{cfg['share'] * 100:.0f}% of your spending comes from just {count} categories.",
        "Focus on optimising those few categories.",
        cfg["score"],
    )


@register("weekend_multiplier", "statistics")
def weekend_multiplier(ctx: InsightContext, cfg):
    if ctx.total_spent <= 0:
        return None
    weekend = []
    weekday = []
    for day, spend in enumerate(_elapsed_spend(ctx), start=1):
        if is_weekend(date(ctx.year, ctx.month, day)):
            weekend.append(spend)
        else:
            weekday.append(spend)
    if not weekend or not weekday:
        return None
    weekday_avg = sum(weekday) / len(weekday)
    multiplier = (sum(weekend) / len(weekend)) / (weekday_avg or 1)
    if multiplier <= cfg["min_multiplier"]:
        return None
    return Finding(
        InsightType.INFO,
        "🎉 Weekend effect",
        f"You spend {multiplier:.1f}x more at weekends.",
        "Leisure concentrates your budget.",
        cfg["score"],
    )


@register("zero_spend_probability", "statistics")
def zero_spend_probability(ctx: InsightContext, cfg):
    if ctx.current_day < cfg["min_day"]:
        return None
    zero_days = sum(1 for spend in _elapsed_spend(ctx) if spend == 0)
    probability = zero_days / ctx.current_day * 100
    if probability <= cfg["min_percent"]:
        return None
    return Finding(
        InsightType.SUCCESS,
        "🧘 Stoic mind",
        f"There is a {probability:.0f}% chance you spend nothing today.",
        "Great impulse control.",
        cfg["score"],
    )


@register("basic_needs_ratio", "statistics")
def basic_needs_ratio(ctx: InsightContext, cfg):
    if ctx.total_income <= 0 or ctx.total_spent <= 0:
        return None
    basic = sum(
        tx.amount for tx in ctx.expenses
        if tx.category in BASIC_NEEDS_CATEGORIES
        or matches_any(tx.description, KEYWORDS["housing"])
        or matches_any(tx.description, KEYWORDS["transport"])
    )
    ratio = basic / ctx.total_income * 100
    if ratio >= cfg["max_percent"]:
        return None
    return Finding(
        InsightType.SUCCESS,
        "📉 Low cost of living",
        f"Your basic needs are only {ratio:.0f}% of your income.",
        "You have plenty of room to manoeuvre.",
        cfg["score"],
    )


@register("compound_growth", "statistics")
def compound_growth(ctx: InsightContext, cfg):
    if ctx.cushion <= cfg["min_cushion"]:
        return None
    future = ctx.cushion * (1 + cfg["rate"]) ** cfg["years"]
    return Finding(
        InsightType.ACTION,
        "🌳 Seed of wealth",
        f"Invested at {cfg['rate'] * 100:.0f}%, your cushion would be {ctx.money(future)} "
        f"in {cfg['years']} years.",
        f"Passive gain: {ctx.money(future - ctx.cushion)}.",
        cfg["score"],
    )


@register("ticket_size", "statistics")
def ticket_size(ctx: InsightContext, cfg):
    if not ctx.expenses:
        return None
    average = ctx.total_spent / len(ctx.expenses)
    if average > cfg["large_avg"]:
        return Finding(
            InsightType.INFO,
            "🐘 Big purchases",
            f"Your average ticket is high ({ctx.money(average)}).",
            "Few purchases, but valuable ones.",
            cfg["score"],
        )
    if average < cfg["small_avg"]:
        return Finding(
            InsightType.INFO,
            "🐁 Micro consumption",
            f"Your average ticket is low ({ctx.money(average)}).",
            "Lots of small purchases.",
            cfg["score"],
        )
    return None


@register("emergency_countdown", "statistics")
def emergency_countdown(ctx: InsightContext, cfg):
    if ctx.cushion <= 0 or ctx.current_day < cfg["min_day"] or ctx.daily_average <= 0:
        return None
    days = ctx.cushion / ctx.daily_average
    if days >= cfg["max_days"]:
        return None
    return Finding(
        InsightType.WARNING,
        "⏱️ Countdown",
        f"At this pace your money lasts {days:.0f} days.",
        "Cut spending urgently!",
        cfg["score"],
    )


@register("debt_ratio", "statistics")
def debt_ratio(ctx: InsightContext, cfg):
    debt = ctx.keyword_spend(KEYWORDS["debt"])
    if ctx.total_income <= 0 or debt <= 0:
        return None
    ratio = debt / ctx.total_income * 100
    if ratio <= cfg["max_percent"]:
        return None
    return Finding(
        InsightType.WARNING,
        "⛓️ Debt chains",
        f"{ratio:.0f}% of your income goes to paying debt.",
        "Risky if rates rise or income drops.",
        cfg["score"],
    )


def health_points(ctx: InsightContext, base: int) -> int:
    """Composite 0-100 score from savings rate, cushion depth and debt"""
    points = base
    rate = ctx.savings_rate
    if rate > 20:
        points += 20
    elif rate > 10:
        points += 10
    elif rate < 0:
        points -= 20

    if ctx.cushion > ctx.total_spent * 3:
        points += 20
    elif ctx.cushion < ctx.total_spent:
        points -= 10

    if ctx.keyword_spend(KEYWORDS["debt"]) == 0:
        points += 10
    return max(0, min(points, 100))


@register("health_score", "statistics")
def health_score(ctx: InsightContext, cfg):
    points = health_points(ctx, cfg["base"])
    if points >= cfg["success_at"]:
        kind = InsightType.SUCCESS
    elif points < cfg["warning_below"]:
        kind = InsightType.WARNING
    else:
        kind = InsightType.NEUTRAL
    return Finding(
        kind,
        "🏥 Financial score",
        f"Score: {points}/100",
        "Based on savings, cushion and debt.",
        cfg["score"],
    )


@register("years_of_runway", "statistics")
def years_of_runway(ctx: InsightContext, cfg):
    if ctx.cushion <= 0 or ctx.total_spent <= 0:
        return None
    days = ctx.cushion / ctx.daily_average
    years = round(days / 365, 1)
    if days < cfg["min_days"] or years <= cfg["min_years"]:
        return None
    return Finding(
        InsightType.SUCCESS,
        "♾️ Runway",
        f"You could live {years:.1f} years without income.",
        "Real freedom.",
        cfg["score"],
    )


@register("lifestyle_inflation", "statistics")
def lifestyle_inflation(ctx: InsightContext, cfg):
    if ctx.budget_total <= 0 or ctx.total_spent <= ctx.budget_total * cfg["factor"]:
        return None
    return Finding(
        InsightType.WARNING,
        "🎈 Lifestyle inflation",
        f"You spend {(cfg['factor'] - 1) * 100:.0f}% more than budgeted.",
        "Is your standard of living rising too fast?",
        cfg["score"],
    )


@register("small_spend_share", "statistics")
def small_spend_share(ctx: InsightContext, cfg):
    if ctx.total_spent <= 0:
        return None
    small = sum(tx.amount for tx in ctx.expenses if tx.amount < cfg["max_amount"])
    if small / ctx.total_spent <= cfg["min_share"]:
        return None
    return Finding(
        InsightType.INFO,
        "☕ Ant effect",
        f"Over {cfg['min_share'] * 100:.0f}% of your money goes on expenses under "
        f"{ctx.money(cfg['max_amount'])}.",
        "Small leaks sink big ships.",
        cfg["score"],
    )


@register("savings_velocity", "statistics")
def savings_velocity(ctx: InsightContext, cfg):
    if ctx.total_income <= 0 or not ctx.is_current_month:
        return None
    speed = ctx.savings / ctx.current_day
    if speed > 0:
        return Finding(
            InsightType.SUCCESS,
            "🏎️ Savings velocity",
            f"You are putting away {ctx.money(speed, 1)} net every day.",
            "Keep it up!",
            cfg["score_positive"],
        )
    return Finding(
        InsightType.WARNING,
        "📉 Daily drain",
        f"You are losing {ctx.money(abs(speed), 1)} net every day.",
        "Slow the spending down.",
        cfg["score_negative"],
    )

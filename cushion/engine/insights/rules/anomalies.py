"""Anomaly detection rules"""

from cushion.engine.insights.config import KEYWORDS
from cushion.engine.insights.context import InsightContext, matches_any
from cushion.engine.insights.registry import Finding, register
from cushion.models.transaction import DEFAULT_CATEGORY, TransactionType
from cushion.models.views import InsightType


@register("huge_expense", "anomalies")
def huge_expense(ctx: InsightContext, cfg):
    """First large categorised expense that is not rent or mortgage"""
    huge = next(
        (
            tx for tx in ctx.expenses
            if tx.amount > cfg["min_amount"]
            and tx.category != DEFAULT_CATEGORY
            and not matches_any(tx.description, KEYWORDS["housing"])
        ),
        None,
    )
    if huge is None:
        return None
    return Finding(
        InsightType.INFO,
        "🦖 Monster expense",
        f"Single expense of {ctx.money(huge.amount, 2)} detected ({huge.category}).",
        "Was it planned or a surprise?",
        cfg["score"],
    )


@register("micro_transactions", "anomalies")
def micro_transactions(ctx: InsightContext, cfg):
    count = sum(1 for tx in ctx.expenses if tx.amount < cfg["max_amount"])
    if count < cfg["min_count"]:
        return None
    return Finding(
        InsightType.INFO,
        "🐜 Ant colony",
        f"You have {count} expenses under {ctx.money(cfg['max_amount'])}.",
        "Careful, money is leaking out there.",
        cfg["score"],
    )


@register("round_amounts", "anomalies")
def round_amounts(ctx: InsightContext, cfg):
    count = sum(
        1 for tx in ctx.expenses
        if tx.amount % cfg["step"] == 0 and tx.amount > cfg["min_amount"]
    )
    if count < cfg["min_count"]:
        return None
    return Finding(
        InsightType.NEUTRAL,
        "🏧 Cash detected",
        f"Lots of round amounts ({count}).",
        "ATM withdrawals? Remember to log what the cash was spent on.",
        cfg["score"],
    )


@register("possible_duplicates", "anomalies")
def possible_duplicates(ctx: InsightContext, cfg):
    """Two distinct records with the same day, amount and category"""
    seen = {}
    for tx in ctx.transactions:
        key = (tx.date, tx.amount, tx.category)
        if key in seen and seen[key] != tx.id:
            return Finding(
                InsightType.WARNING,
                "👯 Possible duplicates",
                "Identical movements found on the same day.",
                "Check whether you entered an expense twice.",
                cfg["score"],
            )
        seen.setdefault(key, tx.id)
    return None


@register("bank_fees", "anomalies")
def bank_fees(ctx: InsightContext, cfg):
    fees = ctx.keyword_spend(KEYWORDS["fees"])
    if fees <= 0:
        return None
    return Finding(
        InsightType.WARNING,
        "🏦 Bank fees",
        f"You paid {ctx.money(fees, 2)} in fees.",
        "Review your bank's conditions or switch.",
        cfg["score"],
    )


@register("refund_received", "anomalies")
def refund_received(ctx: InsightContext, cfg):
    refunds = [
        tx for tx in ctx.transactions
        if tx.type is TransactionType.INCOME and matches_any(tx.description, KEYWORDS["refund"])
    ]
    if not refunds:
        return None
    return Finding(
        InsightType.SUCCESS,
        "↩️ Refund received",
        "You got money back from a refund.",
        "Make sure it matches the original expense.",
        cfg["score"],
    )

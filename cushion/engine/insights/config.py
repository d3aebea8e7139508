"""
Insight rule configuration.

One row per rule id. Every threshold a rule compares against and every
score it ranks with lives here, so tuning never touches rule code. A row
may also carry "enabled": False to switch the rule off.

Callers override rows per call:

    generate_insights(..., config={"weekend_share": {"min_share": 0.4}})

Overrides are merged key by key over the defaults below.
"""

from typing import Any, Mapping, Optional

# =============================================================================
# KEYWORD FAMILIES (matched case-insensitively against descriptions)
# =============================================================================

KEYWORDS: dict[str, tuple[str, ...]] = {
    "streaming": ("netflix", "hbo", "disney", "prime", "spotify", "youtube"),
    "gaming": ("steam", "playstation", "xbox", "nintendo", "game"),
    "fashion": ("zara", "h&m", "mango", "bershka", "pull", "stradivarius", "nike", "adidas"),
    "fast_food": ("mcdonalds", "burger", "kfc", "pizza", "taco", "glovo", "uber eats", "just eat"),
    "transport": ("gasolina", "repsol", "cepsa", "bp", "uber", "cabify", "taxi", "metro", "bus", "renfe"),
    "housing": ("alquiler", "hipoteca", "comunidad", "casero"),
    "fees": ("comision", "comisión", "mantenimiento", "intereses"),
    "refund": ("devoluci",),
    "tax": ("hacienda", "aeat", "impuesto", "ibi", "ivtm"),
    "health": ("farmacia", "medico", "dentista", "salud", "gimnasio", "gym", "deporte"),
    "pets": ("veterinario", "mascota", "perro", "gato", "pienso", "kiwoko", "zooplus"),
    "education": ("curso", "udemy", "platzi", "libro", "formacion", "universidad", "master"),
    "debt": ("prestamo", "préstamo", "credito", "crédito", "hipoteca", "plazo", "financiacion"),
}

WANTS_CATEGORIES = ("Caprichos", "Planes", "Regalos")
BASIC_NEEDS_CATEGORIES = ("Comidas", "Transporte", "Vivienda", "Supermercado", "Casa")
SUBSCRIPTION_CATEGORY = "Suscripciones"
FOOD_CATEGORY = "Comidas"
GIFTS_CATEGORY = "Regalos"
TREATS_CATEGORY = "Caprichos"


# =============================================================================
# RULE TABLE
# =============================================================================

RULE_CONFIG: dict[str, dict[str, Any]] = {
    # --- timing ---------------------------------------------------------
    "projection_overrun": {"min_day": 2, "score": 10},
    "weekend_share": {"min_share": 0.5, "score": 5},
    "monday_share": {"min_share": 0.25, "score": 3},
    "front_loaded_month": {"first_week_days": 7, "min_share": 0.6, "score": 8},
    "survival_mode": {"min_day": 21, "max_spend_ratio": 0.9, "score": 9},
    "night_purchases": {"start_hour": 23, "end_hour": 4, "min_count": 3, "score": 4},
    "no_spend_streak": {"min_days": 6, "score": 6},
    "daily_cost": {"score": 2},
    "payday_splurge": {"min_share": 0.15, "score": 6},
    "friday_share": {"min_share": 0.2, "score": 3},

    # --- categories -----------------------------------------------------
    "uncategorised_share": {"min_share": 0.3, "score": 7},
    "wants_over_needs": {"score": 6},
    "subscription_fatigue": {"min_count": 5, "score": 5},
    "food_lover": {"baseline": 150.0, "factor": 1.5, "score": 4},
    "generous_gifts": {"min_amount": 100.0, "score": 3},
    "concentrated_spending": {"max_categories": 2, "min_spent": 100.0, "score": 2},
    "latte_factor": {"max_amount": 5.0, "min_count": 11, "score": 4},
    "streaming_wars": {"min_count": 3, "score": 3},
    "gamer": {"min_amount": 50.0, "score": 2},
    "fashionista": {"min_amount": 100.0, "score": 3},
    "fast_food": {"min_count": 5, "score": 5},
    "mobility_cost": {"min_amount": 150.0, "score": 4},

    # --- financial health -----------------------------------------------
    "savings_rule": {"target_rate": 20.0, "score_met": 8, "score_missed": 5},
    "runway": {
        "danger_months": 1.0,
        "thin_months": 3.0,
        "strong_months": 6.0,
        "score_danger": 10,
        "score_thin": 7,
        "score_strong": 8,
    },
    "spending_acceleration": {"split_day": 15, "factor": 1.5, "score": 6},
    "investment_capacity": {"min_cushion": 10000.0, "min_surplus": 500.0, "score": 7},
    "days_of_freedom": {"score": 6},
    "housing_ratio": {"max_percent": 40.0, "score": 6},
    "safe_daily_limit": {"score": 8},

    # --- anomalies ------------------------------------------------------
    "huge_expense": {"min_amount": 300.0, "score": 4},
    "micro_transactions": {"max_amount": 2.0, "min_count": 16, "score": 3},
    "round_amounts": {"step": 10, "min_amount": 10.0, "min_count": 6, "score": 2},
    "possible_duplicates": {"score": 5},
    "bank_fees": {"score": 4},
    "refund_received": {"score": 3},

    # --- gamification ---------------------------------------------------
    "saver_level": {
        "levels": ((10.0, "Apprentice"), (25.0, "Saver"), (50.0, "Master"), (70.0, "Legend")),
        "base_level": "Rookie",
        "score": 1,
    },
    "yearly_forecast": {"score": 2},
    "retail_therapy": {"min_share": 0.2, "score": 4},
    "pocket_funding_gap": {"account": "revolut", "score": 9},
    "description_quality": {"min_count": 6, "score": 2},
    "income_diversity": {"min_sources": 2, "score": 5},
    "taxes_paid": {"score": 3},
    "health_spending": {"nudge_min_spent": 500.0, "score_spent": 4, "score_nudge": 2},
    "pet_spending": {"score": 3},
    "education_spending": {"score": 6},

    # --- statistics -----------------------------------------------------
    "volatility": {"min_day": 3, "high_factor": 1.5, "low_factor": 0.5, "score_high": 5, "score_low": 4},
    "spending_trend": {"min_day": 6, "factor": 1.2, "score": 6},
    "pareto": {"share": 0.8, "min_categories": 5, "top_fraction": 0.2, "score": 5},
    "weekend_multiplier": {"min_multiplier": 2.5, "score": 4},
    "zero_spend_probability": {"min_day": 6, "min_percent": 40.0, "score": 5},
    "basic_needs_ratio": {"max_percent": 50.0, "score": 7},
    "compound_growth": {"min_cushion": 1000.0, "rate": 0.05, "years": 10, "score": 6},
    "ticket_size": {"large_avg": 50.0, "small_avg": 10.0, "score": 3},
    "emergency_countdown": {"min_day": 6, "max_days": 30.0, "score": 9},
    "debt_ratio": {"max_percent": 30.0, "score": 8},
    "health_score": {"base": 50, "success_at": 80, "warning_below": 40, "score": 7},
    "years_of_runway": {"min_days": 60.0, "min_years": 1.0, "score": 8},
    "lifestyle_inflation": {"factor": 1.2, "score": 6},
    "small_spend_share": {"max_amount": 5.0, "min_share": 0.1, "score": 4},
    "savings_velocity": {"score_positive": 5, "score_negative": 6},
}


def resolve_config(overrides: Optional[Mapping[str, Mapping[str, Any]]] = None) -> dict[str, dict[str, Any]]:
    """Defaults with per-rule overrides merged key by key"""
    merged = {rule_id: dict(row) for rule_id, row in RULE_CONFIG.items()}
    for rule_id, row in (overrides or {}).items():
        merged.setdefault(rule_id, {}).update(row)
    return merged

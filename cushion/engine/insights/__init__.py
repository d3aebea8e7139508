"""
Insight heuristics engine.

Scored, human-readable observations about one month of spending, produced
by a registry of small rules tuned through RULE_CONFIG.
"""

from cushion.engine.insights.config import KEYWORDS, RULE_CONFIG, resolve_config
from cushion.engine.insights.context import InsightContext, build_context
from cushion.engine.insights.generator import generate_insights
from cushion.engine.insights.registry import Finding, InsightRule, register, registered_rules

__all__ = [
    "KEYWORDS",
    "RULE_CONFIG",
    "resolve_config",
    "InsightContext",
    "build_context",
    "generate_insights",
    "Finding",
    "InsightRule",
    "register",
    "registered_rules",
]

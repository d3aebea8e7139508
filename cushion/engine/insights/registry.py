"""
Insight rule registry.

Rules register themselves with the @register decorator at import time and
run in registration order. A rule is a pure function of the shared
InsightContext and its own config row; it returns a Finding or None.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, NamedTuple, Optional

from cushion.engine.insights.context import InsightContext
from cushion.models.views import Insight, InsightType


class Finding(NamedTuple):
    """What a rule reports; the registry stamps the rule id on it."""
    type: InsightType
    title: str
    text: str
    details: str
    score: int


RuleFunction = Callable[[InsightContext, Mapping[str, Any]], Optional[Finding]]


@dataclass(frozen=True)
class InsightRule:
    id: str
    category: str
    evaluate: RuleFunction

    def run(self, ctx: InsightContext, config: Mapping[str, Any]) -> Optional[Insight]:
        if not config.get("enabled", True):
            return None
        finding = self.evaluate(ctx, config)
        if finding is None:
            return None
        return Insight(
            rule_id=self.id,
            type=finding.type,
            title=finding.title,
            text=finding.text,
            details=finding.details,
            score=finding.score,
        )


_RULES: list[InsightRule] = []


def register(rule_id: str, category: str) -> Callable[[RuleFunction], RuleFunction]:
    """Decorator adding a rule function to the registry"""
    def decorator(func: RuleFunction) -> RuleFunction:
        if any(rule.id == rule_id for rule in _RULES):
            raise ValueError(f"Duplicate insight rule id: {rule_id}")
        _RULES.append(InsightRule(id=rule_id, category=category, evaluate=func))
        return func
    return decorator


def registered_rules() -> list[InsightRule]:
    """All rules in registration order"""
    return list(_RULES)

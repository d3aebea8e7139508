"""
Rule families. Importing this package registers every rule, in the order
the modules are listed here.
"""

from cushion.engine.insights.rules import (  # noqa: F401
    timing,
    categories,
    health,
    anomalies,
    gamification,
    statistics,
)

"""
Cushion - Source Package

The computational core of a personal finance tracker: a transaction log
and a financial profile go in, derived views (calendar, monthly totals,
cushion, budgets, projections, insights) and mutation intents come out.

DESIGN PRINCIPLES:
1. Every derived view is a pure function of (log, profile, dates)
2. In-memory state is the source of truth for a session
3. Persistence is optimistic and never blocks a mutation
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Cushion Team"

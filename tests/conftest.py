"""
Shared fixtures.

Test strategy:
1. Unit tests for the pure engine (no I/O at all)
2. Session tests against the in-memory stores
3. No real Google Sheets calls (use the in-memory backend)
"""

from datetime import date

import pytest

from cushion.models.profile import FinancialProfile
from cushion.models.transaction import Transaction, TransactionType


def _make_transaction(day, amount, tx_type="expense", category=None, description=None, **extra):
    if isinstance(day, str):
        day = date.fromisoformat(day)
    return Transaction(
        date=day,
        amount=amount,
        type=TransactionType(tx_type),
        category=category,
        description=description,
        **extra,
    )


@pytest.fixture
def make_tx():
    """Factory for transactions: make_tx("2024-03-05", 100, "income", "Nómina")"""
    return _make_transaction


@pytest.fixture
def make_log():
    """Build a transaction log from transactions, keyed by their dates."""
    def build(*transactions):
        log = {}
        for tx in transactions:
            log.setdefault(tx.date_key, []).append(tx)
        return log
    return build


@pytest.fixture
def march_log(make_tx, make_log):
    """Salary of 100 on the 5th, a 40 food expense on the 10th."""
    return make_log(
        make_tx("2024-03-05", 100, "income", "Nómina"),
        make_tx("2024-03-10", 40, "expense", "Comidas"),
    )


@pytest.fixture
def profile():
    return FinancialProfile(
        monthly_salary=2000,
        payday=25,
        savings_target=500,
        budgets={"Comidas": 50, "Planes": 100},
    )

"""
Fund / pocket engine.

Funds are named sub-balances held in profile.fund_balances. Money moves
into them two ways:

1. Manual operations (add a signed delta, or set an absolute total)
2. The monthly distribution, which moves every configured pocket amount
   from the main balance into its fund once per month

When money crosses between a fund and the main balance, the engine emits a
normal transaction so the cushion stays correct:
- into a fund   -> TRANSFER (subtracts from main balance, not spending)
- out of a fund -> INCOME

Nothing here runs on its own. is_distribution_pending only tells the
caller whether to offer the distribution.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from cushion.engine.exceptions import FundOperationError
from cushion.engine.ledger import add_transactions
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import (
    FUND_CATEGORY,
    Transaction,
    TransactionLog,
    TransactionType,
)
from cushion.models.views import DistributionResult, FundAdjustment
from cushion.utils.dates import month_key
from cushion.utils.numbers import parse_number

NOTHING_TO_DISTRIBUTE = "Nothing to distribute: every pocket amount is zero"
ALREADY_DISTRIBUTED = "Distribution already executed this month"


class FundMode(str, Enum):
    """How a manual fund amount is interpreted."""
    ADD = "add"   # signed delta
    SET = "set"   # absolute target balance


def _fund_transaction(
    fund: str,
    delta: float,
    on: date,
    user_id: str,
    now: datetime,
) -> Transaction:
    if delta > 0:
        return Transaction(
            date=on,
            amount=delta,
            description=f"contribution to {fund}",
            type=TransactionType.TRANSFER,
            category=FUND_CATEGORY,
            created_at=now,
            user_id=user_id,
        )
    return Transaction(
        date=on,
        amount=abs(delta),
        description=f"withdrawal from {fund}",
        type=TransactionType.INCOME,
        category=FUND_CATEGORY,
        created_at=now,
        user_id=user_id,
    )


def adjust_fund(
    log: TransactionLog,
    profile: FinancialProfile,
    fund: str,
    amount: Any,
    *,
    impact_main_balance: bool,
    mode: FundMode = FundMode.ADD,
    today: Optional[date] = None,
    user_id: str = "",
    now: Optional[datetime] = None,
) -> FundAdjustment:
    """
    Change one fund's balance.

    Args:
        amount: Signed delta in ADD mode, target balance in SET mode
        impact_main_balance: Emit a transfer/income so the main balance
                             mirrors the movement. When False only the
                             fund balance changes.

    Raises:
        FundOperationError: If the fund name is empty or amount not numeric
    """
    if not fund:
        raise FundOperationError("Fund name is required")
    try:
        value = parse_number(amount)
    except ValueError:
        raise FundOperationError(f"Fund amount must be a number, got {amount!r}")

    mode = FundMode(mode)
    previous = profile.fund_balances.get(fund, 0.0)
    delta = value if mode is FundMode.ADD else value - previous

    if delta == 0:
        return FundAdjustment(
            log=log,
            profile=profile,
            fund=fund,
            previous_balance=previous,
            new_balance=previous,
            delta=0.0,
        )

    new_balance = value if mode is FundMode.SET else previous + delta
    new_profile = profile.model_copy(
        update={"fund_balances": {**profile.fund_balances, fund: new_balance}}
    )

    transaction = None
    new_log = log
    if impact_main_balance:
        transaction = _fund_transaction(
            fund,
            delta,
            today or date.today(),
            user_id,
            now or datetime.now(timezone.utc),
        )
        new_log = add_transactions(log, [transaction])

    return FundAdjustment(
        log=new_log,
        profile=new_profile,
        fund=fund,
        previous_balance=previous,
        new_balance=new_balance,
        delta=delta,
        transaction=transaction,
    )


def is_distribution_pending(profile: FinancialProfile, today: Optional[date] = None) -> bool:
    """Payday has arrived this month and the distribution has not run yet"""
    today = today or date.today()
    return (
        today.day >= profile.payday
        and profile.last_distribution_month != month_key(today.year, today.month)
    )


def execute_distribution(
    log: TransactionLog,
    profile: FinancialProfile,
    today: Optional[date] = None,
    user_id: str = "",
    now: Optional[datetime] = None,
) -> DistributionResult:
    """
    Move each positive pocket amount from the main balance into its fund.

    Runs at most once per month: the profile is stamped with the month and
    a second call in the same month changes nothing.
    """
    today = today or date.today()
    now = now or datetime.now(timezone.utc)
    current = month_key(today.year, today.month)

    if profile.last_distribution_month == current:
        return DistributionResult(
            log=log,
            profile=profile,
            executed=False,
            month=current,
            message=ALREADY_DISTRIBUTED,
        )

    transactions = []
    balances = dict(profile.fund_balances)
    for fund in profile.fund_keys:
        pocket = profile.pockets.get(fund, 0.0)
        if pocket <= 0:
            continue
        transactions.append(
            Transaction(
                date=today,
                amount=pocket,
                description=f"Monthly distribution to {fund}",
                type=TransactionType.TRANSFER,
                category=FUND_CATEGORY,
                created_at=now,
                user_id=user_id,
            )
        )
        balances[fund] = balances.get(fund, 0.0) + pocket

    if not transactions:
        return DistributionResult(
            log=log,
            profile=profile,
            executed=False,
            month=current,
            message=NOTHING_TO_DISTRIBUTE,
        )

    total = sum(tx.amount for tx in transactions)
    return DistributionResult(
        log=add_transactions(log, transactions),
        profile=profile.model_copy(
            update={"fund_balances": balances, "last_distribution_month": current}
        ),
        executed=True,
        month=current,
        transactions=transactions,
        total_distributed=total,
        message=f"Distributed {total:.2f} to {len(transactions)} funds",
    )

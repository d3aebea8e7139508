"""
Checkpoint / reconciliation engine.

The user declares what they actually hold on a date. The engine computes
what the log says they should hold and, if the two disagree, emits ONE
adjustment transaction that makes them agree. Running the same checkpoint
again therefore finds nothing left to adjust.
"""

from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from cushion.engine.aggregation import cushion_at
from cushion.engine.exceptions import CheckpointValidationError
from cushion.engine.ledger import add_transaction
from cushion.models.profile import FinancialProfile
from cushion.models.transaction import (
    CHECKPOINT_MARKER,
    DEFAULT_CATEGORY,
    Transaction,
    TransactionLog,
    TransactionType,
)
from cushion.models.views import CheckpointResult
from cushion.utils.numbers import parse_number

CHECKPOINT_TOLERANCE = 0.01
CHECKPOINT_DESCRIPTION = f"🔄 Balance adjustment ({CHECKPOINT_MARKER})"


def parse_amount(value: Any, field: str = "balance") -> float:
    try:
        return parse_number(value)
    except ValueError:
        raise CheckpointValidationError(f"{field} must be a number, got {value!r}")


def create_checkpoint(
    log: TransactionLog,
    profile: FinancialProfile,
    target_date: date,
    actual_balance: Any = None,
    accounts: Optional[Mapping[str, Any]] = None,
    user_id: str = "",
    now: Optional[datetime] = None,
    tolerance: float = CHECKPOINT_TOLERANCE,
) -> CheckpointResult:
    """
    Reconcile the log against a declared balance on target_date.

    Args:
        actual_balance: Declared total; ignored when accounts is given
        accounts: Declared balance per account; the total is their sum and
                  the breakdown is stored on the returned profile

    Raises:
        CheckpointValidationError: If any declared value is not numeric.
                                   Nothing is changed in that case.
    """
    if accounts is not None:
        parsed_accounts = {
            name: parse_amount(value, field=f"account {name}")
            for name, value in accounts.items()
        }
        actual = sum(parsed_accounts.values())
        new_profile = profile.model_copy(
            update={"accounts": {**profile.accounts, **parsed_accounts}}
        )
    else:
        actual = parse_amount(actual_balance)
        new_profile = profile

    calculated = cushion_at(log, profile, target_date)
    difference = actual - calculated

    if abs(difference) < tolerance:
        return CheckpointResult(
            log=log,
            profile=new_profile,
            target_date=target_date,
            calculated_balance=calculated,
            actual_balance=actual,
            difference=difference,
        )

    adjustment = Transaction(
        date=target_date,
        amount=abs(difference),
        description=CHECKPOINT_DESCRIPTION,
        type=TransactionType.INCOME if difference > 0 else TransactionType.EXPENSE,
        category=DEFAULT_CATEGORY,
        created_at=now or datetime.now(timezone.utc),
        user_id=user_id,
    )

    return CheckpointResult(
        log=add_transaction(log, adjustment),
        profile=new_profile,
        target_date=target_date,
        calculated_balance=calculated,
        actual_balance=actual,
        difference=difference,
        adjustment=adjustment,
    )

"""
Transaction Models for Cushion

A transaction is a single dated money movement. Its direction is carried
by its type, never by the sign of the amount:

- INCOME adds to the main balance
- EXPENSE subtracts from the main balance and counts as spending
- TRANSFER subtracts from the main balance but is NOT spending
  (money moved into a fund)

Every aggregation in the engine goes through TransactionType.balance_sign
and TransactionType.is_spending, so the rule for transfers lives here and
nowhere else.

Field names serialize in camelCase (createdAt, userId) to stay compatible
with the JSON backups and the document store.
"""

import datetime as dt
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# CATEGORY CONSTANTS
# =============================================================================

EXPENSE_CATEGORIES = ("Comidas", "Planes", "Regalos", "Suscripciones", "Caprichos", "Otros")
INCOME_CATEGORIES = ("Nómina", "Regalo", "Venta", "Otros")

DEFAULT_CATEGORY = "Otros"
SALARY_CATEGORY = "Nómina"
FUND_CATEGORY = "Fondos"

DEFAULT_EXPENSE_DESCRIPTION = "Gasto"
DEFAULT_INCOME_DESCRIPTION = "Ingreso"

# Any description containing this marker is a reconciliation adjustment
CHECKPOINT_MARKER = "Checkpoint"


class TransactionType(str, Enum):
    """
    Direction of a transaction.

    DESIGN DECISION: transfer is a first-class variant rather than an
    expense with a flag, so no aggregation can forget to handle it.
    """
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"

    @property
    def balance_sign(self) -> int:
        """+1 if this type adds to the main balance, -1 if it subtracts."""
        return 1 if self is TransactionType.INCOME else -1

    @property
    def is_spending(self) -> bool:
        """Only expenses count toward spending aggregates."""
        return self is TransactionType.EXPENSE


class Transaction(BaseModel):
    """
    A single dated income, expense or transfer.

    The date is kept as a datetime.date internally; the YYYY-MM-DD string
    only appears as the transaction log key and in serialized records.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Unique transaction ID"
    )
    date: dt.date = Field(
        ...,
        description="Day the transaction belongs to"
    )
    amount: float = Field(
        ...,
        gt=0,
        description="Always positive; direction comes from type"
    )
    description: str = Field(
        default="",
    )
    type: TransactionType = Field(
        default=TransactionType.EXPENSE,
    )
    category: str = Field(
        default=DEFAULT_CATEGORY,
    )
    created_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc),
        description="When the transaction was recorded"
    )
    user_id: str = Field(
        default="",
        description="Owner of the transaction"
    )

    @field_validator('description', 'category', mode='before')
    @classmethod
    def none_to_empty(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @model_validator(mode='after')
    def fill_defaults(self) -> 'Transaction':
        """Missing category and description fall back to sentinel values."""
        if not self.category:
            self.category = DEFAULT_CATEGORY
        if not self.description:
            self.description = (
                DEFAULT_INCOME_DESCRIPTION
                if self.type is TransactionType.INCOME
                else DEFAULT_EXPENSE_DESCRIPTION
            )
        return self

    @property
    def date_key(self) -> str:
        return self.date.isoformat()

    @property
    def signed_amount(self) -> float:
        """Effect of this transaction on the main balance."""
        return self.type.balance_sign * self.amount

    @property
    def is_adjustment(self) -> bool:
        """Was this created by a balance checkpoint?"""
        return CHECKPOINT_MARKER in self.description

    def to_record(self) -> dict:
        """Serialize to the camelCase JSON record used by stores and backups."""
        return self.model_dump(mode="json", by_alias=True)


# Transaction log: "YYYY-MM-DD" -> non-empty list of transactions
TransactionLog = dict[str, list[Transaction]]


def flatten_log(log: TransactionLog) -> list[Transaction]:
    """All transactions of a log in key order."""
    return [tx for key in sorted(log) for tx in log[key]]


def log_to_records(log: TransactionLog) -> dict[str, list[dict]]:
    return {key: [tx.to_record() for tx in txs] for key, txs in log.items()}

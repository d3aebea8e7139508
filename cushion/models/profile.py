"""
Financial Profile Model

One profile per user, mutated wholesale on save. Holds the configuration
the engine folds the transaction log against: salary, payday, savings
target, category budgets (default and per-month overrides), informational
account balances, and the funds (balances plus monthly pocket amounts).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cushion.models.transaction import EXPENSE_CATEGORIES


class FundKey(str, Enum):
    """
    Built-in funds.

    Funds are open-ended: any key present in fund_balances or pockets is a
    fund. These are the ones every new profile shows.
    """
    INVESTMENTS = "investments"
    TRAVEL = "travel"
    FLEXIBLE = "flexible"


def _default_budgets() -> dict[str, float]:
    return {category: 0.0 for category in EXPENSE_CATEGORIES}


class FinancialProfile(BaseModel):
    """
    A user's financial configuration.

    Missing or null numeric values load as 0, missing mappings as empty.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    monthly_salary: float = Field(default=0.0)
    payday: int = Field(
        default=1,
        ge=1,
        le=31,
        description="Day of month the salary arrives"
    )
    savings_target: float = Field(default=0.0)
    currency: str = Field(default="EUR")
    initial_base: float = Field(
        default=0.0,
        description="Balance held before the first logged transaction"
    )

    budgets: dict[str, float] = Field(
        default_factory=_default_budgets,
        description="Default monthly limit per category"
    )
    monthly_budgets: dict[str, dict[str, float]] = Field(
        default_factory=dict,
        description="YYYY-MM -> category limits overriding the defaults"
    )
    accounts: dict[str, float] = Field(
        default_factory=dict,
        description="Informational balance per bank account"
    )
    fund_balances: dict[str, float] = Field(
        default_factory=dict,
        description="Current balance per fund"
    )
    pockets: dict[str, float] = Field(
        default_factory=dict,
        description="Monthly contribution per fund"
    )
    last_distribution_month: Optional[str] = Field(
        default=None,
        pattern=r"^\d{4}-\d{2}$",
        description="YYYY-MM of the last executed distribution"
    )

    @field_validator('monthly_salary', 'savings_target', 'initial_base', mode='before')
    @classmethod
    def none_to_zero(cls, v):
        return 0.0 if v is None or v == "" else v

    @field_validator('payday', mode='before')
    @classmethod
    def default_payday(cls, v):
        return 1 if v is None or v == "" else v

    @field_validator('budgets', 'monthly_budgets', 'accounts', 'fund_balances', 'pockets', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        if v is None:
            return {}
        if isinstance(v, dict):
            # Null leaves inside a mapping count as zero
            return {k: (0.0 if value is None else value) for k, value in v.items()}
        return v

    @property
    def fund_keys(self) -> list[str]:
        """Built-in funds first, then any extra fund in configuration order."""
        keys = [fund.value for fund in FundKey]
        for key in list(self.fund_balances) + list(self.pockets):
            if key not in keys:
                keys.append(key)
        return keys

    @property
    def total_fund_balance(self) -> float:
        return sum(self.fund_balances.values())

    @property
    def total_pockets(self) -> float:
        return sum(self.pockets.values())

    def to_record(self) -> dict:
        """Serialize to the camelCase JSON record used by stores and backups."""
        return self.model_dump(mode="json", by_alias=True)

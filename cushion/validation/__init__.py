"""Transaction validation package."""

from cushion.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]

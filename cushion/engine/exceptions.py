"""Engine exceptions"""


class CushionError(Exception):
    """Base exception for the engine"""

    pass


class TransactionNotFoundError(CushionError):
    """No transaction with the given id exists in the log"""

    pass


class CheckpointValidationError(CushionError):
    """Declared balance for a checkpoint is not a number"""

    pass


class FundOperationError(CushionError):
    """Fund operation received an unusable amount or mode"""

    pass

# studyenergy/errors.py


class EngineError(Exception):
    """Base class for daily accrual engine failures."""


class ValidationError(EngineError):
    """Bad input, rejected before any storage access."""


class NotInitializedError(EngineError):
    """Today's record was read before ensure_today created it."""


class StorageError(EngineError):
    """
    The store was unavailable, a constraint rejected the write, or a
    transaction conflicted. Nothing from the failed operation was kept;
    the caller may retry.
    """

    retryable = True

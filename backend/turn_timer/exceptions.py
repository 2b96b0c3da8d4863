"""
Custom exceptions for the turn timer.

Invalid player references are not errors: commands naming an unknown id
are no-ops, so only storage failures get an exception type here.
"""


class TurnTimerException(Exception):
    """Base class for all turn timer errors"""
    pass


class PersistenceError(TurnTimerException):
    """Reading or writing the durable player store failed"""
    def __init__(self, operation, key, reason=None):
        self.operation = operation
        self.key = key
        self.reason = reason
        message = f"Could not {operation} '{key}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

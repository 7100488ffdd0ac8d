"""Exceptions raised by the escalation engine."""


class EscalationError(Exception):
    """Base class for escalation errors."""


class StoreReadError(EscalationError):
    """A collaborator store could not be read; aborts the current pass."""

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}" if message else f"{operation} failed")

"""Utility modules for the issue escalation worker."""

from .logging import get_logger, setup_logging, CorrelationContextManager
from .validation import validate_email

__all__ = [
    "get_logger",
    "setup_logging",
    "CorrelationContextManager",
    "validate_email",
]

"""Scheduled escalation of overdue issues."""

__version__ = "0.1.0"

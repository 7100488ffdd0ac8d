"""Outbound messaging connectors for the issue escalation worker."""

from .email_smtp import SMTPEmailConnector

__all__ = [
    "SMTPEmailConnector",
]

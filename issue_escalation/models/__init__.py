"""Database models for the issue escalation worker."""

from .database import Base, get_db_session
from .issue import Issue, IssueStatus
from .organization import Organization
from .escalation import EscalationRule

__all__ = [
    "Base",
    "get_db_session",
    "Issue",
    "IssueStatus",
    "Organization",
    "EscalationRule",
]

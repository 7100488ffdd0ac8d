"""Persistent stores for the issue escalation worker."""

from .sql_storage import SQLEscalationRuleStore, SQLIssueStore, SQLOrganizationStore

__all__ = [
    "SQLIssueStore",
    "SQLEscalationRuleStore",
    "SQLOrganizationStore",
]

"""Collaborator contracts consumed by the escalation pass."""

from datetime import date
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from issue_escalation.escalation.notification import EscalationNotification
    from issue_escalation.models.issue import Issue


class RuleSet(Protocol):
    """Anything exposing a facility value and raw category data."""

    @property
    def facility_value(self) -> Optional[str]: ...

    @property
    def category_data(self) -> Optional[List[Dict[str, Any]]]: ...


class IssueStore(Protocol):
    async def list_pending(self) -> Sequence["Issue"]: ...

    async def update_escalation(self, issue_id: str, level: int, due_date: date) -> bool: ...


class EscalationRuleStore(Protocol):
    async def find_rule_set(self, organization_id: str, type_key: str) -> Optional[RuleSet]: ...


class OrganizationStore(Protocol):
    async def get_group_address(self, organization_id: str) -> Optional[str]: ...


class NotificationTransport(Protocol):
    async def send(self, notification: "EscalationNotification") -> bool: ...

    def close(self) -> None: ...
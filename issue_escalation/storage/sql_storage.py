"""SQLAlchemy-backed stores used by the escalation pass."""

from datetime import date
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from issue_escalation.escalation.errors import StoreReadError
from issue_escalation.models.database import AsyncSessionLocal, get_db_session
from issue_escalation.models.escalation import EscalationRule
from issue_escalation.models.issue import Issue, IssueStatus
from issue_escalation.models.organization import Organization
from issue_escalation.utils.logging import get_logger

logger = get_logger(__name__)


class SQLIssueStore:
    """Issue reads and escalation writes."""

    def __init__(self, session_factory: async_sessionmaker = AsyncSessionLocal):
        self.session_factory = session_factory

    async def list_pending(self) -> List[Issue]:
        """Return every pending issue."""
        try:
            async with get_db_session(self.session_factory) as session:
                result = await session.execute(
                    select(Issue).where(Issue.status == IssueStatus.PENDING.value)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreReadError("list_pending", str(e)) from e

    async def update_escalation(self, issue_id: str, level: int, due_date: date) -> bool:
        """Write the new level and due date; True iff one row changed."""
        try:
            async with get_db_session(self.session_factory) as session:
                result = await session.execute(
                    update(Issue)
                    .where(Issue.id == issue_id)
                    .values(current_escalation_level=level, due_date=due_date)
                )
                updated = result.rowcount == 1
        except SQLAlchemyError as e:
            logger.error("Error updating issue escalation", issue_id=issue_id, error=str(e))
            return False

        if not updated:
            logger.warning("Issue escalation update matched no row", issue_id=issue_id)
        return updated


class SQLEscalationRuleStore:
    """Escalation rule lookups."""

    def __init__(self, session_factory: async_sessionmaker = AsyncSessionLocal):
        self.session_factory = session_factory

    async def find_rule_set(self, organization_id: str, type_key: str) -> Optional[EscalationRule]:
        """Return the first rule set for the organization and type key."""
        try:
            async with get_db_session(self.session_factory) as session:
                result = await session.execute(
                    select(EscalationRule)
                    .where(
                        EscalationRule.organization_id == organization_id,
                        EscalationRule.id == type_key
                    )
                    .limit(1)
                )
                return result.scalars().first()
        except SQLAlchemyError as e:
            raise StoreReadError("find_rule_set", str(e)) from e


class SQLOrganizationStore:
    """Organization lookups."""

    def __init__(self, session_factory: async_sessionmaker = AsyncSessionLocal):
        self.session_factory = session_factory

    async def get_group_address(self, organization_id: str) -> Optional[str]:
        try:
            async with get_db_session(self.session_factory) as session:
                result = await session.execute(
                    select(Organization.group_email).where(Organization.id == organization_id)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreReadError("get_group_address", str(e)) from e

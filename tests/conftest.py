"""Pytest configuration and fixtures."""

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from issue_escalation.escalation.engine import EscalationPassRunner
from issue_escalation.models.database import Base
from issue_escalation.models.escalation import EscalationRule
from issue_escalation.models.issue import Issue
from tests.fakes import (
    FakeIssueStore,
    FakeOrganizationStore,
    FakeRuleStore,
    FakeTransport,
    level_entry,
)

FALLBACK_ADDRESS = "fallback@example.com"
PASS_DATE = date(2024, 1, 2)


@pytest.fixture
def make_issue():
    def _make_issue(**overrides) -> Issue:
        fields = dict(
            id="issue-1",
            serial_number="ISS-001",
            organization_id="org-1",
            category="Plumbing",
            type="maintenance",
            status="pending",
            due_date=date(2024, 1, 1),
            current_escalation_level=0,
            inspection_assignee=None,
        )
        fields.update(overrides)
        return Issue(**fields)

    return _make_issue


@pytest.fixture
def make_rule():
    def _make_rule(levels=None, category="Plumbing", organization_id="org-1",
                   type_key="maintenance", facility="maintenance", category_data=None) -> EscalationRule:
        if category_data is None:
            if levels is None:
                levels = [
                    level_entry(["first@example.com", "second@example.com"]),
                    level_entry(["manager@example.com"], delay="5"),
                ]
            category_data = [
                {"category": "Electrical", "savedEntries": [{"escalations": [level_entry(["elec@example.com"])]}]},
                {"category": category, "savedEntries": [{"escalations": levels}]},
            ]
        return EscalationRule(
            id=type_key,
            organization_id=organization_id,
            facility={"value": facility} if facility is not None else None,
            category_data=category_data,
        )

    return _make_rule


@pytest.fixture
def events():
    return []


@pytest.fixture
def make_runner(events):
    def _make_runner(issues=(), rules=(), addresses=None, transport=None,
                     issue_store=None, rule_store=None, organization_store=None,
                     today=PASS_DATE, retry_overdue=False) -> EscalationPassRunner:
        return EscalationPassRunner(
            issue_store=issue_store or FakeIssueStore(issues, events=events),
            rule_store=rule_store or FakeRuleStore(rules),
            organization_store=organization_store or FakeOrganizationStore(addresses),
            transport=transport or FakeTransport(events=events),
            fallback_address=FALLBACK_ADDRESS,
            final_grace_days=3,
            retry_overdue=retry_overdue,
            today=lambda: today,
        )

    return _make_runner


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_escalation.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()

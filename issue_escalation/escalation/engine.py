"""Escalation pass runner."""

import asyncio
from dataclasses import asdict, dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Callable, List, Optional, Sequence
from zoneinfo import ZoneInfo

import structlog

from issue_escalation.config import settings
from issue_escalation.escalation.errors import StoreReadError
from issue_escalation.escalation.interfaces import (
    EscalationRuleStore,
    IssueStore,
    NotificationTransport,
    OrganizationStore,
    RuleSet,
)
from issue_escalation.escalation.invite import build_calendar_invite
from issue_escalation.escalation.notification import (
    EscalationNotification,
    build_escalation_notification,
)
from issue_escalation.escalation.recipients import RecipientResolver
from issue_escalation.escalation.rules import EscalationRuleMatcher
from issue_escalation.escalation.state import EscalationAdvance, EscalationStateMachine
from issue_escalation.models.issue import Issue
from issue_escalation.utils.logging import get_logger, log_escalation_event
from issue_escalation.utils.validation import validate_email

logger = get_logger(__name__)


class IssueOutcome(str, Enum):
    """What happened to a single issue during a pass."""

    SKIPPED = "skipped"
    NOTIFIED = "notified"
    NOTIFIED_UNSAVED = "notified_unsaved"
    FAILED = "failed"


@dataclass
class PassSummary:
    """Counters for one escalation pass."""

    examined: int = 0
    skipped: int = 0
    notified: int = 0
    failed: int = 0
    write_failures: int = 0

    def record(self, outcome: IssueOutcome) -> None:
        self.examined += 1
        if outcome == IssueOutcome.SKIPPED:
            self.skipped += 1
        elif outcome == IssueOutcome.FAILED:
            self.failed += 1
        else:
            self.notified += 1
            if outcome == IssueOutcome.NOTIFIED_UNSAVED:
                self.write_failures += 1

    def to_dict(self) -> dict:
        return asdict(self)


def _local_today() -> date:
    return datetime.now(ZoneInfo(settings.ESCALATION_TIMEZONE)).date()


class EscalationPassRunner:
    """Runs one escalation pass over all pending issues.

    Issues are processed one at a time in the order the store returns them.
    For each eligible issue the notification goes to the resolved recipients
    in order until one send succeeds; only then is the issue's level and due
    date advanced. A failure on one issue never stops the pass, except when a
    store cannot be read.
    """

    def __init__(
        self,
        issue_store: IssueStore,
        rule_store: EscalationRuleStore,
        organization_store: OrganizationStore,
        transport: NotificationTransport,
        fallback_address: Optional[str] = None,
        final_grace_days: Optional[int] = None,
        retry_overdue: Optional[bool] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.issue_store = issue_store
        self.rule_store = rule_store
        self.transport = transport
        self.recipient_resolver = RecipientResolver(organization_store, fallback_address)
        self.matcher = EscalationRuleMatcher(
            settings.ESCALATION_RETRY_OVERDUE if retry_overdue is None else retry_overdue
        )
        self.state_machine = EscalationStateMachine(issue_store, final_grace_days)
        self.today = today or _local_today
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls) -> "EscalationPassRunner":
        """Wire the SQL stores and SMTP transport from application settings."""
        from issue_escalation.connectors.email_smtp import SMTPEmailConnector
        from issue_escalation.storage.sql_storage import (
            SQLEscalationRuleStore,
            SQLIssueStore,
            SQLOrganizationStore,
        )

        return cls(
            issue_store=SQLIssueStore(),
            rule_store=SQLEscalationRuleStore(),
            organization_store=SQLOrganizationStore(),
            transport=SMTPEmailConnector(),
        )

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def close(self) -> None:
        """Release transport resources."""
        self.transport.close()

    async def run(self) -> int:
        """Run a pass and return the number of issues notified."""
        summary = await self.run_pass()
        return summary.notified

    async def run_pass(self) -> PassSummary:
        """Run a pass and return its counters."""
        async with self._lock:
            today = self.today()
            summary = PassSummary()

            issues = await self._list_pending()
            logger.info(
                "Starting escalation pass",
                today=today.isoformat(),
                candidate_count=len(issues)
            )

            for issue in issues:
                with structlog.contextvars.bound_contextvars(
                    issue_id=str(issue.id),
                    serial_number=issue.serial_number
                ):
                    try:
                        outcome = await self._process_issue(issue, today)
                    except StoreReadError:
                        raise
                    except Exception as e:
                        logger.error("Error processing issue", error=str(e), exc_info=True)
                        outcome = IssueOutcome.FAILED
                summary.record(outcome)

            logger.info(
                f"Total escalation emails sent: {summary.notified}",
                **summary.to_dict()
            )
            return summary

    async def _process_issue(self, issue: Issue, today: date) -> IssueOutcome:
        if not self.matcher.is_due(issue, today):
            return IssueOutcome.SKIPPED

        rule_set = await self._find_rule_set(issue)
        match = self.matcher.match(issue, rule_set, today)
        if match is None:
            logger.debug("Issue not eligible for escalation")
            return IssueOutcome.SKIPPED

        advance = self.state_machine.advance(issue, match.levels, today)
        recipients = await self.recipient_resolver.resolve(
            match.recipients,
            issue.organization_id
        )
        notification = build_escalation_notification(
            issue,
            advance,
            match.is_final,
            build_calendar_invite(str(issue.id), issue.serial_number, advance.due_date),
            cc=self._cc_recipients(issue),
        )

        for recipient in recipients:
            if not await self._send(issue, replace(notification, to=recipient), advance):
                continue

            log_escalation_event(logger, str(issue.id), advance.level, recipient, "sent")
            if await self._persist(issue, advance):
                return IssueOutcome.NOTIFIED
            return IssueOutcome.NOTIFIED_UNSAVED

        logger.error(
            "All escalation recipients failed, issue left unchanged",
            recipients=recipients,
            level=issue.escalation_level
        )
        return IssueOutcome.FAILED

    async def _list_pending(self) -> Sequence[Issue]:
        try:
            return list(await self.issue_store.list_pending() or [])
        except StoreReadError:
            raise
        except Exception as e:
            raise StoreReadError("list_pending", str(e)) from e

    async def _find_rule_set(self, issue: Issue) -> Optional[RuleSet]:
        try:
            return await self.rule_store.find_rule_set(issue.organization_id, issue.type)
        except StoreReadError:
            raise
        except Exception as e:
            raise StoreReadError("find_rule_set", str(e)) from e

    async def _send(
        self,
        issue: Issue,
        notification: EscalationNotification,
        advance: EscalationAdvance
    ) -> bool:
        try:
            sent = await self.transport.send(notification)
        except Exception as e:
            logger.warning(
                "Error sending escalation notification",
                recipient=notification.to,
                error=str(e)
            )
            sent = False

        if not sent:
            log_escalation_event(logger, str(issue.id), advance.level, notification.to, "failed")
        return bool(sent)

    async def _persist(self, issue: Issue, advance: EscalationAdvance) -> bool:
        try:
            written = await self.state_machine.persist(issue, advance)
            error = None
        except Exception as e:
            written = False
            error = str(e)

        if not written:
            # The notification already went out; the next pass may send it again.
            logger.error(
                "Escalation state write failed after notification was sent",
                event_type="escalation_state_write_failed",
                duplicate_notification_risk=True,
                level=advance.level,
                due_date=advance.due_date.isoformat(),
                error=error
            )
        return bool(written)

    @staticmethod
    def _cc_recipients(issue: Issue) -> List[str]:
        name = issue.assignee_name
        if not name:
            return []
        if not validate_email(name):
            logger.warning("Assignee name used as CC is not an email address", cc=name)
        return [name]

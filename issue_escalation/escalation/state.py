"""Escalation level advancement."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence

from issue_escalation.config import settings
from issue_escalation.escalation.interfaces import IssueStore
from issue_escalation.escalation.rules import EscalationLevel
from issue_escalation.models.issue import Issue

DEFAULT_FINAL_GRACE_DAYS = 3


@dataclass(frozen=True)
class EscalationAdvance:
    """The level and due date an issue moves to after a notification."""

    level: int
    due_date: date


def next_state(
    current_level: int,
    levels: Sequence[EscalationLevel],
    today: date,
    final_grace_days: int = DEFAULT_FINAL_GRACE_DAYS
) -> EscalationAdvance:
    """Compute the next level and due date for an issue.

    After the final level the issue gets a fixed grace period; otherwise the
    next level's delay sets the new due date.
    """
    next_level = current_level + 1

    if current_level == len(levels) - 1:
        return EscalationAdvance(next_level, today + timedelta(days=final_grace_days))

    delay = levels[next_level].delay_days if 0 <= next_level < len(levels) else 0
    return EscalationAdvance(next_level, today + timedelta(days=delay))


class EscalationStateMachine:
    """Computes and persists per-issue escalation advances."""

    def __init__(self, issue_store: IssueStore, final_grace_days: Optional[int] = None):
        self.issue_store = issue_store
        if final_grace_days is None:
            final_grace_days = settings.ESCALATION_FINAL_GRACE_DAYS
        self.final_grace_days = final_grace_days

    def advance(
        self,
        issue: Issue,
        levels: Sequence[EscalationLevel],
        today: date
    ) -> EscalationAdvance:
        return next_state(issue.escalation_level, levels, today, self.final_grace_days)

    async def persist(self, issue: Issue, advance: EscalationAdvance) -> bool:
        """Write the advance; call only after a notification was delivered."""
        return await self.issue_store.update_escalation(
            issue.id,
            advance.level,
            advance.due_date
        )

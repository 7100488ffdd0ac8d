"""Escalation notification content."""

from dataclasses import dataclass, field
from html import escape
from typing import List, Optional

from issue_escalation.escalation.rules import as_date
from issue_escalation.escalation.state import EscalationAdvance
from issue_escalation.models.issue import Issue


@dataclass
class EscalationNotification:
    """An escalation email for a single recipient. Never persisted."""

    to: str
    subject: str
    html_body: str
    calendar_attachment: str
    cc: List[str] = field(default_factory=list)


def escalation_subject(serial_number: str) -> str:
    return f"🚨 Escalation Alert: Issue {serial_number}"


def render_escalation_body(issue: Issue, advance: EscalationAdvance, is_final: bool) -> str:
    """Render the HTML body of an escalation email."""
    due_date = as_date(issue.due_date)
    new_due_date = escape(advance.due_date.isoformat())

    if is_final:
        action_note = (
            "<p><strong>This is the final escalation level.</strong> "
            f"Please resolve the issue by <strong>{new_due_date}</strong>.</p>"
        )
    else:
        action_note = (
            f"<p>Please take action before <strong>{new_due_date}</strong> "
            "to avoid further escalation.</p>"
        )

    return f"""
<div style="font-family: Arial, sans-serif;">
  <h2>Escalation Alert</h2>
  <p><strong>Issue:</strong> {escape(str(issue.serial_number))}</p>
  <p><strong>Category:</strong> {escape(str(issue.category or ''))}</p>
  <p><strong>Due Date:</strong> {escape(due_date.isoformat() if due_date else '')}</p>
  <p><strong>Escalation Level:</strong> {advance.level}</p>
  <p><strong>New Due Date:</strong> {new_due_date}</p>
  {action_note}
</div>
""".strip()


def build_escalation_notification(
    issue: Issue,
    advance: EscalationAdvance,
    is_final: bool,
    calendar_attachment: str,
    to: str = "",
    cc: Optional[List[str]] = None
) -> EscalationNotification:
    """Build the notification sent for an issue's escalation."""
    return EscalationNotification(
        to=to,
        subject=escalation_subject(issue.serial_number),
        html_body=render_escalation_body(issue, advance, is_final),
        calendar_attachment=calendar_attachment,
        cc=list(cc or []),
    )

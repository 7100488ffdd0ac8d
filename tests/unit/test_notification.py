"""Unit tests for escalation notification content."""

from datetime import date

from issue_escalation.escalation.notification import build_escalation_notification
from issue_escalation.escalation.state import EscalationAdvance


class TestEscalationNotification:

    def test_notification_fields(self, make_issue):
        advance = EscalationAdvance(level=1, due_date=date(2024, 1, 7))

        notification = build_escalation_notification(
            make_issue(),
            advance,
            is_final=False,
            calendar_attachment="BEGIN:VCALENDAR",
            to="first@example.com",
            cc=["inspector@example.com"]
        )

        assert notification.to == "first@example.com"
        assert notification.cc == ["inspector@example.com"]
        assert notification.subject == "🚨 Escalation Alert: Issue ISS-001"
        assert notification.calendar_attachment == "BEGIN:VCALENDAR"
        assert "<strong>Issue:</strong> ISS-001" in notification.html_body
        assert "<strong>Category:</strong> Plumbing" in notification.html_body
        assert "<strong>Due Date:</strong> 2024-01-01" in notification.html_body
        assert "<strong>Escalation Level:</strong> 1" in notification.html_body
        assert "<strong>New Due Date:</strong> 2024-01-07" in notification.html_body
        assert "to avoid further escalation" in notification.html_body

    def test_final_level_note(self, make_issue):
        advance = EscalationAdvance(level=2, due_date=date(2024, 1, 5))

        notification = build_escalation_notification(make_issue(), advance, True, "")

        assert "This is the final escalation level." in notification.html_body
        assert "Please resolve the issue by <strong>2024-01-05</strong>" in notification.html_body
        assert notification.cc == []

    def test_values_are_html_escaped(self, make_issue):
        issue = make_issue(category="<script>alert(1)</script>")

        notification = build_escalation_notification(
            issue, EscalationAdvance(1, date(2024, 1, 7)), False, ""
        )

        assert "<script>" not in notification.html_body
        assert "&lt;script&gt;" in notification.html_body

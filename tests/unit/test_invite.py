"""Unit tests for calendar invites."""

from datetime import date, datetime, timedelta, timezone

from issue_escalation.config import settings
from issue_escalation.escalation.invite import build_calendar_invite

STAMP = datetime(2024, 1, 2, 8, 30, 5, tzinfo=timezone.utc)


class TestCalendarInvite:
    """Test the VCALENDAR payload."""

    def test_exact_format(self):
        invite = build_calendar_invite(
            "issue-1",
            "ISS-001",
            date(2024, 1, 7),
            stamp=STAMP,
            prodid="-//YourOrg//Issue Escalation//EN",
            uid_domain="yourdomain.com"
        )

        assert invite == (
            "BEGIN:VCALENDAR\n"
            "VERSION:2.0\n"
            "PRODID:-//YourOrg//Issue Escalation//EN\n"
            "CALSCALE:GREGORIAN\n"
            "BEGIN:VEVENT\n"
            "DTSTAMP:20240102T083005Z\n"
            "DTSTART;VALUE=DATE:20240107\n"
            "DTEND;VALUE=DATE:20240108\n"
            "SUMMARY:Issue Escalation - ISS-001\n"
            "DESCRIPTION:Escalation due date for issue ISS-001.\\n"
            "Please take necessary action before this date.\n"
            "STATUS:CONFIRMED\n"
            "SEQUENCE:0\n"
            "UID:issue-1@yourdomain.com\n"
            "END:VEVENT\n"
            "END:VCALENDAR"
        )

    def test_event_ends_next_day_across_year_end(self):
        invite = build_calendar_invite("issue-1", "ISS-001", date(2024, 12, 31), stamp=STAMP)

        assert "DTSTART;VALUE=DATE:20241231" in invite
        assert "DTEND;VALUE=DATE:20250101" in invite

    def test_stamp_is_converted_to_utc(self):
        local = datetime(2024, 1, 2, 10, 0, 0, tzinfo=timezone(timedelta(hours=2)))

        invite = build_calendar_invite("issue-1", "ISS-001", date(2024, 1, 7), stamp=local)

        assert "DTSTAMP:20240102T080000Z" in invite

    def test_defaults_come_from_settings(self):
        invite = build_calendar_invite("abc", "ISS-9", date(2024, 1, 7), stamp=STAMP)

        assert f"PRODID:{settings.CALENDAR_PRODID}" in invite
        assert f"UID:abc@{settings.CALENDAR_UID_DOMAIN}" in invite

    def test_default_stamp_is_now(self):
        invite = build_calendar_invite("abc", "ISS-9", date(2024, 1, 7))

        stamp_line = next(line for line in invite.split("\n") if line.startswith("DTSTAMP:"))
        assert len(stamp_line) == len("DTSTAMP:20240102T083005Z")
        assert stamp_line.endswith("Z")

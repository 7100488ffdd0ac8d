"""Calendar invite attached to escalation notifications."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from issue_escalation.config import settings


def build_calendar_invite(
    issue_id: str,
    serial_number: str,
    target_date: date,
    stamp: Optional[datetime] = None,
    prodid: Optional[str] = None,
    uid_domain: Optional[str] = None,
) -> str:
    """Build an all-day VEVENT on ``target_date`` for an escalated issue."""
    stamp = stamp or datetime.now(timezone.utc)
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone(timezone.utc)

    start = target_date.strftime("%Y%m%d")
    end = (target_date + timedelta(days=1)).strftime("%Y%m%d")

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{prodid or settings.CALENDAR_PRODID}",
        "CALSCALE:GREGORIAN",
        "BEGIN:VEVENT",
        f"DTSTAMP:{stamp.strftime('%Y%m%dT%H%M%S')}Z",
        f"DTSTART;VALUE=DATE:{start}",
        f"DTEND;VALUE=DATE:{end}",
        f"SUMMARY:Issue Escalation - {serial_number}",
        f"DESCRIPTION:Escalation due date for issue {serial_number}.\\n"
        "Please take necessary action before this date.",
        "STATUS:CONFIRMED",
        "SEQUENCE:0",
        f"UID:{issue_id}@{uid_domain or settings.CALENDAR_UID_DOMAIN}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\n".join(lines)

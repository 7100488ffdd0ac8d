"""Issue model for tracked items subject to escalation."""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Date, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class IssueStatus(str, Enum):
    """Issue status enumeration."""

    PENDING = "pending"
    RESOLVED = "resolved"
    CLOSED = "closed"


class Issue(Base):
    """Issue model.

    Owned by the surrounding product; the escalation pass only reads the
    status, category, type, due date and level, and writes the level and
    due date.
    """

    __tablename__ = "issues"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    serial_number: Mapped[str] = mapped_column(String(64), index=True)
    organization_id: Mapped[str] = mapped_column(String(64), index=True)

    category: Mapped[Optional[str]] = mapped_column(String(255))
    type: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    status: Mapped[str] = mapped_column(
        String(32),
        default=IssueStatus.PENDING.value,
        index=True
    )

    due_date: Mapped[Optional[date]] = mapped_column(Date, index=True)
    current_escalation_level: Mapped[Optional[int]] = mapped_column(Integer, default=0)

    # {"name": ...}; the name is used verbatim as the CC address
    inspection_assignee: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<Issue(id={self.id}, serial='{self.serial_number}', level={self.escalation_level})>"

    @property
    def escalation_level(self) -> int:
        """Current escalation level, treating an unset value as level 0."""
        return self.current_escalation_level or 0

    @property
    def assignee_name(self) -> Optional[str]:
        if not isinstance(self.inspection_assignee, dict):
            return None
        return self.inspection_assignee.get("name") or None

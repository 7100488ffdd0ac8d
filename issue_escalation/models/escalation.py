"""Escalation rule set model."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class EscalationRule(Base):
    """Escalation rules configured by an organization for one issue type.

    ``category_data`` holds one entry per category::

        [{"category": "Plumbing",
          "savedEntries": [{"escalations": [{"user": ["a@x.com"], "delay": "2"}]}]}]
    """

    __tablename__ = "escalation_rules"

    # The type key; looked up with the issue's ``type``
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    facility: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    category_data: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<EscalationRule(id={self.id}, organization_id={self.organization_id})>"

    @property
    def facility_value(self) -> Optional[str]:
        if not isinstance(self.facility, dict):
            return None
        return self.facility.get("value")

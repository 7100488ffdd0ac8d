"""Escalation rule matching.

Decides whether an issue is due for escalation today and, if so, which
configured escalation level it currently sits at. Rule sets are stored as
loosely structured JSON, so every lookup here treats missing or inconsistent
data as "not applicable" rather than as an error.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from issue_escalation.escalation.interfaces import RuleSet
from issue_escalation.models.issue import Issue
from issue_escalation.utils.logging import get_logger

logger = get_logger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_delay(value: Any) -> int:
    """Parse a level delay in days; anything unparseable counts as 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return 0


def as_date(value: Any) -> Optional[date]:
    """Normalize a stored due date to a calendar date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class EscalationLevel(BaseModel):
    """One step of an escalation sequence."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    recipients: List[str] = Field(default_factory=list, alias="user")
    delay: Any = None

    @field_validator("recipients", mode="before")
    @classmethod
    def coerce_recipients(cls, v: Any) -> List[str]:
        if not v:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @property
    def delay_days(self) -> int:
        return parse_delay(self.delay)


class SavedEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    escalations: List[EscalationLevel] = Field(default_factory=list)

    @field_validator("escalations", mode="before")
    @classmethod
    def coerce_escalations(cls, v: Any) -> List[Any]:
        return v or []


class CategoryConfig(BaseModel):
    """Escalation configuration for a single issue category."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    category: Optional[str] = None
    saved_entries: List[SavedEntry] = Field(default_factory=list, alias="savedEntries")

    @field_validator("saved_entries", mode="before")
    @classmethod
    def coerce_saved_entries(cls, v: Any) -> List[Any]:
        return v or []

    @property
    def levels(self) -> List[EscalationLevel]:
        if not self.saved_entries:
            return []
        return self.saved_entries[0].escalations


@dataclass
class EscalationMatch:
    """Result of matching an issue against its organization's rules."""

    levels: List[EscalationLevel]
    level: EscalationLevel
    level_index: int
    is_final: bool

    @property
    def recipients(self) -> List[str]:
        return list(self.level.recipients)


class EscalationRuleMatcher:
    """Locates the applicable escalation level for an issue."""

    def __init__(self, retry_overdue: bool = False):
        self.retry_overdue = retry_overdue

    def is_due(self, issue: Issue, today: date) -> bool:
        """Check whether today falls in the issue's eligibility window.

        The window is the single day after the due date. With
        ``retry_overdue`` every later day is eligible as well.
        """
        due_date = as_date(issue.due_date)
        if due_date is None:
            return False

        send_date = due_date + timedelta(days=1)
        if self.retry_overdue:
            return today >= send_date
        return today == send_date

    def find_levels(self, issue: Issue, rule_set: Optional[RuleSet]) -> List[EscalationLevel]:
        """Return the escalation sequence configured for the issue's category."""
        if rule_set is None:
            return []

        if rule_set.facility_value is None or rule_set.facility_value != issue.type:
            logger.debug(
                "Rule set facility does not match issue type",
                facility=rule_set.facility_value,
                issue_type=issue.type
            )
            return []

        raw_config = self._find_category(rule_set.category_data, issue.category)
        if raw_config is None:
            return []

        try:
            config = CategoryConfig.model_validate(raw_config)
        except ValidationError as e:
            logger.warning(
                "Malformed escalation category data",
                category=issue.category,
                error=str(e)
            )
            return []

        return config.levels

    def match(
        self,
        issue: Issue,
        rule_set: Optional[RuleSet],
        today: date
    ) -> Optional[EscalationMatch]:
        """Match an issue to its current escalation level, or return None."""
        if not self.is_due(issue, today):
            return None

        levels = self.find_levels(issue, rule_set)
        if not levels:
            return None

        level_index = issue.escalation_level
        if level_index < 0 or level_index >= len(levels):
            logger.debug(
                "Escalation levels exhausted",
                level=level_index,
                level_count=len(levels)
            )
            return None

        return EscalationMatch(
            levels=levels,
            level=levels[level_index],
            level_index=level_index,
            is_final=level_index == len(levels) - 1,
        )

    @staticmethod
    def _find_category(
        category_data: Optional[List[Dict[str, Any]]],
        category: Optional[str]
    ) -> Optional[Dict[str, Any]]:
        if category is None or not isinstance(category_data, list):
            return None
        for entry in category_data:
            if isinstance(entry, dict) and entry.get("category") == category:
                return entry
        return None

"""Escalation engine components for the issue escalation worker."""

from .engine import EscalationPassRunner, PassSummary
from .errors import EscalationError, StoreReadError
from .invite import build_calendar_invite
from .recipients import RecipientResolver
from .rules import EscalationLevel, EscalationMatch, EscalationRuleMatcher
from .scheduler import EscalationScheduler
from .state import EscalationAdvance, EscalationStateMachine, next_state

__all__ = [
    "EscalationPassRunner",
    "PassSummary",
    "EscalationError",
    "StoreReadError",
    "build_calendar_invite",
    "RecipientResolver",
    "EscalationLevel",
    "EscalationMatch",
    "EscalationRuleMatcher",
    "EscalationScheduler",
    "EscalationAdvance",
    "EscalationStateMachine",
    "next_state",
]

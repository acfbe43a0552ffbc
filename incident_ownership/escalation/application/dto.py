"""
Escalation Application DTOs
===========================

Result models returned by the escalation engine.
"""

from datetime import datetime
from typing import Dict

from pydantic import BaseModel, Field

from incident_ownership.config import (
    EscalationLevel,
    EscalationStatus,
    EscalationTrigger,
    SolutionType,
)


def _zeroed(enum_type) -> Dict:
    return {member: 0 for member in enum_type}


class EscalationStatistics(BaseModel):
    """Escalation counts and resolution time over a creation-time window."""
    start: datetime
    end: datetime
    total: int = 0
    by_level: Dict[EscalationLevel, int] = Field(default_factory=lambda: _zeroed(EscalationLevel))
    by_trigger: Dict[EscalationTrigger, int] = Field(
        default_factory=lambda: _zeroed(EscalationTrigger)
    )
    by_status: Dict[EscalationStatus, int] = Field(
        default_factory=lambda: _zeroed(EscalationStatus)
    )
    by_solution_type: Dict[SolutionType, int] = Field(
        default_factory=lambda: _zeroed(SolutionType),
        description="Resolved events only"
    )
    average_resolution_time: float = Field(
        0.0, description="Minutes from creation to resolution, resolved events only"
    )

"""
Assignment Value Objects
========================

Immutable value objects and stateless calculations for the assignment domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Mapping, Optional, Type, TypeVar

from incident_ownership.assignment.domain.entities import Incident, SLATarget
from incident_ownership.config import Priority
from incident_ownership.core import ConfigurationException

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class EscalationRule:
    """Timeouts in minutes after which an assignment needs escalating."""

    priority: Priority
    no_response_timeout: int
    no_progress_timeout: int
    unresolved_timeout: int


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the four assignment-score factors; they must sum to 1."""

    expertise: float = 0.4
    availability: float = 0.3
    current_load: float = 0.2
    response_history: float = 0.1

    def __post_init__(self):
        total = self.expertise + self.availability + self.current_load + self.response_history
        if not math.isclose(total, 1.0):
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")


DEFAULT_SLA_TARGETS: Mapping[Priority, SLATarget] = {
    Priority.CRITICAL: SLATarget(response_time=5, resolution_time=60),
    Priority.HIGH: SLATarget(response_time=15, resolution_time=240),
    Priority.MEDIUM: SLATarget(response_time=60, resolution_time=480),
    Priority.LOW: SLATarget(response_time=240, resolution_time=1440),
}

DEFAULT_ESCALATION_RULES: Mapping[Priority, EscalationRule] = {
    Priority.CRITICAL: EscalationRule(Priority.CRITICAL, 5, 15, 60),
    Priority.HIGH: EscalationRule(Priority.HIGH, 15, 30, 240),
    Priority.MEDIUM: EscalationRule(Priority.MEDIUM, 60, 120, 480),
    Priority.LOW: EscalationRule(Priority.LOW, 240, 480, 1440),
}


def ensure_exhaustive(table: Mapping, enum_type: Type[E], name: str) -> None:
    """
    Fail fast when an enum-keyed table misses a member.

    Raises:
        ConfigurationException: listing the missing keys
    """
    missing = [member.value for member in enum_type if member not in table]
    if missing:
        raise ConfigurationException(
            f"{name} is missing entries for {missing}",
            {"table": name, "missing": missing}
        )


class OwnershipCalculator:
    """
    Pure functions for assignment scoring and SLA timing.

    Stateless utility class - all calculation logic in one place.
    """

    NEUTRAL_EXPERTISE = 0.5

    @staticmethod
    def minutes_between(start: datetime, end: datetime) -> int:
        """Whole minutes elapsed from ``start`` to ``end`` (floored)."""
        return math.floor((end - start).total_seconds() / 60)

    @staticmethod
    def expertise_match(specialties: Iterable[str], incident: Incident) -> float:
        """
        Fraction of specialties mentioned anywhere in the incident's diagnostics.

        Returns the neutral 0.5 when the incident carries no error message
        and no affected files, or when the member lists no specialties.
        """
        if not incident.has_diagnostics:
            return OwnershipCalculator.NEUTRAL_EXPERTISE

        specialties = list(specialties)
        if not specialties:
            return OwnershipCalculator.NEUTRAL_EXPERTISE

        text = incident.diagnostic_text
        matches = sum(1 for specialty in specialties if specialty.lower() in text)
        return matches / len(specialties)

    @staticmethod
    def inverted_load(active_assignments: int, max_active: int) -> float:
        """1.0 for an idle member down to 0.0 at ``max_active`` or more."""
        return 1 - min(active_assignments / max_active, 1)

    @staticmethod
    def timeliness_score(resolution_minutes: Optional[int], target_minutes: int) -> float:
        """
        Step score of resolution time against target.

        <=0.5x -> 1.0, <=1x -> 0.8, <=1.5x -> 0.5, otherwise 0.2;
        0.0 when the assignment is not resolved.
        """
        if resolution_minutes is None:
            return 0.0
        if resolution_minutes <= target_minutes * 0.5:
            return 1.0
        if resolution_minutes <= target_minutes:
            return 0.8
        if resolution_minutes <= target_minutes * 1.5:
            return 0.5
        return 0.2

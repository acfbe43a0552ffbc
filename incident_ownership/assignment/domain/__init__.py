"""
Assignment Domain Layer
=======================

Domain layer for the assignment module.

Contains:
- Entities: TeamMember, TeamStructure, Incident, Assignment, WorkloadMetrics
- Value Objects: SLATarget, EscalationRule, ScoringWeights
- Domain Services: Stateless business logic (OwnershipCalculator)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from incident_ownership.assignment.domain.entities import (
    TeamMember,
    TeamStructure,
    Incident,
    SLATarget,
    Assignment,
    WorkloadMetrics,
    ScoreFactors,
    AssignmentScore,
)
from incident_ownership.assignment.domain.value_objects import (
    EscalationRule,
    ScoringWeights,
    OwnershipCalculator,
    DEFAULT_SLA_TARGETS,
    DEFAULT_ESCALATION_RULES,
    ensure_exhaustive,
)

__all__ = [
    # Entities
    "TeamMember",
    "TeamStructure",
    "Incident",
    "SLATarget",
    "Assignment",
    "WorkloadMetrics",
    "ScoreFactors",
    "AssignmentScore",
    # Value Objects & Services
    "EscalationRule",
    "ScoringWeights",
    "OwnershipCalculator",
    "DEFAULT_SLA_TARGETS",
    "DEFAULT_ESCALATION_RULES",
    "ensure_exhaustive",
]

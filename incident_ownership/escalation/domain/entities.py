"""
Escalation Domain Entities
==========================

Pure Python domain entities for escalation handling.

An incident may accumulate many EscalationEvents; raising an escalation
further creates a new event rather than changing an existing one.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Tuple

from incident_ownership.assignment.domain import TeamMember
from incident_ownership.config import (
    AgentStatus,
    DeploymentEnvironment,
    EscalationLevel,
    EscalationStatus,
    EscalationTrigger,
    ImpactLevel,
    Priority,
    SolutionType,
    SystemType,
)
from incident_ownership.core import ValidationException


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _tuple(value) -> Optional[tuple]:
    return tuple(value) if value is not None else None


# ========== Context ==========

@dataclass(frozen=True)
class ErrorDetails:
    message: str
    affected_components: Tuple[str, ...] = ()
    impact_level: ImpactLevel = ImpactLevel.MEDIUM
    stack_trace: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "affected_components", tuple(self.affected_components))


@dataclass(frozen=True)
class AutoFixAttempt:
    """One automated remediation attempt made before escalating."""

    attempt_number: int
    strategy: str
    started_at: datetime
    completed_at: datetime
    success: bool
    error_message: Optional[str] = None
    changes: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, "changes", _tuple(self.changes))


@dataclass(frozen=True)
class BusinessImpact:
    affected_users: int
    downtime_minutes: int
    estimated_cost: Optional[float] = None


@dataclass(frozen=True)
class EscalationContext:
    """
    Immutable snapshot of what was known when an escalation was raised.
    """

    system_type: SystemType
    environment: DeploymentEnvironment
    error_details: ErrorDetails
    auto_fix_attempts: Tuple[AutoFixAttempt, ...] = ()
    related_incidents: Optional[Tuple[str, ...]] = None
    similar_issues: Optional[Tuple[str, ...]] = None
    business_impact: Optional[BusinessImpact] = None

    def __post_init__(self):
        object.__setattr__(self, "auto_fix_attempts", tuple(self.auto_fix_attempts))
        object.__setattr__(self, "related_incidents", _tuple(self.related_incidents))
        object.__setattr__(self, "similar_issues", _tuple(self.similar_issues))

    def with_message(self, message: str) -> "EscalationContext":
        """Copy of this context with a different error message."""
        return replace(self, error_details=replace(self.error_details, message=message))

    def to_dict(self) -> dict:
        impact = self.business_impact
        return {
            "system_type": self.system_type.value,
            "environment": self.environment.value,
            "error_details": {
                "message": self.error_details.message,
                "stack_trace": self.error_details.stack_trace,
                "affected_components": list(self.error_details.affected_components),
                "impact_level": self.error_details.impact_level.value,
            },
            "auto_fix_attempts": [
                {
                    "attempt_number": a.attempt_number,
                    "strategy": a.strategy,
                    "started_at": _iso(a.started_at),
                    "completed_at": _iso(a.completed_at),
                    "success": a.success,
                    "error_message": a.error_message,
                    "changes": list(a.changes) if a.changes is not None else None,
                }
                for a in self.auto_fix_attempts
            ],
            "related_incidents": list(self.related_incidents) if self.related_incidents else None,
            "similar_issues": list(self.similar_issues) if self.similar_issues else None,
            "business_impact": {
                "affected_users": impact.affected_users,
                "downtime_minutes": impact.downtime_minutes,
                "estimated_cost": impact.estimated_cost,
            } if impact else None,
        }


# ========== Resolution ==========

@dataclass(frozen=True)
class ResolutionChanges:
    files: Tuple[str, ...]
    description: str
    commit_hash: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "files", tuple(self.files))


@dataclass(frozen=True)
class KnowledgeBaseArticle:
    id: str
    title: str
    url: str


@dataclass(frozen=True)
class EscalationResolution:
    """How an escalation was closed out and by whom."""

    solution_type: SolutionType
    description: str
    implemented_by: TeamMember
    implemented_at: datetime
    changes: ResolutionChanges
    verified_by: Optional[TeamMember] = None
    verified_at: Optional[datetime] = None
    preventive_measures: Optional[Tuple[str, ...]] = None
    knowledge_base_article: Optional[KnowledgeBaseArticle] = None

    def __post_init__(self):
        object.__setattr__(self, "preventive_measures", _tuple(self.preventive_measures))

    def to_dict(self) -> dict:
        article = self.knowledge_base_article
        return {
            "solution_type": self.solution_type.value,
            "description": self.description,
            "implemented_by": self.implemented_by.to_dict(),
            "implemented_at": _iso(self.implemented_at),
            "verified_by": self.verified_by.to_dict() if self.verified_by else None,
            "verified_at": _iso(self.verified_at),
            "changes": {
                "files": list(self.changes.files),
                "description": self.changes.description,
                "commit_hash": self.changes.commit_hash,
            },
            "preventive_measures": (
                list(self.preventive_measures) if self.preventive_measures else None
            ),
            "knowledge_base_article": {
                "id": article.id,
                "title": article.title,
                "url": article.url,
            } if article else None,
        }


# ========== Customer Service ==========

@dataclass
class AgentAvailability:
    """Live case counter of a customer-service agent."""

    status: AgentStatus = AgentStatus.AVAILABLE
    max_concurrent_cases: int = 5
    current_cases: int = 0

    def __post_init__(self):
        if self.max_concurrent_cases < 1:
            raise ValidationException(
                "max_concurrent_cases must be at least 1",
                {"max_concurrent_cases": self.max_concurrent_cases}
            )

    @property
    def load_ratio(self) -> float:
        return self.current_cases / self.max_concurrent_cases

    @property
    def has_capacity(self) -> bool:
        return (
            self.status == AgentStatus.AVAILABLE
            and self.current_cases < self.max_concurrent_cases
        )

    def take_case(self) -> None:
        self.current_cases += 1

    def release_case(self) -> None:
        self.current_cases = max(0, self.current_cases - 1)


@dataclass(frozen=True)
class AgentExpertise:
    technical: bool = True
    languages: Tuple[str, ...] = ()
    specializations: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "languages", tuple(self.languages))
        object.__setattr__(self, "specializations", tuple(self.specializations))


@dataclass(frozen=True)
class AgentPerformance:
    average_response_time: float = 0.0  # minutes
    resolution_rate: float = 0.0  # percent
    customer_satisfaction: float = 0.0  # 1-5


@dataclass(frozen=True)
class CustomerServiceAgent(TeamMember):
    """
    Team member who takes L5 escalations.

    ``availability.current_cases`` is the only mutable part; it changes
    as escalations are assigned and released.
    """

    role: str = "CUSTOMER_SERVICE"
    availability: AgentAvailability = field(default_factory=AgentAvailability)
    expertise: AgentExpertise = field(default_factory=AgentExpertise)
    performance: AgentPerformance = field(default_factory=AgentPerformance)

    def to_member(self) -> TeamMember:
        """Plain TeamMember snapshot, safe to hand to other components."""
        return TeamMember(
            id=self.id,
            name=self.name,
            email=self.email,
            specialties=self.specialties,
            timezone=self.timezone,
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "role": self.role,
            "availability": {
                "status": self.availability.status.value,
                "max_concurrent_cases": self.availability.max_concurrent_cases,
                "current_cases": self.availability.current_cases,
            },
            "expertise": {
                "technical": self.expertise.technical,
                "languages": list(self.expertise.languages),
                "specializations": list(self.expertise.specializations),
            },
            "performance": {
                "average_response_time": self.performance.average_response_time,
                "resolution_rate": self.performance.resolution_rate,
                "customer_satisfaction": self.performance.customer_satisfaction,
            },
        })
        return data


# ========== Escalation Event ==========

@dataclass
class EscalationEvent:
    """A record raising an incident to a responder tier."""

    id: str
    incident_id: str
    trigger: EscalationTrigger
    level: EscalationLevel
    status: EscalationStatus
    priority: Priority
    description: str
    context: EscalationContext
    created_at: datetime
    updated_at: datetime

    assignment_id: Optional[str] = None
    assigned_to: Optional[TeamMember] = None
    resolved_at: Optional[datetime] = None
    resolution: Optional[EscalationResolution] = None

    @property
    def resolution_minutes(self) -> Optional[float]:
        if self.resolved_at is None:
            return None
        return (self.resolved_at - self.created_at).total_seconds() / 60

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "incident_id": self.incident_id,
            "assignment_id": self.assignment_id,
            "trigger": self.trigger.value,
            "level": self.level.value,
            "status": self.status.value,
            "priority": self.priority.value,
            "description": self.description,
            "context": self.context.to_dict(),
            "assigned_to": self.assigned_to.to_dict() if self.assigned_to else None,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "resolved_at": _iso(self.resolved_at),
            "resolution": self.resolution.to_dict() if self.resolution else None,
        }

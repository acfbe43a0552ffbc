"""
Assignment Domain Entities
==========================

Pure Python domain entities for responsibility assignment.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple

from incident_ownership.config import AssignmentStatus, Priority, ProblemType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class TeamMember:
    """
    A responder that can own incidents.

    Immutable reference data owned by the responsibility matrix.
    """

    id: str
    name: str
    email: str
    specialties: Tuple[str, ...] = ()
    timezone: str = "UTC"

    def __post_init__(self):
        object.__setattr__(self, "specialties", tuple(self.specialties))

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "specialties": list(self.specialties),
            "timezone": self.timezone,
        }


@dataclass(frozen=True)
class TeamStructure:
    """A functional team and its members."""

    name: str
    members: Tuple[TeamMember, ...]
    specialties: Tuple[str, ...] = ()
    timezone: str = "UTC"

    def __post_init__(self):
        object.__setattr__(self, "members", tuple(self.members))
        object.__setattr__(self, "specialties", tuple(self.specialties))


@dataclass(frozen=True)
class Incident:
    """
    A reported operational problem requiring ownership.

    Created and validated by the caller; immutable once created.
    """

    id: str
    type: ProblemType
    priority: Priority
    description: str
    affected_files: Optional[Tuple[str, ...]] = None
    error_message: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if self.affected_files is not None:
            object.__setattr__(self, "affected_files", tuple(self.affected_files))

    @property
    def has_diagnostics(self) -> bool:
        """Whether the incident carries an error message or affected files."""
        return bool(self.error_message) or self.affected_files is not None

    @property
    def diagnostic_text(self) -> str:
        """Lower-cased description, error message and files joined for keyword matching."""
        parts = [self.description, self.error_message or "", *(self.affected_files or ())]
        return " ".join(parts).lower()


@dataclass(frozen=True)
class SLATarget:
    """Response and resolution budgets in minutes."""

    response_time: int
    resolution_time: int

    def to_dict(self) -> dict:
        return {
            "response_time": self.response_time,
            "resolution_time": self.resolution_time,
        }


@dataclass
class Assignment:
    """
    Binds an incident to a primary (and optional secondary) owner.

    Status timestamps are set once: the first transition into
    ACKNOWLEDGED, IN_PROGRESS or RESOLVED stamps the time and later
    re-entries leave it untouched.
    """

    id: str
    incident_id: str
    primary_owner: TeamMember
    status: AssignmentStatus
    assigned_at: datetime
    sla_target: SLATarget
    priority: Priority

    secondary_owner: Optional[TeamMember] = None
    escalation_owner: Optional[TeamMember] = None

    acknowledged_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        """Whether the assignment still needs attention from its owner."""
        return self.status not in (AssignmentStatus.RESOLVED, AssignmentStatus.ESCALATED)

    def transition_to(
        self,
        status: AssignmentStatus,
        timestamp: Optional[datetime] = None
    ) -> bool:
        """
        Move to ``status``, stamping the matching timestamp on first entry.

        Returns:
            True when this call resolved the assignment for the first time.
        """
        now = timestamp or _utcnow()
        self.status = status

        if status == AssignmentStatus.ACKNOWLEDGED and self.acknowledged_at is None:
            self.acknowledged_at = now
        elif status == AssignmentStatus.IN_PROGRESS and self.started_at is None:
            self.started_at = now
        elif status == AssignmentStatus.RESOLVED and self.resolved_at is None:
            self.resolved_at = now
            return True
        return False

    def reassign_to(self, owner: TeamMember, timestamp: Optional[datetime] = None) -> None:
        """Hand the assignment to a new primary owner and restart the clock."""
        self.primary_owner = owner
        self.status = AssignmentStatus.ASSIGNED
        self.assigned_at = timestamp or _utcnow()

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "incident_id": self.incident_id,
            "primary_owner": self.primary_owner.to_dict(),
            "secondary_owner": self.secondary_owner.to_dict() if self.secondary_owner else None,
            "escalation_owner": self.escalation_owner.to_dict() if self.escalation_owner else None,
            "status": self.status.value,
            "priority": self.priority.value,
            "assigned_at": _iso(self.assigned_at),
            "acknowledged_at": _iso(self.acknowledged_at),
            "started_at": _iso(self.started_at),
            "resolved_at": _iso(self.resolved_at),
            "sla_target": self.sla_target.to_dict(),
        }


@dataclass
class WorkloadMetrics:
    """Per-member load and performance counters."""

    member_id: str
    active_assignments: int = 0
    total_assignments: int = 0
    average_resolution_time: float = 0.0
    success_rate: float = 0.5

    def to_dict(self) -> dict:
        return {
            "member_id": self.member_id,
            "active_assignments": self.active_assignments,
            "total_assignments": self.total_assignments,
            "average_resolution_time": self.average_resolution_time,
            "success_rate": self.success_rate,
        }


@dataclass(frozen=True)
class ScoreFactors:
    """Unweighted 0..1 inputs to an assignment score."""

    expertise: float
    availability: float
    current_load: float
    response_history: float


@dataclass(frozen=True)
class AssignmentScore:
    """Weighted suitability of one member for one incident."""

    member: TeamMember
    score: float
    factors: ScoreFactors

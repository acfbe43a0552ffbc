"""
Assignment Repository Interfaces
================================

Abstractions the assignment services depend on (Dependency Inversion).

Concrete in-memory implementations live in the infrastructure layer; a
database-backed store only has to honour these contracts.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from incident_ownership.assignment.domain import Assignment, TeamMember, WorkloadMetrics


class IAssignmentStore(ABC):
    """Interface for assignment data access."""

    @abstractmethod
    def get(self, assignment_id: str) -> Optional[Assignment]:
        """Get assignment by ID."""

    @abstractmethod
    def save(self, assignment: Assignment) -> None:
        """Insert or replace an assignment."""

    @abstractmethod
    def list_all(self) -> List[Assignment]:
        """List assignments in insertion order."""


class IWorkloadStore(ABC):
    """Interface for per-member workload counters."""

    @abstractmethod
    def get(self, member_id: str) -> Optional[WorkloadMetrics]:
        """Get metrics row for a member."""

    @abstractmethod
    def save(self, metrics: WorkloadMetrics) -> None:
        """Insert or replace a metrics row."""

    @abstractmethod
    def list_all(self) -> Dict[str, WorkloadMetrics]:
        """All metrics rows keyed by member ID."""


class IAvailabilityProvider(ABC):
    """Interface for member availability (calendar, on-call, heuristics)."""

    @abstractmethod
    def availability(self, member: TeamMember) -> float:
        """Availability score between 0 and 1."""

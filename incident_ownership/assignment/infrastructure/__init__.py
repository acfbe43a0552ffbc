"""
Assignment Infrastructure Layer
===============================

Infrastructure implementations for the assignment module:
- Repositories: in-memory assignment and workload stores
- Availability: time-of-day availability heuristic
"""

from incident_ownership.assignment.infrastructure.repositories import (
    InMemoryAssignmentStore,
    InMemoryWorkloadStore,
)
from incident_ownership.assignment.infrastructure.availability import (
    TimeOfDayAvailability,
    FixedAvailability,
)

__all__ = [
    "InMemoryAssignmentStore",
    "InMemoryWorkloadStore",
    "TimeOfDayAvailability",
    "FixedAvailability",
]

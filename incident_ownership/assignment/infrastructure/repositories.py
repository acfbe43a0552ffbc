"""
Assignment Infrastructure Repositories
======================================

In-memory implementations of the assignment store interfaces.

Entities are copied on the way in and out so callers never share mutable
state with the store, the same contract a database-backed store gives.
"""

import threading
from copy import deepcopy
from typing import Dict, List, Optional

from incident_ownership.assignment.application import IAssignmentStore, IWorkloadStore
from incident_ownership.assignment.domain import Assignment, WorkloadMetrics


class InMemoryAssignmentStore(IAssignmentStore):
    """Process-local assignment storage keyed by assignment ID."""

    def __init__(self):
        self._assignments: Dict[str, Assignment] = {}
        self._lock = threading.Lock()

    def get(self, assignment_id: str) -> Optional[Assignment]:
        with self._lock:
            assignment = self._assignments.get(assignment_id)
            return deepcopy(assignment) if assignment else None

    def save(self, assignment: Assignment) -> None:
        with self._lock:
            self._assignments[assignment.id] = deepcopy(assignment)

    def list_all(self) -> List[Assignment]:
        with self._lock:
            return [deepcopy(a) for a in self._assignments.values()]


class InMemoryWorkloadStore(IWorkloadStore):
    """Process-local workload metrics keyed by member ID."""

    def __init__(self):
        self._metrics: Dict[str, WorkloadMetrics] = {}
        self._lock = threading.Lock()

    def get(self, member_id: str) -> Optional[WorkloadMetrics]:
        with self._lock:
            metrics = self._metrics.get(member_id)
            return deepcopy(metrics) if metrics else None

    def save(self, metrics: WorkloadMetrics) -> None:
        with self._lock:
            self._metrics[metrics.member_id] = deepcopy(metrics)

    def list_all(self) -> Dict[str, WorkloadMetrics]:
        with self._lock:
            return {member_id: deepcopy(m) for member_id, m in self._metrics.items()}

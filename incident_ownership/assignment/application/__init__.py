"""
Assignment Application Layer
============================

Application layer for the assignment module.

Contains:
- Services: ResponsibilityMatrix, WorkloadBalancer, AutoAssignmentEngine
- Governance: SLA compliance and escalation-need detection
- DTOs: Governance result models
- Interfaces: Store and availability abstractions

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from incident_ownership.assignment.application.dto import (
    EscalationCheck,
    PerformanceCheck,
    QualityCriteria,
    QualityEvaluation,
    PerformanceReport,
    PerformanceMetricRecord,
)
from incident_ownership.assignment.application.interfaces import (
    IAssignmentStore,
    IWorkloadStore,
    IAvailabilityProvider,
)
from incident_ownership.assignment.application.services import (
    ResponsibilityMatrix,
    WorkloadBalancer,
    AutoAssignmentEngine,
)
from incident_ownership.assignment.application.governance import ResponsibilityGovernance

__all__ = [
    # DTOs
    "EscalationCheck",
    "PerformanceCheck",
    "QualityCriteria",
    "QualityEvaluation",
    "PerformanceReport",
    "PerformanceMetricRecord",
    # Services
    "ResponsibilityMatrix",
    "WorkloadBalancer",
    "AutoAssignmentEngine",
    "ResponsibilityGovernance",
    # Repository Interfaces
    "IAssignmentStore",
    "IWorkloadStore",
    "IAvailabilityProvider",
]

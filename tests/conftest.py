"""
Shared pytest fixtures.

Provides:
- Fixed-availability assignment stack (time of day never affects scoring)
- Escalation engine with the default customer-service roster
- Factories for incidents and escalation contexts
"""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from incident_ownership.assignment.application import (
    AutoAssignmentEngine,
    ResponsibilityGovernance,
    ResponsibilityMatrix,
    WorkloadBalancer,
)
from incident_ownership.assignment.domain import Incident
from incident_ownership.assignment.infrastructure import (
    FixedAvailability,
    InMemoryAssignmentStore,
    InMemoryWorkloadStore,
)
from incident_ownership.config import (
    DeploymentEnvironment,
    ImpactLevel,
    Priority,
    ProblemType,
    SystemType,
)
from incident_ownership.config.ownership import OwnershipConfig
from incident_ownership.escalation.application import (
    EscalationEngine,
    EscalationEngineConfig,
    IEscalationNotifier,
)
from incident_ownership.escalation.domain import (
    AutoFixAttempt,
    ErrorDetails,
    EscalationContext,
    EscalationEvent,
)
from incident_ownership.escalation.infrastructure import InMemoryEscalationStore

T0 = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


class RecordingNotifier(IEscalationNotifier):
    """Keeps every notified event for inspection."""

    def __init__(self):
        self.events: List[EscalationEvent] = []

    def notify(self, event: EscalationEvent) -> None:
        self.events.append(event)


# ========== Factories ==========

def _make_incident(
    incident_id: str = "inc-1",
    problem_type: ProblemType = ProblemType.BACKEND_API,
    priority: Priority = Priority.HIGH,
    description: str = "Checkout requests failing",
    **kwargs
) -> Incident:
    return Incident(
        id=incident_id,
        type=problem_type,
        priority=priority,
        description=description,
        **kwargs
    )


def _make_context(
    message: str = "Motor controller fault",
    system_type: SystemType = SystemType.GENERAL,
    impact_level: ImpactLevel = ImpactLevel.MEDIUM,
    attempts: int = 0,
    components=("motor",),
) -> EscalationContext:
    return EscalationContext(
        system_type=system_type,
        environment=DeploymentEnvironment.PRODUCTION,
        error_details=ErrorDetails(
            message=message,
            affected_components=components,
            impact_level=impact_level,
        ),
        auto_fix_attempts=[
            AutoFixAttempt(
                attempt_number=n + 1,
                strategy="restart",
                started_at=T0 + timedelta(minutes=n),
                completed_at=T0 + timedelta(minutes=n, seconds=30),
                success=False,
                error_message="still failing",
            )
            for n in range(attempts)
        ],
    )


# ========== Assignment Fixtures ==========

@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def make_incident():
    return _make_incident


@pytest.fixture
def make_context():
    return _make_context


@pytest.fixture
def matrix() -> ResponsibilityMatrix:
    return ResponsibilityMatrix()


@pytest.fixture
def workload_store() -> InMemoryWorkloadStore:
    return InMemoryWorkloadStore()


@pytest.fixture
def balancer(workload_store) -> WorkloadBalancer:
    return WorkloadBalancer(workload_store, FixedAvailability(1.0))


@pytest.fixture
def assignment_engine(matrix, balancer) -> AutoAssignmentEngine:
    return AutoAssignmentEngine(matrix, balancer, InMemoryAssignmentStore())


@pytest.fixture
def governance() -> ResponsibilityGovernance:
    return ResponsibilityGovernance()


# ========== Escalation Fixtures ==========

@pytest.fixture
def agents():
    return OwnershipConfig().agents()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def escalation_engine(agents, notifier) -> EscalationEngine:
    return EscalationEngine(
        escalation_store=InMemoryEscalationStore(),
        agents=agents,
        notifier=notifier,
        config=EscalationEngineConfig(),
    )

"""
Escalation Monitor
==================

Periodic sweep that turns governance timeout findings into escalations.

Governance checks are pure functions of time, so something has to call
them again; run_once is that call, driven by EscalationScheduler or by
hand.
"""

from datetime import datetime, timezone
from typing import List, Optional

from incident_ownership.assignment.application import (
    AutoAssignmentEngine,
    ResponsibilityGovernance,
)
from incident_ownership.config import (
    DeploymentEnvironment,
    EscalationTrigger,
    ImpactLevel,
    SystemType,
)
from incident_ownership.escalation.application.services import EscalationEngine
from incident_ownership.escalation.domain import (
    ErrorDetails,
    EscalationContext,
    EscalationEvent,
)
from incident_ownership.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


class EscalationMonitor:
    """Escalates open assignments that have outlived a timeout."""

    def __init__(
        self,
        assignment_engine: AutoAssignmentEngine,
        governance: ResponsibilityGovernance,
        escalation_engine: EscalationEngine,
        environment: DeploymentEnvironment = DeploymentEnvironment.PRODUCTION
    ):
        self._assignments = assignment_engine
        self._governance = governance
        self._escalations = escalation_engine
        self._environment = environment

    def run_once(self, now: Optional[datetime] = None) -> List[EscalationEvent]:
        """
        Check every open assignment once.

        Each assignment that needs escalating gets one escalation event and
        is marked ESCALATED, so later sweeps skip it.

        Returns:
            The escalation events created by this sweep
        """
        now = now or datetime.now(timezone.utc)
        created: List[EscalationEvent] = []

        with log_latency(logger, "escalation_sweep"):
            for snapshot in self._assignments.get_all_assignments():
                if not snapshot.is_open:
                    continue

                with self._assignments.exclusive():
                    assignment = self._assignments.get_assignment(snapshot.id)
                    if assignment is None or not assignment.is_open:
                        continue

                    check = self._governance.check_escalation_needed(
                        assignment, assignment.priority, now
                    )
                    if not check.needed:
                        continue

                    trigger = (
                        EscalationTrigger.TIMEOUT_NO_RESPONSE
                        if assignment.acknowledged_at is None
                        else EscalationTrigger.TIMEOUT_NO_PROGRESS
                    )
                    if self._assignments.escalate_if_open(assignment.id) is None:
                        logger.info(
                            "Assignment closed during escalation sweep",
                            extra={"assignment_id": assignment.id}
                        )
                        continue

                context = EscalationContext(
                    system_type=SystemType.GENERAL,
                    environment=self._environment,
                    error_details=ErrorDetails(
                        message=f"{check.reason} after {check.timeout} minutes",
                        impact_level=ImpactLevel.MEDIUM,
                    ),
                )
                created.append(self._escalations.create_escalation(
                    assignment.incident_id,
                    trigger,
                    assignment.priority,
                    context,
                    assignment_id=assignment.id,
                ))

        if created:
            logger.info(
                "Escalation sweep raised escalations",
                extra={"count": len(created), "escalation_ids": [e.id for e in created]}
            )
        return created

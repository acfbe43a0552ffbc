"""
Responsibility Governance
=========================

Audits assignments against SLA targets and escalation timeouts.

Governance only detects that escalation is needed; deciding how to
escalate belongs to the escalation engine. Checks are pure functions of
"now", so a scheduler has to re-run them (see EscalationMonitor).
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, Mapping, Optional

from pydantic import ValidationError

from incident_ownership.assignment.application.dto import (
    EscalationCheck,
    PerformanceCheck,
    PerformanceMetricRecord,
    PerformanceReport,
    QualityCriteria,
    QualityEvaluation,
)
from incident_ownership.assignment.domain import (
    DEFAULT_ESCALATION_RULES,
    Assignment,
    EscalationRule,
    OwnershipCalculator,
    ensure_exhaustive,
)
from incident_ownership.config import AssignmentStatus, Priority
from incident_ownership.core import ValidationException
from incident_ownership.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class ResponsibilityGovernance:
    """Monitors and enforces SLA compliance and escalation timeouts."""

    TIMELINESS_WEIGHT = 0.6
    COMPLETENESS_WEIGHT = 0.4

    def __init__(self, escalation_rules: Optional[Mapping[Priority, EscalationRule]] = None):
        self._rules: Dict[Priority, EscalationRule] = dict(
            escalation_rules or DEFAULT_ESCALATION_RULES
        )
        ensure_exhaustive(self._rules, Priority, "Escalation rules")
        self._performance_metrics: Dict[str, PerformanceMetricRecord] = {}

    def update_escalation_rules(self, escalation_rules: Mapping[Priority, EscalationRule]) -> None:
        rules = dict(escalation_rules)
        ensure_exhaustive(rules, Priority, "Escalation rules")
        self._rules = rules

    def get_escalation_rule(self, priority: Priority) -> Optional[EscalationRule]:
        return self._rules.get(priority)

    def check_escalation_needed(
        self,
        assignment: Assignment,
        priority: Priority,
        now: Optional[datetime] = None
    ) -> EscalationCheck:
        """
        Check the assignment against its priority's timeouts.

        Evaluated in order, first match wins:
        1. not acknowledged within ``no_response_timeout`` of assignment
        2. acknowledged but not started within ``no_progress_timeout``
        3. started but not resolved within ``unresolved_timeout``
        """
        rule = self._rules.get(priority)
        if rule is None:
            return EscalationCheck(needed=False)

        now = now or datetime.now(timezone.utc)
        minutes = OwnershipCalculator.minutes_between

        if (
            assignment.acknowledged_at is None
            and minutes(assignment.assigned_at, now) >= rule.no_response_timeout
        ):
            return EscalationCheck(
                needed=True,
                reason="No response timeout",
                timeout=rule.no_response_timeout,
            )

        if (
            assignment.acknowledged_at is not None
            and assignment.started_at is None
            and minutes(assignment.acknowledged_at, now) >= rule.no_progress_timeout
        ):
            return EscalationCheck(
                needed=True,
                reason="No progress timeout",
                timeout=rule.no_progress_timeout,
            )

        if (
            assignment.started_at is not None
            and assignment.resolved_at is None
            and minutes(assignment.started_at, now) >= rule.unresolved_timeout
        ):
            return EscalationCheck(
                needed=True,
                reason="Unresolved timeout",
                timeout=rule.unresolved_timeout,
            )

        return EscalationCheck(needed=False)

    def monitor_assignment_performance(self, assignment: Assignment) -> PerformanceCheck:
        """Elapsed response/resolution minutes and any SLA violations."""
        violations = []
        response_time = None
        resolution_time = None
        target = assignment.sla_target

        if assignment.acknowledged_at is not None:
            response_time = OwnershipCalculator.minutes_between(
                assignment.assigned_at, assignment.acknowledged_at
            )
            if response_time > target.response_time:
                violations.append(
                    f"Response time exceeded: {response_time}min > {target.response_time}min"
                )

        if assignment.resolved_at is not None:
            resolution_time = OwnershipCalculator.minutes_between(
                assignment.assigned_at, assignment.resolved_at
            )
            if resolution_time > target.resolution_time:
                violations.append(
                    f"Resolution time exceeded: {resolution_time}min > {target.resolution_time}min"
                )

        return PerformanceCheck(
            compliant=not violations,
            response_time=response_time,
            resolution_time=resolution_time,
            violations=violations,
        )

    def evaluate_resolution_quality(self, assignment: Assignment) -> QualityEvaluation:
        """Score = 0.6 * timeliness + 0.4 * completeness."""
        resolution_time = None
        if assignment.resolved_at is not None:
            resolution_time = OwnershipCalculator.minutes_between(
                assignment.assigned_at, assignment.resolved_at
            )

        timeliness = OwnershipCalculator.timeliness_score(
            resolution_time, assignment.sla_target.resolution_time
        )
        # Resolved is taken as complete
        completeness = 1.0 if assignment.status == AssignmentStatus.RESOLVED else 0.0

        return QualityEvaluation(
            score=timeliness * self.TIMELINESS_WEIGHT + completeness * self.COMPLETENESS_WEIGHT,
            criteria=QualityCriteria(timeliness=timeliness, completeness=completeness),
        )

    def record_performance_metrics(self, assignment_id: str, **metrics) -> PerformanceMetricRecord:
        """
        Store measurements for an assignment, replacing earlier ones.

        Raises:
            ValidationException: for unknown or mistyped metric fields
        """
        try:
            record = PerformanceMetricRecord(recorded_at=datetime.now(timezone.utc), **metrics)
        except ValidationError as e:
            raise ValidationException(
                f"Invalid performance metrics for assignment {assignment_id}",
                {"errors": e.errors()}
            ) from e
        self._performance_metrics[assignment_id] = record
        return record

    def get_performance_metrics(self, assignment_id: str) -> Optional[PerformanceMetricRecord]:
        return self._performance_metrics.get(assignment_id)

    def generate_performance_report(self, assignments: Iterable[Assignment]) -> PerformanceReport:
        """Counts, averages and SLA compliance rate over resolved assignments."""
        assignments = list(assignments)
        resolved = [a for a in assignments if a.status == AssignmentStatus.RESOLVED]

        total_response = 0
        response_count = 0
        total_resolution = 0
        compliant = 0

        for assignment in resolved:
            performance = self.monitor_assignment_performance(assignment)
            if performance.response_time is not None:
                total_response += performance.response_time
                response_count += 1
            if performance.resolution_time is not None:
                total_resolution += performance.resolution_time
            if performance.compliant:
                compliant += 1

        report = PerformanceReport(
            total_assignments=len(assignments),
            resolved=len(resolved),
            average_response_time=total_response / response_count if response_count else 0.0,
            average_resolution_time=total_resolution / len(resolved) if resolved else 0.0,
            sla_compliance=compliant / len(resolved) * 100 if resolved else 0.0,
        )
        logger.debug("Performance report generated", extra=report.model_dump())
        return report

"""
Assignment Application Services
===============================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

- ResponsibilityMatrix: problem type -> teams -> members lookup
- WorkloadBalancer: multi-factor scoring of candidate owners
- AutoAssignmentEngine: creates and mutates Assignment records
"""

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence
from uuid import uuid4

from incident_ownership.assignment.application.interfaces import (
    IAssignmentStore,
    IAvailabilityProvider,
    IWorkloadStore,
)
from incident_ownership.assignment.domain import (
    DEFAULT_SLA_TARGETS,
    Assignment,
    AssignmentScore,
    Incident,
    OwnershipCalculator,
    ScoreFactors,
    ScoringWeights,
    SLATarget,
    TeamMember,
    TeamStructure,
    WorkloadMetrics,
    ensure_exhaustive,
)
from incident_ownership.config import AssignmentStatus, Priority, ProblemType
from incident_ownership.core import (
    AssignmentNotFoundException,
    EmptyCandidateSetException,
    MemberNotFoundException,
    NoAvailableMembersException,
    ValidationException,
)
from incident_ownership.shared.infrastructure.logging import get_context_logger, get_logger

logger = get_logger(__name__)


class ResponsibilityMatrix:
    """
    Static mapping from problem type to responsible teams and their members.

    Seeded once at construction; lookups never fail, unknown keys yield an
    empty list or None.
    """

    def __init__(
        self,
        teams: Optional[Iterable[TeamStructure]] = None,
        expertise_map: Optional[Mapping[ProblemType, Sequence[str]]] = None
    ):
        if teams is None or expertise_map is None:
            from incident_ownership.config.ownership import OwnershipConfig

            defaults = OwnershipConfig()
            if teams is None:
                teams = defaults.team_structures()
            if expertise_map is None:
                expertise_map = defaults.expertise_map

        self._teams: Dict[str, TeamStructure] = {team.name: team for team in teams}
        self._expertise_map: Dict[ProblemType, tuple] = {
            problem_type: tuple(names) for problem_type, names in expertise_map.items()
        }

    def identify_relevant_teams(self, problem_type: ProblemType) -> List[TeamStructure]:
        """Teams responsible for a problem type, in configured order."""
        names = self._expertise_map.get(problem_type, ())
        return [self._teams[name] for name in names if name in self._teams]

    def get_all_members(self) -> List[TeamMember]:
        members: List[TeamMember] = []
        for team in self._teams.values():
            members.extend(team.members)
        return members

    def get_member_by_id(self, member_id: str) -> Optional[TeamMember]:
        for member in self.get_all_members():
            if member.id == member_id:
                return member
        return None

    def get_team_structure(self, team_name: str) -> Optional[TeamStructure]:
        return self._teams.get(team_name)


class WorkloadBalancer:
    """
    Scores candidate members for an incident and tracks their load.

    score = w_e * expertise + w_a * availability + w_l * (1 - load) + w_h * success_rate
    """

    def __init__(
        self,
        workload_store: IWorkloadStore,
        availability_provider: IAvailabilityProvider,
        weights: Optional[ScoringWeights] = None,
        max_active_assignments: int = 10
    ):
        self._workload_store = workload_store
        self._availability = availability_provider
        self._weights = weights or ScoringWeights()
        self._max_active = max_active_assignments

    def calculate_expertise_match(self, member: TeamMember, incident: Incident) -> float:
        return OwnershipCalculator.expertise_match(member.specialties, incident)

    def calculate_availability(self, member: TeamMember) -> float:
        return self._availability.availability(member)

    def calculate_current_workload(self, member: TeamMember) -> float:
        """Inverted load: 1.0 for an idle member, 0.0 when fully loaded."""
        metrics = self._workload_store.get(member.id)
        if metrics is None:
            return 1.0
        return OwnershipCalculator.inverted_load(metrics.active_assignments, self._max_active)

    def calculate_historical_performance(self, member: TeamMember) -> float:
        metrics = self._workload_store.get(member.id)
        if metrics is None or metrics.total_assignments == 0:
            return 0.5
        return metrics.success_rate

    def calculate_assignment_score(self, member: TeamMember, incident: Incident) -> AssignmentScore:
        """Calculate the weighted assignment score for a member."""
        factors = ScoreFactors(
            expertise=self.calculate_expertise_match(member, incident),
            availability=self.calculate_availability(member),
            current_load=self.calculate_current_workload(member),
            response_history=self.calculate_historical_performance(member),
        )
        score = (
            factors.expertise * self._weights.expertise
            + factors.availability * self._weights.availability
            + factors.current_load * self._weights.current_load
            + factors.response_history * self._weights.response_history
        )
        return AssignmentScore(member=member, score=score, factors=factors)

    def select_optimal_assignee(
        self,
        candidates: Sequence[TeamMember],
        incident: Incident
    ) -> TeamMember:
        """
        Highest-scoring candidate; ties go to the earliest in ``candidates``.

        Raises:
            EmptyCandidateSetException: if ``candidates`` is empty
        """
        if not candidates:
            raise EmptyCandidateSetException({"incident_id": incident.id})

        scores = [self.calculate_assignment_score(member, incident) for member in candidates]
        # sorted() is stable, so equal scores keep candidate order
        ranked = sorted(scores, key=lambda s: s.score, reverse=True)
        return ranked[0].member

    def update_workload_metrics(self, member_id: str, **changes) -> WorkloadMetrics:
        """
        Merge ``changes`` into the member's metrics row, creating it if needed.

        Raises:
            ValidationException: for unknown metric names
        """
        current = self._workload_store.get(member_id) or WorkloadMetrics(member_id=member_id)
        changes.pop("member_id", None)
        try:
            updated = replace(current, **changes)
        except TypeError as e:
            raise ValidationException(
                f"Unknown workload metric in {sorted(changes)}", {"member_id": member_id}
            ) from e
        self._workload_store.save(updated)
        return updated

    def get_workload_metrics(self, member_id: str) -> Optional[WorkloadMetrics]:
        return self._workload_store.get(member_id)

    def get_all_workload_metrics(self) -> Dict[str, WorkloadMetrics]:
        return self._workload_store.list_all()


class AutoAssignmentEngine:
    """
    Assigns incidents to owners and manages the assignment lifecycle.

    Flow for a new incident:
    1. Problem type is taken from the incident
    2. Relevant teams come from the responsibility matrix
    3. Every member of those teams is a candidate
    4. Primary and secondary owners are picked by the workload balancer
    5. SLA targets come from the priority table
    6. The assignment is stored and the primary owner's load increases
    """

    def __init__(
        self,
        responsibility_matrix: ResponsibilityMatrix,
        workload_balancer: WorkloadBalancer,
        assignment_store: IAssignmentStore,
        sla_targets: Optional[Mapping[Priority, SLATarget]] = None
    ):
        self._matrix = responsibility_matrix
        self._balancer = workload_balancer
        self._store = assignment_store
        self._sla_targets: Dict[Priority, SLATarget] = dict(sla_targets or DEFAULT_SLA_TARGETS)
        ensure_exhaustive(self._sla_targets, Priority, "SLA targets")
        self._lock = threading.RLock()

    @contextmanager
    def exclusive(self):
        """
        Hold the engine lock across a read-check-write sequence.

        Every mutating call takes the same lock, so callers on other threads
        wait until the block exits.
        """
        with self._lock:
            yield

    def update_sla_targets(self, sla_targets: Mapping[Priority, SLATarget]) -> None:
        """Swap the priority table; existing assignments keep their targets."""
        table = dict(sla_targets)
        ensure_exhaustive(table, Priority, "SLA targets")
        with self._lock:
            self._sla_targets = table

    def analyze_problem_type(self, incident: Incident) -> ProblemType:
        """Problem type is taken as reported; there is no classification step."""
        return incident.type

    def identify_relevant_teams(self, problem_type: ProblemType) -> List[str]:
        return [team.name for team in self._matrix.identify_relevant_teams(problem_type)]

    def check_member_availability(self, team_names: Sequence[str]) -> List[TeamMember]:
        """
        Flatten team members into a candidate list.

        Every member counts as available; there is no calendar integration.
        """
        members: List[TeamMember] = []
        for name in team_names:
            team = self._matrix.get_team_structure(name)
            if team:
                members.extend(team.members)
        return members

    def get_sla_targets(self, priority: Priority) -> SLATarget:
        return self._sla_targets[priority]

    def assign_responsibility(self, incident: Incident) -> Assignment:
        """
        Create an assignment for an incident.

        Raises:
            NoAvailableMembersException: if the relevant teams have no members
        """
        problem_type = self.analyze_problem_type(incident)
        team_names = self.identify_relevant_teams(problem_type)
        candidates = self.check_member_availability(team_names)

        if not candidates:
            logger.warning(
                "No available members for incident",
                extra={"incident_id": incident.id, "problem_type": problem_type.value}
            )
            raise NoAvailableMembersException(incident.id, problem_type.value)

        primary_owner = self._balancer.select_optimal_assignee(candidates, incident)

        remaining = [member for member in candidates if member.id != primary_owner.id]
        secondary_owner = (
            self._balancer.select_optimal_assignee(remaining, incident) if remaining else None
        )

        with self._lock:
            assignment = Assignment(
                id=str(uuid4()),
                incident_id=incident.id,
                primary_owner=primary_owner,
                secondary_owner=secondary_owner,
                status=AssignmentStatus.ASSIGNED,
                assigned_at=datetime.now(timezone.utc),
                sla_target=self.get_sla_targets(incident.priority),
                priority=incident.priority,
            )
            self._store.save(assignment)
            self._update_member_workload(primary_owner.id, 1)

        get_context_logger(__name__, incident.id).info(
            "Assignment created",
            extra={
                "assignment_id": assignment.id,
                "incident_id": incident.id,
                "problem_type": problem_type.value,
                "priority": incident.priority.value,
                "primary_owner": primary_owner.id,
                "secondary_owner": secondary_owner.id if secondary_owner else None,
                "teams": team_names,
            }
        )
        return assignment

    def update_assignment_status(self, assignment_id: str, status: AssignmentStatus) -> Assignment:
        """
        Move an assignment to ``status``.

        Raises:
            AssignmentNotFoundException: for unknown IDs
        """
        with self._lock:
            assignment = self._get_or_raise(assignment_id)
            previous = assignment.status

            if assignment.transition_to(status):
                self._update_member_workload(assignment.primary_owner.id, -1)

            self._store.save(assignment)
        logger.info(
            "Assignment status updated",
            extra={
                "assignment_id": assignment_id,
                "from_status": previous.value,
                "to_status": status.value,
            }
        )
        return assignment

    def reassign_responsibility(self, assignment_id: str, new_owner_id: str) -> Assignment:
        """
        Hand an assignment to another member and restart its clock.

        ``total_assignments`` of the new owner is left unchanged.

        Raises:
            AssignmentNotFoundException: for unknown assignment IDs
            MemberNotFoundException: for unknown member IDs
        """
        new_owner = self._matrix.get_member_by_id(new_owner_id)

        with self._lock:
            assignment = self._get_or_raise(assignment_id)
            if new_owner is None:
                raise MemberNotFoundException(new_owner_id)

            old_owner = assignment.primary_owner
            self._update_member_workload(old_owner.id, -1)
            assignment.reassign_to(new_owner)
            self._update_member_workload(new_owner.id, 1, count_total=False)

            self._store.save(assignment)
        logger.info(
            "Assignment reassigned",
            extra={
                "assignment_id": assignment_id,
                "from_owner": old_owner.id,
                "to_owner": new_owner.id,
            }
        )
        return assignment

    def escalate_assignment(
        self,
        assignment_id: str,
        escalation_owner_id: Optional[str] = None
    ) -> Assignment:
        """
        Mark an assignment ESCALATED, optionally recording who it went to.

        Raises:
            AssignmentNotFoundException: for unknown assignment IDs
            MemberNotFoundException: for unknown escalation owner IDs
        """
        with self._lock:
            if escalation_owner_id is not None:
                owner = self._matrix.get_member_by_id(escalation_owner_id)
                if owner is None:
                    raise MemberNotFoundException(escalation_owner_id)
                assignment = self._get_or_raise(assignment_id)
                assignment.escalation_owner = owner
                self._store.save(assignment)

            return self.update_assignment_status(assignment_id, AssignmentStatus.ESCALATED)

    def escalate_if_open(self, assignment_id: str) -> Optional[Assignment]:
        """
        Escalate the current record only while it is still open.

        Returns:
            The escalated assignment, or None when it is unknown or was
            resolved, closed or escalated in the meantime
        """
        with self._lock:
            assignment = self._store.get(assignment_id)
            if assignment is None or not assignment.is_open:
                return None
            return self.update_assignment_status(assignment_id, AssignmentStatus.ESCALATED)

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]:
        return self._store.get(assignment_id)

    def get_all_assignments(self) -> List[Assignment]:
        return self._store.list_all()

    def get_workload_statistics(self) -> Dict[str, WorkloadMetrics]:
        return self._balancer.get_all_workload_metrics()

    def _get_or_raise(self, assignment_id: str) -> Assignment:
        assignment = self._store.get(assignment_id)
        if assignment is None:
            logger.warning("Assignment not found", extra={"assignment_id": assignment_id})
            raise AssignmentNotFoundException(assignment_id)
        return assignment

    def _update_member_workload(self, member_id: str, delta: int, count_total: bool = True) -> None:
        """Shift active load by ``delta`` (floored at 0); new work also counts toward the total."""
        current = self._balancer.get_workload_metrics(member_id) or WorkloadMetrics(member_id=member_id)
        changes = {"active_assignments": max(0, current.active_assignments + delta)}
        if delta > 0 and count_total:
            changes["total_assignments"] = current.total_assignments + delta
        self._balancer.update_workload_metrics(member_id, **changes)

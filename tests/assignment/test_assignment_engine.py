"""Tests for AutoAssignmentEngine."""

import pytest

from incident_ownership.assignment.application import AutoAssignmentEngine, ResponsibilityMatrix
from incident_ownership.assignment.domain import SLATarget
from incident_ownership.assignment.infrastructure import InMemoryAssignmentStore
from incident_ownership.config import AssignmentStatus, Priority, ProblemType
from incident_ownership.core import (
    AssignmentNotFoundException,
    ConfigurationException,
    MemberNotFoundException,
    NoAvailableMembersException,
)


class TestSLATargets:

    @pytest.mark.parametrize("priority,target", [
        (Priority.CRITICAL, SLATarget(5, 60)),
        (Priority.HIGH, SLATarget(15, 240)),
        (Priority.MEDIUM, SLATarget(60, 480)),
        (Priority.LOW, SLATarget(240, 1440)),
    ])
    def test_default_table(self, assignment_engine, priority, target):
        assert assignment_engine.get_sla_targets(priority) == target

    def test_incomplete_table_rejected(self, matrix, balancer):
        with pytest.raises(ConfigurationException):
            AutoAssignmentEngine(
                matrix, balancer, InMemoryAssignmentStore(),
                sla_targets={Priority.CRITICAL: SLATarget(5, 60)},
            )


class TestAssignResponsibility:

    def test_backend_high_incident(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(make_incident())

        assert assignment.status == AssignmentStatus.ASSIGNED
        assert assignment.sla_target == SLATarget(15, 240)
        assert assignment.priority == Priority.HIGH
        assert assignment.primary_owner.id == "david.zhang"
        assert assignment.secondary_owner.id == "eva.wu"
        assert assignment.assigned_at.tzinfo is not None

    def test_security_critical_incident(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(
            make_incident(problem_type=ProblemType.SECURITY, priority=Priority.CRITICAL)
        )

        assert assignment.sla_target == SLATarget(5, 60)
        assert assignment.primary_owner.id == "iris.lee"

    def test_primary_owner_load_increases(self, assignment_engine, make_incident):
        assignment_engine.assign_responsibility(make_incident())

        metrics = assignment_engine.get_workload_statistics()["david.zhang"]
        assert metrics.active_assignments == 1
        assert metrics.total_assignments == 1
        assert "eva.wu" not in assignment_engine.get_workload_statistics()

    def test_load_spreads_work(self, assignment_engine, make_incident):
        first = assignment_engine.assign_responsibility(make_incident("inc-1"))
        second = assignment_engine.assign_responsibility(make_incident("inc-2"))

        assert first.primary_owner.id == "david.zhang"
        assert second.primary_owner.id == "eva.wu"

    def test_no_members(self, balancer, make_incident):
        engine = AutoAssignmentEngine(
            ResponsibilityMatrix(teams=[], expertise_map={}),
            balancer,
            InMemoryAssignmentStore(),
        )
        with pytest.raises(NoAvailableMembersException) as exc_info:
            engine.assign_responsibility(make_incident())
        assert exc_info.value.details["problem_type"] == "BACKEND_API"

    def test_stored_copy_is_isolated(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(make_incident())
        assignment.status = AssignmentStatus.RESOLVED

        assert assignment_engine.get_assignment(assignment.id).status == AssignmentStatus.ASSIGNED


class TestUpdateAssignmentStatus:

    def test_resolution_releases_load_once(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(make_incident())

        assignment_engine.update_assignment_status(assignment.id, AssignmentStatus.RESOLVED)
        assignment_engine.update_assignment_status(assignment.id, AssignmentStatus.RESOLVED)

        metrics = assignment_engine.get_workload_statistics()["david.zhang"]
        assert metrics.active_assignments == 0
        assert metrics.total_assignments == 1

    def test_timestamps_set_once(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(make_incident())

        first = assignment_engine.update_assignment_status(
            assignment.id, AssignmentStatus.ACKNOWLEDGED
        ).acknowledged_at
        assignment_engine.update_assignment_status(assignment.id, AssignmentStatus.IN_PROGRESS)
        again = assignment_engine.update_assignment_status(
            assignment.id, AssignmentStatus.ACKNOWLEDGED
        )

        assert again.acknowledged_at == first
        assert again.started_at is not None

    def test_unknown_assignment(self, assignment_engine):
        with pytest.raises(AssignmentNotFoundException):
            assignment_engine.update_assignment_status("missing", AssignmentStatus.RESOLVED)


class TestReassignResponsibility:

    def test_moves_active_load(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(make_incident())

        updated = assignment_engine.reassign_responsibility(assignment.id, "frank.lin")

        stats = assignment_engine.get_workload_statistics()
        assert updated.primary_owner.id == "frank.lin"
        assert updated.status == AssignmentStatus.ASSIGNED
        assert stats["david.zhang"].active_assignments == 0
        assert stats["frank.lin"].active_assignments == 1
        assert stats["frank.lin"].total_assignments == 0

    def test_active_never_negative(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(make_incident())
        assignment_engine.update_assignment_status(assignment.id, AssignmentStatus.RESOLVED)

        assignment_engine.reassign_responsibility(assignment.id, "frank.lin")

        assert assignment_engine.get_workload_statistics()["david.zhang"].active_assignments == 0

    @pytest.mark.parametrize("steps", [
        ["assign", "resolve 0", "reassign 0 frank.lin", "resolve 0"],
        ["assign", "assign", "reassign 0 eva.wu", "reassign 1 eva.wu", "resolve 0", "resolve 1"],
        ["assign", "reassign 0 frank.lin", "reassign 0 frank.lin", "resolve 0", "reassign 0 david.zhang"],
        ["assign", "resolve 0", "resolve 0", "reassign 0 eva.wu", "reassign 0 frank.lin"],
        ["assign", "assign", "assign", "resolve 1", "reassign 2 david.zhang", "resolve 2", "resolve 0"],
    ])
    def test_active_never_negative_across_sequences(self, assignment_engine, make_incident, steps):
        ids = []
        for n, step in enumerate(steps):
            op, *args = step.split()
            if op == "assign":
                ids.append(assignment_engine.assign_responsibility(make_incident(f"inc-{n}")).id)
            elif op == "resolve":
                assignment_engine.update_assignment_status(ids[int(args[0])], AssignmentStatus.RESOLVED)
            else:
                assignment_engine.reassign_responsibility(ids[int(args[0])], args[1])

            stats = assignment_engine.get_workload_statistics()
            assert all(m.active_assignments >= 0 for m in stats.values())


    def test_unknown_member(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(make_incident())
        with pytest.raises(MemberNotFoundException):
            assignment_engine.reassign_responsibility(assignment.id, "nobody")

    def test_unknown_assignment(self, assignment_engine):
        with pytest.raises(AssignmentNotFoundException):
            assignment_engine.reassign_responsibility("missing", "frank.lin")


class TestEscalateAssignment:

    def test_marks_escalated_with_owner(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(make_incident())

        escalated = assignment_engine.escalate_assignment(assignment.id, "grace.huang")

        assert escalated.status == AssignmentStatus.ESCALATED
        assert escalated.escalation_owner.id == "grace.huang"
        assert not escalated.is_open

    def test_unknown_escalation_owner(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(make_incident())
        with pytest.raises(MemberNotFoundException):
            assignment_engine.escalate_assignment(assignment.id, "nobody")

    def test_lists_all_assignments(self, assignment_engine, make_incident):
        assignment_engine.assign_responsibility(make_incident("inc-1"))
        assignment_engine.assign_responsibility(make_incident("inc-2"))

        ids = [a.incident_id for a in assignment_engine.get_all_assignments()]
        assert ids == ["inc-1", "inc-2"]


class TestEscalateIfOpen:

    def test_escalates_open_assignment(self, assignment_engine, make_incident):
        assignment = assignment_engine.assign_responsibility(make_incident())

        escalated = assignment_engine.escalate_if_open(assignment.id)

        assert escalated.status == AssignmentStatus.ESCALATED

    @pytest.mark.parametrize("status", [AssignmentStatus.RESOLVED, AssignmentStatus.ESCALATED])
    def test_closed_assignment_untouched(self, assignment_engine, make_incident, status):
        assignment = assignment_engine.assign_responsibility(make_incident())
        assignment_engine.update_assignment_status(assignment.id, status)

        assert assignment_engine.escalate_if_open(assignment.id) is None
        assert assignment_engine.get_assignment(assignment.id).status == status

    def test_unknown_assignment(self, assignment_engine):
        assert assignment_engine.escalate_if_open("missing") is None


class TestUpdateSlaTargets:

    def test_new_assignments_use_new_table(self, assignment_engine, make_incident):
        first = assignment_engine.assign_responsibility(make_incident("inc-1"))
        table = {p: SLATarget(1, 10) for p in Priority}

        assignment_engine.update_sla_targets(table)

        second = assignment_engine.assign_responsibility(make_incident("inc-2"))
        assert second.sla_target == SLATarget(1, 10)
        assert assignment_engine.get_assignment(first.id).sla_target == SLATarget(15, 240)

    def test_incomplete_table_rejected(self, assignment_engine):
        with pytest.raises(ConfigurationException):
            assignment_engine.update_sla_targets({Priority.HIGH: SLATarget(1, 10)})
        assert assignment_engine.get_sla_targets(Priority.LOW) == SLATarget(240, 1440)

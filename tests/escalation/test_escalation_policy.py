"""Tests for EscalationPolicy and escalation entities."""

import pytest

from incident_ownership.config import (
    EscalationLevel,
    EscalationTrigger,
    ImpactLevel,
    Priority,
    SystemType,
)
from incident_ownership.core import ValidationException
from incident_ownership.escalation.domain import (
    AgentAvailability,
    AgentExpertise,
    AgentPerformance,
    CustomerServiceAgent,
    EscalationPolicy,
)

L2 = EscalationLevel.L2_TEAM_LEAD
L3 = EscalationLevel.L3_SUPPORT_ENGINEER
L4 = EscalationLevel.L4_SENIOR_ENGINEER
L5 = EscalationLevel.L5_CUSTOMER_SERVICE


class TestDetermineLevel:

    @pytest.mark.parametrize("trigger,priority,expected", [
        (EscalationTrigger.SAFETY_CRITICAL, Priority.LOW, L5),
        (EscalationTrigger.REPEATED_FAILURES, Priority.CRITICAL, L3),
        (EscalationTrigger.REPEATED_FAILURES, Priority.HIGH, L3),
        (EscalationTrigger.REPEATED_FAILURES, Priority.MEDIUM, L2),
        (EscalationTrigger.TIMEOUT_NO_RESPONSE, Priority.CRITICAL, L3),
        (EscalationTrigger.TIMEOUT_NO_PROGRESS, Priority.HIGH, L2),
        (EscalationTrigger.MANUAL_REQUEST, Priority.LOW, L3),
        (EscalationTrigger.CRITICAL_SEVERITY, Priority.CRITICAL, L2),
        (EscalationTrigger.AUTO_FIX_FAILED, Priority.HIGH, L2),
    ])
    def test_ladder(self, make_context, trigger, priority, expected):
        assert EscalationPolicy.determine_level(trigger, priority, make_context()) == expected

    def test_high_impact_overrides_trigger(self, make_context):
        context = make_context(impact_level=ImpactLevel.HIGH)
        level = EscalationPolicy.determine_level(
            EscalationTrigger.MANUAL_REQUEST, Priority.LOW, context
        )
        assert level == L5

    @pytest.mark.parametrize("attempts,expected", [(0, L3), (2, L3), (3, L4), (5, L4)])
    def test_auto_fix_failed_on_critical(self, make_context, attempts, expected):
        level = EscalationPolicy.determine_level(
            EscalationTrigger.AUTO_FIX_FAILED, Priority.CRITICAL, make_context(attempts=attempts)
        )
        assert level == expected

    def test_retry_limit_is_configurable(self, make_context):
        level = EscalationPolicy.determine_level(
            EscalationTrigger.AUTO_FIX_FAILED, Priority.CRITICAL,
            make_context(attempts=1), auto_retry_limit=1,
        )
        assert level == L4

    def test_repeatable(self, make_context):
        context = make_context(attempts=3)
        first = EscalationPolicy.determine_level(
            EscalationTrigger.AUTO_FIX_FAILED, Priority.CRITICAL, context
        )
        second = EscalationPolicy.determine_level(
            EscalationTrigger.AUTO_FIX_FAILED, Priority.CRITICAL, context
        )
        assert first == second == L4


class TestNextLevel:

    def test_walks_up(self):
        assert EscalationPolicy.next_level(EscalationLevel.L1_AUTO) == L2
        assert EscalationPolicy.next_level(L4) == L5

    def test_top_of_ladder(self):
        assert EscalationPolicy.next_level(L5) is None


class TestDescribe:

    def test_auto_fix_failed(self, make_context):
        text = EscalationPolicy.describe(
            EscalationTrigger.AUTO_FIX_FAILED, make_context(message="boom", attempts=2)
        )
        assert text == "Auto-fix failed (2 attempts): boom"

    def test_repeated_failures(self, make_context):
        text = EscalationPolicy.describe(
            EscalationTrigger.REPEATED_FAILURES, make_context(components=["motor", "gps"])
        )
        assert text == "Repeated failures (affecting motor, gps)"

    def test_safety_critical(self, make_context):
        text = EscalationPolicy.describe(
            EscalationTrigger.SAFETY_CRITICAL,
            make_context(message="boom", impact_level=ImpactLevel.HIGH),
        )
        assert text == "Safety critical issue: boom - impact level: HIGH"

    @pytest.mark.parametrize("trigger,prefix", [
        (EscalationTrigger.TIMEOUT_NO_RESPONSE, "No response timeout"),
        (EscalationTrigger.TIMEOUT_NO_PROGRESS, "No progress timeout"),
        (EscalationTrigger.CRITICAL_SEVERITY, "Critical severity issue"),
        (EscalationTrigger.MANUAL_REQUEST, "Manual escalation request"),
    ])
    def test_message_templates(self, make_context, trigger, prefix):
        assert EscalationPolicy.describe(trigger, make_context(message="boom")) == f"{prefix}: boom"


class TestScoreAgent:

    @pytest.fixture
    def drone_agent(self) -> CustomerServiceAgent:
        return CustomerServiceAgent(
            id="cs-9",
            name="Drone Expert",
            email="drone@example.com",
            availability=AgentAvailability(max_concurrent_cases=4, current_cases=1),
            expertise=AgentExpertise(specializations=["Drones"]),
            performance=AgentPerformance(resolution_rate=80, customer_satisfaction=4.0),
        )

    def test_exact_match(self, drone_agent):
        # 40 + 30 * 0.75 + 15 * 0.8 + 15 * 0.8
        assert EscalationPolicy.score_agent(drone_agent, SystemType.DRONE) == pytest.approx(86.5)

    def test_no_match(self, drone_agent):
        score = EscalationPolicy.score_agent(drone_agent, SystemType.AUTONOMOUS_VEHICLE)
        assert score == pytest.approx(46.5)

    def test_generic_match(self, agents):
        sarah = agents[0]
        assert EscalationPolicy.score_agent(sarah, SystemType.AUTOMATED_SYSTEM) == pytest.approx(
            30 + 30 + 15 * 0.92 + 15 * 4.7 / 5
        )


class TestEntities:

    def test_agent_snapshot_is_plain_member(self, agents):
        member = agents[0].to_member()
        assert type(member).__name__ == "TeamMember"
        assert member.id == "cs-001"

    def test_agent_case_counter_floors_at_zero(self):
        availability = AgentAvailability(max_concurrent_cases=2)
        availability.release_case()
        assert availability.current_cases == 0
        availability.take_case()
        availability.take_case()
        assert not availability.has_capacity
        assert availability.load_ratio == 1.0

    @pytest.mark.parametrize("max_cases", [0, -1])
    def test_agent_needs_positive_case_limit(self, max_cases):
        with pytest.raises(ValidationException):
            AgentAvailability(max_concurrent_cases=max_cases)


    def test_context_with_message_copies(self, make_context):
        context = make_context(message="original", attempts=1)
        copy = context.with_message("changed")

        assert copy.error_details.message == "changed"
        assert context.error_details.message == "original"
        assert copy.auto_fix_attempts == context.auto_fix_attempts

    def test_context_to_dict(self, make_context):
        data = make_context(attempts=1).to_dict()

        assert data["system_type"] == "GENERAL"
        assert data["environment"] == "PRODUCTION"
        assert data["error_details"]["impact_level"] == "MEDIUM"
        assert data["auto_fix_attempts"][0]["attempt_number"] == 1
        assert data["business_impact"] is None

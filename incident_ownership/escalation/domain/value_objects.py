"""
Escalation Value Objects
========================

Stateless escalation policy: which tier an escalation goes to, how it is
described, and how customer-service agents are ranked for it.

Nothing here touches stores or counters, so level determination can be
called any number of times with the same answer.
"""

from typing import Mapping, Optional

from incident_ownership.config import (
    ESCALATION_LEVEL_ORDER,
    EscalationLevel,
    EscalationTrigger,
    ImpactLevel,
    Priority,
    SystemType,
)
from incident_ownership.escalation.domain.entities import (
    CustomerServiceAgent,
    EscalationContext,
)

# Specialization an agent needs for an exact domain match
SYSTEM_TYPE_SPECIALIZATIONS: Mapping[SystemType, str] = {
    SystemType.DRONE: "Drones",
    SystemType.AUTONOMOUS_VEHICLE: "Autonomous Vehicles",
}

GENERIC_SPECIALIZATION = "Autonomous Systems"

DESCRIPTION_TEMPLATES: Mapping[EscalationTrigger, str] = {
    EscalationTrigger.AUTO_FIX_FAILED: "Auto-fix failed ({attempts} attempts): {message}",
    EscalationTrigger.TIMEOUT_NO_RESPONSE: "No response timeout: {message}",
    EscalationTrigger.TIMEOUT_NO_PROGRESS: "No progress timeout: {message}",
    EscalationTrigger.CRITICAL_SEVERITY: "Critical severity issue: {message}",
    EscalationTrigger.REPEATED_FAILURES: "Repeated failures (affecting {components})",
    EscalationTrigger.SAFETY_CRITICAL: (
        "Safety critical issue: {message} - impact level: {impact}"
    ),
    EscalationTrigger.MANUAL_REQUEST: "Manual escalation request: {message}",
}


class EscalationPolicy:
    """
    Pure escalation rules.

    Stateless utility class - the level ladder, description templates and
    agent scoring live here so the engine only orchestrates.
    """

    SPECIALIZATION_EXACT = 40
    SPECIALIZATION_GENERIC = 30
    LOAD_WEIGHT = 30
    RESOLUTION_RATE_WEIGHT = 15
    SATISFACTION_WEIGHT = 15

    @staticmethod
    def determine_level(
        trigger: EscalationTrigger,
        priority: Priority,
        context: EscalationContext,
        auto_retry_limit: int = 3
    ) -> EscalationLevel:
        """
        Responder tier for a new escalation; first matching rule wins.

        1. safety critical, or high impact            -> L5
        2. auto-fix failed on a CRITICAL incident     -> L4 once retries are
           used up, else L3
        3. repeated failures                          -> L3 if CRITICAL/HIGH, else L2
        4. response/progress timeouts                 -> L3 if CRITICAL, else L2
        5. manual request                             -> L3
        6. anything else                              -> L2
        """
        if (
            trigger == EscalationTrigger.SAFETY_CRITICAL
            or context.error_details.impact_level == ImpactLevel.HIGH
        ):
            return EscalationLevel.L5_CUSTOMER_SERVICE

        if trigger == EscalationTrigger.AUTO_FIX_FAILED and priority == Priority.CRITICAL:
            if len(context.auto_fix_attempts) >= auto_retry_limit:
                return EscalationLevel.L4_SENIOR_ENGINEER
            return EscalationLevel.L3_SUPPORT_ENGINEER

        if trigger == EscalationTrigger.REPEATED_FAILURES:
            if priority in (Priority.CRITICAL, Priority.HIGH):
                return EscalationLevel.L3_SUPPORT_ENGINEER
            return EscalationLevel.L2_TEAM_LEAD

        if trigger in (
            EscalationTrigger.TIMEOUT_NO_RESPONSE,
            EscalationTrigger.TIMEOUT_NO_PROGRESS,
        ):
            if priority == Priority.CRITICAL:
                return EscalationLevel.L3_SUPPORT_ENGINEER
            return EscalationLevel.L2_TEAM_LEAD

        if trigger == EscalationTrigger.MANUAL_REQUEST:
            return EscalationLevel.L3_SUPPORT_ENGINEER

        return EscalationLevel.L2_TEAM_LEAD

    @staticmethod
    def next_level(level: EscalationLevel) -> Optional[EscalationLevel]:
        """The tier above ``level``, or None at the top of the ladder."""
        index = ESCALATION_LEVEL_ORDER.index(level)
        if index + 1 >= len(ESCALATION_LEVEL_ORDER):
            return None
        return ESCALATION_LEVEL_ORDER[index + 1]

    @staticmethod
    def describe(trigger: EscalationTrigger, context: EscalationContext) -> str:
        details = context.error_details
        return DESCRIPTION_TEMPLATES[trigger].format(
            attempts=len(context.auto_fix_attempts),
            message=details.message,
            components=", ".join(details.affected_components),
            impact=details.impact_level.value,
        )

    @staticmethod
    def score_agent(agent: CustomerServiceAgent, system_type: SystemType) -> float:
        """
        Routing score of an agent for an escalation on ``system_type``.

        Specialization (40 exact domain, 30 generic autonomy, else 0)
        + 30 * spare capacity + 15 * resolution rate + 15 * satisfaction.
        """
        specializations = agent.expertise.specializations
        exact = SYSTEM_TYPE_SPECIALIZATIONS.get(system_type)

        score = 0.0
        if exact is not None and exact in specializations:
            score += EscalationPolicy.SPECIALIZATION_EXACT
        elif GENERIC_SPECIALIZATION in specializations:
            score += EscalationPolicy.SPECIALIZATION_GENERIC

        score += EscalationPolicy.LOAD_WEIGHT * (1 - agent.availability.load_ratio)

        performance = agent.performance
        score += EscalationPolicy.RESOLUTION_RATE_WEIGHT * performance.resolution_rate / 100
        score += EscalationPolicy.SATISFACTION_WEIGHT * performance.customer_satisfaction / 5
        return score

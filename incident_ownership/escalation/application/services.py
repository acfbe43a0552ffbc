"""
Escalation Application Services
===============================

EscalationEngine raises incidents to responder tiers, routes top-tier
escalations to customer-service agents and keeps each agent's case count
in step with the escalations it holds.

Lookups by unknown ID return None rather than raising.
"""

import time
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
from uuid import uuid4

from incident_ownership.assignment.domain import TeamMember
from incident_ownership.config import (
    AgentStatus,
    EscalationLevel,
    EscalationStatus,
    EscalationTrigger,
    Priority,
)
from incident_ownership.escalation.application.dto import EscalationStatistics
from incident_ownership.escalation.application.interfaces import (
    IEscalationNotifier,
    IEscalationStore,
)
from incident_ownership.escalation.domain import (
    CustomerServiceAgent,
    EscalationContext,
    EscalationEvent,
    EscalationPolicy,
    EscalationResolution,
)
from incident_ownership.shared.infrastructure.logging import get_context_logger, get_logger

logger = get_logger(__name__)

_RELEASING_STATUSES = (EscalationStatus.RESOLVED, EscalationStatus.CLOSED)


@dataclass(frozen=True)
class EscalationEngineConfig:
    auto_retry_limit: int = 3
    enable_smart_routing: bool = True
    notification_enabled: bool = True


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class EscalationEngine:
    """
    Creates and tracks EscalationEvents.

    Flow for a new escalation:
    1. The level comes from EscalationPolicy.determine_level
    2. The event is stored as PENDING
    3. L5 events are routed to the best customer-service agent, if any
    4. The notifier is called when notifications are enabled

    The agent roster is owned by the engine; agents are handed out as
    copies.
    """

    def __init__(
        self,
        escalation_store: IEscalationStore,
        agents: Iterable[CustomerServiceAgent] = (),
        notifier: Optional[IEscalationNotifier] = None,
        config: Optional[EscalationEngineConfig] = None
    ):
        self._store = escalation_store
        self._agents: Dict[str, CustomerServiceAgent] = {
            agent.id: deepcopy(agent) for agent in agents
        }
        self._notifier = notifier
        self.config = config or EscalationEngineConfig()
        # escalation ID -> agent ID holding one of that agent's cases
        self._held_cases: Dict[str, str] = {}

    # ========== Commands ==========

    def create_escalation(
        self,
        incident_id: str,
        trigger: EscalationTrigger,
        priority: Priority,
        context: EscalationContext,
        assignment_id: Optional[str] = None
    ) -> EscalationEvent:
        level = EscalationPolicy.determine_level(
            trigger, priority, context, self.config.auto_retry_limit
        )
        return self._open_escalation(incident_id, trigger, priority, context, level, assignment_id)

    def update_escalation_status(
        self,
        escalation_id: str,
        status: EscalationStatus,
        assigned_to: Optional[TeamMember] = None
    ) -> Optional[EscalationEvent]:
        """
        Move an escalation to ``status``, optionally replacing its assignee.

        On L5 escalations the assigned agent holds one case while the event
        is ASSIGNED or gets a new assignee; RESOLVED/CLOSED gives it back.
        """
        event = self._store.get(escalation_id)
        if event is None:
            logger.debug("Escalation not found", extra={"escalation_id": escalation_id})
            return None

        previous = event.status
        event.status = status
        event.updated_at = datetime.now(timezone.utc)
        if assigned_to is not None:
            event.assigned_to = self._snapshot(assigned_to)

        if event.level == EscalationLevel.L5_CUSTOMER_SERVICE:
            if status in _RELEASING_STATUSES:
                self._release_case(event.id)
            elif event.assigned_to is not None and (
                status == EscalationStatus.ASSIGNED or assigned_to is not None
            ):
                self._hold_case(event.id, event.assigned_to.id)

        self._store.save(event)
        logger.info(
            "Escalation status updated",
            extra={
                "escalation_id": escalation_id,
                "from_status": previous.value,
                "to_status": status.value,
                "assigned_to": event.assigned_to.id if event.assigned_to else None,
            }
        )
        return event

    def resolve_escalation(
        self,
        escalation_id: str,
        resolution: EscalationResolution
    ) -> Optional[EscalationEvent]:
        event = self._store.get(escalation_id)
        if event is None:
            logger.debug("Escalation not found", extra={"escalation_id": escalation_id})
            return None

        now = datetime.now(timezone.utc)
        event.status = EscalationStatus.RESOLVED
        event.updated_at = now
        if event.resolved_at is None:
            event.resolved_at = now
        event.resolution = resolution
        self._release_case(event.id)

        self._store.save(event)
        logger.info(
            "Escalation resolved",
            extra={
                "escalation_id": escalation_id,
                "solution_type": resolution.solution_type.value,
                "implemented_by": resolution.implemented_by.id,
            }
        )
        return event

    def escalate_further(self, escalation_id: str, reason: str) -> Optional[EscalationEvent]:
        """
        Raise an escalation one tier as a new MANUAL_REQUEST event.

        The original event is left as it is. Returns None for unknown IDs
        and for events already at the top tier.
        """
        current = self._store.get(escalation_id)
        if current is None:
            logger.debug("Escalation not found", extra={"escalation_id": escalation_id})
            return None

        next_level = EscalationPolicy.next_level(current.level)
        if next_level is None:
            logger.info(
                "Escalation already at highest level",
                extra={"escalation_id": escalation_id, "level": current.level.value}
            )
            return None

        context = current.context.with_message(
            f"Escalated from {current.level.value}: {reason}"
        )
        return self._open_escalation(
            current.incident_id,
            EscalationTrigger.MANUAL_REQUEST,
            current.priority,
            context,
            next_level,
            current.assignment_id,
        )

    # ========== Queries ==========

    def get_escalation(self, escalation_id: str) -> Optional[EscalationEvent]:
        return self._store.get(escalation_id)

    def get_escalations_by_incident(self, incident_id: str) -> List[EscalationEvent]:
        """Newest first; events created in the same instant keep newest-inserted first."""
        events = list(reversed(self._store.list_by_incident(incident_id)))
        return sorted(events, key=lambda e: e.created_at, reverse=True)

    def get_available_customer_service_agents(self) -> List[CustomerServiceAgent]:
        """AVAILABLE agents, least loaded first."""
        available = [
            agent for agent in self._agents.values()
            if agent.availability.status == AgentStatus.AVAILABLE
        ]
        available.sort(key=lambda agent: agent.availability.load_ratio)
        return [deepcopy(agent) for agent in available]

    def get_customer_service_agent(self, agent_id: str) -> Optional[CustomerServiceAgent]:
        agent = self._agents.get(agent_id)
        return deepcopy(agent) if agent else None

    def get_escalation_statistics(self, start: datetime, end: datetime) -> EscalationStatistics:
        """Counts over events created within [start, end], inclusive."""
        start, end = _as_utc(start), _as_utc(end)
        stats = EscalationStatistics(start=start, end=end)
        resolution_minutes: List[float] = []

        for event in self._store.list_all():
            if not start <= event.created_at <= end:
                continue
            stats.total += 1
            stats.by_level[event.level] += 1
            stats.by_trigger[event.trigger] += 1
            stats.by_status[event.status] += 1
            if event.resolution is not None:
                stats.by_solution_type[event.resolution.solution_type] += 1
            if event.resolution_minutes is not None:
                resolution_minutes.append(event.resolution_minutes)

        if resolution_minutes:
            stats.average_resolution_time = sum(resolution_minutes) / len(resolution_minutes)
        return stats

    # ========== Internals ==========

    def _open_escalation(
        self,
        incident_id: str,
        trigger: EscalationTrigger,
        priority: Priority,
        context: EscalationContext,
        level: EscalationLevel,
        assignment_id: Optional[str]
    ) -> EscalationEvent:
        now = datetime.now(timezone.utc)
        event = EscalationEvent(
            id=f"esc-{int(time.time() * 1000)}-{uuid4().hex[:9]}",
            incident_id=incident_id,
            assignment_id=assignment_id,
            trigger=trigger,
            level=level,
            status=EscalationStatus.PENDING,
            priority=priority,
            description=EscalationPolicy.describe(trigger, context),
            context=context,
            created_at=now,
            updated_at=now,
        )

        if self.config.enable_smart_routing:
            self._route(event)

        self._store.save(event)
        get_context_logger(__name__, incident_id).info(
            "Escalation created",
            extra={
                "escalation_id": event.id,
                "incident_id": incident_id,
                "assignment_id": assignment_id,
                "trigger": trigger.value,
                "level": level.value,
                "priority": priority.value,
                "assigned_to": event.assigned_to.id if event.assigned_to else None,
            }
        )

        if self.config.notification_enabled and self._notifier is not None:
            self._notify(event)
        return event

    def _route(self, event: EscalationEvent) -> None:
        """Assign an L5 event to the best-scoring agent with spare capacity."""
        if event.level != EscalationLevel.L5_CUSTOMER_SERVICE:
            return

        candidates = [a for a in self._agents.values() if a.availability.has_capacity]
        if not candidates:
            logger.warning(
                "No customer service agent available",
                extra={"escalation_id": event.id, "incident_id": event.incident_id}
            )
            return

        system_type = event.context.system_type
        best = max(candidates, key=lambda agent: EscalationPolicy.score_agent(agent, system_type))

        event.assigned_to = best.to_member()
        event.status = EscalationStatus.ASSIGNED
        self._hold_case(event.id, best.id)
        logger.info(
            "Escalation routed to customer service",
            extra={
                "escalation_id": event.id,
                "agent_id": best.id,
                "system_type": system_type.value,
                "agent_cases": best.availability.current_cases,
            }
        )

    def _hold_case(self, escalation_id: str, agent_id: str) -> None:
        """Count the escalation against ``agent_id``; idempotent per escalation."""
        holder = self._held_cases.get(escalation_id)
        if holder == agent_id:
            return
        if holder is not None:
            self._release_case(escalation_id)

        agent = self._agents.get(agent_id)
        if agent is None:
            return
        agent.availability.take_case()
        self._held_cases[escalation_id] = agent_id

    def _release_case(self, escalation_id: str) -> None:
        agent_id = self._held_cases.pop(escalation_id, None)
        if agent_id is None:
            return
        agent = self._agents.get(agent_id)
        if agent is not None:
            agent.availability.release_case()

    def _notify(self, event: EscalationEvent) -> None:
        try:
            self._notifier.notify(deepcopy(event))
        except Exception as e:
            logger.error(
                "Escalation notification failed",
                extra={"escalation_id": event.id, "error": str(e)},
                exc_info=True
            )

    @staticmethod
    def _snapshot(member: TeamMember) -> TeamMember:
        if isinstance(member, CustomerServiceAgent):
            return member.to_member()
        return member

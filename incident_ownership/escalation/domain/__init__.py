"""
Escalation Domain Layer
=======================

Domain layer for the escalation module.

Contains:
- Entities: EscalationEvent, EscalationContext, EscalationResolution,
  CustomerServiceAgent and their parts
- Value Objects: EscalationPolicy (level ladder, descriptions, agent scoring)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from incident_ownership.escalation.domain.entities import (
    ErrorDetails,
    AutoFixAttempt,
    BusinessImpact,
    EscalationContext,
    ResolutionChanges,
    KnowledgeBaseArticle,
    EscalationResolution,
    AgentAvailability,
    AgentExpertise,
    AgentPerformance,
    CustomerServiceAgent,
    EscalationEvent,
)
from incident_ownership.escalation.domain.value_objects import (
    EscalationPolicy,
    DESCRIPTION_TEMPLATES,
    SYSTEM_TYPE_SPECIALIZATIONS,
    GENERIC_SPECIALIZATION,
)

__all__ = [
    # Entities
    "ErrorDetails",
    "AutoFixAttempt",
    "BusinessImpact",
    "EscalationContext",
    "ResolutionChanges",
    "KnowledgeBaseArticle",
    "EscalationResolution",
    "AgentAvailability",
    "AgentExpertise",
    "AgentPerformance",
    "CustomerServiceAgent",
    "EscalationEvent",
    # Value Objects
    "EscalationPolicy",
    "DESCRIPTION_TEMPLATES",
    "SYSTEM_TYPE_SPECIALIZATIONS",
    "GENERIC_SPECIALIZATION",
]

"""
Escalation Infrastructure Layer
===============================

Concrete implementations of the escalation interfaces.
"""

from incident_ownership.escalation.infrastructure.repositories import InMemoryEscalationStore
from incident_ownership.escalation.infrastructure.external import (
    LoggingEscalationNotifier,
    EscalationScheduler,
)

__all__ = [
    "InMemoryEscalationStore",
    "LoggingEscalationNotifier",
    "EscalationScheduler",
]

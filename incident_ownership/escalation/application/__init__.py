"""
Escalation Application Layer
============================

Application layer for the escalation module.

Contains:
- Services: EscalationEngine
- Monitor: EscalationMonitor (governance timeouts -> escalations)
- DTOs: EscalationStatistics
- Interfaces: Store and notifier abstractions
"""

from incident_ownership.escalation.application.dto import EscalationStatistics
from incident_ownership.escalation.application.interfaces import (
    IEscalationStore,
    IEscalationNotifier,
)
from incident_ownership.escalation.application.services import (
    EscalationEngine,
    EscalationEngineConfig,
)
from incident_ownership.escalation.application.monitor import EscalationMonitor

__all__ = [
    # DTOs
    "EscalationStatistics",
    # Services
    "EscalationEngine",
    "EscalationEngineConfig",
    "EscalationMonitor",
    # Interfaces
    "IEscalationStore",
    "IEscalationNotifier",
]

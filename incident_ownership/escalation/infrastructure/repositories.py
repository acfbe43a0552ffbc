"""
Escalation Infrastructure Repositories
======================================

In-memory implementation of the escalation store.
"""

import threading
from copy import deepcopy
from typing import Dict, List, Optional

from incident_ownership.escalation.application.interfaces import IEscalationStore
from incident_ownership.escalation.domain import EscalationEvent


class InMemoryEscalationStore(IEscalationStore):
    """Process-local escalation storage keyed by escalation ID."""

    def __init__(self):
        self._events: Dict[str, EscalationEvent] = {}
        self._by_incident: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def get(self, escalation_id: str) -> Optional[EscalationEvent]:
        with self._lock:
            event = self._events.get(escalation_id)
            return deepcopy(event) if event else None

    def save(self, event: EscalationEvent) -> None:
        with self._lock:
            if event.id not in self._events:
                self._by_incident.setdefault(event.incident_id, []).append(event.id)
            self._events[event.id] = deepcopy(event)

    def list_all(self) -> List[EscalationEvent]:
        with self._lock:
            return [deepcopy(e) for e in self._events.values()]

    def list_by_incident(self, incident_id: str) -> List[EscalationEvent]:
        with self._lock:
            return [
                deepcopy(self._events[event_id])
                for event_id in self._by_incident.get(incident_id, [])
            ]

"""
Escalation Repository Interfaces
================================

Abstractions the escalation engine depends on (Dependency Inversion).
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from incident_ownership.escalation.domain import EscalationEvent


class IEscalationStore(ABC):
    """Interface for escalation event data access."""

    @abstractmethod
    def get(self, escalation_id: str) -> Optional[EscalationEvent]:
        """Get escalation event by ID."""

    @abstractmethod
    def save(self, event: EscalationEvent) -> None:
        """Insert or replace an escalation event."""

    @abstractmethod
    def list_all(self) -> List[EscalationEvent]:
        """List events in insertion order."""

    @abstractmethod
    def list_by_incident(self, incident_id: str) -> List[EscalationEvent]:
        """List an incident's events in insertion order."""


class IEscalationNotifier(ABC):
    """Interface for telling responders about a new escalation."""

    @abstractmethod
    def notify(self, event: EscalationEvent) -> None:
        """Deliver a notification for ``event``."""

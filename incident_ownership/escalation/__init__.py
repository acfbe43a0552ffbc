"""
Escalation Module
=================

Bounded context for raising incidents to responder tiers.

- domain: escalation events, contexts, agents and the level policy
- application: EscalationEngine, EscalationMonitor
- infrastructure: in-memory store, logging notifier, scheduler
"""

__version__ = "1.0.0"

"""
Incident Ownership
==================

Assigns operational incidents to the best-suited team member, tracks the
assignment against SLA timers, and escalates through an ordered chain of
responders.

Bounded contexts:
- assignment: responsibility matrix, workload balancing, SLA governance
- escalation: escalation levels, customer-service routing, monitoring
"""

__version__ = "1.0.0"

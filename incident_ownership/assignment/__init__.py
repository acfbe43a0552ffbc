"""
Assignment Module
=================

Bounded Context for incident ownership.

Responsibilities:
- Map problem types to responsible teams
- Score and select the best-suited owner for an incident
- Track assignments through ASSIGNED -> ACKNOWLEDGED -> IN_PROGRESS -> RESOLVED
- Audit SLA compliance and detect when escalation is needed
"""

__version__ = "1.0.0"

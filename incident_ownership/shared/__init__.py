"""
Shared Kernel Module
====================

This module contains shared infrastructure used across both bounded
contexts (Assignment and Escalation).

Architecture Pattern: Modular Monolith
- Each module (assignment, escalation) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add business logic from Assignment or Escalation to shared kernel.
"""

__version__ = "1.0.0"

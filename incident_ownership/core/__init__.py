"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from incident_ownership.core.exceptions import (
    ApplicationException,
    DomainException,
    RepositoryException,
    ValidationException,
    ConfigurationException,
    ResourceNotFoundException,
    AssignmentNotFoundException,
    MemberNotFoundException,
    InvalidStateException,
    EmptyCandidateSetException,
    NoAvailableMembersException,
)

__all__ = [
    "ApplicationException",
    "DomainException",
    "RepositoryException",
    "ValidationException",
    "ConfigurationException",
    "ResourceNotFoundException",
    "AssignmentNotFoundException",
    "MemberNotFoundException",
    "InvalidStateException",
    "EmptyCandidateSetException",
    "NoAvailableMembersException",
]

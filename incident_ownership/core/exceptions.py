"""
Core Exceptions
================

Custom exceptions for the ownership core following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries. Mapping them to transport-level
status codes is the caller's job.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class AssignmentNotFoundException(ResourceNotFoundException):
    """Raised for operations on an unknown assignment id."""

    def __init__(self, assignment_id: str):
        super().__init__("Assignment", assignment_id, {"assignment_id": assignment_id})


class MemberNotFoundException(ResourceNotFoundException):
    """Raised when a team member id is not in the responsibility matrix."""

    def __init__(self, member_id: str):
        super().__init__("Member", member_id, {"member_id": member_id})


class InvalidStateException(DomainException):
    """Exception when an operation cannot run in the current state."""


class EmptyCandidateSetException(InvalidStateException):
    """Raised when an assignee must be picked from no candidates."""

    def __init__(self, details: Optional[dict] = None):
        super().__init__("No candidates available for assignment", details)


class NoAvailableMembersException(InvalidStateException):
    """Raised when the relevant teams contribute no members for an incident."""

    def __init__(self, incident_id: str, problem_type: str):
        self.incident_id = incident_id
        self.problem_type = problem_type
        super().__init__(
            f"No available members for assignment of incident {incident_id}",
            {"incident_id": incident_id, "problem_type": problem_type}
        )

"""
Configuration Module
====================

Application settings and configuration management using Pydantic.

Also holds the enumerations shared by the assignment and escalation
bounded contexts.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="incident-ownership", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Root logging level")

    # ========== Ownership Configuration ==========
    ownership_config_path: Path = Field(
        default=Path("ownership_config.yaml"),
        description="Path to the responsibility matrix / SLA YAML file"
    )

    # ========== Workload Balancing ==========
    max_active_assignments: int = Field(
        default=10,
        description="Active assignments at which a member counts as fully loaded",
        ge=1
    )
    availability_core_start_hour: int = Field(default=9, ge=0, le=23)
    availability_core_end_hour: int = Field(default=18, ge=1, le=24)
    availability_buffer_hours: int = Field(
        default=2,
        description="Hours either side of core hours scored as partially available",
        ge=0,
        le=12
    )

    # ========== Escalation ==========
    escalation_auto_retry_limit: int = Field(
        default=3,
        description="Auto-fix attempts after which a critical failure goes to senior engineers",
        ge=1
    )
    escalation_smart_routing: bool = Field(
        default=True,
        description="Route customer-service escalations to an agent automatically"
    )
    escalation_notifications: bool = Field(
        default=True,
        description="Invoke the notification hook when an escalation is created"
    )
    escalation_monitor_interval: int = Field(
        default=60,
        description="Seconds between escalation monitor runs (0 disables the scheduler)",
        ge=0
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @model_validator(mode="after")
    def validate_core_hours(self) -> "Settings":
        """Core hours must form a non-empty window."""
        if self.availability_core_start_hour >= self.availability_core_end_hour:
            raise ValueError("availability core start hour must be before end hour")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class ProblemType(str, Enum):
    """Incident categories routed through the responsibility matrix."""
    FRONTEND_ERROR = "FRONTEND_ERROR"
    BACKEND_API = "BACKEND_API"
    DATABASE_ISSUE = "DATABASE_ISSUE"
    PERFORMANCE = "PERFORMANCE"
    SECURITY = "SECURITY"
    INFRASTRUCTURE = "INFRASTRUCTURE"


class Priority(str, Enum):
    """Incident priority levels."""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class AssignmentStatus(str, Enum):
    """Assignment lifecycle statuses."""
    ASSIGNED = "ASSIGNED"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    IN_PROGRESS = "IN_PROGRESS"
    ESCALATED = "ESCALATED"
    RESOLVED = "RESOLVED"


class EscalationTrigger(str, Enum):
    """Reasons an escalation is raised."""
    AUTO_FIX_FAILED = "AUTO_FIX_FAILED"
    TIMEOUT_NO_RESPONSE = "TIMEOUT_NO_RESPONSE"
    TIMEOUT_NO_PROGRESS = "TIMEOUT_NO_PROGRESS"
    CRITICAL_SEVERITY = "CRITICAL_SEVERITY"
    REPEATED_FAILURES = "REPEATED_FAILURES"
    SAFETY_CRITICAL = "SAFETY_CRITICAL"
    MANUAL_REQUEST = "MANUAL_REQUEST"


class EscalationLevel(str, Enum):
    """Responder tiers, lowest first."""
    L1_AUTO = "L1_AUTO"
    L2_TEAM_LEAD = "L2_TEAM_LEAD"
    L3_SUPPORT_ENGINEER = "L3_SUPPORT_ENGINEER"
    L4_SENIOR_ENGINEER = "L4_SENIOR_ENGINEER"
    L5_CUSTOMER_SERVICE = "L5_CUSTOMER_SERVICE"


class EscalationStatus(str, Enum):
    """Escalation lifecycle statuses."""
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class SolutionType(str, Enum):
    """How an escalation was resolved."""
    AUTOMATED = "AUTOMATED"
    HUMAN_ASSISTED = "HUMAN_ASSISTED"
    MANUAL_INTERVENTION = "MANUAL_INTERVENTION"
    WORKAROUND = "WORKAROUND"
    ESCALATED_FURTHER = "ESCALATED_FURTHER"


class SystemType(str, Enum):
    """Kind of system an escalation concerns."""
    DRONE = "DRONE"
    AUTONOMOUS_VEHICLE = "AUTONOMOUS_VEHICLE"
    AUTOMATED_SYSTEM = "AUTOMATED_SYSTEM"
    GENERAL = "GENERAL"


class DeploymentEnvironment(str, Enum):
    """Environment the failing system runs in."""
    PRODUCTION = "PRODUCTION"
    STAGING = "STAGING"
    DEVELOPMENT = "DEVELOPMENT"


class ImpactLevel(str, Enum):
    """Impact of the reported error."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class AgentStatus(str, Enum):
    """Customer-service agent presence."""
    AVAILABLE = "AVAILABLE"
    BUSY = "BUSY"
    OFFLINE = "OFFLINE"


# Ordered lowest to highest; escalate_further walks this list.
ESCALATION_LEVEL_ORDER = [
    EscalationLevel.L1_AUTO,
    EscalationLevel.L2_TEAM_LEAD,
    EscalationLevel.L3_SUPPORT_ENGINEER,
    EscalationLevel.L4_SENIOR_ENGINEER,
    EscalationLevel.L5_CUSTOMER_SERVICE,
]

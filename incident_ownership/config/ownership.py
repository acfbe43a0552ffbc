"""
Ownership Configuration
=======================

Responsibility matrix, SLA targets, escalation rules and customer-service
roster loaded from YAML.

Every section has a built-in default so a missing or partial file still
yields a complete configuration.
"""

import threading
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from incident_ownership.config import AgentStatus, Priority, ProblemType
from incident_ownership.core import ConfigurationException
from incident_ownership.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Defaults ==========

_DEFAULT_SLA_TARGETS: Dict[str, Dict[str, int]] = {
    "CRITICAL": {"response_time": 5, "resolution_time": 60},
    "HIGH": {"response_time": 15, "resolution_time": 240},
    "MEDIUM": {"response_time": 60, "resolution_time": 480},
    "LOW": {"response_time": 240, "resolution_time": 1440},
}

_DEFAULT_ESCALATION_RULES: Dict[str, Dict[str, int]] = {
    "CRITICAL": {"no_response_timeout": 5, "no_progress_timeout": 15, "unresolved_timeout": 60},
    "HIGH": {"no_response_timeout": 15, "no_progress_timeout": 30, "unresolved_timeout": 240},
    "MEDIUM": {"no_response_timeout": 60, "no_progress_timeout": 120, "unresolved_timeout": 480},
    "LOW": {"no_response_timeout": 240, "no_progress_timeout": 480, "unresolved_timeout": 1440},
}

_DEFAULT_EXPERTISE_MAP: Dict[str, List[str]] = {
    "FRONTEND_ERROR": ["frontend", "ui"],
    "BACKEND_API": ["backend", "api"],
    "DATABASE_ISSUE": ["backend", "database"],
    "PERFORMANCE": ["devops", "backend"],
    "SECURITY": ["security", "backend"],
    "INFRASTRUCTURE": ["devops", "infrastructure"],
}

_DEFAULT_TEAMS: List[Dict[str, Any]] = [
    {
        "name": "frontend",
        "specialties": ["react", "vue", "typescript", "ui/ux"],
        "timezone": "Asia/Taipei",
        "members": [
            {"id": "alice.chen", "name": "Alice Chen", "email": "alice.chen@slasolve.dev",
             "specialties": ["react", "vue", "typescript", "ui/ux"], "timezone": "Asia/Taipei"},
            {"id": "bob.wang", "name": "Bob Wang", "email": "bob.wang@slasolve.dev",
             "specialties": ["react", "typescript", "performance"], "timezone": "Asia/Taipei"},
            {"id": "carol.liu", "name": "Carol Liu", "email": "carol.liu@slasolve.dev",
             "specialties": ["vue", "ui/ux", "accessibility"], "timezone": "Asia/Taipei"},
        ],
    },
    {
        "name": "backend",
        "specialties": ["node.js", "python", "database", "api"],
        "timezone": "Asia/Taipei",
        "members": [
            {"id": "david.zhang", "name": "David Zhang", "email": "david.zhang@slasolve.dev",
             "specialties": ["node.js", "python", "api", "database"], "timezone": "Asia/Taipei"},
            {"id": "eva.wu", "name": "Eva Wu", "email": "eva.wu@slasolve.dev",
             "specialties": ["node.js", "database", "performance"], "timezone": "Asia/Taipei"},
            {"id": "frank.lin", "name": "Frank Lin", "email": "frank.lin@slasolve.dev",
             "specialties": ["python", "api", "microservices"], "timezone": "Asia/Taipei"},
        ],
    },
    {
        "name": "devops",
        "specialties": ["docker", "kubernetes", "aws", "ci/cd"],
        "timezone": "UTC",
        "members": [
            {"id": "grace.huang", "name": "Grace Huang", "email": "grace.huang@slasolve.dev",
             "specialties": ["docker", "kubernetes", "aws", "ci/cd"], "timezone": "UTC"},
            {"id": "henry.chen", "name": "Henry Chen", "email": "henry.chen@slasolve.dev",
             "specialties": ["kubernetes", "monitoring", "infrastructure"], "timezone": "UTC"},
        ],
    },
    {
        "name": "security",
        "specialties": ["authentication", "encryption", "audit"],
        "timezone": "Asia/Shanghai",
        "members": [
            {"id": "iris.lee", "name": "Iris Lee", "email": "iris.lee@slasolve.dev",
             "specialties": ["authentication", "encryption", "audit"], "timezone": "Asia/Shanghai"},
            {"id": "jack.yang", "name": "Jack Yang", "email": "jack.yang@slasolve.dev",
             "specialties": ["penetration-testing", "security-review", "compliance"],
             "timezone": "Asia/Shanghai"},
        ],
    },
]

_DEFAULT_AGENTS: List[Dict[str, Any]] = [
    {
        "id": "cs-001",
        "name": "Sarah Johnson",
        "email": "sarah.johnson@slasolve.dev",
        "specialties": ["Customer Support", "Technical Support", "Escalation Management"],
        "timezone": "America/New_York",
        "max_concurrent_cases": 5,
        "languages": ["en", "zh-TW"],
        "specializations": ["Drones", "Autonomous Systems", "Emergency Response"],
        "average_response_time": 3,
        "resolution_rate": 92,
        "customer_satisfaction": 4.7,
    },
    {
        "id": "cs-002",
        "name": "Michael Chen",
        "email": "michael.chen@slasolve.dev",
        "specialties": ["Technical Support", "System Integration", "Critical Issues"],
        "timezone": "Asia/Taipei",
        "max_concurrent_cases": 5,
        "languages": ["zh-TW", "en"],
        "specializations": ["Autonomous Vehicles", "Safety Systems", "Performance Optimization"],
        "average_response_time": 2.5,
        "resolution_rate": 95,
        "customer_satisfaction": 4.8,
    },
]


# ========== Section Models ==========

class TeamMemberConfig(BaseModel):
    """A responder entry in the YAML roster."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: str
    specialties: List[str] = Field(default_factory=list)
    timezone: str = "UTC"

    def to_domain(self) -> Any:
        """Convert to domain entity."""
        from incident_ownership.assignment.domain import TeamMember

        return TeamMember(
            id=self.id,
            name=self.name,
            email=self.email,
            specialties=tuple(self.specialties),
            timezone=self.timezone,
        )


class TeamConfig(BaseModel):
    """A functional team."""
    name: str = Field(..., min_length=1)
    members: List[TeamMemberConfig] = Field(default_factory=list)
    specialties: List[str] = Field(default_factory=list)
    timezone: str = "UTC"

    def to_domain(self) -> Any:
        from incident_ownership.assignment.domain import TeamStructure

        return TeamStructure(
            name=self.name,
            members=tuple(member.to_domain() for member in self.members),
            specialties=tuple(self.specialties),
            timezone=self.timezone,
        )


class SLATargetConfig(BaseModel):
    """SLA budgets in minutes for one priority."""
    response_time: int = Field(ge=1)
    resolution_time: int = Field(ge=1)


class EscalationRuleConfig(BaseModel):
    """Escalation timeouts in minutes for one priority."""
    no_response_timeout: int = Field(ge=1)
    no_progress_timeout: int = Field(ge=1)
    unresolved_timeout: int = Field(ge=1)


class CustomerServiceAgentConfig(TeamMemberConfig):
    """A customer-service agent handling L5 escalations."""
    role: Literal["CUSTOMER_SERVICE"] = "CUSTOMER_SERVICE"
    status: AgentStatus = AgentStatus.AVAILABLE
    max_concurrent_cases: int = Field(default=5, ge=1)
    current_cases: int = Field(default=0, ge=0)
    technical: bool = True
    languages: List[str] = Field(default_factory=list)
    specializations: List[str] = Field(default_factory=list)
    average_response_time: float = Field(default=0.0, ge=0, description="Minutes")
    resolution_rate: float = Field(default=0.0, ge=0, le=100, description="Percent")
    customer_satisfaction: float = Field(default=0.0, ge=0, le=5, description="1-5 score")

    def to_domain(self) -> Any:
        from incident_ownership.escalation.domain import (
            AgentAvailability,
            AgentExpertise,
            AgentPerformance,
            CustomerServiceAgent,
        )

        return CustomerServiceAgent(
            id=self.id,
            name=self.name,
            email=self.email,
            specialties=tuple(self.specialties),
            timezone=self.timezone,
            role=self.role,
            availability=AgentAvailability(
                status=self.status,
                max_concurrent_cases=self.max_concurrent_cases,
                current_cases=self.current_cases,
            ),
            expertise=AgentExpertise(
                technical=self.technical,
                languages=tuple(self.languages),
                specializations=tuple(self.specializations),
            ),
            performance=AgentPerformance(
                average_response_time=self.average_response_time,
                resolution_rate=self.resolution_rate,
                customer_satisfaction=self.customer_satisfaction,
            ),
        )


# ========== Root Model ==========

class OwnershipConfig(BaseModel):
    """
    Ownership configuration loaded from YAML.

    This is a value object - immutable and defined by its attributes.
    """
    sla_targets: Dict[Priority, SLATargetConfig] = Field(
        default_factory=lambda: {
            Priority(k): SLATargetConfig(**v) for k, v in _DEFAULT_SLA_TARGETS.items()
        },
        description="SLA targets in minutes by priority"
    )
    escalation_rules: Dict[Priority, EscalationRuleConfig] = Field(
        default_factory=lambda: {
            Priority(k): EscalationRuleConfig(**v) for k, v in _DEFAULT_ESCALATION_RULES.items()
        },
        description="Escalation timeouts in minutes by priority"
    )
    expertise_map: Dict[ProblemType, List[str]] = Field(
        default_factory=lambda: {
            ProblemType(k): list(v) for k, v in _DEFAULT_EXPERTISE_MAP.items()
        },
        description="Team names responsible for each problem type"
    )
    teams: List[TeamConfig] = Field(
        default_factory=lambda: [TeamConfig(**team) for team in _DEFAULT_TEAMS]
    )
    customer_service_agents: List[CustomerServiceAgentConfig] = Field(
        default_factory=lambda: [CustomerServiceAgentConfig(**a) for a in _DEFAULT_AGENTS]
    )

    @field_validator("sla_targets")
    @classmethod
    def fill_sla_targets(cls, v: Dict[Priority, SLATargetConfig]) -> Dict[Priority, SLATargetConfig]:
        """Fill priorities the file leaves out with the built-in targets."""
        for priority in Priority:
            if priority not in v:
                v[priority] = SLATargetConfig(**_DEFAULT_SLA_TARGETS[priority.value])
        return v

    @field_validator("escalation_rules")
    @classmethod
    def fill_escalation_rules(
        cls, v: Dict[Priority, EscalationRuleConfig]
    ) -> Dict[Priority, EscalationRuleConfig]:
        """Fill priorities the file leaves out with the built-in rules."""
        for priority in Priority:
            if priority not in v:
                v[priority] = EscalationRuleConfig(**_DEFAULT_ESCALATION_RULES[priority.value])
        return v

    @field_validator("expertise_map")
    @classmethod
    def fill_expertise_map(cls, v: Dict[ProblemType, List[str]]) -> Dict[ProblemType, List[str]]:
        for problem_type in ProblemType:
            if problem_type not in v:
                v[problem_type] = list(_DEFAULT_EXPERTISE_MAP[problem_type.value])
        return v

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "OwnershipConfig":
        """Member ids must be unique across the whole roster."""
        seen = set()
        for team in self.teams:
            for member in team.members:
                if member.id in seen:
                    raise ValueError(f"duplicate team member id: {member.id}")
                seen.add(member.id)
        agent_ids = [agent.id for agent in self.customer_service_agents]
        if len(agent_ids) != len(set(agent_ids)):
            raise ValueError("duplicate customer service agent id")
        return self

    def sla_target_table(self) -> Dict[Priority, Any]:
        """SLA targets as domain value objects."""
        from incident_ownership.assignment.domain import SLATarget

        return {
            priority: SLATarget(target.response_time, target.resolution_time)
            for priority, target in self.sla_targets.items()
        }

    def escalation_rule_table(self) -> Dict[Priority, Any]:
        """Escalation rules as domain value objects."""
        from incident_ownership.assignment.domain import EscalationRule

        return {
            priority: EscalationRule(
                priority=priority,
                no_response_timeout=rule.no_response_timeout,
                no_progress_timeout=rule.no_progress_timeout,
                unresolved_timeout=rule.unresolved_timeout,
            )
            for priority, rule in self.escalation_rules.items()
        }

    def team_structures(self) -> List[Any]:
        return [team.to_domain() for team in self.teams]

    def agents(self) -> List[Any]:
        return [agent.to_domain() for agent in self.customer_service_agents]


# ========== Loader ==========

class OwnershipConfigManager:
    """
    Thread-safe ownership configuration manager.

    Loads YAML once at startup; ``reload`` re-reads the file and keeps the
    previous configuration when the new one is invalid.
    """

    def __init__(self):
        self._config: Optional[OwnershipConfig] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None

    def load(self, path: Path) -> OwnershipConfig:
        """Initial configuration load."""
        self._path = Path(path)
        config = self._load_from_file(self._path)
        with self._lock:
            self._config = config
        return config

    def _load_from_file(self, path: Path) -> OwnershipConfig:
        """Load and parse YAML config file."""
        if not path.exists():
            logger.warning(f"Ownership config file not found: {path}, using defaults")
            return OwnershipConfig()

        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationException(
                    f"Invalid YAML in ownership config {path}", {"error": str(e)}
                ) from e

        try:
            return OwnershipConfig(**data)
        except ValidationError as e:
            raise ConfigurationException(
                f"Invalid ownership config {path}", {"errors": e.errors()}
            ) from e

    def reload(self) -> bool:
        """Reload configuration from file."""
        if self._path is None:
            return False

        try:
            new_config = self._load_from_file(self._path)
        except ConfigurationException as e:
            logger.error(f"Failed to reload ownership config: {e.message}")
            return False

        with self._lock:
            self._config = new_config
        logger.info("Ownership configuration reloaded successfully")
        return True

    @property
    def config(self) -> OwnershipConfig:
        """Get current configuration."""
        with self._lock:
            if self._config is None:
                raise ConfigurationException("Ownership configuration not loaded")
            return self._config

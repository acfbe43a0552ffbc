"""
Service Container
=================

Composition root: wires stores, engines, governance and the escalation
monitor from Settings and OwnershipConfig.

Usage:
    from incident_ownership.container import build_services

    services = build_services()
    services.start()
    assignment = services.assignment_engine.assign_responsibility(incident)
    ...
    services.shutdown()
"""

from dataclasses import dataclass
from typing import List, Optional

from incident_ownership.assignment.application import (
    AutoAssignmentEngine,
    ResponsibilityGovernance,
    ResponsibilityMatrix,
    WorkloadBalancer,
)
from incident_ownership.assignment.infrastructure import (
    InMemoryAssignmentStore,
    InMemoryWorkloadStore,
    TimeOfDayAvailability,
)
from incident_ownership.config import DeploymentEnvironment, Settings, get_settings
from incident_ownership.config.ownership import OwnershipConfig, OwnershipConfigManager
from incident_ownership.escalation.application import (
    EscalationEngine,
    EscalationEngineConfig,
    EscalationMonitor,
)
from incident_ownership.escalation.domain import EscalationEvent
from incident_ownership.escalation.infrastructure import (
    EscalationScheduler,
    InMemoryEscalationStore,
    LoggingEscalationNotifier,
)
from incident_ownership.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass
class OwnershipServices:
    """Everything a caller needs, already wired together."""

    settings: Settings
    config: OwnershipConfig
    responsibility_matrix: ResponsibilityMatrix
    workload_balancer: WorkloadBalancer
    assignment_engine: AutoAssignmentEngine
    governance: ResponsibilityGovernance
    escalation_engine: EscalationEngine
    monitor: EscalationMonitor
    scheduler: Optional[EscalationScheduler] = None
    config_manager: Optional[OwnershipConfigManager] = None

    def run_monitor(self) -> List[EscalationEvent]:
        """Scheduler job: one monitor sweep, never raising into APScheduler."""
        try:
            return self.monitor.run_once()
        except Exception as e:
            logger.error("Escalation monitor run failed", extra={"error": str(e)}, exc_info=True)
            return []

    def reload_config(self) -> bool:
        """
        Re-read the ownership YAML and swap in its SLA targets and escalation rules.

        Team and agent rosters keep their startup values. Returns False, keeping
        the current tables, when there is no file to reload or it is invalid.
        """
        if self.config_manager is None or not self.config_manager.reload():
            return False

        config = self.config_manager.config
        self.assignment_engine.update_sla_targets(config.sla_target_table())
        self.governance.update_escalation_rules(config.escalation_rule_table())
        self.config = config
        return True

    def start(self) -> None:
        """Start the background escalation monitor, if one is configured."""
        if self.scheduler is not None:
            self.scheduler.start(self.run_monitor)

    def shutdown(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()


def build_services(
    settings: Optional[Settings] = None,
    config: Optional[OwnershipConfig] = None
) -> OwnershipServices:
    """
    Build the service graph.

    Args:
        settings: Defaults to the cached environment settings
        config: Defaults to the YAML file at ``settings.ownership_config_path``

    Raises:
        ConfigurationException: if the ownership YAML is invalid
    """
    settings = settings or get_settings()
    config_manager = None
    if config is None:
        config_manager = OwnershipConfigManager()
        config = config_manager.load(settings.ownership_config_path)

    matrix = ResponsibilityMatrix(
        teams=config.team_structures(),
        expertise_map=config.expertise_map,
    )
    balancer = WorkloadBalancer(
        workload_store=InMemoryWorkloadStore(),
        availability_provider=TimeOfDayAvailability(
            core_start_hour=settings.availability_core_start_hour,
            core_end_hour=settings.availability_core_end_hour,
            buffer_hours=settings.availability_buffer_hours,
        ),
        max_active_assignments=settings.max_active_assignments,
    )
    assignment_engine = AutoAssignmentEngine(
        responsibility_matrix=matrix,
        workload_balancer=balancer,
        assignment_store=InMemoryAssignmentStore(),
        sla_targets=config.sla_target_table(),
    )
    governance = ResponsibilityGovernance(escalation_rules=config.escalation_rule_table())
    escalation_engine = EscalationEngine(
        escalation_store=InMemoryEscalationStore(),
        agents=config.agents(),
        notifier=LoggingEscalationNotifier(),
        config=EscalationEngineConfig(
            auto_retry_limit=settings.escalation_auto_retry_limit,
            enable_smart_routing=settings.escalation_smart_routing,
            notification_enabled=settings.escalation_notifications,
        ),
    )
    monitor = EscalationMonitor(
        assignment_engine=assignment_engine,
        governance=governance,
        escalation_engine=escalation_engine,
        environment=DeploymentEnvironment(settings.environment.upper()),
    )

    scheduler = None
    if settings.escalation_monitor_interval > 0:
        scheduler = EscalationScheduler(interval_seconds=settings.escalation_monitor_interval)

    logger.info(
        "Ownership services built",
        extra={
            "app_version": settings.app_version,
            "teams": len(config.teams),
            "agents": len(config.customer_service_agents),
            "monitor_interval": settings.escalation_monitor_interval,
        }
    )

    return OwnershipServices(
        settings=settings,
        config=config,
        responsibility_matrix=matrix,
        workload_balancer=balancer,
        assignment_engine=assignment_engine,
        governance=governance,
        escalation_engine=escalation_engine,
        monitor=monitor,
        scheduler=scheduler,
        config_manager=config_manager,
    )

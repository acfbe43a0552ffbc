"""
Escalation External Services
============================

- LoggingEscalationNotifier: notification hook writing structured logs
- EscalationScheduler: APScheduler wrapper running the escalation monitor
"""

from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from incident_ownership.escalation.application.interfaces import IEscalationNotifier
from incident_ownership.escalation.domain import EscalationEvent
from incident_ownership.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class LoggingEscalationNotifier(IEscalationNotifier):
    """Announces escalations in the log stream; delivery is someone else's job."""

    def notify(self, event: EscalationEvent) -> None:
        logger.info(
            "Escalation notification",
            extra={
                "escalation_id": event.id,
                "incident_id": event.incident_id,
                "level": event.level.value,
                "trigger": event.trigger.value,
                "priority": event.priority.value,
                "description": event.description,
                "assigned_to": event.assigned_to.id if event.assigned_to else None,
            }
        )


class EscalationScheduler:
    """
    Wrapper for APScheduler for background escalation sweeps.

    Manages the lifecycle of the scheduler and jobs.
    """

    JOB_ID = "escalation_monitor"

    def __init__(self, interval_seconds: int = 60):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[BackgroundScheduler] = None
        self._running = False

    def start(self, job_func: Callable[[], object]) -> None:
        """Start the scheduler with the given job function."""
        if self._running:
            logger.warning("Escalation scheduler already running")
            return

        self._scheduler = BackgroundScheduler(timezone="UTC")

        self._scheduler.add_job(
            job_func,
            "interval",
            seconds=self.interval_seconds,
            id=self.JOB_ID,
            name="Escalation Monitor Job",
            misfire_grace_time=self.interval_seconds,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        self._scheduler.start()
        self._running = True

        logger.info(
            "Escalation scheduler started",
            extra={"interval_seconds": self.interval_seconds}
        )

    def stop(self, wait: bool = True) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=wait)
            self._scheduler = None

        self._running = False
        logger.info("Escalation scheduler stopped")

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running

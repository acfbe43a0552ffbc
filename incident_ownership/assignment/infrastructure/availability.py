"""
Availability Providers
======================

Time-of-day availability heuristic standing in for calendar and on-call
integration. Swap in another IAvailabilityProvider to change how
availability is judged without touching the scoring logic.
"""

from datetime import datetime, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from incident_ownership.assignment.application import IAvailabilityProvider
from incident_ownership.assignment.domain import TeamMember
from incident_ownership.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class TimeOfDayAvailability(IAvailabilityProvider):
    """
    Availability from the member's local hour.

    1.0 inside core hours, 0.7 within ``buffer_hours`` either side,
    0.3 otherwise.
    """

    CORE_SCORE = 1.0
    BUFFER_SCORE = 0.7
    OFF_HOURS_SCORE = 0.3

    def __init__(
        self,
        core_start_hour: int = 9,
        core_end_hour: int = 18,
        buffer_hours: int = 2,
        clock: Optional[Callable[[], datetime]] = None
    ):
        if core_start_hour >= core_end_hour:
            raise ValueError("core_start_hour must be before core_end_hour")
        self.core_start_hour = core_start_hour
        self.core_end_hour = core_end_hour
        self.buffer_hours = buffer_hours
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def availability(self, member: TeamMember) -> float:
        hour = self._local_hour(member)

        if self.core_start_hour <= hour < self.core_end_hour:
            return self.CORE_SCORE
        if (
            self.core_start_hour - self.buffer_hours <= hour < self.core_start_hour
            or self.core_end_hour <= hour < self.core_end_hour + self.buffer_hours
        ):
            return self.BUFFER_SCORE
        return self.OFF_HOURS_SCORE

    def _local_hour(self, member: TeamMember) -> int:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        try:
            zone = ZoneInfo(member.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(
                "Unknown member timezone, falling back to UTC",
                extra={"member_id": member.id, "member_timezone": member.timezone}
            )
            zone = timezone.utc
        return now.astimezone(zone).hour


class FixedAvailability(IAvailabilityProvider):
    """Same availability for everyone; for tests and manual overrides."""

    def __init__(self, score: float = 1.0):
        if not 0.0 <= score <= 1.0:
            raise ValueError("Availability must be between 0 and 1")
        self.score = score

    def availability(self, member: TeamMember) -> float:
        return self.score

"""Tests for availability providers."""

from datetime import datetime, timezone

import pytest

from incident_ownership.assignment.domain import TeamMember
from incident_ownership.assignment.infrastructure import FixedAvailability, TimeOfDayAvailability


def at_utc(hour: int):
    return lambda: datetime(2024, 3, 1, hour, 30, tzinfo=timezone.utc)


def member(tz: str = "UTC") -> TeamMember:
    return TeamMember(id="m1", name="Member", email="m1@example.com", timezone=tz)


class TestTimeOfDayAvailability:

    @pytest.mark.parametrize("hour,expected", [
        (9, 1.0), (17, 1.0), (7, 0.7), (18, 0.7), (19, 0.7), (20, 0.3), (3, 0.3),
    ])
    def test_utc_member(self, hour, expected):
        provider = TimeOfDayAvailability(clock=at_utc(hour))
        assert provider.availability(member()) == expected

    def test_member_local_time(self):
        # 02:30 UTC is 10:30 in Taipei
        provider = TimeOfDayAvailability(clock=at_utc(2))
        assert provider.availability(member("Asia/Taipei")) == 1.0

    def test_unknown_timezone_falls_back_to_utc(self):
        provider = TimeOfDayAvailability(clock=at_utc(2))
        assert provider.availability(member("Mars/Olympus_Mons")) == 0.3

    def test_naive_clock_is_utc(self):
        provider = TimeOfDayAvailability(clock=lambda: datetime(2024, 3, 1, 12, 0))
        assert provider.availability(member()) == 1.0

    def test_invalid_core_hours(self):
        with pytest.raises(ValueError):
            TimeOfDayAvailability(core_start_hour=18, core_end_hour=9)


class TestFixedAvailability:

    def test_constant(self):
        assert FixedAvailability(0.4).availability(member()) == 0.4

    def test_range_checked(self):
        with pytest.raises(ValueError):
            FixedAvailability(1.5)

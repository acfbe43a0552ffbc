"""Tests for Settings and the YAML ownership configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from incident_ownership.config import Priority, ProblemType, Settings
from incident_ownership.config.ownership import OwnershipConfig, OwnershipConfigManager
from incident_ownership.core import ConfigurationException

BUNDLED_CONFIG = Path(__file__).resolve().parents[2] / "ownership_config.yaml"


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.escalation_auto_retry_limit == 3
        assert settings.escalation_smart_routing is True
        assert settings.max_active_assignments == 10

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_unknown_environment(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="qa")

    def test_core_hours_order(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, availability_core_start_hour=18, availability_core_end_hour=9)

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ESCALATION_MONITOR_INTERVAL", "0")
        assert Settings(_env_file=None).escalation_monitor_interval == 0


class TestOwnershipConfig:

    def test_built_in_defaults(self):
        config = OwnershipConfig()

        assert [t.name for t in config.teams] == ["frontend", "backend", "devops", "security"]
        assert [a.id for a in config.customer_service_agents] == ["cs-001", "cs-002"]
        assert set(config.sla_target_table()) == set(Priority)
        assert config.escalation_rule_table()[Priority.CRITICAL].no_progress_timeout == 15

    def test_partial_tables_filled(self):
        config = OwnershipConfig(
            sla_targets={"CRITICAL": {"response_time": 2, "resolution_time": 30}},
            expertise_map={"SECURITY": ["security"]},
        )

        assert config.sla_target_table()[Priority.CRITICAL].response_time == 2
        assert config.sla_target_table()[Priority.LOW].resolution_time == 1440
        assert config.expertise_map[ProblemType.SECURITY] == ["security"]
        assert config.expertise_map[ProblemType.BACKEND_API] == ["backend", "api"]

    def test_duplicate_member_ids_rejected(self):
        member = {"id": "dup", "name": "Dup", "email": "dup@example.com"}
        with pytest.raises(ValidationError):
            OwnershipConfig(teams=[
                {"name": "a", "members": [member]},
                {"name": "b", "members": [member]},
            ])

    def test_agents_to_domain(self):
        agent = OwnershipConfig().agents()[1]

        assert agent.id == "cs-002"
        assert agent.availability.max_concurrent_cases == 5
        assert "Autonomous Vehicles" in agent.expertise.specializations
        assert agent.performance.customer_satisfaction == 4.8


class TestOwnershipConfigManager:

    def test_bundled_file_matches_defaults(self):
        config = OwnershipConfigManager().load(BUNDLED_CONFIG)
        defaults = OwnershipConfig()

        assert config.sla_target_table() == defaults.sla_target_table()
        assert config.escalation_rule_table() == defaults.escalation_rule_table()
        assert config.team_structures() == defaults.team_structures()
        assert [a.id for a in config.agents()] == ["cs-001", "cs-002"]

    def test_missing_file_uses_defaults(self, tmp_path):
        config = OwnershipConfigManager().load(tmp_path / "absent.yaml")
        assert len(config.teams) == 4

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("teams: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationException):
            OwnershipConfigManager().load(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("sla_targets:\n  HIGH:\n    response_time: 0\n", encoding="utf-8")

        with pytest.raises(ConfigurationException):
            OwnershipConfigManager().load(path)

    def test_reload_keeps_previous_on_error(self, tmp_path):
        path = tmp_path / "ownership.yaml"
        path.write_text(
            "sla_targets:\n  HIGH:\n    response_time: 10\n    resolution_time: 100\n",
            encoding="utf-8",
        )
        manager = OwnershipConfigManager()
        manager.load(path)

        path.write_text("teams: [unclosed", encoding="utf-8")

        assert manager.reload() is False
        assert manager.config.sla_targets[Priority.HIGH].response_time == 10

    def test_reload_picks_up_changes(self, tmp_path):
        path = tmp_path / "ownership.yaml"
        path.write_text("customer_service_agents: []\n", encoding="utf-8")
        manager = OwnershipConfigManager()
        manager.load(path)

        path.write_text("teams: []\n", encoding="utf-8")

        assert manager.reload() is True
        assert manager.config.teams == []
        assert len(manager.config.customer_service_agents) == 2

    def test_config_before_load(self):
        with pytest.raises(ConfigurationException):
            OwnershipConfigManager().config

    def test_reload_before_load(self):
        assert OwnershipConfigManager().reload() is False

"""Tests for configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from repo_pulse.config import (
    RepoPulseConfig,
    ThresholdConfig,
    WeightConfig,
    load_config,
)
from repo_pulse.exceptions import ConfigError
from repo_pulse.models import MetricKind


class TestThresholdConfig:
    def test_defaults(self) -> None:
        t = ThresholdConfig()
        assert t.time_to_first_response_hours == 24
        assert t.pr_merge_time_hours == 48
        assert t.issue_resolution_rate == 70
        assert t.bus_factor == 3


class TestWeightConfig:
    def test_to_mapping(self) -> None:
        mapping = WeightConfig().to_mapping()
        assert set(mapping) == set(MetricKind)
        assert all(weight == 0.25 for weight in mapping.values())


class TestRepoPulseConfig:
    def test_defaults(self) -> None:
        config = RepoPulseConfig()
        assert config.sampling.review_sample_size == 20
        assert config.sampling.response_sample_size == 50
        assert config.bus_factor.contribution_share == 0.8
        assert config.placeholders.first_response_hours == 4.2
        assert config.fetch.per_page == 100
        assert config.fetch.team_size_limit == 20
        assert config.fetch.overview_contributors == 10
        assert config.fetch.profile_page_size == 10
        assert config.fetch.search_per_page == 10


class TestLoadConfig:
    def test_load_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert isinstance(config, RepoPulseConfig)
        assert config.thresholds.pr_merge_time_hours == 48

    def test_load_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / ".repo-pulse.yml"
        config_file.write_text(yaml.dump({
            "thresholds": {"pr_merge_time_hours": 72},
            "sampling": {"review_sample_size": 10},
        }))
        config = load_config(config_file)
        assert config.thresholds.pr_merge_time_hours == 72
        assert config.sampling.review_sample_size == 10
        # Defaults preserved
        assert config.thresholds.bus_factor == 3

    def test_default_location(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / ".repo-pulse.yaml").write_text(
            yaml.dump({"fetch": {"team_size_limit": 5}})
        )
        monkeypatch.chdir(tmp_path)
        assert load_config().fetch.team_size_limit == 5

    def test_load_nonexistent_path(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "nonexistent.yml")
        assert config.fetch.per_page == 100

    def test_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")
        assert load_config(config_file).fetch.per_page == 100

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yml"
        config_file.write_text("- one\n- two\n")
        with pytest.raises(ConfigError):
            load_config(config_file)

    def test_invalid_value(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.yml"
        config_file.write_text(yaml.dump({"fetch": {"per_page": 500}}))
        with pytest.raises(ConfigError):
            load_config(config_file)

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / ".repo-pulse.yml"
        config_file.write_text(yaml.dump({"fetch": {"per_page": 50}}))
        monkeypatch.setenv("REPO_PULSE_PER_PAGE", "25")
        monkeypatch.setenv("REPO_PULSE_MERGE_TIME_THRESHOLD", "36.5")
        monkeypatch.setenv("REPO_PULSE_SEARCH_PER_PAGE", "30")
        config = load_config(config_file)
        assert config.fetch.per_page == 25
        assert config.thresholds.pr_merge_time_hours == 36.5
        assert config.fetch.search_per_page == 30

    def test_env_invalid_number(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPO_PULSE_REVIEW_SAMPLE_SIZE", "lots")
        with pytest.raises(ConfigError, match="REPO_PULSE_REVIEW_SAMPLE_SIZE"):
            load_config()

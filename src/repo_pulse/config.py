"""Configuration models for Repo Pulse."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from repo_pulse.exceptions import ConfigError
from repo_pulse.models import MetricKind


class ThresholdConfig(BaseModel):
    """Health metric thresholds."""
    time_to_first_response_hours: float = 24.0
    pr_merge_time_hours: float = 48.0
    issue_resolution_rate: float = 70.0  # percent
    bus_factor: float = 3.0


class WeightConfig(BaseModel):
    """Weight of each metric in the overall health score."""
    time_to_first_response: float = 0.25
    pr_merge_time: float = 0.25
    issue_resolution_rate: float = 0.25
    bus_factor: float = 0.25

    def to_mapping(self) -> dict[MetricKind, float]:
        """Key the weights by metric kind for the score calculator."""
        return {
            MetricKind.TIME_TO_FIRST_RESPONSE: self.time_to_first_response,
            MetricKind.PR_MERGE_TIME: self.pr_merge_time,
            MetricKind.ISSUE_RESOLUTION_RATE: self.issue_resolution_rate,
            MetricKind.BUS_FACTOR: self.bus_factor,
        }


class BusFactorConfig(BaseModel):
    """Share of all contributions the critical contributors must cover."""
    contribution_share: float = Field(default=0.8, gt=0.0, le=1.0)


class SamplingConfig(BaseModel):
    """How many records the sampling calculators look at."""
    review_sample_size: int = 20
    response_sample_size: int = 50


class PlaceholderConfig(BaseModel):
    """Fixed values reported by metrics that lack comment timelines."""
    first_response_hours: float = 4.2
    assumed_response_hours: float = 4.0


class FetchConfig(BaseModel):
    """GitHub API fetch parameters."""
    per_page: int = Field(default=100, ge=1, le=100)
    team_size_limit: int = 20
    timeout_seconds: float = 30.0
    overview_contributors: int = Field(default=10, ge=1, le=100)
    profile_page_size: int = Field(default=10, ge=1, le=100)
    search_per_page: int = Field(default=10, ge=1, le=100)


class RepoPulseConfig(BaseModel):
    """Top-level configuration composing all sub-configs."""
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    weights: WeightConfig = Field(default_factory=WeightConfig)
    bus_factor: BusFactorConfig = Field(default_factory=BusFactorConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    placeholders: PlaceholderConfig = Field(default_factory=PlaceholderConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)


_DEFAULT_PATHS = (".repo-pulse.yml", ".repo-pulse.yaml")

_ENV_MAPPING: dict[str, tuple[str, str, type]] = {
    "REPO_PULSE_PER_PAGE": ("fetch", "per_page", int),
    "REPO_PULSE_TEAM_SIZE_LIMIT": ("fetch", "team_size_limit", int),
    "REPO_PULSE_TIMEOUT": ("fetch", "timeout_seconds", float),
    "REPO_PULSE_SEARCH_PER_PAGE": ("fetch", "search_per_page", int),
    "REPO_PULSE_REVIEW_SAMPLE_SIZE": ("sampling", "review_sample_size", int),
    "REPO_PULSE_RESPONSE_SAMPLE_SIZE": ("sampling", "response_sample_size", int),
    "REPO_PULSE_RESPONSE_THRESHOLD": (
        "thresholds", "time_to_first_response_hours", float,
    ),
    "REPO_PULSE_MERGE_TIME_THRESHOLD": ("thresholds", "pr_merge_time_hours", float),
    "REPO_PULSE_RESOLUTION_THRESHOLD": ("thresholds", "issue_resolution_rate", float),
    "REPO_PULSE_BUS_FACTOR_THRESHOLD": ("thresholds", "bus_factor", float),
    "REPO_PULSE_CONTRIBUTION_SHARE": ("bus_factor", "contribution_share", float),
}


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: str | Path | None = None) -> RepoPulseConfig:
    """Load configuration from YAML file, environment variables, and defaults.

    Priority (highest to lowest):
    1. Environment variables (REPO_PULSE_*)
    2. YAML config file
    3. Defaults
    """
    config_data: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if config_path.exists():
            config_data = _read_yaml(config_path)
    else:
        for default_path in _DEFAULT_PATHS:
            p = Path(default_path)
            if p.exists():
                config_data = _read_yaml(p)
                break

    for env_var, (section, key, type_fn) in _ENV_MAPPING.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                converted = type_fn(value)
            except ValueError as exc:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}") from exc
            config_data.setdefault(section, {})[key] = converted

    try:
        return RepoPulseConfig(**config_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

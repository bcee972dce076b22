"""Repo Pulse - GitHub project health and team analytics."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from repo_pulse.analytics import (
    RepoAnalytics,
    analyze_developer,
    analyze_project_health,
    analyze_repository,
    analyze_team,
    search_repositories,
)
from repo_pulse.config import RepoPulseConfig, load_config
from repo_pulse.exceptions import RepoPulseError
from repo_pulse.github_client import GitHubClient, GitHubDataSource
from repo_pulse.models import (
    BusFactor,
    DeveloperProfile,
    HealthAlert,
    HealthMetric,
    MetricKind,
    ProjectHealthMetrics,
    RepositoryOverview,
    RepositorySearchResult,
    TeamMember,
    TeamMetrics,
)

try:
    __version__ = version("repo-pulse")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "BusFactor",
    "DeveloperProfile",
    "GitHubClient",
    "GitHubDataSource",
    "HealthAlert",
    "HealthMetric",
    "MetricKind",
    "ProjectHealthMetrics",
    "RepoAnalytics",
    "RepoPulseConfig",
    "RepoPulseError",
    "RepositoryOverview",
    "RepositorySearchResult",
    "TeamMember",
    "TeamMetrics",
    "__version__",
    "analyze_developer",
    "analyze_project_health",
    "analyze_repository",
    "analyze_team",
    "load_config",
    "search_repositories",
]

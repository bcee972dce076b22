"""Output formatting for Repo Pulse results."""

from __future__ import annotations

import click
from pydantic import BaseModel

from repo_pulse.models import (
    AlertType,
    DeveloperProfile,
    MetricStatus,
    ProjectHealthMetrics,
    Repository,
    RepositoryOverview,
    RepositorySearchResult,
    RiskLevel,
    TeamMember,
    TeamMetrics,
    TeamReport,
)

_STATUS_COLORS: dict[MetricStatus, str] = {
    MetricStatus.HEALTHY: "green",
    MetricStatus.WARNING: "yellow",
    MetricStatus.CRITICAL: "red",
}

_RISK_COLORS: dict[RiskLevel, str] = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
}

_ALERT_COLORS: dict[AlertType, str] = {
    AlertType.WARNING: "yellow",
    AlertType.CRITICAL: "red",
}


def _score_color(score: int) -> str:
    if score >= 70:
        return "green"
    if score >= 40:
        return "yellow"
    return "red"


def _colored_score(score: int) -> str:
    return click.style(f"{score}/100", fg=_score_color(score), bold=True)


def format_health_cli(
    health: ProjectHealthMetrics, repo: str, verbose: bool = False
) -> str:
    """Format project health for terminal display with color."""
    lines: list[str] = [
        f"Project health: {_colored_score(health.overall_score)}",
        f"Repository: {repo}",
        "",
        "Metrics:",
    ]

    for metric in health.metrics:
        status = click.style(
            metric.status.value, fg=_STATUS_COLORS.get(metric.status, "white")
        )
        line = f"  {metric.name}: {metric.value:.1f} (threshold {metric.threshold:g}) [{status}]"
        if verbose:
            line += f" trend={metric.trend.value}"
        lines.append(line)

    bf = health.bus_factor
    risk = click.style(
        bf.risk_level.value.upper(), fg=_RISK_COLORS.get(bf.risk_level, "white"), bold=True
    )
    lines.append("")
    lines.append(f"Bus factor: {bf.score} ({risk} risk)")

    if health.alerts:
        lines.append("")
        lines.append("Alerts:")
        for alert in health.alerts:
            label = click.style(
                alert.type.value.upper(), fg=_ALERT_COLORS.get(alert.type, "white")
            )
            lines.append(f"  [{label}] {alert.message}")
            if verbose:
                lines.append(f"    id={alert.id} at {alert.timestamp}")

    return "\n".join(lines)


def format_team_cli(metrics: TeamMetrics, repo: str) -> str:
    """Format team metrics for terminal display."""
    coverage = click.style(f"{metrics.code_review_coverage}%", bold=True)
    return "\n".join([
        f"Team activity: {repo}",
        "",
        f"Commits: {metrics.total_commits}",
        f"Pull requests: {metrics.total_pull_requests} "
        f"(open {metrics.open_pull_requests}, "
        f"closed {metrics.closed_pull_requests}, "
        f"merged {metrics.merged_pull_requests})",
        f"Issues: {metrics.total_issues}",
        f"Average response time: {metrics.average_response_time:.1f}h",
        f"Code review coverage: {coverage}",
    ])


def format_members_cli(members: list[TeamMember]) -> str:
    """Format team members, one per line."""
    if not members:
        return "No contributors found."
    lines = ["Team members:"]
    for member in members:
        name = member.user.name if member.user and member.user.name else None
        label = f"{member.login} ({name})" if name else str(member.login)
        lines.append(f"  {label}: {member.commits} commits")
    return "\n".join(lines)


def _repository_line(repo: Repository) -> str:
    line = f"  {repo.full_name} ({repo.stargazers_count} stars)"
    if repo.language:
        line += f" [{repo.language}]"
    if repo.description:
        line += f" - {repo.description}"
    return line


def format_overview_cli(overview: RepositoryOverview) -> str:
    """Format a repository overview for terminal display."""
    repo = overview.repository
    lines: list[str] = [click.style(repo.full_name, bold=True)]
    if repo.description:
        lines.append(repo.description)
    lines.append(
        f"Stars: {repo.stargazers_count}  Forks: {repo.forks_count}  "
        f"Open issues: {repo.open_issues_count}"
    )
    if repo.archived:
        lines.append(click.style("Archived", fg="yellow"))

    if overview.languages:
        lines.append("")
        lines.append("Languages:")
        for share in overview.languages:
            lines.append(f"  {share.language}: {share.percent:.1f}%")

    if overview.contributors:
        lines.append("")
        lines.append("Top contributors:")
        for contributor in overview.contributors:
            login = contributor.login or "(anonymous)"
            lines.append(f"  {login}: {contributor.contributions} contributions")

    profile = overview.community_profile
    if profile is not None:
        lines.append("")
        lines.append(f"Community health: {_colored_score(profile.health_percentage)}")
        if profile.missing_files:
            lines.append(f"  Missing: {', '.join(profile.missing_files)}")

    if overview.commit_activity:
        lines.append("")
        lines.append(f"Commits in the last year: {overview.commits_last_year}")

    return "\n".join(lines)


def format_developer_cli(profile: DeveloperProfile) -> str:
    """Format a developer profile for terminal display."""
    user = profile.user
    header = f"{user.login} ({user.name})" if user.name else user.login
    lines: list[str] = [
        click.style(header, bold=True),
        f"Public repos: {user.public_repos}  Followers: {user.followers}  "
        f"Following: {user.following}",
    ]

    activity = profile.activity
    lines.append("")
    lines.append(
        f"Recent activity: {activity.pushes} pushes, "
        f"{activity.pull_requests} pull requests, {activity.issues} issues, "
        f"{activity.code_reviews} reviews"
    )

    if profile.repositories:
        lines.append("")
        lines.append("Repositories:")
        lines.extend(_repository_line(r) for r in profile.repositories)

    if profile.starred:
        lines.append("")
        lines.append("Starred:")
        lines.extend(_repository_line(r) for r in profile.starred)

    return "\n".join(lines)


def format_search_cli(result: RepositorySearchResult) -> str:
    if not result.items:
        return f"No repositories found for '{result.query}'."
    lines = [f"Repositories matching '{result.query}':"]
    lines.extend(_repository_line(r) for r in result.items)
    return "\n".join(lines)


def format_json(result: BaseModel) -> str:
    """Format any result model as JSON."""
    return result.model_dump_json(indent=2)


def format_team_json(
    metrics: TeamMetrics, members: list[TeamMember] | None = None
) -> str:
    """Format team metrics as JSON, with a ``members`` list when given."""
    if members is None:
        return format_json(metrics)
    return format_json(TeamReport(**metrics.model_dump(), members=members))

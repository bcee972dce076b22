"""Click-based CLI for Repo Pulse analytics."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from repo_pulse.analytics import (
    analyze_developer,
    analyze_project_health,
    analyze_repository,
    analyze_team,
    search_repositories,
)
from repo_pulse.config import load_config
from repo_pulse.exceptions import RateLimitExhaustedError, RepoPulseError
from repo_pulse.formatter import (
    format_developer_cli,
    format_health_cli,
    format_json,
    format_members_cli,
    format_overview_cli,
    format_search_cli,
    format_team_cli,
    format_team_json,
)

MIN_SEARCH_QUERY_LENGTH = 3


def _parse_repo(repo: str) -> tuple[str, str]:
    parts = repo.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        click.echo("Error: repository must be in owner/name format.", err=True)
        sys.exit(1)
    return parts[0], parts[1]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )


def _fail(exc: RepoPulseError) -> None:
    if isinstance(exc, RateLimitExhaustedError):
        click.echo(
            f"Error: rate limit exhausted. Resets at {exc.reset_at.isoformat()}. "
            "Use a GitHub token for higher limits.",
            err=True,
        )
    else:
        click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="repo-pulse")
def main() -> None:
    """Repo Pulse - GitHub project health and team analytics."""


@main.command()
@click.argument("repo")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def health(
    repo: str,
    token: str | None,
    config_path: str | None,
    verbose: bool,
    output_json: bool,
) -> None:
    """Compute the health score, bus factor and alerts of REPO (owner/name)."""
    owner, name = _parse_repo(repo)
    _configure_logging(verbose)

    try:
        config = load_config(config_path)
        result = asyncio.run(
            analyze_project_health(owner, name, config=config, token=token or "")
        )
    except RepoPulseError as exc:
        _fail(exc)
        return

    if output_json:
        click.echo(format_json(result))
    else:
        click.echo(format_health_cli(result, repo, verbose=verbose))


@main.command()
@click.argument("repo")
@click.option("--since", default=None, help="Only count commits after this ISO-8601 date")
@click.option("--until", default=None, help="Only count commits before this ISO-8601 date")
@click.option("--members", is_flag=True, help="Also list the top contributors")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def team(
    repo: str,
    since: str | None,
    until: str | None,
    members: bool,
    token: str | None,
    config_path: str | None,
    verbose: bool,
    output_json: bool,
) -> None:
    """Compute team activity metrics of REPO (owner/name)."""
    owner, name = _parse_repo(repo)
    _configure_logging(verbose)

    try:
        config = load_config(config_path)
        metrics, team_members = asyncio.run(
            analyze_team(
                owner,
                name,
                since=since,
                until=until,
                config=config,
                token=token or "",
                include_members=members,
            )
        )
    except RepoPulseError as exc:
        _fail(exc)
        return

    if output_json:
        click.echo(format_team_json(metrics, team_members if members else None))
        return

    click.echo(format_team_cli(metrics, repo))
    if members:
        click.echo("")
        click.echo(format_members_cli(team_members))


@main.command("repo")
@click.argument("repo")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def repo_overview(
    repo: str,
    token: str | None,
    config_path: str | None,
    verbose: bool,
    output_json: bool,
) -> None:
    """Show languages, top contributors and community health of REPO (owner/name)."""
    owner, name = _parse_repo(repo)
    _configure_logging(verbose)

    try:
        config = load_config(config_path)
        result = asyncio.run(
            analyze_repository(owner, name, config=config, token=token or "")
        )
    except RepoPulseError as exc:
        _fail(exc)
        return

    if output_json:
        click.echo(format_json(result))
    else:
        click.echo(format_overview_cli(result))


@main.command()
@click.argument("username")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def developer(
    username: str,
    token: str | None,
    config_path: str | None,
    verbose: bool,
    output_json: bool,
) -> None:
    """Show the profile, repositories and recent activity of USERNAME."""
    _configure_logging(verbose)

    try:
        config = load_config(config_path)
        result = asyncio.run(
            analyze_developer(username, config=config, token=token or "")
        )
    except RepoPulseError as exc:
        _fail(exc)
        return

    if output_json:
        click.echo(format_json(result))
    else:
        click.echo(format_developer_cli(result))


@main.command()
@click.argument("query")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def search(
    query: str,
    token: str | None,
    config_path: str | None,
    verbose: bool,
    output_json: bool,
) -> None:
    """Search repositories matching QUERY, most starred first."""
    if len(query.strip()) < MIN_SEARCH_QUERY_LENGTH:
        click.echo(
            f"Error: search query must be at least {MIN_SEARCH_QUERY_LENGTH} characters.",
            err=True,
        )
        sys.exit(1)
    _configure_logging(verbose)

    try:
        config = load_config(config_path)
        result = asyncio.run(
            search_repositories(query, config=config, token=token or "")
        )
    except RepoPulseError as exc:
        _fail(exc)
        return

    if output_json:
        click.echo(format_json(result))
    else:
        click.echo(format_search_cli(result))

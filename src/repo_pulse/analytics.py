"""Project health and team analytics over a GitHub data source."""

from __future__ import annotations

import asyncio
import logging
import os

from repo_pulse import calculators, helpers
from repo_pulse.config import RepoPulseConfig, load_config
from repo_pulse.github_client import GitHubClient, GitHubDataSource
from repo_pulse.models import (
    DeveloperProfile,
    MetricKind,
    ProjectHealthMetrics,
    RepositoryOverview,
    RepositorySearchResult,
    TeamMember,
    TeamMetrics,
)

logger = logging.getLogger(__name__)


class RepoAnalytics:
    """Fetch raw records from *source* and derive health and team metrics."""

    def __init__(
        self, source: GitHubDataSource, config: RepoPulseConfig | None = None
    ) -> None:
        self.source = source
        self.config = config if config is not None else RepoPulseConfig()

    def _thresholds(self) -> dict[MetricKind, float]:
        t = self.config.thresholds
        return {
            MetricKind.TIME_TO_FIRST_RESPONSE: t.time_to_first_response_hours,
            MetricKind.PR_MERGE_TIME: t.pr_merge_time_hours,
            MetricKind.ISSUE_RESOLUTION_RATE: t.issue_resolution_rate,
            MetricKind.BUS_FACTOR: t.bus_factor,
        }

    async def project_health(self, owner: str, repo: str) -> ProjectHealthMetrics:
        """Compute the health metrics, overall score and alerts for a repository."""
        per_page = self.config.fetch.per_page
        issues, pull_requests, contributors = await asyncio.gather(
            self.source.fetch_issues(owner, repo, per_page=per_page),
            self.source.fetch_pull_requests(owner, repo, per_page=per_page),
            self.source.fetch_contributors(owner, repo, per_page=per_page),
        )

        issue_counts = helpers.get_issue_counts(issues)
        merged_prs = helpers.get_merged_pull_requests(pull_requests)

        time_to_first_response = calculators.calculate_time_to_first_response(
            owner,
            repo,
            issues,
            placeholder_hours=self.config.placeholders.first_response_hours,
        )
        pr_merge_time = calculators.calculate_pr_merge_time(merged_prs)
        resolution_rate = calculators.calculate_issue_resolution_rate(
            issue_counts.closed_issues, issue_counts.open_issues_no_pr
        )
        bus_factor = calculators.calculate_bus_factor(
            contributors,
            contribution_share=self.config.bus_factor.contribution_share,
        )

        metrics = calculators.build_health_metrics(
            time_to_first_response,
            pr_merge_time,
            resolution_rate,
            bus_factor,
            self._thresholds(),
        )
        overall = calculators.calculate_overall_health_score(
            metrics, weights=self.config.weights.to_mapping()
        )
        logger.debug(
            "%s/%s: merge time %.1fh, resolution %d%%, bus factor %d, score %d",
            owner, repo, pr_merge_time, resolution_rate, bus_factor.score, overall,
        )

        return ProjectHealthMetrics(
            overall_score=overall,
            metrics=metrics,
            bus_factor=bus_factor,
            alerts=calculators.generate_health_alerts(metrics, bus_factor),
        )

    async def team_metrics(
        self,
        owner: str,
        repo: str,
        since: str | None = None,
        until: str | None = None,
    ) -> TeamMetrics:
        """Aggregate commit, pull request and issue activity for a repository.

        *since* and *until* bound the commit window (ISO-8601 timestamps).
        """
        per_page = self.config.fetch.per_page
        sampling = self.config.sampling
        pull_requests, issues, commits = await asyncio.gather(
            self.source.fetch_pull_requests(owner, repo, per_page=per_page),
            self.source.fetch_issues(owner, repo, per_page=per_page),
            self.source.fetch_commits(
                owner, repo, since=since, until=until, per_page=per_page
            ),
        )

        pr_counts = helpers.get_pull_request_counts(pull_requests)
        coverage = await calculators.calculate_review_coverage(
            self.source.fetch_reviews,
            owner,
            repo,
            pr_counts.merged_prs,
            sample_size=sampling.review_sample_size,
        )

        return TeamMetrics(
            total_commits=len(commits),
            total_pull_requests=pr_counts.total,
            total_issues=len(issues),
            open_pull_requests=pr_counts.open,
            closed_pull_requests=pr_counts.closed,
            merged_pull_requests=pr_counts.merged,
            average_response_time=calculators.calculate_average_response_time(
                pull_requests,
                sample_size=sampling.response_sample_size,
                assumed_hours=self.config.placeholders.assumed_response_hours,
            ),
            code_review_coverage=coverage,
        )

    async def team_contributors(self, owner: str, repo: str) -> list[TeamMember]:
        """Top contributors as team members, each with its user profile.

        Profiles are fetched one contributor at a time.  A contributor whose
        profile cannot be fetched is kept without one.
        """
        contributors = await self.source.fetch_contributors(
            owner, repo, per_page=self.config.fetch.per_page
        )
        limited = helpers.limit_contributors(
            contributors, self.config.fetch.team_size_limit
        )

        members: list[TeamMember] = []
        for contributor in limited:
            if not contributor.login:
                members.append(helpers.transform_contributor_to_team_member(contributor))
                continue
            try:
                user = await self.source.fetch_user(contributor.login)
            except Exception as exc:
                logger.warning(
                    "Failed to get details for contributor %s: %s",
                    contributor.login, exc,
                )
                members.append(helpers.transform_contributor_to_team_member(contributor))
                continue
            members.append(helpers.transform_contributor_to_team_member(contributor, user))

        return members

    async def repository_overview(self, owner: str, repo: str) -> RepositoryOverview:
        """Metadata, language mix, top contributors and community health.

        Weekly commit activity is empty while GitHub is still computing it.
        """
        fetch = self.config.fetch
        repository, languages, contributors, community, activity = await asyncio.gather(
            self.source.fetch_repository(owner, repo),
            self.source.fetch_languages(owner, repo),
            self.source.fetch_contributors(
                owner, repo, per_page=fetch.overview_contributors
            ),
            self.source.fetch_community_profile(owner, repo),
            self.source.fetch_commit_activity(owner, repo),
        )
        return RepositoryOverview(
            repository=repository,
            languages=helpers.get_language_shares(languages),
            contributors=contributors,
            community_profile=community,
            commit_activity=activity,
        )

    async def developer_profile(self, username: str) -> DeveloperProfile:
        """A user's profile, own and starred repositories, and recent activity."""
        fetch = self.config.fetch
        user, repositories, starred, events = await asyncio.gather(
            self.source.fetch_user(username),
            self.source.fetch_user_repositories(
                username, type="owner", per_page=fetch.profile_page_size
            ),
            self.source.fetch_starred_repositories(
                username, per_page=fetch.profile_page_size
            ),
            self.source.fetch_user_events(username, per_page=fetch.per_page),
        )
        return DeveloperProfile(
            user=user,
            repositories=repositories,
            starred=starred,
            events=events,
            activity=helpers.summarize_user_events(events),
        )

    async def search(self, query: str) -> RepositorySearchResult:
        items = await self.source.search_repositories(
            query, per_page=self.config.fetch.search_per_page
        )
        return RepositorySearchResult(query=query, items=items)


def _resolve(
    config: RepoPulseConfig | None, token: str | None
) -> tuple[RepoPulseConfig, str]:
    if config is None:
        config = load_config()
    if token is None:
        token = os.environ.get("GITHUB_TOKEN", "")
    return config, token


async def analyze_project_health(
    owner: str,
    repo: str,
    config: RepoPulseConfig | None = None,
    token: str | None = None,
) -> ProjectHealthMetrics:
    """Convenience function: fetch data and compute project health.

    Parameters
    ----------
    owner:
        Owner of the repository.
    repo:
        Name of the repository.
    config:
        Optional configuration; loaded from file and environment when *None*.
    token:
        GitHub token; falls back to the ``GITHUB_TOKEN`` env var.
    """
    config, token = _resolve(config, token)
    async with GitHubClient(token=token, config=config) as client:
        return await RepoAnalytics(client, config).project_health(owner, repo)


async def analyze_team(
    owner: str,
    repo: str,
    since: str | None = None,
    until: str | None = None,
    config: RepoPulseConfig | None = None,
    token: str | None = None,
    include_members: bool = False,
) -> tuple[TeamMetrics, list[TeamMember]]:
    """Convenience function: fetch data and compute team metrics.

    Team members are only fetched when *include_members* is set, since
    each one costs a user profile request.
    """
    config, token = _resolve(config, token)
    async with GitHubClient(token=token, config=config) as client:
        analytics = RepoAnalytics(client, config)
        metrics = await analytics.team_metrics(owner, repo, since=since, until=until)
        members: list[TeamMember] = []
        if include_members:
            members = await analytics.team_contributors(owner, repo)
    return metrics, members


async def analyze_repository(
    owner: str,
    repo: str,
    config: RepoPulseConfig | None = None,
    token: str | None = None,
) -> RepositoryOverview:
    """Convenience function: fetch a repository overview."""
    config, token = _resolve(config, token)
    async with GitHubClient(token=token, config=config) as client:
        return await RepoAnalytics(client, config).repository_overview(owner, repo)


async def analyze_developer(
    username: str,
    config: RepoPulseConfig | None = None,
    token: str | None = None,
) -> DeveloperProfile:
    """Convenience function: fetch a developer profile."""
    config, token = _resolve(config, token)
    async with GitHubClient(token=token, config=config) as client:
        return await RepoAnalytics(client, config).developer_profile(username)


async def search_repositories(
    query: str,
    config: RepoPulseConfig | None = None,
    token: str | None = None,
) -> RepositorySearchResult:
    """Convenience function: search repositories by stars."""
    config, token = _resolve(config, token)
    async with GitHubClient(token=token, config=config) as client:
        return await RepoAnalytics(client, config).search(query)

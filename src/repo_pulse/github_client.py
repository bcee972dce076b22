"""Async GitHub REST client implementing the Repo Pulse data source."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Protocol

import httpx

from repo_pulse.config import RepoPulseConfig, load_config
from repo_pulse.exceptions import (
    GitHubAPIError,
    RateLimitExhaustedError,
    RepoNotFoundError,
    UserNotFoundError,
)
from repo_pulse.models import (
    Commit,
    CommunityProfile,
    Contributor,
    Issue,
    PullRequest,
    Repository,
    Review,
    UserEvent,
    UserProfile,
    WeeklyCommitActivity,
)

logger = logging.getLogger(__name__)

_GITHUB_BASE_URL = "https://api.github.com"


class GitHubDataSource(Protocol):
    """The fetch capability the analytics layer depends on.

    :class:`GitHubClient` is the production implementation; tests pass
    in-memory fakes.
    """

    async def fetch_repository(self, owner: str, repo: str) -> Repository: ...

    async def fetch_contributors(
        self, owner: str, repo: str, per_page: int = 100, page: int = 1
    ) -> list[Contributor]: ...

    async def fetch_pull_requests(
        self, owner: str, repo: str, state: str = "all", per_page: int = 100
    ) -> list[PullRequest]: ...

    async def fetch_issues(
        self, owner: str, repo: str, state: str = "all", per_page: int = 100
    ) -> list[Issue]: ...

    async def fetch_reviews(
        self, owner: str, repo: str, pull_number: int
    ) -> list[Review]: ...

    async def fetch_user(self, username: str) -> UserProfile: ...

    async def fetch_commits(
        self,
        owner: str,
        repo: str,
        since: str | None = None,
        until: str | None = None,
        per_page: int = 100,
    ) -> list[Commit]: ...

    async def fetch_languages(self, owner: str, repo: str) -> dict[str, int]: ...

    async def fetch_community_profile(
        self, owner: str, repo: str
    ) -> CommunityProfile: ...

    async def fetch_commit_activity(
        self, owner: str, repo: str
    ) -> list[WeeklyCommitActivity]: ...

    async def fetch_user_repositories(
        self, username: str, type: str = "owner", per_page: int = 100
    ) -> list[Repository]: ...

    async def fetch_user_events(
        self, username: str, per_page: int = 100
    ) -> list[UserEvent]: ...

    async def fetch_starred_repositories(
        self, username: str, per_page: int = 100
    ) -> list[Repository]: ...

    async def search_repositories(
        self, query: str, per_page: int = 10
    ) -> list[Repository]: ...


class GitHubClient:
    """Async GitHub REST client returning typed records."""

    def __init__(
        self,
        token: str | None = None,
        config: RepoPulseConfig | None = None,
    ) -> None:
        self._config = config if config is not None else load_config()
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning("No GitHub token configured; using anonymous rate limits")
        self._client = httpx.AsyncClient(
            base_url=_GITHUB_BASE_URL,
            headers=headers,
            timeout=self._config.fetch.timeout_seconds,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._client.aclose()

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        not_found: GitHubAPIError | None = None,
    ) -> Any:
        """Issue a GET request with error and rate-limit handling.

        Raises:
            RateLimitExhaustedError: On 403 with a rate-limit message or on 429.
            GitHubAPIError: *not_found* on 404, otherwise for any non-2xx response.
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        logger.debug("GET %s %s", path, params or {})
        response = await self._client.get(path, params=params)

        if response.status_code in (403, 429):
            body = response.json() if response.content else {}
            message = body.get("message", "") if isinstance(body, dict) else ""
            if response.status_code == 429 or "rate limit" in message.lower():
                reset_header = response.headers.get("X-RateLimit-Reset")
                if reset_header:
                    reset_at = datetime.fromtimestamp(int(reset_header), tz=UTC)
                else:
                    reset_at = datetime.now(UTC)
                raise RateLimitExhaustedError(
                    reset_at=reset_at, status_code=response.status_code
                )

        if response.status_code == 404 and not_found is not None:
            raise not_found

        if not response.is_success:
            remaining = response.headers.get("X-RateLimit-Remaining")
            raise GitHubAPIError(
                message=f"GitHub API returned {response.status_code} for {path}",
                status_code=response.status_code,
                rate_limit_remaining=int(remaining) if remaining else None,
            )

        if not response.content:
            return None
        return response.json()

    async def fetch_repository(self, owner: str, repo: str) -> Repository:
        data = await self._get(
            f"/repos/{owner}/{repo}", not_found=RepoNotFoundError(f"{owner}/{repo}")
        )
        return Repository.model_validate(data)

    async def fetch_contributors(
        self, owner: str, repo: str, per_page: int = 100, page: int = 1
    ) -> list[Contributor]:
        """List contributors, ordered by contribution count descending.

        GitHub answers 204 with no body for empty repositories.
        """
        response_data = await self._get(
            f"/repos/{owner}/{repo}/contributors",
            params={"per_page": per_page, "page": page},
            not_found=RepoNotFoundError(f"{owner}/{repo}"),
        )
        return [Contributor.model_validate(item) for item in response_data or []]

    async def fetch_pull_requests(
        self, owner: str, repo: str, state: str = "all", per_page: int = 100
    ) -> list[PullRequest]:
        data = await self._get(
            f"/repos/{owner}/{repo}/pulls",
            params={
                "state": state,
                "per_page": per_page,
                "sort": "created",
                "direction": "desc",
            },
            not_found=RepoNotFoundError(f"{owner}/{repo}"),
        )
        return [PullRequest.model_validate(item) for item in data]

    async def fetch_issues(
        self, owner: str, repo: str, state: str = "all", per_page: int = 100
    ) -> list[Issue]:
        """List issues, including the pull requests GitHub reports as issues."""
        data = await self._get(
            f"/repos/{owner}/{repo}/issues",
            params={
                "state": state,
                "per_page": per_page,
                "sort": "created",
                "direction": "desc",
            },
            not_found=RepoNotFoundError(f"{owner}/{repo}"),
        )
        return [Issue.model_validate(item) for item in data]

    async def fetch_reviews(
        self, owner: str, repo: str, pull_number: int
    ) -> list[Review]:
        data = await self._get(
            f"/repos/{owner}/{repo}/pulls/{pull_number}/reviews",
            not_found=RepoNotFoundError(f"{owner}/{repo}#{pull_number}"),
        )
        return [Review.model_validate(item) for item in data]

    async def fetch_user(self, username: str) -> UserProfile:
        data = await self._get(
            f"/users/{username}", not_found=UserNotFoundError(username)
        )
        return UserProfile.model_validate(data)

    async def fetch_commits(
        self,
        owner: str,
        repo: str,
        since: str | None = None,
        until: str | None = None,
        per_page: int = 100,
    ) -> list[Commit]:
        """List commits, optionally bounded by ISO-8601 *since*/*until*.

        GitHub answers 409 for a repository without commits; that is
        reported as an empty list.
        """
        try:
            data = await self._get(
                f"/repos/{owner}/{repo}/commits",
                params={"since": since, "until": until, "per_page": per_page},
                not_found=RepoNotFoundError(f"{owner}/{repo}"),
            )
        except GitHubAPIError as exc:
            if exc.status_code == 409:
                logger.debug("Repository %s/%s has no commits", owner, repo)
                return []
            raise
        return [Commit.model_validate(item) for item in data]

    async def fetch_languages(self, owner: str, repo: str) -> dict[str, int]:
        """Bytes of code per language."""
        data = await self._get(
            f"/repos/{owner}/{repo}/languages",
            not_found=RepoNotFoundError(f"{owner}/{repo}"),
        )
        return {str(name): int(size) for name, size in (data or {}).items()}

    async def fetch_community_profile(
        self, owner: str, repo: str
    ) -> CommunityProfile:
        data = await self._get(
            f"/repos/{owner}/{repo}/community/profile",
            not_found=RepoNotFoundError(f"{owner}/{repo}"),
        )
        return CommunityProfile.model_validate(data or {})

    async def fetch_commit_activity(
        self, owner: str, repo: str
    ) -> list[WeeklyCommitActivity]:
        """Weekly commit totals for the last year.

        GitHub answers 202 with an empty object while it computes the
        statistics; that is reported as an empty list.
        """
        data = await self._get(
            f"/repos/{owner}/{repo}/stats/commit_activity",
            not_found=RepoNotFoundError(f"{owner}/{repo}"),
        )
        if not isinstance(data, list):
            logger.debug("Commit activity for %s/%s not ready yet", owner, repo)
            return []
        return [WeeklyCommitActivity.model_validate(item) for item in data]

    async def fetch_user_repositories(
        self, username: str, type: str = "owner", per_page: int = 100
    ) -> list[Repository]:
        """Repositories of *username*, most recently updated first."""
        data = await self._get(
            f"/users/{username}/repos",
            params={"type": type, "per_page": per_page, "sort": "updated"},
            not_found=UserNotFoundError(username),
        )
        return [Repository.model_validate(item) for item in data]

    async def fetch_user_events(
        self, username: str, per_page: int = 100
    ) -> list[UserEvent]:
        data = await self._get(
            f"/users/{username}/events/public",
            params={"per_page": per_page},
            not_found=UserNotFoundError(username),
        )
        return [UserEvent.model_validate(item) for item in data]

    async def fetch_starred_repositories(
        self, username: str, per_page: int = 100
    ) -> list[Repository]:
        data = await self._get(
            f"/users/{username}/starred",
            params={"per_page": per_page, "sort": "updated"},
            not_found=UserNotFoundError(username),
        )
        return [Repository.model_validate(item) for item in data]

    async def search_repositories(
        self, query: str, per_page: int = 10
    ) -> list[Repository]:
        """Search repositories by *query*, most starred first."""
        data = await self._get(
            "/search/repositories",
            params={"q": query, "per_page": per_page, "sort": "stars", "order": "desc"},
        )
        return [Repository.model_validate(item) for item in data.get("items", [])]

"""Record classifiers: filter, count and reshape raw GitHub records."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TypeVar

from repo_pulse.models import (
    Contributor,
    DeveloperActivity,
    Issue,
    IssueCounts,
    IssueStateFilter,
    LanguageShare,
    PullRequest,
    PullRequestCounts,
    PullRequestStateFilter,
    TeamMember,
    UserEvent,
    UserProfile,
)

R = TypeVar("R", PullRequest, Issue)


def filter_pull_requests_by_state(
    pull_requests: Sequence[PullRequest], state: str
) -> list[PullRequest]:
    """Filter pull requests by logical state.

    ``merged`` looks at ``merged_at`` only, so a record whose state
    disagrees with its merge timestamp still counts as merged.  Unknown
    filters return the input unchanged.
    """
    if state == PullRequestStateFilter.OPEN:
        return [pr for pr in pull_requests if pr.state == "open"]
    if state == PullRequestStateFilter.CLOSED:
        return [pr for pr in pull_requests if pr.state == "closed"]
    if state == PullRequestStateFilter.MERGED:
        return [pr for pr in pull_requests if pr.merged_at is not None]
    return list(pull_requests)


def filter_issues_by_state(issues: Sequence[Issue], state: str) -> list[Issue]:
    """Filter issues by logical state.

    ``open_no_pr`` drops the pull requests the issues endpoint lists
    alongside real issues.  Unknown filters return the input unchanged.
    """
    if state == IssueStateFilter.OPEN:
        return [issue for issue in issues if issue.state == "open"]
    if state == IssueStateFilter.CLOSED:
        return [issue for issue in issues if issue.state == "closed"]
    if state == IssueStateFilter.OPEN_NO_PR:
        return [
            issue for issue in issues
            if issue.state == "open" and issue.pull_request is None
        ]
    return list(issues)


def filter_by_state(records: Sequence[R], state: str) -> list[R]:
    """Filter a pull request or issue collection, picking the rules by record type."""
    if not records:
        return list(records)
    if isinstance(records[0], PullRequest):
        return filter_pull_requests_by_state(records, state)  # type: ignore[arg-type,return-value]
    return filter_issues_by_state(records, state)  # type: ignore[arg-type,return-value]


def get_merged_pull_requests(pull_requests: Sequence[PullRequest]) -> list[PullRequest]:
    """Closed pull requests that were actually merged."""
    return [
        pr for pr in pull_requests
        if pr.state == "closed" and pr.merged_at is not None
    ]


def limit_contributors(
    contributors: Sequence[Contributor], limit: int
) -> list[Contributor]:
    """Keep the first *limit* contributors in the order the API returned them."""
    return list(contributors[:limit])


def transform_contributor_to_team_member(
    contributor: Contributor, user: UserProfile | None = None
) -> TeamMember:
    return TeamMember(
        **contributor.model_dump(),
        user=user,
        commits=contributor.contributions or 0,
    )


def get_pull_request_counts(pull_requests: Sequence[PullRequest]) -> PullRequestCounts:
    open_prs = filter_pull_requests_by_state(pull_requests, PullRequestStateFilter.OPEN)
    closed_prs = filter_pull_requests_by_state(pull_requests, PullRequestStateFilter.CLOSED)
    merged_prs = get_merged_pull_requests(pull_requests)

    return PullRequestCounts(
        total=len(pull_requests),
        open=len(open_prs),
        closed=len(closed_prs),
        merged=len(merged_prs),
        open_prs=open_prs,
        closed_prs=closed_prs,
        merged_prs=merged_prs,
    )


def get_issue_counts(issues: Sequence[Issue]) -> IssueCounts:
    open_issues = filter_issues_by_state(issues, IssueStateFilter.OPEN)
    closed_issues = filter_issues_by_state(issues, IssueStateFilter.CLOSED)
    open_no_pr = filter_issues_by_state(issues, IssueStateFilter.OPEN_NO_PR)

    return IssueCounts(
        total=len(issues),
        open=len(open_issues),
        closed=len(closed_issues),
        open_no_pr=len(open_no_pr),
        open_issues=open_issues,
        closed_issues=closed_issues,
        open_issues_no_pr=open_no_pr,
    )


def get_language_shares(languages: Mapping[str, int]) -> list[LanguageShare]:
    """Byte counts per language as shares of the whole, largest first.

    Percentages are rounded to one decimal; an empty or all-zero mapping
    yields an empty list.
    """
    total = sum(languages.values())
    if total <= 0:
        return []
    ranked = sorted(languages.items(), key=lambda item: item[1], reverse=True)
    return [
        LanguageShare(language=name, bytes=size, percent=round(size / total * 100, 1))
        for name, size in ranked
    ]


_EVENT_BUCKETS = {
    "PushEvent": "pushes",
    "PullRequestEvent": "pull_requests",
    "IssuesEvent": "issues",
    "PullRequestReviewEvent": "code_reviews",
    "PullRequestReviewCommentEvent": "code_reviews",
}


def summarize_user_events(events: Sequence[UserEvent]) -> DeveloperActivity:
    """Count public events by the kind of work they represent."""
    counts = dict.fromkeys(DeveloperActivity.model_fields, 0)
    for event in events:
        counts[_EVENT_BUCKETS.get(event.type or "", "other")] += 1
    return DeveloperActivity(**counts)

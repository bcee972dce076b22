"""Tests for the record classifiers."""

from __future__ import annotations

from datetime import UTC, datetime

from repo_pulse.helpers import (
    filter_by_state,
    filter_issues_by_state,
    filter_pull_requests_by_state,
    get_issue_counts,
    get_language_shares,
    get_merged_pull_requests,
    get_pull_request_counts,
    limit_contributors,
    summarize_user_events,
    transform_contributor_to_team_member,
)
from repo_pulse.models import (
    Contributor,
    Issue,
    PullRequest,
    TeamMember,
    UserEvent,
    UserProfile,
)


class TestFilterPullRequestsByState:
    def test_open(self, sample_pull_requests: list[PullRequest]) -> None:
        result = filter_pull_requests_by_state(sample_pull_requests, "open")
        assert [pr.number for pr in result] == [11]

    def test_closed(self, sample_pull_requests: list[PullRequest]) -> None:
        result = filter_pull_requests_by_state(sample_pull_requests, "closed")
        assert [pr.number for pr in result] == [12, 13, 14]

    def test_merged(self, sample_pull_requests: list[PullRequest]) -> None:
        result = filter_pull_requests_by_state(sample_pull_requests, "merged")
        assert [pr.number for pr in result] == [12, 13]

    def test_merged_checks_timestamp_not_state(self) -> None:
        inconsistent = PullRequest(
            id=1, number=1, state="open",
            merged_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
        assert filter_pull_requests_by_state([inconsistent], "merged") == [inconsistent]

    def test_unknown_filter_returns_input(
        self, sample_pull_requests: list[PullRequest]
    ) -> None:
        assert filter_pull_requests_by_state(sample_pull_requests, "draft") == sample_pull_requests


class TestFilterIssuesByState:
    def test_open(self, sample_issues: list[Issue]) -> None:
        result = filter_issues_by_state(sample_issues, "open")
        assert [i.number for i in result] == [21, 22]

    def test_closed(self, sample_issues: list[Issue]) -> None:
        result = filter_issues_by_state(sample_issues, "closed")
        assert [i.number for i in result] == [23, 24, 25]

    def test_open_no_pr_excludes_pull_requests(self, sample_issues: list[Issue]) -> None:
        result = filter_issues_by_state(sample_issues, "open_no_pr")
        assert [i.number for i in result] == [21]
        assert all(i.pull_request is None for i in result)

    def test_unknown_filter_returns_input(self, sample_issues: list[Issue]) -> None:
        assert filter_issues_by_state(sample_issues, "locked") == sample_issues


class TestFilterByState:
    def test_dispatches_on_pull_requests(
        self, sample_pull_requests: list[PullRequest]
    ) -> None:
        assert len(filter_by_state(sample_pull_requests, "merged")) == 2

    def test_dispatches_on_issues(self, sample_issues: list[Issue]) -> None:
        assert len(filter_by_state(sample_issues, "open_no_pr")) == 1

    def test_empty(self) -> None:
        assert filter_by_state([], "open") == []


class TestGetMergedPullRequests:
    def test_excludes_closed_unmerged(
        self, sample_pull_requests: list[PullRequest]
    ) -> None:
        result = get_merged_pull_requests(sample_pull_requests)
        assert [pr.number for pr in result] == [12, 13]

    def test_requires_closed_state(self) -> None:
        inconsistent = PullRequest(
            id=1, number=1, state="open",
            merged_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
        assert get_merged_pull_requests([inconsistent]) == []


class TestLimitContributors:
    def test_truncates(self, sample_contributors: list[Contributor]) -> None:
        result = limit_contributors(sample_contributors, 2)
        assert [c.login for c in result] == ["alice", "bob"]

    def test_limit_above_length_returns_all(
        self, sample_contributors: list[Contributor]
    ) -> None:
        assert limit_contributors(sample_contributors, 10) == sample_contributors

    def test_preserves_order(self) -> None:
        unsorted = [
            Contributor(login="z", contributions=1),
            Contributor(login="a", contributions=99),
        ]
        assert limit_contributors(unsorted, 5) == unsorted


class TestTransformContributorToTeamMember:
    def test_copies_fields_and_zeroes_metrics(self) -> None:
        contributor = Contributor(login="alice", id=1, contributions=42, type="User")
        member = transform_contributor_to_team_member(contributor)

        assert isinstance(member, TeamMember)
        assert member.login == "alice"
        assert member.type == "User"
        assert member.contributions == 42
        assert member.commits == 42
        assert member.user is None
        assert member.additions == 0
        assert member.deletions == 0
        assert member.pull_requests == 0
        assert member.issues == 0
        assert member.code_reviews == 0
        assert member.lines_of_code == 0
        assert member.activity_score == 0
        assert member.collaboration_score == 0

    def test_attaches_user(self, sample_user_profile: UserProfile) -> None:
        member = transform_contributor_to_team_member(
            Contributor(login="alice"), sample_user_profile
        )
        assert member.user == sample_user_profile
        assert member.commits == 0


class TestCounts:
    def test_pull_request_counts(self, sample_pull_requests: list[PullRequest]) -> None:
        counts = get_pull_request_counts(sample_pull_requests)
        assert counts.total == 4
        assert counts.open == 1
        assert counts.closed == 3
        assert counts.merged == 2
        assert [pr.number for pr in counts.merged_prs] == [12, 13]

    def test_issue_counts(self, sample_issues: list[Issue]) -> None:
        counts = get_issue_counts(sample_issues)
        assert counts.total == 5
        assert counts.open == 2
        assert counts.closed == 3
        assert counts.open_no_pr == 1
        assert [i.number for i in counts.open_issues_no_pr] == [21]

    def test_empty_counts(self) -> None:
        assert get_pull_request_counts([]).total == 0
        assert get_issue_counts([]).open_no_pr == 0


class TestLanguageShares:
    def test_sorted_by_size(self) -> None:
        shares = get_language_shares({"Shell": 1, "Python": 2, "C": 0})
        assert [s.language for s in shares] == ["Python", "Shell", "C"]
        assert [s.percent for s in shares] == [66.7, 33.3, 0.0]
        assert shares[0].bytes == 2

    def test_empty(self) -> None:
        assert get_language_shares({}) == []
        assert get_language_shares({"Python": 0}) == []


class TestSummarizeUserEvents:
    def test_counts_by_kind(self) -> None:
        events = [
            UserEvent(id="1", type="PushEvent"),
            UserEvent(id="2", type="IssuesEvent"),
            UserEvent(id="3", type="PullRequestReviewCommentEvent"),
            UserEvent(id="4", type="PullRequestReviewEvent"),
            UserEvent(id="5", type="ForkEvent"),
            UserEvent(id="6"),
        ]
        activity = summarize_user_events(events)
        assert activity.pushes == 1
        assert activity.issues == 1
        assert activity.code_reviews == 2
        assert activity.pull_requests == 0
        assert activity.other == 2

    def test_empty(self) -> None:
        assert summarize_user_events([]).model_dump() == {
            "pushes": 0,
            "pull_requests": 0,
            "issues": 0,
            "code_reviews": 0,
            "other": 0,
        }

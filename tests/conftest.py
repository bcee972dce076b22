"""Shared test fixtures for Repo Pulse tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from repo_pulse.models import (
    Contributor,
    Issue,
    PullRequest,
    PullRequestRef,
    UserProfile,
)


@pytest.fixture
def sample_pull_requests() -> list[PullRequest]:
    return [
        PullRequest(
            id=101,
            number=11,
            state="open",
            title="Add streaming parser",
            created_at=datetime(2024, 3, 5, 9, 0, tzinfo=UTC),
        ),
        PullRequest(
            id=102,
            number=12,
            state="closed",
            title="Fix off-by-one in tokenizer",
            created_at=datetime(2024, 3, 1, 0, 0, tzinfo=UTC),
            merged_at=datetime(2024, 3, 1, 12, 0, tzinfo=UTC),
            closed_at=datetime(2024, 3, 1, 12, 0, tzinfo=UTC),
        ),
        PullRequest(
            id=103,
            number=13,
            state="closed",
            title="Bump dependencies",
            created_at=datetime(2024, 3, 2, 0, 0, tzinfo=UTC),
            merged_at=datetime(2024, 3, 2, 6, 0, tzinfo=UTC),
            closed_at=datetime(2024, 3, 2, 6, 0, tzinfo=UTC),
        ),
        PullRequest(
            id=104,
            number=14,
            state="closed",
            title="Experimental rewrite",
            created_at=datetime(2024, 3, 3, 0, 0, tzinfo=UTC),
            closed_at=datetime(2024, 3, 4, 0, 0, tzinfo=UTC),
        ),
    ]


@pytest.fixture
def sample_issues() -> list[Issue]:
    return [
        Issue(id=201, number=21, state="open", title="Crash on empty input"),
        Issue(
            id=202,
            number=22,
            state="open",
            title="Add streaming parser",
            pull_request=PullRequestRef(
                url="https://api.github.com/repos/acme/widgets/pulls/22"
            ),
        ),
        Issue(id=203, number=23, state="closed", title="Docs typo"),
        Issue(id=204, number=24, state="closed", title="Slow startup"),
        Issue(id=205, number=25, state="closed", title="Wrong exit code"),
    ]


@pytest.fixture
def sample_contributors() -> list[Contributor]:
    return [
        Contributor(login="alice", id=1, contributions=50),
        Contributor(login="bob", id=2, contributions=30),
        Contributor(login="carol", id=3, contributions=20),
        Contributor(login="dave", id=4, contributions=10),
    ]


@pytest.fixture
def sample_user_profile() -> UserProfile:
    return UserProfile(
        login="alice",
        id=1,
        name="Alice Liddell",
        company="Acme",
        public_repos=12,
        followers=40,
        created_at=datetime(2015, 6, 1, tzinfo=UTC),
    )

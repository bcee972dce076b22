"""Data models for Repo Pulse analytics."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class PullRequestStateFilter(StrEnum):
    """Logical states a pull request collection can be filtered by."""
    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"


class IssueStateFilter(StrEnum):
    """Logical states an issue collection can be filtered by."""
    OPEN = "open"
    CLOSED = "closed"
    OPEN_NO_PR = "open_no_pr"


class MetricTrend(StrEnum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class MetricStatus(StrEnum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertType(StrEnum):
    WARNING = "warning"
    CRITICAL = "critical"


class MetricKind(StrEnum):
    """Recognised health metrics, keyed by display name.

    Each kind knows how to turn a raw value into a 0-100 sub-score and
    how to judge it against its threshold.
    """
    TIME_TO_FIRST_RESPONSE = "Time to First Response"
    PR_MERGE_TIME = "PR Merge Time"
    ISSUE_RESOLUTION_RATE = "Issue Resolution Rate"
    BUS_FACTOR = "Bus Factor"

    @classmethod
    def from_name(cls, name: str) -> MetricKind | None:
        """Return the kind for a display name, or None if unrecognised."""
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def lower_is_better(self) -> bool:
        return self in (MetricKind.TIME_TO_FIRST_RESPONSE, MetricKind.PR_MERGE_TIME)

    def normalize(self, value: float, threshold: float) -> float:
        """Map a raw metric value to a sub-score.

        Time metrics degrade linearly and reach 0 at the threshold. Resolution
        rate is already a percentage. Bus factor is capped at 100.
        """
        if self is MetricKind.ISSUE_RESOLUTION_RATE:
            return value
        if threshold <= 0:
            return 0.0
        ratio = value / threshold * 100
        if self.lower_is_better:
            return max(0.0, 100 - ratio)
        return min(100.0, ratio)

    def status_for(self, value: float, threshold: float) -> MetricStatus:
        if self.lower_is_better:
            within = value <= threshold
        else:
            within = value >= threshold
        return MetricStatus.HEALTHY if within else MetricStatus.WARNING


# ---------------------------------------------------------------------------
# Raw GitHub records
# ---------------------------------------------------------------------------


class _Record(BaseModel):
    """Immutable record parsed from a GitHub REST payload."""
    model_config = ConfigDict(frozen=True, extra="ignore")


class PullRequest(_Record):
    """A pull request as listed by ``GET /repos/{owner}/{repo}/pulls``."""
    id: int
    number: int
    state: str
    title: str = ""
    created_at: datetime | None = None
    merged_at: datetime | None = None
    closed_at: datetime | None = None


class PullRequestRef(_Record):
    """Back-reference present on issues that are really pull requests."""
    url: str | None = None
    html_url: str | None = None
    merged_at: datetime | None = None


class Issue(_Record):
    """An issue as listed by ``GET /repos/{owner}/{repo}/issues``."""
    id: int
    number: int
    state: str
    title: str = ""
    created_at: datetime | None = None
    closed_at: datetime | None = None
    pull_request: PullRequestRef | None = None


class Contributor(_Record):
    login: str | None = None
    id: int | None = None
    avatar_url: str | None = None
    html_url: str | None = None
    type: str | None = None
    contributions: int = 0


class Review(_Record):
    id: int
    state: str | None = None
    submitted_at: datetime | None = None


class UserProfile(_Record):
    """GitHub user profile data."""
    login: str
    id: int | None = None
    name: str | None = None
    company: str | None = None
    location: str | None = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0
    created_at: datetime | None = None


class Repository(_Record):
    """GitHub repository metadata."""
    id: int
    name: str
    full_name: str
    description: str | None = None
    language: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    html_url: str | None = None
    archived: bool = False
    fork: bool = False
    updated_at: datetime | None = None


class Commit(_Record):
    sha: str
    html_url: str | None = None


class CommunityProfile(_Record):
    """Community health files as reported by ``GET .../community/profile``.

    ``files`` maps a file kind (readme, license, contributing, ...) to its
    metadata, or to None when the repository lacks it.
    """
    health_percentage: int = 0
    description: str | None = None
    documentation: str | None = None
    files: dict[str, dict[str, Any] | None] = {}
    updated_at: datetime | None = None

    @property
    def present_files(self) -> list[str]:
        return sorted(kind for kind, meta in self.files.items() if meta is not None)

    @property
    def missing_files(self) -> list[str]:
        return sorted(kind for kind, meta in self.files.items() if meta is None)


class WeeklyCommitActivity(_Record):
    """One week of ``GET .../stats/commit_activity``; *days* starts on Sunday."""
    week: int
    total: int = 0
    days: list[int] = []


class EventRepo(_Record):
    id: int | None = None
    name: str


class UserEvent(_Record):
    """A public event performed by a user."""
    id: str
    type: str | None = None
    repo: EventRepo | None = None
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


class HealthMetric(BaseModel):
    """A single named health metric judged against its threshold."""
    name: str
    value: float
    threshold: float
    trend: MetricTrend = MetricTrend.STABLE
    status: MetricStatus = MetricStatus.HEALTHY

    @property
    def kind(self) -> MetricKind | None:
        return MetricKind.from_name(self.name)


class BusFactor(BaseModel):
    score: int = 0
    critical_contributors: int = 0
    risk_level: RiskLevel = RiskLevel.HIGH


class HealthAlert(BaseModel):
    id: str
    type: AlertType
    message: str
    timestamp: str
    resolved: bool = False


class TeamMember(Contributor):
    """A contributor enriched with profile and activity fields.

    Only ``commits`` is derived here; the remaining activity fields are
    zero until something computes them.
    """
    user: UserProfile | None = None
    commits: int = 0
    additions: int = 0
    deletions: int = 0
    pull_requests: int = 0
    issues: int = 0
    code_reviews: int = 0
    lines_of_code: int = 0
    activity_score: float = 0.0
    collaboration_score: float = 0.0


class PullRequestCounts(BaseModel):
    total: int = 0
    open: int = 0
    closed: int = 0
    merged: int = 0
    open_prs: list[PullRequest] = []
    closed_prs: list[PullRequest] = []
    merged_prs: list[PullRequest] = []


class IssueCounts(BaseModel):
    total: int = 0
    open: int = 0
    closed: int = 0
    open_no_pr: int = 0
    open_issues: list[Issue] = []
    closed_issues: list[Issue] = []
    open_issues_no_pr: list[Issue] = []


class ReviewFetchOutcome(BaseModel):
    """Result of fetching the reviews of one sampled pull request."""
    pr_number: int
    review_count: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def reviewed(self) -> bool:
        return self.succeeded and self.review_count > 0


class ProjectHealthMetrics(BaseModel):
    """Complete project health result."""
    overall_score: int = 0
    metrics: list[HealthMetric] = []
    bus_factor: BusFactor = BusFactor()
    alerts: list[HealthAlert] = []


class TeamMetrics(BaseModel):
    """Aggregate team activity for a repository."""
    total_commits: int = 0
    total_pull_requests: int = 0
    total_issues: int = 0
    open_pull_requests: int = 0
    closed_pull_requests: int = 0
    merged_pull_requests: int = 0
    average_response_time: float = 0.0
    code_review_coverage: int = 0


class TeamReport(TeamMetrics):
    """Team metrics together with the enriched team members."""
    members: list[TeamMember] = []


class LanguageShare(BaseModel):
    language: str
    bytes: int
    percent: float


class RepositoryOverview(BaseModel):
    """Metadata, language mix, top contributors and community health of a repository."""
    repository: Repository
    languages: list[LanguageShare] = []
    contributors: list[Contributor] = []
    community_profile: CommunityProfile | None = None
    commit_activity: list[WeeklyCommitActivity] = []

    @property
    def commits_last_year(self) -> int:
        return sum(week.total for week in self.commit_activity)


class DeveloperActivity(BaseModel):
    """Counts of a developer's recent public events by kind."""
    pushes: int = 0
    pull_requests: int = 0
    issues: int = 0
    code_reviews: int = 0
    other: int = 0


class DeveloperProfile(BaseModel):
    """A user with their repositories, starred repositories and recent activity."""
    user: UserProfile
    repositories: list[Repository] = []
    starred: list[Repository] = []
    events: list[UserEvent] = []
    activity: DeveloperActivity = DeveloperActivity()


class RepositorySearchResult(BaseModel):
    query: str
    items: list[Repository] = []

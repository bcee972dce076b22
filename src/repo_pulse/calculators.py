"""Health and team metric calculators.

Every function here is a pure computation over already-fetched records,
except the review sampling, which awaits an injected fetch function.
Missing timestamps and empty collections yield zero results rather than
errors.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime, timedelta

from repo_pulse.models import (
    AlertType,
    BusFactor,
    Contributor,
    HealthAlert,
    HealthMetric,
    Issue,
    MetricKind,
    MetricStatus,
    MetricTrend,
    PullRequest,
    Review,
    ReviewFetchOutcome,
    RiskLevel,
)

logger = logging.getLogger(__name__)

ReviewFetcher = Callable[[str, str, int], Awaitable[Sequence[Review]]]

# Stand-ins until issue and PR comment timelines are fetched.
FIRST_RESPONSE_PLACEHOLDER_HOURS = 4.2
ASSUMED_RESPONSE_HOURS = 4.0

DEFAULT_CONTRIBUTION_SHARE = 0.8
DEFAULT_RESPONSE_SAMPLE_SIZE = 50
DEFAULT_REVIEW_SAMPLE_SIZE = 20
LOW_RISK_MIN_CONTRIBUTORS = 5
MEDIUM_RISK_MIN_CONTRIBUTORS = 3

DEFAULT_WEIGHTS: dict[MetricKind, float] = {kind: 0.25 for kind in MetricKind}

BUS_FACTOR_ALERT_ID = "alert-bus-factor-critical"

_WHITESPACE_RE = re.compile(r"\s+")
_SECONDS_PER_HOUR = 3600


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def _as_utc(value: datetime) -> datetime:
    """Read a timezone-less timestamp as UTC, the zone GitHub reports in."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _hours_between(start: datetime, end: datetime) -> float:
    return (_as_utc(end) - _as_utc(start)).total_seconds() / _SECONDS_PER_HOUR


def calculate_pr_merge_time(merged_prs: Sequence[PullRequest]) -> float:
    """Average hours from creation to merge.

    Pull requests missing either timestamp are left out of both the sum
    and the count.
    """
    total_hours = 0.0
    valid_prs = 0

    for pr in merged_prs:
        if pr.created_at is not None and pr.merged_at is not None:
            total_hours += _hours_between(pr.created_at, pr.merged_at)
            valid_prs += 1

    return total_hours / valid_prs if valid_prs > 0 else 0.0


def calculate_issue_resolution_rate(
    closed_issues: Sequence[Issue], open_issues: Sequence[Issue]
) -> int:
    """Percentage of issues that are closed."""
    total = len(closed_issues) + len(open_issues)
    if total == 0:
        return 0
    return round_half_up(len(closed_issues) / total * 100)


def calculate_time_to_first_response(
    owner: str,
    repo: str,
    issues: Sequence[Issue],
    placeholder_hours: float = FIRST_RESPONSE_PLACEHOLDER_HOURS,
) -> float:
    """Hours until the first response on an issue.

    Always *placeholder_hours*: the real figure needs issue comment
    timestamps, which the data source does not fetch.
    """
    # TODO: derive from GET /repos/{owner}/{repo}/issues/comments once the
    # data source exposes comment timelines.
    return placeholder_hours


def classify_bus_factor_risk(critical_contributors: int) -> RiskLevel:
    if critical_contributors >= LOW_RISK_MIN_CONTRIBUTORS:
        return RiskLevel.LOW
    if critical_contributors >= MEDIUM_RISK_MIN_CONTRIBUTORS:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def calculate_bus_factor(
    contributors: Sequence[Contributor],
    contribution_share: float = DEFAULT_CONTRIBUTION_SHARE,
) -> BusFactor:
    """Count the contributors who together account for *contribution_share*
    of all contributions.

    Contributors are walked in the given order (the API lists them by
    contribution count, descending); nothing is re-sorted.  With no
    contributors the count is 0, which classifies as high risk.
    """
    total = sum(c.contributions or 0 for c in contributors)
    threshold = total * contribution_share
    critical = 0
    running_total = 0

    for contributor in contributors:
        running_total += contributor.contributions or 0
        critical += 1
        if running_total >= threshold:
            break

    return BusFactor(
        score=critical,
        critical_contributors=critical,
        risk_level=classify_bus_factor_risk(critical),
    )


def calculate_average_response_time(
    pull_requests: Sequence[PullRequest],
    sample_size: int = DEFAULT_RESPONSE_SAMPLE_SIZE,
    assumed_hours: float = ASSUMED_RESPONSE_HOURS,
) -> float:
    """Average hours until the first response on a pull request.

    Estimated: every sampled pull request with a creation time is assumed
    to get its first response *assumed_hours* later, so the result is
    *assumed_hours* whenever one such pull request exists.
    """
    total_hours = 0.0
    valid_prs = 0

    for pr in pull_requests[:sample_size]:
        if pr.created_at is None:
            continue
        estimated_response = pr.created_at + timedelta(hours=assumed_hours)
        total_hours += _hours_between(pr.created_at, estimated_response)
        valid_prs += 1

    return total_hours / valid_prs if valid_prs > 0 else 0.0


async def sample_review_outcomes(
    fetch_reviews: ReviewFetcher,
    owner: str,
    repo: str,
    merged_prs: Sequence[PullRequest],
    sample_size: int = DEFAULT_REVIEW_SAMPLE_SIZE,
) -> list[ReviewFetchOutcome]:
    """Fetch reviews for the first *sample_size* merged pull requests.

    Requests are issued one at a time.  A failed fetch is recorded as a
    failed outcome instead of aborting the sample.
    """
    outcomes: list[ReviewFetchOutcome] = []

    for pr in merged_prs[:sample_size]:
        try:
            reviews = await fetch_reviews(owner, repo, pr.number)
        except Exception as exc:
            logger.warning("Failed to get reviews for PR %s: %s", pr.number, exc)
            outcomes.append(ReviewFetchOutcome(pr_number=pr.number, error=str(exc)))
            continue
        outcomes.append(ReviewFetchOutcome(pr_number=pr.number, review_count=len(reviews)))

    return outcomes


def summarize_review_coverage(
    outcomes: Sequence[ReviewFetchOutcome], total_merged: int
) -> int:
    """Percentage of merged pull requests with at least one review.

    The denominator is every merged pull request, not only the sampled
    ones, and failed fetches count as unreviewed.
    """
    if total_merged <= 0:
        return 0
    reviewed = sum(1 for outcome in outcomes if outcome.reviewed)
    return round_half_up(reviewed / total_merged * 100)


async def calculate_review_coverage(
    fetch_reviews: ReviewFetcher,
    owner: str,
    repo: str,
    merged_prs: Sequence[PullRequest],
    sample_size: int = DEFAULT_REVIEW_SAMPLE_SIZE,
) -> int:
    if not merged_prs:
        return 0
    outcomes = await sample_review_outcomes(
        fetch_reviews, owner, repo, merged_prs, sample_size=sample_size
    )
    return summarize_review_coverage(outcomes, len(merged_prs))


def calculate_overall_health_score(
    metrics: Sequence[HealthMetric],
    weights: dict[MetricKind, float] | None = None,
) -> int:
    """Weighted composite of the recognised metrics, clamped to 0-100.

    Metrics whose name is not a :class:`MetricKind` carry no weight.
    """
    weights = DEFAULT_WEIGHTS if weights is None else weights
    score = 0.0

    for metric in metrics:
        kind = metric.kind
        if kind is None:
            continue
        score += kind.normalize(metric.value, metric.threshold) * weights.get(kind, 0.0)

    return round_half_up(max(0.0, min(100.0, score)))


def build_health_metrics(
    time_to_first_response: float,
    pr_merge_time: float,
    issue_resolution_rate: float,
    bus_factor: BusFactor,
    thresholds: dict[MetricKind, float],
) -> list[HealthMetric]:
    """Assemble the four health metrics, each judged against its threshold."""
    values = {
        MetricKind.TIME_TO_FIRST_RESPONSE: time_to_first_response,
        MetricKind.PR_MERGE_TIME: pr_merge_time,
        MetricKind.ISSUE_RESOLUTION_RATE: issue_resolution_rate,
        MetricKind.BUS_FACTOR: float(bus_factor.score),
    }
    metrics: list[HealthMetric] = []
    for kind, value in values.items():
        threshold = thresholds[kind]
        metrics.append(
            HealthMetric(
                name=kind.value,
                value=value,
                threshold=threshold,
                trend=MetricTrend.UP if kind is MetricKind.BUS_FACTOR else MetricTrend.STABLE,
                status=kind.status_for(value, threshold),
            )
        )
    return metrics


def _alert_id(name: str) -> str:
    return "alert-" + _WHITESPACE_RE.sub("-", name).lower()


def _utc_timestamp() -> str:
    """Current time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _format_number(value: float) -> str:
    """Render whole floats without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def generate_health_alerts(
    metrics: Sequence[HealthMetric], bus_factor: BusFactor
) -> list[HealthAlert]:
    """One alert per warning or critical metric, plus a bus factor alert.

    The bus factor alert is added whenever the risk is high, even if the
    Bus Factor metric already produced one.
    """
    timestamp = _utc_timestamp()
    alerts: list[HealthAlert] = []

    for metric in metrics:
        if metric.status == MetricStatus.WARNING:
            direction = "above" if metric.value > metric.threshold else "below"
            alerts.append(
                HealthAlert(
                    id=_alert_id(metric.name),
                    type=AlertType.WARNING,
                    message=(
                        f"{metric.name} is {direction} recommended threshold "
                        f"({_format_number(metric.value)} vs "
                        f"{_format_number(metric.threshold)})"
                    ),
                    timestamp=timestamp,
                )
            )
        elif metric.status == MetricStatus.CRITICAL:
            alerts.append(
                HealthAlert(
                    id=_alert_id(metric.name),
                    type=AlertType.CRITICAL,
                    message=f"{metric.name} requires immediate attention",
                    timestamp=timestamp,
                )
            )

    if bus_factor.risk_level == RiskLevel.HIGH:
        alerts.append(
            HealthAlert(
                id=BUS_FACTOR_ALERT_ID,
                type=AlertType.CRITICAL,
                message=(
                    f"Bus factor is critically low ({bus_factor.score}). "
                    "Project sustainability is at risk."
                ),
                timestamp=timestamp,
            )
        )

    return alerts

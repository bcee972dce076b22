"""Example: Compute project health and team metrics with Repo Pulse."""

from __future__ import annotations

import asyncio
import os

from repo_pulse import GitHubClient, RepoAnalytics, load_config


async def main() -> None:
    config = load_config()
    async with GitHubClient(token=os.environ.get("GITHUB_TOKEN"), config=config) as client:
        analytics = RepoAnalytics(client, config)
        health = await analytics.project_health("octocat", "Hello-World")
        team = await analytics.team_metrics("octocat", "Hello-World")
        overview = await analytics.repository_overview("octocat", "Hello-World")

    print(f"Overall score: {health.overall_score}/100")
    for metric in health.metrics:
        print(f"  {metric.name}: {metric.value:.1f} ({metric.status})")
    print(f"Bus factor: {health.bus_factor.score} ({health.bus_factor.risk_level} risk)")
    for alert in health.alerts:
        print(f"  [{alert.type}] {alert.message}")

    print(f"Merged PRs: {team.merged_pull_requests}")
    print(f"Review coverage: {team.code_review_coverage}%")

    for share in overview.languages:
        print(f"  {share.language}: {share.percent:.1f}%")


if __name__ == "__main__":
    asyncio.run(main())

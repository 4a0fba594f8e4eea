from __future__ import annotations

from testboard.schemas import (
    RepositoryCoverageTimeline,
    RepositoryFlakyTests,
    RepositoryPerformanceTimeline,
    RepositoryTimeline,
)

from .base import BaseClient


def repository_url(repo_name: str, suffix: str, project_name: str | None = None) -> str:
    """`repo/{repo}/project/{project}/{suffix}` when a project is given, else `repo/{repo}/{suffix}`."""
    if project_name:
        return f'repo/{repo_name}/project/{project_name}/{suffix}'
    return f'repo/{repo_name}/{suffix}'


class RepositoryClient(BaseClient):
    """Reads the repository-level aggregate views."""

    async def fetch_repository_timeline(self, repo_name: str, project_name: str | None = None) -> RepositoryTimeline:
        response = await self._get(repository_url(repo_name, 'timeline', project_name))
        return RepositoryTimeline.model_validate(response.json())

    async def fetch_repository_coverage_timeline(
        self, repo_name: str, project_name: str | None = None
    ) -> RepositoryCoverageTimeline:
        response = await self._get(repository_url(repo_name, 'coverage/timeline', project_name))
        return RepositoryCoverageTimeline.model_validate(response.json())

    async def fetch_repository_coverage_badge(self, repo_name: str, project_name: str | None = None) -> str:
        response = await self._get(repository_url(repo_name, 'badge/coverage', project_name))
        return response.text

    async def fetch_repository_flaky_tests(
        self, repo_name: str, project_name: str | None = None
    ) -> RepositoryFlakyTests:
        response = await self._get(repository_url(repo_name, 'tests/flaky', project_name))
        return RepositoryFlakyTests.model_validate(response.json())

    async def fetch_repository_performance_timeline(
        self, repo_name: str, project_name: str | None = None
    ) -> RepositoryPerformanceTimeline:
        response = await self._get(repository_url(repo_name, 'performance/timeline', project_name))
        return RepositoryPerformanceTimeline.model_validate(response.json())

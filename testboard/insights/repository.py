from __future__ import annotations

from collections import defaultdict
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from testboard.base_filter import GitMetadataFilter
from testboard.db.models import CodeCoverageStats, GitMetadata, PerformanceResult, TestCase, TestRun, TestSuite
from testboard.mapper import TestRunSummaryMapper
from testboard.repo_types import NoSchema
from testboard.repository import BaseRepository, paginate
from testboard.schemas import (
    CoverageStat,
    PerformanceTimelineEntry,
    RepositoryCoverageTimeline,
    RepositoryCoverageTimelineEntry,
    RepositoryFlakyTest,
    RepositoryFlakyTests,
    RepositoryPerformanceTestTimeline,
    RepositoryPerformanceTimeline,
    RepositoryTimeline,
    RepositoryTimelineEntry,
    TestRunSummarySchema,
)


def repository_criteria(repo_name: str, project_name: str | None) -> list[Any]:
    """
    WHERE criteria selecting the main-branch runs of one repository.

    Without a project name only runs that were uploaded without one match.
    """
    crit = GitMetadataFilter(repo=repo_name, project=project_name, main_branch=True).where_criteria(GitMetadata)
    if project_name is None:
        crit.append(GitMetadata.project_name.is_(None))
    return crit


class RepositoryInsightsRepository(BaseRepository[GitMetadata, NoSchema]):
    """Aggregate reads across the runs of one code repository (optionally one project in it)."""

    async def fetch_timeline(
        self,
        repo_name: str,
        project_name: str | None = None,
        *,
        session: AsyncSession | None = None,
    ) -> RepositoryTimeline:
        stmt = (
            select(
                TestRun.public_id,
                TestRun.created_timestamp,
                TestRun.cumulative_duration,
                TestRun.average_duration,
                TestRun.total_test_count,
            )
            .join(GitMetadata, GitMetadata.test_run_id == TestRun.id)
            .where(*repository_criteria(repo_name, project_name))
            .order_by(TestRun.created_timestamp.asc(), TestRun.id.asc())
        )

        s = self._resolve_session(session)
        res = await s.execute(stmt)
        return RepositoryTimeline(
            timeline_entries=[
                RepositoryTimelineEntry(
                    public_id=row.public_id,
                    created_timestamp=row.created_timestamp,
                    cumulative_duration=row.cumulative_duration,
                    test_average_duration=row.average_duration,
                    total_test_count=row.total_test_count,
                )
                for row in res
            ]
        )

    def _coverage_stmt(self, repo_name: str, project_name: str | None) -> Any:
        return (
            select(
                TestRun.public_id,
                TestRun.created_timestamp,
                CodeCoverageStats.line_covered,
                CodeCoverageStats.line_missed,
                CodeCoverageStats.branch_covered,
                CodeCoverageStats.branch_missed,
            )
            .join(GitMetadata, GitMetadata.test_run_id == TestRun.id)
            .join(CodeCoverageStats, CodeCoverageStats.test_run_id == TestRun.id)
            .where(*repository_criteria(repo_name, project_name))
        )

    async def fetch_coverage_timeline(
        self,
        repo_name: str,
        project_name: str | None = None,
        *,
        session: AsyncSession | None = None,
    ) -> RepositoryCoverageTimeline:
        stmt = self._coverage_stmt(repo_name, project_name).order_by(
            TestRun.created_timestamp.asc(), TestRun.id.asc()
        )

        s = self._resolve_session(session)
        res = await s.execute(stmt)
        return RepositoryCoverageTimeline(
            timeline_entries=[
                RepositoryCoverageTimelineEntry(
                    public_id=row.public_id,
                    created_timestamp=row.created_timestamp,
                    line_stat=CoverageStat(covered=row.line_covered, missed=row.line_missed),
                    branch_stat=CoverageStat(covered=row.branch_covered, missed=row.branch_missed),
                )
                for row in res
            ]
        )

    async def fetch_latest_coverage_percentage(
        self,
        repo_name: str,
        project_name: str | None = None,
        *,
        session: AsyncSession | None = None,
    ) -> float | None:
        stmt = (
            self._coverage_stmt(repo_name, project_name)
            .order_by(TestRun.created_timestamp.desc(), TestRun.id.desc())
            .limit(1)
        )

        s = self._resolve_session(session)
        row = (await s.execute(stmt)).first()
        if row is None:
            return None
        return CoverageStat(covered=row.line_covered, missed=row.line_missed).percentage

    async def fetch_flaky_tests(
        self,
        repo_name: str,
        project_name: str | None = None,
        *,
        max_runs: int = 50,
        failure_threshold: int = 5,
        session: AsyncSession | None = None,
    ) -> RepositoryFlakyTests:
        """
        Tests that failed at least `failure_threshold` times and passed at least once
        within the latest `max_runs` main-branch runs. Skipped executions are ignored.
        """
        s = self._resolve_session(session)

        latest_runs = (
            select(TestRun.id)
            .join(GitMetadata, GitMetadata.test_run_id == TestRun.id)
            .where(*repository_criteria(repo_name, project_name))
            .order_by(TestRun.created_timestamp.desc(), TestRun.id.desc())
            .limit(max_runs)
        )
        run_ids = list((await s.execute(latest_runs)).scalars())
        if not run_ids:
            return RepositoryFlakyTests()

        stmt = (
            select(
                TestCase.package_name,
                TestCase.class_name,
                TestCase.name,
                TestCase.passed,
                TestRun.public_id,
                TestRun.created_timestamp,
            )
            .join(TestSuite, TestSuite.id == TestCase.test_suite_id)
            .join(TestRun, TestRun.id == TestSuite.test_run_id)
            .where(TestRun.id.in_(run_ids), TestCase.skipped.is_(False))
            .order_by(TestRun.created_timestamp.asc(), TestRun.id.asc())
        )
        res = await s.execute(stmt)

        failures: dict[tuple[str | None, str | None, str], list[Any]] = defaultdict(list)
        passes: dict[tuple[str | None, str | None, str], int] = defaultdict(int)
        for row in res:
            key = (row.package_name, row.class_name, row.name)
            if row.passed:
                passes[key] += 1
            else:
                failures[key].append(row)

        tests = []
        for key, failed_rows in failures.items():
            if len(failed_rows) < failure_threshold or passes[key] == 0:
                continue
            first, latest = failed_rows[0], failed_rows[-1]
            tests.append(
                RepositoryFlakyTest(
                    package_name=key[0],
                    class_name=key[1],
                    name=key[2],
                    flakiness_percentage=round(len(failed_rows) * 100 / len(run_ids), 2),
                    failure_count=len(failed_rows),
                    first_test_run_public_id=first.public_id,
                    first_test_run_created_timestamp=first.created_timestamp,
                    latest_test_run_public_id=latest.public_id,
                    latest_test_run_created_timestamp=latest.created_timestamp,
                )
            )

        tests.sort(key=lambda t: (-t.failure_count, t.name))
        return RepositoryFlakyTests(tests=tests)

    async def fetch_performance_timeline(
        self,
        repo_name: str,
        project_name: str | None = None,
        *,
        session: AsyncSession | None = None,
    ) -> RepositoryPerformanceTimeline:
        stmt = (
            select(PerformanceResult, TestRun.public_id, TestRun.created_timestamp)
            .join(TestRun, TestRun.id == PerformanceResult.test_run_id)
            .join(GitMetadata, GitMetadata.test_run_id == TestRun.id)
            .where(*repository_criteria(repo_name, project_name))
            .order_by(PerformanceResult.name.asc(), TestRun.created_timestamp.asc(), TestRun.id.asc())
        )

        s = self._resolve_session(session)
        res = await s.execute(stmt)

        timelines: dict[str, list[PerformanceTimelineEntry]] = {}
        for result, public_id, created_timestamp in res:
            timelines.setdefault(result.name, []).append(
                PerformanceTimelineEntry(
                    public_id=public_id,
                    created_timestamp=created_timestamp,
                    requests_per_second=result.requests_per_second,
                    average_time=result.average_time,
                    maximum_time=result.maximum_time,
                    p95=result.p95,
                )
            )

        return RepositoryPerformanceTimeline(
            test_timelines=[
                RepositoryPerformanceTestTimeline(name=name, entries=entries) for name, entries in timelines.items()
            ]
        )

    async def fetch_test_runs(
        self,
        repo_name: str,
        project_name: str | None = None,
        *,
        page: int = 1,
        size: int = 20,
        session: AsyncSession | None = None,
    ) -> list[TestRunSummarySchema]:
        """Newest-first page of run summaries."""
        stmt = (
            select(TestRun)
            .join(GitMetadata, GitMetadata.test_run_id == TestRun.id)
            .where(*repository_criteria(repo_name, project_name))
            .order_by(TestRun.created_timestamp.desc(), TestRun.id.desc())
        )
        stmt = paginate(stmt, page=page, size=size)

        s = self._resolve_session(session)
        res = await s.execute(stmt)
        summary_mapper = TestRunSummaryMapper()
        return [summary_mapper.to_schema(run) for run in res.scalars()]

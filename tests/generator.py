from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from testboard.db import models
from testboard.mapper import parse_package_and_class_name


@dataclass
class TestSuiteData:
    __test__ = False

    package_and_class_name: str
    passing_test_case_names: list[str] = field(default_factory=list)
    failing_test_case_names: list[str] = field(default_factory=list)
    skipped_test_case_names: list[str] = field(default_factory=list)


def make_test_run(public_id: str, total_test_count: int) -> models.TestRun:
    return models.TestRun(
        public_id=public_id,
        total_test_count=total_test_count,
        total_passing_count=total_test_count,
        total_failure_count=0,
        total_skipped_count=0,
        cumulative_duration=30.0,
        average_duration=30.0 / total_test_count if total_test_count > 0 else 30.0,
        slowest_test_case_duration=10.0,
        passed=True,
        created_timestamp=datetime.now(timezone.utc),
    )


def make_test_suite(test_run_id: int, package_and_class_name: str, idx: int) -> models.TestSuite:
    package_name, class_name = parse_package_and_class_name(package_and_class_name)
    return models.TestSuite(
        test_run_id=test_run_id,
        package_name=package_name,
        class_name=class_name,
        idx=idx,
        test_count=6,
        passing_count=3,
        failure_count=2,
        skipped_count=1,
        duration=10.0,
        start_ts=datetime.now(timezone.utc),
        hostname='hostname',
    )


def make_test_case(test_suite_id: int, name: str, idx: int, passed: bool) -> models.TestCase:
    return models.TestCase(
        test_suite_id=test_suite_id,
        name=name,
        idx=idx,
        class_name=f'{name}ClassName',
        duration=2.5,
        passed=passed,
        skipped=False,
    )


def make_test_failure(test_case_id: int, test_case_name: str) -> models.TestFailure:
    return models.TestFailure(
        test_case_id=test_case_id,
        failure_message=f'{test_case_name} failure message',
        failure_text=f'{test_case_name} failure text',
        failure_type=f'{test_case_name} failure type',
    )


class TestRunDBGenerator:
    """
    Seeds runs straight into the tables, bypassing the repository under test.

    Rows are flushed, not committed; the caller's session sees them.
    """

    __test__ = False

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _insert(self, row: object) -> None:
        self.session.add(row)
        await self.session.flush()

    async def create_test_run(self, public_id: str, test_suite_data_list: list[TestSuiteData]) -> models.TestRun:
        test_run = make_test_run(public_id, len(test_suite_data_list))
        await self._insert(test_run)

        for test_suite_idx, data in enumerate(test_suite_data_list, start=1):
            test_suite = make_test_suite(test_run.id, data.package_and_class_name, test_suite_idx)
            test_suite.passing_count = len(data.passing_test_case_names)
            test_suite.failure_count = len(data.failing_test_case_names)
            test_suite.skipped_count = len(data.skipped_test_case_names)
            test_suite.test_count = test_suite.passing_count + test_suite.failure_count + test_suite.skipped_count
            await self._insert(test_suite)

            test_case_idx = 1
            for name in data.passing_test_case_names:
                await self._insert(make_test_case(test_suite.id, name, test_case_idx, True))
                test_case_idx += 1

            for name in data.failing_test_case_names:
                test_case = make_test_case(test_suite.id, name, test_case_idx, False)
                await self._insert(test_case)
                await self._insert(make_test_failure(test_case.id, name))
                test_case_idx += 1

            for name in data.skipped_test_case_names:
                test_case = make_test_case(test_suite.id, name, test_case_idx, False)
                test_case.skipped = True
                await self._insert(test_case)
                test_case_idx += 1

        return test_run

    async def create_simple_test_run(self, public_id: str) -> models.TestRun:
        return await self.create_test_run(
            public_id,
            [TestSuiteData('testSuite1', passing_test_case_names=['testSuite1TestCase1'])],
        )

    async def create_test_run_on(self, public_id: str, created_on: date, pinned: bool) -> models.TestRun:
        test_run = await self.create_test_run(public_id, [])
        test_run.created_timestamp = datetime.combine(created_on, time.min, tzinfo=timezone.utc)
        await self.session.flush()

        await self._insert(models.TestRunSystemAttributes(test_run_public_id=public_id, pinned=pinned))
        return test_run

    async def add_test_suite_group_to_test_run(
        self, group_name: str, test_run: models.TestRun, test_suite_class_names: list[str]
    ) -> models.TestSuiteGroup:
        group = models.TestSuiteGroup(test_run_id=test_run.id, group_name=group_name)
        await self._insert(group)

        res = await self.session.execute(
            select(models.TestSuite).where(
                models.TestSuite.test_run_id == test_run.id,
                models.TestSuite.class_name.in_(test_suite_class_names),
            )
        )
        for test_suite in res.scalars():
            test_suite.test_suite_group_id = group.id
        await self.session.flush()
        return group

    async def add_git_metadata(
        self,
        test_run: models.TestRun,
        repo_name: str,
        *,
        is_main_branch: bool = True,
        project_name: str | None = None,
        created_days_ago: int | None = None,
    ) -> models.GitMetadata:
        if created_days_ago is not None:
            test_run.created_timestamp = datetime.now(timezone.utc) - timedelta(days=created_days_ago)
        metadata = models.GitMetadata(
            test_run_id=test_run.id,
            repo_name=repo_name,
            org_name=repo_name.split('/', 1)[0],
            branch_name='main' if is_main_branch else 'feature',
            is_main_branch=is_main_branch,
            project_name=project_name,
        )
        await self._insert(metadata)
        return metadata

    async def add_coverage(self, test_run: models.TestRun, line_covered: int, line_missed: int) -> None:
        await self._insert(
            models.CodeCoverageStats(
                test_run_id=test_run.id,
                line_covered=line_covered,
                line_missed=line_missed,
                branch_covered=1,
                branch_missed=1,
            )
        )

    async def add_performance_result(self, test_run: models.TestRun, name: str, requests_per_second: float) -> None:
        await self._insert(
            models.PerformanceResult(
                test_run_id=test_run.id,
                name=name,
                request_count=100,
                requests_per_second=requests_per_second,
                average_time=12.5,
                maximum_time=40.0,
                p95=30.0,
            )
        )

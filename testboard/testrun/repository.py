from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from testboard.base_filter import TestRunFilter
from testboard.db.models import TestCase, TestFailure, TestRun, TestSuite, TestSuiteGroup
from testboard.mapper import (
    TestRunRow,
    TestRunSummaryMapper,
    coverage_to_orm,
    git_metadata_to_orm,
    group_to_orm,
    performance_result_to_orm,
    rows_to_test_run,
    suite_to_orm,
    to_test_run_summary,
)
from testboard.parser.model import GroupedResults, ParsedTestSuite
from testboard.repository import BaseRepository, transaction
from testboard.schemas import TestOutputType, TestRunSchema, TestRunSummarySchema, TestSuiteOutputSchema

logger = logging.getLogger(__name__)


class TestRunRepository(Protocol):
    async def save_test_run(
        self, public_id: str, test_suites: Sequence[ParsedTestSuite]
    ) -> TestRunSummarySchema: ...

    async def save_grouped_test_run(self, public_id: str, grouped_results: GroupedResults) -> TestRunSummarySchema: ...

    async def fetch_test_run(self, public_id: str) -> TestRunSchema | None: ...

    async def fetch_test_run_summary(self, public_id: str) -> TestRunSummarySchema | None: ...

    async def fetch_test_suite_output(
        self, public_id: str, test_suite_idx: int, output_type: TestOutputType
    ) -> TestSuiteOutputSchema | None: ...


class TestRunDatabaseRepository(BaseRepository[TestRun, TestRunSummarySchema]):
    """
    Persists a parsed run as `test_run` → `test_suite_group` → `test_suite` →
    `test_case` → `test_failure` rows and reads it back by public id.

    Each save runs in one transaction (see `transaction()`); a failure anywhere in
    the tree, including a duplicate public id, rolls the whole run back and the
    database error reaches the caller unchanged.
    """

    __test__ = False
    mapper = TestRunSummaryMapper

    async def save_test_run(
        self,
        public_id: str,
        test_suites: Sequence[ParsedTestSuite],
        *,
        session: AsyncSession | None = None,
    ) -> TestRunSummarySchema:
        summary = to_test_run_summary(public_id, test_suites)

        s = self._resolve_session(session)
        async with transaction(s):
            test_run = await self._insert_test_run(summary, s)
            await self._save_test_suites(test_suites, test_run.id, None, 0, s)

        return summary

    async def save_grouped_test_run(
        self,
        public_id: str,
        grouped_results: GroupedResults,
        *,
        session: AsyncSession | None = None,
    ) -> TestRunSummarySchema:
        """
        Groups are inserted in the given order, each before its suites. Suite idx keeps
        counting across groups, so the run's suites are numbered 1..K overall.
        """
        summary = to_test_run_summary(
            public_id,
            grouped_results.test_suites,
            wall_clock_duration=grouped_results.wall_clock_duration,
        )

        s = self._resolve_session(session)
        async with transaction(s):
            test_run = await self._insert_test_run(summary, s)

            starting_idx = 0
            for grouped_test_suites in grouped_results.grouped_test_suites:
                group = group_to_orm(grouped_test_suites, test_run.id)
                s.add(group)
                await s.flush()

                await self._save_test_suites(grouped_test_suites.test_suites, test_run.id, group.id, starting_idx, s)
                starting_idx += len(grouped_test_suites.test_suites)

            await self._save_run_metadata(grouped_results, test_run.id, s)

        return summary

    async def _insert_test_run(self, summary: TestRunSummarySchema, s: AsyncSession) -> TestRun:
        orm_mapper = self._mapper_instance or TestRunSummaryMapper()
        test_run: TestRun = await self.create_from_model(orm_mapper.to_orm(summary), convert_schema=False, session=s)
        logger.info('Inserted test run %s', summary.id)
        return test_run

    async def _save_test_suites(
        self,
        test_suites: Sequence[ParsedTestSuite],
        test_run_id: int,
        test_suite_group_id: int | None,
        starting_idx: int,
        s: AsyncSession,
    ) -> None:
        rows = [
            suite_to_orm(
                test_suite,
                test_run_id=test_run_id,
                test_suite_group_id=test_suite_group_id,
                idx=starting_idx + suite_idx,
            )
            for suite_idx, test_suite in enumerate(test_suites, start=1)
        ]
        if rows:
            await self.add_all(rows, session=s)

    async def _save_run_metadata(self, grouped_results: GroupedResults, test_run_id: int, s: AsyncSession) -> None:
        rows: list[object] = []
        if grouped_results.metadata is not None and grouped_results.metadata.git is not None:
            rows.append(git_metadata_to_orm(grouped_results.metadata.git, test_run_id))
        if grouped_results.coverage is not None:
            rows.append(coverage_to_orm(grouped_results.coverage, test_run_id))
        rows.extend(performance_result_to_orm(result, test_run_id) for result in grouped_results.performance_results)
        if rows:
            await self.add_all(rows, session=s)

    async def fetch_test_run(
        self,
        public_id: str,
        *,
        session: AsyncSession | None = None,
    ) -> TestRunSchema | None:
        """
        Read the whole run with one outer-join query. Returns None for an unknown public id.
        """
        stmt = (
            select(TestRun, TestSuite, TestSuiteGroup, TestCase, TestFailure)
            .select_from(TestRun)
            .outerjoin(TestSuite, TestSuite.test_run_id == TestRun.id)
            .outerjoin(TestSuiteGroup, TestSuiteGroup.id == TestSuite.test_suite_group_id)
            .outerjoin(TestCase, TestCase.test_suite_id == TestSuite.id)
            .outerjoin(TestFailure, TestFailure.test_case_id == TestCase.id)
            .where(*TestRunFilter(public_id=public_id).where_criteria(TestRun))
            .order_by(TestSuite.idx, TestCase.idx)
        )

        s = self._resolve_session(session)
        res = await s.execute(stmt)
        rows = [TestRunRow(*row) for row in res.all()]
        return rows_to_test_run(rows, self._mapper_instance)

    async def fetch_test_run_summary(
        self,
        public_id: str,
        *,
        session: AsyncSession | None = None,
    ) -> TestRunSummarySchema | None:
        return await self.get(TestRunFilter(public_id=public_id), session=session)

    async def fetch_test_suite_output(
        self,
        public_id: str,
        test_suite_idx: int,
        output_type: TestOutputType,
        *,
        session: AsyncSession | None = None,
    ) -> TestSuiteOutputSchema | None:
        column = TestSuite.system_out if output_type is TestOutputType.SYSTEM_OUT else TestSuite.system_err
        stmt = (
            select(column)
            .join(TestRun, TestRun.id == TestSuite.test_run_id)
            .where(TestRun.public_id == public_id, TestSuite.idx == test_suite_idx)
        )

        s = self._resolve_session(session)
        res = await s.execute(stmt)
        row = res.first()
        if row is None:
            return None
        return TestSuiteOutputSchema(value=row[0])

"""Conversions between parsed results, ORM rows and API schemas."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import NamedTuple

from testboard.base_mapper import BaseMapper
from testboard.db import models
from testboard.parser.model import (
    CoverageStatsPayload,
    GitMetadataPayload,
    GroupedTestSuites,
    ParsedFailure,
    ParsedTestCase,
    ParsedTestSuite,
    PerformanceResultPayload,
)
from testboard.schemas import (
    TestCaseSchema,
    TestFailureSchema,
    TestRunSchema,
    TestRunSummarySchema,
    TestSuiteSchema,
)

_DURATION_SCALE = 3


def parse_package_and_class_name(package_and_class_name: str) -> tuple[str | None, str]:
    """
    Split `a.b.C` into (`a.b`, `C`). A name without a dot has no package.
    """
    package_name, sep, class_name = package_and_class_name.rpartition('.')
    if not sep:
        return None, package_and_class_name
    return package_name, class_name


def to_test_run_summary(
    public_id: str,
    test_suites: Sequence[ParsedTestSuite],
    *,
    wall_clock_duration: float | None = None,
    created_timestamp: datetime | None = None,
) -> TestRunSummarySchema:
    test_cases = [tc for suite in test_suites for tc in suite.test_cases]

    total = len(test_cases)
    cumulative = round(sum(suite.duration for suite in test_suites), _DURATION_SCALE)
    average = round(cumulative / total, _DURATION_SCALE) if total > 0 else cumulative
    slowest = max((tc.time or 0.0 for tc in test_cases), default=0.0)
    failure_count = sum(suite.failure_count for suite in test_suites)

    return TestRunSummarySchema(
        id=public_id,
        total_test_count=total,
        total_passing_count=sum(suite.passing_count for suite in test_suites),
        total_skipped_count=sum(suite.skipped_count for suite in test_suites),
        total_failure_count=failure_count,
        passed=failure_count == 0,
        cumulative_duration=cumulative,
        average_duration=average,
        slowest_test_case_duration=round(slowest, _DURATION_SCALE),
        wall_clock_duration=wall_clock_duration,
        created_timestamp=created_timestamp or datetime.now(timezone.utc),
    )


class TestRunSummaryMapper(BaseMapper):
    """`test_run` row ↔ `TestRunSummarySchema` (the public id is exposed as `id`)."""

    __test__ = False

    def to_schema(self, orm_object: models.TestRun) -> TestRunSummarySchema:
        return TestRunSummarySchema(
            id=orm_object.public_id,
            total_test_count=orm_object.total_test_count,
            total_passing_count=orm_object.total_passing_count,
            total_skipped_count=orm_object.total_skipped_count,
            total_failure_count=orm_object.total_failure_count,
            passed=orm_object.passed,
            cumulative_duration=orm_object.cumulative_duration,
            average_duration=orm_object.average_duration,
            slowest_test_case_duration=orm_object.slowest_test_case_duration,
            wall_clock_duration=orm_object.wall_clock_duration,
            created_timestamp=orm_object.created_timestamp,
        )

    def to_orm(self, schema_object: TestRunSummarySchema) -> models.TestRun:
        payload = schema_object.model_dump(exclude={'id'})
        return models.TestRun(public_id=schema_object.id, **payload)


def group_to_orm(group: GroupedTestSuites, test_run_id: int) -> models.TestSuiteGroup:
    return models.TestSuiteGroup(
        test_run_id=test_run_id,
        group_name=group.group_name,
        group_label=group.group_label,
        directory=group.directory,
    )


def failure_to_orm(failure: ParsedFailure) -> models.TestFailure:
    return models.TestFailure(
        failure_message=failure.message,
        failure_type=failure.type,
        failure_text=failure.text,
    )


def case_to_orm(test_case: ParsedTestCase, idx: int) -> models.TestCase:
    package_name, class_name = (
        parse_package_and_class_name(test_case.class_name) if test_case.class_name else (None, None)
    )
    row = models.TestCase(
        idx=idx,
        name=test_case.name,
        package_name=package_name,
        class_name=class_name,
        duration=round(test_case.time or 0.0, _DURATION_SCALE),
        passed=test_case.passed,
        skipped=test_case.skipped_without_failure,
        system_out=test_case.system_out,
        system_err=test_case.system_err,
    )
    if test_case.failure is not None:
        row.failure = failure_to_orm(test_case.failure)
    return row


def suite_to_orm(
    test_suite: ParsedTestSuite,
    *,
    test_run_id: int,
    test_suite_group_id: int | None,
    idx: int,
) -> models.TestSuite:
    """
    Build a `test_suite` row with its cases (idx 1..M in input order) and their failures attached.
    """
    package_name, class_name = parse_package_and_class_name(test_suite.name)
    return models.TestSuite(
        test_run_id=test_run_id,
        test_suite_group_id=test_suite_group_id,
        idx=idx,
        package_name=package_name,
        class_name=class_name,
        test_count=test_suite.test_count,
        passing_count=test_suite.passing_count,
        skipped_count=test_suite.skipped_count,
        failure_count=test_suite.failure_count,
        start_ts=test_suite.timestamp,
        hostname=test_suite.hostname,
        duration=round(test_suite.duration, _DURATION_SCALE),
        system_out=test_suite.system_out,
        system_err=test_suite.system_err,
        test_cases=[case_to_orm(tc, case_idx) for case_idx, tc in enumerate(test_suite.test_cases, start=1)],
    )


def git_metadata_to_orm(git: GitMetadataPayload, test_run_id: int) -> models.GitMetadata:
    return models.GitMetadata(
        test_run_id=test_run_id,
        repo_name=git.repo_name,
        org_name=git.org_name,
        branch_name=git.branch_name,
        is_main_branch=git.is_main_branch,
        project_name=git.project_name,
        commit_sha=git.commit_sha,
    )


def coverage_to_orm(coverage: CoverageStatsPayload, test_run_id: int) -> models.CodeCoverageStats:
    return models.CodeCoverageStats(test_run_id=test_run_id, **coverage.model_dump())


def performance_result_to_orm(result: PerformanceResultPayload, test_run_id: int) -> models.PerformanceResult:
    return models.PerformanceResult(test_run_id=test_run_id, **result.model_dump())


class TestRunRow(NamedTuple):
    """One row of the test run outer-join read. Everything below `run` may be None."""

    __test__ = False

    run: models.TestRun
    suite: models.TestSuite | None
    group: models.TestSuiteGroup | None
    case: models.TestCase | None
    failure: models.TestFailure | None


def _suite_schema(suite: models.TestSuite, group: models.TestSuiteGroup | None) -> TestSuiteSchema:
    return TestSuiteSchema(
        idx=suite.idx,
        package_name=suite.package_name,
        class_name=suite.class_name,
        test_count=suite.test_count,
        passing_count=suite.passing_count,
        skipped_count=suite.skipped_count,
        failure_count=suite.failure_count,
        start_ts=suite.start_ts,
        hostname=suite.hostname,
        duration=suite.duration,
        has_system_out=bool(suite.system_out),
        has_system_err=bool(suite.system_err),
        group_name=group.group_name if group is not None else None,
        group_label=group.group_label if group is not None else None,
    )


def _case_schema(
    case: models.TestCase, suite: models.TestSuite, failure: models.TestFailure | None
) -> TestCaseSchema:
    return TestCaseSchema(
        idx=case.idx,
        test_suite_idx=suite.idx,
        name=case.name,
        package_name=case.package_name,
        class_name=case.class_name,
        duration=case.duration,
        passed=case.passed,
        skipped=case.skipped,
        has_system_out=bool(case.system_out),
        has_system_err=bool(case.system_err),
        failure=TestFailureSchema.model_validate(failure) if failure is not None else None,
    )


def rows_to_test_run(rows: Iterable[TestRunRow], summary_mapper: BaseMapper | None = None) -> TestRunSchema | None:
    """
    Assemble a full run from outer-join rows.

    Suites are keyed by their row id, cases likewise, so a suite repeated once per
    case collapses back into one entry. Suites come out ordered by idx, cases too.
    """
    summary_mapper = summary_mapper or TestRunSummaryMapper()

    run: models.TestRun | None = None
    suites: dict[int, TestSuiteSchema] = {}
    seen_cases: set[int] = set()

    for row in rows:
        if run is None:
            run = row.run
        if row.suite is None:
            continue

        suite_schema = suites.get(row.suite.id)
        if suite_schema is None:
            suite_schema = suites[row.suite.id] = _suite_schema(row.suite, row.group)

        if row.case is None or row.case.id in seen_cases:
            continue
        seen_cases.add(row.case.id)
        suite_schema.test_cases.append(_case_schema(row.case, row.suite, row.failure))

    if run is None:
        return None

    ordered = sorted(suites.values(), key=lambda s: s.idx)
    for suite_schema in ordered:
        suite_schema.test_cases.sort(key=lambda c: c.idx)

    return TestRunSchema(
        id=run.public_id,
        summary=summary_mapper.to_schema(run),
        test_suites=ordered,
    )

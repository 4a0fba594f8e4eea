from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ParsedFailure(BaseModel):
    message: str | None = None
    type: str | None = None
    text: str | None = None


class ParsedTestCase(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    class_name: str | None = None
    time: float | None = None
    skipped: bool = False
    failure: ParsedFailure | None = None
    system_out: str | None = None
    system_err: str | None = None

    @property
    def failed(self) -> bool:
        return self.failure is not None

    @property
    def passed(self) -> bool:
        return not self.failed and not self.skipped

    @property
    def skipped_without_failure(self) -> bool:
        """A case reporting both a failure and ``<skipped>`` counts as failed."""
        return self.skipped and not self.failed


class ParsedTestSuite(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    timestamp: datetime | None = None
    hostname: str | None = None
    time: float | None = None
    test_cases: list[ParsedTestCase] = Field(default_factory=list)
    system_out: str | None = None
    system_err: str | None = None

    @property
    def test_count(self) -> int:
        return len(self.test_cases)

    @property
    def passing_count(self) -> int:
        return sum(1 for tc in self.test_cases if tc.passed)

    @property
    def failure_count(self) -> int:
        return sum(1 for tc in self.test_cases if tc.failed)

    @property
    def skipped_count(self) -> int:
        return sum(1 for tc in self.test_cases if tc.skipped_without_failure)

    @property
    def duration(self) -> float:
        if self.time is not None:
            return self.time
        return sum(tc.time or 0.0 for tc in self.test_cases)


class GroupedTestSuites(BaseModel):
    group_name: str
    group_label: str | None = None
    directory: str | None = None
    test_suites: list[ParsedTestSuite] = Field(default_factory=list)


class GitMetadataPayload(BaseModel):
    repo_name: str
    branch_name: str | None = None
    is_main_branch: bool = False
    project_name: str | None = None
    commit_sha: str | None = None

    @property
    def org_name(self) -> str:
        return self.repo_name.split('/', 1)[0]


class ResultsMetadata(BaseModel):
    git: GitMetadataPayload | None = None


class CoverageStatsPayload(BaseModel):
    line_covered: int = 0
    line_missed: int = 0
    branch_covered: int = 0
    branch_missed: int = 0
    statement_covered: int = 0
    statement_missed: int = 0


class PerformanceResultPayload(BaseModel):
    name: str
    request_count: int
    requests_per_second: float
    average_time: float
    maximum_time: float
    p95: float


class GroupedResults(BaseModel):
    grouped_test_suites: list[GroupedTestSuites] = Field(default_factory=list)
    metadata: ResultsMetadata | None = None
    wall_clock_duration: float | None = None
    coverage: CoverageStatsPayload | None = None
    performance_results: list[PerformanceResultPayload] = Field(default_factory=list)

    @property
    def test_suites(self) -> list[ParsedTestSuite]:
        return [suite for group in self.grouped_test_suites for suite in group.test_suites]

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class TestRunSummarySchema(BaseModel):
    __test__ = False
    model_config = ConfigDict(from_attributes=True)

    id: str
    total_test_count: int
    total_passing_count: int
    total_skipped_count: int
    total_failure_count: int
    passed: bool
    cumulative_duration: float
    average_duration: float
    slowest_test_case_duration: float
    wall_clock_duration: float | None = None
    created_timestamp: datetime


class TestFailureSchema(BaseModel):
    __test__ = False
    model_config = ConfigDict(from_attributes=True)

    failure_message: str | None = None
    failure_type: str | None = None
    failure_text: str | None = None


class TestCaseSchema(BaseModel):
    __test__ = False
    model_config = ConfigDict(from_attributes=True)

    idx: int
    test_suite_idx: int
    name: str
    package_name: str | None = None
    class_name: str | None = None
    duration: float
    passed: bool
    skipped: bool
    has_system_out: bool = False
    has_system_err: bool = False
    failure: TestFailureSchema | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        prefix = '.'.join(p for p in (self.package_name, self.class_name) if p)
        return f'{prefix}.{self.name}' if prefix else self.name


class TestSuiteSchema(BaseModel):
    __test__ = False
    model_config = ConfigDict(from_attributes=True)

    idx: int
    package_name: str | None = None
    class_name: str
    test_count: int
    passing_count: int
    skipped_count: int
    failure_count: int
    start_ts: datetime | None = None
    hostname: str | None = None
    duration: float
    has_system_out: bool = False
    has_system_err: bool = False
    group_name: str | None = None
    group_label: str | None = None
    test_cases: list[TestCaseSchema] = Field(default_factory=list)


class TestRunSchema(BaseModel):
    __test__ = False

    id: str
    summary: TestRunSummarySchema
    test_suites: list[TestSuiteSchema] = Field(default_factory=list)


class TestOutputType(StrEnum):
    __test__ = False

    SYSTEM_OUT = 'systemOut'
    SYSTEM_ERR = 'systemErr'


class TestSuiteOutputSchema(BaseModel):
    __test__ = False

    value: str | None = None


class SaveResultsResponse(BaseModel):
    id: str
    uri: str


# repository-level aggregates


class RepositoryTimelineEntry(BaseModel):
    public_id: str
    created_timestamp: datetime
    cumulative_duration: float
    test_average_duration: float
    total_test_count: int


class RepositoryTimeline(BaseModel):
    timeline_entries: list[RepositoryTimelineEntry] = Field(default_factory=list)


class CoverageStat(BaseModel):
    covered: int
    missed: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return self.covered + self.missed

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.covered * 100 / self.total, 2)


class RepositoryCoverageTimelineEntry(BaseModel):
    public_id: str
    created_timestamp: datetime
    line_stat: CoverageStat
    branch_stat: CoverageStat


class RepositoryCoverageTimeline(BaseModel):
    timeline_entries: list[RepositoryCoverageTimelineEntry] = Field(default_factory=list)


class RepositoryFlakyTest(BaseModel):
    package_name: str | None = None
    class_name: str | None = None
    name: str
    flakiness_percentage: float
    failure_count: int
    first_test_run_public_id: str
    first_test_run_created_timestamp: datetime
    latest_test_run_public_id: str
    latest_test_run_created_timestamp: datetime


class RepositoryFlakyTests(BaseModel):
    tests: list[RepositoryFlakyTest] = Field(default_factory=list)


class PerformanceTimelineEntry(BaseModel):
    public_id: str
    created_timestamp: datetime
    requests_per_second: float
    average_time: float
    maximum_time: float
    p95: float


class RepositoryPerformanceTestTimeline(BaseModel):
    name: str
    entries: list[PerformanceTimelineEntry] = Field(default_factory=list)


class RepositoryPerformanceTimeline(BaseModel):
    test_timelines: list[RepositoryPerformanceTestTimeline] = Field(default_factory=list)

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, TypeDecorator, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# SQLite only autoincrements INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer(), 'sqlite')
Duration = Numeric(12, 3, asdecimal=False)


class UTCDateTime(TypeDecorator[datetime]):
    """
    Timestamps are stored in UTC and always read back timezone-aware.

    SQLite keeps no offset, so naive values coming out of it are taken as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: object) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value: datetime | None, dialect: object) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    # keeps pytest from collecting Test* models imported into test modules
    __test__ = False


class TestRun(Base):
    __tablename__ = 'test_run'

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    public_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    total_test_count: Mapped[int] = mapped_column(Integer)
    total_passing_count: Mapped[int] = mapped_column(Integer)
    total_skipped_count: Mapped[int] = mapped_column(Integer)
    total_failure_count: Mapped[int] = mapped_column(Integer)
    passed: Mapped[bool] = mapped_column(Boolean)
    cumulative_duration: Mapped[float] = mapped_column(Duration)
    average_duration: Mapped[float] = mapped_column(Duration)
    slowest_test_case_duration: Mapped[float] = mapped_column(Duration)
    wall_clock_duration: Mapped[float | None] = mapped_column(Duration, nullable=True)
    created_timestamp: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now())

    test_suites: Mapped[list[TestSuite]] = relationship(
        back_populates='test_run', cascade='all, delete-orphan', order_by='TestSuite.idx'
    )
    test_suite_groups: Mapped[list[TestSuiteGroup]] = relationship(cascade='all, delete-orphan')


class TestSuiteGroup(Base):
    __tablename__ = 'test_suite_group'

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    test_run_id: Mapped[int] = mapped_column(ForeignKey('test_run.id', ondelete='CASCADE'), index=True)
    group_name: Mapped[str] = mapped_column(String(255))
    group_label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    directory: Mapped[str | None] = mapped_column(Text, nullable=True)


class TestSuite(Base):
    __tablename__ = 'test_suite'

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    test_run_id: Mapped[int] = mapped_column(ForeignKey('test_run.id', ondelete='CASCADE'), index=True)
    test_suite_group_id: Mapped[int | None] = mapped_column(
        ForeignKey('test_suite_group.id', ondelete='CASCADE'), nullable=True
    )
    idx: Mapped[int] = mapped_column(Integer)
    package_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    class_name: Mapped[str] = mapped_column(Text)
    test_count: Mapped[int] = mapped_column(Integer)
    passing_count: Mapped[int] = mapped_column(Integer)
    skipped_count: Mapped[int] = mapped_column(Integer)
    failure_count: Mapped[int] = mapped_column(Integer)
    start_ts: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    hostname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    duration: Mapped[float] = mapped_column(Duration)
    system_out: Mapped[str | None] = mapped_column(Text, nullable=True)
    system_err: Mapped[str | None] = mapped_column(Text, nullable=True)

    test_run: Mapped[TestRun] = relationship(back_populates='test_suites')
    test_cases: Mapped[list[TestCase]] = relationship(
        back_populates='test_suite', cascade='all, delete-orphan', order_by='TestCase.idx'
    )


class TestCase(Base):
    __tablename__ = 'test_case'

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    test_suite_id: Mapped[int] = mapped_column(ForeignKey('test_suite.id', ondelete='CASCADE'), index=True)
    idx: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(Text)
    package_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    class_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration: Mapped[float] = mapped_column(Duration)
    passed: Mapped[bool] = mapped_column(Boolean)
    skipped: Mapped[bool] = mapped_column(Boolean, default=False)
    system_out: Mapped[str | None] = mapped_column(Text, nullable=True)
    system_err: Mapped[str | None] = mapped_column(Text, nullable=True)

    test_suite: Mapped[TestSuite] = relationship(back_populates='test_cases')
    failure: Mapped[TestFailure | None] = relationship(
        back_populates='test_case', cascade='all, delete-orphan', uselist=False
    )


class TestFailure(Base):
    __tablename__ = 'test_failure'

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    test_case_id: Mapped[int] = mapped_column(ForeignKey('test_case.id', ondelete='CASCADE'), unique=True)
    failure_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    failure_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    failure_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    test_case: Mapped[TestCase] = relationship(back_populates='failure')


class GitMetadata(Base):
    __tablename__ = 'git_metadata'

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    test_run_id: Mapped[int] = mapped_column(ForeignKey('test_run.id', ondelete='CASCADE'), unique=True)
    repo_name: Mapped[str] = mapped_column(String(255), index=True)
    org_name: Mapped[str] = mapped_column(String(255))
    branch_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_main_branch: Mapped[bool] = mapped_column(Boolean, default=False)
    project_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    commit_sha: Mapped[str | None] = mapped_column(String(64), nullable=True)


class TestRunSystemAttributes(Base):
    __tablename__ = 'test_run_system_attributes'

    test_run_public_id: Mapped[str] = mapped_column(
        ForeignKey('test_run.public_id', ondelete='CASCADE'), primary_key=True
    )
    pinned: Mapped[bool] = mapped_column(Boolean, default=False)


class CodeCoverageStats(Base):
    __tablename__ = 'code_coverage_stats'

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    test_run_id: Mapped[int] = mapped_column(ForeignKey('test_run.id', ondelete='CASCADE'), unique=True)
    line_covered: Mapped[int] = mapped_column(Integer, default=0)
    line_missed: Mapped[int] = mapped_column(Integer, default=0)
    branch_covered: Mapped[int] = mapped_column(Integer, default=0)
    branch_missed: Mapped[int] = mapped_column(Integer, default=0)
    statement_covered: Mapped[int] = mapped_column(Integer, default=0)
    statement_missed: Mapped[int] = mapped_column(Integer, default=0)


class PerformanceResult(Base):
    __tablename__ = 'performance_result'

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    test_run_id: Mapped[int] = mapped_column(ForeignKey('test_run.id', ondelete='CASCADE'), index=True)
    name: Mapped[str] = mapped_column(String(255))
    request_count: Mapped[int] = mapped_column(BigInteger)
    requests_per_second: Mapped[float] = mapped_column(Duration)
    average_time: Mapped[float] = mapped_column(Duration)
    maximum_time: Mapped[float] = mapped_column(Duration)
    p95: Mapped[float] = mapped_column(Duration)

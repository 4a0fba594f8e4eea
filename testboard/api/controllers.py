from __future__ import annotations

from typing import Any

from litestar import Controller, Request, Response, get, post
from litestar.di import Provide
from litestar.exceptions import NotFoundException
from litestar.status_codes import HTTP_200_OK

from testboard.config import Settings
from testboard.insights import RepositoryInsightsRepository, coverage_badge_svg
from testboard.parser.model import GroupedResults
from testboard.schemas import (
    RepositoryCoverageTimeline,
    RepositoryFlakyTests,
    RepositoryPerformanceTimeline,
    RepositoryTimeline,
    SaveResultsResponse,
    TestOutputType,
    TestRunSchema,
    TestRunSummarySchema,
    TestSuiteOutputSchema,
)
from testboard.testrun import TestResultsService, TestRunDatabaseRepository

from .dependencies import provide_repo
from .pagination import OffsetPagination, provide_offset_pagination


class ResultsController(Controller):
    path = '/'

    @post('/results', status_code=HTTP_200_OK)
    async def post_results(
        self, request: Request[Any, Any, Any], results_service: TestResultsService
    ) -> SaveResultsResponse:
        return await results_service.save_junit_results(await request.body())

    @post('/groupedResults', status_code=HTTP_200_OK)
    async def post_grouped_results(
        self, data: GroupedResults, results_service: TestResultsService
    ) -> SaveResultsResponse:
        return await results_service.save_grouped_results(data)


class TestRunController(Controller):
    __test__ = False

    path = '/run'

    @get('/{public_id:str}')
    async def get_test_run(self, public_id: str, test_run_repo: TestRunDatabaseRepository) -> TestRunSchema:
        test_run = await test_run_repo.fetch_test_run(public_id)
        if test_run is None:
            raise NotFoundException(f'Test run {public_id} not found')
        return test_run

    @get('/{public_id:str}/summary')
    async def get_test_run_summary(
        self, public_id: str, test_run_repo: TestRunDatabaseRepository
    ) -> TestRunSummarySchema:
        summary = await test_run_repo.fetch_test_run_summary(public_id)
        if summary is None:
            raise NotFoundException(f'Test run {public_id} not found')
        return summary

    @get('/{public_id:str}/suite/{test_suite_idx:int}/{output_type:str}')
    async def get_test_suite_output(
        self,
        public_id: str,
        test_suite_idx: int,
        output_type: str,
        test_run_repo: TestRunDatabaseRepository,
    ) -> TestSuiteOutputSchema:
        try:
            kind = TestOutputType(output_type)
        except ValueError as e:
            raise NotFoundException(f'Unknown output type {output_type}') from e

        output = await test_run_repo.fetch_test_suite_output(public_id, test_suite_idx, kind)
        if output is None:
            raise NotFoundException(f'Test suite {test_suite_idx} of run {public_id} not found')
        return output


def _repo_paths(suffix: str) -> list[str]:
    return [
        f'/{{org_part:str}}/{{repo_part:str}}/{suffix}',
        f'/{{org_part:str}}/{{repo_part:str}}/project/{{project_name:str}}/{suffix}',
    ]


class RepositoryController(Controller):
    """Aggregate views over the main-branch runs of one `org/repo`, optionally narrowed to a project."""

    path = '/repo'
    dependencies = {'insights_repo': Provide(provide_repo(RepositoryInsightsRepository))}

    @get(_repo_paths('timeline'))
    async def get_timeline(
        self,
        org_part: str,
        repo_part: str,
        insights_repo: RepositoryInsightsRepository,
        project_name: str | None = None,
    ) -> RepositoryTimeline:
        return await insights_repo.fetch_timeline(f'{org_part}/{repo_part}', project_name)

    @get(_repo_paths('coverage/timeline'))
    async def get_coverage_timeline(
        self,
        org_part: str,
        repo_part: str,
        insights_repo: RepositoryInsightsRepository,
        project_name: str | None = None,
    ) -> RepositoryCoverageTimeline:
        return await insights_repo.fetch_coverage_timeline(f'{org_part}/{repo_part}', project_name)

    @get(_repo_paths('badge/coverage'), media_type='image/svg+xml')
    async def get_coverage_badge(
        self,
        org_part: str,
        repo_part: str,
        insights_repo: RepositoryInsightsRepository,
        project_name: str | None = None,
    ) -> Response[str]:
        repo_name = f'{org_part}/{repo_part}'
        percentage = await insights_repo.fetch_latest_coverage_percentage(repo_name, project_name)
        if percentage is None:
            raise NotFoundException(f'No coverage for {repo_name}')
        return Response(content=coverage_badge_svg(percentage), media_type='image/svg+xml')

    @get(_repo_paths('tests/flaky'))
    async def get_flaky_tests(
        self,
        org_part: str,
        repo_part: str,
        insights_repo: RepositoryInsightsRepository,
        settings: Settings,
        project_name: str | None = None,
        max_runs: int | None = None,
        failure_threshold: int | None = None,
    ) -> RepositoryFlakyTests:
        return await insights_repo.fetch_flaky_tests(
            f'{org_part}/{repo_part}',
            project_name,
            max_runs=max_runs or settings.flaky_max_runs,
            failure_threshold=failure_threshold or settings.flaky_failure_threshold,
        )

    @get(_repo_paths('performance/timeline'))
    async def get_performance_timeline(
        self,
        org_part: str,
        repo_part: str,
        insights_repo: RepositoryInsightsRepository,
        project_name: str | None = None,
    ) -> RepositoryPerformanceTimeline:
        return await insights_repo.fetch_performance_timeline(f'{org_part}/{repo_part}', project_name)

    @get(_repo_paths('runs'), dependencies={'pagination': Provide(provide_offset_pagination, sync_to_thread=False)})
    async def get_test_runs(
        self,
        org_part: str,
        repo_part: str,
        insights_repo: RepositoryInsightsRepository,
        pagination: OffsetPagination,
        project_name: str | None = None,
    ) -> list[TestRunSummarySchema]:
        return await insights_repo.fetch_test_runs(
            f'{org_part}/{repo_part}', project_name, page=pagination.page, size=pagination.size
        )

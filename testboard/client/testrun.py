from __future__ import annotations

from testboard.schemas import TestOutputType, TestRunSchema, TestRunSummarySchema, TestSuiteOutputSchema

from .base import BaseClient


class TestRunClient(BaseClient):
    __test__ = False

    async def fetch_test_run(self, public_id: str) -> TestRunSchema:
        response = await self._get(f'run/{public_id}')
        return TestRunSchema.model_validate(response.json())

    async def fetch_test_run_summary(self, public_id: str) -> TestRunSummarySchema:
        response = await self._get(f'run/{public_id}/summary')
        return TestRunSummarySchema.model_validate(response.json())

    async def fetch_test_suite_output(
        self, public_id: str, test_suite_idx: int, output_type: TestOutputType
    ) -> TestSuiteOutputSchema:
        response = await self._get(f'run/{public_id}/suite/{test_suite_idx}/{output_type.value}')
        return TestSuiteOutputSchema.model_validate(response.json())

    async def fetch_test_suite_system_out(self, public_id: str, test_suite_idx: int) -> TestSuiteOutputSchema:
        return await self.fetch_test_suite_output(public_id, test_suite_idx, TestOutputType.SYSTEM_OUT)

    async def fetch_test_suite_system_err(self, public_id: str, test_suite_idx: int) -> TestSuiteOutputSchema:
        return await self.fetch_test_suite_output(public_id, test_suite_idx, TestOutputType.SYSTEM_ERR)

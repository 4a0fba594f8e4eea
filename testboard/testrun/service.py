from __future__ import annotations

import logging
import secrets
import string
from typing import Final

from testboard.parser import parse_grouped_results, parse_junit_xml
from testboard.parser.model import GroupedResults
from testboard.schemas import SaveResultsResponse

from .repository import TestRunRepository

logger = logging.getLogger(__name__)

PUBLIC_ID_LENGTH: Final[int] = 12
_PUBLIC_ID_ALPHABET: Final[str] = string.ascii_uppercase + string.digits


def generate_public_id() -> str:
    """Random 12-character upper-case alphanumeric id, the external handle of a run."""
    return ''.join(secrets.choice(_PUBLIC_ID_ALPHABET) for _ in range(PUBLIC_ID_LENGTH))


def run_uri(public_id: str) -> str:
    return f'/tests/{public_id}'


class TestResultsService:
    """
    Ingestion entry point: parse an uploaded payload, give it a fresh public id and persist it.

    Parse errors (`ResultsParseError`) and database errors propagate to the caller.
    """

    __test__ = False

    def __init__(self, repository: TestRunRepository) -> None:
        self._repository = repository

    async def save_junit_results(self, results_xml: str | bytes) -> SaveResultsResponse:
        test_suites = parse_junit_xml(results_xml)
        public_id = generate_public_id()

        summary = await self._repository.save_test_run(public_id, test_suites)
        logger.info(
            'Saved results %s: %d tests, %d failed', public_id, summary.total_test_count, summary.total_failure_count
        )
        return SaveResultsResponse(id=public_id, uri=run_uri(public_id))

    async def save_grouped_results(self, grouped_results: GroupedResults | str | bytes) -> SaveResultsResponse:
        if not isinstance(grouped_results, GroupedResults):
            grouped_results = parse_grouped_results(grouped_results)
        public_id = generate_public_id()

        summary = await self._repository.save_grouped_test_run(public_id, grouped_results)
        logger.info(
            'Saved grouped results %s: %d groups, %d tests',
            public_id,
            len(grouped_results.grouped_test_suites),
            summary.total_test_count,
        )
        return SaveResultsResponse(id=public_id, uri=run_uri(public_id))

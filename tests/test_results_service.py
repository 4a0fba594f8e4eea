from __future__ import annotations

import json
import string

import pytest

from testboard.exceptions import ResultsParseError
from testboard.parser.model import GroupedResults, GroupedTestSuites, ParsedTestCase, ParsedTestSuite
from testboard.testrun import TestResultsService, generate_public_id

from .fakes import InMemoryTestRunRepository

XML = """<testsuites>
  <testsuite name="pkg.One"><testcase name="a" time="0.5"/><testcase name="b"><skipped/></testcase></testsuite>
  <testsuite name="pkg.Two"><testcase name="c" time="1.5"><failure message="no"/></testcase></testsuite>
</testsuites>
"""


def test_generate_public_id_shape() -> None:
    """
    < Public ids are 12 upper-case alphanumeric characters and differ between calls >
    1. Generate a batch of ids.
    2. Assert length, alphabet and uniqueness.
    """
    # 1
    ids = {generate_public_id() for _ in range(50)}

    # 2
    assert len(ids) == 50
    allowed = set(string.ascii_uppercase + string.digits)
    assert all(len(i) == 12 and set(i) <= allowed for i in ids)


@pytest.mark.asyncio
async def test_save_junit_results_parses_and_persists() -> None:
    """
    < save_junit_results parses the XML and saves it under a fresh public id >
    1. Save a two-suite XML report through the service.
    2. Assert the response id and uri.
    3. Assert the repository received both suites and tallied the summary.
    """
    # 1
    repo = InMemoryTestRunRepository()
    svc = TestResultsService(repo)
    res = await svc.save_junit_results(XML)

    # 2
    assert res.uri == f'/tests/{res.id}'

    # 3
    assert [s.name for s in repo.saved_suites[res.id]] == ['pkg.One', 'pkg.Two']
    summary = repo.summaries[res.id]
    assert (summary.total_test_count, summary.total_passing_count) == (3, 1)
    assert (summary.total_skipped_count, summary.total_failure_count) == (1, 1)


@pytest.mark.asyncio
async def test_save_junit_results_rejects_bad_xml_before_saving() -> None:
    """
    < Unparseable XML raises ResultsParseError and nothing is saved >
    1. Save a malformed document.
    2. Assert the error and an untouched repository.
    """
    # 1
    repo = InMemoryTestRunRepository()
    svc = TestResultsService(repo)

    # 2
    with pytest.raises(ResultsParseError):
        await svc.save_junit_results('<<<')
    assert repo.summaries == {}


@pytest.mark.asyncio
async def test_save_grouped_results_accepts_model_or_json() -> None:
    """
    < save_grouped_results takes either a model or its JSON text >
    1. Save a GroupedResults model.
    2. Save the same payload as JSON text.
    3. Assert both runs were stored with the wall clock duration.
    """
    # 1
    grouped = GroupedResults(
        grouped_test_suites=[
            GroupedTestSuites(
                group_name='unit',
                test_suites=[ParsedTestSuite(name='u.A', test_cases=[ParsedTestCase(name='a', time=1.0)])],
            )
        ],
        wall_clock_duration=2.0,
    )
    repo = InMemoryTestRunRepository()
    svc = TestResultsService(repo)
    first = await svc.save_grouped_results(grouped)

    # 2
    second = await svc.save_grouped_results(json.dumps(grouped.model_dump(mode='json')))

    # 3
    assert first.id != second.id
    for public_id in (first.id, second.id):
        assert repo.summaries[public_id].wall_clock_duration == 2.0
        assert repo.saved_grouped[public_id].grouped_test_suites[0].group_name == 'unit'


@pytest.mark.asyncio
async def test_repository_errors_propagate() -> None:
    """
    < Repository failures reach the caller unchanged >
    1. Pin the public id so the second save collides in the fake repository.
    2. Save twice.
    3. Assert the fake's error surfaces.
    """
    # 1
    repo = InMemoryTestRunRepository()
    svc = TestResultsService(repo)
    with pytest.MonkeyPatch.context() as mp:
        mp.setattr('testboard.testrun.service.generate_public_id', lambda: 'SAMEID000001')

        # 2
        await svc.save_junit_results(XML)

        # 3
        with pytest.raises(ValueError, match='duplicate public id'):
            await svc.save_junit_results(XML)

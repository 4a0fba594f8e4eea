from __future__ import annotations

import json

import pytest

from testboard.exceptions import ResultsParseError
from testboard.parser import parse_grouped_results, parse_junit_xml

SUREFIRE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<testsuite name="com.acme.widgets.WidgetTest" time="1,204.5" tests="4" failures="1" errors="1" skipped="1"
           timestamp="2024-03-01T10:15:30Z" hostname="ci-runner-7">
  <testcase name="builds" classname="com.acme.widgets.WidgetTest" time="0.5"/>
  <testcase name="rejects null" classname="com.acme.widgets.WidgetTest" time="0.25">
    <failure message="expected exception" type="java.lang.AssertionError">stack trace line 1
stack trace line 2</failure>
  </testcase>
  <testcase name="explodes" classname="com.acme.widgets.WidgetTest" time="0.1">
    <error message="boom" type="java.lang.IllegalStateException"/>
  </testcase>
  <testcase name="later" classname="com.acme.widgets.WidgetTest">
    <skipped/>
    <system-out>not run</system-out>
  </testcase>
  <system-out>suite stdout</system-out>
  <system-err>suite stderr</system-err>
</testsuite>
"""

WRAPPED_XML = """<testsuites>
  <testsuite name="root">
    <testsuite name="a.First"><testcase name="one" time="1"/></testsuite>
    <testsuite name="a.Second"><testcase name="two" time="2"/><testcase name="three" time="3"/></testsuite>
  </testsuite>
</testsuites>
"""


def test_parse_single_testsuite_document() -> None:
    """
    < A <testsuite> root yields one suite with its cases in document order >
    1. Parse a Surefire-style report.
    2. Assert suite attributes (time with thousands separator, timestamp, hostname, outputs).
    3. Assert case names and order.
    """
    # 1
    suites = parse_junit_xml(SUREFIRE_XML)

    # 2
    assert len(suites) == 1
    suite = suites[0]
    assert suite.name == 'com.acme.widgets.WidgetTest'
    assert suite.time == 1204.5
    assert suite.timestamp is not None and suite.timestamp.year == 2024
    assert suite.hostname == 'ci-runner-7'
    assert suite.system_out == 'suite stdout'
    assert suite.system_err == 'suite stderr'

    # 3
    assert [tc.name for tc in suite.test_cases] == ['builds', 'rejects null', 'explodes', 'later']


def test_failure_error_and_skipped_are_classified() -> None:
    """
    < <failure> and <error> mark a case failed, <skipped> marks it skipped >
    1. Parse the Surefire-style report.
    2. Assert pass/fail/skip flags per case and the failure details.
    3. Assert suite-level tallies.
    """
    # 1
    suite = parse_junit_xml(SUREFIRE_XML)[0]
    builds, rejects, explodes, later = suite.test_cases

    # 2
    assert builds.passed and not builds.failed
    assert rejects.failed and not rejects.passed
    assert rejects.failure is not None
    assert rejects.failure.message == 'expected exception'
    assert rejects.failure.type == 'java.lang.AssertionError'
    assert rejects.failure.text is not None and rejects.failure.text.startswith('stack trace line 1')
    assert explodes.failed and explodes.failure is not None and explodes.failure.message == 'boom'
    assert later.skipped and not later.passed and later.time is None
    assert later.system_out == 'not run'

    # 3
    assert suite.test_count == 4
    assert suite.passing_count == 1
    assert suite.failure_count == 2
    assert suite.skipped_count == 1


def test_wrapper_suites_are_skipped() -> None:
    """
    < Suites that only nest other suites are not reported themselves >
    1. Parse a <testsuites> document with a nesting <testsuite>.
    2. Assert only the two leaf suites come back, in order.
    3. Assert a suite without a time attribute sums its case times.
    """
    # 1
    suites = parse_junit_xml(WRAPPED_XML.encode())

    # 2
    assert [s.name for s in suites] == ['a.First', 'a.Second']

    # 3
    assert suites[1].time is None
    assert suites[1].duration == 5.0


@pytest.mark.parametrize(
    ('raw', 'expected'),
    [
        ('0.5', 0.5),
        ('1,204.5', 1204.5),
        ('0,5', None),
        ('1,204', None),
        ('abc', None),
    ],
)
def test_case_time_commas(raw: str, expected: float | None) -> None:
    """
    < Commas are only read as thousands separators next to a decimal point >
    1. Parse a one-case suite with the given time attribute.
    2. Assert the parsed case time.
    """
    # 1
    suites = parse_junit_xml(f'<testsuite name="a.A"><testcase name="t" time="{raw}"/></testsuite>')

    # 2
    assert suites[0].test_cases[0].time == expected


def test_skipped_case_with_failure_counts_as_failed() -> None:
    """
    < A case carrying both <failure> and <skipped> is tallied as a failure only >
    1. Parse a suite with one such case.
    2. Assert the case flags and the suite counts.
    """
    # 1
    suite = parse_junit_xml(
        '<testsuite name="a.A"><testcase name="t"><failure message="boom">trace</failure><skipped/></testcase>'
        '</testsuite>'
    )[0]

    # 2
    case = suite.test_cases[0]
    assert (case.failed, case.passed, case.skipped_without_failure) == (True, False, False)
    assert (suite.failure_count, suite.skipped_count, suite.passing_count) == (1, 0, 0)


@pytest.mark.parametrize(
    'payload',
    [
        '<testsuite name="broken">',
        '<report><item/></report>',
        '',
    ],
)
def test_unparseable_documents_raise(payload: str) -> None:
    """
    < Malformed XML or a document without suites raises ResultsParseError >
    1. Parse the payload.
    2. Assert ResultsParseError is raised with the junit source tag.
    """
    # 1
    # 2
    with pytest.raises(ResultsParseError) as exc_info:
        parse_junit_xml(payload)
    assert exc_info.value.source == 'junit'


def test_parse_grouped_results_payload() -> None:
    """
    < A JSON grouped payload is validated into GroupedResults >
    1. Build a payload with two groups, git metadata and coverage.
    2. Parse it.
    3. Assert groups, flattened suites and metadata.
    """
    # 1
    payload = {
        'grouped_test_suites': [
            {'group_name': 'unit', 'test_suites': [{'name': 'a.A'}, {'name': 'a.B'}]},
            {'group_name': 'integration', 'group_label': 'IT', 'test_suites': [{'name': 'b.C'}]},
        ],
        'metadata': {'git': {'repo_name': 'acme/widgets', 'is_main_branch': True}},
        'wall_clock_duration': 12.5,
        'coverage': {'line_covered': 80, 'line_missed': 20},
    }

    # 2
    results = parse_grouped_results(json.dumps(payload))

    # 3
    assert [g.group_name for g in results.grouped_test_suites] == ['unit', 'integration']
    assert [s.name for s in results.test_suites] == ['a.A', 'a.B', 'b.C']
    assert results.metadata is not None and results.metadata.git is not None
    assert results.metadata.git.org_name == 'acme'
    assert results.coverage is not None and results.coverage.line_covered == 80


def test_parse_grouped_results_rejects_invalid_payload() -> None:
    """
    < Invalid JSON and schema violations raise ResultsParseError >
    1. Parse non-JSON text.
    2. Parse JSON missing a required group name.
    3. Assert both raise ResultsParseError.
    """
    # 1
    with pytest.raises(ResultsParseError):
        parse_grouped_results('not json')

    # 2
    # 3
    with pytest.raises(ResultsParseError):
        parse_grouped_results(json.dumps({'grouped_test_suites': [{'test_suites': []}]}))

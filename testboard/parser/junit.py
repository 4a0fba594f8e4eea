"""JUnit XML → parsed test suites.

Accepts either a single ``<testsuite>`` document or a ``<testsuites>`` wrapper
(Surefire, pytest ``--junitxml``, Jest junit reporters, Gradle, ...). A
``<failure>`` or ``<error>`` child marks a case as failed, ``<skipped>`` as
skipped.
"""
from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from datetime import datetime

from pydantic import ValidationError

from testboard.exceptions import ResultsParseError

from .model import GroupedResults, ParsedFailure, ParsedTestCase, ParsedTestSuite

_FAILURE_TAGS = ('failure', 'error')


def _parse_time(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    if ',' in raw:
        # "1,234.5" carries thousands separators; "0,5" is a decimal comma and stays unread
        if '.' not in raw:
            return None
        raw = raw.replace(',', '')
    try:
        return float(raw)
    except ValueError:
        return None


def _parse_timestamp(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.strip().replace('Z', '+00:00'))
    except ValueError:
        return None


def _text_of(parent: ET.Element, tag: str) -> str | None:
    child = parent.find(tag)
    if child is None or child.text is None:
        return None
    return child.text


def _parse_failure(tc: ET.Element) -> ParsedFailure | None:
    for tag in _FAILURE_TAGS:
        el = tc.find(tag)
        if el is not None:
            return ParsedFailure(
                message=el.attrib.get('message'),
                type=el.attrib.get('type'),
                text=el.text.strip() if el.text else None,
            )
    return None


def _parse_test_case(tc: ET.Element) -> ParsedTestCase:
    return ParsedTestCase(
        name=tc.attrib.get('name', ''),
        class_name=tc.attrib.get('classname') or None,
        time=_parse_time(tc.attrib.get('time')),
        skipped=tc.find('skipped') is not None,
        failure=_parse_failure(tc),
        system_out=_text_of(tc, 'system-out'),
        system_err=_text_of(tc, 'system-err'),
    )


def _parse_test_suite(el: ET.Element) -> ParsedTestSuite:
    return ParsedTestSuite(
        name=el.attrib.get('name', ''),
        timestamp=_parse_timestamp(el.attrib.get('timestamp')),
        hostname=el.attrib.get('hostname'),
        time=_parse_time(el.attrib.get('time')),
        test_cases=[_parse_test_case(tc) for tc in el.findall('testcase')],
        system_out=_text_of(el, 'system-out'),
        system_err=_text_of(el, 'system-err'),
    )


def parse_junit_xml(text: str | bytes) -> list[ParsedTestSuite]:
    """
    Parse a JUnit XML document into suites, in document order.

    Wrapper ``<testsuite>`` elements that only nest other suites are skipped.

    Raises
    ------
    ResultsParseError
        If the document is not well-formed XML or has no ``<testsuite>`` element.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ResultsParseError(f'Malformed JUnit XML: {e}', source='junit') from e

    suites: list[ParsedTestSuite] = []
    for el in root.iter('testsuite'):
        if el.find('testsuite') is not None and el.find('testcase') is None:
            continue
        suites.append(_parse_test_suite(el))

    if not suites:
        raise ResultsParseError(f'No <testsuite> element found (root <{root.tag}>)', source='junit')
    return suites


def parse_grouped_results(text: str | bytes) -> GroupedResults:
    """Validate a JSON grouped-results payload."""
    try:
        return GroupedResults.model_validate(json.loads(text))
    except (ValueError, ValidationError) as e:
        raise ResultsParseError(f'Invalid grouped results: {e}', source='grouped') from e

from __future__ import annotations

from enum import StrEnum

from testboard.schemas import TestCaseSchema


class TestCaseTab(StrEnum):
    __test__ = False

    SUMMARY = 'summary'
    FAILURE = 'failure'
    SYSTEM_OUT = 'system-out'
    SYSTEM_ERR = 'system-err'


def detail_tabs_for(test_case: TestCaseSchema) -> list[TestCaseTab]:
    """
    Tabs shown for one test case, in display order.

    The failure tab depends on the outcome, not on a stored failure row: a
    failed case without failure details still gets one.
    """
    tabs = [TestCaseTab.SUMMARY]
    if not test_case.passed and not test_case.skipped:
        tabs.append(TestCaseTab.FAILURE)
    if test_case.has_system_out:
        tabs.append(TestCaseTab.SYSTEM_OUT)
    if test_case.has_system_err:
        tabs.append(TestCaseTab.SYSTEM_ERR)
    return tabs

from .junit import parse_grouped_results, parse_junit_xml
from .model import (
    CoverageStatsPayload,
    GitMetadataPayload,
    GroupedResults,
    GroupedTestSuites,
    ParsedFailure,
    ParsedTestCase,
    ParsedTestSuite,
    PerformanceResultPayload,
    ResultsMetadata,
)

__all__ = [
    'CoverageStatsPayload',
    'GitMetadataPayload',
    'GroupedResults',
    'GroupedTestSuites',
    'ParsedFailure',
    'ParsedTestCase',
    'ParsedTestSuite',
    'PerformanceResultPayload',
    'ResultsMetadata',
    'parse_grouped_results',
    'parse_junit_xml',
]

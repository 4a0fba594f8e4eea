from .engine import create_engine, create_schema, create_session_maker, drop_schema
from .models import (
    Base,
    CodeCoverageStats,
    GitMetadata,
    PerformanceResult,
    TestCase,
    TestFailure,
    TestRun,
    TestRunSystemAttributes,
    TestSuite,
    TestSuiteGroup,
)

__all__ = [
    # engine
    'create_engine',
    'create_schema',
    'create_session_maker',
    'drop_schema',
    # models
    'Base',
    'CodeCoverageStats',
    'GitMetadata',
    'PerformanceResult',
    'TestCase',
    'TestFailure',
    'TestRun',
    'TestRunSystemAttributes',
    'TestSuite',
    'TestSuiteGroup',
]

__all__ = ['TestboardError', 'ResultsParseError']


class TestboardError(Exception):
    """Base class for errors raised by testboard itself."""

    __test__ = False


class ResultsParseError(TestboardError):
    """The uploaded results could not be turned into test suites."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source

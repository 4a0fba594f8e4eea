from .repository import TestRunDatabaseRepository, TestRunRepository
from .service import TestResultsService, generate_public_id

__all__ = [
    'TestResultsService',
    'TestRunDatabaseRepository',
    'TestRunRepository',
    'generate_public_id',
]

from .base_filter import BaseRepoFilter, GitMetadataFilter, TestRunFilter
from .base_mapper import BaseMapper
from .config import Settings
from .exceptions import *
from .repo_types import *
from .repository import BaseRepository

__all__ = [
    # base_filter
    'BaseRepoFilter',
    'GitMetadataFilter',
    'TestRunFilter',
    # base_mapper
    'BaseMapper',
    # config
    'Settings',
    # exceptions
    'ResultsParseError',
    'TestboardError',
    # base_repo
    'BaseRepository',
    # repo_types
    'NoSchema',
    'TModel',
    'TSchema',
]


__version__ = '0.1.0'

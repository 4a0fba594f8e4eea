from .repository import RepositoryClient, repository_url
from .testrun import TestRunClient

__all__ = ['RepositoryClient', 'TestRunClient', 'repository_url']

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import TypeVar

from litestar.datastructures import State
from sqlalchemy.ext.asyncio import AsyncSession

from testboard.repository import BaseRepository
from testboard.testrun import TestResultsService, TestRunDatabaseRepository

T = TypeVar('T', bound=BaseRepository)


async def provide_db_session(state: State) -> AsyncGenerator[AsyncSession, None]:
    """One session per request, closed once the response is sent."""
    async with state.session_maker() as session:
        yield session


def provide_repo(repo_type: type[T]) -> Callable[[AsyncSession], Awaitable[T]]:
    """
    Create a dependency provider for a repository type bound to the request session.

    Usage:
        app = Litestar(
            dependencies={
                "test_run_repo": Provide(provide_repo(TestRunDatabaseRepository)),
            }
        )
    """

    async def _provide_repo(db_session: AsyncSession) -> T:
        return repo_type(session=db_session)

    return _provide_repo


async def provide_results_service(test_run_repo: TestRunDatabaseRepository) -> TestResultsService:
    return TestResultsService(test_run_repo)

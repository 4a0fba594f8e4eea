from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from testboard.config import DatabaseKind, Settings
from testboard.db import create_engine, create_schema, create_session_maker, drop_schema

from .generator import TestRunDBGenerator

MEMORY_DSN = 'sqlite+aiosqlite:///:memory:'


def memory_settings(**overrides: object) -> Settings:
    params: dict[str, object] = {
        'database_kind': DatabaseKind.SQLITE,
        'database_dsn': MEMORY_DSN,
        'create_schema': True,
    }
    params.update(overrides)
    return Settings(**params)  # type: ignore[arg-type]


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    eng = create_engine(memory_settings())
    await create_schema(eng)
    yield eng
    await drop_schema(eng)
    await eng.dispose()


@pytest_asyncio.fixture
async def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(engine)


@pytest_asyncio.fixture
async def session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as s:
        yield s


@pytest_asyncio.fixture
async def generator(session: AsyncSession) -> TestRunDBGenerator:
    return TestRunDBGenerator(session)

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from testboard.config import Settings

from .models import Base

logger = logging.getLogger(__name__)


def _on_sqlite_connect(dbapi_connection: Any, _connection_record: Any) -> None:
    # hand BEGIN/SAVEPOINT control to SQLAlchemy instead of the driver
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def _on_sqlite_begin(conn: Any) -> None:
    conn.exec_driver_sql('BEGIN')


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Build the async engine for `settings.database_dsn`.

    In-memory SQLite shares one connection (StaticPool) so every session sees the
    same database; other backends get a pool bounded by `database_pool_size`.
    """
    dsn = settings.database_dsn
    kwargs: dict[str, Any] = {'echo': settings.database_echo}

    if dsn.startswith('sqlite'):
        if dsn.rstrip('/').endswith(':memory:') or dsn in ('sqlite+aiosqlite://', 'sqlite+aiosqlite:///'):
            kwargs['poolclass'] = StaticPool
    else:
        kwargs['pool_size'] = settings.database_pool_size
        kwargs['max_overflow'] = 0

    engine = create_async_engine(dsn, **kwargs)
    if engine.dialect.name == 'sqlite':
        event.listen(engine.sync_engine, 'connect', _on_sqlite_connect)
        event.listen(engine.sync_engine, 'begin', _on_sqlite_begin)

    logger.info('Created %s engine', engine.dialect.name)
    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

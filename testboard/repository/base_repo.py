from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated, Any, Generic, cast, get_args

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import Select
from typing_extensions import Doc

from testboard.base_filter import BaseRepoFilter
from testboard.base_mapper import BaseMapper
from testboard.repo_types import TModel, TSchema


def _validate_schema_base(schema: type[BaseModel]) -> None:
    if not issubclass(schema, BaseModel):
        raise TypeError('mapping_schema must be a subclass of pydantic.BaseModel.')
    if not schema.model_config.get('from_attributes', False):
        raise TypeError('mapping_schema.model_config.from_attributes must be set to True.')


def paginate(stmt: Select[Any], *, page: int, size: int) -> Select[Any]:
    """Apply 1-based OFFSET paging to `stmt`."""
    if page < 1:
        raise ValueError('page must be >= 1.')
    if size < 1:
        raise ValueError('size must be >= 1.')
    return stmt.offset((page - 1) * size).limit(size)


def transaction(session: AsyncSession) -> AsyncSessionTransaction:
    """
    Open the unit of work for one save call.

    An idle session gets its own transaction (commit on exit, rollback on error).
    A session already inside a transaction gets a SAVEPOINT, so the outer commit
    stays with the caller while a failed save still leaves nothing behind.
    """
    if session.in_transaction():
        return session.begin_nested()
    return session.begin()


class BaseRepository(Generic[TModel, TSchema]):
    """
    Single-model repository base.

    - `model` and `mapping_schema` are inferred from the generic arguments
      (`BaseRepository[TestRun, TestRunSummarySchema]`) unless declared.
    - ORM → schema conversion uses the configured `mapper` first, then falls back to
      `mapping_schema.model_validate(...)` (which therefore needs `from_attributes=True`).
    - Reads and writes use the session handed to `__init__` unless a call passes its own.
    """

    model: Annotated[type[TModel], Doc('SQLAlchemy ORM model the repository reads and writes.')]
    mapping_schema: Annotated[type[TSchema] | None, Doc('Pydantic schema returned by read methods.')] = None
    mapper: Annotated[type[BaseMapper] | None, Doc('Optional mapper taking precedence over the schema.')] = None
    _default_convert_schema: bool = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        inferred_model: type[DeclarativeBase] | None = None
        inferred_schema: type[BaseModel] | None = None

        for base in getattr(cls, '__orig_bases__', []):
            args = get_args(base)
            if not args:
                continue
            if inferred_model is None and isinstance(args[0], type):
                inferred_model = args[0]
            if inferred_schema is None and len(args) >= 2:
                schema_arg = args[1]
                if isinstance(schema_arg, type) and issubclass(schema_arg, BaseModel):
                    inferred_schema = schema_arg

        if not hasattr(cls, 'model') and inferred_model is not None:
            cls.model = cast(type[TModel], inferred_model)

        if getattr(cls, 'mapping_schema', None) is None and inferred_schema is not None:
            cls.mapping_schema = cast(type[TSchema], inferred_schema)

        if getattr(cls, 'mapping_schema', None) is not None:
            if cls.mapper is None:
                _validate_schema_base(cast(type[BaseModel], cls.mapping_schema))
            cls._default_convert_schema = True

    def __init__(
        self,
        session: Annotated[
            AsyncSession | None,
            Doc('Session bound to this repository.'),
        ] = None,
        *,
        mapper: Annotated[BaseMapper | None, Doc('Mapper instance overriding the class-level `mapper`.')] = None,
    ):
        self._specific_session = session

        candidate = mapper if mapper is not None else (self.mapper() if self.mapper is not None else None)
        if candidate is not None and not isinstance(candidate, BaseMapper):
            raise TypeError(f'The injected mapper ({type(candidate).__name__}) must inherit from BaseMapper.')
        self._mapper_instance: BaseMapper | None = candidate

    @property
    def session(self) -> AsyncSession:
        if self._specific_session is None:
            raise RuntimeError('No session is bound to this repository.')
        return self._specific_session

    def _resolve_session(self, session: AsyncSession | None) -> AsyncSession:
        return session if session is not None else self.session

    def _convert(self, row: TModel | None, *, convert_schema: bool | None = None) -> Any:
        effective = self._default_convert_schema if convert_schema is None else convert_schema
        schema = self.mapping_schema
        if not effective or row is None or schema is None:
            return row

        if self._mapper_instance is not None:
            try:
                return self._mapper_instance.to_schema(row)
            except NotImplementedError:
                pass

        return cast(type[BaseModel], schema).model_validate(row)

    async def get(
        self,
        flt: Annotated[BaseRepoFilter, Doc('WHERE filter for the single-row lookup.')],
        *,
        convert_schema: bool | None = None,
        session: AsyncSession | None = None,
    ) -> Annotated[Any | None, Doc('The first matching row (schema or ORM), or None.')]:
        s = self._resolve_session(session)
        stmt: Select[tuple[TModel]] = select(self.model)
        crit = flt.where_criteria(self.model)
        if crit:
            stmt = stmt.where(*crit)

        res = await s.execute(stmt.limit(1))
        obj = res.scalars().first()
        return self._convert(obj, convert_schema=convert_schema) if obj is not None else None

    async def create_from_model(
        self,
        obj: Annotated[TModel, Doc('A fully constructed ORM row.')],
        *,
        convert_schema: bool | None = None,
        session: AsyncSession | None = None,
    ) -> Any:
        """
        Add `obj` and `flush()` so its generated primary key is available. Commit stays with the caller.
        """
        s = self._resolve_session(session)
        s.add(obj)
        await s.flush()
        return self._convert(obj, convert_schema=convert_schema)

    async def add_all(
        self,
        objs: Annotated[Sequence[Any], Doc('ORM rows, of any model, inserted in the given order.')],
        *,
        session: AsyncSession | None = None,
    ) -> None:
        s = self._resolve_session(session)
        s.add_all(objs)
        await s.flush()

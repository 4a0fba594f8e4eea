from __future__ import annotations

from typing import Any, cast

import pytest

from testboard.base_mapper import BaseMapper
from testboard.db import models
from testboard.schemas import TestFailureSchema


def test_cannot_instantiate_incomplete_mapper() -> None:
    """
    < A mapper missing to_schema/to_orm cannot be instantiated >
    1. Define a BaseMapper subclass implementing only to_schema.
    2. Assert instantiation raises TypeError.
    """

    # 1
    class HalfMapper(BaseMapper):
        def to_schema(self, orm_object: models.TestFailure) -> TestFailureSchema:
            return TestFailureSchema.model_validate(orm_object)

    # 2
    with pytest.raises(TypeError):
        _ = HalfMapper()  # type: ignore[abstract]


def test_concrete_mapper_converts_both_ways() -> None:
    """
    < A complete mapper converts a failure row to its schema and back >
    1. Define a failure mapper.
    2. Convert a row to a schema and the schema back to a row.
    3. Assert fields survive both directions.
    """

    # 1
    class FailureMapper(BaseMapper):
        def to_schema(self, orm_object: models.TestFailure) -> TestFailureSchema:
            return TestFailureSchema.model_validate(orm_object)

        def to_orm(self, schema_object: TestFailureSchema) -> models.TestFailure:
            return models.TestFailure(**schema_object.model_dump())

    # 2
    m = FailureMapper()
    schema = m.to_schema(models.TestFailure(failure_message='boom', failure_type='AssertionError'))
    row = m.to_orm(schema)

    # 3
    assert schema.failure_message == 'boom'
    assert row.failure_type == 'AssertionError'
    assert row.failure_text is None


def test_calling_super_raises_not_implemented() -> None:
    """
    < Delegating to the abstract base raises NotImplementedError >
    1. Define a mapper whose methods call super().
    2. Assert both directions raise NotImplementedError.
    """

    # 1
    class SuperCallingMapper(BaseMapper):
        def to_schema(self, orm_object: Any) -> Any:
            return cast(Any, super()).to_schema(orm_object)

        def to_orm(self, schema_object: Any) -> Any:
            return cast(Any, super()).to_orm(schema_object)

    # 2
    m = SuperCallingMapper()
    with pytest.raises(NotImplementedError):
        m.to_schema(None)
    with pytest.raises(NotImplementedError):
        m.to_orm(None)

from abc import ABC, abstractmethod
from typing import Any


class BaseMapper(ABC):
    """
    Conversion contract between a persisted row (ORM object) and its API schema.
    """

    @abstractmethod
    def to_schema(self, orm_object: Any) -> Any:
        """Builds the API schema for a persisted row."""
        raise NotImplementedError()

    @abstractmethod
    def to_orm(self, schema_object: Any) -> Any:
        """Builds a not-yet-persisted row from an API schema."""
        raise NotImplementedError()

import sys

from pydantic import BaseModel
from sqlalchemy.orm import DeclarativeBase

if sys.version_info >= (3, 13):
    from typing import TypeVar
else:
    from typing_extensions import TypeVar

__all__ = ['NoSchema', 'TModel', 'TSchema']


class NoSchema:
    """Typing-only sentinel for repositories that always return ORM rows."""

    pass


TModel = TypeVar('TModel', bound=DeclarativeBase)
TSchema = TypeVar('TSchema', bound=BaseModel | NoSchema, default=NoSchema)

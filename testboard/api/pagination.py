from __future__ import annotations

from litestar.params import Parameter
from pydantic import BaseModel


class OffsetPagination(BaseModel):
    page: int = Parameter(ge=1, default=1, query='page', description='Page number')
    size: int = Parameter(ge=1, le=100, default=20, query='size', description='Page size')


def provide_offset_pagination(
    page: int = Parameter(ge=1, default=1, query='page', description='Page number'),
    size: int = Parameter(ge=1, le=100, default=20, query='size', description='Page size'),
) -> OffsetPagination:
    return OffsetPagination(page=page, size=size)

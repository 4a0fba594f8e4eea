from __future__ import annotations

from collections.abc import Sequence
from collections.abc import Set as ABCSet
from dataclasses import dataclass, fields, is_dataclass
from typing import Annotated, Any

from typing_extensions import Doc


class BaseRepoFilter:
    """
    Builds SQLAlchemy WHERE criteria from the fields of a dataclass.

    Subclass it as a dataclass and call `where_criteria(model)`:

    - None         → no condition
    - bool         → col.is_(val)
    - sequence     → col.in_(seq) (empty sequences are ignored)
    - other scalar → col == val

    Field names map to model attributes of the same name unless `__aliases__`
    says otherwise. With `__strict__ = True` an unmapped field raises ValueError
    instead of being skipped.

    Example
    -------
    >>> @dataclass
    ... class GitMetadataFilter(BaseRepoFilter):
    ...     __aliases__ = {'repo': 'repo_name'}
    ...     repo: str | None = None
    ...     is_main_branch: bool | None = None
    ...
    >>> GitMetadataFilter(repo='acme/widgets', is_main_branch=True).where_criteria(GitMetadata)
    [GitMetadata.repo_name == 'acme/widgets', GitMetadata.is_main_branch.is_(True)]
    """

    __aliases__: Annotated[
        dict[str, str],
        Doc("Field name → column name mapping, e.g. {'repo': 'repo_name'}."),
    ] = {}

    __strict__: Annotated[
        bool,
        Doc('Raise ValueError for fields that cannot be mapped to a model column.'),
    ] = False

    @staticmethod
    def _is_seq(value: Any) -> bool:
        # str/bytes are sequences but never mean IN (...)
        if isinstance(value, (str, bytes, bytearray)):
            return False
        return isinstance(value, (Sequence, ABCSet))

    @classmethod
    def _resolve_column_name(cls, field_name: str) -> str:
        return cls.__aliases__.get(field_name, field_name)

    def where_criteria(
        self,
        m: Annotated[type[Any], Doc('SQLAlchemy ORM model class.')],
    ) -> Annotated[list[Any], Doc('Criteria ready for `Select.where(*crit)`.')]:
        """
        Build WHERE criteria for `m` from the non-None dataclass fields.

        Raises
        ------
        TypeError
            If the filter is not a dataclass.
        ValueError
            If `__strict__` is set and a field has no matching column on `m`.
        """
        if not is_dataclass(self):
            raise TypeError('BaseRepoFilter must be used with a dataclass.')

        crit: list[Any] = []
        for f in fields(self):
            val = getattr(self, f.name)
            if val is None:
                continue

            col_name = self._resolve_column_name(f.name)
            col = getattr(m, col_name, None)

            if col is None:
                if self.__strict__:
                    raise ValueError(f"Mapping failed: {m.__name__}.{col_name} (from '{f.name}')")
                continue

            if isinstance(val, bool):
                crit.append(col.is_(val))
            elif self._is_seq(val):
                seq = list(val)
                if seq:
                    crit.append(col.in_(seq))
            else:
                crit.append(col == val)

        return crit


@dataclass
class TestRunFilter(BaseRepoFilter):
    __test__ = False
    __strict__ = True

    public_id: str | Sequence[str] | None = None
    passed: bool | None = None


@dataclass
class GitMetadataFilter(BaseRepoFilter):
    __strict__ = True
    __aliases__ = {'repo': 'repo_name', 'project': 'project_name', 'main_branch': 'is_main_branch'}

    repo: str | None = None
    project: str | None = None
    main_branch: bool | None = None

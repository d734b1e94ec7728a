"""Record base model and the ordered result set returned by data-fetch delegates."""

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from datetime import datetime
from typing import Any, overload

from pydantic import BaseModel, ConfigDict, Field

SORT_ASC = "ASC"
SORT_DESC = "DESC"


class Record(BaseModel):
    """A persistent domain entity mapped to a GraphQL object type.

    Subclasses declare their fields as regular pydantic fields. The
    ``can_*`` hooks are consulted by :class:`~recordql.scaffolding.permissions.RecordPermissionChecker`
    and by the mutation scaffolders.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(default=0, ge=0)
    created: datetime | None = None
    last_edited: datetime | None = None

    def can_view(self, context: Any) -> bool:
        return True

    def can_create(self, context: Any) -> bool:
        return True

    def can_edit(self, context: Any) -> bool:
        return True

    def can_delete(self, context: Any) -> bool:
        return True


def get_value(item: Any, name: str) -> Any:
    """Read a named value from a record, any object or a plain mapping."""
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


class RecordList(Sequence[Any]):
    """An ordered, countable and immutable set of records.

    Every operation returns a new ``RecordList``; the underlying items are
    never reordered in place.
    """

    def __init__(self, items: Iterable[Any] = ()) -> None:
        self._items: tuple[Any, ...] = tuple(items)

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> "RecordList": ...

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return RecordList(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RecordList):
            return self._items == other._items
        if isinstance(other, list | tuple):
            return list(self._items) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"RecordList({list(self._items)!r})"

    def first(self) -> Any | None:
        return self._items[0] if self._items else None

    def last(self) -> Any | None:
        return self._items[-1] if self._items else None

    def column(self, name: str) -> list[Any]:
        return [get_value(item, name) for item in self._items]

    def filter(self, **filters: Any) -> "RecordList":
        """Keep the items whose values equal every given filter.

        A list or tuple filter value matches any of its members.
        """

        def matches(item: Any) -> bool:
            for name, expected in filters.items():
                value = get_value(item, name)
                if isinstance(expected, list | tuple):
                    if value not in expected:
                        return False
                elif value != expected:
                    return False
            return True

        return RecordList(item for item in self._items if matches(item))

    def filter_by_callback(self, callback: Callable[[Any], bool]) -> "RecordList":
        return RecordList(item for item in self._items if callback(item))

    def sort(self, field: str, direction: str = SORT_ASC) -> "RecordList":
        """Return the items ordered by ``field``.

        The sort is stable. Items without a value for ``field`` always go last.
        """
        direction = direction.upper()
        if direction not in (SORT_ASC, SORT_DESC):
            raise ValueError(f"Invalid sort direction '{direction}'")

        present = [item for item in self._items if get_value(item, field) is not None]
        missing = [item for item in self._items if get_value(item, field) is None]
        present.sort(key=lambda item: get_value(item, field), reverse=direction == SORT_DESC)
        return RecordList(present + missing)

    def sort_by(self, orderings: Iterable[tuple[str, str]]) -> "RecordList":
        """Order by several ``(field, direction)`` pairs, the first pair being the primary key."""
        result = self
        for field, direction in reversed(list(orderings)):
            result = result.sort(field, direction)
        return result

    def limit(self, limit: int | None, offset: int = 0) -> "RecordList":
        offset = max(offset, 0)
        if limit is None:
            return RecordList(self._items[offset:])
        return RecordList(self._items[offset : offset + max(limit, 0)])

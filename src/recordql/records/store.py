"""Data store protocol consumed by the default resolvers, and an in-memory implementation."""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, Protocol, TypeVar

from recordql import log
from recordql.records.record import Record, RecordList

R = TypeVar("R", bound=Record)


class RecordStore(Protocol):
    """The persistence engine as seen from the resolvers."""

    def find(self, record_class: type[Record], **filters: Any) -> RecordList: ...

    def get_by_id(self, record_class: type[R], record_id: int | str) -> R | None: ...

    def create(self, record_class: type[R], data: Mapping[str, Any]) -> R: ...

    def update(self, record: R, data: Mapping[str, Any]) -> R: ...

    def delete(self, record: Record) -> None: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRecordStore:
    """Keeps records in insertion order, one table per concrete record class.

    Queries against a base class include the records of all its subclasses,
    so a store can back polymorphic ``Record`` interface fields.
    """

    def __init__(self) -> None:
        self._tables: dict[type[Record], dict[int, Record]] = {}
        self._next_id = 1

    def add(self, record: R) -> R:
        if not record.id:
            record.id = self._next_id
        self._next_id = max(self._next_id, record.id + 1)
        if record.created is None:
            record.created = _now()
        if record.last_edited is None:
            record.last_edited = record.created
        self._tables.setdefault(type(record), {})[record.id] = record
        return record

    def load(self, record_class: type[Record], rows: Iterable[Mapping[str, Any]]) -> list[Record]:
        records = [self.add(record_class.model_validate(row)) for row in rows]
        log.debug(f"Loaded {len(records)} {record_class.__name__} record(s)")
        return records

    def _iter_records(self, record_class: type[Record]) -> Iterable[Record]:
        for table_class, table in self._tables.items():
            if issubclass(table_class, record_class):
                yield from table.values()

    def find(self, record_class: type[Record], **filters: Any) -> RecordList:
        records = sorted(self._iter_records(record_class), key=lambda record: record.id)
        return RecordList(records).filter(**filters)

    def get_by_id(self, record_class: type[R], record_id: int | str) -> R | None:
        try:
            key = int(record_id)
        except (TypeError, ValueError):
            return None
        for record in self._iter_records(record_class):
            if record.id == key:
                return record  # type: ignore[return-value]
        return None

    def create(self, record_class: type[R], data: Mapping[str, Any]) -> R:
        return self.add(record_class.model_validate(dict(data)))

    def update(self, record: R, data: Mapping[str, Any]) -> R:
        """Apply ``data`` to ``record`` only once the merged values validate as a whole.

        Raises:
            ValidationError: If the updated record would be invalid; the record is left unchanged
        """
        validated = type(record).model_validate({**dict(record), **data})
        for name in data:
            setattr(record, name, getattr(validated, name))
        record.last_edited = _now()
        return record

    def delete(self, record: Record) -> None:
        self._tables.get(type(record), {}).pop(record.id, None)

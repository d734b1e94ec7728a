"""Object types for record classes, and the operations attached to them."""

from collections.abc import Mapping
from typing import Any

from graphql import GraphQLField, GraphQLObjectType

from recordql import log
from recordql.config import OperationKind
from recordql.errors import ConfigurationError
from recordql.records.fields import FieldSpec, build_field
from recordql.records.model import RecordModel
from recordql.records.store import RecordStore
from recordql.scaffolding.operation import OperationScaffolder
from recordql.scaffolding.record_operations import (
    CreateRecordMutationScaffolder,
    DeleteRecordMutationScaffolder,
    RecordItemQueryScaffolder,
    RecordListQueryScaffolder,
    RecordMutationScaffolder,
    UpdateRecordMutationScaffolder,
)
from recordql.schema.interface import ensure_record_interface
from recordql.schema.manager import SchemaManager

# Fields of the Record interface, always exposed on record types
INTERFACE_FIELDS = ["id", "created", "last_edited"]


def _operation_kind(kind: OperationKind | str) -> OperationKind:
    try:
        return OperationKind(kind)
    except ValueError:
        raise ConfigurationError(f"Unknown operation '{kind}'") from None


class RecordTypeScaffolder:
    """Scaffolds the object type of one record class and its operations.

    The object type implements the ``Record`` interface and is registered in
    the manager's record type registry, so values of the class resolve to it
    wherever the interface is returned.
    """

    def __init__(
        self,
        model: RecordModel,
        store: RecordStore | None = None,
        fields: list[str] | str = "*",
        description: str | None = None,
    ) -> None:
        self.model = model
        self.store = store
        self.description = description
        self._fields: list[str] = []
        self._operations: dict[OperationKind, OperationScaffolder] = {}
        self.set_fields(fields)

    @property
    def type_name(self) -> str:
        return self.model.type_name

    def set_fields(self, fields: list[str] | str) -> None:
        """Set the exposed field whitelist; ``"*"`` exposes every declared field."""
        if fields == "*":
            self._fields = [spec.name for spec in self.model.fields.values()]
            return
        if not isinstance(fields, list | tuple):
            raise ConfigurationError(f"{self.type_name}: fields must be an array or '*'")
        self._fields = []
        self.add_fields(fields)

    def add_fields(self, fields: list[str]) -> None:
        for name in fields:
            spec = self.model.require_field(name)
            if spec.name not in self._fields:
                self._fields.append(spec.name)

    def get_fields(self) -> list[FieldSpec]:
        names = list(self._fields) + [name for name in INTERFACE_FIELDS if name not in self._fields]
        return [self.model.require_field(name) for name in names]

    def operation(self, kind: OperationKind | str, name: str | None = None) -> OperationScaffolder:
        """Return the scaffolder of an operation kind, creating it with default behaviour if needed."""
        kind = _operation_kind(kind)
        existing = self._operations.get(kind)
        if existing is not None:
            if name:
                existing.operation_name = name
            return existing

        if self.store is None:
            raise ConfigurationError(f"{self.type_name}: a record store is required to scaffold '{kind.value}'")
        operation: OperationScaffolder
        if kind is OperationKind.READ:
            operation = RecordListQueryScaffolder(self.model, self.store, name)
        elif kind is OperationKind.READ_ONE:
            operation = RecordItemQueryScaffolder(self.model, self.store, name)
        elif kind is OperationKind.CREATE:
            operation = CreateRecordMutationScaffolder(self.model, self.store, name, self.get_fields())
        elif kind is OperationKind.UPDATE:
            operation = UpdateRecordMutationScaffolder(self.model, self.store, name, self.get_fields())
        else:
            operation = DeleteRecordMutationScaffolder(self.model, self.store, name)
        self._operations[kind] = operation
        return operation

    def remove_operation(self, kind: OperationKind | str) -> None:
        self._operations.pop(_operation_kind(kind), None)

    def get_operations(self) -> list[OperationScaffolder]:
        return list(self._operations.values())

    def apply_config(self, config: Mapping[str, Any]) -> None:
        """Apply ``fields``, ``description`` and ``operations`` settings.

        Each operation is enabled by ``true`` or by a mapping of settings,
        which may include a ``name``, and removed by ``false``.
        """
        if "fields" in config:
            self.set_fields(config["fields"])
        if "description" in config:
            self.description = config["description"]
        operations = config.get("operations") or {}
        if not isinstance(operations, Mapping):
            raise ConfigurationError(f"{self.type_name}: operations must be a mapping")
        for kind, settings in operations.items():
            if settings is False or settings is None:
                self.remove_operation(kind)
                continue
            if not isinstance(settings, bool | Mapping):
                kind_name = _operation_kind(kind).value
                raise ConfigurationError(f"{self.type_name}.{kind_name}: settings must be a boolean or a mapping")
            options = dict(settings) if isinstance(settings, Mapping) else {}
            operation = self.operation(kind, options.pop("name", None))
            operation.apply_config(options)

    def build_fields(self, manager: SchemaManager) -> dict[str, GraphQLField]:
        fields: dict[str, GraphQLField] = {}
        for spec in self.get_fields():
            field = build_field(manager, self.type_name, spec)
            if field is not None:
                fields[spec.graphql_name] = field
        return fields

    def scaffold(self, manager: SchemaManager) -> GraphQLObjectType:
        interface = ensure_record_interface(manager)
        return GraphQLObjectType(
            self.type_name,
            fields=lambda: self.build_fields(manager),
            interfaces=[interface],
            description=self.description,
        )

    def add_to_manager(self, manager: SchemaManager) -> None:
        """Register the object type and every configured operation."""
        ensure_record_interface(manager)
        manager.add_type(lambda: self.scaffold(manager), self.type_name)
        manager.register_record_type(self.model.record_class, self.type_name)
        for operation in self._operations.values():
            if isinstance(operation, RecordMutationScaffolder):
                operation.fields = self.get_fields()
            operation.add_to_manager(manager)
        log.debug(f"Scaffolded {self.type_name} with {len(self._operations)} operation(s)")

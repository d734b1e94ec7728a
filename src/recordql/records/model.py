"""Create schema models from record classes."""

from dataclasses import dataclass, field
from typing import Any

import inflect

from recordql.errors import ConfigurationError
from recordql.records.fields import FieldSpec, get_field_specs
from recordql.records.record import Record

_inflect_engine = inflect.engine()


@dataclass(frozen=True)
class RecordModel:
    """Introspected view of a record class used by the scaffolders."""

    record_class: type[Record]
    type_name: str
    fields: dict[str, FieldSpec] = field(default_factory=dict)

    @property
    def plural_name(self) -> str:
        return str(_inflect_engine.plural(self.type_name))

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None

    def get_field(self, name: str) -> FieldSpec | None:
        """Look a field up by its GraphQL name or by its Python attribute name."""
        if name in self.fields:
            return self.fields[name]
        for spec in self.fields.values():
            if spec.name == name:
                return spec
        return None

    def require_field(self, name: str) -> FieldSpec:
        spec = self.get_field(name)
        if spec is None:
            raise ConfigurationError(f"Field '{name}' does not exist on {self.type_name}")
        return spec

    def select_fields(self, names: list[str] | str) -> list[FieldSpec]:
        """Resolve a field whitelist; ``"*"`` selects every declared field."""
        if names == "*":
            return list(self.fields.values())
        return [self.require_field(name) for name in names]


class ModelCreator:
    """Creates a ``RecordModel`` for any ``Record`` subclass."""

    def applies_to(self, record_class: Any) -> bool:
        return isinstance(record_class, type) and issubclass(record_class, Record)

    def create_model(self, record_class: type[Record], type_name: str | None = None) -> RecordModel:
        if not self.applies_to(record_class):
            raise ConfigurationError(f"{record_class!r} is not a Record class")
        return RecordModel(
            record_class=record_class,
            type_name=type_name or record_class.__name__,
            fields=get_field_specs(record_class),
        )

"""Scaffold a whole schema from record classes and a declarative configuration."""

from collections.abc import Mapping
from typing import Any

from recordql import log
from recordql.config import ScaffoldingConfig, import_record_class
from recordql.errors import ConfigurationError
from recordql.records.model import ModelCreator
from recordql.records.store import RecordStore
from recordql.scaffolding.record_type import RecordTypeScaffolder
from recordql.schema.manager import SchemaManager


class SchemaScaffolder:
    """Collects record type scaffolders and registers them on a manager in one pass."""

    def __init__(self, store: RecordStore | None = None, model_creator: ModelCreator | None = None) -> None:
        self.store = store
        self.model_creator = model_creator or ModelCreator()
        self._types: dict[type, RecordTypeScaffolder] = {}

    def type(self, record_class: type, type_name: str | None = None) -> RecordTypeScaffolder:
        """Return the scaffolder of ``record_class``, creating it on first use.

        Raises:
            ConfigurationError: If ``record_class`` is not a record class
        """
        existing = self._types.get(record_class)
        if existing is not None:
            return existing
        if not self.model_creator.applies_to(record_class):
            raise ConfigurationError(f"{record_class!r} is not a Record class")
        model = self.model_creator.create_model(record_class, type_name)
        scaffolder = RecordTypeScaffolder(model, self.store)
        self._types[record_class] = scaffolder
        return scaffolder

    def get_types(self) -> list[RecordTypeScaffolder]:
        return list(self._types.values())

    def apply_config(self, config: ScaffoldingConfig | Mapping[str, Any]) -> None:
        if not isinstance(config, ScaffoldingConfig):
            config = ScaffoldingConfig.model_validate(config)
        for class_path, type_config in config.types.items():
            scaffolder = self.type(import_record_class(class_path))
            scaffolder.apply_config(type_config.model_dump(exclude_unset=True))

    def add_to_manager(self, manager: SchemaManager) -> None:
        for scaffolder in self._types.values():
            scaffolder.add_to_manager(manager)
        log.info(f"Scaffolded {len(self._types)} record type(s)")


def build_manager(config: ScaffoldingConfig | Mapping[str, Any], store: RecordStore | None = None) -> SchemaManager:
    """Create a manager holding everything described by ``config``."""
    scaffolder = SchemaScaffolder(store)
    scaffolder.apply_config(config)
    manager = SchemaManager()
    scaffolder.add_to_manager(manager)
    return manager

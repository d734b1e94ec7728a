import importlib
from enum import Enum
from pathlib import Path
from typing import Any, Literal, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field

from recordql import log
from recordql.errors import ConfigurationError


class OperationKind(str, Enum):
    READ = "read"
    READ_ONE = "readOne"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class TypeConfig(BaseModel):
    """Scaffolding settings of one record class.

    Operation settings are either a boolean or a mapping accepted by the
    operation's ``apply_config`` (``name``, ``description``, ``args``,
    ``sortableFields``, ``paginate``).
    """

    model_config = ConfigDict(extra="forbid")

    fields: list[str] | Literal["*"] = "*"
    description: str | None = None
    operations: dict[OperationKind, bool | dict[str, Any]] = Field(default_factory=dict)


class ScaffoldingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    types: dict[str, TypeConfig] = Field(default_factory=dict)


def import_record_class(path: str) -> type:
    """Import a class from a ``package.module.Class`` or ``package.module:Class`` path.

    Raises:
        ConfigurationError: If the module or the class cannot be found
    """
    module_name, separator, class_name = path.partition(":")
    if not separator:
        module_name, _, class_name = path.rpartition(".")
    if not module_name or not class_name:
        raise ConfigurationError(f"Invalid class path '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_name}': {e}") from e
    record_class = getattr(module, class_name, None)
    if not isinstance(record_class, type):
        raise ConfigurationError(f"Module '{module_name}' has no class '{class_name}'")
    return record_class


def load_scaffolding_config(config_path: Path) -> ScaffoldingConfig:
    """
    Load and validate a scaffolding configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        A validated ScaffoldingConfig; an empty file yields an empty configuration.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
        TypeError: If the YAML root is not a mapping.
        ValidationError: If validation against ScaffoldingConfig fails.
    """
    raw: Any
    with config_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    log.debug(f"Loaded scaffolding config from {config_path}")

    if raw is None or raw == {}:
        return ScaffoldingConfig()

    if not isinstance(raw, dict):
        raise TypeError(f"Scaffolding config root must be a mapping (YAML object), got {type(raw).__name__}")

    return ScaffoldingConfig.model_validate(cast(dict[str, Any], raw))

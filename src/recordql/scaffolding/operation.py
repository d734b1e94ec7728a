"""Base builders shared by the query and mutation scaffolders."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from graphql import GraphQLArgument, GraphQLNamedType, GraphQLResolveInfo

from recordql.errors import ConfigurationError
from recordql.scaffolding.args import build_argument
from recordql.scaffolding.permissions import ALLOW_ALL, PermissionChecker
from recordql.scaffolding.scaffold import ResolveFunction, Scaffold
from recordql.schema.manager import SchemaManager


class OperationScaffolder(ABC):
    """Mutable configuration of a single query or mutation.

    The builder is configured through its setters or :meth:`apply_config` and
    consumed by :meth:`scaffold`, which returns an immutable :class:`Scaffold`.
    Resolvers built by ``scaffold`` only capture a snapshot of the builder, so
    later configuration changes never leak into an already built schema.
    """

    def __init__(
        self,
        operation_name: str,
        type_name: str,
        resolver: ResolveFunction | None = None,
        description: str | None = None,
    ) -> None:
        self.operation_name = operation_name
        self.type_name = type_name
        self.resolver = resolver
        self.description = description
        self._args: dict[str, str] = {}
        self._permission_checker: PermissionChecker | None = None

    @property
    def name(self) -> str:
        return self.operation_name

    def set_description(self, description: str | None) -> None:
        self.description = description

    def set_resolver(self, resolver: ResolveFunction | None) -> None:
        self.resolver = resolver

    def add_args(self, args: Mapping[str, str]) -> None:
        """Merge argument declarations (name to type string) into this operation."""
        if not isinstance(args, Mapping):
            raise ConfigurationError(f"{self.operation_name}: args must be a mapping of names to types")
        self._args.update(args)

    def remove_arg(self, name: str) -> None:
        self._args.pop(name, None)

    def get_args(self) -> dict[str, str]:
        return dict(self._args)

    def set_permission_checker(self, checker: PermissionChecker | None) -> None:
        if checker is not None and not isinstance(checker, PermissionChecker):
            raise ConfigurationError(f"{self.operation_name}: {checker!r} does not implement check_permission")
        self._permission_checker = checker

    def get_permission_checker(self) -> PermissionChecker:
        return self._permission_checker or ALLOW_ALL

    def apply_config(self, config: Mapping[str, Any]) -> None:
        """Apply declarative settings; unknown keys are ignored."""
        if "description" in config:
            self.set_description(config["description"])
        if "args" in config:
            self.add_args(config["args"])

    def build_args(self, manager: SchemaManager) -> dict[str, GraphQLArgument]:
        return {name: build_argument(type_string, manager) for name, type_string in self._args.items()}

    def get_type(self, manager: SchemaManager) -> GraphQLNamedType:
        named_type = manager.get_type(self.type_name)
        if named_type is None:
            raise ConfigurationError(f"{self.operation_name}: type '{self.type_name}' is not registered")
        return named_type

    def snapshot_fetch(self) -> ResolveFunction:
        """Return the data-fetch delegate as it is configured right now."""
        resolver = self.resolver

        def fetch(parent: Any, args: dict[str, Any], context: Any, info: GraphQLResolveInfo | None) -> Any:
            if resolver is None:
                return None
            return resolver(parent, args, context, info)

        return fetch

    @abstractmethod
    def scaffold(self, manager: SchemaManager) -> Scaffold: ...

    @abstractmethod
    def add_to_manager(self, manager: SchemaManager) -> None: ...


class QueryScaffolder(OperationScaffolder):
    def add_to_manager(self, manager: SchemaManager) -> None:
        """Register this query; the scaffold is produced when the schema is built."""
        manager.add_query(lambda: self.scaffold(manager), self.operation_name)

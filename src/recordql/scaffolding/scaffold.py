"""Immutable operation definitions produced by the scaffolders."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from graphql import GraphQLArgument, GraphQLField, GraphQLOutputType, GraphQLResolveInfo

# (parent, args, context, info) -> result
ResolveFunction = Callable[[Any, dict[str, Any], Any, GraphQLResolveInfo | None], Any]


@dataclass(frozen=True)
class Scaffold:
    """The definition snapshot of a query or mutation.

    Attributes:
        name: Operation name, the field name on the root type
        type: Result type of the operation
        args: Arguments accepted by the operation
        resolve: Resolver following the ``(parent, args, context, info)`` protocol
        description: Optional operation description
    """

    name: str
    type: GraphQLOutputType
    resolve: ResolveFunction
    args: Mapping[str, GraphQLArgument] = field(default_factory=dict)
    description: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))

    def to_field(self) -> GraphQLField:
        """Adapt the scaffold to a root-type field for graphql-core."""
        resolve = self.resolve

        def resolve_field(parent: Any, info: GraphQLResolveInfo, **args: Any) -> Any:
            return resolve(parent, args, info.context, info)

        return GraphQLField(self.type, args=dict(self.args), resolve=resolve_field, description=self.description)

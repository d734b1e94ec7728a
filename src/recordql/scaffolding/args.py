"""Parse argument type strings such as ``String``, ``[ID]!`` or ``Int = 10``."""

import re
from typing import TYPE_CHECKING, Any

from graphql import (
    GraphQLArgument,
    GraphQLInputType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLSyntaxError,
    Undefined,
    is_input_type,
    parse_value,
    value_from_ast,
)

from recordql.errors import ConfigurationError
from recordql.graphql_type import BUILTIN_SCALARS

if TYPE_CHECKING:
    from recordql.schema.manager import SchemaManager

TYPE_STRING_PATTERN = re.compile(
    r"^\s*(?P<list>\[)?\s*(?P<name>[_A-Za-z][_0-9A-Za-z]*)\s*(?P<item_required>!)?\s*(?P<list_end>\])?"
    r"\s*(?P<required>!)?\s*(?:=\s*(?P<default>.+?))?\s*$"
)


def parse_type_string(type_string: str, manager: "SchemaManager | None" = None) -> tuple[GraphQLInputType, Any]:
    """Parse a type reference with an optional default value.

    Named types other than the built-in scalars are looked up on the manager
    and must be input types.

    Args:
        type_string: Type reference, e.g. ``"String"``, ``"[Int!]!"`` or ``"Int = 25"``
        manager: Registry used to resolve non-scalar type names

    Returns:
        tuple of (input type, default value); the default is ``Undefined`` when absent

    Raises:
        ConfigurationError: If the string is malformed, the type is unknown or the default does not match the type
    """
    match = TYPE_STRING_PATTERN.match(type_string)
    if match is None or bool(match.group("list")) != bool(match.group("list_end")):
        raise ConfigurationError(f"Invalid argument type '{type_string}'")

    name = match.group("name")
    named_type: Any = BUILTIN_SCALARS.get(name)
    if named_type is None and manager is not None:
        named_type = manager.get_type(name)
    if named_type is None:
        raise ConfigurationError(f"Unknown argument type '{name}'")
    if not is_input_type(named_type):
        raise ConfigurationError(f"Argument type '{name}' is not an input type")

    input_type: Any = named_type
    if match.group("list"):
        if match.group("item_required"):
            input_type = GraphQLNonNull(input_type)
        input_type = GraphQLList(input_type)
    elif match.group("item_required"):
        input_type = GraphQLNonNull(input_type)
    if match.group("required"):
        if isinstance(input_type, GraphQLNonNull):
            raise ConfigurationError(f"Invalid argument type '{type_string}'")
        input_type = GraphQLNonNull(input_type)

    default = Undefined
    if match.group("default") is not None:
        try:
            default = value_from_ast(parse_value(match.group("default")), input_type)
        except GraphQLSyntaxError as e:
            raise ConfigurationError(f"Invalid default value in '{type_string}': {e.message}") from e
        if default is Undefined:
            raise ConfigurationError(f"Default value in '{type_string}' does not match its type")

    return input_type, default


def build_argument(type_string: str, manager: "SchemaManager | None" = None) -> GraphQLArgument:
    input_type, default = parse_type_string(type_string, manager)
    return GraphQLArgument(input_type, default_value=default)

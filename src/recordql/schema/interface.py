"""The ``Record`` interface shared by every record-derived object type."""

from typing import Any

from graphql import (
    GraphQLAbstractType,
    GraphQLField,
    GraphQLInt,
    GraphQLInterfaceType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLResolveInfo,
    GraphQLString,
)

from recordql import log
from recordql.errors import UnresolvedTypeError
from recordql.records.fields import make_field_resolver
from recordql.schema.manager import RECORD_TYPES_EXTENSION, SchemaManager, find_record_type_name

RECORD_INTERFACE_NAME = "Record"


def record_interface_fields() -> dict[str, GraphQLField]:
    return {
        "id": GraphQLField(GraphQLNonNull(GraphQLInt), resolve=make_field_resolver("id")),
        "created": GraphQLField(GraphQLString, resolve=make_field_resolver("created")),
        "lastEdited": GraphQLField(GraphQLString, resolve=make_field_resolver("last_edited")),
    }


def resolve_record_type(value: Any, info: GraphQLResolveInfo, abstract_type: GraphQLAbstractType) -> str | None:
    """Resolve the concrete type of ``value`` from the record types of the executing schema.

    The mapping is the copy taken when that schema was built, so registrations
    made on the manager afterwards do not affect it.
    """
    schema = info.schema
    record_types = (schema.extensions or {}).get(RECORD_TYPES_EXTENSION, {})
    type_name = find_record_type_name(record_types, value)
    if type_name is None or not isinstance(schema.get_type(type_name), GraphQLObjectType):
        error = UnresolvedTypeError(type(value).__name__, abstract_type.name)
        log.warning(str(error))
        return None
    return type_name


def build_record_interface() -> GraphQLInterfaceType:
    """Build the base interface implemented by all record object types."""
    return GraphQLInterfaceType(
        RECORD_INTERFACE_NAME,
        fields=record_interface_fields,
        resolve_type=resolve_record_type,
        description="Base interface of all record types",
    )


def ensure_record_interface(manager: SchemaManager) -> GraphQLInterfaceType:
    """Return the manager's ``Record`` interface, registering it when missing."""
    existing = manager.get_type(RECORD_INTERFACE_NAME)
    if isinstance(existing, GraphQLInterfaceType):
        return existing
    interface = build_record_interface()
    manager.add_type(interface)
    return interface

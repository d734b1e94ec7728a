"""Map declared record field metadata to GraphQL field definitions."""

import types
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin
from uuid import UUID

from caseconverter import camelcase, pascalcase
from graphql import (
    GraphQLBoolean,
    GraphQLEnumType,
    GraphQLField,
    GraphQLFloat,
    GraphQLID,
    GraphQLInputField,
    GraphQLInputType,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLOutputType,
    GraphQLResolveInfo,
    GraphQLScalarType,
    GraphQLString,
)

from recordql import log
from recordql.records.record import Record, get_value

if TYPE_CHECKING:
    from recordql.schema.manager import SchemaManager

SCALAR_TYPES: dict[type, GraphQLScalarType] = {
    str: GraphQLString,
    int: GraphQLInt,
    float: GraphQLFloat,
    Decimal: GraphQLFloat,
    bool: GraphQLBoolean,
    date: GraphQLString,
    time: GraphQLString,
    UUID: GraphQLID,
}


@dataclass(frozen=True)
class FieldSpec:
    """Declared metadata of a single record field.

    Args:
        name: Python attribute name on the record
        annotation: Declared type with optionality and list wrapping removed
        nullable: Whether the field accepts ``None``
        is_list: Whether the field holds a list of ``annotation`` values
        required: Whether the record cannot be created without a value for the field
    """

    name: str
    annotation: Any
    nullable: bool
    is_list: bool = False
    required: bool = False

    @property
    def graphql_name(self) -> str:
        return str(camelcase(self.name)) if "_" in self.name else self.name

    @property
    def is_record(self) -> bool:
        return isinstance(self.annotation, type) and issubclass(self.annotation, Record)

    @property
    def is_enum(self) -> bool:
        return isinstance(self.annotation, type) and issubclass(self.annotation, Enum)


def unwrap_annotation(annotation: Any) -> tuple[Any, bool, bool]:
    """Split an annotation into its inner type, nullability and list-ness.

    Args:
        annotation: A type annotation such as ``str``, ``int | None`` or ``list[str]``

    Returns:
        tuple of (inner type, nullable, is_list)
    """
    nullable = False
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        nullable = len(members) < len(get_args(annotation))
        annotation = members[0] if len(members) == 1 else Any

    is_list = False
    if get_origin(annotation) in (list, tuple, set, frozenset):
        is_list = True
        item_args = [arg for arg in get_args(annotation) if arg is not Ellipsis]
        annotation = item_args[0] if item_args else Any

    return annotation, nullable, is_list


def get_field_specs(record_class: type[Any]) -> dict[str, FieldSpec]:
    """Introspect the declared fields of a pydantic record class.

    Returns:
        dict mapping GraphQL field names to their ``FieldSpec``, in declaration order
    """
    specs: dict[str, FieldSpec] = {}
    for name, info in record_class.model_fields.items():
        annotation, nullable, is_list = unwrap_annotation(info.annotation)
        spec = FieldSpec(
            name=name, annotation=annotation, nullable=nullable, is_list=is_list, required=info.is_required()
        )
        specs[spec.graphql_name] = spec
    return specs


def get_enum_type(manager: "SchemaManager", type_name: str, spec: FieldSpec) -> GraphQLEnumType:
    """Return the shared enum type for an enum field, registering it on first use."""
    enum_name = f"{type_name}{pascalcase(spec.name)}Enum"
    existing = manager.get_type(enum_name)
    if isinstance(existing, GraphQLEnumType):
        return existing
    # Internal values are the Python enum values, records convert them back on validation
    enum_type = GraphQLEnumType(enum_name, spec.annotation, names_as_values=False)
    manager.add_type(enum_type)
    return enum_type


def _wrap(spec: FieldSpec, inner: Any) -> Any:
    if spec.is_list:
        inner = GraphQLList(GraphQLNonNull(inner))
    return inner if spec.nullable else GraphQLNonNull(inner)


def resolve_output_type(manager: "SchemaManager", type_name: str, spec: FieldSpec) -> GraphQLOutputType | None:
    """Resolve the GraphQL output type for a record field.

    References to other records resolve against the types already registered
    on the manager. ``None`` means the field cannot be exposed.
    """
    if spec.is_record:
        target = manager.get_record_type(spec.annotation)
        if target is None:
            log.warning(f"Skipping field '{type_name}.{spec.graphql_name}': {spec.annotation.__name__} has no type")
            return None
        return _wrap(spec, target)  # type: ignore[no-any-return]

    if spec.is_enum:
        return _wrap(spec, get_enum_type(manager, type_name, spec))  # type: ignore[no-any-return]

    scalar = _lookup_scalar(spec.annotation)
    if scalar is None:
        log.warning(f"No GraphQL type for '{type_name}.{spec.graphql_name}' ({spec.annotation!r}), using String")
        scalar = GraphQLString
    return _wrap(spec, scalar)  # type: ignore[no-any-return]


def resolve_input_type(
    manager: "SchemaManager", type_name: str, spec: FieldSpec, force_nullable: bool = False
) -> GraphQLInputType | None:
    """Resolve the GraphQL input type for a record field.

    Record references have no input representation and yield ``None``.
    """
    if spec.is_record:
        return None
    if spec.is_enum:
        inner: Any = get_enum_type(manager, type_name, spec)
    else:
        inner = _lookup_scalar(spec.annotation) or GraphQLString
    if spec.is_list:
        inner = GraphQLList(GraphQLNonNull(inner))
    if spec.nullable or force_nullable or not spec.required:
        return inner  # type: ignore[no-any-return]
    return GraphQLNonNull(inner)


def _lookup_scalar(annotation: Any) -> GraphQLScalarType | None:
    if not isinstance(annotation, type):
        return None
    # bool subclasses int and datetime subclasses date: walk the MRO so the most specific mapping wins
    for klass in annotation.__mro__:
        if klass in SCALAR_TYPES:
            return SCALAR_TYPES[klass]
    return None


def _to_output(value: Any) -> Any:
    if isinstance(value, date | time):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def make_field_resolver(attribute: str) -> Callable[[Any, GraphQLResolveInfo], Any]:
    """Read ``attribute`` from the parent value, rendering dates and times as ISO 8601 strings."""

    def resolve(parent: Any, info: GraphQLResolveInfo, **_args: Any) -> Any:
        value = get_value(parent, attribute)
        if isinstance(value, list | tuple):
            return [_to_output(item) for item in value]
        return _to_output(value)

    return resolve


def build_field(manager: "SchemaManager", type_name: str, spec: FieldSpec) -> GraphQLField | None:
    output_type = resolve_output_type(manager, type_name, spec)
    if output_type is None:
        return None
    return GraphQLField(output_type, resolve=make_field_resolver(spec.name))


def build_input_field(
    manager: "SchemaManager", type_name: str, spec: FieldSpec, force_nullable: bool = False
) -> GraphQLInputField | None:
    input_type = resolve_input_type(manager, type_name, spec, force_nullable=force_nullable)
    if input_type is None:
        return None
    return GraphQLInputField(input_type, out_name=spec.name)

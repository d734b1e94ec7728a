"""Registry of the types, queries and mutations that make up a schema."""

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from graphql import (
    GraphQLField,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLString,
    graphql_sync,
    print_schema,
    validate_schema,
)

from recordql import log
from recordql.errors import ConfigurationError, SchemaValidationError
from recordql.graphql_type import is_graphql_system_type

if TYPE_CHECKING:
    from recordql.scaffolding.scaffold import Scaffold

# Schema extension holding the record class to type name mapping captured at build time
RECORD_TYPES_EXTENSION = "recordTypes"

T = TypeVar("T")
Producer = Callable[[], T]
TypeDefinition = GraphQLNamedType | Producer[GraphQLNamedType]


def _evaluate(definition: Any) -> Any:
    return definition() if callable(definition) else definition


def find_record_type_name(record_types: Mapping[type, str], value: Any) -> str | None:
    """Type name registered for the most specific class in the hierarchy of ``value``."""
    for klass in type(value).__mro__:
        if klass in record_types:
            return record_types[klass]
    return None


class SchemaManager:
    """Owns every type and operation definition of a schema.

    Definitions can be registered directly or as zero-argument producers that
    are only invoked when the schema is assembled, which lets mutually
    referencing types be registered in any order. Names are unique per
    namespace and later registrations win.

    The assembled ``GraphQLSchema`` is cached. Any registration made after a
    build discards the cache, and the next call to :meth:`schema` builds and
    swaps in a complete new schema. Each built schema carries its own copy of the record class mapping, so
    later registrations never change how an existing schema resolves types.
    """

    def __init__(self) -> None:
        self._types: dict[str, TypeDefinition] = {}
        self._queries: dict[str, Any] = {}
        self._mutations: dict[str, Any] = {}
        self._record_types: dict[type, str] = {}
        self._schema: GraphQLSchema | None = None

    def add_type(self, type_def: TypeDefinition, name: str | None = None) -> None:
        """Register a named type, or a producer of one.

        Args:
            type_def: A GraphQL named type or a zero-argument callable returning one
            name: Registration name; required for producers, defaults to the type's own name

        Raises:
            ConfigurationError: If a producer is registered without a name, or under a reserved name
        """
        if name is None:
            if not isinstance(type_def, GraphQLNamedType):
                raise ConfigurationError("A name is required when registering a type producer")
            name = type_def.name
        if is_graphql_system_type(name):
            raise ConfigurationError(f"'{name}' is reserved by GraphQL and cannot be registered as a type")
        self._register(self._types, name, type_def, "type")

    def get_type(self, name: str) -> GraphQLNamedType | None:
        definition = self._types.get(name)
        if definition is None:
            return None
        if not isinstance(definition, GraphQLNamedType):
            # Producers are evaluated once and replaced by their result
            definition = _evaluate(definition)
            self._types[name] = definition
        return definition

    def has_type(self, name: str) -> bool:
        return name in self._types

    @property
    def type_names(self) -> list[str]:
        return list(self._types)

    def add_query(self, query: Any, name: str) -> None:
        """Register a query ``Scaffold`` or a producer returning one under ``name``."""
        self._register(self._queries, name, query, "query")

    def add_mutation(self, mutation: Any, name: str) -> None:
        """Register a mutation ``Scaffold`` or a producer returning one under ``name``."""
        self._register(self._mutations, name, mutation, "mutation")

    def get_query(self, name: str) -> "Scaffold | None":
        return _evaluate(self._queries[name]) if name in self._queries else None

    def get_mutation(self, name: str) -> "Scaffold | None":
        return _evaluate(self._mutations[name]) if name in self._mutations else None

    @property
    def query_names(self) -> list[str]:
        return list(self._queries)

    @property
    def mutation_names(self) -> list[str]:
        return list(self._mutations)

    def register_record_type(self, record_class: type, type_name: str) -> None:
        """Map a record class to the name of the object type that represents it."""
        self._record_types[record_class] = type_name
        self._schema = None

    def get_record_type(self, record_class: type) -> GraphQLObjectType | None:
        type_name = self._record_types.get(record_class)
        if type_name is None:
            return None
        object_type = self.get_type(type_name)
        return object_type if isinstance(object_type, GraphQLObjectType) else None

    def resolve_record_type(self, value: Any) -> GraphQLObjectType | None:
        """Find the object type registered for the class of ``value``.

        The class hierarchy is walked so that the most specific registered
        class wins. Returns ``None`` if no class in the hierarchy is mapped.
        """
        type_name = find_record_type_name(self._record_types, value)
        if type_name is None:
            return None
        object_type = self.get_type(type_name)
        return object_type if isinstance(object_type, GraphQLObjectType) else None

    def _register(self, registry: dict[str, Any], name: str, definition: Any, kind: str) -> None:
        if name in registry:
            log.debug(f"Overriding {kind} '{name}'")
        else:
            log.debug(f"Registering {kind} '{name}'")
        registry[name] = definition
        self._schema = None

    def _build_root(self, name: str, operations: Mapping[str, Any]) -> GraphQLObjectType | None:
        if not operations:
            return None
        scaffolds = {op_name: _evaluate(definition) for op_name, definition in operations.items()}

        def fields() -> dict[str, GraphQLField]:
            return {op_name: scaffold.to_field() for op_name, scaffold in scaffolds.items()}

        return GraphQLObjectType(name, fields=fields)

    def build_schema(self) -> GraphQLSchema:
        """Assemble and validate a new schema from the current registrations.

        Raises:
            SchemaValidationError: If the assembled schema is invalid
        """
        query_type = self._build_root("Query", self._queries)
        if query_type is None:
            log.info("No queries registered, adding a generic Query type.")
            query_type = GraphQLObjectType("Query", fields={"ping": GraphQLField(GraphQLString)})
        mutation_type = self._build_root("Mutation", self._mutations)

        types = [type_ for name in list(self._types) if (type_ := self.get_type(name)) is not None]
        schema = GraphQLSchema(
            query=query_type,
            mutation=mutation_type,
            types=types,
            extensions={RECORD_TYPES_EXTENSION: dict(self._record_types)},
        )

        errors = validate_schema(schema)
        if errors:
            raise SchemaValidationError([error.message for error in errors])

        log.info(f"Built schema with {len(self._queries)} queries and {len(self._mutations)} mutations")
        log.debug(f"Schema: \n{print_schema(schema)}")
        return schema

    def schema(self) -> GraphQLSchema:
        """Return the cached schema, building it first if needed."""
        schema = self._schema
        if schema is None:
            schema = self.build_schema()
            self._schema = schema
        return schema

    def print_schema(self) -> str:
        return print_schema(self.schema())

    def query(
        self,
        source: str,
        variables: dict[str, Any] | None = None,
        context: Any = None,
        operation_name: str | None = None,
    ) -> dict[str, Any]:
        """Execute an operation and return the standard ``{data, errors}`` envelope."""
        result = graphql_sync(
            self.schema(),
            source,
            context_value=context,
            variable_values=variables,
            operation_name=operation_name,
        )
        return {
            "data": result.data,
            "errors": [error.formatted for error in result.errors or []],
        }

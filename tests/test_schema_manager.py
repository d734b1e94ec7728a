import logging
from typing import Any

import pytest
from graphql import GraphQLArgument, GraphQLObjectType, GraphQLSchema, GraphQLString

from recordql.errors import ConfigurationError, SchemaValidationError
from recordql.scaffolding.scaffold import Scaffold
from recordql.schema.manager import SchemaManager
from tests.conftest import make_object_type


def hello_scaffold(name: str = "hello", answer: str = "world") -> Scaffold:
    return Scaffold(name=name, type=GraphQLString, resolve=lambda parent, args, context, info: answer)


class TestTypes:
    def test_add_and_get_type(self, manager: SchemaManager) -> None:
        foo = make_object_type("Foo")
        manager.add_type(foo)

        assert manager.has_type("Foo")
        assert manager.get_type("Foo") is foo
        assert manager.get_type("Foo").name == "Foo"

    def test_unknown_type(self, manager: SchemaManager) -> None:
        assert not manager.has_type("Nope")
        assert manager.get_type("Nope") is None

    def test_register_under_another_name(self, manager: SchemaManager) -> None:
        manager.add_type(make_object_type("Foo"), "Alias")

        assert manager.type_names == ["Alias"]
        assert manager.get_type("Alias").name == "Foo"

    def test_last_registration_wins(self, manager: SchemaManager, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="recordql")
        first, second = make_object_type("Foo"), make_object_type("Foo")

        manager.add_type(first)
        manager.add_type(second)

        assert manager.get_type("Foo") is second
        assert "Overriding type 'Foo'" in caplog.text

    def test_producers_are_evaluated_once_and_lazily(self, manager: SchemaManager) -> None:
        calls: list[str] = []

        def produce() -> GraphQLObjectType:
            calls.append("called")
            return make_object_type("Lazy")

        manager.add_type(produce, "Lazy")
        assert calls == []

        first = manager.get_type("Lazy")
        second = manager.get_type("Lazy")

        assert first is second
        assert calls == ["called"]

    def test_producer_requires_a_name(self, manager: SchemaManager) -> None:
        with pytest.raises(ConfigurationError, match="name is required"):
            manager.add_type(lambda: make_object_type("Lazy"))

    @pytest.mark.parametrize("name", ["Query", "Mutation", "String", "ID", "__Schema"])
    def test_reserved_names(self, manager: SchemaManager, name: str) -> None:
        with pytest.raises(ConfigurationError, match=f"'{name}' is reserved by GraphQL"):
            manager.add_type(make_object_type(name))

        assert not manager.has_type(name)


class TestOperations:
    def test_queries_and_mutations_have_separate_namespaces(self, manager: SchemaManager) -> None:
        manager.add_query(hello_scaffold("same", "query"), "same")
        manager.add_mutation(hello_scaffold("same", "mutation"), "same")

        result = manager.query("{ same }")
        mutation_result = manager.query("mutation { same }")

        assert result == {"data": {"same": "query"}, "errors": []}
        assert mutation_result == {"data": {"same": "mutation"}, "errors": []}

    def test_last_query_wins(self, manager: SchemaManager) -> None:
        manager.add_query(hello_scaffold(answer="first"), "hello")
        manager.add_query(hello_scaffold(answer="second"), "hello")

        assert manager.query_names == ["hello"]
        assert manager.query("{ hello }")["data"] == {"hello": "second"}

    def test_query_producer(self, manager: SchemaManager) -> None:
        manager.add_query(lambda: hello_scaffold(), "hello")

        scaffold = manager.get_query("hello")

        assert isinstance(scaffold, Scaffold)
        assert scaffold.name == "hello"
        assert manager.get_query("missing") is None
        assert manager.get_mutation("hello") is None


class TestSchema:
    def test_empty_manager_gets_a_ping_query(self, manager: SchemaManager) -> None:
        schema = manager.schema()

        assert isinstance(schema, GraphQLSchema)
        assert schema.query_type is not None
        assert "ping" in schema.query_type.fields
        assert schema.mutation_type is None

    def test_registered_types_are_part_of_the_schema(self, manager: SchemaManager) -> None:
        manager.add_type(make_object_type("Orphan"))

        assert "type Orphan" in manager.print_schema()

    def test_schema_is_cached(self, manager: SchemaManager) -> None:
        manager.add_query(hello_scaffold(), "hello")

        assert manager.schema() is manager.schema()

    def test_registration_discards_the_cached_schema(self, manager: SchemaManager) -> None:
        manager.add_query(hello_scaffold(), "hello")
        before = manager.schema()

        manager.add_query(hello_scaffold("goodbye"), "goodbye")
        after = manager.schema()

        assert after is not before
        assert "goodbye" not in before.query_type.fields
        assert "goodbye" in after.query_type.fields

    def test_invalid_schema(self, manager: SchemaManager) -> None:
        # An object type without fields is invalid
        manager.add_type(GraphQLObjectType("Empty", fields={}))

        with pytest.raises(SchemaValidationError, match="Empty must define one or more fields") as exc_info:
            manager.schema()

        assert exc_info.value.messages

    def test_failed_build_keeps_no_schema(self, manager: SchemaManager) -> None:
        manager.add_type(GraphQLObjectType("Empty", fields={}))
        with pytest.raises(SchemaValidationError):
            manager.schema()

        manager.add_type(make_object_type("Empty"))

        assert "Empty" in manager.schema().type_map


class TestQuery:
    def test_envelope_on_success(self, manager: SchemaManager) -> None:
        manager.add_query(hello_scaffold(), "hello")

        assert manager.query("{ hello }") == {"data": {"hello": "world"}, "errors": []}

    def test_envelope_on_syntax_error(self, manager: SchemaManager) -> None:
        manager.add_query(hello_scaffold(), "hello")

        result = manager.query("{ hello")

        assert result["data"] is None
        assert len(result["errors"]) == 1
        assert "Syntax Error" in result["errors"][0]["message"]

    def test_resolver_errors_are_reported_per_field(self, manager: SchemaManager) -> None:
        def fail(parent: Any, args: dict[str, Any], context: Any, info: Any) -> Any:
            raise RuntimeError("boom")

        manager.add_query(hello_scaffold(), "hello")
        manager.add_query(Scaffold(name="broken", type=GraphQLString, resolve=fail), "broken")

        result = manager.query("{ hello broken }")

        assert result["data"] == {"hello": "world", "broken": None}
        assert result["errors"][0]["message"] == "boom"
        assert result["errors"][0]["path"] == ["broken"]

    def test_variables_context_and_operation_name(self, manager: SchemaManager) -> None:
        def echo(parent: Any, args: dict[str, Any], context: Any, info: Any) -> str:
            return f"{context['greeting']} {args['name']}"

        scaffold = Scaffold(
            name="greet",
            type=GraphQLString,
            resolve=echo,
            args={"name": GraphQLArgument(GraphQLString)},
        )
        manager.add_query(scaffold, "greet")

        result = manager.query(
            "query A { greet(name: \"a\") } query B($name: String) { greet(name: $name) }",
            variables={"name": "b"},
            context={"greeting": "hi"},
            operation_name="B",
        )

        assert result == {"data": {"greet": "hi b"}, "errors": []}

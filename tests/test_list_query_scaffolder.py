from typing import Any
from unittest.mock import MagicMock, call, patch

import pytest
from graphql import GraphQLList, GraphQLObjectType

from recordql.errors import ConfigurationError
from recordql.records.record import RecordList
from recordql.scaffolding.list_query import ListQueryScaffolder
from recordql.scaffolding.permissions import AllowAll, CallbackPermissionChecker, DenyAll
from recordql.scaffolding.scaffold import Scaffold
from recordql.schema.manager import SchemaManager
from tests.conftest import make_object_type, static_resolver


class TestPaginationLimits:
    def test_get_pagination_limit(self) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "test")

        assert scaffolder.get_pagination_limit() == 100

        scaffolder.set_pagination_limit(200)
        assert scaffolder.get_pagination_limit() == 100

        scaffolder.set_pagination_limit(25)
        assert scaffolder.get_pagination_limit() == 25

    def test_maximum_pagination_limit(self) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "test")

        assert scaffolder.get_maximum_pagination_limit() == 100

        scaffolder.set_maximum_pagination_limit(200)
        assert scaffolder.get_maximum_pagination_limit() == 200

        scaffolder.set_maximum_pagination_limit(25)
        assert scaffolder.get_pagination_limit() == 25

    def test_explicit_limit_freezes_default(self) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "test")
        scaffolder.set_use_pagination({"limit": 30, "maximumLimit": 200})

        scaffolder.set_pagination_limit(50)
        assert scaffolder.get_pagination_limit() == 30

        scaffolder.set_use_pagination({"defaultLimit": 60})
        assert scaffolder.get_pagination_limit() == 30

    def test_maximum_limit_stays_adjustable_after_explicit_limit(self) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "test")
        scaffolder.set_use_pagination({"limit": 30})

        scaffolder.set_maximum_pagination_limit(10)

        assert scaffolder.get_maximum_pagination_limit() == 10
        assert scaffolder.get_pagination_limit() == 10

    def test_default_limit_does_not_freeze(self) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "test")
        scaffolder.set_use_pagination({"defaultLimit": 30})

        scaffolder.set_pagination_limit(40)

        assert scaffolder.get_pagination_limit() == 40
        assert scaffolder.is_paginated()

    @pytest.mark.parametrize("limit", [0, -5, "25", 2.5, True])
    def test_invalid_limits_are_rejected(self, limit: Any) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "test")
        with pytest.raises(ConfigurationError, match="must be a positive integer"):
            scaffolder.set_pagination_limit(limit)
        with pytest.raises(ConfigurationError, match="must be a positive integer"):
            scaffolder.set_maximum_pagination_limit(limit)


def test_list_query_scaffolder_unpaginated(manager: SchemaManager) -> None:
    scaffolder = ListQueryScaffolder("testQuery", "test")
    scaffolder.set_description("My description")
    scaffolder.set_use_pagination(False)
    scaffolder.add_args({"Test": "String"})
    base_type = make_object_type("test")
    manager.add_type(base_type)

    scaffold = scaffolder.scaffold(manager)

    assert isinstance(scaffold, Scaffold)
    assert scaffold.name == "testQuery"
    assert scaffold.description == "My description"
    assert "Test" in scaffold.args
    assert callable(scaffold.resolve)
    assert isinstance(scaffold.type, GraphQLList)
    assert scaffold.type.of_type is base_type

    observer = MagicMock(spec=SchemaManager)
    scaffolder.add_to_manager(observer)

    observer.add_query.assert_called_once()
    producer, name = observer.add_query.call_args.args
    assert name == "testQuery"
    assert callable(producer)


def test_add_to_manager_registers_a_lazy_producer(manager: SchemaManager) -> None:
    scaffolder = ListQueryScaffolder("testQuery", "test")
    scaffolder.set_use_pagination(False)
    scaffolder.add_to_manager(manager)

    # The type only needs to exist once the scaffold is produced
    manager.add_type(make_object_type("test"))

    scaffold = manager.get_query("testQuery")
    assert scaffold is not None
    assert scaffold.type.of_type.name == "test"


def test_list_query_scaffolder_paginated(manager: SchemaManager) -> None:
    scaffolder = ListQueryScaffolder("testQuery", "test")
    scaffolder.set_use_pagination(True)
    scaffolder.set_pagination_limit(25)
    scaffolder.set_maximum_pagination_limit(110)
    scaffolder.add_args({"Test": "String"})
    scaffolder.add_sortable_fields(["test"])
    manager.add_type(make_object_type("test"))
    scaffolder.add_to_manager(manager)

    scaffold = scaffolder.scaffold(manager)

    assert isinstance(scaffold.type, GraphQLObjectType)
    assert scaffold.type.name == "testQueryConnection"
    assert "pageInfo" in scaffold.type.fields
    assert "edges" in scaffold.type.fields
    assert {"Test", "sortBy", "limit", "offset", "after"} <= set(scaffold.args)
    assert scaffold.args["limit"].default_value == 25


def test_connection_fields_are_computed_lazily(manager: SchemaManager) -> None:
    scaffolder = ListQueryScaffolder("testQuery", "later")

    # The wrapped type is not registered yet when the connection is built
    scaffold = scaffolder.scaffold(manager)
    manager.add_type(make_object_type("later"))

    edge_type = scaffold.type.fields["edges"].type.of_type.of_type.of_type
    assert edge_type.name == "testQueryEdge"
    assert edge_type.fields["node"].type.name == "later"


def test_unknown_type_fails_at_build_time(manager: SchemaManager) -> None:
    scaffolder = ListQueryScaffolder("testQuery", "missing")
    scaffolder.set_use_pagination(False)

    with pytest.raises(ConfigurationError, match="type 'missing' is not registered"):
        scaffolder.scaffold(manager)


class TestApplyConfig:
    def test_apply_config(self) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "testType")

        with (
            patch.object(scaffolder, "add_sortable_fields") as add_sortable_fields,
            patch.object(scaffolder, "set_use_pagination") as set_use_pagination,
        ):
            scaffolder.apply_config({"sortableFields": ["Test1", "Test2"], "paginate": False})
            scaffolder.apply_config({"paginate": {"limit": 25, "maximumLimit": 110}})
            scaffolder.apply_config({"paginate": {"defaultLimit": 25, "maximumLimit": 110}})

        add_sortable_fields.assert_called_once_with(["Test1", "Test2"])
        assert set_use_pagination.call_args_list == [
            call(False),
            call({"limit": 25, "maximumLimit": 110}),
            call({"defaultLimit": 25, "maximumLimit": 110}),
        ]

    def test_paginate_mapping_sets_limits(self) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "testType")

        with (
            patch.object(scaffolder, "set_pagination_limit") as set_pagination_limit,
            patch.object(scaffolder, "set_maximum_pagination_limit") as set_maximum_pagination_limit,
        ):
            scaffolder.apply_config({"paginate": {"limit": 25, "maximumLimit": 110}})
            scaffolder.apply_config({"paginate": {"defaultLimit": 25, "maximumLimit": 110}})

        assert set_pagination_limit.call_args_list == [call(25), call(25)]
        assert set_maximum_pagination_limit.call_args_list == [call(110), call(110)]

    def test_apply_config_throws_on_bad_sortable_fields(self) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "testType")
        with pytest.raises(ConfigurationError, match="sortableFields must be an array"):
            scaffolder.apply_config({"sortableFields": "fail"})

    def test_apply_config_rejects_bad_paginate(self) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "testType")
        with pytest.raises(ConfigurationError, match="paginate must be a boolean or a mapping"):
            scaffolder.apply_config({"paginate": 25})

    def test_unknown_keys_are_ignored(self) -> None:
        scaffolder = ListQueryScaffolder("testQuery", "testType")
        scaffolder.apply_config({"somethingElse": True, "description": "Reads things", "args": {"Title": "String"}})

        assert scaffolder.description == "Reads things"
        assert scaffolder.get_args() == {"Title": "String"}


def test_add_args_overwrites_duplicates() -> None:
    scaffolder = ListQueryScaffolder("testQuery", "testType")
    scaffolder.add_args({"Title": "String", "Count": "Int"})
    scaffolder.add_args({"Title": "ID!"})

    assert scaffolder.get_args() == {"Title": "ID!", "Count": "Int"}


def test_sortable_fields_are_appended_once() -> None:
    scaffolder = ListQueryScaffolder("testQuery", "testType")
    scaffolder.add_sortable_fields(["a", "b"])
    scaffolder.add_sortable_fields(["b", "c"])

    assert scaffolder.get_sortable_fields() == ["a", "b", "c"]


@pytest.mark.parametrize(
    "checker,expected",
    [
        (None, 1),
        (AllowAll(), 1),
        (DenyAll(), 0),
        (CallbackPermissionChecker(lambda context, result: True), 1),
        (CallbackPermissionChecker(lambda context, result: False), 0),
    ],
)
def test_permission_check(manager: SchemaManager, checker: Any, expected: int) -> None:
    manager.add_type(make_object_type("testType"))
    scaffolder = ListQueryScaffolder("testQuery", "testType", static_resolver([{"Foo": "Bar"}]))
    scaffolder.set_use_pagination(False)
    if checker is not None:
        scaffolder.set_permission_checker(checker)

    scaffolder.add_to_manager(manager)
    scaffold = scaffolder.scaffold(manager)
    result = scaffold.resolve(None, {}, {"currentUser": None}, None)

    assert result is not None
    assert isinstance(result, RecordList)
    assert len(result) == expected
    if expected:
        assert result.first()["Foo"] == "Bar"
    else:
        assert result.first() is None
        assert list(result) == []


def test_denied_paginated_result_keeps_connection_shape(manager: SchemaManager) -> None:
    manager.add_type(make_object_type("testType"))
    scaffolder = ListQueryScaffolder("testQuery", "testType", static_resolver([{"Foo": "Bar"}]))
    scaffolder.set_permission_checker(DenyAll())

    result = scaffolder.scaffold(manager).resolve(None, {}, None, None)

    assert result["edges"] == []
    assert result["pageInfo"] == {"hasNextPage": False, "hasPreviousPage": False, "totalCount": 0}


def test_denied_results_still_execute_the_fetch(manager: SchemaManager) -> None:
    manager.add_type(make_object_type("testType"))
    fetch = MagicMock(return_value=RecordList([{"Foo": "Bar"}]))
    scaffolder = ListQueryScaffolder("testQuery", "testType", fetch)
    scaffolder.set_permission_checker(DenyAll())

    scaffolder.scaffold(manager).resolve("parent", {"limit": 5}, "context", None)

    fetch.assert_called_once_with("parent", {"limit": 5}, "context", None)


def test_permission_checker_receives_results_unchanged(manager: SchemaManager) -> None:
    manager.add_type(make_object_type("testType"))
    items = [{"Foo": "b"}, {"Foo": "a"}]
    seen: list[RecordList] = []

    def check(context: Any, result: RecordList) -> bool:
        seen.append(result)
        return True

    scaffolder = ListQueryScaffolder("testQuery", "testType", static_resolver(items))
    scaffolder.set_use_pagination(False)
    scaffolder.set_permission_checker(CallbackPermissionChecker(check))

    result = scaffolder.scaffold(manager).resolve(None, {}, None, None)

    assert seen == [RecordList(items)]
    assert result.column("Foo") == ["b", "a"]


def test_none_from_fetch_is_an_empty_list(manager: SchemaManager) -> None:
    manager.add_type(make_object_type("testType"))
    scaffolder = ListQueryScaffolder("testQuery", "testType")
    scaffolder.set_use_pagination(False)

    result = scaffolder.scaffold(manager).resolve(None, {}, None, None)

    assert isinstance(result, RecordList)
    assert len(result) == 0


def test_sort_by_argument_orders_results(manager: SchemaManager) -> None:
    manager.add_type(make_object_type("testType"))
    items = [{"Foo": "b", "n": 1}, {"Foo": "a", "n": 2}, {"Foo": "c", "n": 2}]
    scaffolder = ListQueryScaffolder("testQuery", "testType", static_resolver(items))
    scaffolder.set_use_pagination(False)
    scaffolder.add_sortable_fields(["Foo", "n"])

    resolve = scaffolder.scaffold(manager).resolve
    ascending = resolve(None, {"sortBy": [{"field": "Foo", "direction": "ASC"}]}, None, None)
    by_n_then_foo = resolve(
        None, {"sortBy": [{"field": "n", "direction": "DESC"}, {"field": "Foo", "direction": "DESC"}]}, None, None
    )

    assert ascending.column("Foo") == ["a", "b", "c"]
    assert by_n_then_foo.column("Foo") == ["c", "a", "b"]


def test_scaffold_is_a_snapshot(manager: SchemaManager) -> None:
    manager.add_type(make_object_type("testType"))
    scaffolder = ListQueryScaffolder("testQuery", "testType", static_resolver([{"Foo": "Bar"}]))
    scaffolder.set_use_pagination(False)
    scaffold = scaffolder.scaffold(manager)

    scaffolder.set_permission_checker(DenyAll())
    scaffolder.set_resolver(static_resolver([]))

    assert len(scaffold.resolve(None, {}, None, None)) == 1
    with pytest.raises(TypeError):
        scaffold.args["extra"] = None  # type: ignore[index]

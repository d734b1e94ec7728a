"""List queries with sorting and optional connection pagination."""

from collections.abc import Iterable, Mapping
from typing import Any

from graphql import (
    GraphQLArgument,
    GraphQLEnumType,
    GraphQLEnumValue,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLResolveInfo,
)

from recordql import log
from recordql.errors import ConfigurationError
from recordql.records.record import SORT_ASC, SORT_DESC, Record, RecordList
from recordql.scaffolding.connection import Connection, empty_connection
from recordql.scaffolding.operation import QueryScaffolder
from recordql.scaffolding.scaffold import ResolveFunction, Scaffold
from recordql.schema.manager import SchemaManager

DEFAULT_PAGINATION_LIMIT = 100
DEFAULT_MAXIMUM_PAGINATION_LIMIT = 100

SORT_DIRECTION_TYPE = GraphQLEnumType(
    "SortDirection",
    {"ASC": GraphQLEnumValue(SORT_ASC), "DESC": GraphQLEnumValue(SORT_DESC)},
    description="Direction of a sort",
)


def to_record_list(result: Any) -> RecordList:
    """Normalise whatever a data-fetch delegate returned into a ``RecordList``."""
    if result is None:
        return RecordList()
    if isinstance(result, RecordList):
        return result
    if isinstance(result, Mapping | Record | str):
        return RecordList([result])
    if isinstance(result, Iterable):
        return RecordList(result)
    return RecordList([result])


def _validate_limit(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return value


class ListQueryScaffolder(QueryScaffolder):
    """Builds a query returning a list of ``type_name`` items.

    Pagination is enabled by default. A paginated query returns a
    ``<name>Connection`` and accepts ``limit``, ``offset`` and ``after``
    arguments. Sortable fields add a ``sortBy`` argument.

    Note:
        Enabling pagination with an explicit ``limit`` freezes the default
        page size: later :meth:`set_pagination_limit` calls are ignored. The
        maximum limit always stays adjustable and caps the default on read.
    """

    def __init__(
        self,
        operation_name: str,
        type_name: str,
        resolver: ResolveFunction | None = None,
        description: str | None = None,
    ) -> None:
        super().__init__(operation_name, type_name, resolver, description)
        self._use_pagination = True
        self._limit = DEFAULT_PAGINATION_LIMIT
        self._maximum_limit = DEFAULT_MAXIMUM_PAGINATION_LIMIT
        self._limit_frozen = False
        self._sortable_fields: list[str] = []

    def set_use_pagination(self, use_pagination: bool | Mapping[str, Any]) -> None:
        """Toggle pagination, or enable it with ``limit``/``defaultLimit`` and ``maximumLimit`` settings."""
        if isinstance(use_pagination, Mapping):
            limit = use_pagination.get("limit", use_pagination.get("defaultLimit"))
            if limit is not None:
                self.set_pagination_limit(limit)
            if "maximumLimit" in use_pagination:
                self.set_maximum_pagination_limit(use_pagination["maximumLimit"])
            if "limit" in use_pagination:
                self._limit_frozen = True
            self._use_pagination = True
        else:
            self._use_pagination = bool(use_pagination)

    def is_paginated(self) -> bool:
        return self._use_pagination

    def set_pagination_limit(self, limit: int) -> None:
        if self._limit_frozen:
            log.debug(f"{self.operation_name}: pagination limit was set explicitly, ignoring new default {limit}")
            return
        self._limit = _validate_limit("Pagination limit", limit)

    def get_pagination_limit(self) -> int:
        return min(self._limit, self._maximum_limit)

    def set_maximum_pagination_limit(self, limit: int) -> None:
        self._maximum_limit = _validate_limit("Maximum pagination limit", limit)

    def get_maximum_pagination_limit(self) -> int:
        return self._maximum_limit

    def add_sortable_fields(self, fields: Iterable[str]) -> None:
        for field in fields:
            if field not in self._sortable_fields:
                self._sortable_fields.append(field)

    def get_sortable_fields(self) -> list[str]:
        return list(self._sortable_fields)

    def get_sort_attribute(self, field: str) -> str:
        """Name of the value the items are sorted on for a sortable field."""
        return field

    def apply_config(self, config: Mapping[str, Any]) -> None:
        super().apply_config(config)
        if "sortableFields" in config:
            sortable_fields = config["sortableFields"]
            if not isinstance(sortable_fields, list | tuple):
                raise ConfigurationError(f"{self.operation_name}: sortableFields must be an array")
            self.add_sortable_fields(sortable_fields)
        if "paginate" in config:
            paginate = config["paginate"]
            if not isinstance(paginate, bool | Mapping):
                raise ConfigurationError(f"{self.operation_name}: paginate must be a boolean or a mapping")
            self.set_use_pagination(paginate)

    def build_sort_argument(self) -> GraphQLArgument | None:
        if not self._sortable_fields:
            return None
        field_enum = GraphQLEnumType(
            f"{self.operation_name}SortFieldType",
            {field: GraphQLEnumValue(self.get_sort_attribute(field)) for field in self._sortable_fields},
        )
        sort_input = GraphQLInputObjectType(
            f"{self.operation_name}SortInputType",
            lambda: {
                "field": GraphQLInputField(GraphQLNonNull(field_enum)),
                "direction": GraphQLInputField(SORT_DIRECTION_TYPE, default_value=SORT_ASC),
            },
        )
        return GraphQLArgument(GraphQLList(GraphQLNonNull(sort_input)), description="Fields to sort the results by")

    def build_connection(self, manager: SchemaManager) -> Connection:
        return Connection(
            name=self.operation_name,
            node_type=lambda: self.get_type(manager),
            limit=self.get_pagination_limit(),
            maximum_limit=self.get_maximum_pagination_limit(),
        )

    def scaffold(self, manager: SchemaManager) -> Scaffold:
        args = self.build_args(manager)
        sort_argument = self.build_sort_argument()
        if sort_argument is not None:
            args["sortBy"] = sort_argument

        connection = self.build_connection(manager) if self._use_pagination else None
        if connection is not None:
            args.update(connection.args())
            result_type: Any = connection.to_type()
        else:
            result_type = GraphQLList(self.get_type(manager))

        fetch = self.snapshot_fetch()
        checker = self.get_permission_checker()
        operation_name = self.operation_name

        def resolve(parent: Any, args: dict[str, Any], context: Any, info: GraphQLResolveInfo | None) -> Any:
            results = to_record_list(fetch(parent, args, context, info))
            sort_by = args.get("sortBy")
            if sort_by:
                results = results.sort_by((order["field"], order.get("direction") or SORT_ASC) for order in sort_by)
            if not checker.check_permission(context, results):
                log.debug(f"{operation_name}: permission denied, returning an empty result")
                return empty_connection() if connection is not None else RecordList()
            if connection is not None:
                return connection.resolve(results, args)
            return results

        return Scaffold(
            name=self.operation_name,
            type=result_type,
            args=args,
            resolve=resolve,
            description=self.description,
        )



"""Query and mutation scaffolders bound to a record class and a record store."""

from collections.abc import Iterable
from typing import Any

from graphql import (
    GraphQLArgument,
    GraphQLID,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLResolveInfo,
)

from recordql import log
from recordql.records.fields import FieldSpec, build_input_field
from recordql.records.model import RecordModel
from recordql.records.record import RecordList
from recordql.records.store import RecordStore
from recordql.scaffolding.item_query import ItemQueryScaffolder
from recordql.scaffolding.list_query import ListQueryScaffolder
from recordql.scaffolding.mutation import MutationScaffolder
from recordql.scaffolding.permissions import RecordPermissionChecker
from recordql.scaffolding.scaffold import ResolveFunction, Scaffold
from recordql.schema.manager import SchemaManager

# Managed by the store, never accepted as mutation input
READ_ONLY_FIELDS = {"id", "created", "last_edited"}
PAGINATION_ARGS = {"limit", "offset", "after", "sortBy"}


def record_list_fetcher(model: RecordModel, store: RecordStore) -> ResolveFunction:
    """Fetch the records of ``model`` the caller can view.

    Any argument named after one of the model's fields filters the records on that field.
    """

    def fetch(parent: Any, args: dict[str, Any], context: Any, info: GraphQLResolveInfo | None) -> RecordList:
        filters: dict[str, Any] = {}
        for name, value in args.items():
            spec = model.get_field(name)
            if name in PAGINATION_ARGS or spec is None or value is None:
                continue
            filters[spec.name] = value
        records = store.find(model.record_class, **filters)
        return records.filter_by_callback(lambda record: record.can_view(context))

    return fetch


def record_item_fetcher(model: RecordModel, store: RecordStore) -> ResolveFunction:
    def fetch(parent: Any, args: dict[str, Any], context: Any, info: GraphQLResolveInfo | None) -> Any:
        return store.get_by_id(model.record_class, args["id"])

    return fetch


def build_record_input_type(
    manager: SchemaManager, model: RecordModel, fields: list[FieldSpec], for_update: bool = False
) -> GraphQLInputObjectType:
    """Build the input object accepted by create (or update) mutations of ``model``.

    Update inputs require the ``id`` of the record and make every other field optional.
    """

    def input_fields() -> dict[str, GraphQLInputField]:
        result: dict[str, GraphQLInputField] = {}
        if for_update:
            result["id"] = GraphQLInputField(GraphQLNonNull(GraphQLID))
        for spec in fields:
            if spec.name in READ_ONLY_FIELDS:
                continue
            input_field = build_input_field(manager, model.type_name, spec, force_nullable=for_update)
            if input_field is not None:
                result[spec.graphql_name] = input_field
        return result

    suffix = "UpdateInputType" if for_update else "CreateInputType"
    return GraphQLInputObjectType(f"{model.type_name}{suffix}", input_fields)


class RecordListQueryScaffolder(ListQueryScaffolder):
    """``read<Plural>``: lists the records of a model."""

    def __init__(self, model: RecordModel, store: RecordStore, operation_name: str | None = None) -> None:
        super().__init__(
            operation_name or f"read{model.plural_name}",
            model.type_name,
            resolver=record_list_fetcher(model, store),
        )
        self.model = model

    def add_sortable_fields(self, fields: Iterable[str]) -> None:
        fields = list(fields)
        for field in fields:
            self.model.require_field(field)
        super().add_sortable_fields(self.model.require_field(field).graphql_name for field in fields)

    def get_sort_attribute(self, field: str) -> str:
        return self.model.require_field(field).name


class RecordItemQueryScaffolder(ItemQueryScaffolder):
    """``read<Type>One``: a single record by id."""

    def __init__(self, model: RecordModel, store: RecordStore, operation_name: str | None = None) -> None:
        super().__init__(
            operation_name or f"read{model.type_name}One",
            model.type_name,
            resolver=record_item_fetcher(model, store),
        )
        self.model = model
        self.add_args({"id": "ID!"})
        self.set_permission_checker(RecordPermissionChecker("view"))


class RecordMutationScaffolder(MutationScaffolder):
    capability = "edit"
    prefix = ""

    def __init__(
        self,
        model: RecordModel,
        store: RecordStore,
        operation_name: str | None = None,
        fields: list[FieldSpec] | None = None,
    ) -> None:
        super().__init__(operation_name or f"{self.prefix}{model.type_name}", model.type_name)
        self.model = model
        self.store = store
        self.fields = fields if fields is not None else list(model.fields.values())
        self.set_permission_checker(RecordPermissionChecker(self.capability))


class CreateRecordMutationScaffolder(RecordMutationScaffolder):
    capability = "create"
    prefix = "create"

    def scaffold(self, manager: SchemaManager) -> Scaffold:
        args = self.build_args(manager)
        args["input"] = GraphQLArgument(GraphQLNonNull(build_record_input_type(manager, self.model, self.fields)))
        checker = self.get_permission_checker()
        record_class = self.model.record_class
        store = self.store
        operation_name = self.operation_name

        def resolve(parent: Any, args: dict[str, Any], context: Any, info: GraphQLResolveInfo | None) -> Any:
            data = dict(args["input"])
            pending = record_class.model_validate(data)
            if not checker.check_permission(context, pending):
                log.debug(f"{operation_name}: permission denied, nothing created")
                return None
            return store.create(record_class, data)

        return Scaffold(
            name=self.operation_name,
            type=self.get_type(manager),
            args=args,
            resolve=resolve,
            description=self.description,
        )


class UpdateRecordMutationScaffolder(RecordMutationScaffolder):
    capability = "edit"
    prefix = "update"

    def scaffold(self, manager: SchemaManager) -> Scaffold:
        input_type = build_record_input_type(manager, self.model, self.fields, for_update=True)
        args = self.build_args(manager)
        args["input"] = GraphQLArgument(GraphQLNonNull(input_type))
        checker = self.get_permission_checker()
        record_class = self.model.record_class
        store = self.store
        operation_name = self.operation_name

        def resolve(parent: Any, args: dict[str, Any], context: Any, info: GraphQLResolveInfo | None) -> Any:
            data = dict(args["input"])
            record = store.get_by_id(record_class, data.pop("id"))
            if record is None:
                return None
            if not checker.check_permission(context, record):
                log.debug(f"{operation_name}: permission denied, record {record.id} left unchanged")
                return None
            return store.update(record, data)

        return Scaffold(
            name=self.operation_name,
            type=self.get_type(manager),
            args=args,
            resolve=resolve,
            description=self.description,
        )


class DeleteRecordMutationScaffolder(RecordMutationScaffolder):
    capability = "delete"
    prefix = "delete"

    def scaffold(self, manager: SchemaManager) -> Scaffold:
        args = self.build_args(manager)
        args["ids"] = GraphQLArgument(GraphQLNonNull(GraphQLList(GraphQLNonNull(GraphQLID))))
        checker = self.get_permission_checker()
        record_class = self.model.record_class
        store = self.store
        operation_name = self.operation_name

        def resolve(parent: Any, args: dict[str, Any], context: Any, info: GraphQLResolveInfo | None) -> Any:
            # Repeated ids refer to the same record and are deleted once
            found: dict[int, Any] = {}
            for record_id in args["ids"]:
                record = store.get_by_id(record_class, record_id)
                if record is not None:
                    found.setdefault(record.id, record)
            records = RecordList(found.values())
            if not checker.check_permission(context, records):
                log.debug(f"{operation_name}: permission denied, nothing deleted")
                return None
            for record in records:
                store.delete(record)
            return [record.id for record in records]

        return Scaffold(
            name=self.operation_name,
            type=GraphQLList(GraphQLID),
            args=args,
            resolve=resolve,
            description=self.description,
        )

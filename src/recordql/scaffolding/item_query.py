"""Queries returning a single item."""

from typing import Any

from graphql import GraphQLResolveInfo

from recordql import log
from recordql.scaffolding.operation import QueryScaffolder
from recordql.scaffolding.scaffold import Scaffold
from recordql.schema.manager import SchemaManager


class ItemQueryScaffolder(QueryScaffolder):
    """Builds a query resolving to one ``type_name`` item, or ``null`` when absent or not permitted."""

    def scaffold(self, manager: SchemaManager) -> Scaffold:
        fetch = self.snapshot_fetch()
        checker = self.get_permission_checker()
        operation_name = self.operation_name

        def resolve(parent: Any, args: dict[str, Any], context: Any, info: GraphQLResolveInfo | None) -> Any:
            item = fetch(parent, args, context, info)
            if item is None:
                return None
            if not checker.check_permission(context, item):
                log.debug(f"{operation_name}: permission denied, returning null")
                return None
            return item

        return Scaffold(
            name=self.operation_name,
            type=self.get_type(manager),
            args=self.build_args(manager),
            resolve=resolve,
            description=self.description,
        )

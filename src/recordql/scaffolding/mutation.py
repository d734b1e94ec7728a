"""Mutations wrapping a custom resolver."""

from typing import Any

from graphql import GraphQLList, GraphQLResolveInfo

from recordql import log
from recordql.scaffolding.operation import OperationScaffolder
from recordql.scaffolding.scaffold import ResolveFunction, Scaffold
from recordql.schema.manager import SchemaManager


class MutationScaffolder(OperationScaffolder):
    """Builds a mutation whose result is only disclosed when the permission checker allows it.

    Args:
        many: Whether the mutation returns a list of ``type_name`` items
    """

    def __init__(
        self,
        operation_name: str,
        type_name: str,
        resolver: ResolveFunction | None = None,
        description: str | None = None,
        many: bool = False,
    ) -> None:
        super().__init__(operation_name, type_name, resolver, description)
        self.many = many

    def scaffold(self, manager: SchemaManager) -> Scaffold:
        fetch = self.snapshot_fetch()
        checker = self.get_permission_checker()
        operation_name = self.operation_name

        def resolve(parent: Any, args: dict[str, Any], context: Any, info: GraphQLResolveInfo | None) -> Any:
            result = fetch(parent, args, context, info)
            if not checker.check_permission(context, result):
                log.debug(f"{operation_name}: permission denied, returning null")
                return None
            return result

        result_type: Any = self.get_type(manager)
        if self.many:
            result_type = GraphQLList(result_type)
        return Scaffold(
            name=self.operation_name,
            type=result_type,
            args=self.build_args(manager),
            resolve=resolve,
            description=self.description,
        )

    def add_to_manager(self, manager: SchemaManager) -> None:
        manager.add_mutation(lambda: self.scaffold(manager), self.operation_name)

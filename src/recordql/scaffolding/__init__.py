from recordql.scaffolding.connection import Connection
from recordql.scaffolding.item_query import ItemQueryScaffolder
from recordql.scaffolding.list_query import ListQueryScaffolder
from recordql.scaffolding.mutation import MutationScaffolder
from recordql.scaffolding.permissions import (
    AllowAll,
    CallbackPermissionChecker,
    DenyAll,
    PermissionChecker,
    RecordPermissionChecker,
)
from recordql.scaffolding.record_type import RecordTypeScaffolder
from recordql.scaffolding.scaffold import Scaffold
from recordql.scaffolding.schema_scaffolder import SchemaScaffolder, build_manager

__all__ = [
    "AllowAll",
    "CallbackPermissionChecker",
    "Connection",
    "DenyAll",
    "ItemQueryScaffolder",
    "ListQueryScaffolder",
    "MutationScaffolder",
    "PermissionChecker",
    "RecordPermissionChecker",
    "RecordTypeScaffolder",
    "Scaffold",
    "SchemaScaffolder",
    "build_manager",
]

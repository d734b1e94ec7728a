from recordql.schema.interface import RECORD_INTERFACE_NAME, build_record_interface, ensure_record_interface
from recordql.schema.manager import SchemaManager

__all__ = ["RECORD_INTERFACE_NAME", "SchemaManager", "build_record_interface", "ensure_record_interface"]

class RecordQLError(Exception):
    """Base class for all errors raised by recordql."""


class ConfigurationError(RecordQLError, ValueError):
    """Raised at schema build time when scaffolding configuration is invalid."""


class SchemaValidationError(RecordQLError):
    """Raised when the assembled schema is not a valid GraphQL schema."""

    def __init__(self, messages: list[str]) -> None:
        self.messages = messages
        super().__init__("Schema validation failed:\n" + "\n".join(f"  - {m}" for m in messages))


class UnresolvedTypeError(RecordQLError):
    """Describes a runtime value whose class was never mapped to a schema type.

    This error is reported, not raised: the execution engine surfaces the
    unresolved abstract type to the API caller as a field error.
    """

    def __init__(self, class_name: str, abstract_type: str) -> None:
        self.class_name = class_name
        self.abstract_type = abstract_type
        super().__init__(f"No schema type registered for class '{class_name}' implementing '{abstract_type}'")

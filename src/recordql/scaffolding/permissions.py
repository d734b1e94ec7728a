"""Permission gates evaluated by resolvers before results are disclosed."""

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from recordql import log
from recordql.records.record import Record


@runtime_checkable
class PermissionChecker(Protocol):
    """Decides whether a resolved result may be returned to the caller.

    Checkers must not modify ``result``.
    """

    def check_permission(self, context: Any, result: Any) -> bool: ...


class AllowAll:
    def check_permission(self, context: Any, result: Any) -> bool:
        return True


class DenyAll:
    def check_permission(self, context: Any, result: Any) -> bool:
        return False


class CallbackPermissionChecker:
    """Adapts a plain ``(context, result) -> bool`` callable."""

    def __init__(self, callback: Callable[[Any, Any], bool]) -> None:
        self.callback = callback

    def check_permission(self, context: Any, result: Any) -> bool:
        return bool(self.callback(context, result))


class RecordPermissionChecker:
    """Asks every record in the result for the ``can_<capability>`` permission.

    Items that do not define the hook, such as plain mappings, are permitted.
    A single record and a collection of records are both accepted.
    """

    def __init__(self, capability: str = "view") -> None:
        self.capability = capability

    def check_permission(self, context: Any, result: Any) -> bool:
        if result is None:
            return True
        items = result if isinstance(result, Iterable) and not isinstance(result, Mapping | Record | str) else [result]
        method_name = f"can_{self.capability}"
        for item in items:
            hook = getattr(item, method_name, None)
            if hook is not None and not hook(context):
                log.debug(f"Permission '{self.capability}' denied for {type(item).__name__} {getattr(item, 'id', '')}")
                return False
        return True


ALLOW_ALL = AllowAll()

"""Configuration provider types.

Defines the data structures of the provider callback system:
- ProviderMethod: the closed set of lifecycle callbacks
- ProviderContext: runtime state passed to every callback
- ConfigurationProvider: base class providers extend
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fluxtree.core.types import Record


class ProviderMethod(Enum):
    """Lifecycle callbacks a provider can react to."""

    PRE_PROCESS_COMMAND = "pre_process_command"
    POST_PROCESS_COMMAND = "post_process_command"
    PRE_PROCESS_RECORD = "pre_process_record"
    POST_PROCESS_RECORD = "post_process_record"
    POST_PROCESS_DATABASE_OPERATION = "post_process_database_operation"


@dataclass
class ProviderContext:
    """Runtime context passed to every provider callback.

    Attributes:
        table: Table being processed
        id: Resolved uid, or the NEW token when none was assigned yet
        record: The record; providers may mutate it in place
        arguments: Callback-specific values (command, status, relative_to, ...);
            providers may mutate them in place
        operation: The running OperationContext
    """

    table: str
    id: Any
    record: Record
    arguments: dict[str, Any] = field(default_factory=dict)
    operation: Any = None  # OperationContext (avoids circular import)


class ConfigurationProvider:
    """Base class for providers attached to a table and, optionally, a record type.

    Subclasses override the callbacks they care about; every callback
    defaults to a no-op.

    Attributes:
        table: Table the provider serves
        record_type: Value of ``type_field`` the provider is limited to,
            None to match every record of the table
        type_field: Record field holding the record type
        priority: Higher priorities run first
    """

    table: str = ""
    record_type: str | None = None
    type_field: str = "CType"
    priority: int = 0

    @property
    def name(self) -> str:
        return type(self).__name__

    def matches(self, table: str, record: Record | None = None) -> bool:
        if table != self.table:
            return False
        if self.record_type is None or record is None:
            return True
        return str(record.get(self.type_field, "")) == self.record_type

    def invoke(self, method: ProviderMethod, context: ProviderContext) -> None:
        if method is ProviderMethod.PRE_PROCESS_COMMAND:
            self.pre_process_command(context)
        elif method is ProviderMethod.POST_PROCESS_COMMAND:
            self.post_process_command(context)
        elif method is ProviderMethod.PRE_PROCESS_RECORD:
            self.pre_process_record(context)
        elif method is ProviderMethod.POST_PROCESS_RECORD:
            self.post_process_record(context)
        elif method is ProviderMethod.POST_PROCESS_DATABASE_OPERATION:
            self.post_process_database_operation(context)

    def pre_process_command(self, context: ProviderContext) -> None:
        pass

    def post_process_command(self, context: ProviderContext) -> None:
        pass

    def pre_process_record(self, context: ProviderContext) -> None:
        pass

    def post_process_record(self, context: ProviderContext) -> None:
        pass

    def post_process_database_operation(self, context: ProviderContext) -> None:
        pass

    def clear_cache_command(self, command: Any) -> None:
        pass

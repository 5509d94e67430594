"""Narrow view of the DataHandler state a hook is allowed to touch.

The host engine passes its whole mutable operation object into every hook.
The tree engine only needs a handful of capabilities from it, collected
here so hooks and tests can build one explicitly:

- OperationContext: pending command map, NEW-id substitutions, copy
  mapping, active workspace, flash messages and provider errors
- RequestData: query parameters and raw body of the current request
- FlashMessageQueue: user-facing messages produced while processing
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fluxtree.core.types import CONTENT_TABLE, lookup, to_int

logger = logging.getLogger(__name__)


class Severity(Enum):
    NOTICE = "notice"
    INFO = "info"
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class FlashMessage:
    message: str
    title: str = ""
    severity: Severity = Severity.INFO


class FlashMessageQueue:
    """Messages to show the editor once the request completes."""

    def __init__(self) -> None:
        self._messages: list[FlashMessage] = []

    def enqueue(self, message: FlashMessage) -> None:
        self._messages.append(message)

    @property
    def messages(self) -> list[FlashMessage]:
        return list(self._messages)

    def errors(self) -> list[FlashMessage]:
        return [m for m in self._messages if m.severity == Severity.ERROR]

    def __len__(self) -> int:
        return len(self._messages)


@dataclass(frozen=True)
class ClipboardCommand:
    """A ``CB[paste]`` command targeting a table.

    Attributes:
        table: Table named before the ``|`` in the paste value
        parameters: The ``|``-separated paste value, table first
        properties: Field overrides from ``CB[update]``
    """

    table: str
    parameters: list[str]
    properties: dict[str, Any]


@dataclass
class RequestData:
    """Query parameters and raw body of the request driving the DataHandler."""

    query: dict[str, Any] = field(default_factory=dict)
    body: str = ""

    def clipboard_command(self, table: str = CONTENT_TABLE) -> ClipboardCommand | None:
        """Paste command for ``table`` from ``CB``, or None."""
        clipboard = self.query.get("CB") or {}
        if not isinstance(clipboard, dict):
            return None
        paste = clipboard.get("paste")
        if not paste or not str(paste).startswith(f"{table}|"):
            return None
        parameters = [part.strip() for part in str(paste).split("|")]
        properties = clipboard.get("update") or {}
        if not isinstance(properties, dict):
            properties = {}
        return ClipboardCommand(table=table, parameters=parameters, properties=dict(properties))

    def datamap_value(self, table: str, uid: Any, field_name: str) -> Any:
        """Value of ``data[table][uid][field]`` from the query, or None."""
        data = self.query.get("data") or {}
        if not isinstance(data, dict):
            return None
        row = lookup(data.get(table) or {}, uid)
        if not isinstance(row, dict):
            return None
        return row.get(field_name)

    def move_data(self) -> dict[str, Any] | None:
        """Payload of a ``moveContentElement`` request, or None."""
        if not self.body:
            return None
        try:
            request = json.loads(self.body)
        except ValueError:
            logger.debug("Request body is not JSON, no move data")
            return None
        if not isinstance(request, dict) or "method" not in request or "data" not in request:
            return None
        if request["method"] != "moveContentElement":
            return None
        data = request["data"]
        return data if isinstance(data, dict) else {"target": data}


@dataclass(frozen=True)
class ProviderFailure:
    """A provider callback that raised; recorded, never fatal."""

    provider: str
    method: str
    message: str


@dataclass
class OperationContext:
    """Mutable operation state shared by all hooks of one DataHandler run.

    Attributes:
        workspace: Active draft workspace id, 0 for the live workspace
        cmdmap: Pending commands, ``{table: {id: {command: value}}}``
        substituted_ids: NEW-token to real uid assignments of this batch
        copy_mapping: ``{table: {original uid: copy uid}}`` of this batch
        request: The request that started the run
        messages: Flash messages for the editor
        errors: Provider failures recorded during dispatch
    """

    workspace: int = 0
    cmdmap: dict[str, dict[Any, dict[str, Any]]] = field(default_factory=dict)
    substituted_ids: dict[str, int] = field(default_factory=dict)
    copy_mapping: dict[str, dict[Any, Any]] = field(default_factory=dict)
    request: RequestData = field(default_factory=RequestData)
    messages: FlashMessageQueue = field(default_factory=FlashMessageQueue)
    errors: list[ProviderFailure] = field(default_factory=list)

    @property
    def in_draft_workspace(self) -> bool:
        return self.workspace > 0

    def remove_command(self, table: str, id: Any) -> None:
        """Drop the pending command so the host does not also process it."""
        commands = self.cmdmap.get(table)
        if not commands:
            return
        for key in (id, str(id), to_int(id, default=-1)):
            commands.pop(key, None)

    def substitute_id(self, token: str) -> int | None:
        uid = self.substituted_ids.get(token)
        return to_int(uid) if uid else None

    def copy_of(self, table: str, id: Any) -> int | None:
        uid = lookup(self.copy_mapping.get(table) or {}, id)
        return to_int(uid) if uid else None

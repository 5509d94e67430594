"""DataHandler hook entry points.

Translates the host engine's lifecycle hook signatures into calls on the
move coordinator, the content service and the provider dispatcher.

Clipboard pastes do not trigger the host's move hooks, and no other hook
sees copies, so the cmdmap hooks handle pastes themselves: the pre-process
hook validates a pasted move, the post-process hook performs it. Drag and
drop moves arrive through the two ``move_record_*`` hooks instead.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from fluxtree.content.coordinator import MoveCoordinator
from fluxtree.content.service import ContentService
from fluxtree.content.targets import MoveTarget
from fluxtree.core.types import CONTENT_TABLE, Record, to_int
from fluxtree.datahandler.context import OperationContext
from fluxtree.persistence.adapter import RecordStore
from fluxtree.providers.cache import CacheSweeper, CacheSweepState
from fluxtree.providers.dispatcher import ProviderDispatcher
from fluxtree.providers.registry import ProviderRegistry
from fluxtree.providers.types import ProviderMethod
from fluxtree.versioning.resolver import VersionResolver

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Values a cmdmap hook hands back to the host.

    Attributes:
        command: The command to execute, None when it was cancelled
        relative_to: Possibly provider-adjusted target value
        record: The record after providers ran
    """

    command: str | None
    relative_to: Any
    record: Record

    @property
    def cancelled(self) -> bool:
        return self.command is None


class TceMainHooks:
    """Hook object registered with the DataHandler.

    Args:
        store: Record store of the host
        tables: Every table known to the host, for the cache sweep
        cache_state: Sweep state shared by all hook objects of a unit of work
        registry: Provider registry to resolve providers from
    """

    def __init__(
        self,
        store: RecordStore,
        tables: Iterable[str] = (CONTENT_TABLE,),
        cache_state: CacheSweepState | None = None,
        registry: type[ProviderRegistry] = ProviderRegistry,
    ):
        self.store = store
        self.tables = list(tables)
        self.resolver = VersionResolver(store)
        self.content = ContentService(store)
        self.coordinator = MoveCoordinator(store, resolver=self.resolver, content=self.content)
        self.dispatcher = ProviderDispatcher(store, registry)
        self.sweeper = CacheSweeper(cache_state, registry)

    # ------------------------------------------------------------------
    # cmdmap
    # ------------------------------------------------------------------

    def process_cmdmap_pre_process(
        self,
        command: str,
        table: str,
        id: Any,
        relative_to: Any,
        context: OperationContext,
    ) -> CommandResult:
        record = self.resolver.resolve_operative_record(table, to_int(id), context.workspace)
        clipboard = context.request.clipboard_command(table)

        # A copy does not exist before the command runs; only moves can be checked here
        if table == CONTENT_TABLE and clipboard and command == "move":
            target = MoveTarget.from_relative_to(relative_to, clipboard.parameters)
            outcome = self.coordinator.validate(
                table, id, target, context, properties=clipboard.properties, record=record
            )
            if outcome.rejected:
                return CommandResult(command=None, relative_to=relative_to, record=outcome.record)
            record.update(clipboard.properties)

        arguments = {"command": command, "id": id, "relative_to": relative_to}
        record = self.dispatcher.dispatch(
            ProviderMethod.PRE_PROCESS_COMMAND, table, id, record, arguments, context
        )
        return CommandResult(
            command=arguments["command"], relative_to=arguments["relative_to"], record=record
        )

    def process_cmdmap_post_process(
        self,
        command: str,
        table: str,
        id: Any,
        relative_to: Any,
        context: OperationContext,
    ) -> CommandResult:
        record = self.resolver.resolve_operative_record(table, to_int(id), context.workspace)

        if table == CONTENT_TABLE:
            if command == "localize":
                self.content.fix_position_in_localization(table, id, relative_to, record, context)

            clipboard = context.request.clipboard_command(table)
            if clipboard and command in ("copy", "move"):
                operative_id: Any = id
                if command == "copy":
                    # The hook receives the original; the paste acts on the new copy
                    operative_id = context.copy_of(table, id)
                    if not operative_id:
                        logger.warning("No copy of %s:%s found in this run", table, id)
                if operative_id:
                    record = self.resolver.resolve_operative_record(
                        table, operative_id, context.workspace
                    )
                    target = MoveTarget.from_relative_to(relative_to, clipboard.parameters)
                    outcome = self.coordinator.move(
                        table,
                        operative_id,
                        target,
                        context,
                        properties=clipboard.properties,
                        record=record,
                    )
                    if outcome.rejected:
                        return CommandResult(
                            command=None, relative_to=relative_to, record=outcome.record
                        )
                    record = outcome.record

        arguments = {"command": command, "id": id, "relative_to": relative_to}
        record = self.dispatcher.dispatch(
            ProviderMethod.POST_PROCESS_COMMAND, table, id, record, arguments, context
        )
        return CommandResult(
            command=arguments["command"], relative_to=arguments["relative_to"], record=record
        )

    # ------------------------------------------------------------------
    # datamap
    # ------------------------------------------------------------------

    def process_datamap_pre_process_field_array(
        self,
        incoming: Record,
        table: str,
        id: Any,
        context: OperationContext,
    ) -> Record:
        if table == CONTENT_TABLE:
            self.content.affect_record_by_request_parameters(incoming, context.request.query)

        result = self.dispatcher.dispatch(
            ProviderMethod.PRE_PROCESS_RECORD, table, id, incoming, {"id": id}, context
        )
        return _write_back(incoming, result)

    def process_datamap_post_process_field_array(
        self,
        status: str,
        table: str,
        id: Any,
        fields: Record,
        context: OperationContext,
    ) -> Record:
        result = self.dispatcher.dispatch(
            ProviderMethod.POST_PROCESS_RECORD,
            table,
            id,
            fields,
            {"status": status, "id": id},
            context,
        )
        return _write_back(fields, result)

    def process_datamap_after_database_operations(
        self,
        status: str,
        table: str,
        id: Any,
        fields: Record,
        context: OperationContext,
    ) -> Record:
        if status == "new" and table == CONTENT_TABLE:
            self.content.initialize_record(table, id, fields, context)

        result = self.dispatcher.dispatch(
            ProviderMethod.POST_PROCESS_DATABASE_OPERATION,
            table,
            id,
            fields,
            {"status": status, "id": id},
            context,
        )
        return _write_back(fields, result)

    # ------------------------------------------------------------------
    # move hooks
    # ------------------------------------------------------------------

    def move_record_first_element_post_process(
        self,
        table: str,
        uid: int,
        dest_pid: int,
        move_rec: Record,
        row: Record,
        context: OperationContext,
    ) -> None:
        """Record moved to the first position of a page column.

        The host fires this hook for every child of the moved record too.
        Only the record whose new column the request names is processed:
        the column sits in the request's ``data`` indexed by the original
        uid, which neither ``row`` nor ``move_rec`` carry when ``uid`` is a
        placeholder.
        """
        if table != CONTENT_TABLE:
            return

        original_uid = self.resolver.resolve_original_id(table, uid)
        column = context.request.datamap_value(table, original_uid, "colPos")
        if column is None:
            return

        record = dict(row)
        record["uid"] = uid
        self.coordinator.move(table, uid, MoveTarget.column(to_int(column)), context, record=record)

    def move_record_after_another_element_post_process(
        self,
        table: str,
        uid: int,
        dest_pid: int,
        orig_dest_pid: int,
        move_rec: Record,
        update_fields: Record,
        context: OperationContext,
    ) -> Record:
        """Record moved to a position after another element."""
        if table != CONTENT_TABLE:
            return update_fields

        move_data = context.request.move_data() or {}
        parameters = [table, move_data.get("target")] if move_data.get("target") else []

        update_fields["uid"] = uid
        target = MoveTarget.from_relative_to(orig_dest_pid, parameters)
        outcome = self.coordinator.move(table, uid, target, context, record=update_fields)
        if not outcome.rejected:
            update_fields.update(outcome.record)
        return update_fields

    # ------------------------------------------------------------------
    # caches
    # ------------------------------------------------------------------

    def clear_cache_command(self, command: Any) -> None:
        self.sweeper.sweep(self.tables, command)


def _write_back(target: Record, result: Record) -> Record:
    """Make the host's field bundle reflect what providers returned."""
    if result is not target:
        target.clear()
        target.update(result)
    return target

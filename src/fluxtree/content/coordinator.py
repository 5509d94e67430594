"""Orchestrates container-aware moves, keeping live rows and draft versions in step."""

import logging
from dataclasses import dataclass
from typing import Any

from fluxtree.content.service import ContentService
from fluxtree.content.targets import MoveTarget
from fluxtree.core.types import PARENT_FIELD, POSITION_FIELDS, Record, to_int
from fluxtree.datahandler.context import FlashMessage, OperationContext, Severity
from fluxtree.persistence.adapter import RecordStore
from fluxtree.tree.guard import TreeGuard
from fluxtree.versioning.resolver import VersionResolver

logger = logging.getLogger(__name__)


@dataclass
class MoveOutcome:
    """Result of a coordinated move.

    Attributes:
        record: The moved (or proposed) operative row
        version: The moved workspace version, None when there is none
        rejected: True when the move would have created a cycle
    """

    record: Record
    version: Record | None = None
    rejected: bool = False


class MoveCoordinator:
    def __init__(
        self,
        store: RecordStore,
        resolver: VersionResolver | None = None,
        guard: TreeGuard | None = None,
        content: ContentService | None = None,
    ):
        self.store = store
        self.resolver = resolver or VersionResolver(store)
        self.guard = guard or TreeGuard(store)
        self.content = content or ContentService(store)

    def validate(
        self,
        table: str,
        id: Any,
        target: MoveTarget,
        context: OperationContext,
        properties: dict[str, Any] | None = None,
        record: Record | None = None,
    ) -> MoveOutcome:
        """Compute and check a move without persisting anything."""
        record = self._operative(table, id, context, properties, record)
        uid = to_int(record.get("uid"), default=to_int(id))
        original_id = self._original_id(table, record, uid)
        proposed = self.content.move_record(table, record, target, exclude={uid, original_id})
        if self._rejects(table, id, {uid, original_id}, proposed, target, context):
            return MoveOutcome(record=record, rejected=True)
        return MoveOutcome(record=proposed)

    def move(
        self,
        table: str,
        id: Any,
        target: MoveTarget,
        context: OperationContext,
        properties: dict[str, Any] | None = None,
        record: Record | None = None,
    ) -> MoveOutcome:
        """Move a record and its most recent workspace version.

        Args:
            table: Table of the record
            id: Uid the command was issued for
            target: Destination of the move
            context: The running operation; receives the flash message and
                loses its pending command when the move is rejected
            properties: Clipboard field overrides merged before moving
            record: Operative row when the caller already holds it;
                resolved through the VersionResolver otherwise

        Returns:
            MoveOutcome; nothing is persisted when ``rejected`` is True.
        """
        record = self._operative(table, id, context, properties, record)
        uid = to_int(record.get("uid"), default=to_int(id))

        original_id = self._original_id(table, record, uid)
        version = None
        if context.in_draft_workspace:
            version = self.resolver.most_recent_version(table, original_id, context.workspace)
        if version and to_int(version.get("uid")) == uid:
            version = None

        exclude = {uid, original_id}
        if version:
            exclude.add(to_int(version.get("uid")))
        pid = to_int(record.get("pid"), default=-1)

        proposed = self.content.move_record(table, record, target, exclude=exclude, pid=pid)
        if self._rejects(table, id, exclude, proposed, target, context):
            return MoveOutcome(record=record, rejected=True)

        self._persist(table, uid, proposed, properties)

        moved_version = None
        if version:
            # Clipboard overrides reach the draft version too
            version = {**version, **(properties or {})}
            moved_version = self.content.move_record(
                table, version, target, exclude=exclude, pid=pid
            )
            self._persist(table, to_int(version["uid"]), moved_version, properties)
            logger.debug(
                "Synchronized workspace version %s of %s:%d", version["uid"], table, original_id
            )

        return MoveOutcome(record=proposed, version=moved_version)

    def _operative(
        self,
        table: str,
        id: Any,
        context: OperationContext,
        properties: dict[str, Any] | None,
        record: Record | None,
    ) -> Record:
        if record is None:
            record = self.resolver.resolve_operative_record(table, to_int(id), context.workspace)
        else:
            record = dict(record)
        record.update(properties or {})
        return record

    def _original_id(self, table: str, record: Record, uid: int) -> int:
        """Live uid behind ``record``; placeholders carry it in ``t3ver_move_id``."""
        original_id = to_int(record.get("t3ver_move_id"))
        if original_id > 0:
            return original_id
        return self.resolver.resolve_original_id(table, uid)

    def _rejects(
        self,
        table: str,
        id: Any,
        uids: set[int],
        proposed: Record,
        target: MoveTarget,
        context: OperationContext,
    ) -> bool:
        if not target.checks_cycles:
            return False
        # Children reference the live uid, a placeholder has its own; either may close the loop
        parent_id = to_int(proposed.get(PARENT_FIELD))
        if not any(
            self.guard.would_create_cycle(table, {"uid": uid}, parent_id) for uid in sorted(uids)
        ):
            return False

        logger.info(
            "Rejected move of %s:%s below %s, it would contain itself",
            table,
            id,
            proposed.get(PARENT_FIELD),
        )
        context.messages.enqueue(
            FlashMessage(
                message=(
                    f"Attempt to move record {table}:{id} into a column of a child "
                    "of itself. Move aborted."
                ),
                title="Error during move",
                severity=Severity.ERROR,
            )
        )
        context.remove_command(table, id)
        return True

    def _persist(
        self,
        table: str,
        uid: int,
        record: Record,
        properties: dict[str, Any] | None,
    ) -> None:
        names = list(POSITION_FIELDS) + [n for n in (properties or {}) if n not in POSITION_FIELDS]
        self.store.update(table, uid, {n: record[n] for n in names if n in record})

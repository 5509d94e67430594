"""Position arithmetic and bookkeeping for nested content elements.

Nothing in ``move_record`` touches the store for writing: it returns the
record as it would look after the move so that callers can validate the
result before anything is persisted. The remaining operations keep
localized and newly created records attached to the right container.
"""

import logging
from typing import Any, Iterable

from fluxtree.content.targets import DropZone, MoveTarget, TargetKind
from fluxtree.core.types import (
    COLPOS_FIELD,
    COLPOS_FLUXCONTENT,
    COLUMN_FIELD,
    CONTENT_TABLE,
    PARENT_FIELD,
    SORTING_FIELD,
    Record,
    is_placeholder_token,
    to_int,
)
from fluxtree.datahandler.context import OperationContext
from fluxtree.persistence.adapter import RecordStore

logger = logging.getLogger(__name__)


class ContentService:
    def __init__(self, store: RecordStore):
        self.store = store

    def move_record(
        self,
        table: str,
        record: Record,
        target: MoveTarget,
        exclude: Iterable[int] = (),
        pid: int | None = None,
    ) -> Record:
        """Return a copy of ``record`` with position fields set for ``target``.

        Args:
            table: Table of the record
            record: Row to move; left untouched
            target: Destination
            exclude: Uids that are not siblings when ranking the first position
                (the live row and its versions move together)
            pid: Page of the move, when ``record`` itself does not carry it
        """
        moved = dict(record)
        exclude = {to_int(uid) for uid in exclude} | {to_int(record.get("uid"))}
        if pid is None:
            pid = to_int(record.get("pid"), default=-1)

        if target.kind is TargetKind.IGNORED:
            return moved

        if target.kind is TargetKind.AFTER:
            sibling = self.store.get(
                table,
                target.value,
                fields=("uid", PARENT_FIELD, COLUMN_FIELD, COLPOS_FIELD, SORTING_FIELD),
            )
            if sibling:
                moved[PARENT_FIELD] = to_int(sibling.get(PARENT_FIELD))
                moved[COLUMN_FIELD] = sibling.get(COLUMN_FIELD) or ""
                moved[COLPOS_FIELD] = to_int(sibling.get(COLPOS_FIELD))
                moved[SORTING_FIELD] = to_int(sibling.get(SORTING_FIELD)) + 1
            else:
                logger.warning(
                    "Cannot move %s:%s after missing record %d",
                    table,
                    record.get("uid"),
                    target.value,
                )

        elif target.kind is TargetKind.COLUMN:
            moved[COLPOS_FIELD] = target.value
            moved[PARENT_FIELD] = 0
            moved[COLUMN_FIELD] = ""
            siblings_filter: dict[str, Any] = {COLPOS_FIELD: target.value, PARENT_FIELD: 0}
            if pid >= 0:
                siblings_filter["pid"] = pid
            moved[SORTING_FIELD] = self._first_sorting(table, siblings_filter, exclude)

        elif target.kind is TargetKind.PAGE:
            zone = DropZone.parse(target.parameters[1]) if len(target.parameters) > 1 else None
            if zone:
                moved[COLPOS_FIELD] = zone.column
                if zone.position == "top" and zone.parent_uid > 0:
                    moved[PARENT_FIELD] = zone.parent_uid
                    moved[COLUMN_FIELD] = zone.area
                    moved[SORTING_FIELD] = self._first_sorting(
                        table, {PARENT_FIELD: zone.parent_uid, COLUMN_FIELD: zone.area}, exclude
                    )

        if to_int(moved.get(PARENT_FIELD)) > 0:
            moved[COLPOS_FIELD] = COLPOS_FLUXCONTENT

        return moved

    def _first_sorting(
        self, table: str, siblings_filter: dict[str, Any], exclude: set[int]
    ) -> int:
        """Sorting value placing a record before every current sibling."""
        siblings = self.store.query(
            table, fields=("uid", SORTING_FIELD), filter={**siblings_filter, "deleted": 0}
        )
        values = [
            to_int(row.get(SORTING_FIELD))
            for row in siblings
            if to_int(row.get("uid")) not in exclude
        ]
        if not values:
            return 0
        lowest = min(values)
        halved = lowest // 2
        return halved if halved < lowest else lowest - 1

    def affect_record_by_request_parameters(
        self, incoming: Record, parameters: dict[str, Any]
    ) -> Record:
        """Apply ``overrideVals[tt_content][tx_flux_parent]`` to a record being created."""
        override = ((parameters.get("overrideVals") or {}).get(CONTENT_TABLE) or {})
        if override.get(PARENT_FIELD):
            incoming[PARENT_FIELD] = to_int(override[PARENT_FIELD])
            if incoming[PARENT_FIELD] > 0:
                incoming[COLPOS_FIELD] = COLPOS_FLUXCONTENT
        return incoming

    def initialize_record(
        self, table: str, id: Any, row: Record, context: OperationContext
    ) -> None:
        """Attach a freshly inserted record to its container.

        A translated record points at the translation of its parent when one
        exists; a record with a parent sits in the container colPos.
        """
        uid = context.substitute_id(id) if is_placeholder_token(id) else to_int(id)
        if not uid:
            logger.warning("No uid assigned to new %s record %s", table, id)
            return

        parent = to_int(row.get(PARENT_FIELD))
        if parent <= 0:
            return

        changes: Record = {}
        language = to_int(row.get("sys_language_uid"))
        if language > 0:
            localized_parent = self.store.get_localization(table, parent, language)
            if localized_parent and to_int(localized_parent.get("uid")) != parent:
                changes[PARENT_FIELD] = to_int(localized_parent["uid"])

        if to_int(row.get(COLPOS_FIELD)) != COLPOS_FLUXCONTENT:
            changes[COLPOS_FIELD] = COLPOS_FLUXCONTENT

        if changes:
            self.store.update(table, uid, changes)
            row.update(changes)

    def fix_position_in_localization(
        self,
        table: str,
        id: Any,
        language: Any,
        record: Record,
        context: OperationContext,
    ) -> None:
        """Give the translation created by a ``localize`` command the original's position."""
        localized_uid = context.copy_of(table, id)
        if not localized_uid:
            logger.warning("No localized copy of %s:%s in this run", table, id)
            return

        parent = to_int(record.get(PARENT_FIELD))
        if parent > 0:
            localized_parent = self.store.get_localization(table, parent, to_int(language))
            if localized_parent:
                parent = to_int(localized_parent.get("uid"))

        self.store.update(
            table,
            localized_uid,
            {
                PARENT_FIELD: parent,
                COLUMN_FIELD: record.get(COLUMN_FIELD) or "",
                COLPOS_FIELD: to_int(record.get(COLPOS_FIELD)),
                SORTING_FIELD: to_int(record.get(SORTING_FIELD)),
            },
        )

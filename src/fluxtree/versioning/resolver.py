"""Resolve which physical row an operation acts upon when workspaces are involved."""

from fluxtree.core.types import VERSION_FIELDS, Record, VersionState, to_int
from fluxtree.persistence.adapter import RecordStore


class VersionResolver:
    """Maps a logical record id to the live row, its move placeholder or its draft version.

    Workspace ids are passed per call; 0 means the live workspace, in which
    no placeholders or versions are ever returned.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def resolve_operative_record(self, table: str, id: int, workspace: int = 0) -> Record:
        """Return the row a copy/move operation must act upon.

        Outside a draft workspace this is the live row. Inside one, the move
        placeholder of the record when it has one, since that is the row the
        host persists the move to.
        """
        record = dict(self.store.get(table, id) or {})

        if workspace > 0:
            placeholder = self.store.get_move_placeholder(workspace, table, id)
            if placeholder:
                return dict(placeholder)
            record["uid"] = id
        elif not record:
            record["uid"] = id

        return record

    def most_recent_version(self, table: str, id: int, workspace: int = 0) -> Record | None:
        """Position fields of the workspace version of ``id``, None when there is none."""
        if workspace <= 0:
            return None
        version = self.store.get_workspace_version(workspace, table, id, fields=VERSION_FIELDS)
        return dict(version) if version else None

    def resolve_original_id(self, table: str, id: int) -> int:
        """Return the live uid a move placeholder shadows, or ``id`` itself."""
        row = self.store.get(table, id, fields=("t3ver_move_id", "t3ver_state", "deleted"))
        if (
            row
            and to_int(row.get("t3ver_state")) == VersionState.MOVE_PLACEHOLDER
            and not to_int(row.get("deleted"))
        ):
            return to_int(row.get("t3ver_move_id"), default=id)
        return id

"""RecordStore Protocol: the narrow record access the tree engine relies on."""

from typing import Any, Protocol, Sequence, runtime_checkable

from fluxtree.core.types import Record, VersionState
from fluxtree.metadata.loader import TableConfig


class StoreError(RuntimeError):
    """The record store is unavailable or rejected a statement.

    Fatal for the current command: never retried, never swallowed.
    """


@runtime_checkable
class RecordStore(Protocol):
    """Interface all record stores must implement.

    Matches the public API of SQLiteAdapter. Stores for other databases
    (e.g., PostgreSQL) must conform to this protocol.
    """

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def initialize_table(self, table: TableConfig) -> None: ...

    def insert(self, table: str, data: dict[str, Any]) -> Record: ...

    def get(
        self, table: str, uid: int, fields: Sequence[str] | None = None
    ) -> Record | None: ...

    def update(self, table: str, uid: int, data: dict[str, Any]) -> None: ...

    def query(
        self,
        table: str,
        fields: Sequence[str] | None = None,
        filter: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[Record]: ...

    def count(self, table: str) -> int: ...

    def columns(self, table: str) -> list[str]: ...

    def get_workspace_version(
        self,
        workspace: int,
        table: str,
        uid: int,
        fields: Sequence[str] | None = None,
    ) -> Record | None: ...

    def get_move_placeholder(
        self, workspace: int, table: str, uid: int
    ) -> Record | None: ...

    def get_localization(
        self, table: str, uid: int, language: int
    ) -> Record | None: ...


class VersionLookupMixin:
    """Workspace and localization lookups expressed through ``query``.

    Shared by the SQL adapters; each adapter only has to provide ``query``.
    """

    def _first(
        self,
        table: str,
        filter: dict[str, Any],
        fields: Sequence[str] | None = None,
    ) -> Record | None:
        rows = self.query(table, fields=fields, filter=filter, limit=1)  # type: ignore[attr-defined]
        return rows[0] if rows else None

    def get_workspace_version(
        self,
        workspace: int,
        table: str,
        uid: int,
        fields: Sequence[str] | None = None,
    ) -> Record | None:
        """Version of live record ``uid`` in ``workspace``, or None."""
        return self._first(
            table,
            {"t3ver_oid": uid, "t3ver_wsid": workspace, "deleted": 0},
            fields=fields,
        )

    def get_move_placeholder(
        self, workspace: int, table: str, uid: int
    ) -> Record | None:
        """Move placeholder standing in for live record ``uid`` in ``workspace``."""
        return self._first(
            table,
            {
                "t3ver_move_id": uid,
                "t3ver_state": int(VersionState.MOVE_PLACEHOLDER),
                "t3ver_wsid": workspace,
                "deleted": 0,
            },
        )

    def get_localization(
        self, table: str, uid: int, language: int
    ) -> Record | None:
        """Translation of record ``uid`` into ``language``, or None."""
        return self._first(
            table,
            {"l18n_parent": uid, "sys_language_uid": language, "deleted": 0},
        )

"""Opening a record store the tree engine can work with."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from fluxtree.core.types import CONTENT_TABLE, POSITION_FIELDS
from fluxtree.persistence.adapter import StoreError

if TYPE_CHECKING:
    from fluxtree.metadata.loader import TableConfig
    from fluxtree.persistence.adapter import RecordStore

# Columns the move, version and localization lookups filter or write on
TREE_COLUMNS: dict[str, tuple[str, ...]] = {
    CONTENT_TABLE: (
        "pid",
        "deleted",
        *POSITION_FIELDS,
        "t3ver_oid",
        "t3ver_wsid",
        "t3ver_state",
        "t3ver_move_id",
        "sys_language_uid",
        "l18n_parent",
    ),
}


@dataclass
class DatabaseConfig:
    """Where records live: a ``sqlite:///path`` or ``postgresql://`` URL."""

    url: str

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def sqlite_path(self) -> str:
        """File behind a sqlite URL, ``:memory:`` when the URL names none."""
        path = self.url.split("://", 1)[-1]
        if path.startswith("/"):
            path = path[1:]
        return path or ":memory:"


def create_adapter(config: DatabaseConfig) -> RecordStore:
    """Create a record store based on the database URL scheme.

    Returns:
        A RecordStore instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite:
        from fluxtree.persistence.sqlite import SQLiteAdapter

        return SQLiteAdapter(config.sqlite_path)

    if config.is_postgresql:
        from fluxtree.persistence.postgresql import PostgreSQLAdapter

        return PostgreSQLAdapter(config.url)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")


def open_store(config: DatabaseConfig, tables: Iterable[TableConfig]) -> RecordStore:
    """Connect, create missing tables and check the tree columns exist.

    ``CREATE TABLE IF NOT EXISTS`` leaves tables of an older schema alone,
    and lookups on a missing column silently match nothing; such a store
    is refused up front.

    Raises:
        StoreError: When the database is unreachable or a table lacks
            columns listed in TREE_COLUMNS.
    """
    if config.is_sqlite and config.sqlite_path != ":memory:":
        Path(config.sqlite_path).parent.mkdir(parents=True, exist_ok=True)

    store = create_adapter(config)
    store.connect()
    try:
        for table in tables:
            store.initialize_table(table)
            required = TREE_COLUMNS.get(table.name, ())
            present = set(store.columns(table.name))
            missing = [name for name in required if name not in present]
            if missing:
                raise StoreError(
                    f"Table '{table.name}' lacks columns needed for workspace "
                    f"and localization lookups: {', '.join(missing)}"
                )
    except Exception:
        store.close()
        raise
    return store

"""SQLite record store."""

import sqlite3
from pathlib import Path
from typing import Any, Sequence

from fluxtree.core.types import Record, get_storage_type
from fluxtree.metadata.loader import TableConfig
from fluxtree.persistence.adapter import StoreError, VersionLookupMixin


class SQLiteAdapter(VersionLookupMixin):
    """Simple SQLite record store."""

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None
        self._columns: dict[str, list[str]] = {}

    def connect(self) -> None:
        """Establish database connection."""
        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open database {self.db_path}: {e}") from e
        self.conn.row_factory = sqlite3.Row

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
        self._columns.clear()

    def initialize_table(self, table: TableConfig) -> None:
        """Create table if it doesn't exist."""
        conn = self._connection()

        columns = []
        for field in table.fields:
            col_def = f'"{field.name}" {get_storage_type(field.type)}'
            if field.primary_key:
                col_def += " PRIMARY KEY"
            elif field.default is not None:
                col_def += f" DEFAULT {self._literal(field.default)}"
            columns.append(col_def)

        sql = f'CREATE TABLE IF NOT EXISTS "{table.name}" ({", ".join(columns)})'
        self._execute(sql)
        conn.commit()
        self._columns.pop(table.name, None)

    def insert(self, table: str, data: dict[str, Any]) -> Record:
        """Insert a row and return it as stored."""
        conn = self._connection()
        names = self._known(table, data.keys())
        if names:
            quoted = ", ".join(f'"{n}"' for n in names)
            placeholders = ", ".join("?" for _ in names)
            sql = f'INSERT INTO "{table}" ({quoted}) VALUES ({placeholders})'
        else:
            sql = f'INSERT INTO "{table}" DEFAULT VALUES'
        cursor = self._execute(sql, [data[n] for n in names])
        conn.commit()

        uid = data.get("uid") or cursor.lastrowid
        return self.get(table, uid) or {}

    def get(
        self, table: str, uid: int, fields: Sequence[str] | None = None
    ) -> Record | None:
        """Fetch a single row by uid, deleted rows included."""
        rows = self.query(table, fields=fields, filter={"uid": uid}, limit=1)
        return rows[0] if rows else None

    def update(self, table: str, uid: int, data: dict[str, Any]) -> None:
        """Update the given columns of a row. Unknown columns are ignored."""
        conn = self._connection()
        updatable = [n for n in self._known(table, data.keys()) if n != "uid"]
        if not updatable:
            return

        set_clause = ", ".join(f'"{n}" = ?' for n in updatable)
        values = [data[n] for n in updatable]
        values.append(uid)

        self._execute(f'UPDATE "{table}" SET {set_clause} WHERE "uid" = ?', values)
        conn.commit()

    def query(
        self,
        table: str,
        fields: Sequence[str] | None = None,
        filter: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        """Select rows matching all ``filter`` equalities, ordered by uid."""
        columns = self.columns(table)
        filter = filter or {}

        # A condition on a column the table lacks can never match
        if any(name not in columns for name in filter):
            return []

        selected = self._known(table, fields) if fields else columns
        if not selected:
            selected = ["uid"]
        quoted = ", ".join(f'"{n}"' for n in selected)
        sql = f'SELECT {quoted} FROM "{table}"'

        params: list[Any] = []
        if filter:
            sql += " WHERE " + " AND ".join(f'"{n}" = ?' for n in filter)
            params.extend(filter.values())
        sql += ' ORDER BY "uid"'
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        cursor = self._execute(sql, params)
        return [dict(row) for row in cursor.fetchall()]

    def count(self, table: str) -> int:
        self.columns(table)
        cursor = self._execute(f'SELECT COUNT(*) FROM "{table}"')
        return int(cursor.fetchone()[0])

    def columns(self, table: str) -> list[str]:
        """Column names of ``table``; raises StoreError for unknown tables."""
        if table not in self._columns:
            cursor = self._execute("SELECT name FROM pragma_table_info(?)", [table])
            names = [row[0] for row in cursor.fetchall()]
            if not names:
                raise StoreError(f"Unknown table '{table}'")
            self._columns[table] = names
        return self._columns[table]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _connection(self) -> sqlite3.Connection:
        if not self.conn:
            raise StoreError("Database not connected")
        return self.conn

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        conn = self._connection()
        try:
            return conn.execute(sql, list(params))
        except sqlite3.Error as e:
            raise StoreError(f"SQLite statement failed: {e}") from e

    def _known(self, table: str, names) -> list[str]:
        columns = self.columns(table)
        return [n for n in names if n in columns]

    @staticmethod
    def _literal(value: Any) -> str:
        if isinstance(value, bool):
            return str(int(value))
        if isinstance(value, (int, float)):
            return str(value)
        return "'" + str(value).replace("'", "''") + "'"

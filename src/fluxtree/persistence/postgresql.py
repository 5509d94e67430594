"""PostgreSQL record store.

Uses psycopg v3 (psycopg[binary]>=3.1.0) for database access.
Mirrors SQLiteAdapter method-for-method with PostgreSQL-specific SQL:
  - %s placeholders instead of ?
  - information_schema instead of pragma_table_info
  - identity column for ``uid`` and INSERT ... RETURNING
  - dict_row cursor factory for dict-based row access

Every identifier is double-quoted: TYPO3 column names such as ``colPos``
are camelCase and PostgreSQL folds unquoted identifiers to lowercase.
"""

from __future__ import annotations

from typing import Any, Sequence

from fluxtree.core.types import Record, get_storage_type
from fluxtree.metadata.loader import TableConfig
from fluxtree.persistence.adapter import StoreError, VersionLookupMixin


def _col(name: str) -> str:
    """Return a double-quoted PostgreSQL identifier.

    Example: _col("colPos") → '"colPos"'
    """
    return f'"{name}"'


class PostgreSQLAdapter(VersionLookupMixin):
    """PostgreSQL record store using psycopg v3."""

    def __init__(self, url: str):
        # psycopg.connect() wants a plain libpq DSN or postgres:// URL,
        # so strip the +psycopg driver suffix when present.
        self.url = url.replace("postgresql+psycopg://", "postgresql://")
        self.conn: Any = None
        self._columns: dict[str, list[str]] = {}

    def connect(self) -> None:
        """Establish database connection."""
        import psycopg
        from psycopg.rows import dict_row

        try:
            self.conn = psycopg.connect(self.url, row_factory=dict_row)
        except psycopg.Error as e:
            raise StoreError(f"Cannot connect to PostgreSQL: {e}") from e
        self.conn.autocommit = False

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
        self._columns.clear()

    def initialize_table(self, table: TableConfig) -> None:
        """Create table if it doesn't exist."""
        columns = []
        for field in table.fields:
            if field.primary_key:
                columns.append(
                    f"{_col(field.name)} INTEGER GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY"
                )
                continue
            pg_type = _sqlite_to_pg_type(get_storage_type(field.type))
            col_def = f"{_col(field.name)} {pg_type}"
            if field.default is not None:
                col_def += f" DEFAULT {_literal(field.default)}"
            columns.append(col_def)

        self._execute(f"CREATE TABLE IF NOT EXISTS {_col(table.name)} ({', '.join(columns)})")
        self._commit()
        self._columns.pop(table.name, None)

    def insert(self, table: str, data: dict[str, Any]) -> Record:
        """Insert a row and return it as stored."""
        names = self._known(table, data.keys())
        if names:
            quoted = ", ".join(_col(n) for n in names)
            placeholders = ", ".join("%s" for _ in names)
            sql = f"INSERT INTO {_col(table)} ({quoted}) VALUES ({placeholders}) RETURNING {_col('uid')}"
        else:
            sql = f"INSERT INTO {_col(table)} DEFAULT VALUES RETURNING {_col('uid')}"
        cursor = self._execute(sql, [data[n] for n in names])
        uid = cursor.fetchone()["uid"]
        self._commit()
        return self.get(table, uid) or {}

    def get(
        self, table: str, uid: int, fields: Sequence[str] | None = None
    ) -> Record | None:
        """Fetch a single row by uid, deleted rows included."""
        rows = self.query(table, fields=fields, filter={"uid": uid}, limit=1)
        return rows[0] if rows else None

    def update(self, table: str, uid: int, data: dict[str, Any]) -> None:
        """Update the given columns of a row. Unknown columns are ignored."""
        updatable = [n for n in self._known(table, data.keys()) if n != "uid"]
        if not updatable:
            return

        set_clause = ", ".join(f"{_col(n)} = %s" for n in updatable)
        values = [data[n] for n in updatable]
        values.append(uid)

        self._execute(f"UPDATE {_col(table)} SET {set_clause} WHERE {_col('uid')} = %s", values)
        self._commit()

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
        if any(name not in columns for name in filter):
            return []

        selected = self._known(table, fields) if fields else columns
        if not selected:
            selected = ["uid"]
        select_cols = ", ".join(f"{_col(n)} AS {_col(n)}" for n in selected)
        sql = f"SELECT {select_cols} FROM {_col(table)}"

        params: list[Any] = []
        if filter:
            sql += " WHERE " + " AND ".join(f"{_col(n)} = %s" for n in filter)
            params.extend(filter.values())
        sql += f" ORDER BY {_col('uid')}"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(limit)

        cursor = self._execute(sql, params)
        return [dict(row) for row in cursor.fetchall()]

    def count(self, table: str) -> int:
        self.columns(table)
        cursor = self._execute(f"SELECT COUNT(*) AS total FROM {_col(table)}")
        return int(cursor.fetchone()["total"])

    def columns(self, table: str) -> list[str]:
        if table not in self._columns:
            cursor = self._execute(
                "SELECT column_name FROM information_schema.columns "
                "WHERE table_schema = current_schema() AND table_name = %s "
                "ORDER BY ordinal_position",
                [table],
            )
            names = [row["column_name"] for row in cursor.fetchall()]
            if not names:
                raise StoreError(f"Unknown table '{table}'")
            self._columns[table] = names
        return self._columns[table]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        if not self.conn:
            raise StoreError("Database not connected")

        import psycopg

        try:
            return self.conn.execute(sql, list(params))
        except psycopg.Error as e:
            self.conn.rollback()
            raise StoreError(f"PostgreSQL statement failed: {e}") from e

    def _commit(self) -> None:
        if self.conn:
            self.conn.commit()

    def _known(self, table: str, names) -> list[str]:
        columns = self.columns(table)
        return [n for n in names if n in columns]


# ------------------------------------------------------------------
# Type mapping helpers
# ------------------------------------------------------------------

def _sqlite_to_pg_type(sqlite_type: str) -> str:
    """Map SQLite column types to PostgreSQL equivalents."""
    mapping = {
        "TEXT": "TEXT",
        "INTEGER": "INTEGER",
        "REAL": "DOUBLE PRECISION",
    }
    return mapping.get(sqlite_type.upper(), "TEXT")


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"

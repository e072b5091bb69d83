"""Local SQLite table store with the same contract as the REST store.

Used by the test suite and by headless scripts (``core.bootstrap(store=...)``)
that want to run the app logic without a hosted backend. Like the hosted
schema, time entries carry no cascading foreign key: cleanup of a client's
entries is the data layer's job.
"""
import aiosqlite
import asyncio
import logging
import sqlite3
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple, Union

from database.helpers import BackendError
from database.store import Query, TableStore

logger = logging.getLogger(__name__)

_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "clients": ("id", "user_id", "name", "archived", "hourly_rate", "created_at", "updated_at"),
    "time_entries": (
        "id", "client_id", "user_id", "start_time", "end_time", "notes", "created_at", "updated_at",
    ),
}
_BOOLEAN_COLUMNS = {"archived"}

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS clients (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        archived INTEGER DEFAULT 0,
        hourly_rate REAL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    CREATE TABLE IF NOT EXISTS time_entries (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        start_time TEXT NOT NULL,
        end_time TEXT,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_clients_user ON clients(user_id);
    CREATE INDEX IF NOT EXISTS idx_time_entries_client ON time_entries(client_id);
    CREATE INDEX IF NOT EXISTS idx_time_entries_user ON time_entries(user_id);
"""


def _check_columns(table: str, columns) -> None:
    allowed = _COLUMNS.get(table)
    if allowed is None:
        raise BackendError(f"Unknown table '{table}'", status=404, code="42P01")
    for column in columns:
        if column not in allowed:
            raise BackendError(
                f"Column '{column}' of '{table}' does not exist", status=400, code="42703"
            )


def _to_sql(column: str, value: Any) -> Any:
    if column in _BOOLEAN_COLUMNS and value is not None:
        return 1 if value else 0
    return value


def _from_row(table: str, row: Dict[str, Any]) -> Dict[str, Any]:
    for column in _BOOLEAN_COLUMNS:
        if column in row and row[column] is not None:
            row[column] = bool(row[column])
    return row


def _where(filters: Dict[str, Any], prefix: str = "") -> Tuple[str, List[Any]]:
    clauses, params = [], []
    for column, value in filters.items():
        if value is None:
            clauses.append(f"{prefix}{column} IS NULL")
        else:
            clauses.append(f"{prefix}{column} = ?")
            params.append(_to_sql(column, value))
    return (" WHERE " + " AND ".join(clauses)) if clauses else "", params


class SqliteTableStore(TableStore):
    """aiosqlite-backed store with a single connection serialized by an async lock."""

    def __init__(self, path: Union[str, Path] = ":memory:") -> None:
        self._path = path
        self._conn: Optional[aiosqlite.Connection] = None
        self._lock: Optional[asyncio.Lock] = None

    async def _ensure_connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            try:
                self._conn = await aiosqlite.connect(self._path)
                self._conn.row_factory = aiosqlite.Row
                await self._conn.executescript(_SCHEMA)
                await self._conn.commit()
            except (sqlite3.Error, OSError) as e:
                self._conn = None
                raise BackendError(f"Cannot open database at {self._path}: {e}") from e
        return self._conn

    @asynccontextmanager
    async def _get_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            conn = await self._ensure_connection()
            try:
                yield conn
            except sqlite3.Error as e:
                logger.error(f"SQLite error: {e}")
                raise BackendError(str(e), status=400) from e

    async def select(self, table: str, query: Optional[Query] = None) -> List[Dict[str, Any]]:
        query = query or Query()
        _check_columns(table, query.filters)
        if query.order_by:
            _check_columns(table, [query.order_by])

        select = f"SELECT {table}.* FROM {table}"
        embed = query.embed
        if embed is not None:
            if embed.columns != ("*",):
                _check_columns(embed.table, embed.columns)
            _check_columns(table, [embed.foreign_key])
            embed_columns = _COLUMNS[embed.table] if embed.columns == ("*",) else embed.columns
            aliases = ", ".join(f"{embed.table}.{c} AS __embed_{c}" for c in embed_columns)
            select = (
                f"SELECT {table}.*, {aliases} FROM {table} "
                f"INNER JOIN {embed.table} ON {embed.table}.id = {table}.{embed.foreign_key}"
            )

        where, params = _where(query.filters, prefix=f"{table}.")
        sql = select + where
        if query.order_by:
            direction = "ASC" if query.ascending else "DESC"
            sql += f" ORDER BY {table}.{query.order_by} {direction}, {table}.rowid {direction}"
        if query.limit is not None:
            sql += " LIMIT ?"
            params.append(query.limit)

        async with self._get_connection() as conn:
            async with conn.execute(sql, params) as cursor:
                rows = [dict(r) async for r in cursor]

        result = []
        for row in rows:
            if embed is not None:
                nested = {
                    key[len("__embed_"):]: row.pop(key)
                    for key in list(row) if key.startswith("__embed_")
                }
                row[embed.table] = _from_row(embed.table, nested)
            result.append(_from_row(table, row))
        return result

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        values = {k: v for k, v in row.items() if v is not None}
        values.setdefault("id", str(uuid.uuid4()))
        values.setdefault("created_at", now)
        values.setdefault("updated_at", now)
        _check_columns(table, values)

        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        params = [_to_sql(k, v) for k, v in values.items()]
        async with self._get_connection() as conn:
            await conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", params)
            await conn.commit()
            async with conn.execute(f"SELECT * FROM {table} WHERE id = ?", (values["id"],)) as cursor:
                stored = await cursor.fetchone()
        return _from_row(table, dict(stored))

    async def update(
        self, table: str, values: Dict[str, Any], filters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        _check_columns(table, values)
        _check_columns(table, filters)
        if not values:
            return await self.select(table, Query(filters=dict(filters)))

        assignments = ", ".join(f"{column} = ?" for column in values)
        params = [_to_sql(k, v) for k, v in values.items()]
        where, where_params = _where(filters)
        async with self._get_connection() as conn:
            async with conn.execute(f"SELECT id FROM {table}{where}", where_params) as cursor:
                ids = [r["id"] async for r in cursor]
            await conn.execute(f"UPDATE {table} SET {assignments}{where}", params + where_params)
            await conn.commit()
            rows = []
            for row_id in ids:
                async with conn.execute(f"SELECT * FROM {table} WHERE id = ?", (row_id,)) as cursor:
                    stored = await cursor.fetchone()
                if stored is not None:
                    rows.append(_from_row(table, dict(stored)))
        return rows

    async def delete(self, table: str, filters: Dict[str, Any]) -> None:
        _check_columns(table, filters)
        where, params = _where(filters)
        async with self._get_connection() as conn:
            await conn.execute(f"DELETE FROM {table}{where}", params)
            await conn.commit()

    async def close(self) -> None:
        if self._conn is not None:
            try:
                await self._conn.close()
            except (sqlite3.Error, OSError) as e:
                logger.warning(f"Error closing database connection: {e}")
            finally:
                self._conn = None

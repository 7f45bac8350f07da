import logging
import re
import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, Protocol, runtime_checkable

import aiosqlite

from coursehub.config import settings
from coursehub.database import get_async_conn

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class QueryError(Exception):
    """A query against the backend failed.

    There is a single error kind: not-found, permission and connection
    problems all surface as ``QueryError``. ``code`` carries the driver's
    error class name when one is available.
    """

    def __init__(self, message: str, *, code: str | None = None, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


def _quote(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise QueryError(f"Invalid identifier: {name!r}", code="invalid_identifier")
    # Brackets, not double quotes: SQLite reads an unknown "name" as a string literal.
    return f"[{name}]"


def _columns(columns: str) -> str:
    if columns.strip() == "*":
        return "*"
    return ", ".join(_quote(c.strip()) for c in columns.split(",") if c.strip())


def _where(filters: list[tuple[str, str, Any]]) -> tuple[str, list]:
    clauses: list[str] = []
    params: list = []
    for column, op, value in filters:
        if op == "in":
            if not value:
                # IN () is a syntax error in SQLite; nothing can match.
                clauses.append("0")
                continue
            placeholders = ", ".join("?" for _ in value)
            clauses.append(f"{_quote(column)} IN ({placeholders})")
            params.extend(value)
        elif value is None:
            clauses.append(f"{_quote(column)} IS {'NOT ' if op == '!=' else ''}NULL")
        else:
            clauses.append(f"{_quote(column)} {op} ?")
            params.append(value)
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


class Query:
    """Chainable read against one table or view.

    Usage::

        rows = await (
            client.select("videos")
            .eq("course_id", course_id)
            .order("order")
            .execute()
        )

    Filters are ANDed; ``order()`` calls apply in the order they are made.
    """

    def __init__(self, client: "SqliteQueryClient", table: str, columns: str = "*") -> None:
        self._client = client
        self.table = table
        self._columns = columns
        self._filters: list[tuple[str, str, Any]] = []
        self._order: list[tuple[str, bool]] = []
        self._count = False

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------
    def eq(self, column: str, value: Any) -> "Query":
        self._filters.append((column, "=", value))
        return self

    def neq(self, column: str, value: Any) -> "Query":
        self._filters.append((column, "!=", value))
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "Query":
        self._filters.append((column, "in", list(values)))
        return self

    def order(self, column: str, *, ascending: bool = True) -> "Query":
        self._order.append((column, ascending))
        return self

    def count(self) -> "Query":
        """Return a single ``{"count": n}`` row instead of the matching rows."""
        self._count = True
        return self

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def to_sql(self) -> tuple[str, list]:
        where, params = _where(self._filters)
        columns = "COUNT(*) AS [count]" if self._count else _columns(self._columns)
        sql = f"SELECT {columns} FROM {_quote(self.table)}{where}"
        if self._order:
            parts = [f"{_quote(col)} {'ASC' if asc else 'DESC'}" for col, asc in self._order]
            sql += " ORDER BY " + ", ".join(parts)
        return sql, params

    async def execute(self) -> list[dict]:
        sql, params = self.to_sql()
        return await self._client.fetch_all(sql, params)


class SqliteQueryClient:
    """Query service backed by SQLite through ``aiosqlite``.

    Each call opens its own connection and closes it before returning, so
    a single client can be shared by any number of concurrent requests.
    Driver errors are re-raised as :class:`QueryError`.
    """

    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = db_path or settings.database_path

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[aiosqlite.Connection]:
        try:
            conn = await get_async_conn(self.db_path)
        except (sqlite3.Error, OSError) as e:
            raise QueryError("Could not open database", code=type(e).__name__, details=str(e)) from e
        try:
            yield conn
        finally:
            await conn.close()

    async def _run(self, sql: str, params: list, *, fetch: bool, commit: bool) -> tuple[list[dict], int]:
        logger.debug("%s", sql)
        async with self._connection() as conn:
            try:
                cursor = await conn.execute(sql, params)
                rows = [dict(row) for row in await cursor.fetchall()] if fetch else []
                if commit:
                    await conn.commit()
                return rows, cursor.rowcount
            except sqlite3.Error as e:
                raise QueryError(str(e), code=type(e).__name__, details=sql) from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def select(self, table: str, columns: str = "*") -> Query:
        return Query(self, table, columns)

    async def fetch_all(self, sql: str, params: list | tuple = ()) -> list[dict]:
        rows, _ = await self._run(sql, list(params), fetch=True, commit=False)
        return rows

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def insert(self, table: str, values: dict) -> dict:
        """Insert one row and return it as stored (defaults included)."""
        if not values:
            raise QueryError("Nothing to insert", code="empty_insert")
        cols = ", ".join(_quote(k) for k in values)
        placeholders = ", ".join("?" for _ in values)
        sql = f"INSERT INTO {_quote(table)} ({cols}) VALUES ({placeholders}) RETURNING *"
        rows, _ = await self._run(sql, list(values.values()), fetch=True, commit=True)
        if not rows:
            raise QueryError("Insert failed - no data returned", code="no_data")
        return rows[0]

    async def update(self, table: str, values: dict, match: dict) -> int:
        """Update rows matching every ``match`` column. Returns the row count."""
        if not values:
            raise QueryError("Nothing to update", code="empty_update")
        if not match:
            raise QueryError("Refusing to update without a filter", code="unfiltered_update")
        assignments = ", ".join(f"{_quote(k)} = ?" for k in values)
        where, params = _where([(k, "=", v) for k, v in match.items()])
        sql = f"UPDATE {_quote(table)} SET {assignments}{where}"
        _, count = await self._run(sql, list(values.values()) + params, fetch=False, commit=True)
        return count

    async def delete(self, table: str, match: dict) -> int:
        if not match:
            raise QueryError("Refusing to delete without a filter", code="unfiltered_delete")
        where, params = _where([(k, "=", v) for k, v in match.items()])
        _, count = await self._run(f"DELETE FROM {_quote(table)}{where}", params, fetch=False, commit=True)
        return count


@runtime_checkable
class QueryClient(Protocol):
    """What services need from a query backend. ``SqliteQueryClient`` is the one in use."""

    def select(self, table: str, columns: str = "*") -> Query: ...

    async def insert(self, table: str, values: dict) -> dict: ...

    async def update(self, table: str, values: dict, match: dict) -> int: ...

    async def delete(self, table: str, match: dict) -> int: ...


def get_query_client() -> QueryClient:
    """FastAPI dependency. Override in tests with ``app.dependency_overrides``."""
    return SqliteQueryClient()

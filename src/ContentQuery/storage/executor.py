"""Execute prepared element queries against SQLite."""

from __future__ import annotations

import dataclasses
import sqlite3
from typing import TYPE_CHECKING, Any, Optional

from ContentQuery.core.predicates import QueryDescriptor
from ContentQuery.storage.cache import ANY_ENTRY_TAG, GLOBAL_TAG, cache_key
from ContentQuery.utils.log import log

if TYPE_CHECKING:
    from ContentQuery.query.context import QueryContext
    from ContentQuery.query.element import ElementQuery
    from ContentQuery.storage.cache import SqliteQueryCache


class QueryExecutor:
    """Run element queries, optionally through the result cache.

    A query that prepares to no descriptor produces no rows without touching
    the database.
    """

    def __init__(self, conn: sqlite3.Connection, cache: SqliteQueryCache | None = None) -> None:
        self.conn = conn
        self.cache = cache

    def all(self, query: ElementQuery, context: QueryContext) -> list[dict[str, Any]]:
        descriptor = query.prepare(context)
        if descriptor is None:
            return []
        sql, params = descriptor.to_sql()
        return self._fetch(sql, params, descriptor)

    def one(self, query: ElementQuery, context: QueryContext) -> Optional[dict[str, Any]]:
        descriptor = query.prepare(context)
        if descriptor is None:
            return None
        sql, params = dataclasses.replace(descriptor, limit=1).to_sql()
        rows = self._fetch(sql, params, descriptor)
        return rows[0] if rows else None

    def ids(self, query: ElementQuery, context: QueryContext) -> list[int]:
        return [row["id"] for row in self.all(query, context)]

    def count(self, query: ElementQuery, context: QueryContext) -> int:
        descriptor = query.prepare(context)
        if descriptor is None:
            return 0
        sql, params = descriptor.to_count_sql()
        rows = self._fetch(sql, params, descriptor, as_dicts=False)
        return int(rows[0][0]) if rows else 0

    def _fetch(
        self,
        sql: str,
        params: list[Any],
        descriptor: QueryDescriptor,
        *,
        as_dicts: bool = True,
    ) -> list[Any]:
        key = cache_key(sql, params)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                log.debug("cache hit: %s", key)
                return cached

        log.debug("query: %s %s", sql, params)
        cursor = self.conn.execute(sql, params)
        if as_dicts:
            columns = [col[0] for col in cursor.description]
            rows: list[Any] = [dict(zip(columns, row)) for row in cursor.fetchall()]
        else:
            rows = [list(row) for row in cursor.fetchall()]

        if self.cache is not None:
            tags = descriptor.cache_tags or (ANY_ENTRY_TAG,)
            self.cache.set(key, rows, (GLOBAL_TAG, *tags))
        return rows

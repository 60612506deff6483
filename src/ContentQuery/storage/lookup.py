"""SQLite implementation of the tabular lookup used by query normalization."""

from __future__ import annotations

import re
import sqlite3
from typing import Any, Optional

from ContentQuery.core.predicates import Predicate, render
from ContentQuery.utils.log import log

_RE_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SqliteLookup:
    """Single-column reads against reference tables."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def column(self, table: str, column: str, where: Optional[Predicate]) -> list[Any]:
        """Return ``column`` for every row of ``table`` matching ``where``."""
        sql, params = self._select(table, column, where)
        return [row[0] for row in self.conn.execute(sql, params)]

    def scalar(self, table: str, column: str, where: Optional[Predicate]) -> Any:
        """Return ``column`` of the first matching row, or None."""
        sql, params = self._select(table, column, where)
        row = self.conn.execute(sql + " LIMIT 1", params).fetchone()
        return row[0] if row else None

    @staticmethod
    def _select(table: str, column: str, where: Optional[Predicate]) -> tuple[str, list[Any]]:
        for name in (table, column):
            if not _RE_IDENTIFIER.match(name):
                raise ValueError(f"Invalid identifier: {name!r}")
        sql = f"SELECT {column} FROM {table}"
        params: list[Any] = []
        if where is not None:
            clause, params = render(where)
            sql += f" WHERE {clause}"
        log.debug("lookup: %s %s", sql, params)
        return sql, params

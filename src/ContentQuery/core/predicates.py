"""Relational predicate tree, joins and the prepared query descriptor.

Everything here is a plain value: the query builders produce these objects
and the storage layer renders them to SQLite SQL with ``?`` placeholders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

_COMPARE_OPS = frozenset({"=", "!=", "<", "<=", ">", ">="})


@dataclass(frozen=True, slots=True)
class Compare:
    column: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _COMPARE_OPS:
            raise ValueError(f"Unsupported comparison operator: {self.op}")


@dataclass(frozen=True, slots=True)
class ColumnCompare:
    """Column-to-column comparison, used for join conditions."""

    left: str
    op: str
    right: str


@dataclass(frozen=True, slots=True)
class InSet:
    column: str
    values: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class Like:
    column: str
    pattern: str


@dataclass(frozen=True, slots=True)
class IsNull:
    column: str


@dataclass(frozen=True, slots=True)
class Not:
    inner: "Predicate"


@dataclass(frozen=True, slots=True)
class And:
    items: tuple["Predicate", ...]


@dataclass(frozen=True, slots=True)
class Or:
    items: tuple["Predicate", ...]


Predicate = Union[Compare, ColumnCompare, InSet, Like, IsNull, Not, And, Or]


def and_(*items: Optional[Predicate]) -> Optional[Predicate]:
    """Combine predicates conjunctively, flattening nested ``And`` and dropping None."""
    return _combine(And, items)


def or_(*items: Optional[Predicate]) -> Optional[Predicate]:
    """Combine predicates disjunctively, flattening nested ``Or`` and dropping None."""
    return _combine(Or, items)


def _combine(kind: type, items: Sequence[Optional[Predicate]]) -> Optional[Predicate]:
    flat: list[Predicate] = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, kind):
            flat.extend(item.items)
        else:
            flat.append(item)
    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return kind(tuple(flat))


def render(predicate: Predicate) -> tuple[str, list[Any]]:
    """Render a predicate to SQL.

    Args:
        predicate: Predicate tree.

    Returns:
        Tuple of (sql fragment, positional parameters).

    Raises:
        ValueError: If an ``InSet`` has no values or the node type is unknown.
    """
    params: list[Any] = []
    sql = _render(predicate, params)
    return sql, params


def _render(node: Predicate, params: list[Any]) -> str:
    if isinstance(node, Compare):
        if node.value is None:
            return f"{node.column} IS NULL" if node.op == "=" else f"{node.column} IS NOT NULL"
        params.append(node.value)
        return f"{node.column} {node.op} ?"
    if isinstance(node, ColumnCompare):
        return f"{node.left} {node.op} {node.right}"
    if isinstance(node, InSet):
        if not node.values:
            raise ValueError(f"Refusing to render empty IN () for {node.column}")
        params.extend(node.values)
        placeholders = ", ".join("?" for _ in node.values)
        return f"{node.column} IN ({placeholders})"
    if isinstance(node, Like):
        params.append(node.pattern)
        return f"{node.column} LIKE ?"
    if isinstance(node, IsNull):
        return f"{node.column} IS NULL"
    if isinstance(node, Not):
        return f"NOT ({_render(node.inner, params)})"
    if isinstance(node, (And, Or)):
        glue = " AND " if isinstance(node, And) else " OR "
        return "(" + glue.join(_render(item, params) for item in node.items) + ")"
    raise ValueError(f"Unsupported predicate node: {node!r}")


@dataclass(frozen=True, slots=True)
class Join:
    """A join against an auxiliary table.

    Attributes:
        kind: ``INNER`` or ``LEFT``.
        table: Table name.
        alias: Alias used by column references.
        on: Join condition.
    """

    kind: str
    table: str
    alias: str
    on: Predicate


@dataclass(frozen=True, slots=True)
class QueryDescriptor:
    """Executable description of a prepared element query.

    Attributes:
        table: Base table.
        alias: Base table alias.
        joins: Joins in the order they must be emitted.
        columns: Projected columns.
        where: Predicate tree or None for "all rows".
        order_by: ``(column, "ASC"|"DESC")`` pairs.
        limit: Row limit, or None.
        offset: Row offset, or None.
        distinct: Whether duplicate rows must be collapsed.
        cache_tags: Invalidation tags for the result set.
    """

    table: str
    alias: str
    joins: tuple[Join, ...] = ()
    columns: tuple[str, ...] = ()
    where: Optional[Predicate] = None
    order_by: tuple[tuple[str, str], ...] = ()
    limit: Optional[int] = None
    offset: Optional[int] = None
    distinct: bool = False
    cache_tags: tuple[str, ...] = field(default=())

    def to_sql(self) -> tuple[str, list[Any]]:
        """Render the full SELECT statement."""
        columns = ", ".join(self.columns) if self.columns else f"{self.alias}.*"
        sql, params = self._from_where()
        keyword = "SELECT DISTINCT" if self.distinct else "SELECT"
        sql = f"{keyword} {columns} {sql}"
        if self.order_by:
            sql += " ORDER BY " + ", ".join(f"{column} {direction}" for column, direction in self.order_by)
        if self.limit is not None:
            sql += " LIMIT ?"
            params.append(self.limit)
            if self.offset:
                sql += " OFFSET ?"
                params.append(self.offset)
        elif self.offset:
            sql += " LIMIT -1 OFFSET ?"
            params.append(self.offset)
        return sql, params

    def to_count_sql(self) -> tuple[str, list[Any]]:
        """Render a COUNT over the same rows, ignoring order and pagination."""
        sql, params = self._from_where()
        return f"SELECT COUNT(DISTINCT {self.alias}.id) {sql}", params

    def _from_where(self) -> tuple[str, list[Any]]:
        params: list[Any] = []
        parts = [f"FROM {self.table} {self.alias}"]
        for join in self.joins:
            parts.append(f"{join.kind} JOIN {join.table} {join.alias} ON {_render(join.on, params)}")
        if self.where is not None:
            parts.append(f"WHERE {_render(self.where, params)}")
        return " ".join(parts), params

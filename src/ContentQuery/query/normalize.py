"""ID parameter normalization.

Filters such as ``section``/``sectionId`` accept ids, handles, lists of
either, or domain objects. They are normalized into an explicit three-state
``IdParam`` so "not filtered" and "filtered to nothing" can never be
confused.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from ContentQuery.core.params import is_list_like, parse_param
from ContentQuery.query.compiler import compile_numeric_param, compile_param
from ContentQuery.query.context import Lookup
from ContentQuery.utils.log import log

_RE_INT = re.compile(r"^\s*\d+\s*$")


class IdState(Enum):
    UNSET = "unset"
    EMPTY = "empty"
    IDS = "ids"


@dataclass(frozen=True, slots=True)
class IdParam:
    """Normalized ID filter.

    Attributes:
        state: UNSET (no filter), EMPTY (resolved to nothing) or IDS.
        ids: Ordered, de-duplicated ids when ``state`` is IDS.
    """

    state: IdState
    ids: tuple[int, ...] = ()

    @classmethod
    def unset(cls) -> IdParam:
        return cls(IdState.UNSET)

    @classmethod
    def empty(cls) -> IdParam:
        return cls(IdState.EMPTY)

    @classmethod
    def of(cls, ids: Iterable[int]) -> IdParam:
        unique = tuple(dict.fromkeys(int(i) for i in ids))
        if not unique:
            return cls.empty()
        return cls(IdState.IDS, unique)

    @property
    def is_unset(self) -> bool:
        return self.state is IdState.UNSET

    @property
    def is_empty(self) -> bool:
        return self.state is IdState.EMPTY

    @property
    def has_ids(self) -> bool:
        return self.state is IdState.IDS


def normalize_ids(raw: Any, *, lookup: Lookup, table: str, column: str = "id") -> IdParam:
    """Normalize a raw id/handle filter.

    Args:
        raw: Raw value passed to a setter.
        lookup: Tabular lookup used to resolve non-numeric values.
        table: Reference table holding ``id`` and ``column``.
        column: Column the raw value is matched against (``id`` or ``handle``).

    Returns:
        Normalized parameter. An empty scalar is UNSET while an empty list is
        EMPTY; a value that resolves to no rows is EMPTY.

    Raises:
        InvalidParamError: If ``column`` is ``id`` and an operand is not numeric.
    """
    if isinstance(raw, IdParam):
        return raw
    if _is_blank(raw):
        return IdParam.empty() if is_list_like(raw) else IdParam.unset()
    if _is_int(raw):
        return IdParam.of([int(raw)])
    if is_list_like(raw) and all(_is_int(item) for item in raw):
        return IdParam.of(int(item) for item in raw)
    if _has_id(raw):
        return IdParam.of([raw.id])
    if is_list_like(raw) and all(_has_id(item) for item in raw):
        return IdParam.of(item.id for item in raw)

    expr = parse_param(raw)
    if expr is None:
        return IdParam.empty() if is_list_like(raw) else IdParam.unset()
    if column == "id":
        where = compile_numeric_param(column, expr)
    else:
        where = compile_param(column, expr)
    ids = lookup.column(table, "id", where)
    result = IdParam.of(ids)
    if result.is_empty:
        log.debug("No %s rows match %s=%r", table, column, raw)
    return result


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if is_list_like(value):
        return len(value) == 0
    return False


def _is_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and bool(_RE_INT.match(value))


def _has_id(value: Any) -> bool:
    return not isinstance(value, (str, bytes)) and isinstance(getattr(value, "id", None), int)

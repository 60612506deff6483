"""Query parameter expressions.

Loosely typed filter values (``"not foo"``, ``[">= 5", "< 10"]``,
``":empty:"``...) are parsed once, when a setter receives them, into a small
tagged expression tree. The predicate compiler only ever sees these types.

Grammar
- ``None``, ``""`` and ``[]`` mean "no filter".
- Comma separated strings are lists: ``"news, blog"`` -> ``["news", "blog"]``.
- A list is a disjunction unless its first item is a glue token:
  ``"and"`` / ``"or"`` set the glue, ``"not"`` negates the remaining set.
- A string item may start with ``not `` (negation) or with one of
  ``>=``, ``<=``, ``!=``, ``>``, ``<``, ``=``.
- ``:empty:`` / ``:notempty:`` test for NULL / NOT NULL.
- A string containing ``*`` is a wildcard match.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

EMPTY_TOKEN = ":empty:"
NOT_EMPTY_TOKEN = ":notempty:"

_GLUE_TOKENS = ("and", "or", "not")
# Longest first so ">=" is not read as ">".
_OPERATORS = (">=", "<=", "!=", ">", "<", "=")


@dataclass(frozen=True, slots=True)
class Literal:
    value: Any


@dataclass(frozen=True, slots=True)
class Wildcard:
    pattern: str


@dataclass(frozen=True, slots=True)
class Range:
    op: str
    value: Any


@dataclass(frozen=True, slots=True)
class Sentinel:
    """``:empty:`` (``empty=True``) or ``:notempty:`` (``empty=False``)."""

    empty: bool


@dataclass(frozen=True, slots=True)
class Negation:
    expr: "ParamExpr"


@dataclass(frozen=True, slots=True)
class Compound:
    glue: str
    items: tuple["ParamExpr", ...]


ParamExpr = Union[Literal, Wildcard, Range, Sentinel, Negation, Compound]

_EXPR_TYPES = (Literal, Wildcard, Range, Sentinel, Negation, Compound)


def parse_param(value: Any) -> ParamExpr | None:
    """Parse a raw filter value into a ``ParamExpr``.

    Args:
        value: Scalar, comma separated string, list/tuple/set, or an
            already parsed expression.

    Returns:
        Parsed expression, or None when the value means "no filter".
    """
    if value is None:
        return None
    if isinstance(value, _EXPR_TYPES):
        return value
    if isinstance(value, str):
        items = split_list(value)
        if not items:
            return None
        if len(items) == 1:
            return _parse_scalar(items[0])
        value = items
    if isinstance(value, (list, tuple, set, frozenset)):
        return _parse_list(list(value))
    return _parse_scalar(value)


def split_list(value: str, delimiter: str = ",") -> list[str]:
    """Split a delimited string into stripped, non-empty items."""
    return [item.strip() for item in value.split(delimiter) if item.strip()]


def is_list_like(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _parse_list(items: list[Any]) -> ParamExpr | None:
    glue = "or"
    negate = False
    if items and isinstance(items[0], str) and items[0].strip().lower() in _GLUE_TOKENS:
        token = items[0].strip().lower()
        items = items[1:]
        if token == "not":
            negate = True
        else:
            glue = token

    parsed = [expr for expr in (parse_param(item) for item in items) if expr is not None]
    if not parsed:
        return None
    expr: ParamExpr = parsed[0] if len(parsed) == 1 else Compound(glue, tuple(parsed))
    return Negation(expr) if negate else expr


def _parse_scalar(value: Any) -> ParamExpr:
    if not isinstance(value, str):
        return Literal(value)

    text = value.strip()
    lowered = text.lower()
    if lowered == EMPTY_TOKEN:
        return Sentinel(empty=True)
    if lowered == NOT_EMPTY_TOKEN:
        return Sentinel(empty=False)
    if lowered.startswith("not "):
        return Negation(_parse_scalar(text[4:]))

    for op in _OPERATORS:
        if text.startswith(op):
            operand = text[len(op):].strip()
            if op == "=":
                return _parse_scalar(operand)
            if op == "!=":
                return Negation(_parse_scalar(operand))
            return Range(op, operand)

    if "*" in text:
        return Wildcard(text)
    return Literal(text)

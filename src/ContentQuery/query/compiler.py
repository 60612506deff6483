"""Predicate compiler.

Compiles parsed parameter expressions into predicates against one column.
Three operand kinds share the same grammar:

- text:    values are compared as given; ``*`` wildcards become ``LIKE``.
- numeric: every operand must be numeric, otherwise ``InvalidParamError``
           is raised while compiling, before anything is executed.
- date:    operands are converted to the canonical UTC storage string
           ``YYYY-MM-DD HH:MM:SS``.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from dateutil import parser as dt_parser

from ContentQuery.core.errors import InvalidParamError
from ContentQuery.core.params import (
    Compound,
    Literal,
    Negation,
    ParamExpr,
    Range,
    Sentinel,
    Wildcard,
    parse_param,
)
from ContentQuery.core.predicates import Compare, InSet, IsNull, Like, Not, Predicate, and_, or_

DB_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

Coerce = Callable[[str, Any], Any]


def compile_param(column: str, value: Any) -> Optional[Predicate]:
    """Compile a text/equality parameter.

    Args:
        column: Qualified column name.
        value: Raw value or parsed expression.

    Returns:
        Predicate, or None when the value means "no filter".
    """
    return _compile(column, parse_param(value), _as_text, allow_wildcard=True)


def compile_numeric_param(column: str, value: Any) -> Optional[Predicate]:
    """Compile a parameter whose operands must all be numeric.

    Raises:
        InvalidParamError: If any operand is not numeric.
    """
    return _compile(column, parse_param(value), _as_number)


def compile_date_param(column: str, value: Any, default_op: str | None = None) -> Optional[Predicate]:
    """Compile a date parameter.

    Args:
        column: Qualified column name.
        value: Raw value (string, datetime, date, timestamp) or expression.
        default_op: Operator for operands given without one (``before``
            uses ``<``, ``after`` uses ``>=``). Equality when omitted.

    Raises:
        InvalidParamError: If an operand is not a recognizable date.
    """
    return _compile(column, parse_param(value), _as_db_date, default_op=default_op)


def to_db_date(value: Any) -> str:
    """Convert a date-ish value into the canonical UTC storage string.

    Naive datetimes and date-only strings are taken to be UTC.

    Raises:
        InvalidParamError: If the value is not a recognizable date.
    """
    return _as_db_date("date", value)


def _compile(
    column: str,
    expr: ParamExpr | None,
    coerce: Coerce,
    *,
    default_op: str | None = None,
    allow_wildcard: bool = False,
) -> Optional[Predicate]:
    if expr is None:
        return None
    if isinstance(expr, Sentinel):
        return IsNull(column) if expr.empty else Not(IsNull(column))
    if isinstance(expr, Literal):
        return Compare(column, default_op or "=", coerce(column, expr.value))
    if isinstance(expr, Range):
        return Compare(column, expr.op, coerce(column, expr.value))
    if isinstance(expr, Wildcard):
        if not allow_wildcard:
            raise InvalidParamError(f"Wildcards are not supported for {column}: {expr.pattern!r}")
        return Like(column, expr.pattern.replace("*", "%"))
    if isinstance(expr, Negation):
        inner = expr.expr
        if isinstance(inner, Literal) and default_op is None:
            return Compare(column, "!=", coerce(column, inner.value))
        compiled = _compile(column, inner, coerce, default_op=default_op, allow_wildcard=allow_wildcard)
        return Not(compiled) if compiled is not None else None
    if isinstance(expr, Compound):
        if (
            expr.glue == "or"
            and default_op is None
            and all(isinstance(item, Literal) for item in expr.items)
        ):
            values = _dedup([coerce(column, item.value) for item in expr.items])
            if len(values) == 1:
                return Compare(column, "=", values[0])
            return InSet(column, tuple(values))
        parts = [
            _compile(column, item, coerce, default_op=default_op, allow_wildcard=allow_wildcard)
            for item in expr.items
        ]
        return and_(*parts) if expr.glue == "and" else or_(*parts)
    raise InvalidParamError(f"Unsupported parameter for {column}: {expr!r}")


def _dedup(values: list[Any]) -> list[Any]:
    seen: set[Any] = set()
    unique: list[Any] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        unique.append(value)
    return unique


def _as_text(column: str, value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)):
        return value
    raise InvalidParamError(f"Invalid value for {column}: {value!r}")


def _as_number(column: str, value: Any) -> int | float:
    if isinstance(value, bool):
        raise InvalidParamError(f"Invalid numeric value for {column}: {value!r}")
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            pass
    raise InvalidParamError(f"Invalid numeric value for {column}: {value!r}")


def _as_db_date(column: str, value: Any) -> str:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            parsed = dt_parser.parse(value)
        except (ValueError, OverflowError) as e:
            raise InvalidParamError(f"Invalid date value for {column}: {value!r}") from e
    else:
        raise InvalidParamError(f"Invalid date value for {column}: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).strftime(DB_DATE_FORMAT)

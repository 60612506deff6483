"""Base element query.

``ElementQuery`` owns the parameters shared by every element kind (ids,
site, slug, status, structure, ordering, pagination) and drives preparation.
Element-specific queries extend it and contribute their own joins and
conditions from ``before_prepare``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence, TypeVar

from ContentQuery.core.errors import InvalidParamError, QueryAborted
from ContentQuery.core.params import is_list_like, split_list
from ContentQuery.core.predicates import Predicate, QueryDescriptor, and_
from ContentQuery.query.compiler import (
    compile_date_param,
    compile_numeric_param,
    compile_param,
)
from ContentQuery.query.context import Lookup, QueryContext
from ContentQuery.query.joins import JoinPlanner, StructureRef, is_structure_id
from ContentQuery.query.status import StatusResolver, element_status_resolver
from ContentQuery.utils.log import log

_RE_COLUMN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

Q = TypeVar("Q", bound="ElementQuery")


@dataclass(slots=True)
class QueryParts:
    """Mutable accumulator for one preparation pass."""

    planner: JoinPlanner
    now: datetime
    columns: list[str] = field(default_factory=list)
    conditions: list[Predicate] = field(default_factory=list)

    def select(self, *columns: str) -> None:
        for column in columns:
            if column not in self.columns:
                self.columns.append(column)

    def where(self, predicate: Optional[Predicate]) -> None:
        if predicate is not None:
            self.conditions.append(predicate)


class ElementQuery:
    """Fluent query over elements.

    Every setter returns the query itself. Once ``prepare()`` has produced a
    descriptor the query is frozen and further setter calls raise
    ``RuntimeError``.
    """

    default_order_by: tuple[tuple[str, str], ...] = (("elements.dateCreated", "DESC"),)

    def __init__(self, lookup: Lookup, *, site_id: int = 1) -> None:
        self.lookup = lookup
        self._prepared = False
        self._descriptor: QueryDescriptor | None = None

        self._id: Any = None
        self._site_id = site_id
        self._slug: Any = None
        self._uri: Any = None
        self._title: Any = None
        self._date_created: Any = None
        self._date_updated: Any = None
        self._status: tuple[str, ...] | None = ("enabled",)
        self._structure_id: StructureRef = None
        self._with_structure: bool | None = None
        self._level: Any = None
        self._order_by: tuple[tuple[str, str], ...] | None = None
        self._limit: int | None = None
        self._offset: int | None = None

    # Parameters
    # -------------------------------------------------------------------------

    def id(self: Q, value: Any) -> Q:
        self._set("_id", value)
        return self

    def site_id(self: Q, value: int) -> Q:
        self._set("_site_id", value)
        return self

    def slug(self: Q, value: Any) -> Q:
        self._set("_slug", value)
        return self

    def uri(self: Q, value: Any) -> Q:
        self._set("_uri", value)
        return self

    def title(self: Q, value: Any) -> Q:
        self._set("_title", value)
        return self

    def date_created(self: Q, value: Any) -> Q:
        self._set("_date_created", value)
        return self

    def date_updated(self: Q, value: Any) -> Q:
        self._set("_date_updated", value)
        return self

    def status(self: Q, value: Any) -> Q:
        """Filter by status names.

        Args:
            value: Name, comma separated names, list of names, or None to
                disable status filtering.
        """
        if value is None:
            statuses = None
        elif isinstance(value, str):
            statuses = tuple(split_list(value)) or None
        elif is_list_like(value):
            statuses = tuple(str(v).strip() for v in value if str(v).strip()) or None
        else:
            raise InvalidParamError(f"Invalid status value: {value!r}")
        self._set("_status", statuses)
        return self

    def structure_id(self: Q, value: int | None) -> Q:
        self._set("_structure_id", value)
        return self

    def with_structure(self: Q, value: bool = True) -> Q:
        self._set("_with_structure", value)
        return self

    def level(self: Q, value: Any) -> Q:
        self._set("_level", value)
        return self

    def order_by(self: Q, value: str | Sequence[tuple[str, str]] | None) -> Q:
        """Set ordering, e.g. ``"entries.postDate desc, elements.id"``."""
        self._set("_order_by", _parse_order_by(value))
        return self

    def limit(self: Q, value: int | None) -> Q:
        self._set("_limit", value)
        return self

    def offset(self: Q, value: int | None) -> Q:
        self._set("_offset", value)
        return self

    # Preparation
    # -------------------------------------------------------------------------

    def status_resolver(self) -> StatusResolver:
        return element_status_resolver()

    def before_prepare(self, parts: QueryParts, context: QueryContext) -> bool:
        """Hook for element-specific joins and conditions.

        Returns:
            False to abort preparation (the query yields no rows).

        Raises:
            QueryAborted: Also aborts preparation.
        """
        return True

    def cache_tags(self) -> tuple[str, ...]:
        return ()

    def prepare(self, context: QueryContext) -> QueryDescriptor | None:
        """Derive the executable descriptor.

        The current instant is read from the context exactly once.

        Returns:
            Descriptor, or None when the query can match no rows.

        Raises:
            InvalidParamError: If a parameter cannot be compiled.
            UnknownStatusError: If a status name is not recognized.
        """
        if self._prepared:
            return self._descriptor

        parts = QueryParts(planner=JoinPlanner(), now=context.now())
        parts.planner.element_sites(self._site_id)
        parts.select(
            "elements.id",
            "elements.enabled",
            "elements.dateCreated",
            "elements.dateUpdated",
            "elements_sites.siteId",
            "elements_sites.slug",
            "elements_sites.uri",
            "elements_sites.title",
            "elements_sites.enabled AS enabledForSite",
        )

        try:
            proceed = self.before_prepare(parts, context)
        except QueryAborted as e:
            log.debug("%s aborted: %s", type(self).__name__, e)
            proceed = False

        descriptor = self._build(parts) if proceed else None
        if descriptor is None:
            log.debug("%s yields no rows", type(self).__name__)
        self._descriptor = descriptor
        self._prepared = True
        return descriptor

    def _build(self, parts: QueryParts) -> QueryDescriptor:
        parts.where(compile_numeric_param("elements.id", self._id))
        parts.where(compile_param("elements_sites.slug", self._slug))
        parts.where(compile_param("elements_sites.uri", self._uri))
        parts.where(compile_param("elements_sites.title", self._title))
        parts.where(compile_date_param("elements.dateCreated", self._date_created))
        parts.where(compile_date_param("elements.dateUpdated", self._date_updated))

        structured = self._with_structure is not False and is_structure_id(self._structure_id)
        if structured:
            parts.planner.structure(self._structure_id)
            parts.select("structureelements.lft", "structureelements.level")
            parts.where(compile_numeric_param("structureelements.level", self._level))
        elif self._level is not None:
            log.debug("Ignoring level filter on a query without structure")

        if self._status is not None:
            parts.where(self.status_resolver().conditions(self._status, parts.now))

        if self._order_by is not None:
            order_by = self._order_by
        elif structured:
            order_by = (("structureelements.lft", "ASC"),)
        else:
            order_by = self.default_order_by

        return QueryDescriptor(
            table="elements",
            alias="elements",
            joins=parts.planner.joins,
            columns=tuple(parts.columns),
            where=and_(*parts.conditions),
            order_by=order_by,
            limit=self._limit,
            offset=self._offset,
            distinct=parts.planner.distinct,
            cache_tags=self.cache_tags(),
        )

    def _set(self, attr: str, value: Any) -> None:
        if self._prepared:
            raise RuntimeError(f"{type(self).__name__} has already been prepared")
        setattr(self, attr, value)


def _parse_order_by(value: str | Sequence[tuple[str, str]] | None) -> tuple[tuple[str, str], ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        pairs = []
        for item in split_list(value):
            tokens = item.split()
            direction = tokens[1] if len(tokens) > 1 else "ASC"
            pairs.append((tokens[0], direction))
    else:
        pairs = [(column, direction) for column, direction in value]

    out: list[tuple[str, str]] = []
    for column, direction in pairs:
        direction = direction.upper()
        if not _RE_COLUMN.match(column) or direction not in ("ASC", "DESC"):
            raise InvalidParamError(f"Invalid order: {column} {direction}")
        out.append((column, direction))
    return tuple(out)

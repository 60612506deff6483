"""Command implementations for the ContentQuery CLI.

Encapsulates business logic for commands, separated from CLI parameter
handling and output formatting.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ContentQuery.config import AppConfig
from ContentQuery.query.context import QueryContext
from ContentQuery.query.entry import EntryQuery
from ContentQuery.storage import Storage
from ContentQuery.storage.cache import entry_invalidation_tags
from ContentQuery.utils.log import log


@dataclass(frozen=True, slots=True)
class EntryFilters:
    """Entry filters collected from command-line options."""

    section: tuple[str, ...] = ()
    type: tuple[str, ...] = ()
    author_id: tuple[int, ...] = ()
    author_group: tuple[str, ...] = ()
    status: tuple[str, ...] = ()
    any_status: bool = False
    post_date: str | None = None
    before: str | None = None
    after: str | None = None
    expiry_date: str | None = None
    ref: str | None = None
    slug: str | None = None
    editable: bool = False
    order_by: str | None = None
    limit: int | None = None
    offset: int | None = None


def build_entry_query(filters: EntryFilters, config: AppConfig, storage: Storage) -> EntryQuery:
    """Translate command-line filters into an ``EntryQuery``."""
    query = EntryQuery(
        storage.lookup,
        site_id=config.query.site_id,
        ref_delimiter=config.query.ref_delimiter,
    )
    if filters.section:
        query.section(list(filters.section))
    if filters.type:
        query.type(list(filters.type))
    if filters.author_id:
        query.author_id(list(filters.author_id))
    if filters.author_group:
        query.author_group(list(filters.author_group))
    if filters.any_status:
        query.status(None)
    elif filters.status:
        query.status(list(filters.status))
    if filters.post_date:
        query.post_date(filters.post_date)
    if filters.before:
        query.before(filters.before)
    if filters.after:
        query.after(filters.after)
    if filters.expiry_date:
        query.expiry_date(filters.expiry_date)
    if filters.ref:
        query.ref(filters.ref)
    if filters.slug:
        query.slug(filters.slug)
    if filters.editable:
        query.editable()
    if filters.order_by:
        query.order_by(filters.order_by)

    limit = filters.limit
    if limit is None and config.query.default_limit != -1:
        limit = config.query.default_limit
    query.limit(limit)
    query.offset(filters.offset)
    return query


@dataclass(slots=True)
class EntriesCommand:
    """Query entries and render them as JSON, a count, or the SQL."""

    config: AppConfig
    storage: Storage
    filters: EntryFilters
    username: str | None = None
    show_sql: bool = False
    count: bool = False

    def execute(self) -> str:
        context = self._context()
        query = build_entry_query(self.filters, self.config, self.storage)

        if self.show_sql:
            descriptor = query.prepare(context)
            if descriptor is None:
                return "-- query matches no rows"
            sql, params = descriptor.to_sql()
            return f"{sql}\n-- params: {json.dumps(params, default=str)}\n-- tags: {list(descriptor.cache_tags)}"

        if self.count:
            total = self.storage.executor.count(query, context)
            log.info("Matched %d entries", total)
            return str(total)

        rows = self.storage.executor.all(query, context)
        log.info("Fetched %d entries", len(rows))
        return json.dumps(rows, indent=2, ensure_ascii=False, default=str)

    def _context(self) -> QueryContext:
        actor = None
        if self.username:
            actor = self.storage.permissions.load_actor(self.username)
            if actor is None:
                raise ValueError(f"Unknown user: {self.username}")
        return QueryContext(
            permissions=self.storage.permissions,
            actor=actor,
            edition=self.config.query.edition,
        )


@dataclass(slots=True)
class InvalidateCommand:
    """Drop cached query results by tag."""

    storage: Storage
    section_ids: tuple[int, ...] = ()
    type_ids: tuple[int, ...] = ()
    tags: tuple[str, ...] = field(default=())

    def execute(self) -> str:
        if self.storage.cache is None:
            log.warning("Query cache is disabled; nothing to invalidate")
            return "0"
        all_tags: list[Any] = list(self.tags)
        for section_id in self.section_ids:
            all_tags.extend(entry_invalidation_tags(section_id=section_id))
        for type_id in self.type_ids:
            all_tags.extend(entry_invalidation_tags(type_id=type_id))
        removed = self.storage.cache.invalidate_tags(all_tags)
        log.info("Invalidated %d cached results", removed)
        return str(removed)

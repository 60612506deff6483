"""Entry query.

Extends the base element query with section/type/author filters, post and
expiry dates, entry statuses, editable scoping and reference tokens.

Preparation order
1. Normalize section and type ids.
2. Stop if section, type or author group resolved to nothing.
3. Join ``entries`` and select its columns.
4. ``postDate`` if set, otherwise ``before`` / ``after``.
5. ``expiryDate``.
6. Type ids.
7. Author and author group (PRO edition only).
8. Editable scoping.
9. Section ids and the derived structure id.
10. Reference tokens.
11. Base element preparation.
"""

from __future__ import annotations

from typing import Any

from ContentQuery.core.errors import QueryAborted
from ContentQuery.core.models import SECTION_SINGLE, STATUS_LIVE, Section
from ContentQuery.core.predicates import Compare, Not, or_
from ContentQuery.query.compiler import compile_date_param, compile_numeric_param
from ContentQuery.query.context import Lookup, QueryContext
from ContentQuery.query.element import ElementQuery, QueryParts
from ContentQuery.query.joins import author_filters_enabled
from ContentQuery.query.normalize import IdParam, normalize_ids
from ContentQuery.query.refs import resolve_refs
from ContentQuery.query.status import StatusResolver, entry_status_resolver
from ContentQuery.utils.log import log


class EntryQuery(ElementQuery):
    """Fluent, deferred query for entries.

    Example:
        query = (
            EntryQuery(lookup)
            .section("news")
            .after("2026-01-01")
            .status(["live", "pending"])
            .limit(10)
        )
        descriptor = query.prepare(context)
    """

    default_order_by = (("entries.postDate", "DESC"),)

    def __init__(self, lookup: Lookup, *, site_id: int = 1, ref_delimiter: str = ",") -> None:
        super().__init__(lookup, site_id=site_id)
        self.ref_delimiter = ref_delimiter
        self._status = (STATUS_LIVE,)
        self._with_structure = True

        self._section_id: Any = None
        self._type_id: Any = None
        self._author_id: Any = None
        self._author_group_id: IdParam = IdParam.unset()
        self._post_date: Any = None
        self._before: Any = None
        self._after: Any = None
        self._expiry_date: Any = None
        self._editable = False
        self._ref: Any = None

    # Parameters
    # -------------------------------------------------------------------------

    def editable(self, value: bool = True) -> EntryQuery:
        """Only return entries the acting user may edit."""
        self._set("_editable", value)
        return self

    def section(self, value: Any) -> EntryQuery:
        """Filter by section handle(s) or ``Section`` object(s).

        Passing a ``Section`` also settles the structure: its structure id is
        used, or structure-aware behavior is turned off.
        """
        if isinstance(value, Section):
            self._set("_section_id", IdParam.of([value.id]))
            if value.structure_id:
                self._set("_structure_id", value.structure_id)
            else:
                self._set("_with_structure", False)
        elif value is None:
            self._set("_section_id", None)
        else:
            self._set("_section_id", normalize_ids(value, lookup=self.lookup, table="sections", column="handle"))
        return self

    def section_id(self, value: Any) -> EntryQuery:
        self._set("_section_id", value)
        return self

    def type(self, value: Any) -> EntryQuery:
        """Filter by entry type handle(s) or ``EntryType`` object(s)."""
        if value is None:
            self._set("_type_id", None)
        else:
            self._set("_type_id", normalize_ids(value, lookup=self.lookup, table="entrytypes", column="handle"))
        return self

    def type_id(self, value: Any) -> EntryQuery:
        self._set("_type_id", value)
        return self

    def author_id(self, value: Any) -> EntryQuery:
        self._set("_author_id", value)
        return self

    def author_group(self, value: Any) -> EntryQuery:
        """Filter by the handle(s) of groups the author belongs to."""
        self._set(
            "_author_group_id",
            normalize_ids(value, lookup=self.lookup, table="usergroups", column="handle"),
        )
        return self

    def author_group_id(self, value: Any) -> EntryQuery:
        self._set(
            "_author_group_id",
            normalize_ids(value, lookup=self.lookup, table="usergroups", column="id"),
        )
        return self

    def post_date(self, value: Any) -> EntryQuery:
        """Filter by post date; when set, ``before`` and ``after`` are ignored."""
        self._set("_post_date", value)
        return self

    def before(self, value: Any) -> EntryQuery:
        self._set("_before", value)
        return self

    def after(self, value: Any) -> EntryQuery:
        self._set("_after", value)
        return self

    def expiry_date(self, value: Any) -> EntryQuery:
        self._set("_expiry_date", value)
        return self

    def ref(self, value: Any) -> EntryQuery:
        """Filter by ``slug`` or ``sectionHandle/slug`` reference tokens."""
        self._set("_ref", value)
        return self

    # Preparation
    # -------------------------------------------------------------------------

    def status_resolver(self) -> StatusResolver:
        return entry_status_resolver()

    def before_prepare(self, parts: QueryParts, context: QueryContext) -> bool:
        self._section_id = normalize_ids(self._section_id, lookup=self.lookup, table="sections")
        self._type_id = normalize_ids(self._type_id, lookup=self.lookup, table="entrytypes")

        if self._section_id.is_empty or self._type_id.is_empty or self._author_group_id.is_empty:
            log.debug("Entry query short-circuited: section, type or author group matched nothing")
            return False

        parts.planner.element_table("entries")
        parts.select(
            "entries.sectionId",
            "entries.typeId",
            "entries.authorId",
            "entries.postDate",
            "entries.expiryDate",
        )

        if self._post_date:
            parts.where(compile_date_param("entries.postDate", self._post_date))
        else:
            if self._before:
                parts.where(compile_date_param("entries.postDate", self._before, "<"))
            if self._after:
                parts.where(compile_date_param("entries.postDate", self._after, ">="))

        if self._expiry_date:
            parts.where(compile_date_param("entries.expiryDate", self._expiry_date))

        if self._type_id.has_ids:
            parts.where(compile_numeric_param("entries.typeId", list(self._type_id.ids)))

        if author_filters_enabled(context.edition):
            if self._author_id:
                parts.where(compile_numeric_param("entries.authorId", self._author_id))
            if self._author_group_id.has_ids:
                parts.where(parts.planner.author_groups(self._author_group_id.ids))
        elif self._author_id or self._author_group_id.has_ids:
            log.debug("Ignoring author filters for the %s edition", context.edition.value)

        self._apply_editable(parts, context)
        self._apply_section_id(parts)
        self._apply_ref(parts)
        return True

    def cache_tags(self) -> tuple[str, ...]:
        """Invalidation tags, type-level when types are known, else section-level."""
        if isinstance(self._type_id, IdParam) and self._type_id.has_ids:
            return tuple(f"entryType:{type_id}" for type_id in self._type_id.ids)
        if isinstance(self._section_id, IdParam) and self._section_id.has_ids:
            return tuple(f"section:{section_id}" for section_id in self._section_id.ids)
        return ()

    def _apply_editable(self, parts: QueryParts, context: QueryContext) -> None:
        if not self._editable:
            return
        actor = context.actor
        if actor is None:
            raise QueryAborted("editable entries require an authenticated actor")

        section_ids = sorted(context.permissions.editable_section_ids(actor))
        if not section_ids:
            raise QueryAborted(f"user {actor.id} cannot edit any section")
        parts.where(compile_numeric_param("entries.sectionId", section_ids))

        # Without editPeerEntries the actor only sees their own entries in that section.
        for section in context.permissions.editable_sections(actor):
            if section.type != SECTION_SINGLE and not actor.can_edit_peer_content(section):
                parts.where(
                    or_(
                        Not(Compare("entries.sectionId", "=", section.id)),
                        Compare("entries.authorId", "=", actor.id),
                    )
                )

    def _apply_section_id(self, parts: QueryParts) -> None:
        if not self._section_id.has_ids:
            return
        section_ids = self._section_id.ids
        parts.where(compile_numeric_param("entries.sectionId", list(section_ids)))

        if self._structure_id is None and self._with_structure is not False and len(section_ids) == 1:
            self._structure_id = parts.planner.resolve_structure_id(section_ids, self.lookup)
            log.debug("Section %d structure: %s", section_ids[0], self._structure_id)

    def _apply_ref(self, parts: QueryParts) -> None:
        if not self._ref:
            return
        condition = resolve_refs(self._ref, self.ref_delimiter)
        if condition.predicate is None:
            return
        parts.where(condition.predicate)
        if condition.join_sections:
            parts.planner.sections()

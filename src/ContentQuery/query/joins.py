"""Join planning for element queries."""

from __future__ import annotations

from typing import Literal, Sequence, Union

from ContentQuery.core.models import SECTION_STRUCTURE, Edition
from ContentQuery.core.predicates import ColumnCompare, Compare, Join, Predicate, and_
from ContentQuery.query.compiler import compile_numeric_param
from ContentQuery.query.context import Lookup

# None: not decided yet, False: definitely not structured, int: structure id.
StructureRef = Union[int, Literal[False], None]


def author_filters_enabled(edition: Edition) -> bool:
    """Author and author-group filters only apply to the PRO edition."""
    return edition is Edition.PRO


def is_structure_id(value: StructureRef) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class JoinPlanner:
    """Collects the joins one preparation pass needs.

    Joins are kept in registration order and de-duplicated by alias, so
    several filters may request the same relation.
    """

    def __init__(self) -> None:
        self._joins: dict[str, Join] = {}
        self.distinct = False

    @property
    def joins(self) -> tuple[Join, ...]:
        return tuple(self._joins.values())

    def require(self, join: Join) -> None:
        self._joins.setdefault(join.alias, join)

    def element_sites(self, site_id: int) -> None:
        self.require(
            Join(
                "INNER",
                "elements_sites",
                "elements_sites",
                and_(
                    ColumnCompare("elements_sites.elementId", "=", "elements.id"),
                    Compare("elements_sites.siteId", "=", site_id),
                ),
            )
        )

    def element_table(self, table: str) -> None:
        self.require(Join("INNER", table, table, ColumnCompare(f"{table}.id", "=", "elements.id")))

    def author_groups(self, group_ids: Sequence[int]) -> Predicate:
        """Join group memberships of the entry author and filter by group.

        An author may belong to several matching groups, so the query is
        marked distinct.
        """
        self.require(
            Join(
                "INNER",
                "usergroups_users",
                "usergroups_users",
                ColumnCompare("usergroups_users.userId", "=", "entries.authorId"),
            )
        )
        self.distinct = True
        return compile_numeric_param("usergroups_users.groupId", list(group_ids))

    def sections(self) -> None:
        self.require(
            Join("INNER", "sections", "sections", ColumnCompare("sections.id", "=", "entries.sectionId"))
        )

    def structure(self, structure_id: int) -> None:
        self.require(
            Join(
                "LEFT",
                "structureelements",
                "structureelements",
                and_(
                    ColumnCompare("structureelements.elementId", "=", "elements.id"),
                    Compare("structureelements.structureId", "=", structure_id),
                ),
            )
        )

    @staticmethod
    def resolve_structure_id(section_ids: Sequence[int], lookup: Lookup) -> StructureRef:
        """Look up the structure of the sections being queried.

        Returns:
            The structure id, or False when the section is not a structure
            section (structure-aware behavior is then disabled).
        """
        value = lookup.scalar(
            "sections",
            "structureId",
            and_(
                compile_numeric_param("id", list(section_ids)),
                Compare("type", "=", SECTION_STRUCTURE),
            ),
        )
        return int(value) if value else False

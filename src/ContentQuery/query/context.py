"""Collaborators consulted while preparing a query.

Queries never read ambient global state: the acting user, licensing edition
and clock are passed in through ``QueryContext``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol, Sequence

from ContentQuery.core.models import Actor, Edition, Section
from ContentQuery.core.predicates import Predicate


class Lookup(Protocol):
    """Tabular reads used for handle resolution and structure lookups."""

    def column(self, table: str, column: str, where: Optional[Predicate]) -> list[Any]:
        """Return one column of every matching row."""

    def scalar(self, table: str, column: str, where: Optional[Predicate]) -> Any:
        """Return the first matching value, or None."""


class SectionPermissions(Protocol):
    """Enumerates the sections an actor may edit."""

    def editable_section_ids(self, actor: Actor) -> set[int]:
        ...

    def editable_sections(self, actor: Actor) -> Sequence[Section]:
        ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class QueryContext:
    """Per-fetch environment for ``prepare()``.

    Attributes:
        permissions: Editable-section enumerator.
        actor: Authenticated user, or None for anonymous access.
        edition: Installation edition; author filters require PRO.
        clock: Returns the current instant. Called once per preparation.
    """

    permissions: SectionPermissions
    actor: Optional[Actor] = None
    edition: Edition = Edition.PRO
    clock: Callable[[], datetime] = field(default=utc_now)

    def now(self) -> datetime:
        return self.clock()

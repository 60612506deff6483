"""Element query builders.

Queries collect filter parameters through chained setters and are turned
into a ``QueryDescriptor`` by ``prepare(context)``.
"""

from __future__ import annotations

from ContentQuery.query.context import Lookup, QueryContext, SectionPermissions
from ContentQuery.query.element import ElementQuery
from ContentQuery.query.entry import EntryQuery
from ContentQuery.query.normalize import IdParam, IdState
from ContentQuery.query.status import StatusResolver

__all__ = [
    "ElementQuery",
    "EntryQuery",
    "IdParam",
    "IdState",
    "Lookup",
    "QueryContext",
    "SectionPermissions",
    "StatusResolver",
]

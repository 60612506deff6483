"""Reference token resolution.

A reference is ``slug`` or ``sectionHandle/slug``. Several references match
disjunctively.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ContentQuery.core.params import Literal, is_list_like, split_list
from ContentQuery.core.predicates import Predicate, and_, or_
from ContentQuery.query.compiler import compile_param


@dataclass(frozen=True, slots=True)
class RefCondition:
    predicate: Optional[Predicate]
    join_sections: bool = False


def resolve_refs(refs: Any, delimiter: str = ",") -> RefCondition:
    """Compile reference tokens into one predicate.

    Args:
        refs: Delimited string or list of tokens.
        delimiter: Separator used when ``refs`` is a string.

    Returns:
        Combined condition. ``join_sections`` is set when any token carries a
        section handle.
    """
    if not refs:
        return RefCondition(None)
    if isinstance(refs, str):
        tokens = split_list(refs, delimiter)
    elif is_list_like(refs):
        tokens = [str(token) for token in refs]
    else:
        tokens = [str(refs)]

    conditions: list[Optional[Predicate]] = []
    join_sections = False
    for token in tokens:
        # Parts are literals and are never split again.
        parts = [Literal(part.strip()) for part in token.split("/") if part.strip()]
        if not parts:
            continue
        if len(parts) == 1:
            conditions.append(compile_param("elements_sites.slug", parts[0]))
        else:
            conditions.append(
                and_(
                    compile_param("sections.handle", parts[0]),
                    compile_param("elements_sites.slug", parts[1]),
                )
            )
            join_sections = True

    return RefCondition(or_(*conditions), join_sections)

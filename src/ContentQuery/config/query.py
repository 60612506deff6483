"""Query domain configuration: edition, site and parameter defaults."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ContentQuery.config.common import (
    expect_choice,
    expect_int,
    expect_str,
    get_optional_value,
    get_section,
)
from ContentQuery.core.models import Edition

_EDITIONS = {edition.value for edition in Edition}


@dataclass(frozen=True, slots=True)
class QueryConfig:
    """Store validated query defaults.

    Attributes:
        edition: Installation edition; author filters need ``pro``.
        site_id: Site whose element rows are queried.
        ref_delimiter: Separator for reference token strings.
        default_limit: Row limit applied by the CLI, -1 for none.
    """

    edition: Edition
    site_id: int
    ref_delimiter: str
    default_limit: int


def load_query(raw: Mapping[str, Any]) -> QueryConfig:
    """Load query domain config from raw mapping.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If the edition is unknown.
    """
    section = get_section(raw, "query", required=False)
    edition = expect_choice(get_optional_value(section, "edition", "pro"), _EDITIONS, "query.edition")
    return QueryConfig(
        edition=Edition.parse(edition),
        site_id=expect_int(get_optional_value(section, "site_id", 1), "query.site_id"),
        ref_delimiter=expect_str(get_optional_value(section, "ref_delimiter", ","), "query.ref_delimiter"),
        default_limit=expect_int(get_optional_value(section, "default_limit", 100), "query.default_limit"),
    )


def check_query(config: QueryConfig) -> None:
    """Validate query domain constraints."""
    if config.site_id <= 0:
        raise ValueError("query.site_id must be positive")
    if not config.ref_delimiter or config.ref_delimiter == "/":
        raise ValueError("query.ref_delimiter must be a non-empty string other than '/'")
    if config.default_limit == 0 or config.default_limit < -1:
        raise ValueError("query.default_limit must be -1 or positive")

"""Storage domain configuration for the database and the query cache."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ContentQuery.config.common import (
    expect_bool,
    expect_int,
    expect_str,
    get_optional_value,
    get_required_value,
    get_section,
)


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Storage configuration.

    Attributes:
        db_path: SQLite database file (or ``:memory:``).
        cache_enabled: Whether query results are cached.
        cache_duration: Seconds a cached result lives; 0 means until invalidated.
    """

    db_path: str
    cache_enabled: bool
    cache_duration: int


def load_storage(raw: Mapping[str, Any]) -> StorageConfig:
    """Load storage domain config from raw mapping."""
    storage_section = get_section(raw, "storage", required=True)
    cache_section = get_section(raw, "cache", required=False)
    return StorageConfig(
        db_path=expect_str(get_required_value(storage_section, "db_path", "storage.db_path"), "storage.db_path"),
        cache_enabled=expect_bool(get_optional_value(cache_section, "enabled", True), "cache.enabled"),
        cache_duration=expect_int(get_optional_value(cache_section, "duration", 0), "cache.duration"),
    )


def check_storage(config: StorageConfig) -> None:
    """Validate storage domain constraints."""
    if not config.db_path.strip():
        raise ValueError("storage.db_path must not be empty")
    if config.cache_duration < 0:
        raise ValueError("cache.duration must be 0 or positive")

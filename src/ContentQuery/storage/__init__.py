"""Storage layer for ContentQuery.

Provides the SQLite database, schema migrations, the lookup and permission
collaborators used while preparing queries, query execution and the
tag-aware result cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ContentQuery.storage.cache import SqliteQueryCache
from ContentQuery.storage.content import ContentStore
from ContentQuery.storage.db import DatabaseManager
from ContentQuery.storage.executor import QueryExecutor
from ContentQuery.storage.lookup import SqliteLookup
from ContentQuery.storage.migration import run_migrations
from ContentQuery.storage.permissions import SqliteSectionPermissions
from ContentQuery.utils.log import log

if TYPE_CHECKING:
    from ContentQuery.config import AppConfig


@dataclass(slots=True)
class Storage:
    """Storage components sharing one database connection."""

    db_manager: DatabaseManager
    lookup: SqliteLookup
    permissions: SqliteSectionPermissions
    executor: QueryExecutor
    cache: SqliteQueryCache | None


def create_storage(config: AppConfig) -> Storage:
    """Create database manager and storage components from configuration.

    Args:
        config: Application configuration containing storage settings.

    Returns:
        Storage components. ``cache`` is None when caching is disabled.
    """
    db_path = Path(config.storage.db_path)
    db_manager = DatabaseManager(db_path)
    conn = db_manager.get_connection()
    log.info("Database: %s", db_path)

    cache = None
    if config.storage.cache_enabled:
        cache = SqliteQueryCache(conn, duration=config.storage.cache_duration)
        log.info("Query cache enabled (duration=%ds)", config.storage.cache_duration)

    return Storage(
        db_manager=db_manager,
        lookup=SqliteLookup(conn),
        permissions=SqliteSectionPermissions(conn),
        executor=QueryExecutor(conn, cache=cache),
        cache=cache,
    )


__all__ = [
    "ContentStore",
    "DatabaseManager",
    "QueryExecutor",
    "SqliteLookup",
    "SqliteQueryCache",
    "SqliteSectionPermissions",
    "Storage",
    "create_storage",
    "run_migrations",
]

"""Migration v002: tag-aware query result cache."""

from __future__ import annotations

from ContentQuery.storage.migration import Migration

MIGRATION = Migration(
    version=2,
    description="Query cache: cache, cache_tags",
    sql="""
        CREATE TABLE IF NOT EXISTS cache (
          key TEXT PRIMARY KEY,
          value TEXT NOT NULL,
          expire INTEGER
        );

        CREATE TABLE IF NOT EXISTS cache_tags (
          key TEXT NOT NULL REFERENCES cache(key) ON DELETE CASCADE,
          tag TEXT NOT NULL,
          PRIMARY KEY (key, tag)
        );

        CREATE INDEX IF NOT EXISTS idx_cache_tags_tag
          ON cache_tags(tag)
    """,
)

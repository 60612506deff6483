"""Tag-aware query result cache stored in the ``cache`` table.

Entries are keyed by a hash of the rendered SQL and parameters and carry
the cache tags of the query that produced them. Saving content invalidates
by tag; expired entries are ignored on read and removed lazily.
"""

from __future__ import annotations

import hashlib
import json
import sqlite3
import time
from typing import Any, Callable, Iterable, Optional, Sequence

from ContentQuery.utils.log import log

GLOBAL_TAG = "element"
# Carried by queries not narrowed to a section or entry type; every entry save drops it.
ANY_ENTRY_TAG = "element:*"


def cache_key(sql: str, params: Sequence[Any]) -> str:
    payload = json.dumps([sql, list(params)], default=str, sort_keys=True)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


def entry_invalidation_tags(*, section_id: int | None = None, type_id: int | None = None) -> list[str]:
    """Tags to invalidate after an entry in this section/type changes.

    Always includes ``ANY_ENTRY_TAG`` so unfiltered queries see the change.
    """
    tags = [ANY_ENTRY_TAG]
    if section_id is not None:
        tags.append(f"section:{section_id}")
    if type_id is not None:
        tags.append(f"entryType:{type_id}")
    return tags


class SqliteQueryCache:
    """Result cache with tag-based invalidation.

    Args:
        conn: SQLite connection with the cache tables migrated.
        duration: Seconds until an entry expires; 0 keeps entries until
            invalidated.
        clock: Returns the current unix time.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        *,
        duration: int = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.conn = conn
        self.duration = duration
        self.clock = clock

    def get(self, key: str) -> Optional[Any]:
        row = self.conn.execute("SELECT value, expire FROM cache WHERE key = ?", (key,)).fetchone()
        if not row:
            return None
        value, expire = row[0], row[1]
        if expire is not None and expire <= int(self.clock()):
            self._delete_keys([key])
            self.conn.commit()
            return None
        return json.loads(value)

    def set(self, key: str, value: Any, tags: Iterable[str]) -> None:
        expire = int(self.clock()) + self.duration if self.duration > 0 else None
        self.conn.execute(
            "INSERT OR REPLACE INTO cache (key, value, expire) VALUES (?, ?, ?)",
            (key, json.dumps(value, default=str), expire),
        )
        self.conn.execute("DELETE FROM cache_tags WHERE key = ?", (key,))
        self.conn.executemany(
            "INSERT OR IGNORE INTO cache_tags (key, tag) VALUES (?, ?)",
            [(key, tag) for tag in dict.fromkeys(tags)],
        )
        self.conn.commit()

    def invalidate_tags(self, tags: Iterable[str]) -> int:
        """Drop every entry carrying any of ``tags``.

        Returns:
            Number of cache entries removed.
        """
        tag_list = list(dict.fromkeys(tags))
        if not tag_list:
            return 0
        placeholders = ",".join("?" for _ in tag_list)
        keys = [
            row[0]
            for row in self.conn.execute(
                f"SELECT DISTINCT key FROM cache_tags WHERE tag IN ({placeholders})",
                tag_list,
            )
        ]
        self._delete_keys(keys)
        self.conn.commit()
        log.debug("Invalidated %d cache entries for tags %s", len(keys), tag_list)
        return len(keys)

    def clear(self) -> None:
        self.conn.execute("DELETE FROM cache_tags")
        self.conn.execute("DELETE FROM cache")
        self.conn.commit()

    def _delete_keys(self, keys: Sequence[str]) -> None:
        if not keys:
            return
        placeholders = ",".join("?" for _ in keys)
        self.conn.execute(f"DELETE FROM cache_tags WHERE key IN ({placeholders})", list(keys))
        self.conn.execute(f"DELETE FROM cache WHERE key IN ({placeholders})", list(keys))

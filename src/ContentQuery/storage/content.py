"""Content write helpers for sections, entry types, users and entries."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, Iterable, Optional

from ContentQuery.core.models import (
    SECTION_STRUCTURE,
    Actor,
    EntryType,
    Section,
    UserGroup,
)
from ContentQuery.query.compiler import to_db_date
from ContentQuery.storage.cache import entry_invalidation_tags
from ContentQuery.utils.log import log

if TYPE_CHECKING:
    from ContentQuery.storage.cache import SqliteQueryCache
    from ContentQuery.storage.db import DatabaseManager


class ContentStore:
    """SQLite-backed writer for the content model.

    Saving an entry invalidates the cached queries tagged with its section
    and entry type.
    """

    def __init__(self, db_manager: DatabaseManager, cache: SqliteQueryCache | None = None):
        log.debug("Initializing ContentStore")
        self.conn = db_manager.get_connection()
        self.cache = cache

    def create_section(
        self,
        handle: str,
        type: str,
        *,
        name: str | None = None,
        uid: str | None = None,
        max_levels: int | None = None,
    ) -> Section:
        """Create a section; ``structure`` sections get their own structure."""
        structure_id = None
        if type == SECTION_STRUCTURE:
            cursor = self.conn.execute("INSERT INTO structures (maxLevels) VALUES (?)", (max_levels,))
            structure_id = cursor.lastrowid
        uid = uid or str(uuid.uuid4())
        cursor = self.conn.execute(
            "INSERT INTO sections (structureId, name, handle, type, uid) VALUES (?, ?, ?, ?, ?)",
            (structure_id, name or handle, handle, type, uid),
        )
        self.conn.commit()
        return Section(id=cursor.lastrowid, handle=handle, type=type, uid=uid, structure_id=structure_id)

    def create_entry_type(self, section_id: int, handle: str, *, name: str | None = None) -> EntryType:
        cursor = self.conn.execute(
            "INSERT INTO entrytypes (sectionId, name, handle) VALUES (?, ?, ?)",
            (section_id, name or handle, handle),
        )
        self.conn.commit()
        return EntryType(id=cursor.lastrowid, handle=handle, section_id=section_id)

    def create_user(self, username: str, *, admin: bool = False, permissions: Iterable[str] = ()) -> Actor:
        cursor = self.conn.execute(
            "INSERT INTO users (username, admin) VALUES (?, ?)",
            (username, int(admin)),
        )
        user_id = cursor.lastrowid
        names = list(dict.fromkeys(p.lower() for p in permissions))
        self.conn.executemany(
            "INSERT INTO user_permissions (userId, name) VALUES (?, ?)",
            [(user_id, name) for name in names],
        )
        self.conn.commit()
        return Actor(id=user_id, username=username, admin=admin, permissions=frozenset(names))

    def create_group(self, handle: str, *, name: str | None = None) -> UserGroup:
        cursor = self.conn.execute(
            "INSERT INTO usergroups (name, handle) VALUES (?, ?)",
            (name or handle, handle),
        )
        self.conn.commit()
        return UserGroup(id=cursor.lastrowid, handle=handle)

    def add_user_to_group(self, user_id: int, group_id: int) -> None:
        self.conn.execute(
            "INSERT OR IGNORE INTO usergroups_users (groupId, userId) VALUES (?, ?)",
            (group_id, user_id),
        )
        self.conn.commit()

    def save_entry(
        self,
        section: Section,
        type_id: int,
        *,
        title: str,
        slug: str,
        author_id: Optional[int] = None,
        post_date: Any = None,
        expiry_date: Any = None,
        enabled: bool = True,
        enabled_for_site: bool = True,
        site_id: int = 1,
        uri: str | None = None,
    ) -> int:
        """Insert a new entry and return its element id.

        Dates accept anything the date parameters accept and are stored in
        the canonical UTC format.
        """
        cursor = self.conn.execute(
            "INSERT INTO elements (type, enabled) VALUES ('entry', ?)",
            (int(enabled),),
        )
        element_id = cursor.lastrowid
        self.conn.execute(
            """
            INSERT INTO elements_sites (elementId, siteId, title, slug, uri, enabled)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (element_id, site_id, title, slug, uri, int(enabled_for_site)),
        )
        self.conn.execute(
            """
            INSERT INTO entries (id, sectionId, typeId, authorId, postDate, expiryDate)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                element_id,
                section.id,
                type_id,
                author_id,
                to_db_date(post_date) if post_date is not None else None,
                to_db_date(expiry_date) if expiry_date is not None else None,
            ),
        )
        if section.structure_id:
            self._append_to_structure(section.structure_id, element_id)
        self.conn.commit()

        if self.cache is not None:
            self.cache.invalidate_tags(entry_invalidation_tags(section_id=section.id, type_id=type_id))
        log.debug("Saved entry %d in section %s", element_id, section.handle)
        return element_id

    def _append_to_structure(self, structure_id: int, element_id: int) -> None:
        row = self.conn.execute(
            "SELECT COALESCE(MAX(rgt), 0) FROM structureelements WHERE structureId = ?",
            (structure_id,),
        ).fetchone()
        lft = row[0] + 1
        self.conn.execute(
            """
            INSERT INTO structureelements (structureId, elementId, lft, rgt, level)
            VALUES (?, ?, ?, ?, 1)
            """,
            (structure_id, element_id, lft, lft + 1),
        )

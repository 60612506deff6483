"""Section edit permissions backed by the ``user_permissions`` table.

Permission names follow ``editEntries:<section uid>`` and
``editPeerEntries:<section uid>``; admins may edit every section.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from ContentQuery.core.models import Actor, Section


class SqliteSectionPermissions:
    """Enumerate the sections an actor may edit."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def editable_sections(self, actor: Actor) -> list[Section]:
        return [section for section in self.all_sections() if actor.can_edit_content(section)]

    def editable_section_ids(self, actor: Actor) -> set[int]:
        return {section.id for section in self.editable_sections(actor)}

    def all_sections(self) -> list[Section]:
        cursor = self.conn.execute(
            "SELECT id, handle, type, uid, structureId FROM sections ORDER BY id"
        )
        return [
            Section(id=row[0], handle=row[1], type=row[2], uid=row[3], structure_id=row[4])
            for row in cursor
        ]

    def load_actor(self, username: str) -> Optional[Actor]:
        """Load a user and their permissions, or None if unknown."""
        row = self.conn.execute(
            "SELECT id, username, admin FROM users WHERE username = ?",
            (username,),
        ).fetchone()
        if not row:
            return None
        names = self.conn.execute(
            "SELECT name FROM user_permissions WHERE userId = ?",
            (row[0],),
        )
        return Actor(
            id=row[0],
            username=row[1],
            admin=bool(row[2]),
            permissions=frozenset(name[0] for name in names),
        )

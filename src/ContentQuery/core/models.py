from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


SECTION_SINGLE = "single"
SECTION_CHANNEL = "channel"
SECTION_STRUCTURE = "structure"

STATUS_LIVE = "live"
STATUS_PENDING = "pending"
STATUS_EXPIRED = "expired"
STATUS_ENABLED = "enabled"
STATUS_DISABLED = "disabled"


class Edition(Enum):
    """Licensing tier of the installation."""

    SOLO = "solo"
    PRO = "pro"

    @classmethod
    def parse(cls, value: str) -> Edition:
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown edition: {value}") from None


@dataclass(frozen=True, slots=True)
class Section:
    """A content section.

    Attributes:
        id: Primary key.
        handle: Unique human-readable handle.
        type: One of ``single``, ``channel`` or ``structure``.
        uid: Stable identifier used in permission names.
        structure_id: Structure backing a ``structure`` section, if any.
    """

    id: int
    handle: str
    type: str
    uid: str
    structure_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class EntryType:
    id: int
    handle: str
    section_id: int


@dataclass(frozen=True, slots=True)
class UserGroup:
    id: int
    handle: str


@dataclass(frozen=True, slots=True)
class Actor:
    """An authenticated user performing a query.

    Permission names are compared case-insensitively; admins hold every
    permission.
    """

    id: int
    username: str
    admin: bool = False
    permissions: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "permissions", frozenset(p.lower() for p in self.permissions))

    def can(self, permission: str) -> bool:
        return self.admin or permission.lower() in self.permissions

    def can_edit_content(self, section: Section) -> bool:
        return self.can(f"editEntries:{section.uid}")

    def can_edit_peer_content(self, section: Section) -> bool:
        return self.can(f"editPeerEntries:{section.uid}")

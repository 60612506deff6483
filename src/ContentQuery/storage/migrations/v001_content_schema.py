"""Migration v001: content model (sections, entry types, users, elements, entries)."""

from __future__ import annotations

from ContentQuery.storage.migration import Migration

MIGRATION = Migration(
    version=1,
    description="Content schema: sections, structures, entry types, users, elements, entries",
    sql="""
        CREATE TABLE IF NOT EXISTS structures (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          maxLevels INTEGER
        );

        CREATE TABLE IF NOT EXISTS sections (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          structureId INTEGER REFERENCES structures(id) ON DELETE SET NULL,
          name TEXT NOT NULL,
          handle TEXT NOT NULL UNIQUE,
          type TEXT NOT NULL CHECK (type IN ('single', 'channel', 'structure')),
          uid TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS entrytypes (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          sectionId INTEGER NOT NULL REFERENCES sections(id) ON DELETE CASCADE,
          name TEXT NOT NULL,
          handle TEXT NOT NULL,
          UNIQUE(sectionId, handle)
        );

        CREATE TABLE IF NOT EXISTS users (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          username TEXT NOT NULL UNIQUE,
          admin INTEGER NOT NULL DEFAULT 0
        );

        CREATE TABLE IF NOT EXISTS usergroups (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          name TEXT NOT NULL,
          handle TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS usergroups_users (
          groupId INTEGER NOT NULL REFERENCES usergroups(id) ON DELETE CASCADE,
          userId INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
          PRIMARY KEY (groupId, userId)
        );

        CREATE TABLE IF NOT EXISTS user_permissions (
          userId INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
          name TEXT NOT NULL,
          PRIMARY KEY (userId, name)
        );

        CREATE TABLE IF NOT EXISTS elements (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          type TEXT NOT NULL,
          enabled INTEGER NOT NULL DEFAULT 1,
          dateCreated TEXT NOT NULL DEFAULT (datetime('now')),
          dateUpdated TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS elements_sites (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          elementId INTEGER NOT NULL REFERENCES elements(id) ON DELETE CASCADE,
          siteId INTEGER NOT NULL DEFAULT 1,
          title TEXT,
          slug TEXT,
          uri TEXT,
          enabled INTEGER NOT NULL DEFAULT 1,
          UNIQUE(elementId, siteId)
        );

        CREATE TABLE IF NOT EXISTS entries (
          id INTEGER PRIMARY KEY REFERENCES elements(id) ON DELETE CASCADE,
          sectionId INTEGER NOT NULL REFERENCES sections(id) ON DELETE CASCADE,
          typeId INTEGER NOT NULL REFERENCES entrytypes(id) ON DELETE CASCADE,
          authorId INTEGER REFERENCES users(id) ON DELETE SET NULL,
          postDate TEXT,
          expiryDate TEXT
        );

        CREATE TABLE IF NOT EXISTS structureelements (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          structureId INTEGER NOT NULL REFERENCES structures(id) ON DELETE CASCADE,
          elementId INTEGER REFERENCES elements(id) ON DELETE CASCADE,
          lft INTEGER NOT NULL,
          rgt INTEGER NOT NULL,
          level INTEGER NOT NULL,
          UNIQUE(structureId, elementId)
        );

        CREATE INDEX IF NOT EXISTS idx_elements_sites_slug
          ON elements_sites(slug, siteId);

        CREATE INDEX IF NOT EXISTS idx_entries_section
          ON entries(sectionId);

        CREATE INDEX IF NOT EXISTS idx_entries_type
          ON entries(typeId);

        CREATE INDEX IF NOT EXISTS idx_entries_author
          ON entries(authorId);

        CREATE INDEX IF NOT EXISTS idx_entries_post_date
          ON entries(postDate);

        CREATE INDEX IF NOT EXISTS idx_entries_expiry_date
          ON entries(expiryDate);

        CREATE INDEX IF NOT EXISTS idx_structureelements_lft
          ON structureelements(structureId, lft)
    """,
)

"""SQLite database utilities."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ContentQuery.storage.migration import run_migrations


class DatabaseManager:
    """Shared database connection manager.

    Uses singleton pattern so lookups, permission checks, query execution and
    the result cache all share one connection per process.

    Supports context manager protocol for automatic connection cleanup.
    """

    _instance = None

    def __new__(cls, db_path: Path):
        """Create or return existing DatabaseManager instance.

        Args:
            db_path: Absolute path or project-relative path to database file,
                or ``:memory:``.

        Returns:
            DatabaseManager singleton instance with migrations applied.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.conn = ensure_db(db_path)
            run_migrations(cls._instance.conn)
        return cls._instance

    def get_connection(self) -> sqlite3.Connection:
        return self.conn

    def close(self) -> None:
        """Close the database connection and reset singleton instance."""
        if hasattr(self, "conn") and self.conn:
            self.conn.close()
            type(self)._instance = None

    def __enter__(self) -> DatabaseManager:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def ensure_db(db_path: Path) -> sqlite3.Connection:
    """Ensure database file exists and return connection.

    Rows are returned as ``sqlite3.Row`` and foreign keys are enforced.

    Args:
        db_path: Absolute path or project-relative path to database file.

    Returns:
        SQLite connection.

    Raises:
        OSError: If directory creation fails.
        sqlite3.Error: If database connection fails.
    """
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn

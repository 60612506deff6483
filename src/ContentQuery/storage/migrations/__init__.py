"""Versioned migration files for the ContentQuery SQLite schema.

Each module in this package must expose a single ``MIGRATION`` constant of
type :class:`~ContentQuery.storage.migration.Migration`.  Modules are
discovered and sorted automatically by
:func:`~ContentQuery.storage.migration.load_migrations`; file names should
follow the ``vNNN_<description>.py`` convention for readability.
"""

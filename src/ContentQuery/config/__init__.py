from __future__ import annotations

"""Public configuration API for ContentQuery."""

from ContentQuery.config.app import (
    AppConfig,
    load_config,
    load_config_with_defaults,
    merge_config_dicts,
    parse_config_dict,
)
from ContentQuery.config.query import QueryConfig
from ContentQuery.config.runtime import RuntimeConfig
from ContentQuery.config.storage import StorageConfig

__all__ = [
    "RuntimeConfig",
    "StorageConfig",
    "QueryConfig",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "merge_config_dicts",
    "parse_config_dict",
]

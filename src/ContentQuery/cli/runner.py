"""Command runner for coordinating CLI execution.

Manages component lifecycle, resource cleanup, logging configuration,
and error handling for command execution.
"""

from __future__ import annotations

from typing import Callable

import click

from ContentQuery.config import AppConfig
from ContentQuery.storage import Storage, create_storage
from ContentQuery.utils.log import configure_logging, log


class CommandRunner:
    """Orchestrates command execution with proper resource management.

    Handles logging configuration, storage creation, database context
    management, and error handling for CLI commands.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def run(self, action: str, command: Callable[[Storage], str]) -> str:
        """Execute a command with full resource management.

        Args:
            action: The CLI command name (e.g., 'entries').
            command: Callable receiving the storage components and returning
                the text to print.

        Returns:
            Command output.

        Raises:
            click.Abort: When the command fails.
        """
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        try:
            storage = create_storage(self.config)
            with storage.db_manager:
                return command(storage)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action, e)
            raise click.Abort from e

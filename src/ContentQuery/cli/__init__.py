"""CLI package for ContentQuery command orchestration.

This package contains the modular CLI components, factored into separate
modules for better maintainability and testability.
"""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from ContentQuery.cli.runner import CommandRunner
from ContentQuery.cli.ui import cli


def main() -> None:
    """Run the ContentQuery CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()

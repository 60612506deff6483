"""Smoke test for the ContentQuery CLI.

Run:
  python test/smoke_test.py

This script seeds a temporary database and validates that the CLI can run
an entry query and render at least one result.
"""

from __future__ import annotations

import json
import os
import sys
import tempfile
from pathlib import Path

import yaml
from click.testing import CliRunner


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
sys.path.insert(0, str(SRC_DIR))


def _make_runner() -> CliRunner:
    """Create CliRunner with best-effort stderr capture."""
    try:
        return CliRunner(mix_stderr=True)
    except TypeError:
        # Newer Click versions always mix stderr into output.
        return CliRunner()


def main() -> int:
    from ContentQuery.cli import cli
    from ContentQuery.storage import ContentStore, DatabaseManager

    os.chdir(REPO_ROOT)
    with tempfile.TemporaryDirectory() as tmp:
        db_path = Path(tmp) / "content.db"
        with DatabaseManager(db_path) as manager:
            store = ContentStore(manager)
            news = store.create_section("news", "channel")
            article = store.create_entry_type(news.id, "article")
            store.save_entry(news, article.id, title="Smoke Test Entry", slug="smoke", post_date="2025-01-01")

        config_path = Path(tmp) / "smoke.yml"
        config_path.write_text(
            yaml.safe_dump({"storage": {"db_path": str(db_path)}, "log": {"dir": str(Path(tmp) / "log")}}),
            encoding="utf-8",
        )

        runner = _make_runner()
        result = runner.invoke(
            cli,
            ["--config", str(config_path), "entries", "--section", "news"],
            catch_exceptions=False,
        )

    output = result.output
    assert result.exit_code == 0, output
    assert "Fetched 1 entries" in output, output
    assert "Smoke Test Entry" in output, output
    rows = json.loads(output[output.index("[\n"):])
    assert rows[0]["slug"] == "smoke", output
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

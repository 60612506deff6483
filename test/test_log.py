"""Tests for logger configuration."""

import logging
import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ContentQuery.utils.log import configure_logging, log


class TestConfigureLogging(unittest.TestCase):
    def tearDown(self) -> None:
        for handler in list(log.handlers):
            handler.close()
        log.handlers.clear()

    def test_file_handler_records_debug_with_abbreviated_level(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            configure_logging(level="WARNING", action="entries", log_to_file=True, log_dir=tmp)
            log.debug("short-circuited")
            log.warning("careful")
            for handler in log.handlers:
                handler.flush()

            files = list((Path(tmp) / "entries").glob("entries_*.log"))
            self.assertEqual(len(files), 1)
            text = files[0].read_text(encoding="utf-8")
            for handler in list(log.handlers):
                handler.close()
            log.handlers.clear()

        self.assertIn("[DEBG] short-circuited", text)
        self.assertIn("[WARN] careful", text)

    def test_console_handler_honours_level(self) -> None:
        configure_logging(level="ERROR", log_to_file=False)
        self.assertEqual(len(log.handlers), 1)
        self.assertEqual(log.handlers[0].level, logging.ERROR)
        self.assertFalse(log.propagate)


if __name__ == "__main__":
    unittest.main()

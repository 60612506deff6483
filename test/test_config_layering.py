"""Tests for layered config parsing and validation."""

import sys
import tempfile
import unittest
from copy import deepcopy
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ContentQuery.config import load_config, load_config_with_defaults, merge_config_dicts, parse_config_dict
from ContentQuery.core.models import Edition


def _base_raw_config() -> dict:
    return {
        "log": {"level": "info", "to_file": False, "dir": "log"},
        "storage": {"db_path": "database/content.db"},
        "cache": {"enabled": True, "duration": 0},
        "query": {"edition": "pro", "site_id": 1, "ref_delimiter": ",", "default_limit": 100},
    }


class TestConfigLayering(unittest.TestCase):
    def test_parse_success_nested_access(self) -> None:
        cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.storage.db_path, "database/content.db")
        self.assertTrue(cfg.storage.cache_enabled)
        self.assertIs(cfg.query.edition, Edition.PRO)
        self.assertEqual(cfg.query.default_limit, 100)

    def test_optional_sections_use_defaults(self) -> None:
        raw = _base_raw_config()
        del raw["cache"]
        del raw["query"]
        cfg = parse_config_dict(raw)
        self.assertTrue(cfg.storage.cache_enabled)
        self.assertEqual(cfg.storage.cache_duration, 0)
        self.assertIs(cfg.query.edition, Edition.PRO)
        self.assertEqual(cfg.query.ref_delimiter, ",")

    def test_missing_storage_section(self) -> None:
        raw = _base_raw_config()
        del raw["storage"]
        with self.assertRaisesRegex(ValueError, "storage"):
            parse_config_dict(raw)

    def test_edition_is_case_insensitive(self) -> None:
        raw = deepcopy(_base_raw_config())
        raw["query"]["edition"] = "Solo"
        self.assertIs(parse_config_dict(raw).query.edition, Edition.SOLO)

    def test_unknown_edition_error_contains_key(self) -> None:
        raw = deepcopy(_base_raw_config())
        raw["query"]["edition"] = "enterprise"
        with self.assertRaisesRegex(ValueError, "query\\.edition"):
            parse_config_dict(raw)

    def test_ref_delimiter_cannot_be_slash(self) -> None:
        raw = deepcopy(_base_raw_config())
        raw["query"]["ref_delimiter"] = "/"
        with self.assertRaisesRegex(ValueError, "query\\.ref_delimiter"):
            parse_config_dict(raw)

    def test_default_limit_constraint(self) -> None:
        raw = deepcopy(_base_raw_config())
        raw["query"]["default_limit"] = 0
        with self.assertRaisesRegex(ValueError, "query\\.default_limit"):
            parse_config_dict(raw)
        raw["query"]["default_limit"] = -1
        self.assertEqual(parse_config_dict(raw).query.default_limit, -1)

    def test_type_errors_contain_key(self) -> None:
        raw = deepcopy(_base_raw_config())
        raw["cache"]["duration"] = "10"
        with self.assertRaisesRegex(TypeError, "cache\\.duration"):
            parse_config_dict(raw)
        raw = deepcopy(_base_raw_config())
        raw["query"]["site_id"] = True
        with self.assertRaisesRegex(TypeError, "query\\.site_id"):
            parse_config_dict(raw)

    def test_invalid_log_level(self) -> None:
        raw = deepcopy(_base_raw_config())
        raw["log"]["level"] = "verbose"
        with self.assertRaisesRegex(ValueError, "log\\.level"):
            parse_config_dict(raw)

    def test_merge_is_deep(self) -> None:
        merged = merge_config_dicts(_base_raw_config(), {"query": {"edition": "solo"}})
        self.assertEqual(merged["query"]["edition"], "solo")
        self.assertEqual(merged["query"]["site_id"], 1)

    def test_override_file_is_merged_over_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            override = Path(tmp) / "override.yml"
            override.write_text("query:\n  edition: solo\ncache:\n  enabled: false\n", encoding="utf-8")
            cfg = load_config_with_defaults(override, default_path=REPO_ROOT / "config" / "default.yml")
        self.assertIs(cfg.query.edition, Edition.SOLO)
        self.assertFalse(cfg.storage.cache_enabled)
        self.assertEqual(cfg.storage.db_path, "database/content.db")

    def test_load_single_file(self) -> None:
        cfg = load_config(REPO_ROOT / "config" / "default.yml")
        self.assertEqual(cfg.query.site_id, 1)
        self.assertEqual(cfg.query.default_limit, 100)


if __name__ == "__main__":
    unittest.main()

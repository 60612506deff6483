"""Tests for the tag-aware query cache and cached query execution."""

import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ContentQuery.query import EntryQuery, QueryContext
from ContentQuery.storage import (
    ContentStore,
    DatabaseManager,
    QueryExecutor,
    SqliteLookup,
    SqliteQueryCache,
    SqliteSectionPermissions,
)
from ContentQuery.storage.cache import ANY_ENTRY_TAG, GLOBAL_TAG, cache_key, entry_invalidation_tags

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestSqliteQueryCache(unittest.TestCase):
    def setUp(self) -> None:
        self.manager = DatabaseManager(Path(":memory:"))
        self.now = [1000.0]
        self.cache = SqliteQueryCache(self.manager.get_connection(), clock=lambda: self.now[0])

    def tearDown(self) -> None:
        self.manager.close()

    def test_set_and_get(self) -> None:
        self.assertIsNone(self.cache.get("missing"))
        self.cache.set("k", [{"id": 1, "slug": "a"}], ["section:1"])
        self.assertEqual(self.cache.get("k"), [{"id": 1, "slug": "a"}])

    def test_invalidate_by_tag(self) -> None:
        self.cache.set("a", [1], ["section:1", GLOBAL_TAG])
        self.cache.set("b", [2], ["section:2", GLOBAL_TAG])
        self.assertEqual(self.cache.invalidate_tags(["section:1"]), 1)
        self.assertIsNone(self.cache.get("a"))
        self.assertEqual(self.cache.get("b"), [2])
        self.assertEqual(self.cache.invalidate_tags([GLOBAL_TAG]), 1)
        self.assertIsNone(self.cache.get("b"))
        self.assertEqual(self.cache.invalidate_tags([]), 0)

    def test_entries_expire(self) -> None:
        cache = SqliteQueryCache(self.manager.get_connection(), duration=10, clock=lambda: self.now[0])
        cache.set("k", [1], [])
        self.now[0] += 9
        self.assertEqual(cache.get("k"), [1])
        self.now[0] += 1
        self.assertIsNone(cache.get("k"))

    def test_clear(self) -> None:
        self.cache.set("k", [1], ["t"])
        self.cache.clear()
        self.assertIsNone(self.cache.get("k"))

    def test_key_depends_on_sql_and_params(self) -> None:
        self.assertEqual(cache_key("SELECT ?", [1]), cache_key("SELECT ?", [1]))
        self.assertNotEqual(cache_key("SELECT ?", [1]), cache_key("SELECT ?", [2]))

    def test_entry_invalidation_tags(self) -> None:
        self.assertEqual(
            entry_invalidation_tags(section_id=3, type_id=5),
            [ANY_ENTRY_TAG, "section:3", "entryType:5"],
        )
        self.assertEqual(entry_invalidation_tags(), [ANY_ENTRY_TAG])


class TestCachedExecution(unittest.TestCase):
    def setUp(self) -> None:
        self.manager = DatabaseManager(Path(":memory:"))
        conn = self.manager.get_connection()
        self.cache = SqliteQueryCache(conn)
        self.lookup = SqliteLookup(conn)
        self.executor = QueryExecutor(conn, cache=self.cache)
        self.context = QueryContext(permissions=SqliteSectionPermissions(conn), clock=lambda: NOW)

        # Writes through this store bypass cache invalidation.
        self.raw_store = ContentStore(self.manager)
        self.store = ContentStore(self.manager, cache=self.cache)
        self.news = self.raw_store.create_section("news", "channel")
        self.blog = self.raw_store.create_section("blog", "channel")
        self.article = self.raw_store.create_entry_type(self.news.id, "article")
        self.post = self.raw_store.create_entry_type(self.blog.id, "post")
        self.first = self._save(self.raw_store, self.news, self.article.id, "first")

    def tearDown(self) -> None:
        self.manager.close()

    def _save(self, store, section, type_id, slug):
        return store.save_entry(section, type_id, title=slug, slug=slug, post_date="2026-01-01")

    def _news_ids(self):
        return self.executor.ids(EntryQuery(self.lookup).section("news"), self.context)

    def test_results_are_served_from_cache_until_invalidated(self) -> None:
        self.assertEqual(self._news_ids(), [self.first])

        stale = self._save(self.raw_store, self.news, self.article.id, "stale")
        self.assertEqual(self._news_ids(), [self.first])

        fresh = self._save(self.store, self.news, self.article.id, "fresh")
        self.assertEqual(set(self._news_ids()), {self.first, stale, fresh})

    def test_saving_in_another_section_keeps_cached_results(self) -> None:
        self.assertEqual(self._news_ids(), [self.first])
        self._save(self.raw_store, self.news, self.article.id, "hidden")
        self._save(self.store, self.blog, self.post.id, "other")
        self.assertEqual(self._news_ids(), [self.first])

    def test_type_queries_are_invalidated_by_type(self) -> None:
        def count_articles():
            return self.executor.count(EntryQuery(self.lookup).type("article"), self.context)

        self.assertEqual(count_articles(), 1)
        self._save(self.store, self.news, self.article.id, "second")
        self.assertEqual(count_articles(), 2)

    def test_unfiltered_queries_are_invalidated_by_any_save(self) -> None:
        def count_all():
            return self.executor.count(EntryQuery(self.lookup).status(None), self.context)

        self.assertEqual(count_all(), 1)
        self._save(self.store, self.blog, self.post.id, "second")
        self.assertEqual(count_all(), 2)

    def test_unfiltered_slug_queries_see_new_entries(self) -> None:
        def slugs():
            rows = self.executor.all(EntryQuery(self.lookup).slug("s*"), self.context)
            return sorted(row["slug"] for row in rows)

        self.assertEqual(slugs(), [])
        self._save(self.store, self.news, self.article.id, "second")
        self.assertEqual(slugs(), ["second"])

    def test_global_tag_flushes_everything(self) -> None:
        self.assertEqual(self._news_ids(), [self.first])
        self.assertEqual(self.executor.count(EntryQuery(self.lookup), self.context), 1)
        self._save(self.raw_store, self.news, self.article.id, "hidden")
        self.assertEqual(self.cache.invalidate_tags([GLOBAL_TAG]), 2)
        self.assertEqual(len(self._news_ids()), 2)

    def test_empty_results_skip_the_database(self) -> None:
        query = EntryQuery(self.lookup).section("missing")
        self.assertEqual(self.executor.all(query, self.context), [])
        count = self.manager.get_connection().execute("SELECT COUNT(*) FROM cache").fetchone()[0]
        self.assertEqual(count, 0)


if __name__ == "__main__":
    unittest.main()

"""Tests for predicate compilation and SQL rendering."""

import sys
import unittest
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ContentQuery.core.errors import InvalidParamError
from ContentQuery.core.predicates import (
    And,
    ColumnCompare,
    Compare,
    InSet,
    IsNull,
    Join,
    Like,
    Not,
    Or,
    QueryDescriptor,
    render,
)
from ContentQuery.query.compiler import (
    compile_date_param,
    compile_numeric_param,
    compile_param,
    to_db_date,
)


class TestCompileParam(unittest.TestCase):
    def test_none_compiles_to_nothing(self) -> None:
        self.assertIsNone(compile_param("c", None))
        self.assertIsNone(compile_param("c", []))

    def test_equality_and_set_membership(self) -> None:
        self.assertEqual(compile_param("c", "a"), Compare("c", "=", "a"))
        self.assertEqual(compile_param("c", ["a", "b", "a"]), InSet("c", ("a", "b")))
        self.assertEqual(compile_param("c", ["a", "a"]), Compare("c", "=", "a"))

    def test_negation(self) -> None:
        self.assertEqual(compile_param("c", "not a"), Compare("c", "!=", "a"))
        self.assertEqual(compile_param("c", ["not", "a", "b"]), Not(InSet("c", ("a", "b"))))

    def test_sentinels(self) -> None:
        self.assertEqual(compile_param("c", ":empty:"), IsNull("c"))
        self.assertEqual(compile_param("c", ":notempty:"), Not(IsNull("c")))

    def test_wildcard_becomes_like(self) -> None:
        self.assertEqual(compile_param("c", "foo*"), Like("c", "foo%"))
        self.assertEqual(compile_param("c", "not *bar"), Not(Like("c", "%bar")))

    def test_explicit_glue(self) -> None:
        self.assertEqual(
            compile_param("c", ["and", "not a", "not b"]),
            And((Compare("c", "!=", "a"), Compare("c", "!=", "b"))),
        )
        self.assertEqual(
            compile_param("c", ["or", "a*", ":empty:"]),
            Or((Like("c", "a%"), IsNull("c"))),
        )


class TestCompileNumericParam(unittest.TestCase):
    def test_numeric_operands_are_converted(self) -> None:
        self.assertEqual(compile_numeric_param("id", "5"), Compare("id", "=", 5))
        self.assertEqual(compile_numeric_param("id", [1, "2"]), InSet("id", (1, 2)))
        self.assertEqual(compile_numeric_param("id", ">= 3"), Compare("id", ">=", 3))
        self.assertEqual(compile_numeric_param("id", "1.5"), Compare("id", "=", 1.5))

    def test_sentinels_are_allowed(self) -> None:
        self.assertEqual(compile_numeric_param("id", ":empty:"), IsNull("id"))

    def test_non_numeric_operands_fail_fast(self) -> None:
        with self.assertRaises(InvalidParamError):
            compile_numeric_param("id", "abc")
        with self.assertRaises(InvalidParamError):
            compile_numeric_param("id", ["1", "x"])
        with self.assertRaises(InvalidParamError):
            compile_numeric_param("id", "1*")
        with self.assertRaises(InvalidParamError):
            compile_numeric_param("id", True)


class TestCompileDateParam(unittest.TestCase):
    def test_operands_become_canonical_utc_strings(self) -> None:
        self.assertEqual(
            compile_date_param("d", ">= 2026-01-01"),
            Compare("d", ">=", "2026-01-01 00:00:00"),
        )
        aware = datetime(2026, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        self.assertEqual(compile_date_param("d", aware), Compare("d", "=", "2026-03-01 10:00:00"))

    def test_default_operator_applies_to_bare_operands_only(self) -> None:
        self.assertEqual(
            compile_date_param("d", "2026-01-01", "<"),
            Compare("d", "<", "2026-01-01 00:00:00"),
        )
        self.assertEqual(
            compile_date_param("d", "> 2026-01-01", "<"),
            Compare("d", ">", "2026-01-01 00:00:00"),
        )

    def test_range_conjunction(self) -> None:
        self.assertEqual(
            compile_date_param("d", ["and", ">= 2026-01-01", "< 2026-02-01"]),
            And(
                (
                    Compare("d", ">=", "2026-01-01 00:00:00"),
                    Compare("d", "<", "2026-02-01 00:00:00"),
                )
            ),
        )

    def test_empty_sentinel(self) -> None:
        self.assertEqual(compile_date_param("d", ":empty:"), IsNull("d"))

    def test_unparseable_date_fails(self) -> None:
        with self.assertRaises(InvalidParamError):
            compile_date_param("d", "banana")
        with self.assertRaises(InvalidParamError):
            compile_date_param("d", "2026-*")

    def test_to_db_date_variants(self) -> None:
        self.assertEqual(to_db_date(date(2026, 1, 2)), "2026-01-02 00:00:00")
        self.assertEqual(to_db_date(0), "1970-01-01 00:00:00")
        self.assertEqual(to_db_date(datetime(2026, 1, 2, 3, 4, 5)), "2026-01-02 03:04:05")


class TestRender(unittest.TestCase):
    def test_nested_predicates(self) -> None:
        sql, params = render(And((Compare("a", "=", 1), Or((IsNull("b"), Compare("b", ">", 2))))))
        self.assertEqual(sql, "(a = ? AND (b IS NULL OR b > ?))")
        self.assertEqual(params, [1, 2])

    def test_set_and_negation(self) -> None:
        sql, params = render(Not(InSet("a", (1, 2))))
        self.assertEqual(sql, "NOT (a IN (?, ?))")
        self.assertEqual(params, [1, 2])

    def test_compare_with_none_renders_null_test(self) -> None:
        self.assertEqual(render(Compare("a", "=", None)), ("a IS NULL", []))
        self.assertEqual(render(Compare("a", "!=", None)), ("a IS NOT NULL", []))

    def test_empty_set_is_never_rendered(self) -> None:
        with self.assertRaises(ValueError):
            render(InSet("a", ()))

    def test_descriptor_sql(self) -> None:
        descriptor = QueryDescriptor(
            table="elements",
            alias="elements",
            joins=(Join("INNER", "entries", "entries", ColumnCompare("entries.id", "=", "elements.id")),),
            columns=("elements.id",),
            where=Compare("entries.sectionId", "=", 3),
            order_by=(("entries.postDate", "DESC"),),
            limit=10,
            offset=20,
        )
        sql, params = descriptor.to_sql()
        self.assertEqual(
            sql,
            "SELECT elements.id FROM elements elements "
            "INNER JOIN entries entries ON entries.id = elements.id "
            "WHERE entries.sectionId = ? ORDER BY entries.postDate DESC LIMIT ? OFFSET ?",
        )
        self.assertEqual(params, [3, 10, 20])

        count_sql, count_params = descriptor.to_count_sql()
        self.assertTrue(count_sql.startswith("SELECT COUNT(DISTINCT elements.id) FROM elements elements"))
        self.assertEqual(count_params, [3])


if __name__ == "__main__":
    unittest.main()

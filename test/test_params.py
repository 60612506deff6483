"""Tests for parameter expression parsing."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ContentQuery.core.params import (
    Compound,
    Literal,
    Negation,
    Range,
    Sentinel,
    Wildcard,
    parse_param,
    split_list,
)


class TestParseParam(unittest.TestCase):
    def test_empty_values_mean_no_filter(self) -> None:
        self.assertIsNone(parse_param(None))
        self.assertIsNone(parse_param(""))
        self.assertIsNone(parse_param("  "))
        self.assertIsNone(parse_param([]))

    def test_scalar_literals(self) -> None:
        self.assertEqual(parse_param("news"), Literal("news"))
        self.assertEqual(parse_param(5), Literal(5))

    def test_comma_string_is_disjunction(self) -> None:
        self.assertEqual(
            parse_param("news, blog"),
            Compound("or", (Literal("news"), Literal("blog"))),
        )

    def test_leading_not_negates_the_set(self) -> None:
        self.assertEqual(
            parse_param(["not", 1, 2]),
            Negation(Compound("or", (Literal(1), Literal(2)))),
        )
        self.assertEqual(parse_param(["not", "a"]), Negation(Literal("a")))

    def test_explicit_glue(self) -> None:
        self.assertEqual(
            parse_param(["and", ">= 5", "< 10"]),
            Compound("and", (Range(">=", "5"), Range("<", "10"))),
        )
        self.assertEqual(
            parse_param(["OR", "a", "b"]),
            Compound("or", (Literal("a"), Literal("b"))),
        )

    def test_string_prefixes(self) -> None:
        self.assertEqual(parse_param("not foo"), Negation(Literal("foo")))
        self.assertEqual(parse_param("!= 3"), Negation(Literal("3")))
        self.assertEqual(parse_param("= 3"), Literal("3"))
        self.assertEqual(parse_param("<= 2026-01-01"), Range("<=", "2026-01-01"))
        self.assertEqual(parse_param(">7"), Range(">", "7"))

    def test_sentinels_are_case_insensitive(self) -> None:
        self.assertEqual(parse_param(":empty:"), Sentinel(empty=True))
        self.assertEqual(parse_param(":NotEmpty:"), Sentinel(empty=False))
        self.assertEqual(parse_param("not :empty:"), Negation(Sentinel(empty=True)))

    def test_wildcard(self) -> None:
        self.assertEqual(parse_param("foo*"), Wildcard("foo*"))

    def test_parsed_expression_passes_through(self) -> None:
        expr = Range(">", "1")
        self.assertIs(parse_param(expr), expr)

    def test_nested_lists(self) -> None:
        self.assertEqual(
            parse_param(["and", ["a", "b"], "not c"]),
            Compound(
                "and",
                (Compound("or", (Literal("a"), Literal("b"))), Negation(Literal("c"))),
            ),
        )


class TestSplitList(unittest.TestCase):
    def test_strips_and_drops_empty_items(self) -> None:
        self.assertEqual(split_list(" a, ,b ,"), ["a", "b"])

    def test_custom_delimiter(self) -> None:
        self.assertEqual(split_list("a|b", "|"), ["a", "b"])


if __name__ == "__main__":
    unittest.main()

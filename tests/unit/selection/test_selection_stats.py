"""Tests for selection statistics."""

from __future__ import annotations

import unittest
from pathlib import Path

from repoprompt.file_tree_model import Entry
from repoprompt.selection import filter_by_extension, group_by_extension, selection_stats
from repoprompt.selection.stats import extension_of

ROOT = Path("/stats")


def _file(relative_path: str, size: int, tokens: int) -> Entry:
    return Entry(
        absolute_path=ROOT / relative_path,
        relative_path=relative_path,
        size=size,
        is_directory=False,
        token_estimate=tokens,
    )


class SelectionStatsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.files = [
            _file("a.py", 100, 25),
            _file("pkg/b.PY", 40, 10),
            _file("README.md", 60, 15),
            _file("Makefile", 20, 5),
        ]

    def test_totals_and_breakdown(self) -> None:
        stats = selection_stats(self.files, token_limit=100)

        self.assertEqual(stats.total_files, 4)
        self.assertEqual(stats.total_size, 220)
        self.assertEqual(stats.total_tokens, 55)
        self.assertAlmostEqual(stats.token_usage_percentage, 55.0)
        self.assertFalse(stats.exceeds_token_limit)
        self.assertEqual(
            [(ext.extension, ext.count, ext.tokens) for ext in stats.by_extension],
            [("py", 2, 35), ("md", 1, 15), ("unknown", 1, 5)],
        )

    def test_exceeds_token_limit(self) -> None:
        stats = selection_stats(self.files, token_limit=50)
        self.assertTrue(stats.exceeds_token_limit)
        self.assertGreater(stats.token_usage_percentage, 100)

    def test_extension_helpers(self) -> None:
        self.assertEqual(extension_of(self.files[1]), "py")
        self.assertEqual(extension_of(self.files[3]), "unknown")
        self.assertEqual([entry.relative_path for entry in filter_by_extension(self.files, "py")], ["a.py", "pkg/b.PY"])
        self.assertEqual(sorted(group_by_extension(self.files)), ["md", "py", "unknown"])


if __name__ == "__main__":
    unittest.main()

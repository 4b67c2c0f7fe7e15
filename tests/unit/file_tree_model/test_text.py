"""Tests for token estimation helpers."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from repoprompt.file_tree_model import estimate_tokens, read_text_strict, utf16_length


class TokenEstimateTests(unittest.TestCase):
    def test_estimate_rounds_up_quarter_length(self) -> None:
        self.assertEqual(estimate_tokens(""), 0)
        self.assertEqual(estimate_tokens("abcd"), 1)
        self.assertEqual(estimate_tokens("abcde"), 2)

    def test_length_counts_utf16_code_units(self) -> None:
        self.assertEqual(utf16_length("é"), 1)
        self.assertEqual(utf16_length("😀"), 2)
        self.assertEqual(estimate_tokens("😀😀😀"), 2)


class ReadTextStrictTests(unittest.TestCase):
    def test_preserves_line_endings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "crlf.txt"
            path.write_bytes(b"a\r\nb\r\n")
            self.assertEqual(read_text_strict(path), "a\r\nb\r\n")

    def test_invalid_utf8_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.txt"
            path.write_bytes(b"\xff\xfe")
            with self.assertRaises(UnicodeDecodeError):
                read_text_strict(path)


if __name__ == "__main__":
    unittest.main()

"""Text reading and token estimation for scanned files."""

from __future__ import annotations

import math
from pathlib import Path

CHARS_PER_TOKEN = 4


def utf16_length(text: str) -> int:
    """Return the number of UTF-16 code units in ``text``."""
    return len(text.encode("utf-16-le")) // 2


def estimate_tokens(text: str) -> int:
    """Approximate token count as ``ceil(utf16_length / 4)``."""
    return math.ceil(utf16_length(text) / CHARS_PER_TOKEN)


def read_text_strict(path: Path | str) -> str:
    """Read ``path`` as UTF-8 text.

    Raises ``OSError`` or ``UnicodeDecodeError``; callers decide whether that
    marks an entry skipped or records a per-file error.
    """
    with open(path, "r", encoding="utf-8", newline="") as handle:
        return handle.read()


__all__ = ["CHARS_PER_TOKEN", "utf16_length", "estimate_tokens", "read_text_strict"]

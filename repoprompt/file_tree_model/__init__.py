"""Domain model for scanned file/directory trees.

This package contains non-UI scanning primitives:
- entry, stats, and progress datatypes
- text reading and token estimation
- the recursive directory scanner
"""

from __future__ import annotations

from .types import (
    SKIP_CONTENT,
    SKIP_ERROR,
    SKIP_EXTENSION,
    SKIP_IGNORED,
    SKIP_REASONS,
    SKIP_SIZE,
    Entry,
    ScanIssue,
    ScanProgress,
    ScanResult,
    ScanStats,
)
from .text import estimate_tokens, read_text_strict, utf16_length
from .scanner import PROGRESS_EVERY, DirectoryChild, list_directory_children, walk_directory

__all__ = [
    "SKIP_CONTENT",
    "SKIP_ERROR",
    "SKIP_EXTENSION",
    "SKIP_IGNORED",
    "SKIP_REASONS",
    "SKIP_SIZE",
    "Entry",
    "ScanIssue",
    "ScanProgress",
    "ScanResult",
    "ScanStats",
    "estimate_tokens",
    "read_text_strict",
    "utf16_length",
    "PROGRESS_EVERY",
    "DirectoryChild",
    "list_directory_children",
    "walk_directory",
]

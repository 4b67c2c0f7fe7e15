"""Domain datatypes for scanned file/directory entries and scan results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

SKIP_EXTENSION = "extension"
SKIP_SIZE = "size"
SKIP_CONTENT = "content"
SKIP_IGNORED = "ignored"
SKIP_ERROR = "error"
SKIP_REASONS: tuple[str, ...] = (SKIP_EXTENSION, SKIP_SIZE, SKIP_CONTENT, SKIP_IGNORED, SKIP_ERROR)


@dataclass(frozen=True)
class Entry:
    """One filesystem object observed during a scan.

    ``absolute_path`` is the stable identity used as the selection key.
    ``relative_path`` is root-relative with ``/`` separators. Directories always
    carry ``size == 0`` and ``token_estimate == 0``.
    """

    absolute_path: Path
    relative_path: str
    size: int
    is_directory: bool
    is_skipped: bool = False
    skip_reason: str | None = None
    skip_details: str | None = None
    token_estimate: int = 0

    @property
    def key(self) -> str:
        return str(self.absolute_path)

    @property
    def name(self) -> str:
        return self.relative_path.rsplit("/", 1)[-1]

    @property
    def parent_relative_path(self) -> str:
        """Relative path of the containing directory (``""`` for root children)."""
        if "/" not in self.relative_path:
            return ""
        return self.relative_path.rsplit("/", 1)[0]

    @property
    def is_selectable(self) -> bool:
        return not self.is_directory and not self.is_skipped


@dataclass(frozen=True)
class ScanIssue:
    """A directory that could not be listed; its subtree contributed nothing."""

    path: Path
    relative_path: str
    message: str


@dataclass(frozen=True)
class ScanStats:
    """Aggregates over one scan.

    ``file_count`` counts every visited entry, directories included.
    ``binary_count`` covers extension/content/error skips and
    ``size_skipped_count`` covers size skips; ``skip_reason_counts`` also
    records pruned ``ignored`` paths, which are not entries, and is read-only.
    """

    file_count: int = 0
    total_size: int = 0
    total_tokens: int = 0
    skipped_count: int = 0
    binary_count: int = 0
    size_skipped_count: int = 0
    skip_reason_counts: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "skip_reason_counts", MappingProxyType(dict(self.skip_reason_counts)))

    @property
    def error_count(self) -> int:
        return self.skip_reason_counts.get(SKIP_ERROR, 0)

    @property
    def ignored_count(self) -> int:
        return self.skip_reason_counts.get(SKIP_IGNORED, 0)


@dataclass(frozen=True)
class ScanResult:
    """Entries in pre-order plus aggregate stats for one scan invocation."""

    root_path: Path
    entries: tuple[Entry, ...]
    stats: ScanStats
    issues: tuple[ScanIssue, ...] = ()
    complete: bool = True

    @property
    def files(self) -> tuple[Entry, ...]:
        return tuple(entry for entry in self.entries if not entry.is_directory)

    @property
    def directories(self) -> tuple[Entry, ...]:
        return tuple(entry for entry in self.entries if entry.is_directory)


@dataclass(frozen=True)
class ScanProgress:
    """One progress event emitted while scanning.

    Every scan ends with exactly one event that has ``done`` or ``error`` set.
    ``incomplete`` marks a terminal ``done`` event produced by cancellation.
    """

    file_count: int = 0
    total_size: int = 0
    total_tokens: int = 0
    processing: str = ""
    skipped_count: int = 0
    binary_count: int = 0
    size_skipped_count: int = 0
    done: bool = False
    error: bool = False
    message: str | None = None
    incomplete: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.done or self.error

    def as_dict(self) -> dict[str, object]:
        """Return the host-facing camelCase event payload."""
        payload: dict[str, object] = {
            "fileCount": self.file_count,
            "totalSize": self.total_size,
            "totalTokens": self.total_tokens,
            "processing": self.processing,
            "skippedCount": self.skipped_count,
            "binaryCount": self.binary_count,
            "sizeSkippedCount": self.size_skipped_count,
        }
        if self.done:
            payload["done"] = True
        if self.error:
            payload["error"] = True
        if self.message is not None:
            payload["message"] = self.message
        if self.incomplete:
            payload["incomplete"] = True
        return payload


__all__ = [
    "SKIP_EXTENSION",
    "SKIP_SIZE",
    "SKIP_CONTENT",
    "SKIP_IGNORED",
    "SKIP_ERROR",
    "SKIP_REASONS",
    "Entry",
    "ScanIssue",
    "ScanStats",
    "ScanResult",
    "ScanProgress",
]

"""Summary statistics over a selected file list."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..file_tree_model import Entry


@dataclass(frozen=True)
class ExtensionStats:
    extension: str
    count: int
    size: int
    tokens: int


@dataclass(frozen=True)
class SelectionStats:
    """Totals for a selection measured against a token limit."""

    total_files: int
    total_size: int
    total_tokens: int
    token_limit: int
    by_extension: tuple[ExtensionStats, ...]

    @property
    def token_usage_percentage(self) -> float:
        if self.token_limit <= 0:
            return 0.0
        return self.total_tokens / self.token_limit * 100

    @property
    def exceeds_token_limit(self) -> bool:
        return self.total_tokens > self.token_limit


def extension_of(entry: Entry) -> str:
    """Lower-cased text after the last ``.`` of the relative path, or ``unknown``."""
    tail = entry.relative_path.rsplit(".", 1)
    if len(tail) == 1 or not tail[1]:
        return "unknown"
    return tail[1].lower()


def filter_by_extension(files: Iterable[Entry], extension: str) -> list[Entry]:
    ext = extension.lower()
    if not ext.startswith("."):
        ext = f".{ext}"
    return [entry for entry in files if entry.relative_path.lower().endswith(ext)]


def group_by_extension(files: Iterable[Entry]) -> dict[str, list[Entry]]:
    groups: dict[str, list[Entry]] = {}
    for entry in files:
        if entry.is_directory:
            continue
        groups.setdefault(extension_of(entry), []).append(entry)
    return groups


def selection_stats(files: Iterable[Entry], token_limit: int) -> SelectionStats:
    """Aggregate count, size, and token totals overall and per extension."""
    file_list = [entry for entry in files if not entry.is_directory]
    by_extension = [
        ExtensionStats(
            extension=extension,
            count=len(group),
            size=sum(entry.size for entry in group),
            tokens=sum(entry.token_estimate for entry in group),
        )
        for extension, group in group_by_extension(file_list).items()
    ]
    by_extension.sort(key=lambda item: (-item.count, item.extension))
    return SelectionStats(
        total_files=len(file_list),
        total_size=sum(entry.size for entry in file_list),
        total_tokens=sum(entry.token_estimate for entry in file_list),
        token_limit=token_limit,
        by_extension=tuple(by_extension),
    )


__all__ = [
    "ExtensionStats",
    "SelectionStats",
    "extension_of",
    "filter_by_extension",
    "group_by_extension",
    "selection_stats",
]

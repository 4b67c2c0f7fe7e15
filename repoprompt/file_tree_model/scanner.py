"""Recursive directory scanning into flat, pre-ordered entry lists.

The walk prunes ignored subtrees before listing them, classifies each file,
estimates tokens for text files, and reports progress every
``PROGRESS_EVERY`` visited entries. Only a failure on the root aborts the scan.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ..binary_detection import (
    DEFAULT_BINARY_OPTIONS,
    REASON_SIZE,
    BinaryDetectionOptions,
    classify_file,
)
from ..errors import ScanFatalError
from ..ignore import IgnoreManager, relative_posix_path
from .text import estimate_tokens, read_text_strict
from .types import (
    SKIP_ERROR,
    SKIP_IGNORED,
    Entry,
    ScanIssue,
    ScanProgress,
    ScanResult,
    ScanStats,
)

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10

ProgressCallback = Callable[[ScanProgress], None]


@dataclass(frozen=True)
class DirectoryChild:
    """One listed directory child before ignore filtering."""

    name: str
    path: Path
    is_dir: bool


def list_directory_children(directory: Path) -> tuple[list[DirectoryChild], OSError | None]:
    """List ``directory`` children sorted directories-first, then by name.

    Returns ``(children, scan_error)``; ``scan_error`` is set when the directory
    cannot be listed.
    """
    children: list[DirectoryChild] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                try:
                    is_dir = child.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                children.append(DirectoryChild(name=child.name, path=Path(child.path), is_dir=is_dir))
    except OSError as exc:
        return [], exc

    children.sort(key=lambda item: (not item.is_dir, item.name.lower(), item.name))
    return children, None


@dataclass
class _ScanCounters:
    file_count: int = 0
    total_size: int = 0
    total_tokens: int = 0
    skipped_count: int = 0
    binary_count: int = 0
    size_skipped_count: int = 0
    skip_reason_counts: dict[str, int] = field(default_factory=dict)

    def note_skip(self, reason: str) -> None:
        self.skip_reason_counts[reason] = self.skip_reason_counts.get(reason, 0) + 1
        if reason == SKIP_IGNORED:
            return
        self.skipped_count += 1
        if reason == REASON_SIZE:
            self.size_skipped_count += 1
        else:
            self.binary_count += 1

    def progress(self, processing: str, **flags: object) -> ScanProgress:
        return ScanProgress(
            file_count=self.file_count,
            total_size=self.total_size,
            total_tokens=self.total_tokens,
            processing=processing,
            skipped_count=self.skipped_count,
            binary_count=self.binary_count,
            size_skipped_count=self.size_skipped_count,
            **flags,
        )

    def freeze(self) -> ScanStats:
        return ScanStats(
            file_count=self.file_count,
            total_size=self.total_size,
            total_tokens=self.total_tokens,
            skipped_count=self.skipped_count,
            binary_count=self.binary_count,
            size_skipped_count=self.size_skipped_count,
            skip_reason_counts=self.skip_reason_counts,
        )


class _DirectoryWalker:
    def __init__(
        self,
        root: Path,
        options: BinaryDetectionOptions,
        ignore_manager: IgnoreManager,
        emit: ProgressCallback,
        cancel_event: threading.Event | None,
    ) -> None:
        self.root = root
        self.options = options
        self.ignore_manager = ignore_manager
        self.emit = emit
        self.cancel_event = cancel_event
        self.counters = _ScanCounters()
        self.entries: list[Entry] = []
        self.issues: list[ScanIssue] = []
        self.cancelled = False

    def is_cancelled(self) -> bool:
        if not self.cancelled and self.cancel_event is not None and self.cancel_event.is_set():
            self.cancelled = True
        return self.cancelled

    def scan_file(self, path: Path, relative_path: str) -> Entry:
        """Stat, classify, and measure one file. Never raises."""
        try:
            size = int(path.stat().st_size)
        except OSError as exc:
            logger.warning("Error getting stats for %s: %s", path, exc)
            self.counters.note_skip(SKIP_ERROR)
            return Entry(
                absolute_path=path,
                relative_path=relative_path,
                size=0,
                is_directory=False,
                is_skipped=True,
                skip_reason=SKIP_ERROR,
                skip_details=f"Failed to stat file: {exc}",
            )
        self.counters.total_size += size

        check = classify_file(path, self.options)
        if check.is_binary:
            reason = check.reason or SKIP_ERROR
            self.counters.note_skip(reason)
            return Entry(
                absolute_path=path,
                relative_path=relative_path,
                size=size,
                is_directory=False,
                is_skipped=True,
                skip_reason=reason,
                skip_details=check.details,
            )

        try:
            text = read_text_strict(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Error reading file %s: %s", path, exc)
            self.counters.note_skip(SKIP_ERROR)
            return Entry(
                absolute_path=path,
                relative_path=relative_path,
                size=size,
                is_directory=False,
                is_skipped=True,
                skip_reason=SKIP_ERROR,
                skip_details="Failed to read as text",
            )

        token_estimate = estimate_tokens(text)
        self.counters.total_tokens += token_estimate
        return Entry(
            absolute_path=path,
            relative_path=relative_path,
            size=size,
            is_directory=False,
            token_estimate=token_estimate,
        )

    def visit_children(self, children: list[DirectoryChild]) -> None:
        for child in children:
            if self.cancelled:
                return
            if self.ignore_manager.should_ignore(child.path):
                self.counters.note_skip(SKIP_IGNORED)
                continue

            relative_path = relative_posix_path(self.root, child.path)
            self.counters.file_count += 1
            if self.counters.file_count % PROGRESS_EVERY == 0:
                self.emit(self.counters.progress(relative_path))

            if child.is_dir:
                self.entries.append(
                    Entry(
                        absolute_path=child.path,
                        relative_path=relative_path,
                        size=0,
                        is_directory=True,
                    )
                )
                self.descend(child.path, relative_path)
                continue
            self.entries.append(self.scan_file(child.path, relative_path))

    def descend(self, directory: Path, relative_path: str) -> None:
        if self.is_cancelled():
            return
        if self.ignore_manager.should_ignore(directory):
            return
        children, scan_error = list_directory_children(directory)
        if scan_error is not None:
            logger.warning("Skipping unreadable directory %s: %s", directory, scan_error)
            self.issues.append(ScanIssue(path=directory, relative_path=relative_path, message=str(scan_error)))
            return
        self.visit_children(children)


def walk_directory(
    root: Path | str,
    options: BinaryDetectionOptions | None = None,
    *,
    on_progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
    ignore_manager: IgnoreManager | None = None,
) -> ScanResult:
    """Scan ``root`` recursively and return entries in pre-order.

    ``on_progress`` receives an event every ``PROGRESS_EVERY`` visited entries
    and exactly one terminal event. ``cancel_event`` is checked at each
    directory boundary; cancellation returns the partial result with
    ``complete=False``. Raises ``ScanFatalError`` when the root is unreadable.
    """
    root_path = Path(root).absolute()
    emit: ProgressCallback = on_progress if on_progress is not None else (lambda _event: None)
    options = options if options is not None else DEFAULT_BINARY_OPTIONS

    def fatal(message: str) -> ScanFatalError:
        logger.error("Error walking directory %s: %s", root_path, message)
        emit(ScanProgress(error=True, message=message))
        return ScanFatalError(root_path, message)

    try:
        root_path = root_path.resolve(strict=True)
    except OSError as exc:
        raise fatal(str(exc)) from exc
    if not root_path.is_dir():
        raise fatal(f"Not a directory: {root_path}")

    if ignore_manager is None:
        ignore_manager = IgnoreManager(root_path)
    if not ignore_manager.loaded:
        ignore_manager.load()

    walker = _DirectoryWalker(root_path, options, ignore_manager, emit, cancel_event)
    if not walker.is_cancelled():
        children, scan_error = list_directory_children(root_path)
        if scan_error is not None:
            raise fatal(str(scan_error)) from scan_error
        walker.visit_children(children)

    counters = walker.counters
    if walker.cancelled:
        logger.info("Scan of %s cancelled after %d entries", root_path, counters.file_count)
        emit(counters.progress("Cancelled", done=True, incomplete=True))
    else:
        emit(counters.progress("Complete", done=True))
    logger.debug(
        "Scanned %s: %d entries, %d skipped, %d tokens",
        root_path,
        counters.file_count,
        counters.skipped_count,
        counters.total_tokens,
    )
    return ScanResult(
        root_path=root_path,
        entries=tuple(walker.entries),
        stats=counters.freeze(),
        issues=tuple(walker.issues),
        complete=not walker.cancelled,
    )


__all__ = [
    "PROGRESS_EVERY",
    "ProgressCallback",
    "DirectoryChild",
    "list_directory_children",
    "walk_directory",
]

"""Token-budgeted assembly of the file map and selected file contents.

The file map is always rendered first. Selected files are then embedded in
ascending ``relative_path`` order until the next file's estimate would push
the running total past the limit. Files are re-read at assembly time, so a
read failure is recorded per file and assembly continues.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..file_tree_model import Entry, read_text_strict
from .file_map import TreeFormatOptions, render_file_map_block

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIMIT = 2_000_000
TOKEN_WARNING_RATIO = 0.9


@dataclass(frozen=True)
class AssemblyProgress:
    current: int
    total: int
    file_name: str
    percentage: int


@dataclass(frozen=True)
class FileReadError:
    relative_path: str
    message: str


@dataclass(frozen=True)
class PayloadBlock:
    relative_path: str
    content: str
    token_estimate: int


@dataclass(frozen=True)
class Payload:
    """Assembled prompt text plus accounting.

    ``processed_files`` counts files that were attempted (embedded or failed);
    files after the token cut-off are not counted. ``tokens_approx`` sums the
    estimates of embedded files only.
    """

    text: str
    tokens_approx: int
    token_cap_exceeded: bool
    processed_files: int
    total_files: int
    token_limit: int
    file_map: str = ""
    errors: tuple[FileReadError, ...] = ()
    blocks: tuple[PayloadBlock, ...] = ()
    truncation_note: str | None = None

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def embedded_files(self) -> int:
        return len(self.blocks)


AssemblyProgressCallback = Callable[[AssemblyProgress], None]


def format_file_block(relative_path: str, content: str) -> str:
    return f'<file_contents path="{relative_path}">\n{content}\n</file_contents>\n\n'


def assemble_prompt(
    selected_files: Iterable[Entry],
    all_entries: Iterable[Entry],
    token_limit: int = DEFAULT_TOKEN_LIMIT,
    *,
    root_name: str | None = None,
    options: TreeFormatOptions | None = None,
    on_progress: AssemblyProgressCallback | None = None,
) -> Payload:
    """Build the prompt payload for ``selected_files`` within ``token_limit``."""
    if token_limit < 0:
        raise ValueError("token_limit must be >= 0")

    entries = list(all_entries)
    files = sorted(
        (entry for entry in selected_files if entry.is_selectable),
        key=lambda entry: entry.relative_path,
    )
    file_map = render_file_map_block(entries, files, root_name, options)
    parts = [file_map]

    blocks: list[PayloadBlock] = []
    errors: list[FileReadError] = []
    running = 0
    processed = 0
    cap_exceeded = False
    truncation_note: str | None = None
    warned = False
    total = len(files)

    for entry in files:
        if running + entry.token_estimate > token_limit:
            cap_exceeded = True
            truncation_note = (
                f"Token limit of {token_limit} reached at {entry.relative_path}; "
                f"{total - processed} of {total} selected files omitted"
            )
            logger.warning("%s", truncation_note)
            break

        processed += 1
        if on_progress is not None:
            on_progress(
                AssemblyProgress(
                    current=processed,
                    total=total,
                    file_name=entry.relative_path,
                    percentage=round(processed / total * 100),
                )
            )

        try:
            content = read_text_strict(entry.absolute_path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Error reading file %s: %s", entry.absolute_path, exc)
            errors.append(FileReadError(relative_path=entry.relative_path, message=str(exc)))
            continue

        parts.append(format_file_block(entry.relative_path, content))
        blocks.append(PayloadBlock(entry.relative_path, content, entry.token_estimate))
        running += entry.token_estimate
        if not warned and token_limit and running > token_limit * TOKEN_WARNING_RATIO:
            warned = True
            logger.warning("Approaching token limit: %d of %d tokens used", running, token_limit)

    return Payload(
        text="".join(parts),
        tokens_approx=running,
        token_cap_exceeded=cap_exceeded,
        processed_files=processed,
        total_files=total,
        token_limit=token_limit,
        file_map=file_map,
        errors=tuple(errors),
        blocks=tuple(blocks),
        truncation_note=truncation_note,
    )


__all__ = [
    "DEFAULT_TOKEN_LIMIT",
    "TOKEN_WARNING_RATIO",
    "AssemblyProgress",
    "AssemblyProgressCallback",
    "FileReadError",
    "PayloadBlock",
    "Payload",
    "format_file_block",
    "assemble_prompt",
]

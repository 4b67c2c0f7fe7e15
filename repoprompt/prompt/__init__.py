"""Prompt payload assembly: file map rendering and token-budgeted embedding."""

from __future__ import annotations

from .file_map import (
    DEFAULT_PROMPT_OPTIONS,
    SORT_ASC,
    SORT_BY_NAME,
    SORT_BY_SIZE,
    SORT_BY_TOKENS,
    SORT_DESC,
    TreeFormatOptions,
    render_file_map,
    render_file_map_block,
)
from .assembler import (
    DEFAULT_TOKEN_LIMIT,
    TOKEN_WARNING_RATIO,
    AssemblyProgress,
    AssemblyProgressCallback,
    FileReadError,
    Payload,
    PayloadBlock,
    assemble_prompt,
    format_file_block,
)

__all__ = [
    "DEFAULT_PROMPT_OPTIONS",
    "SORT_ASC",
    "SORT_BY_NAME",
    "SORT_BY_SIZE",
    "SORT_BY_TOKENS",
    "SORT_DESC",
    "TreeFormatOptions",
    "render_file_map",
    "render_file_map_block",
    "DEFAULT_TOKEN_LIMIT",
    "TOKEN_WARNING_RATIO",
    "AssemblyProgress",
    "AssemblyProgressCallback",
    "FileReadError",
    "Payload",
    "PayloadBlock",
    "assemble_prompt",
    "format_file_block",
]

"""ASCII tree rendering of scanned entries for the ``<file_map>`` block."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..binary_detection import format_file_size
from ..file_tree_model import SKIP_CONTENT, SKIP_EXTENSION, Entry

logger = logging.getLogger(__name__)

SORT_BY_NAME = "name"
SORT_BY_SIZE = "size"
SORT_BY_TOKENS = "tokens"
SORT_ASC = "asc"
SORT_DESC = "desc"

BRANCH_MID = "├── "
BRANCH_LAST = "└── "
INDENT_MID = "│   "
INDENT_LAST = "    "


@dataclass(frozen=True)
class TreeFormatOptions:
    """File-map formatting switches.

    ``max_depth`` counts root children as depth 1; ``None`` renders everything.
    """

    show_sizes: bool = False
    show_tokens: bool = False
    show_binary: bool = True
    sort_directories_first: bool = True
    sort_by: str = SORT_BY_NAME
    sort_direction: str = SORT_ASC
    show_only_selected: bool = False
    max_depth: int | None = None

    def __post_init__(self) -> None:
        if self.sort_by not in (SORT_BY_NAME, SORT_BY_SIZE, SORT_BY_TOKENS):
            raise ValueError(f"unknown sort_by: {self.sort_by!r}")
        if self.sort_direction not in (SORT_ASC, SORT_DESC):
            raise ValueError(f"unknown sort_direction: {self.sort_direction!r}")
        if self.max_depth is not None and self.max_depth < 1:
            raise ValueError("max_depth must be >= 1")


DEFAULT_PROMPT_OPTIONS = TreeFormatOptions()


@dataclass
class _MapNode:
    name: str
    relative_path: str
    is_directory: bool
    is_skipped: bool = False
    skip_reason: str | None = None
    size: int = 0
    tokens: int = 0
    selected: bool = False
    children: list[_MapNode] = field(default_factory=list)


def _build_map_tree(entries: list[Entry], selected_keys: set[str]) -> _MapNode:
    root = _MapNode(name="", relative_path="", is_directory=True)
    directories: dict[str, _MapNode] = {"": root}
    for entry in sorted(entries, key=lambda item: item.relative_path.count("/")):
        parent = directories.get(entry.parent_relative_path)
        if parent is None:
            logger.debug("Parent node not found for %s", entry.relative_path)
            continue
        node = _MapNode(
            name=entry.name,
            relative_path=entry.relative_path,
            is_directory=entry.is_directory,
            is_skipped=entry.is_skipped,
            skip_reason=entry.skip_reason,
            size=entry.size,
            tokens=entry.token_estimate,
            selected=entry.key in selected_keys,
        )
        parent.children.append(node)
        if entry.is_directory:
            directories[entry.relative_path] = node
    return root


def _aggregate(node: _MapNode) -> None:
    """Roll file sizes and token estimates up into directory nodes."""
    if not node.is_directory:
        return
    for child in node.children:
        _aggregate(child)
    node.size = sum(child.size for child in node.children)
    node.tokens = sum(child.tokens for child in node.children)


def _prune_unselected(node: _MapNode) -> bool:
    if not node.is_directory:
        return node.selected
    node.children = [child for child in node.children if _prune_unselected(child)]
    return bool(node.children)


def _sort_children(node: _MapNode, options: TreeFormatOptions) -> None:
    def value_key(item: _MapNode) -> tuple:
        if options.sort_by == SORT_BY_SIZE:
            return (item.size, item.name.lower(), item.name)
        if options.sort_by == SORT_BY_TOKENS:
            return (item.tokens, item.name.lower(), item.name)
        return (item.name.lower(), item.name)

    node.children.sort(key=value_key, reverse=options.sort_direction == SORT_DESC)
    if options.sort_directories_first:
        node.children.sort(key=lambda item: not item.is_directory)
    for child in node.children:
        if child.is_directory:
            _sort_children(child, options)


def _label(node: _MapNode, options: TreeFormatOptions) -> str:
    label = f"{node.name}/" if node.is_directory else node.name
    if node.is_directory:
        return label
    if options.show_binary and node.is_skipped:
        if node.skip_reason in (None, SKIP_EXTENSION, SKIP_CONTENT):
            label += " [binary]"
        else:
            label += f" [skipped: {node.skip_reason}]"
    details: list[str] = []
    if options.show_sizes:
        details.append(format_file_size(node.size))
    if options.show_tokens and not node.is_skipped:
        details.append(f"{node.tokens} tokens")
    if details:
        label += f" ({', '.join(details)})"
    return label


def _render(node: _MapNode, prefix: str, depth: int, options: TreeFormatOptions, out: list[str]) -> None:
    for idx, child in enumerate(node.children):
        last = idx == len(node.children) - 1
        out.append(f"{prefix}{BRANCH_LAST if last else BRANCH_MID}{_label(child, options)}\n")
        if not child.is_directory or not child.children:
            continue
        child_prefix = prefix + (INDENT_LAST if last else INDENT_MID)
        if options.max_depth is not None and depth >= options.max_depth:
            out.append(f"{child_prefix}{BRANCH_LAST}...\n")
            continue
        _render(child, child_prefix, depth + 1, options, out)


def render_file_map(
    entries: Iterable[Entry],
    selected: Iterable[Entry] = (),
    root_name: str | None = None,
    options: TreeFormatOptions | None = None,
) -> str:
    """Render ``entries`` as a box-drawing tree, one newline-terminated row per node."""
    options = options if options is not None else DEFAULT_PROMPT_OPTIONS
    tree = _build_map_tree(list(entries), {entry.key for entry in selected})
    _aggregate(tree)
    if options.show_only_selected:
        _prune_unselected(tree)
    _sort_children(tree, options)

    out: list[str] = []
    if root_name:
        out.append(f"{root_name}/\n")
    _render(tree, "", 1, options, out)
    return "".join(out)


def render_file_map_block(
    entries: Iterable[Entry],
    selected: Iterable[Entry] = (),
    root_name: str | None = None,
    options: TreeFormatOptions | None = None,
) -> str:
    return f"<file_map>\n{render_file_map(entries, selected, root_name, options)}</file_map>\n\n"


__all__ = [
    "SORT_BY_NAME",
    "SORT_BY_SIZE",
    "SORT_BY_TOKENS",
    "SORT_ASC",
    "SORT_DESC",
    "TreeFormatOptions",
    "DEFAULT_PROMPT_OPTIONS",
    "render_file_map",
    "render_file_map_block",
]

"""Parent/child index over a flat scan entry list.

Parents are found purely from ``relative_path`` prefixes, so the scanner does
not need to emit explicit parent pointers.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ..errors import InvalidSelectionActionError
from ..file_tree_model import Entry


@dataclass(frozen=True)
class SelectionNode:
    """Entry plus tree links and the number of selectable files below it."""

    entry: Entry
    parent_key: str | None
    child_keys: tuple[str, ...]
    depth: int
    selectable_leaf_count: int

    @property
    def key(self) -> str:
        return self.entry.key


class SelectionTree:
    """Immutable tree index keyed by ``Entry.key``."""

    def __init__(self, nodes: Mapping[str, SelectionNode], order: tuple[str, ...]) -> None:
        self._nodes = MappingProxyType(dict(nodes))
        self.order = order

    @classmethod
    def from_entries(cls, entries: Iterable[Entry]) -> SelectionTree:
        entry_list = list(entries)
        dir_keys_by_relative: dict[str, str] = {
            entry.relative_path: entry.key for entry in entry_list if entry.is_directory
        }
        parents: dict[str, str | None] = {}
        children: dict[str, list[str]] = {entry.key: [] for entry in entry_list}
        for entry in entry_list:
            parent_key = dir_keys_by_relative.get(entry.parent_relative_path)
            if parent_key == entry.key:
                parent_key = None
            parents[entry.key] = parent_key
            if parent_key is not None:
                children[parent_key].append(entry.key)

        depth: dict[str, int] = {}
        for entry in entry_list:
            depth[entry.key] = entry.relative_path.count("/")

        leaf_counts: dict[str, int] = {}
        for entry in sorted(entry_list, key=lambda item: depth[item.key], reverse=True):
            if entry.is_directory:
                leaf_counts[entry.key] = sum(leaf_counts.get(child, 0) for child in children[entry.key])
            else:
                leaf_counts[entry.key] = 1 if entry.is_selectable else 0

        nodes = {
            entry.key: SelectionNode(
                entry=entry,
                parent_key=parents[entry.key],
                child_keys=tuple(children[entry.key]),
                depth=depth[entry.key],
                selectable_leaf_count=leaf_counts[entry.key],
            )
            for entry in entry_list
        }
        return cls(nodes, tuple(entry.key for entry in entry_list))

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def nodes(self) -> Mapping[str, SelectionNode]:
        return self._nodes

    def node(self, key: str) -> SelectionNode:
        try:
            return self._nodes[key]
        except KeyError:
            raise InvalidSelectionActionError(f"unknown selection key: {key}") from None

    def ancestors(self, key: str) -> Iterator[str]:
        """Yield strict ancestors of ``key`` from nearest to farthest."""
        parent = self._nodes[key].parent_key
        while parent is not None:
            yield parent
            parent = self._nodes[parent].parent_key

    def descendants(self, key: str) -> Iterator[str]:
        """Yield strict descendants of ``key`` in pre-order."""
        stack = list(reversed(self._nodes[key].child_keys))
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self._nodes[current].child_keys))

    def selectable_leaves(self, key: str) -> list[str]:
        """Return selectable file keys at or below ``key``."""
        node = self._nodes[key]
        if not node.entry.is_directory:
            return [key] if node.entry.is_selectable else []
        if node.selectable_leaf_count == 0:
            return []
        return [
            child
            for child in self.descendants(key)
            if self._nodes[child].entry.is_selectable
        ]

    def directory_keys(self) -> list[str]:
        return [key for key in self.order if self._nodes[key].entry.is_directory]


__all__ = ["SelectionNode", "SelectionTree"]

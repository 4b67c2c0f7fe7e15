"""Pure tri-state selection reducer.

``reduce_selection(state, action)`` never mutates ``state``; every action
builds a new copy-on-write mapping. After each transition every directory is
``checked`` iff all selectable files below it are checked, ``unchecked`` iff
none are (or it has none), and ``indeterminate`` otherwise. Skipped files stay
``unchecked``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ..errors import InvalidSelectionActionError
from ..file_tree_model import Entry
from .tree import SelectionTree
from .types import (
    CHECKED,
    INDETERMINATE,
    UNCHECKED,
    DeselectAll,
    Initialize,
    SelectAll,
    SelectionAction,
    SetState,
    Toggle,
    ToggleVisible,
)


@dataclass(frozen=True)
class SelectionState:
    """Tree index plus read-only ``key -> tri-state`` mapping."""

    tree: SelectionTree
    states: Mapping[str, str]

    def state_of(self, key: str) -> str:
        return self.states.get(key, UNCHECKED)


def initial_selection_state(entries: Iterable[Entry]) -> SelectionState:
    tree = SelectionTree.from_entries(entries)
    return SelectionState(tree=tree, states=MappingProxyType({key: UNCHECKED for key in tree.order}))


def directory_state(tree: SelectionTree, states: Mapping[str, str], key: str) -> str:
    """Derive a directory's state from children that have selectable files."""
    considered = [
        states.get(child, UNCHECKED)
        for child in tree.nodes[key].child_keys
        if tree.nodes[child].selectable_leaf_count > 0
    ]
    if not considered:
        return UNCHECKED
    if all(value == CHECKED for value in considered):
        return CHECKED
    if all(value == UNCHECKED for value in considered):
        return UNCHECKED
    return INDETERMINATE


def _apply_leaf_states(state: SelectionState, leaf_states: Mapping[str, str]) -> SelectionState:
    """Set leaf states, then recompute every affected directory bottom-up."""
    changed = {key: value for key, value in leaf_states.items() if state.states.get(key, UNCHECKED) != value}
    if not changed:
        return state

    tree = state.tree
    new_states = dict(state.states)
    new_states.update(changed)

    affected: set[str] = set()
    for key in changed:
        for ancestor in tree.ancestors(key):
            if ancestor in affected:
                break
            affected.add(ancestor)

    for key in sorted(affected, key=lambda item: tree.nodes[item].depth, reverse=True):
        new_states[key] = directory_state(tree, new_states, key)
    return SelectionState(tree=tree, states=MappingProxyType(new_states))


def _set_nodes(state: SelectionState, keys: Iterable[str], value: str) -> SelectionState:
    """Set ``value`` on every selectable file at or below ``keys``; unknown keys are ignored."""
    tree = state.tree
    leaf_states: dict[str, str] = {}
    for key in keys:
        if key not in tree:
            continue
        for leaf in tree.selectable_leaves(key):
            leaf_states[leaf] = value
    return _apply_leaf_states(state, leaf_states)


def _toggle(state: SelectionState, key: str) -> SelectionState:
    tree = state.tree
    node = tree.node(key)
    if not node.entry.is_directory and node.entry.is_skipped:
        return state
    target = UNCHECKED if state.state_of(key) == CHECKED else CHECKED
    return _set_nodes(state, (key,), target)


def _set_state(state: SelectionState, key: str, value: str) -> SelectionState:
    if value not in (CHECKED, UNCHECKED):
        raise InvalidSelectionActionError(f"cannot set selection state to {value!r}")
    state.tree.node(key)
    return _set_nodes(state, (key,), value)


def _toggle_visible(state: SelectionState, keys: Iterable[str]) -> SelectionState:
    """Deselect when more than half of the selectable visible files are checked, else select."""
    tree = state.tree
    selectable: list[str] = []
    seen: set[str] = set()
    for key in keys:
        if key in seen or key not in tree:
            continue
        seen.add(key)
        if tree.nodes[key].entry.is_selectable:
            selectable.append(key)
    if not selectable:
        return state

    checked_count = sum(1 for key in selectable if state.state_of(key) == CHECKED)
    target = UNCHECKED if checked_count > len(selectable) / 2 else CHECKED
    return _apply_leaf_states(state, {key: target for key in selectable})


def reduce_selection(state: SelectionState, action: SelectionAction) -> SelectionState:
    """Apply ``action`` to ``state`` and return the resulting state."""
    if isinstance(action, Toggle):
        return _toggle(state, action.key)
    if isinstance(action, SetState):
        return _set_state(state, action.key, action.state)
    if isinstance(action, SelectAll):
        return _set_nodes(state, action.keys, CHECKED)
    if isinstance(action, DeselectAll):
        return _set_nodes(state, action.keys, UNCHECKED)
    if isinstance(action, ToggleVisible):
        return _toggle_visible(state, action.keys)
    if isinstance(action, Initialize):
        return initial_selection_state(action.entries)
    raise InvalidSelectionActionError(f"unsupported selection action: {action!r}")


def selected_files(state: SelectionState) -> list[Entry]:
    """Return checked, selectable files ordered by ``relative_path``."""
    nodes = state.tree.nodes
    picked = [
        nodes[key].entry
        for key, value in state.states.items()
        if value == CHECKED and key in nodes and nodes[key].entry.is_selectable
    ]
    return sorted(picked, key=lambda entry: entry.relative_path)


__all__ = [
    "SelectionState",
    "initial_selection_state",
    "directory_state",
    "reduce_selection",
    "selected_files",
]

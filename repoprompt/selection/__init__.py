"""Hierarchical tri-state selection over scanned entries.

Actions go through the pure ``reduce_selection`` reducer; ``SelectionStore``
owns the current state for a host and serializes transitions.
"""

from __future__ import annotations

from .types import (
    CHECK_STATES,
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
from .tree import SelectionNode, SelectionTree
from .reducer import (
    SelectionState,
    directory_state,
    initial_selection_state,
    reduce_selection,
    selected_files,
)
from .store import SelectionListener, SelectionStore
from .stats import (
    ExtensionStats,
    SelectionStats,
    filter_by_extension,
    group_by_extension,
    selection_stats,
)

__all__ = [
    "CHECK_STATES",
    "CHECKED",
    "INDETERMINATE",
    "UNCHECKED",
    "DeselectAll",
    "Initialize",
    "SelectAll",
    "SelectionAction",
    "SetState",
    "Toggle",
    "ToggleVisible",
    "SelectionNode",
    "SelectionTree",
    "SelectionState",
    "directory_state",
    "initial_selection_state",
    "reduce_selection",
    "selected_files",
    "SelectionListener",
    "SelectionStore",
    "ExtensionStats",
    "SelectionStats",
    "filter_by_extension",
    "group_by_extension",
    "selection_stats",
]

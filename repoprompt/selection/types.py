"""Tri-state values and selection actions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..file_tree_model import Entry

UNCHECKED = "unchecked"
CHECKED = "checked"
INDETERMINATE = "indeterminate"
CHECK_STATES: tuple[str, ...] = (UNCHECKED, CHECKED, INDETERMINATE)


@dataclass(frozen=True)
class Toggle:
    """Flip one node; directories cascade to every selectable descendant."""

    key: str


@dataclass(frozen=True)
class SetState:
    """Force one node to ``checked`` or ``unchecked`` with the same cascades as ``Toggle``."""

    key: str
    state: str


@dataclass(frozen=True)
class SelectAll:
    keys: Iterable[str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", tuple(self.keys))


@dataclass(frozen=True)
class DeselectAll:
    keys: Iterable[str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", tuple(self.keys))


@dataclass(frozen=True)
class ToggleVisible:
    """Majority toggle over the selectable files among ``keys``."""

    keys: Iterable[str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", tuple(self.keys))


@dataclass(frozen=True)
class Initialize:
    """Reset to ``unchecked`` for a fresh scan's entries."""

    entries: Iterable[Entry]

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))


SelectionAction = Toggle | SetState | SelectAll | DeselectAll | ToggleVisible | Initialize


__all__ = [
    "UNCHECKED",
    "CHECKED",
    "INDETERMINATE",
    "CHECK_STATES",
    "Toggle",
    "SetState",
    "SelectAll",
    "DeselectAll",
    "ToggleVisible",
    "Initialize",
    "SelectionAction",
]

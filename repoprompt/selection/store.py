"""Caller-owned selection state with single-writer dispatch."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping

from ..errors import SelectionBusyError
from ..file_tree_model import Entry
from .reducer import SelectionState, initial_selection_state, reduce_selection, selected_files
from .tree import SelectionTree
from .types import (
    DeselectAll,
    Initialize,
    SelectAll,
    SelectionAction,
    SetState,
    Toggle,
    ToggleVisible,
)

logger = logging.getLogger(__name__)

SelectionListener = Callable[[list[Entry]], None]


class SelectionStore:
    """Hold the current ``SelectionState`` and apply actions atomically.

    A dispatch that overlaps another one raises ``SelectionBusyError`` instead
    of interleaving. Listeners run after the transition is committed and only
    when the set of selected files changed.
    """

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        self._state = initial_selection_state(entries)
        self._lock = threading.Lock()
        self._listeners: list[SelectionListener] = []
        self._selected_keys: tuple[str, ...] = ()

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def tree(self) -> SelectionTree:
        return self._state.tree

    @property
    def states(self) -> Mapping[str, str]:
        return self._state.states

    def state_of(self, key: str) -> str:
        return self._state.state_of(key)

    def selected_files(self) -> list[Entry]:
        return selected_files(self._state)

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: SelectionAction) -> SelectionState:
        if not self._lock.acquire(blocking=False):
            raise SelectionBusyError(f"selection transition already in progress; rejected {type(action).__name__}")
        try:
            self._state = reduce_selection(self._state, action)
            files = selected_files(self._state)
        finally:
            self._lock.release()

        keys = tuple(entry.key for entry in files)
        if keys != self._selected_keys:
            self._selected_keys = keys
            for listener in list(self._listeners):
                listener(files)
        return self._state

    def toggle(self, key: str) -> SelectionState:
        return self.dispatch(Toggle(key))

    def set_state(self, key: str, state: str) -> SelectionState:
        return self.dispatch(SetState(key, state))

    def select_all(self, keys: Iterable[str] | None = None) -> SelectionState:
        return self.dispatch(SelectAll(self.tree.order if keys is None else keys))

    def deselect_all(self, keys: Iterable[str] | None = None) -> SelectionState:
        return self.dispatch(DeselectAll(self.tree.order if keys is None else keys))

    def toggle_visible(self, keys: Iterable[str]) -> SelectionState:
        return self.dispatch(ToggleVisible(keys))

    def initialize(self, entries: Iterable[Entry]) -> SelectionState:
        logger.debug("Resetting selection state")
        return self.dispatch(Initialize(entries))


__all__ = ["SelectionListener", "SelectionStore"]

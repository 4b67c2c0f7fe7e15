"""Tests for the tri-state selection reducer."""

from __future__ import annotations

import random
import unittest
from pathlib import Path

from repoprompt.errors import InvalidSelectionActionError
from repoprompt.file_tree_model import SKIP_EXTENSION, Entry
from repoprompt.selection import (
    CHECKED,
    INDETERMINATE,
    UNCHECKED,
    DeselectAll,
    Initialize,
    SelectAll,
    SelectionState,
    SetState,
    Toggle,
    ToggleVisible,
    initial_selection_state,
    reduce_selection,
    selected_files,
)

ROOT = Path("/project")


def _dir(relative_path: str) -> Entry:
    return Entry(absolute_path=ROOT / relative_path, relative_path=relative_path, size=0, is_directory=True)


def _file(relative_path: str, skipped: bool = False, tokens: int = 1) -> Entry:
    return Entry(
        absolute_path=ROOT / relative_path,
        relative_path=relative_path,
        size=10,
        is_directory=False,
        is_skipped=skipped,
        skip_reason=SKIP_EXTENSION if skipped else None,
        token_estimate=0 if skipped else tokens,
    )


def _key(relative_path: str) -> str:
    return str(ROOT / relative_path)


def _random_entries(rng: random.Random) -> list[Entry]:
    entries: list[Entry] = []

    def fill(prefix: str, depth: int) -> None:
        for idx in range(rng.randint(0, 4)):
            name = f"{prefix}f{idx}.txt"
            entries.append(_file(name, skipped=rng.random() < 0.25))
        if depth >= 3:
            return
        for idx in range(rng.randint(0, 3)):
            name = f"{prefix}d{idx}"
            entries.append(_dir(name))
            fill(f"{name}/", depth + 1)

    fill("", 0)
    return entries


def _assert_tri_state_invariant(test: unittest.TestCase, state: SelectionState) -> None:
    tree = state.tree
    for key, node in tree.nodes.items():
        value = state.state_of(key)
        if not node.entry.is_directory:
            if node.entry.is_skipped:
                test.assertEqual(value, UNCHECKED, key)
            else:
                test.assertIn(value, (CHECKED, UNCHECKED), key)
            continue
        leaves = tree.selectable_leaves(key)
        checked = [leaf for leaf in leaves if state.state_of(leaf) == CHECKED]
        if not leaves or not checked:
            expected = UNCHECKED
        elif len(checked) == len(leaves):
            expected = CHECKED
        else:
            expected = INDETERMINATE
        test.assertEqual(value, expected, key)


class SelectionReducerTests(unittest.TestCase):
    def _sample_state(self) -> SelectionState:
        return initial_selection_state(
            [
                _dir("src"),
                _file("src/a.py"),
                _file("src/logo.png", skipped=True),
                _dir("src/pkg"),
                _file("src/pkg/b.py"),
                _file("src/pkg/c.py"),
                _dir("assets"),
                _file("assets/icon.png", skipped=True),
                _file("README.md"),
            ]
        )

    def test_toggling_directory_skips_skipped_children(self) -> None:
        state = initial_selection_state([_dir("d"), _file("d/keep.txt"), _file("d/skip.png", skipped=True)])

        state = reduce_selection(state, Toggle(_key("d")))

        self.assertEqual(state.state_of(_key("d/keep.txt")), CHECKED)
        self.assertEqual(state.state_of(_key("d/skip.png")), UNCHECKED)
        self.assertEqual(state.state_of(_key("d")), CHECKED)

    def test_partial_selection_marks_ancestors_indeterminate(self) -> None:
        state = reduce_selection(self._sample_state(), Toggle(_key("src/pkg/b.py")))

        self.assertEqual(state.state_of(_key("src/pkg")), INDETERMINATE)
        self.assertEqual(state.state_of(_key("src")), INDETERMINATE)
        self.assertEqual(state.state_of(_key("assets")), UNCHECKED)

        state = reduce_selection(state, Toggle(_key("src/pkg/c.py")))
        self.assertEqual(state.state_of(_key("src/pkg")), CHECKED)
        self.assertEqual(state.state_of(_key("src")), INDETERMINATE)

        state = reduce_selection(state, Toggle(_key("src/a.py")))
        self.assertEqual(state.state_of(_key("src")), CHECKED)

    def test_toggling_indeterminate_directory_checks_everything(self) -> None:
        state = reduce_selection(self._sample_state(), Toggle(_key("src/pkg/b.py")))

        state = reduce_selection(state, Toggle(_key("src")))

        self.assertEqual(state.state_of(_key("src")), CHECKED)
        self.assertEqual(
            [entry.relative_path for entry in selected_files(state)],
            ["src/a.py", "src/pkg/b.py", "src/pkg/c.py"],
        )

    def test_directory_without_selectable_files_stays_unchecked(self) -> None:
        state = reduce_selection(self._sample_state(), Toggle(_key("assets")))
        self.assertEqual(state.state_of(_key("assets")), UNCHECKED)

        state = reduce_selection(state, SelectAll(state.tree.order))
        self.assertEqual(state.state_of(_key("assets")), UNCHECKED)
        self.assertEqual(state.state_of(_key("src")), CHECKED)

    def test_toggling_skipped_file_is_noop(self) -> None:
        state = self._sample_state()
        self.assertIs(reduce_selection(state, Toggle(_key("src/logo.png"))), state)

    def test_toggle_twice_restores_mapping(self) -> None:
        original = self._sample_state()
        for key in (_key("README.md"), _key("src"), _key("src/pkg")):
            with self.subTest(key=key):
                once = reduce_selection(original, Toggle(key))
                self.assertNotEqual(dict(once.states), dict(original.states))
                twice = reduce_selection(once, Toggle(key))
                self.assertEqual(dict(twice.states), dict(original.states))

    def test_reducer_does_not_mutate_input(self) -> None:
        state = self._sample_state()
        before = dict(state.states)

        reduce_selection(state, SelectAll(state.tree.order))

        self.assertEqual(dict(state.states), before)

    def test_deselect_all_is_idempotent(self) -> None:
        state = reduce_selection(self._sample_state(), SelectAll([_key("src")]))
        keys = state.tree.order

        once = reduce_selection(state, DeselectAll(keys))
        twice = reduce_selection(once, DeselectAll(keys))

        self.assertEqual(dict(once.states), dict(twice.states))
        self.assertEqual(selected_files(twice), [])

    def test_select_subset_recomputes_ancestors_outside_subset(self) -> None:
        state = reduce_selection(self._sample_state(), SelectAll([_key("src/pkg/b.py"), _key("src/pkg/c.py")]))

        self.assertEqual(state.state_of(_key("src/pkg")), CHECKED)
        self.assertEqual(state.state_of(_key("src")), INDETERMINATE)

    def test_batch_actions_ignore_unknown_keys(self) -> None:
        state = reduce_selection(self._sample_state(), SelectAll([_key("nope"), _key("README.md")]))
        self.assertEqual([entry.relative_path for entry in selected_files(state)], ["README.md"])

    def test_set_state_rejects_indeterminate_and_unknown_keys(self) -> None:
        state = self._sample_state()
        with self.assertRaises(InvalidSelectionActionError):
            reduce_selection(state, SetState(_key("src"), INDETERMINATE))
        with self.assertRaises(InvalidSelectionActionError):
            reduce_selection(state, SetState(_key("missing"), CHECKED))
        with self.assertRaises(InvalidSelectionActionError):
            reduce_selection(state, Toggle(_key("missing")))

    def test_set_state_applies_explicit_target(self) -> None:
        state = reduce_selection(self._sample_state(), SetState(_key("src/pkg"), CHECKED))
        state = reduce_selection(state, SetState(_key("src/pkg"), CHECKED))
        self.assertEqual(state.state_of(_key("src/pkg")), CHECKED)

        state = reduce_selection(state, SetState(_key("src/pkg/b.py"), UNCHECKED))
        self.assertEqual(state.state_of(_key("src/pkg")), INDETERMINATE)

    def test_toggle_visible_uses_majority_of_selectable_files(self) -> None:
        state = self._sample_state()
        visible = [_key("src/a.py"), _key("src/pkg/b.py"), _key("src/pkg/c.py"), _key("src/logo.png"), _key("src")]

        state = reduce_selection(state, SelectAll([_key("src/a.py")]))
        state = reduce_selection(state, ToggleVisible(visible))
        self.assertEqual(len(selected_files(state)), 3)

        state = reduce_selection(state, ToggleVisible(visible))
        self.assertEqual(selected_files(state), [])

        state = reduce_selection(state, SelectAll([_key("src/a.py")]))
        self.assertEqual(len(selected_files(state)), 1)
        state = reduce_selection(state, ToggleVisible([_key("src/a.py"), _key("src/pkg/b.py")]))
        self.assertEqual(len(selected_files(state)), 2)

    def test_toggle_visible_with_no_selectable_nodes_is_noop(self) -> None:
        state = self._sample_state()
        self.assertIs(reduce_selection(state, ToggleVisible([_key("assets"), _key("src/logo.png")])), state)

    def test_initialize_clears_selection_and_rebuilds_tree(self) -> None:
        state = reduce_selection(self._sample_state(), SelectAll([_key("src")]))

        state = reduce_selection(state, Initialize([_dir("new"), _file("new/x.txt")]))

        self.assertEqual(selected_files(state), [])
        self.assertEqual(set(state.tree.order), {_key("new"), _key("new/x.txt")})
        self.assertTrue(all(value == UNCHECKED for value in state.states.values()))

    def test_selected_files_are_ordered_by_relative_path(self) -> None:
        state = reduce_selection(self._sample_state(), SelectAll(self._sample_state().tree.order))
        paths = [entry.relative_path for entry in selected_files(state)]
        self.assertEqual(paths, sorted(paths))
        self.assertNotIn("src/logo.png", paths)

    def test_tri_state_invariant_holds_for_random_action_sequences(self) -> None:
        rng = random.Random(20241019)
        for _ in range(40):
            entries = _random_entries(rng)
            state = initial_selection_state(entries)
            keys = list(state.tree.order)
            _assert_tri_state_invariant(self, state)
            if not keys:
                continue
            for _ in range(25):
                subset = rng.sample(keys, rng.randint(0, len(keys)))
                choice = rng.randrange(5)
                if choice == 0:
                    action = Toggle(rng.choice(keys))
                elif choice == 1:
                    action = SetState(rng.choice(keys), rng.choice((CHECKED, UNCHECKED)))
                elif choice == 2:
                    action = SelectAll(subset)
                elif choice == 3:
                    action = DeselectAll(subset)
                else:
                    action = ToggleVisible(subset)
                state = reduce_selection(state, action)
                _assert_tri_state_invariant(self, state)


if __name__ == "__main__":
    unittest.main()

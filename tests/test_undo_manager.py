"""Test the snapshot undo/redo history."""

import logging
import unittest

import pytest

from mathedit.undo import (
    DocumentModel,
    ModelState,
    Selection,
    SetStateOptions,
    UndoManager,
)


class FakeModel(DocumentModel):
    """Document double whose content is whatever the test assigns."""

    def __init__(self, content=""):
        self.content = content
        self.selection = Selection.caret(len(content))
        self.restores = []

    def edit(self, content):
        self.content = content
        self.selection = Selection.caret(len(content))

    def get_state(self):
        return ModelState(content=tuple(self.content), selection=self.selection)

    def set_state(self, state, options):
        self.content = ''.join(state.content)
        self.selection = state.selection
        self.restores.append(options)


def contents(manager):
    return [''.join(state.content) for state in manager.entries]


class TestUndoManager(unittest.TestCase):
    """Test undo manager operations."""

    def setUp(self):
        self.model = FakeModel()
        self.undo = UndoManager(self.model)
        self.undo.start_recording()
        self.undo.snapshot()

    def record(self, content, op=None):
        self.model.edit(content)
        return self.undo.snapshot(op)

    def test_fresh_manager_is_empty(self):
        undo = UndoManager(FakeModel())
        self.assertEqual(len(undo), 0)
        self.assertEqual(undo.position, -1)
        self.assertFalse(undo.can_undo())
        self.assertFalse(undo.can_redo())
        self.assertFalse(undo.undo())
        self.assertFalse(undo.redo())

    def test_snapshot_without_recording(self):
        model = FakeModel("x")
        undo = UndoManager(model)
        self.assertFalse(undo.snapshot())
        self.assertFalse(undo.snapshot("insert"))
        self.assertEqual(len(undo), 0)

    def test_snapshot_after_stop_recording(self):
        self.undo.stop_recording()
        self.assertFalse(self.record("a", "insert"))
        self.assertEqual(contents(self.undo), [""])
        self.assertEqual(self.undo.position, 0)

    def test_recording_is_idempotent(self):
        self.undo.start_recording()
        self.undo.start_recording()
        self.assertTrue(self.undo.is_recording)
        self.undo.stop_recording()
        self.undo.stop_recording()
        self.assertFalse(self.undo.is_recording)
        self.assertEqual(contents(self.undo), [""])

    def test_single_entry_cannot_undo(self):
        self.assertEqual(len(self.undo), 1)
        self.assertFalse(self.undo.can_undo())
        self.assertFalse(self.undo.undo())
        self.assertEqual(self.model.restores, [])

    def test_undo_restores_previous_entry(self):
        self.record("a")
        self.record("ab")

        self.assertTrue(self.undo.undo())
        self.assertEqual(self.model.content, "a")
        self.assertEqual(self.undo.position, 1)
        self.assertEqual(
            self.model.restores[-1],
            SetStateOptions(type="undo", silence_notifications=False),
        )

    def test_undo_then_redo_restores_state(self):
        self.record("x+1")
        after = self.model.get_state()

        self.assertTrue(self.undo.undo())
        self.assertEqual(self.model.content, "")
        self.assertTrue(self.undo.redo())

        self.assertEqual(self.model.get_state(), after)
        self.assertEqual(self.model.restores[-1].type, "redo")
        self.assertFalse(self.model.restores[-1].silence_notifications)
        self.assertFalse(self.undo.can_redo())

    def test_redo_fails_at_newest(self):
        self.record("a")
        self.assertFalse(self.undo.can_redo())
        self.assertFalse(self.undo.redo())

    def test_undo_to_oldest(self):
        for content in ("a", "ab", "abc"):
            self.record(content)
        while self.undo.undo():
            pass
        self.assertEqual(self.undo.position, 0)
        self.assertEqual(self.model.content, "")
        self.assertTrue(self.undo.can_redo())

    def test_coalescing_same_op(self):
        self.record("a", "insert")
        self.record("ab", "insert")

        self.assertEqual(contents(self.undo), ["", "ab"])
        self.assertEqual(self.undo.position, 1)

        self.assertTrue(self.undo.undo())
        self.assertEqual(self.model.content, "")

    def test_coalescing_many_insertions(self):
        for i in range(1, 6):
            self.record("x" * i, "insert")
        self.assertEqual(contents(self.undo), ["", "xxxxx"])

    def test_stop_coalescing_breaks_run(self):
        self.record("a", "insert")
        self.undo.stop_coalescing()
        self.record("ab", "insert")

        self.assertEqual(contents(self.undo), ["", "a", "ab"])

    def test_different_ops_do_not_coalesce(self):
        self.record("ab", "insert")
        self.record("a", "delete")
        self.record("ac", "insert")

        self.assertEqual(contents(self.undo), ["", "ab", "a", "ac"])
        self.assertEqual(self.undo.last_op, "insert")

    def test_untagged_snapshots_never_coalesce(self):
        self.record("a")
        self.record("ab")
        self.assertEqual(contents(self.undo), ["", "a", "ab"])
        self.assertEqual(self.undo.last_op, "")

    def test_undo_clears_last_op(self):
        self.record("a", "insert")
        self.record("ab", "insert")
        self.undo.undo()
        self.assertEqual(self.undo.last_op, "")

    def test_redo_clears_last_op(self):
        self.record("a")
        self.undo.undo()
        self.record("b", "insert")
        self.undo.undo()
        self.undo.redo()
        self.assertEqual(self.undo.last_op, "")
        self.record("bc", "insert")
        self.assertEqual(contents(self.undo), ["", "b", "bc"])

    def test_first_coalesced_edit_keeps_oldest_entry(self):
        # Nothing to undo yet, so the pop is a no-op and the entry is pushed
        model = FakeModel()
        undo = UndoManager(model)
        undo.start_recording()
        model.edit("a")
        undo.snapshot("insert")
        model.edit("ab")
        undo.snapshot("insert")
        self.assertEqual(contents(undo), ["a", "ab"])

    def test_new_snapshot_discards_redo_branch(self):
        for content in ("a", "ab", "abc"):
            self.record(content)
        self.undo.undo()
        self.undo.undo()
        self.assertTrue(self.undo.can_redo())

        self.record("az", "x")

        self.assertFalse(self.undo.can_redo())
        self.assertEqual(contents(self.undo), ["", "a", "az"])

    def test_redo_truncation_from_depth_three(self):
        model = FakeModel("a")
        undo = UndoManager(model)
        undo.start_recording()
        for content in ("a", "ab", "abc"):
            model.edit(content)
            undo.snapshot()
        self.assertEqual(undo.position, 2)

        undo.undo()
        self.assertEqual(undo.position, 1)
        model.edit("abx")
        undo.snapshot("x")

        self.assertFalse(undo.can_redo())
        self.assertEqual(contents(undo), ["a", "ab", "abx"])

    def test_pop_discards_current_and_later_entries(self):
        for content in ("a", "ab", "abc"):
            self.record(content)
        self.undo.undo()
        self.undo.pop()
        self.assertEqual(contents(self.undo), ["", "a"])
        self.assertEqual(self.undo.position, 1)

    def test_pop_without_undo_target_is_noop(self):
        self.undo.pop()
        self.assertEqual(contents(self.undo), [""])
        self.assertEqual(self.undo.position, 0)

    def test_stop_coalescing_amends_current_selection(self):
        self.record("abc", "insert")
        before = self.undo.entries[0]
        self.undo.stop_coalescing(Selection.caret(1))

        self.assertEqual(self.undo.entries[1].selection, Selection.caret(1))
        self.assertEqual(self.undo.entries[1].content, tuple("abc"))
        self.assertIs(self.undo.entries[0], before)
        self.assertEqual(len(self.undo), 2)

    def test_stop_coalescing_on_empty_stack(self):
        undo = UndoManager(FakeModel())
        undo.stop_coalescing(Selection.caret(3))
        self.assertEqual(len(undo), 0)
        self.assertEqual(undo.last_op, "")

    def test_amended_selection_is_restored_on_redo(self):
        self.record("abc", "insert")
        self.undo.stop_coalescing(Selection.caret(1))
        self.undo.undo()
        self.undo.redo()
        self.assertEqual(self.model.selection, Selection.caret(1))

    def test_reset(self):
        self.record("a")
        self.record("ab")
        self.undo.reset()

        self.assertEqual(len(self.undo), 0)
        self.assertEqual(self.undo.position, -1)
        self.assertEqual(self.undo.last_op, "")
        self.assertFalse(self.undo.can_undo())
        self.assertFalse(self.undo.undo())
        # Recording survives a reset
        self.assertTrue(self.record("abc"))

    def test_snapshots_are_independent_of_live_model(self):
        self.record("a")
        self.model.edit("changed")
        self.assertEqual(contents(self.undo), ["", "a"])

    def test_selection_needs_a_range(self):
        with self.assertRaises(ValueError):
            Selection(ranges=())

    def test_invalid_maximum_depth(self):
        with self.assertRaises(ValueError):
            UndoManager(FakeModel(), maximum_depth=0)


class TestEviction(unittest.TestCase):
    """Test the bounded history depth."""

    def test_default_maximum_depth(self):
        self.assertEqual(UndoManager.maximum_depth, 1000)

    def test_eviction_drops_oldest(self):
        model = FakeModel()
        undo = UndoManager(model)
        undo.start_recording()
        depth = UndoManager.maximum_depth

        for i in range(depth + 5):
            model.edit(str(i))
            self.assertTrue(undo.snapshot())
            self.assertLessEqual(len(undo), depth)

        self.assertEqual(len(undo), depth)
        self.assertEqual(undo.position, depth - 1)
        self.assertEqual(contents(undo)[0], "5")
        self.assertEqual(contents(undo)[-1], str(depth + 4))

    def test_small_depth_keeps_undo_working(self):
        model = FakeModel()
        undo = UndoManager(model, maximum_depth=3)
        undo.start_recording()
        for content in ("a", "b", "c", "d", "e"):
            model.edit(content)
            undo.snapshot()

        self.assertEqual(contents(undo), ["c", "d", "e"])
        self.assertTrue(undo.undo())
        self.assertTrue(undo.undo())
        self.assertEqual(model.content, "c")
        self.assertFalse(undo.undo())

    def test_eviction_with_coalescing(self):
        model = FakeModel()
        undo = UndoManager(model, maximum_depth=2)
        undo.start_recording()
        for content in ("a", "ab", "abc"):
            model.edit(content)
            undo.snapshot("insert")
        self.assertEqual(contents(undo), ["a", "abc"])
        self.assertEqual(undo.position, 1)


def test_trace_logs_stack(caplog):
    model = FakeModel()
    undo = UndoManager(model, trace=True)
    undo.start_recording()
    undo.snapshot()
    model.edit("x")
    with caplog.at_level(logging.DEBUG, logger="mathedit.undo"):
        undo.snapshot("insert")
        undo.undo()

    assert "snapshot" in caplog.text
    assert ">x" in caplog.text
    assert "undo:" in caplog.text


def test_no_trace_by_default(caplog):
    model = FakeModel()
    undo = UndoManager(model)
    undo.start_recording()
    with caplog.at_level(logging.DEBUG, logger="mathedit.undo"):
        undo.snapshot()
        model.edit("x")
        undo.snapshot()
        undo.undo()
    assert caplog.text == ""


@pytest.mark.parametrize("ops, expected", [
    (["insert", "insert", "insert"], 2),
    (["insert", None, "insert"], 4),
    (["delete", "insert", "delete"], 4),
    (["delete", "delete"], 2),
])
def test_history_depth_for_op_sequences(ops, expected):
    model = FakeModel()
    undo = UndoManager(model)
    undo.start_recording()
    undo.snapshot()
    for i, op in enumerate(ops):
        model.edit("x" * (i + 1))
        undo.snapshot(op)
    assert len(undo) == expected

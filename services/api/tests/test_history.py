"""
Tests for the bounded undo/redo history.

Run with: pytest tests/test_history.py -v
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.history import HistoryManager


def _run(history, states):
    """Record a linear sequence of states; returns the live (last) state."""
    live = states[0]
    for nxt in states[1:]:
        history.record(live)
        live = nxt
    return live


class TestHistoryManager:
    """Tests for HistoryManager."""

    def test_empty_history(self):
        h = HistoryManager()
        assert not h.can_undo
        assert not h.can_redo
        assert h.undo("live") is None
        assert h.redo() is None

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            HistoryManager(0)

    def test_undo_returns_previous_states(self):
        h = HistoryManager()
        live = _run(h, ["s0", "s1", "s2"])
        live = h.undo(live)
        assert live == "s1"
        live = h.undo(live)
        assert live == "s0"
        assert h.undo(live) is None

    def test_undo_then_redo_is_inverse(self):
        """Undo once per op, then redo as many times, returns to the last state."""
        h = HistoryManager()
        states = [f"s{i}" for i in range(6)]
        live = _run(h, states)

        for _ in range(5):
            live = h.undo(live)
        assert live == "s0"

        for _ in range(5):
            live = h.redo()
        assert live == "s5"
        assert not h.can_redo

    def test_record_after_undo_truncates_redo(self):
        h = HistoryManager()
        live = _run(h, ["s0", "s1", "s2"])
        live = h.undo(live)
        assert h.can_redo

        h.record(live)
        live = "branch"
        assert not h.can_redo
        assert h.undo(live) == "s1"

    def test_capacity_limits_undo_depth(self):
        """Only the 10 most recent steps can be undone."""
        h = HistoryManager(10)
        states = [f"s{i}" for i in range(13)]
        live = _run(h, states)

        undone = 0
        while True:
            previous = h.undo(live)
            if previous is None:
                break
            live = previous
            undone += 1

        assert undone == 10
        assert live == "s2"

        for _ in range(10):
            live = h.redo()
        assert live == "s12"

    def test_clear(self):
        h = HistoryManager()
        _run(h, ["s0", "s1"])
        h.clear()
        assert not h.can_undo
        assert h.to_api() == {"historyIndex": -1, "canUndo": False, "canRedo": False, "capacity": 10}

# services/api/models/history.py
from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")

DEFAULT_CAPACITY = 10


class HistoryManager(Generic[T]):
    """
    Bounded undo/redo stack of document snapshots.

    `history_index` points at the most recent snapshot available for undo
    (-1 when there is nothing to undo). Undo parks the live document right
    after that slot so a following redo can bring it back. Recording while
    not at the end discards the redo tail. At most `capacity` undo steps are
    kept; older snapshots fall off the front.

    Snapshots are stored by reference: callers must never mutate a document
    after handing it to `record` (the edit engine always returns new ones).
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("history capacity must be >= 1")
        self.capacity = capacity
        self._history: List[T] = []
        self.history_index: int = -1

    def __len__(self) -> int:
        return self.history_index + 1

    @property
    def can_undo(self) -> bool:
        return self.history_index >= 0

    @property
    def can_redo(self) -> bool:
        return self.history_index + 2 < len(self._history)

    def record(self, previous: T) -> None:
        """Push the document as it was before a change."""
        del self._history[self.history_index + 1:]
        self._history.append(previous)
        overflow = len(self._history) - self.capacity
        if overflow > 0:
            del self._history[:overflow]
        self.history_index = len(self._history) - 1

    def undo(self, live: T) -> Optional[T]:
        """Return the document to show after undo, or None when there is nothing to undo."""
        if not self.can_undo:
            return None
        snapshot = self._history[self.history_index]
        tip = self.history_index + 1
        if tip == len(self._history):
            self._history.append(live)
        else:
            self._history[tip] = live
        self.history_index -= 1
        return snapshot

    def redo(self) -> Optional[T]:
        """Return the document to show after redo, or None when there is nothing to redo."""
        if not self.can_redo:
            return None
        self.history_index += 1
        return self._history[self.history_index + 1]

    def clear(self) -> None:
        self._history.clear()
        self.history_index = -1

    def to_api(self) -> dict:
        return {
            "historyIndex": self.history_index,
            "canUndo": self.can_undo,
            "canRedo": self.can_redo,
            "capacity": self.capacity,
        }

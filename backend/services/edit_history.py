"""
Undo/redo history of document snapshots

Snapshots are serialized documents (plain strings), so two snapshots of an
unchanged document compare equal and are stored once.
"""

from typing import List, Optional


class EditHistory:
    """Two stacks of immutable snapshots; the top of the undo stack is the current state"""

    def __init__(self):
        self._undo: List[str] = []
        self._redo: List[str] = []

    @property
    def can_undo(self) -> bool:
        return len(self._undo) > 1

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def current(self) -> Optional[str]:
        return self._undo[-1] if self._undo else None

    def reset(self, snapshot: Optional[str] = None):
        """Forget all history, optionally seeding it with the loaded state"""
        self._undo.clear()
        self._redo.clear()
        if snapshot is not None:
            self._undo.append(snapshot)

    def push(self, snapshot: str, clear_redo: bool = True) -> bool:
        """
        Record a new state. Returns False when it equals the current state.
        A genuine new state invalidates the redo stack.
        """
        if self._undo and self._undo[-1] == snapshot:
            return False

        self._undo.append(snapshot)
        if clear_redo:
            self._redo.clear()
        return True

    def undo(self) -> Optional[str]:
        """Step back; returns the state to restore or None when at the oldest state"""
        if len(self._undo) <= 1:
            return None

        self._redo.append(self._undo.pop())
        return self._undo[-1]

    def redo(self) -> Optional[str]:
        if not self._redo:
            return None

        snapshot = self._redo.pop()
        self._undo.append(snapshot)
        return snapshot

"""Undo/redo stacks owned by each buffer."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .change import Change


class ChangeHistory:
    """Two plain stacks of ``Change`` records.

    A record lives on exactly one stack at a time; ``Undo`` moves the popped
    record onto the redo stack and ``Redo`` re-applies it, which pushes a
    fresh record back onto the undo stack.
    """

    def __init__(self) -> None:
        self.undo_stack: List["Change"] = []
        self.redo_stack: List["Change"] = []

    def push(self, change: "Change") -> None:
        self.undo_stack.append(change)

    def pop_undo(self) -> Optional["Change"]:
        return self.undo_stack.pop() if self.undo_stack else None

    def push_redo(self, change: "Change") -> None:
        self.redo_stack.append(change)

    def pop_redo(self) -> Optional["Change"]:
        return self.redo_stack.pop() if self.redo_stack else None

    def clear_redo(self) -> None:
        self.redo_stack.clear()

    def last(self) -> Optional["Change"]:
        return self.undo_stack[-1] if self.undo_stack else None

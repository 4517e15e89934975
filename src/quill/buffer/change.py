"""Reversible buffer mutations.

Each ``Change`` knows how to apply itself to a ``Buffer`` (pushing a record
onto the undo stack) and how to revert that record. ``Undo`` and ``Redo`` are
changes too: they shuttle records between the two stacks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, List, Optional

from ..runtime import telemetry
from .state import Cursor, Direction

if TYPE_CHECKING:
    from .buffer import Buffer


class Change:
    """Base class for undoable buffer mutations."""

    kind: ClassVar[str] = "change"
    modifies_content: ClassVar[bool] = False

    def apply(self, buffer: "Buffer") -> None:
        with telemetry.span(name=f"change::{self.kind}"):
            self._forward(buffer)

    def _forward(self, buffer: "Buffer") -> None:
        raise NotImplementedError

    def _revert(self, buffer: "Buffer") -> None:
        raise NotImplementedError

    @classmethod
    def move_cursor(cls, direction: Direction, buffer: "Buffer", count: int = 1) -> "Move":
        return Move(buffer.cursor, direction, count)

    @classmethod
    def goto(cls, destination: Cursor, buffer: "Buffer") -> "Goto":
        return Goto(buffer.cursor, destination)

    @classmethod
    def delete(cls, count: int) -> "Delete":
        # Only the length matters for a pending deletion.
        return Delete(" " * max(0, count))


@dataclass(frozen=True, slots=True)
class Insert(Change):
    text: str

    kind: ClassVar[str] = "insert"
    modifies_content: ClassVar[bool] = True

    def _forward(self, buffer: "Buffer") -> None:
        buffer.insert_text(self.text)
        buffer.history.push(self)

    def _revert(self, buffer: "Buffer") -> None:
        for _ in self.text:
            buffer.move(Direction.LEFT)
            buffer.delete()


@dataclass(frozen=True, slots=True)
class Delete(Change):
    """Backspace ``len(text)`` characters.

    Once the cursor reaches the start of the document the remaining steps are
    dropped, so the recorded text is exactly what was removed, in document
    order.
    """

    text: str

    kind: ClassVar[str] = "delete"
    modifies_content: ClassVar[bool] = True

    def _forward(self, buffer: "Buffer") -> None:
        removed: List[str] = []
        for _ in self.text:
            before = buffer.cursor
            buffer.move(Direction.LEFT)
            if buffer.cursor == before:
                break
            ch = buffer.delete()
            if ch is None:
                break
            removed.append(ch)
        buffer.history.push(Delete("".join(reversed(removed))))

    def _revert(self, buffer: "Buffer") -> None:
        buffer.insert_text(self.text)


@dataclass(frozen=True, slots=True)
class Move(Change):
    origin: Cursor
    direction: Direction
    count: int = 1

    kind: ClassVar[str] = "move"

    def _forward(self, buffer: "Buffer") -> None:
        origin = buffer.cursor
        for _ in range(self.count):
            buffer.move(self.direction)
        direction = self.direction if buffer.cursor != origin else Direction.NOWHERE
        buffer.history.push(Move(origin, direction, self.count))

    def _revert(self, buffer: "Buffer") -> None:
        buffer.set_cursor(*self.origin)


@dataclass(frozen=True, slots=True)
class Goto(Change):
    origin: Cursor
    destination: Cursor

    kind: ClassVar[str] = "goto"

    def _forward(self, buffer: "Buffer") -> None:
        origin = buffer.cursor
        buffer.set_cursor(*self.destination)
        buffer.history.push(Goto(origin, buffer.cursor))

    def _revert(self, buffer: "Buffer") -> None:
        buffer.set_cursor(*self.origin)


@dataclass(frozen=True, slots=True)
class Select(Change):
    previous: Optional[Cursor] = None

    kind: ClassVar[str] = "select"

    def _forward(self, buffer: "Buffer") -> None:
        previous = buffer.state.anchor
        buffer.select()
        buffer.history.push(Select(previous))

    def _revert(self, buffer: "Buffer") -> None:
        buffer.state.anchor = self.previous


@dataclass(frozen=True, slots=True)
class Unselect(Change):
    previous: Optional[Cursor] = None

    kind: ClassVar[str] = "unselect"

    def _forward(self, buffer: "Buffer") -> None:
        previous = buffer.state.anchor
        buffer.unselect()
        buffer.history.push(Unselect(previous))

    def _revert(self, buffer: "Buffer") -> None:
        buffer.state.anchor = self.previous


@dataclass(frozen=True, slots=True)
class Undo(Change):
    kind: ClassVar[str] = "undo"

    def _forward(self, buffer: "Buffer") -> None:
        change = buffer.history.pop_undo()
        if change is None:
            return
        change._revert(buffer)
        buffer.history.push_redo(change)

    def _revert(self, buffer: "Buffer") -> None:
        Redo().apply(buffer)


@dataclass(frozen=True, slots=True)
class Redo(Change):
    kind: ClassVar[str] = "redo"

    def _forward(self, buffer: "Buffer") -> None:
        change = buffer.history.pop_redo()
        if change is not None:
            change.apply(buffer)

    def _revert(self, buffer: "Buffer") -> None:
        Undo().apply(buffer)


__all__ = [
    "Change",
    "Insert",
    "Delete",
    "Move",
    "Goto",
    "Select",
    "Unselect",
    "Undo",
    "Redo",
]

"""Buffer façade combining the document, cursor state, and change history."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

from .document import BufferDocument
from .state import BufferState, Cursor, Direction, Selection
from .sync import BufferMirror
from .undo import ChangeHistory
from .validation import clamp_cursor

if TYPE_CHECKING:
    from .change import Change

# Undecodable bytes survive a load/save round trip as lone surrogates.
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


class Buffer:
    """One open document: lines, cursor, selection anchor, undo/redo stacks.

    Every mutator leaves the cursor inside the document. Physical boundaries
    (moving past the first/last line, deleting at the end of the document)
    are silent no-ops rather than errors.
    """

    def __init__(
        self,
        *,
        file: Optional[str] = None,
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        history: Optional[ChangeHistory] = None,
    ) -> None:
        self.file = file
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.history = history or ChangeHistory()
        self.edited = False

    @classmethod
    def from_text(cls, text: str) -> "Buffer":
        return cls(document=BufferDocument.from_text(text))

    @classmethod
    def from_file(cls, file: str) -> "Buffer":
        """Load ``file``; a missing file opens as an empty document bound to it."""

        try:
            text = Path(file).read_text(encoding=ENCODING, errors=ENCODING_ERRORS)
        except FileNotFoundError:
            text = ""
        return cls(file=file, document=BufferDocument.from_text(text))

    # --- File state ---------------------------------------------------------

    @property
    def file_name(self) -> Optional[str]:
        return self.file

    def set_file_name(self, file: str) -> None:
        self.file = file

    def save(self, file: Optional[str] = None) -> str:
        target = file or self.file
        if not target:
            raise ValueError("Buffer has no file name")
        Path(target).write_text(self.document.text(), encoding=ENCODING, errors=ENCODING_ERRORS)
        self.edited = False
        return target

    def is_edited(self) -> bool:
        return self.edited

    # --- Read access --------------------------------------------------------

    @property
    def undo_stack(self) -> list["Change"]:
        return self.history.undo_stack

    @property
    def redo_stack(self) -> list["Change"]:
        return self.history.redo_stack

    def last_change(self) -> Optional["Change"]:
        return self.history.last()

    def content(self) -> Sequence[str]:
        return self.document.snapshot()

    def text(self) -> str:
        return self.document.text()

    def get_lines(self, min_row: int, max_row: int) -> Sequence[str]:
        return self.document.lines_between(min_row, max_row)

    @property
    def cursor(self) -> Cursor:
        return self.state.cursor

    @property
    def current_line(self) -> str:
        return self.document.get_line(self.state.row)

    def mirror(self, *, top: int = 0, height: Optional[int] = None) -> BufferMirror:
        bottom = self.document.line_count if height is None else top + height
        return BufferMirror(
            name=self.file or "unnamed",
            lines=tuple(self.get_lines(top, bottom)),
            top=top,
            cursor=self.cursor,
            selection=self.selection_range(),
            edited=self.edited,
        )

    # --- Cursor -------------------------------------------------------------

    def set_cursor(self, row: int, col: int) -> None:
        self.state.set_cursor(row, col)
        self.fix_cursor()

    def fix_cursor(self) -> None:
        self.state.set_cursor(*clamp_cursor(self.document, self.state.cursor))

    def move(self, direction: Direction) -> None:
        state = self.state
        if direction is Direction.UP:
            if state.row > 0:
                state.row -= 1
            state.col = min(len(self.current_line), state.col)
        elif direction is Direction.DOWN:
            state.row = min(self.document.line_count - 1, state.row + 1)
            state.col = min(len(self.current_line), state.col)
        elif direction is Direction.LEFT:
            if state.col == 0:
                old_row = state.row
                self.move(Direction.UP)
                if state.row < old_row:
                    state.col = len(self.current_line)
            else:
                state.col -= 1
        elif direction is Direction.RIGHT:
            if state.col == len(self.current_line):
                old_row = state.row
                self.move(Direction.DOWN)
                if state.row > old_row:
                    state.col = 0
            else:
                state.col += 1

    # --- Selection ----------------------------------------------------------

    def select(self) -> None:
        self.state.select()

    def unselect(self) -> None:
        self.state.unselect()

    def selection_range(self) -> Optional[Selection]:
        anchor = self.state.anchor
        if anchor is None:
            return None
        # The anchor is not moved by edits, so it may point past the text.
        anchor = clamp_cursor(self.document, anchor)
        cursor = self.cursor
        return (min(anchor, cursor), max(anchor, cursor))

    def selection_start(self) -> Optional[Cursor]:
        bounds = self.selection_range()
        return bounds[0] if bounds else None

    def selection_end(self) -> Optional[Cursor]:
        bounds = self.selection_range()
        return bounds[1] if bounds else None

    def selected_lines(self) -> Optional[Sequence[str]]:
        bounds = self.selection_range()
        if bounds is None:
            return None
        (first, _), (last, _) = bounds
        return self.document.lines_between(first, last + 1)

    def selected(self) -> Optional[str]:
        bounds = self.selection_range()
        if bounds is None or bounds[0] == bounds[1]:
            return None
        (first_row, first_col), (last_row, last_col) = bounds
        lines = self.document.lines_between(first_row, last_row + 1)
        if first_row == last_row:
            return lines[0][first_col:last_col]
        middle = list(lines[1:-1])
        return "\n".join([lines[0][first_col:], *middle, lines[-1][:last_col]])

    # --- Editing ------------------------------------------------------------

    def insert_text(self, text: str) -> None:
        for ch in text:
            self.insert(ch)

    def insert(self, ch: str) -> None:
        row, col = self.cursor
        if ch == "\n":
            self.document.split_line(row, col)
        else:
            self.document.insert_char(row, col, ch)
        self.edited = True
        self.move(Direction.RIGHT)

    def delete(self) -> Optional[str]:
        """Remove the character under the cursor, joining lines at line end."""

        row, col = self.cursor
        line = self.current_line
        if self.document.line_count == 1 and not line:
            return None
        if col < len(line):
            removed = self.document.remove_char(row, col)
        elif row + 1 < self.document.line_count:
            self.document.join_next(row)
            removed = "\n"
        else:
            return None
        self.edited = True
        return removed

    def __repr__(self) -> str:
        return (
            f"Buffer(file={self.file!r}, lines={self.document.line_count}, "
            f"cursor={self.cursor}, anchor={self.state.anchor})"
        )

"""Render snapshots handed from the buffer layer to frontends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .state import Cursor, Selection


@dataclass(frozen=True, slots=True)
class BufferMirror:
    """Immutable view of a window of lines plus cursor/selection state."""

    name: str
    lines: Sequence[str]
    top: int
    cursor: Cursor
    selection: Optional[Selection]
    edited: bool = False

    def is_selected(self, row: int, col: int) -> bool:
        if self.selection is None:
            return False
        start, end = self.selection
        return start <= (row, col) < end

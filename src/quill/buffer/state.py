"""Cursor, selection anchor, and motion directions for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

Cursor = Tuple[int, int]  # (row, column)
Selection = Tuple[Cursor, Cursor]


class Direction(str, Enum):
    """Single-step cursor motions."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    NOWHERE = "nowhere"


@dataclass(slots=True)
class BufferState:
    """Mutable cursor position plus the optional selection anchor."""

    row: int = 0
    col: int = 0
    anchor: Optional[Cursor] = None

    @property
    def cursor(self) -> Cursor:
        return (self.row, self.col)

    def set_cursor(self, row: int, col: int) -> None:
        self.row = row
        self.col = col

    def select(self) -> None:
        self.anchor = (self.row, self.col)

    def unselect(self) -> None:
        self.anchor = None

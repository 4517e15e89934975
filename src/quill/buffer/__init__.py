"""Buffers, cursor arithmetic, and the undo/redo change algebra."""

from .buffer import Buffer
from .change import Change, Delete, Goto, Insert, Move, Redo, Select, Undo, Unselect
from .document import BufferDocument
from .state import BufferState, Cursor, Direction, Selection
from .sync import BufferMirror
from .undo import ChangeHistory
from .validation import clamp_cursor

__all__ = [
    "Buffer",
    "BufferDocument",
    "BufferMirror",
    "BufferState",
    "Change",
    "ChangeHistory",
    "Cursor",
    "Delete",
    "Direction",
    "Goto",
    "Insert",
    "Move",
    "Redo",
    "Select",
    "Selection",
    "Undo",
    "Unselect",
    "clamp_cursor",
]

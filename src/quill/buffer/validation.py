"""Cursor clamping shared across buffer services."""

from __future__ import annotations

from .document import BufferDocument
from .state import Cursor


def clamp_cursor(document: BufferDocument, cursor: Cursor) -> Cursor:
    """Pull ``cursor`` back inside the document."""

    row, col = cursor
    row = max(0, min(row, document.line_count - 1))
    col = max(0, min(col, len(document.get_line(row))))
    return (row, col)

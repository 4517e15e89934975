"""Line storage for buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence


@dataclass(slots=True)
class BufferDocument:
    """Mutable list-of-lines text model.

    The document always holds at least one (possibly empty) line. Rows and
    columns handed to the mutators are trusted; the owning ``Buffer`` keeps
    its cursor clamped before calling in.
    """

    _lines: List[str] = field(default_factory=lambda: [""])

    def __post_init__(self) -> None:
        if not self._lines:
            self._lines = [""]

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        """Split ``text`` on line boundaries; a trailing newline adds nothing."""

        return cls(_lines=text.splitlines() or [""])

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    def text(self) -> str:
        return "\n".join(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def lines_between(self, start: int, end: int) -> Sequence[str]:
        """Return rows ``start..end`` (exclusive end), clipped to the document."""

        return tuple(self._lines[start : min(end, len(self._lines))])

    def insert_char(self, row: int, col: int, ch: str) -> None:
        line = self._lines[row]
        self._lines[row] = line[:col] + ch + line[col:]

    def split_line(self, row: int, col: int) -> None:
        line = self._lines[row]
        self._lines[row] = line[:col]
        self._lines.insert(row + 1, line[col:])

    def remove_char(self, row: int, col: int) -> str:
        line = self._lines[row]
        self._lines[row] = line[:col] + line[col + 1 :]
        return line[col]

    def join_next(self, row: int) -> None:
        following = self._lines.pop(row + 1)
        self._lines[row] += following

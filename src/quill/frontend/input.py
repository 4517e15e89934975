"""Key events delivered by frontends."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Key(str, Enum):
    """Named non-character keys. Values follow Textual's key names."""

    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    HOME = "home"
    END = "end"
    PAGE_UP = "pageup"
    PAGE_DOWN = "pagedown"
    BACKSPACE = "backspace"
    DELETE = "delete"
    ENTER = "enter"
    TAB = "tab"
    ESC = "escape"


@dataclass(frozen=True, slots=True)
class Char:
    ch: str


@dataclass(frozen=True, slots=True)
class Control:
    inner: "Input"


@dataclass(frozen=True, slots=True)
class Shift:
    inner: "Input"


@dataclass(frozen=True, slots=True)
class Alt:
    inner: "Input"


Input = Union[Char, Key, Control, Shift, Alt]

_MODIFIERS = {"C": Control, "S": Shift, "M": Alt, "A": Alt}
_PREFIXES = {Control: "C", Shift: "S", Alt: "M"}


def parse_input(text: str) -> Input:
    """Parse an emacs-style key description such as ``"C-e"`` or ``"S-left"``.

    Modifier prefixes are ``C-`` (control), ``S-`` (shift) and ``M-``/``A-``
    (alt). The remainder is either a single character or a ``Key`` value.
    """

    if not text:
        raise ValueError("Empty key description")
    if len(text) > 2 and text[1] == "-" and text[0] in _MODIFIERS:
        return _MODIFIERS[text[0]](parse_input(text[2:]))
    if len(text) == 1:
        return Char(text)
    try:
        return Key(text.lower())
    except ValueError:
        raise ValueError(f"Unknown key '{text}'") from None


def describe_input(key: Input) -> str:
    """Inverse of ``parse_input``."""

    if isinstance(key, Key):
        return key.value
    if isinstance(key, Char):
        return key.ch
    return f"{_PREFIXES[type(key)]}-{describe_input(key.inner)}"


__all__ = ["Key", "Char", "Control", "Shift", "Alt", "Input", "parse_input", "describe_input"]

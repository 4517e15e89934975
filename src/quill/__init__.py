"""Terminal text editor with an embedded expression language."""

from .buffer import Buffer, BufferMirror, Direction
from .config import EditorConfig
from .editor import Editor
from .lang import EvalError, Expr, parse

__all__ = [
    "adapters",
    "buffer",
    "frontend",
    "lang",
    "runtime",
    "Buffer",
    "BufferMirror",
    "Direction",
    "Editor",
    "EditorConfig",
    "EvalError",
    "Expr",
    "parse",
]

__version__ = "0.1.0"

"""Frontend protocol, key model, and the interactive dispatch loop."""

from .base import Frontend, FrontendError, PromptingFrontend
from .dispatch import QUIT, EditorSession
from .input import Alt, Char, Control, Input, Key, Shift, describe_input, parse_input

__all__ = [
    "Alt",
    "Char",
    "Control",
    "EditorSession",
    "Frontend",
    "FrontendError",
    "Input",
    "Key",
    "PromptingFrontend",
    "QUIT",
    "Shift",
    "describe_input",
    "parse_input",
]

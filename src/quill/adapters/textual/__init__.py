"""Textual frontend for quill."""

from .controller import TextualFrontend, TextualUIHooks, translate_key

__all__ = ["TextualFrontend", "TextualUIHooks", "translate_key"]

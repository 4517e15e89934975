"""Thread-safe bridge between the Textual UI thread and ``EditorSession``.

The session runs in a worker thread and talks to ``TextualFrontend`` through
the ``Frontend`` protocol. Key presses and prompt answers flow in through
queues; render snapshots and status text flow out through ``TextualUIHooks``
callbacks, marshalled onto the UI thread by ``hooks.call``.
"""

from __future__ import annotations

import queue
import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple

from ...buffer import BufferMirror
from ...frontend import Alt, Char, Control, FrontendError, Input, Key, PromptingFrontend, Shift
from ...runtime import telemetry

if TYPE_CHECKING:
    from ...editor import Editor


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


def _call_directly(func: Callable[..., Any], *args: Any) -> Any:
    return func(*args)


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks the frontend uses to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    # Ask the UI to show a prompt; the answer comes back via ``submit_prompt``.
    request_prompt: Callable[[str, str], None] = _noop
    close: Callable[[], None] = _noop
    # Runs a callback on the UI thread (``App.call_from_thread`` in the app).
    call: Callable[..., Any] = _call_directly


_MODIFIERS: dict[str, Callable[[Input], Input]] = {
    "ctrl": Control,
    "shift": Shift,
    "alt": Alt,
    "meta": Alt,
}

# Textual spells a few keys differently from ``Key``.
_ALIASES = {
    "return": Key.ENTER,
    "esc": Key.ESC,
    "page_up": Key.PAGE_UP,
    "page_down": Key.PAGE_DOWN,
    "space": Char(" "),
}


def _base_input(name: str, character: Optional[str]) -> Optional[Input]:
    if name in _ALIASES:
        return _ALIASES[name]
    try:
        return Key(name)
    except ValueError:
        pass
    if len(name) == 1:
        return Char(name)
    if character and len(character) == 1 and character.isprintable():
        return Char(character)
    # Punctuation arrives by its unicode name, e.g. ``exclamation_mark``.
    try:
        return Char(unicodedata.lookup(name.replace("_", " ").upper()))
    except KeyError:
        return None


def translate_key(key: str, character: Optional[str] = None) -> Optional[Input]:
    """Map a Textual key name (``"ctrl+s"``, ``"shift+left"``, ``"a"``) to ``Input``.

    Returns ``None`` for keys the editor has no use for, such as function keys.
    """

    *modifiers, name = key.split("+") if key != "+" else ["+"]
    if not modifiers and character and len(character) == 1 and character.isprintable():
        return Char(character)
    result = _base_input(name, character if not modifiers else None)
    if result is None:
        return None
    for modifier in reversed(modifiers):
        wrap = _MODIFIERS.get(modifier)
        if wrap is None:
            return None
        result = wrap(result)
    return result


class TextualFrontend(PromptingFrontend):
    """``Frontend`` implementation fed by a Textual app.

    Methods of the ``Frontend`` protocol are called from the session thread;
    ``feed_key``, ``submit_prompt`` and ``close`` are called from the UI
    thread.
    """

    def __init__(
        self,
        hooks: TextualUIHooks,
        *,
        size: Callable[[], Tuple[int, int]] = lambda: (80, 24),
    ) -> None:
        self.hooks = hooks
        self._size = size
        self._keys: "queue.Queue[Optional[Input]]" = queue.Queue()
        self._answers: "queue.Queue[Optional[str]]" = queue.Queue()
        self._top = 0
        self._last: Optional[BufferMirror] = None
        self._closed = False
        self.logger = telemetry.get_logger("quill.textual")

    # --- UI thread ------------------------------------------------------------

    def feed_key(self, key: str, character: Optional[str] = None) -> bool:
        """Queue a key press. Returns whether the key was understood."""

        translated = translate_key(key, character)
        if translated is None:
            return False
        self._keys.put(translated)
        return True

    def submit_prompt(self, answer: Optional[str]) -> None:
        """Deliver the answer to a pending prompt; ``None`` cancels it."""

        self._answers.put(answer)

    def close(self) -> None:
        self._closed = True
        self._keys.put(None)
        self._answers.put(None)

    # --- Frontend protocol ----------------------------------------------------

    def render(self, editor: "Editor", force: bool = False) -> None:
        buffer = editor.cur_buf()
        if buffer is None:
            return
        rows = self.height()
        row, _ = buffer.cursor
        if row < self._top:
            self._top = row
        elif row >= self._top + rows:
            self._top = row - rows + 1
        mirror = buffer.mirror(top=self._top, height=rows)
        if not force and mirror == self._last:
            return
        self._last = mirror
        self.hooks.call(self.hooks.update_buffer, mirror)

    def wait_for_input(self, editor: "Editor") -> Input:
        key = self._keys.get()
        if key is None:
            raise FrontendError("Frontend closed")
        return key

    def set_status(self, text: str) -> None:
        self.hooks.call(self.hooks.update_status, text)

    def prompt(self, text: str, default: str = "") -> str:
        if self._closed:
            raise FrontendError("Frontend closed")
        self.hooks.call(self.hooks.request_prompt, text, default)
        answer = self._answers.get()
        if answer is None:
            raise FrontendError()
        return answer

    def exit(self) -> None:
        self.logger.info("textual::exit")
        if not self._closed:
            self.hooks.call(self.hooks.close)

    def height(self) -> int:
        return max(1, self._size()[1])

    def width(self) -> int:
        return max(1, self._size()[0])


__all__ = ["TextualFrontend", "TextualUIHooks", "translate_key"]

"""Interactive loop translating key events into editor operations."""

from __future__ import annotations

import shlex
import subprocess
from typing import Callable, Dict, Optional

from ..buffer import Buffer, Direction
from ..config import EditorConfig
from ..editor import Editor
from ..lang.errors import EvalError
from ..lang.expr import Expr, Nil
from ..lang.parser import parse
from ..runtime import telemetry
from .base import Frontend, FrontendError
from .input import Alt, Char, Control, Input, Key, Shift, describe_input, parse_input

QUIT = Alt(Char("q"))

_ARROWS = {
    Key.LEFT: Direction.LEFT,
    Key.RIGHT: Direction.RIGHT,
    Key.UP: Direction.UP,
    Key.DOWN: Direction.DOWN,
}


class EditorSession:
    """Runs one editing session: render, wait for a key, act on it.

    User bindings registered with ``bind`` win over the built-in keys. Errors
    from scripts, prompts and file access end up on the status line; they
    never stop the loop.
    """

    def __init__(
        self,
        editor: Editor,
        frontend: Frontend,
        *,
        config: Optional[EditorConfig] = None,
    ) -> None:
        self.editor = editor
        self.frontend = frontend
        self.config = config or editor.config
        self.clipboard = ""
        self.bindings: Dict[Input, Expr] = {}
        self.running = False
        self.logger = telemetry.get_logger("quill.session")
        self._control: Dict[str, Callable[[], None]] = {
            "s": self.save,
            "q": self.close_buffer,
            "o": self.open_file,
            "a": self.select_all,
            "z": self.editor.undo,
            "y": self.editor.redo,
            "c": self.copy,
            "x": self.cut,
            "v": self.paste,
            "d": self.delete_backward_or_selection,
            "e": self.eval_prompt,
        }

    # --- Bindings -------------------------------------------------------------

    def bind(self, key: Input | str, source: str) -> None:
        """Run ``source`` whenever ``key`` is pressed. Parses eagerly."""

        target = parse_input(key) if isinstance(key, str) else key
        self.bindings[target] = parse(source)

    def unbind(self, key: Input | str) -> None:
        target = parse_input(key) if isinstance(key, str) else key
        self.bindings.pop(target, None)

    # --- Loop -----------------------------------------------------------------

    def status_text(self) -> str:
        buffer = self.editor.cur_buf()
        if buffer is None:
            return "No open buffers"
        name = buffer.file_name or "unnamed"
        return f"Editing in buffer #{self.editor.cur_buf_id()}: {name}"

    def refresh_status(self) -> None:
        self.frontend.set_status(self.status_text())

    def run(self) -> None:
        self.running = True
        self.refresh_status()
        try:
            while self.running and self.editor.buffers:
                self.frontend.render(self.editor, False)
                try:
                    key = self.frontend.wait_for_input(self.editor)
                except FrontendError as exc:
                    self.logger.info(f"session::input closed: {exc}")
                    break
                self.handle(key)
        finally:
            self.running = False
            self.frontend.exit()

    def handle(self, key: Input) -> None:
        with telemetry.span(name="session::input", metadata={"input": describe_input(key)}):
            try:
                self._dispatch(key)
            except EvalError as err:
                self.frontend.set_status(f"Error: {err}")
            except FrontendError as exc:
                self.frontend.set_status(f"Cancelled: {exc}" if str(exc) else "Cancelled")
            except (OSError, ValueError) as exc:
                self.frontend.set_status(f"Error: {exc}")

    def _dispatch(self, key: Input) -> None:
        if key in self.bindings:
            self._show_result(self.editor.eval(self.bindings[key]))
        elif key == QUIT:
            self.running = False
        elif isinstance(key, Char):
            self.editor.unselect()
            self.editor.insert(key.ch)
        elif isinstance(key, Key):
            self._plain_key(key)
        elif isinstance(key, Shift):
            self._shifted(key.inner)
        elif isinstance(key, Control) and isinstance(key.inner, Char):
            action = self._control.get(key.inner.ch)
            if action is not None:
                action()
                self.frontend.render(self.editor, True)
        elif isinstance(key, Alt) and isinstance(key.inner, Char):
            self._alt(key.inner.ch)

    def _show_result(self, result: Expr) -> None:
        if not isinstance(result, Nil):
            self.frontend.set_status(result.show())

    # --- Keys -----------------------------------------------------------------

    def _plain_key(self, key: Key) -> None:
        editor = self.editor
        if key in _ARROWS:
            editor.unselect()
            editor.move_cursor(_ARROWS[key])
        elif key in (Key.HOME, Key.END, Key.PAGE_UP, Key.PAGE_DOWN):
            self._jump(key)
        elif key is Key.ENTER:
            editor.unselect()
            editor.insert("\n")
        elif key is Key.TAB:
            editor.unselect()
            editor.insert(" " * self.config.tab_width)
        elif key is Key.BACKSPACE:
            self.delete_backward_or_selection()
        elif key is Key.DELETE:
            self.delete_forward_or_selection()
        elif key is Key.ESC:
            editor.unselect()

    def _shifted(self, inner: Input) -> None:
        if isinstance(inner, Char):
            self.editor.unselect()
            self.editor.insert(inner.ch.upper())
        elif isinstance(inner, Key) and (inner in _ARROWS or inner in (Key.HOME, Key.END, Key.PAGE_UP, Key.PAGE_DOWN)):
            self.editor.select()
            if inner in _ARROWS:
                self.editor.move_cursor(_ARROWS[inner])
            else:
                self._jump(inner)
            self.frontend.render(self.editor, True)

    def _jump(self, key: Key) -> None:
        buffer = self.editor.cur_buf()
        if buffer is None:
            return
        _, col = buffer.cursor
        if key is Key.HOME:
            direction, count = Direction.LEFT, col
        elif key is Key.END:
            direction, count = Direction.RIGHT, len(buffer.current_line) - col
        else:
            direction = Direction.UP if key is Key.PAGE_UP else Direction.DOWN
            count = self.config.page_size or self.frontend.height()
        if count > 0:
            self.editor.move_cursor(direction, count)

    def _alt(self, ch: str) -> None:
        if ch.isdigit():
            self.editor.set_buf(int(ch))
        elif ch == "'":
            self.editor.next_buf()
        elif ch == '"':
            self.editor.prev_buf()
        elif ch == "!":
            self.run_shell_command()
        else:
            return
        self.refresh_status()

    # --- Commands -------------------------------------------------------------

    def _delete_selection(self) -> bool:
        """Delete the selected text, if any. Returns whether anything was deleted."""

        selected = self.editor.get_selected()
        end = self.editor.selection_end()
        if selected is None or end is None:
            return False
        self.editor.goto_cursor(end)
        self.editor.delete(len(selected))
        self.editor.unselect()
        return True

    def delete_backward_or_selection(self) -> None:
        editor = self.editor
        if not self._delete_selection() and editor.cursor() != (0, 0):
            editor.delete(1)
        editor.unselect()

    def delete_forward_or_selection(self) -> None:
        editor = self.editor
        if not self._delete_selection():
            before = editor.cursor()
            editor.move_cursor(Direction.RIGHT)
            if editor.cursor() != before:
                editor.delete(1)
        editor.unselect()

    def save(self) -> None:
        buffer = self.editor.cur_buf()
        if buffer is None:
            return
        name = None if buffer.file_name else self.frontend.prompt("Enter file name: ")
        target = self.editor.save_buf(name)
        self.frontend.set_status(f"Saved {target}")

    def close_buffer(self) -> None:
        buffer = self.editor.cur_buf()
        if buffer is None:
            return
        should_save = buffer.is_edited() and self.frontend.ask("Do you want to save the buffer?", "y", "n")
        if should_save and not buffer.file_name:
            buffer.set_file_name(self.frontend.prompt("Enter file name: "))
        self.editor.quit_buf(should_save)
        if self.editor.buffers:
            self.refresh_status()

    def open_file(self) -> None:
        file_name = self.frontend.prompt("Enter file name: ").strip()
        if not file_name:
            return
        self.editor.set_buf(self.editor.add_buf(Buffer.from_file(file_name)))
        self.refresh_status()

    def select_all(self) -> None:
        buffer = self.editor.cur_buf()
        if buffer is None:
            return
        self.editor.unselect()
        self.editor.goto_cursor((0, 0))
        self.editor.select()
        last_row = buffer.document.line_count - 1
        self.editor.goto_cursor((last_row, len(buffer.document.get_line(last_row))))

    def copy(self) -> None:
        selected = self.editor.get_selected()
        if selected is not None:
            self.clipboard = selected

    def cut(self) -> None:
        selected = self.editor.get_selected()
        if selected is not None:
            self.clipboard = selected
            self._delete_selection()

    def paste(self) -> None:
        if self.clipboard:
            self.editor.unselect()
            self.editor.insert(self.clipboard)

    def eval_prompt(self) -> None:
        source = self.frontend.prompt("Eval: ")
        result = self.editor.eval_source(source)
        self.frontend.set_status(result.show())

    def run_shell_command(self) -> None:
        command = self.frontend.prompt("Enter shell command: ")
        words = shlex.split(command)
        if not words:
            return
        try:
            completed = subprocess.run(words, capture_output=True, text=True, check=False)
        except OSError as exc:
            telemetry.record_event("shell.failed", level="warning", data={"command": command, "error": str(exc)})
            self.frontend.set_status("Failed to run command")
            return
        telemetry.record_event("shell.command", data={"command": command, "returncode": completed.returncode})
        output = f"STDOUT:\n{completed.stdout}\nSTDERR:\n{completed.stderr}"
        self.editor.set_buf(self.editor.add_buf(Buffer.from_text(output)))


__all__ = ["EditorSession", "QUIT"]

"""Executable Textual app that hosts the quill editor."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Header, Label, Static
from textual.widgets import Input as TextInput

from ...buffer import BufferMirror
from ...config import EditorConfig
from ...editor import Editor
from ...frontend import EditorSession
from ...lang.errors import EvalError
from ...runtime import telemetry
from .controller import TextualFrontend, TextualUIHooks

SELECTED_STYLE = "reverse"
CURSOR_STYLE = "reverse bold"
REPLACEMENT_CHARACTER = "\ufffd"


def _displayable(ch: str) -> str:
    # Bytes a file could not decode are kept as lone surrogates.
    return REPLACEMENT_CHARACTER if "\ud800" <= ch <= "\udfff" else ch


def render_mirror(mirror: BufferMirror) -> Text:
    """Render a buffer snapshot with the cursor and selection highlighted."""

    text = Text(no_wrap=True, overflow="crop")
    cursor_row, cursor_col = mirror.cursor
    for offset, line in enumerate(mirror.lines):
        row = mirror.top + offset
        if offset:
            text.append("\n")
        for col, raw in enumerate(line):
            ch = _displayable(raw)
            if (row, col) == (cursor_row, cursor_col):
                text.append(ch, style=CURSOR_STYLE)
            elif mirror.is_selected(row, col):
                text.append(ch, style=SELECTED_STYLE)
            else:
                text.append(ch)
        if row == cursor_row and cursor_col >= len(line):
            text.append(" ", style=CURSOR_STYLE)
    return text


class PromptScreen(ModalScreen[Optional[str]]):
    """One-line prompt; Enter submits, Escape cancels."""

    DEFAULT_CSS = """
    PromptScreen {
        align: center middle;
    }

    #prompt-box {
        width: 60%;
        height: auto;
        border: round $accent;
        background: $surface;
        padding: 0 1;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, text: str, default: str = "") -> None:
        super().__init__()
        self._text = text
        self._default = default

    def compose(self) -> ComposeResult:
        with Vertical(id="prompt-box"):
            yield Label(self._text)
            yield TextInput(value=self._default, id="prompt-input")

    def on_mount(self) -> None:
        self.query_one("#prompt-input", TextInput).focus()

    def on_input_submitted(self, event: TextInput.Submitted) -> None:
        event.stop()
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)


class QuillApp(App[None]):
    """Buffer view plus status line; the editing session runs in a worker."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
		content-align: left top;
		overflow: hidden;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    # The editor claims these keys, so keep Textual's defaults off them.
    BINDINGS = [
        Binding("ctrl+q", "forward_key('ctrl+q')", show=False, priority=True),
        Binding("ctrl+c", "forward_key('ctrl+c')", show=False, priority=True),
    ]

    def __init__(self, editor: Editor, *, status: str = "") -> None:
        super().__init__()
        self.editor = editor
        self._initial_status = status
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            request_prompt=self._request_prompt,
            close=self.exit,
            call=self.call_from_thread,
        )
        self.frontend = TextualFrontend(hooks, size=self._view_size)
        self.session = EditorSession(editor, self.frontend)

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view")
            yield self._buffer_widget
        self._status_widget = Static(self._initial_status, id="status-line")
        yield self._status_widget

    def on_mount(self) -> None:
        self.title = "quill"
        self.run_worker(self._run_session, thread=True, exclusive=True, name="session")

    def on_unmount(self) -> None:
        self.frontend.close()

    def _run_session(self) -> None:
        self.session.run()

    def on_key(self, event: events.Key) -> None:
        if isinstance(self.screen, PromptScreen):
            return
        if self.frontend.feed_key(event.key, event.character):
            event.stop()
            event.prevent_default()

    def action_forward_key(self, key: str) -> None:
        if not isinstance(self.screen, PromptScreen):
            self.frontend.feed_key(key)

    def _view_size(self) -> Tuple[int, int]:
        if self._buffer_widget is not None:
            region = self._buffer_widget.content_region
            if region.height > 0:
                return region.width, region.height
        width, height = self.size
        return width, max(1, height - 4)

    def _update_buffer(self, mirror: BufferMirror) -> None:
        if self._buffer_widget:
            self._buffer_widget.update(render_mirror(mirror))
        marker = " [+]" if mirror.edited else ""
        self.sub_title = f"{mirror.name}{marker}"

    def _update_status(self, status: str) -> None:
        if self._status_widget:
            self._status_widget.update(Text(status))

    def _request_prompt(self, text: str, default: str) -> None:
        self.push_screen(PromptScreen(text, default), callback=self.frontend.submit_prompt)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="quill", description="Edit text files with quill.")
    parser.add_argument("files", nargs="*", help="Files to open, one buffer each")
    parser.add_argument(
        "--eval",
        dest="expressions",
        action="append",
        default=[],
        metavar="EXPR",
        help="Evaluate EXPR after loading the files (repeatable)",
    )
    parser.add_argument(
        "--script",
        default=os.environ.get("QUILL_STARTUP_SCRIPT"),
        help="Source file evaluated at startup (default: $QUILL_STARTUP_SCRIPT)",
    )
    parser.add_argument(
        "--log-preset",
        choices=sorted(telemetry.PRESETS),
        default=os.environ.get("QUILL_LOG_PRESET"),
        help="Telemetry preset (default: $QUILL_LOG_PRESET or environment-driven)",
    )
    parser.add_argument(
        "--no-ui",
        action="store_true",
        help="Run the startup code, print the last result and exit",
    )
    return parser.parse_args(argv)


def run_startup(editor: Editor, *, script: Optional[str], expressions: Sequence[str]) -> str:
    """Evaluate the startup script and ``--eval`` expressions in order.

    Returns the rendering of the last result. ``EvalError`` and ``OSError``
    propagate to the caller.
    """

    last = ""
    sources = []
    if script:
        sources.append(Path(script).read_text(encoding="utf-8"))
    sources.extend(expressions)
    for source in sources:
        last = editor.eval_source(source).show()
    return last


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    config = EditorConfig.from_env()
    if args.script:
        config.startup_script = args.script
    try:
        editor = Editor.from_file_names(args.files, config=config)
    except OSError as exc:
        print(f"quill: cannot open file: {exc}", file=sys.stderr)
        return 1
    try:
        status = run_startup(editor, script=config.startup_script, expressions=args.expressions)
    except EvalError as err:
        print(f"quill: {err}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"quill: cannot read startup script: {exc}", file=sys.stderr)
        return 1
    if args.no_ui:
        if status:
            print(status)
        return 0
    QuillApp(editor, status=status).run()
    return 0


if __name__ == "__main__":  # pragma: no cover - manual launch
    sys.exit(main())

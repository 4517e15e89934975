"""Editor core: the buffer list, the global environment, and evaluation."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, Sequence

from .buffer import Buffer, Change, Cursor, Direction, Insert, Redo, Select, Undo, Unselect
from .config import EditorConfig
from .lang.builtins import load_default_builtins
from .lang.env import Env
from .lang.errors import ErrorKind, EvalError
from .lang.evaluator import evaluate
from .lang.expr import Expr
from .lang.parser import parse
from .runtime import telemetry

# Python frames one level of user-callable application may take, plus room
# for the host (Textual, pytest) below the first evaluation.
_FRAMES_PER_CALL = 25
_HOST_FRAMES = 1000
# Deeper Python stacks risk overflowing the C stack.
_MAX_RECURSION_LIMIT = 10_000


@contextmanager
def _stack_headroom(max_depth: int) -> Iterator[None]:
    """Raise the interpreter recursion limit so ``max_depth`` nested calls fit."""

    previous = sys.getrecursionlimit()
    needed = min(_HOST_FRAMES + max_depth * _FRAMES_PER_CALL, _MAX_RECURSION_LIMIT)
    if needed <= previous:
        yield
        return
    sys.setrecursionlimit(needed)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class Editor:
    """Owns the open buffers and the environment scripts run against.

    Editing operations always target the current buffer and are silent no-ops
    when no buffer is open. The current index is clamped whenever it is read,
    so removing buffers never leaves it dangling.
    """

    def __init__(
        self,
        *,
        config: Optional[EditorConfig] = None,
        buffers: Optional[Iterable[Buffer]] = None,
        env: Optional[Env] = None,
        load_builtins: bool = True,
    ) -> None:
        self.config = config or EditorConfig()
        self.buffers: list[Buffer] = list(buffers) if buffers is not None else [Buffer()]
        self.current_buffer_index = 0
        self.env = env if env is not None else Env()
        if load_builtins:
            load_default_builtins(self.env)
        self._call_depth = 0
        self.logger = telemetry.get_logger("quill.editor")

    @classmethod
    def from_file_names(
        cls, file_names: Sequence[str], *, config: Optional[EditorConfig] = None
    ) -> "Editor":
        buffers = [Buffer.from_file(name) for name in file_names]
        return cls(config=config, buffers=buffers or None)

    # --- Buffer list ----------------------------------------------------------

    @property
    def buffer_count(self) -> int:
        return len(self.buffers)

    def cur_buf(self) -> Optional[Buffer]:
        if not self.buffers:
            return None
        self.current_buffer_index = min(len(self.buffers) - 1, self.current_buffer_index)
        return self.buffers[self.current_buffer_index]

    def cur_buf_id(self) -> Optional[int]:
        return None if self.cur_buf() is None else self.current_buffer_index

    def max_buf_id(self) -> Optional[int]:
        return len(self.buffers) - 1 if self.buffers else None

    def add_buf(self, buffer: Buffer) -> int:
        self.buffers.append(buffer)
        index = len(self.buffers) - 1
        telemetry.record_event("buffer.added", data={"index": index, "file": buffer.file_name or "unnamed"})
        return index

    def new_buf(self) -> int:
        return self.add_buf(Buffer())

    def set_buf(self, index: int) -> None:
        self.current_buffer_index = max(0, index)

    def next_buf(self) -> None:
        if self.buffers:
            self.current_buffer_index = (self.current_buffer_index + 1) % len(self.buffers)

    def prev_buf(self) -> None:
        if self.buffers:
            self.current_buffer_index = (self.current_buffer_index - 1) % len(self.buffers)

    def quit_buf(self, save: bool = False) -> Optional[Buffer]:
        """Close the current buffer, saving it first when ``save`` is set."""

        buffer = self.cur_buf()
        if buffer is None:
            return None
        if save:
            self.save_buf()
        index = self.current_buffer_index
        del self.buffers[index]
        telemetry.record_event("buffer.removed", data={"index": index, "file": buffer.file_name or "unnamed"})
        self.current_buffer_index = max(0, min(index, len(self.buffers) - 1))
        return buffer

    def save_buf(self, file_name: Optional[str] = None) -> Optional[str]:
        buffer = self.cur_buf()
        if buffer is None:
            return None
        if file_name:
            buffer.set_file_name(file_name)
        target = buffer.save()
        telemetry.record_event("buffer.saved", data={"file": target})
        return target

    # --- Changes --------------------------------------------------------------

    def _apply(self, change: Change) -> bool:
        buffer = self.cur_buf()
        if buffer is None:
            return False
        change.apply(buffer)
        return True

    def _clear_redo_stack(self) -> None:
        buffer = self.cur_buf()
        if buffer is not None:
            buffer.history.clear_redo()

    def insert(self, text: str) -> None:
        self._apply(Insert(text))
        self._clear_redo_stack()

    def delete(self, count: int) -> None:
        self._apply(Change.delete(count))
        self._clear_redo_stack()

    def move_cursor(self, direction: Direction, count: int = 1) -> None:
        buffer = self.cur_buf()
        if buffer is None:
            return
        self._apply(Change.move_cursor(direction, buffer, count))
        self._clear_redo_stack()

    def goto_cursor(self, position: Cursor) -> None:
        buffer = self.cur_buf()
        if buffer is None:
            return
        self._apply(Change.goto(position, buffer))
        self._clear_redo_stack()

    def select(self) -> None:
        buffer = self.cur_buf()
        if buffer is not None and buffer.selection_start() is None:
            self._apply(Select())

    def unselect(self) -> None:
        buffer = self.cur_buf()
        if buffer is not None and buffer.selection_start() is not None:
            self._apply(Unselect())

    def undo(self) -> None:
        self._apply(Undo())

    def redo(self) -> None:
        self._apply(Redo())

    # --- Queries --------------------------------------------------------------

    def cursor(self) -> Optional[Cursor]:
        buffer = self.cur_buf()
        return None if buffer is None else buffer.cursor

    def get_selected(self) -> Optional[str]:
        buffer = self.cur_buf()
        return None if buffer is None else buffer.selected()

    def get_selected_lines(self) -> Optional[Sequence[str]]:
        buffer = self.cur_buf()
        return None if buffer is None else buffer.selected_lines()

    def selection_start(self) -> Optional[Cursor]:
        buffer = self.cur_buf()
        return None if buffer is None else buffer.selection_start()

    def selection_end(self) -> Optional[Cursor]:
        buffer = self.cur_buf()
        return None if buffer is None else buffer.selection_end()

    # --- Evaluation -----------------------------------------------------------

    @contextmanager
    def nested_call(self, expr: Expr) -> Iterator[None]:
        """Count one level of user-callable application."""

        self._call_depth += 1
        try:
            if self._call_depth > self.config.max_eval_depth:
                raise EvalError.of(ErrorKind.RECURSION_LIMIT, expr)
            yield
        finally:
            self._call_depth -= 1

    def eval(self, expr: Expr) -> Expr:
        """Evaluate ``expr`` against the global environment.

        Bindings made before a failure are kept: the working copy is committed
        back whether evaluation succeeds or raises.
        """

        env = self.env.copy()
        depth = self._call_depth
        try:
            with _stack_headroom(self.config.max_eval_depth):
                with telemetry.span(name="editor::eval", component="editor", expected=(EvalError,)):
                    try:
                        return evaluate(expr, self, env)
                    except RecursionError:
                        self.logger.warning("editor::eval hit the interpreter recursion limit")
                        raise EvalError.of(ErrorKind.RECURSION_LIMIT, expr) from None
        except EvalError as err:
            telemetry.record_event(
                "eval.error",
                level="warning",
                data={"kind": err.kind or "raised", "error": str(err)},
            )
            raise
        finally:
            self.env = env
            self._call_depth = depth

    def eval_source(self, source: str) -> Expr:
        return self.eval(parse(source))

    def __repr__(self) -> str:
        return f"Editor(buffers={len(self.buffers)}, current={self.cur_buf_id()})"


__all__ = ["Editor"]

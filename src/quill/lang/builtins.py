"""Native functions exposed to scripts.

A builtin receives its argument expressions unevaluated together with the live
editor and environment, checks the argument count, and then evaluates what it
needs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable, Optional, Sequence

from ..buffer.state import Cursor, Direction
from .env import Env
from .errors import ErrorKind, EvalError
from .evaluator import evaluate
from .expr import (
    NONE,
    Add,
    Bool,
    Builtin,
    Dict,
    Div,
    Expr,
    Float,
    Int,
    List,
    Mul,
    Rem,
    String,
    Sub,
    Symbol,
)

if TYPE_CHECKING:
    from ..editor import Editor

Args = Sequence[Expr]
BuiltinFunc = Callable[[Args, "Editor", Env], Expr]


def check_arity(args: Args, minimum: int, maximum: Optional[int] = None) -> None:
    if len(args) < minimum:
        raise EvalError.of(ErrorKind.TOO_FEW_ARGS, List(tuple(args)))
    if maximum is not None and len(args) > maximum:
        raise EvalError.of(ErrorKind.TOO_MANY_ARGS, List(tuple(args)))


def _eval_int(arg: Expr, editor: "Editor", env: Env) -> int:
    value = evaluate(arg, editor, env)
    if not isinstance(value, Int):
        raise EvalError.of(ErrorKind.TYPE_MISMATCH, value)
    return value.value


def _position(cursor: Optional[Cursor]) -> Expr:
    if cursor is None:
        return NONE
    row, col = cursor
    return List((Int(row), Int(col)))


# --- Editing ----------------------------------------------------------------


def insert(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 1)
    for arg in args:
        value = evaluate(arg, editor, env)
        if not isinstance(value, String):
            raise EvalError.of(ErrorKind.TYPE_MISMATCH, value)
        editor.insert(value.value)
    return NONE


def delete(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 1, 1)
    count = _eval_int(args[0], editor, env)
    if count > 0:
        editor.delete(count)
    return NONE


def move(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 1)
    for arg in args:
        value = evaluate(arg, editor, env)
        if isinstance(value, String):
            name = value.value
        elif isinstance(value, Symbol):
            name = value.name
        else:
            raise EvalError.of(ErrorKind.TYPE_MISMATCH, value)
        try:
            direction = Direction(name)
        except ValueError:
            raise EvalError.of(ErrorKind.INVALID_ARG, String(name)) from None
        editor.move_cursor(direction)
    return NONE


def goto(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 2, 2)
    row = evaluate(args[0], editor, env)
    col = evaluate(args[1], editor, env)
    if not (isinstance(row, Int) and isinstance(col, Int)):
        raise EvalError.of(ErrorKind.TYPE_MISMATCH, List((row, col)))
    editor.goto_cursor((row.value, col.value))
    return NONE


def select(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    editor.select()
    return NONE


def unselect(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    editor.unselect()
    return NONE


def undo(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 1, 1)
    for _ in range(max(0, _eval_int(args[0], editor, env))):
        editor.undo()
    return NONE


def redo(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 1, 1)
    for _ in range(max(0, _eval_int(args[0], editor, env))):
        editor.redo()
    return NONE


# --- Queries ----------------------------------------------------------------


def get_selected(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    selected = editor.get_selected()
    return NONE if selected is None else String(selected)


def get_selected_lines(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    lines = editor.get_selected_lines()
    if lines is None:
        return NONE
    return List(tuple(String(line) for line in lines))


def get_selection_start(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    return _position(editor.selection_start())


def get_selection_end(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    return _position(editor.selection_end())


def get_selection_len(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    selected = editor.get_selected()
    return NONE if selected is None else Int(len(selected))


def get_undo_stack_len(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    buffer = editor.cur_buf()
    return NONE if buffer is None else Int(len(buffer.undo_stack))


def get_cursor(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    return _position(editor.cursor())


def get_buf(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    index = editor.cur_buf_id()
    return NONE if index is None else Int(index)


# --- Buffers ----------------------------------------------------------------


def new_buf(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 0, 0)
    return Int(editor.new_buf())


def set_buf(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 1, 1)
    editor.set_buf(_eval_int(args[0], editor, env))
    return NONE


# --- Arithmetic and comparison ----------------------------------------------


def _operator(node: type) -> BuiltinFunc:
    def call(args: Args, editor: "Editor", env: Env) -> Expr:
        check_arity(args, 2, 2)
        return evaluate(node(args[0], args[1]), editor, env)

    call.__name__ = node.__name__.lower()
    return call


def eq(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 2, 2)
    return Bool(evaluate(args[0], editor, env) == evaluate(args[1], editor, env))


def lt(args: Args, editor: "Editor", env: Env) -> Expr:
    check_arity(args, 2, 2)
    lhs = evaluate(args[0], editor, env)
    rhs = evaluate(args[1], editor, env)
    numbers = (Int, Float)
    if isinstance(lhs, numbers) and isinstance(rhs, numbers):
        return Bool(lhs.value < rhs.value)
    return Bool(lhs < rhs)


def help_text(args: Args, editor: "Editor", env: Env) -> Expr:
    """``help()`` lists every builtin in scope; ``help(name)`` describes one."""

    check_arity(args, 0, 1)
    if not args:
        return Dict.of(
            {String(value.name): String(value.help) for _, value in env.items() if isinstance(value, Builtin)}
        )

    target = evaluate(args[0], editor, env)
    if isinstance(target, (String, Symbol)):
        name = target.value if isinstance(target, String) else target.name
        found = env.lookup(name)
        if not isinstance(found, Builtin):
            raise EvalError.of(ErrorKind.INVALID_ARG, target)
        target = found
    if not isinstance(target, Builtin):
        raise EvalError.of(ErrorKind.TYPE_MISMATCH, target)
    return String(target.help_long or target.help)


DEFAULT_BUILTINS: tuple[Builtin, ...] = (
    Builtin("insert", "Insert text at the cursor", "insert(text, ...) inserts each string in turn.", insert),
    Builtin("delete", "Delete characters before the cursor", "delete(count) backspaces count characters.", delete),
    Builtin(
        "move",
        "Move the cursor",
        'move(direction, ...) steps once per argument; direction is "up", "down", "left", "right" or "nowhere".',
        move,
    ),
    Builtin("goto", "Jump to a position", "goto(row, col) places the cursor, clamped to the buffer.", goto),
    Builtin("select", "Start a selection", "select() anchors a selection at the cursor.", select),
    Builtin("unselect", "Drop the selection", "unselect() clears the selection anchor.", unselect),
    Builtin("get-select", "Selected text", "get-select() returns the selected text or none.", get_selected),
    Builtin(
        "get-select-lines",
        "Selected lines",
        "get-select-lines() returns every line touched by the selection, or none.",
        get_selected_lines,
    ),
    Builtin("get-select-start", "Selection start", "get-select-start() returns [row, col] or none.", get_selection_start),
    Builtin("get-select-end", "Selection end", "get-select-end() returns [row, col] or none.", get_selection_end),
    Builtin("get-select-len", "Selection length", "get-select-len() counts selected characters.", get_selection_len),
    Builtin(
        "get-undo-stack-len",
        "Undo stack depth",
        "get-undo-stack-len() returns the number of undoable changes in the current buffer.",
        get_undo_stack_len,
    ),
    Builtin("undo", "Undo changes", "undo(count) reverts the last count changes.", undo),
    Builtin("redo", "Redo changes", "redo(count) reapplies the last count undone changes.", redo),
    Builtin("add", "Add two values", "add(a, b) is a + b.", _operator(Add)),
    Builtin("sub", "Subtract two values", "sub(a, b) is a - b.", _operator(Sub)),
    Builtin("mul", "Multiply two values", "mul(a, b) is a * b.", _operator(Mul)),
    Builtin("div", "Divide two values", "div(a, b) is a / b.", _operator(Div)),
    Builtin("rem", "Remainder", "rem(a, b) is a % b.", _operator(Rem)),
    Builtin("new-buf", "Open an empty buffer", "new-buf() opens an empty buffer and returns its index.", new_buf),
    Builtin("set-buf", "Switch buffers", "set-buf(index) makes the given buffer current.", set_buf),
    Builtin("get-cursor", "Cursor position", "get-cursor() returns [row, col] or none.", get_cursor),
    Builtin("get-buf", "Current buffer index", "get-buf() returns the current buffer index or none.", get_buf),
    Builtin("eq", "Structural equality", "eq(a, b) is true when both values are identical.", eq),
    Builtin("lt", "Ordering", "lt(a, b) compares numbers numerically and other values structurally.", lt),
    Builtin("help", "Describe builtins", "help() lists builtins; help(name) describes one.", help_text),
)


def load_default_builtins(
    env: Env,
    *,
    include: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
) -> None:
    """Bind the default builtins into ``env`` under their names."""

    allowed = set(include) if include is not None else None
    blocked = set(exclude or ())
    for builtin in DEFAULT_BUILTINS:
        if allowed is not None and builtin.name not in allowed:
            continue
        if builtin.name in blocked:
            continue
        env.bind(builtin.name, builtin)


__all__ = ["DEFAULT_BUILTINS", "load_default_builtins", "check_arity"]

"""Tree-walking interpreter for ``Expr``."""

from __future__ import annotations

import math
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional

from .env import Env
from .errors import ErrorKind, EvalError
from .expr import (
    NONE,
    Add,
    And,
    Apply,
    Assign,
    BinaryOp,
    Bool,
    Builtin,
    Dict,
    Div,
    Do,
    Expr,
    Float,
    Fn,
    For,
    Get,
    Group,
    If,
    Int,
    Let,
    List,
    Macro,
    Mul,
    Neg,
    Nil,
    Not,
    Or,
    Pow,
    Proc,
    Quote,
    Raise,
    Rem,
    String,
    Sub,
    Symbol,
    To,
    Try,
    While,
)

if TYPE_CHECKING:
    from ..editor import Editor

_SELF_EVALUATING = (Int, Float, Bool, String, Builtin, Nil, Proc, Macro)


def evaluate(expr: Expr, editor: "Editor", env: Env) -> Expr:
    """Evaluate ``expr`` against ``env``; failures raise ``EvalError``.

    ``Group``, both ``If`` branches and the ``Try`` handler are tail positions
    and are handled by looping instead of recursing.
    """

    while True:
        if isinstance(expr, Group):
            expr = expr.expr
        elif isinstance(expr, If):
            cond = evaluate(expr.cond, editor, env)
            if not isinstance(cond, Bool):
                raise EvalError.of(ErrorKind.INVALID_COND, cond)
            expr = expr.then if cond.value else expr.orelse
        elif isinstance(expr, Try):
            try:
                return evaluate(expr.body, editor, env)
            except EvalError as err:
                # Quoted so the handler receives the error value unevaluated.
                expr = Apply(expr.handler, (Quote(err.value),))
        else:
            return _evaluate_node(expr, editor, env)


def _evaluate_node(expr: Expr, editor: "Editor", env: Env) -> Expr:
    if isinstance(expr, _SELF_EVALUATING):
        return expr
    if isinstance(expr, Symbol):
        value = env.get(expr)
        if value is None:
            raise EvalError.of(ErrorKind.SYMBOL_NOT_DEFINED, expr)
        return value
    if isinstance(expr, Quote):
        return expr.expr
    if isinstance(expr, BinaryOp):
        return _binary(expr, editor, env)
    if isinstance(expr, Apply):
        return _apply(expr, editor, env)
    if isinstance(expr, List):
        return List(tuple(evaluate(item, editor, env) for item in expr.items))
    if isinstance(expr, Dict):
        return Dict(tuple((key, evaluate(value, editor, env)) for key, value in expr.entries))
    if isinstance(expr, To):
        return _range(expr, editor, env)
    if isinstance(expr, Get):
        return _get(expr, editor, env)
    if isinstance(expr, Neg):
        return _negate(evaluate(expr.expr, editor, env))
    if isinstance(expr, Not):
        value = evaluate(expr.expr, editor, env)
        if not isinstance(value, Bool):
            raise EvalError.of(ErrorKind.INVALID_NOT, Not(value))
        return Bool(not value.value)
    if isinstance(expr, Do):
        result: Expr = NONE
        for item in expr.exprs:
            result = evaluate(item, editor, env)
        return result
    if isinstance(expr, Assign):
        env[expr.var] = evaluate(expr.value, editor, env)
        return NONE
    if isinstance(expr, Let):
        value = evaluate(expr.value, editor, env)
        child = env.copy()
        child[expr.var] = value
        return evaluate(expr.body, editor, child)
    if isinstance(expr, Raise):
        raise EvalError(evaluate(expr.expr, editor, env))
    if isinstance(expr, For):
        return _for(expr, editor, env)
    if isinstance(expr, While):
        while True:
            cond = evaluate(expr.cond, editor, env)
            if not isinstance(cond, Bool):
                raise EvalError.of(ErrorKind.INVALID_COND, cond)
            if not cond.value:
                return NONE
            evaluate(expr.body, editor, env)
    if isinstance(expr, Fn):
        captured = expr.captured.copy()
        captured.update(env)
        return Fn(expr.params, expr.body, captured)
    raise TypeError(f"Cannot evaluate {expr!r}")


# --- Application ------------------------------------------------------------


def _apply(expr: Apply, editor: "Editor", env: Env) -> Expr:
    callee = evaluate(expr.callee, editor, env)
    if isinstance(callee, Builtin):
        if callee.func is None:
            raise EvalError.of(ErrorKind.INVALID_FN, callee)
        return callee.func(expr.args, editor, env)

    if isinstance(callee, (Fn, Proc, Macro)):
        try:
            with editor.nested_call(expr):
                return _call(callee, expr, editor, env)
        except RecursionError:
            # Python ran out of stack before ``max_eval_depth`` was reached.
            raise EvalError.of(ErrorKind.RECURSION_LIMIT, expr) from None

    raise EvalError.of(ErrorKind.INVALID_FN, callee)


def _call(callee: Fn | Proc | Macro, expr: Apply, editor: "Editor", env: Env) -> Expr:
    # zip() pairs positionally: surplus arguments are never evaluated.
    pairs = list(zip(callee.params, expr.args))
    if isinstance(callee, Macro):
        for param, arg in pairs:
            env[param] = evaluate(arg, editor, env)
        return evaluate(callee.body, editor, env)

    frame = callee.captured.copy() if isinstance(callee, Fn) else Env()
    for param, arg in pairs:
        frame[param] = evaluate(arg, editor, env)
    return evaluate(callee.body, editor, frame)


# --- Containers -------------------------------------------------------------


def _range(expr: To, editor: "Editor", env: Env) -> Expr:
    start = evaluate(expr.start, editor, env)
    end = evaluate(expr.end, editor, env)
    if isinstance(start, Int) and isinstance(end, Int):
        return List(tuple(Int(n) for n in range(start.value, end.value)))
    raise EvalError.of(ErrorKind.INVALID_TO, To(start, end))


def _get(expr: Get, editor: "Editor", env: Env) -> Expr:
    container = evaluate(expr.container, editor, env)
    if isinstance(container, Dict):
        if expr.key in container:
            return container.get(expr.key, NONE)  # type: ignore[return-value]
        return container.get(evaluate(expr.key, editor, env), NONE)  # type: ignore[return-value]

    if isinstance(container, (List, String)):
        key = evaluate(expr.key, editor, env)
        if not isinstance(key, Int):
            raise EvalError.of(ErrorKind.INVALID_GET, Get(container, expr.key))
        index = key.value
        if isinstance(container, List):
            return container.items[index] if 0 <= index < len(container.items) else NONE
        return String(container.value[index]) if 0 <= index < len(container.value) else String("")

    raise EvalError.of(ErrorKind.INVALID_GET, Get(container, expr.key))


def _for(expr: For, editor: "Editor", env: Env) -> Expr:
    items = evaluate(expr.items, editor, env)
    if isinstance(items, Dict):
        values = [List((key, value)) for key, value in items.entries]
    elif isinstance(items, List):
        values = list(items.items)
    elif isinstance(items, String):
        values = [String(ch) for ch in items.value]
    else:
        raise EvalError.of(ErrorKind.INVALID_ITER, items)

    for value in values:
        env[expr.var] = value
        evaluate(expr.body, editor, env)
    return NONE


# --- Arithmetic and logic ---------------------------------------------------


def _negate(value: Expr) -> Expr:
    if isinstance(value, Int):
        return Int(-value.value)
    if isinstance(value, Float):
        return Float.of(-value.value)
    if isinstance(value, List):
        return List(tuple(reversed(value.items)))
    if isinstance(value, String):
        return String(value.value[::-1])
    raise EvalError.of(ErrorKind.INVALID_NEG, Neg(value))


def _trunc_div(m: int, n: int) -> int:
    quotient = abs(m) // abs(n)
    return quotient if (m >= 0) == (n > 0) else -quotient


def _trunc_rem(m: int, n: int) -> int:
    return m - n * _trunc_div(m, n)


def _int_pow(m: int, n: int) -> Expr:
    if n >= 0:
        return Int(m**n)
    return Float.of(float(m) ** n)


def _numeric(
    a: Expr,
    b: Expr,
    on_int: Callable[[int, int], Expr],
    on_float: Callable[[float, float], float],
) -> Optional[Expr]:
    if isinstance(a, Int) and isinstance(b, Int):
        return on_int(a.value, b.value)
    if isinstance(a, (Int, Float)) and isinstance(b, (Int, Float)):
        return Float.of(on_float(float(a.value), float(b.value)))
    return None


def _float_text(value: float) -> str:
    """Positional digits with no exponent, and no ``.0`` on whole numbers."""

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    return text[:-2] if text.endswith(".0") else text


def _add(a: Expr, b: Expr) -> Optional[Expr]:
    if isinstance(a, String):
        if isinstance(b, String):
            return String(a.value + b.value)
        if isinstance(b, Int):
            return String(a.value + str(b.value))
        if isinstance(b, Float):
            return String(a.value + _float_text(b.value))
    if isinstance(a, List) and isinstance(b, List):
        return List(a.items + b.items)
    if isinstance(a, Dict) and isinstance(b, Dict):
        return Dict(a.entries + b.entries)
    return _numeric(a, b, lambda m, n: Int(m + n), lambda m, n: m + n)


def _sub(a: Expr, b: Expr) -> Optional[Expr]:
    return _numeric(a, b, lambda m, n: Int(m - n), lambda m, n: m - n)


def _mul(a: Expr, b: Expr) -> Optional[Expr]:
    if isinstance(a, String) and isinstance(b, Int):
        return String(a.value * max(0, b.value))
    if isinstance(a, List) and isinstance(b, Int):
        return List(a.items * max(0, b.value))
    return _numeric(a, b, lambda m, n: Int(m * n), lambda m, n: m * n)


def _div(a: Expr, b: Expr) -> Optional[Expr]:
    return _numeric(a, b, lambda m, n: Int(_trunc_div(m, n)), lambda m, n: m / n)


def _rem(a: Expr, b: Expr) -> Optional[Expr]:
    return _numeric(a, b, lambda m, n: Int(_trunc_rem(m, n)), math.fmod)


def _pow(a: Expr, b: Expr) -> Optional[Expr]:
    return _numeric(a, b, _int_pow, math.pow)


def _and(a: Expr, b: Expr) -> Optional[Expr]:
    if isinstance(a, Bool) and isinstance(b, Bool):
        return Bool(a.value and b.value)
    return None


def _or(a: Expr, b: Expr) -> Optional[Expr]:
    if isinstance(a, Bool) and isinstance(b, Bool):
        return Bool(a.value or b.value)
    return None


_BINARY: dict[type, tuple[Callable[[Expr, Expr], Optional[Expr]], ErrorKind]] = {
    Add: (_add, ErrorKind.INVALID_ADD),
    Sub: (_sub, ErrorKind.INVALID_SUB),
    Mul: (_mul, ErrorKind.INVALID_MUL),
    Div: (_div, ErrorKind.INVALID_DIV),
    Rem: (_rem, ErrorKind.INVALID_REM),
    Pow: (_pow, ErrorKind.INVALID_POW),
    And: (_and, ErrorKind.INVALID_AND),
    Or: (_or, ErrorKind.INVALID_OR),
}


def _binary(expr: BinaryOp, editor: "Editor", env: Env) -> Expr:
    lhs = evaluate(expr.lhs, editor, env)
    rhs = evaluate(expr.rhs, editor, env)
    handler, kind = _BINARY[type(expr)]
    try:
        result = handler(lhs, rhs)
    except (ZeroDivisionError, OverflowError, ValueError):
        result = None
    if result is None:
        raise EvalError.of(kind, type(expr)(lhs, rhs))
    return result


__all__ = ["evaluate"]

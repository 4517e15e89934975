"""Source text to ``Expr`` via a Lark LALR grammar."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import LarkError

from .env import Env
from .errors import ErrorKind, EvalError
from .expr import (
    NONE,
    Add,
    And,
    Apply,
    Assign,
    Bool,
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

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

_UNESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}
_ESCAPE_RE = re.compile(r"\\(.)", re.S)


def _unescape(body: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _UNESCAPES.get(m.group(1), m.group(0)), body)


def _name(token: Token) -> Symbol:
    return Symbol(str(token))


@v_args(inline=True)
class ExprBuilder(Transformer):
    """Builds ``Expr`` nodes while the LALR parser reduces."""

    def program(self, *stmts: Expr) -> Expr:
        return Do(stmts)

    def block(self, *stmts: Expr) -> Expr:
        return stmts[0] if len(stmts) == 1 else Do(stmts)

    # --- Statements and special forms ---

    def assign(self, name: Token, value: Expr) -> Expr:
        return Assign(_name(name), value)

    def let_expr(self, name: Token, value: Expr, body: Expr) -> Expr:
        return Let(_name(name), value, body)

    def if_expr(self, cond: Expr, then: Expr, orelse: Expr) -> Expr:
        return If(cond, then, orelse)

    def for_expr(self, name: Token, items: Expr, body: Expr) -> Expr:
        return For(_name(name), items, body)

    def while_expr(self, cond: Expr, body: Expr) -> Expr:
        return While(cond, body)

    def try_expr(self, body: Expr, handler: Expr) -> Expr:
        return Try(body, handler)

    def raise_expr(self, value: Expr) -> Expr:
        return Raise(value)

    def params(self, *names: Token) -> tuple[Expr, ...]:
        return tuple(_name(name) for name in names)

    def fn_expr(self, params: tuple[Expr, ...], body: Expr) -> Expr:
        return Fn(params, body, Env())

    def proc_expr(self, params: tuple[Expr, ...], body: Expr) -> Expr:
        return Proc(params, body)

    def macro_expr(self, params: tuple[Expr, ...], body: Expr) -> Expr:
        return Macro(params, body)

    # --- Operators ---

    def or_(self, lhs: Expr, rhs: Expr) -> Expr:
        return Or(lhs, rhs)

    def and_(self, lhs: Expr, rhs: Expr) -> Expr:
        return And(lhs, rhs)

    def not_(self, value: Expr) -> Expr:
        return Not(value)

    def to(self, start: Expr, end: Expr) -> Expr:
        return To(start, end)

    def add(self, lhs: Expr, rhs: Expr) -> Expr:
        return Add(lhs, rhs)

    def sub(self, lhs: Expr, rhs: Expr) -> Expr:
        return Sub(lhs, rhs)

    def mul(self, lhs: Expr, rhs: Expr) -> Expr:
        return Mul(lhs, rhs)

    def div(self, lhs: Expr, rhs: Expr) -> Expr:
        return Div(lhs, rhs)

    def rem(self, lhs: Expr, rhs: Expr) -> Expr:
        return Rem(lhs, rhs)

    def neg(self, value: Expr) -> Expr:
        return Neg(value)

    def pow(self, base: Expr, power: Expr) -> Expr:
        return Pow(base, power)

    def application(self, callee: Expr, *items: Expr | list[Expr]) -> Expr:
        # ``f(a, b)`` arrives as one list and is spliced into the argument list.
        args: list[Expr] = []
        for item in items:
            if isinstance(item, list):
                args.extend(item)
            else:
                args.append(item)
        return Apply(callee, tuple(args))

    def call_args(self, *exprs: Expr) -> list[Expr]:
        return list(exprs)

    def get(self, container: Expr, key: Expr) -> Expr:
        return Get(container, key)

    # --- Atoms ---

    def integer(self, token: Token) -> Expr:
        return Int(int(token))

    def floating(self, token: Token) -> Expr:
        return Float.of(float(token))

    def string(self, token: Token) -> Expr:
        return String(_unescape(str(token)[1:-1]))

    def true(self) -> Expr:
        return Bool(True)

    def false(self) -> Expr:
        return Bool(False)

    def none(self) -> Expr:
        return NONE

    def symbol(self, token: Token) -> Expr:
        return _name(token)

    def quote(self, value: Expr) -> Expr:
        return Quote(value)

    def group(self, value: Expr) -> Expr:
        return Group(value)

    def list_lit(self, *items: Expr) -> Expr:
        return List(items)

    def empty_dict(self) -> Expr:
        return Dict()

    def dict_item(self, key: Expr, value: Expr) -> tuple[Expr, Expr]:
        return (key, value)

    def dict_lit(self, *items: tuple[Expr, Expr]) -> Expr:
        return Dict(items)


@lru_cache(maxsize=1)
def build_parser() -> Lark:
    grammar = _GRAMMAR_PATH.read_text(encoding="utf-8")
    return Lark(grammar, start="program", parser="lalr", transformer=ExprBuilder())


def parse(source: str) -> Expr:
    """Parse a whole program into a ``Do`` of its statements.

    Any syntax error raises ``EvalError`` of kind ``InvalidSyntax`` carrying the
    source text.
    """

    try:
        return build_parser().parse(source)
    except LarkError as exc:
        raise EvalError.of(ErrorKind.INVALID_SYNTAX, String(source)) from exc


__all__ = ["ExprBuilder", "build_parser", "parse"]

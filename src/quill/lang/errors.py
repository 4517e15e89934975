"""Error values raised by the evaluator and builtins."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .expr import Dict, Expr, String, Symbol

KIND_KEY = Symbol("kind")
EXPR_KEY = Symbol("expr")


class ErrorKind(str, Enum):
    TOO_FEW_ARGS = "TooFewArgs"
    TOO_MANY_ARGS = "TooManyArgs"
    TYPE_MISMATCH = "TypeMismatch"
    SYMBOL_NOT_DEFINED = "SymbolNotDefined"
    INVALID_SYNTAX = "InvalidSyntax"
    INVALID_ARG = "InvalidArg"
    INVALID_GET = "InvalidGet"
    INVALID_TO = "InvalidTo"
    INVALID_ADD = "InvalidAdd"
    INVALID_SUB = "InvalidSub"
    INVALID_MUL = "InvalidMul"
    INVALID_DIV = "InvalidDiv"
    INVALID_REM = "InvalidRem"
    INVALID_POW = "InvalidPow"
    INVALID_AND = "InvalidAnd"
    INVALID_OR = "InvalidOr"
    INVALID_NOT = "InvalidNot"
    INVALID_NEG = "InvalidNeg"
    INVALID_COND = "InvalidCond"
    INVALID_ITER = "InvalidIter"
    INVALID_FN = "InvalidFn"
    RECURSION_LIMIT = "RecursionLimit"


def error_value(kind: ErrorKind, expr: Expr) -> Dict:
    """Build the ``{kind: "...", expr: ...}`` record used for runtime errors."""

    return Dict.of({KIND_KEY: String(kind.value), EXPR_KEY: expr})


class EvalError(Exception):
    """An error value travelling up the evaluator.

    ``value`` is an arbitrary ``Expr``: the record built by ``error_value`` for
    runtime failures, or whatever a script passed to ``raise``.
    """

    def __init__(self, value: Expr) -> None:
        super().__init__(value.show())
        self.value = value

    @classmethod
    def of(cls, kind: ErrorKind, expr: Expr) -> "EvalError":
        return cls(error_value(kind, expr))

    @property
    def kind(self) -> Optional[str]:
        if isinstance(self.value, Dict):
            kind = self.value.get(KIND_KEY)
            if isinstance(kind, String):
                return kind.value
        return None

    @property
    def expr(self) -> Optional[Expr]:
        if isinstance(self.value, Dict):
            return self.value.get(EXPR_KEY)
        return None

    def __str__(self) -> str:
        kind, expr = self.kind, self.expr
        if kind is not None and expr is not None:
            return f"{kind}: {expr.show()}"
        return self.value.show()


__all__ = ["ErrorKind", "EvalError", "error_value", "KIND_KEY", "EXPR_KEY"]

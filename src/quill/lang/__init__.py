"""The quill scripting language: values, environments, parser, evaluator."""

from .builtins import DEFAULT_BUILTINS, load_default_builtins
from .env import Env
from .errors import ErrorKind, EvalError, error_value
from .evaluator import evaluate
from .expr import *  # noqa: F401,F403
from .expr import __all__ as _expr_all
from .parser import parse

__all__ = [
    *_expr_all,
    "DEFAULT_BUILTINS",
    "Env",
    "ErrorKind",
    "EvalError",
    "error_value",
    "evaluate",
    "load_default_builtins",
    "parse",
]

"""Value/AST representation for the scripting language.

Every node is a frozen dataclass deriving from ``Expr``. The same objects serve
as parsed syntax, runtime values, and ``Env``/``Dict`` keys, so all of them are
hashable and totally ordered: first by the variant's ``TAG`` (declaration
order below) and then by their fields.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Iterable, Mapping, Optional

if TYPE_CHECKING:
    from .env import Env


class Expr:
    __slots__ = ()

    TAG: ClassVar[int] = -1

    def sort_key(self) -> tuple[Any, ...]:
        return (self.TAG, *(getattr(self, item.name) for item in fields(self) if item.compare))  # type: ignore[arg-type]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Expr):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Expr):
            return NotImplemented
        return self == other or self.sort_key() < other.sort_key()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Expr):
            return NotImplemented
        return other < self

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Expr):
            return NotImplemented
        return other <= self

    def show(self) -> str:
        """Render as source-like text."""

        raise NotImplementedError

    def __str__(self) -> str:
        return self.show()


# --- Atoms ----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Quote(Expr):
    expr: Expr

    TAG = 0

    def show(self) -> str:
        return f"'{self.expr.show()}"


@dataclass(frozen=True, slots=True)
class Symbol(Expr):
    name: str

    TAG = 1

    def show(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Int(Expr):
    value: int

    TAG = 2

    def show(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class Float(Expr):
    """A double stored as its raw IEEE-754 bit pattern."""

    bits: int

    TAG = 3

    @classmethod
    def of(cls, value: float) -> "Float":
        return cls(struct.unpack("<Q", struct.pack("<d", float(value)))[0])

    @property
    def value(self) -> float:
        return struct.unpack("<d", struct.pack("<Q", self.bits))[0]

    def show(self) -> str:
        return repr(self.value)


@dataclass(frozen=True, slots=True)
class Bool(Expr):
    value: bool

    TAG = 4

    def show(self) -> str:
        return "true" if self.value else "false"


_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t"}


@dataclass(frozen=True, slots=True)
class String(Expr):
    value: str

    TAG = 5

    def show(self) -> str:
        return '"' + "".join(_ESCAPES.get(ch, ch) for ch in self.value) + '"'

    def __str__(self) -> str:
        return self.value


# --- Containers -----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Group(Expr):
    expr: Expr

    TAG = 6

    def show(self) -> str:
        return f"({self.expr.show()})"


@dataclass(frozen=True, slots=True)
class List(Expr):
    items: tuple[Expr, ...] = ()

    TAG = 7

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def show(self) -> str:
        return "[" + ", ".join(item.show() for item in self.items) + "]"


@dataclass(frozen=True, slots=True)
class Dict(Expr):
    """Mapping with unique keys, entries kept sorted by key."""

    entries: tuple[tuple[Expr, Expr], ...] = ()

    TAG = 8

    def __post_init__(self) -> None:
        merged: dict[Expr, Expr] = {}
        for key, value in self.entries:
            merged[key] = value
        object.__setattr__(self, "entries", tuple(sorted(merged.items(), key=_entry_key)))

    @classmethod
    def of(cls, mapping: Mapping[Expr, Expr] | Iterable[tuple[Expr, Expr]]) -> "Dict":
        items = mapping.items() if isinstance(mapping, Mapping) else mapping
        return cls(tuple(items))

    def get(self, key: Expr, default: Optional[Expr] = None) -> Optional[Expr]:
        for entry_key, value in self.entries:
            if entry_key == key:
                return value
        return default

    def __contains__(self, key: object) -> bool:
        return any(entry_key == key for entry_key, _ in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def show(self) -> str:
        body = ", ".join(f"{key.show()}: {value.show()}" for key, value in self.entries)
        return "{" + body + "}"


def _entry_key(entry: tuple[Expr, Expr]) -> Expr:
    return entry[0]


@dataclass(frozen=True, slots=True)
class Builtin(Expr):
    """Native function; identity (equality, hashing, order) is the name."""

    name: str
    help: str = field(default="", compare=False)
    help_long: str = field(default="", compare=False)
    func: Optional[Callable[..., Expr]] = field(default=None, compare=False, repr=False)

    TAG = 9

    def show(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Nil(Expr):
    TAG = 10

    def show(self) -> str:
        return "none"


NONE = Nil()


# --- Operators ------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class To(Expr):
    start: Expr
    end: Expr

    TAG = 11

    def show(self) -> str:
        return f"{self.start.show()} to {self.end.show()}"


@dataclass(frozen=True, slots=True)
class Get(Expr):
    container: Expr
    key: Expr

    TAG = 12

    def show(self) -> str:
        return f"{self.container.show()}@{self.key.show()}"


@dataclass(frozen=True, slots=True)
class Neg(Expr):
    expr: Expr

    TAG = 13

    def show(self) -> str:
        return f"-{self.expr.show()}"


@dataclass(frozen=True, slots=True)
class BinaryOp(Expr):
    lhs: Expr
    rhs: Expr

    OP: ClassVar[str] = "?"

    def show(self) -> str:
        return f"{self.lhs.show()} {self.OP} {self.rhs.show()}"


@dataclass(frozen=True, slots=True)
class Add(BinaryOp):
    TAG = 14
    OP = "+"


@dataclass(frozen=True, slots=True)
class Sub(BinaryOp):
    TAG = 15
    OP = "-"


@dataclass(frozen=True, slots=True)
class Mul(BinaryOp):
    TAG = 16
    OP = "*"


@dataclass(frozen=True, slots=True)
class Div(BinaryOp):
    TAG = 17
    OP = "/"


@dataclass(frozen=True, slots=True)
class Rem(BinaryOp):
    TAG = 18
    OP = "%"


@dataclass(frozen=True, slots=True)
class Pow(BinaryOp):
    TAG = 19
    OP = "^"


@dataclass(frozen=True, slots=True)
class And(BinaryOp):
    TAG = 20
    OP = "&"


@dataclass(frozen=True, slots=True)
class Or(BinaryOp):
    TAG = 21
    OP = "|"


@dataclass(frozen=True, slots=True)
class Not(Expr):
    expr: Expr

    TAG = 22

    def show(self) -> str:
        return f"!{self.expr.show()}"


# --- Control and binding forms ---------------------------------------------


@dataclass(frozen=True, slots=True)
class Do(Expr):
    exprs: tuple[Expr, ...] = ()

    TAG = 23

    def __post_init__(self) -> None:
        if not isinstance(self.exprs, tuple):
            object.__setattr__(self, "exprs", tuple(self.exprs))

    def show(self) -> str:
        return "{ " + "".join(f"{expr.show()}; " for expr in self.exprs) + "}"


def _show_callable(keyword: str, params: tuple[Expr, ...], body: Expr) -> str:
    names = ", ".join(param.show() for param in params)
    return f"{keyword}({names}) -> {body.show()}"


@dataclass(frozen=True, slots=True)
class Macro(Expr):
    params: tuple[Expr, ...]
    body: Expr

    TAG = 24

    def show(self) -> str:
        return _show_callable("macro", self.params, self.body)


@dataclass(frozen=True, slots=True)
class Proc(Expr):
    params: tuple[Expr, ...]
    body: Expr

    TAG = 25

    def show(self) -> str:
        return _show_callable("proc", self.params, self.body)


@dataclass(frozen=True, slots=True)
class Fn(Expr):
    """Closure: parameters, body, and the frame captured when it was built."""

    params: tuple[Expr, ...]
    body: Expr
    captured: "Env"

    TAG = 26

    def show(self) -> str:
        return _show_callable("fn", self.params, self.body)


@dataclass(frozen=True, slots=True)
class Apply(Expr):
    callee: Expr
    args: tuple[Expr, ...] = ()

    TAG = 27

    def __post_init__(self) -> None:
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    def show(self) -> str:
        return self.callee.show() + "".join(f" {arg.show()}" for arg in self.args)


@dataclass(frozen=True, slots=True)
class Let(Expr):
    var: Expr
    value: Expr
    body: Expr

    TAG = 28

    def show(self) -> str:
        return f"let {self.var.show()} = {self.value.show()} in {self.body.show()}"


@dataclass(frozen=True, slots=True)
class Assign(Expr):
    var: Expr
    value: Expr

    TAG = 29

    def show(self) -> str:
        return f"{self.var.show()} = {self.value.show()}"


@dataclass(frozen=True, slots=True)
class If(Expr):
    cond: Expr
    then: Expr
    orelse: Expr

    TAG = 30

    def show(self) -> str:
        return f"if {self.cond.show()} then {self.then.show()} else {self.orelse.show()}"


@dataclass(frozen=True, slots=True)
class Try(Expr):
    body: Expr
    handler: Expr

    TAG = 31

    def show(self) -> str:
        return f"try {self.body.show()} catch {self.handler.show()}"


@dataclass(frozen=True, slots=True)
class Raise(Expr):
    expr: Expr

    TAG = 32

    def show(self) -> str:
        return f"raise {self.expr.show()}"


@dataclass(frozen=True, slots=True)
class For(Expr):
    var: Expr
    items: Expr
    body: Expr

    TAG = 33

    def show(self) -> str:
        return f"for {self.var.show()} in {self.items.show()} do {self.body.show()}"


@dataclass(frozen=True, slots=True)
class While(Expr):
    cond: Expr
    body: Expr

    TAG = 34

    def show(self) -> str:
        return f"while {self.cond.show()} do {self.body.show()}"


def from_python(value: Any) -> Expr:
    """Convert plain Python data (as used by builtins and tests) to ``Expr``."""

    if isinstance(value, Expr):
        return value
    if value is None:
        return NONE
    if isinstance(value, bool):
        return Bool(value)
    if isinstance(value, int):
        return Int(value)
    if isinstance(value, float):
        return Float.of(value)
    if isinstance(value, str):
        return String(value)
    if isinstance(value, (list, tuple)):
        return List(tuple(from_python(item) for item in value))
    if isinstance(value, dict):
        return Dict.of({from_python(k): from_python(v) for k, v in value.items()})
    raise TypeError(f"Cannot convert {type(value).__name__} to Expr")


__all__ = [
    "Expr",
    "Quote",
    "Symbol",
    "Int",
    "Float",
    "Bool",
    "String",
    "Group",
    "List",
    "Dict",
    "Builtin",
    "Nil",
    "NONE",
    "To",
    "Get",
    "Neg",
    "BinaryOp",
    "Add",
    "Sub",
    "Mul",
    "Div",
    "Rem",
    "Pow",
    "And",
    "Or",
    "Not",
    "Do",
    "Macro",
    "Proc",
    "Fn",
    "Apply",
    "Let",
    "Assign",
    "If",
    "Try",
    "Raise",
    "For",
    "While",
    "from_python",
]

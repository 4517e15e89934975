"""Binding tables for the scripting language."""

from __future__ import annotations

from typing import Iterator, Mapping, Optional, Union

from .expr import Expr, Symbol


class Env:
    """Mapping from ``Expr`` keys (usually symbols) to values.

    Iteration follows key order. Copies are shallow; values are immutable so a
    copy behaves as an independent frame.
    """

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Optional[Mapping[Expr, Expr]] = None) -> None:
        self._bindings: dict[Expr, Expr] = dict(bindings or {})

    def copy(self) -> "Env":
        return Env(self._bindings)

    def get(self, key: Expr, default: Optional[Expr] = None) -> Optional[Expr]:
        return self._bindings.get(key, default)

    def lookup(self, name: str) -> Optional[Expr]:
        return self._bindings.get(Symbol(name))

    def bind(self, name: str, value: Expr) -> None:
        self._bindings[Symbol(name)] = value

    def remove(self, key: Expr) -> None:
        self._bindings.pop(key, None)

    def update(self, other: Union["Env", Mapping[Expr, Expr]]) -> None:
        source = other._bindings if isinstance(other, Env) else other
        self._bindings.update(source)

    def items(self) -> list[tuple[Expr, Expr]]:
        return sorted(self._bindings.items(), key=lambda item: item[0])

    def keys(self) -> list[Expr]:
        return sorted(self._bindings)

    def __getitem__(self, key: Expr) -> Expr:
        return self._bindings[key]

    def __setitem__(self, key: Expr, value: Expr) -> None:
        self._bindings[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Expr]:
        return iter(self.keys())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Env):
            return NotImplemented
        return self._bindings == other._bindings

    def __lt__(self, other: "Env") -> bool:
        return self.items() < other.items()

    def __hash__(self) -> int:
        return hash(tuple(self.items()))

    def __repr__(self) -> str:
        body = ", ".join(f"{key.show()}: {value.show()}" for key, value in self.items())
        return f"Env({{{body}}})"


__all__ = ["Env"]

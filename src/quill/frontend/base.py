"""Frontend protocol the dispatch loop talks to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

from .input import Input

if TYPE_CHECKING:
    from ..editor import Editor


class FrontendError(RuntimeError):
    """Raised when a frontend cannot complete a request (closed, cancelled)."""


class Frontend(Protocol):
    """Presentation and input collaborator for ``EditorSession``."""

    def render(self, editor: "Editor", force: bool = False) -> None:
        ...

    def wait_for_input(self, editor: "Editor") -> Input:
        ...

    def set_status(self, text: str) -> None:
        ...

    def prompt(self, text: str, default: str = "") -> str:
        ...

    def ask(self, text: str, yes: str = "y", no: str = "n") -> bool:
        ...

    def choose(self, text: str, options: Sequence[str]) -> str:
        ...

    def get_num(self, text: str) -> int:
        ...

    def exit(self) -> None:
        ...

    def height(self) -> int:
        ...

    def width(self) -> int:
        ...


class PromptingFrontend:
    """Mixin deriving ``ask``/``choose``/``get_num`` from ``prompt``.

    Invalid answers re-prompt; a frontend ends the exchange by raising
    ``FrontendError`` from ``prompt``.
    """

    def prompt(self, text: str, default: str = "") -> str:
        raise NotImplementedError

    def set_status(self, text: str) -> None:
        raise NotImplementedError

    def ask(self, text: str, yes: str = "y", no: str = "n") -> bool:
        while True:
            answer = self.prompt(f"{text} ({yes}/{no}) ").strip()
            if answer == yes:
                return True
            if answer == no:
                return False
            self.set_status(f"Please answer '{yes}' or '{no}'")

    def choose(self, text: str, options: Sequence[str]) -> str:
        if not options:
            raise FrontendError("Nothing to choose from")
        while True:
            answer = self.prompt(f"{text} [{', '.join(options)}] ").strip()
            if answer in options:
                return answer
            self.set_status(f"Choose one of: {', '.join(options)}")

    def get_num(self, text: str) -> int:
        while True:
            answer = self.prompt(text).strip()
            try:
                return int(answer)
            except ValueError:
                self.set_status(f"'{answer}' is not a number")


__all__ = ["Frontend", "FrontendError", "PromptingFrontend"]

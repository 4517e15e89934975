"""Editor configuration and its environment-variable overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

ENV_PREFIX = "QUILL_"


def _env_int(environ: Mapping[str, str], key: str, fallback: int) -> int:
    value = environ.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


@dataclass(slots=True)
class EditorConfig:
    """Knobs shared by the editor core and the dispatch loop."""

    tab_width: int = 4
    # Nested applications of user callables allowed before RecursionLimit.
    max_eval_depth: int = 200
    # 0 means "ask the frontend for its height".
    page_size: int = 0
    startup_script: Optional[str] = None

    def __post_init__(self) -> None:
        if self.tab_width < 0:
            raise ValueError("tab_width cannot be negative")
        if self.max_eval_depth <= 0:
            raise ValueError("max_eval_depth must be positive")
        if self.page_size < 0:
            raise ValueError("page_size cannot be negative")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EditorConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            tab_width=max(0, _env_int(env, "TAB_WIDTH", defaults.tab_width)),
            max_eval_depth=max(
                1, _env_int(env, "MAX_EVAL_DEPTH", defaults.max_eval_depth)
            ),
            page_size=max(0, _env_int(env, "PAGE_SIZE", defaults.page_size)),
            startup_script=env.get(f"{ENV_PREFIX}STARTUP_SCRIPT") or None,
        )

    def as_dict(self) -> dict[str, object]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


__all__ = ["EditorConfig", "ENV_PREFIX"]

"""Logging and profiling for quill, on top of telelog.

Everything else in the package goes through four calls: ``configure``,
``get_logger``, ``record_event`` and ``span``. The editor draws on the
terminal, so nothing is written to the console unless ``QUILL_LOG_CONSOLE``
is set; ``QUILL_LOG_FILE`` names a log file.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, Tuple, Type, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "QUILL_"
DEFAULT_LOGGER_NAME = "quill"

# preset -> (minimum level, fallback log file, buffered)
PRESETS: Dict[str, Tuple[str, Optional[str], bool]] = {
    "development": ("DEBUG", "quill-dev.log", False),
    "production": ("INFO", "quill.log", True),
    "quiet": ("ERROR", None, False),
}

_LOGGERS: MutableMapping[str, Any] = {}
_config: Optional[Any] = None


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}") or None


def _env_flag(name: str) -> bool:
    return (_env(name) or "").lower() in {"1", "true", "yes", "on"}


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _emit(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    """Log ``message`` with ``payload`` as structured pairs when telelog allows it."""

    name = level.lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        structured(message, [(str(key), _text(value)) for key, value in payload.items()])
        return
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {payload}")


def _preset_config(preset: str) -> Any:
    try:
        level, fallback_file, buffered = PRESETS[preset.lower()]
    except KeyError:
        raise ValueError(f"Unknown preset '{preset}'.") from None
    config = tl.Config()
    config.with_min_level(level)
    config.with_console_output(False)
    log_file = _env("LOG_FILE") or fallback_file
    if log_file:
        config.with_file_output(log_file)
    config.with_buffering(buffered)
    config.with_profiling(True)
    return config


def _environment_config() -> Any:
    config = tl.Config()
    config.with_min_level((_env("LOG_LEVEL") or "INFO").upper())
    config.with_console_output(_env_flag("LOG_CONSOLE"))
    if _env_flag("LOG_CONSOLE"):
        config.with_colored_output(not _env_flag("NO_COLOR"))
    if _env_flag("LOG_JSON"):
        config.with_json_format(True)
    log_file = _env("LOG_FILE")
    if log_file:
        config.with_file_output(log_file)
    if _env_flag("LOG_BUFFERED"):
        config.with_buffering(True)
        config.with_buffer_size(int(_env("LOG_BUFFER_SIZE") or "2048"))
    config.with_profiling(True)
    return config


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Switch every logger handed out from now on to a new configuration.

    ``preset`` is one of ``PRESETS``; ``config`` is a ready ``telelog.Config``.
    Without either, the configuration is read from ``QUILL_*`` variables.
    """

    global _config
    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")
    if preset:
        config = _preset_config(preset)
    _config = config if config is not None else _environment_config()
    _LOGGERS.clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Return the cached ``telelog.Logger`` called ``name``."""

    if _config is None:
        configure()
    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGERS:
        _LOGGERS[logger_name] = tl.Logger.with_config(logger_name, _config)
    return _LOGGERS[logger_name]


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>`` with ``data`` attached."""

    _emit(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass(slots=True)
class SpanHandle:
    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        payload = {"span": self.span_name, **self.metadata, "reason": reason}
        if self.component_name:
            payload["component"] = self.component_name
        _emit(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
    expected: Tuple[Type[BaseException], ...] = (),
) -> Iterator[SpanHandle]:
    """Profile the block, tracking it as a component when ``component`` is set.

    ``component=True`` names the component after the span. ``metadata`` is
    added to the logger context while the block runs. Exceptions escaping the
    block are logged as ``span::fail`` unless they are instances of
    ``expected``; either way they propagate.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else component or None
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    handle = SpanHandle(log, name, component_name, dict(context))

    with ExitStack() as stack:
        for key, value in context.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except expected:
            raise
        except Exception as exc:
            handle.fail(str(exc))
            raise


__all__ = ["PRESETS", "SpanHandle", "configure", "get_logger", "record_event", "span"]

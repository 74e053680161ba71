"""Structured logging for the manifest engine, built on :mod:`structlog`.

Records are rendered as one JSON object per line on stderr, keeping stdout
free for command output. During an apply the orchestrator binds
``space_guid`` and ``app`` and the applier binds ``phase``; records
emitted outside of that scope carry them as ``null``.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog._config import BoundLoggerLazyProxy
from structlog.contextvars import merge_contextvars

from .settings import get_settings

APPLY_CONTEXT_FIELDS: tuple[str, ...] = ("space_guid", "app", "phase")

_LOGGING_CONFIGURED = False


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if isinstance(value, int):
        return value
    raise ValueError(f"Invalid log level: {level!r}")


def _add_apply_context(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for name in APPLY_CONTEXT_FIELDS:
        event_dict.setdefault(name, None)
    return event_dict


def configure_logging(level: str | int | None = None, *, stream: TextIO | None = None) -> None:
    """Install the JSON pipeline; later calls are no-ops."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    level_value = _resolve_level(level or get_settings().log_level)
    output = stream or sys.stderr

    # the kubernetes client logs through the standard library
    logging.basicConfig(format="%(message)s", level=level_value, stream=output)

    structlog.configure(
        cache_logger_on_first_use=True,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=structlog.PrintLoggerFactory(file=output),
        processors=[
            merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.EventRenamer("message"),
            _add_apply_context,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
    )

    _LOGGING_CONFIGURED = True


def get_logger(name: str) -> Any:
    """Return a lazy logger whose records carry ``logger=<name>``.

    Nothing is configured here, so modules may create loggers at import time
    and entry points call :func:`configure_logging` afterwards.
    """

    # ``logger`` collides with wrap_logger's first parameter, so build the
    # lazy proxy that get_logger would return directly.
    return BoundLoggerLazyProxy(None, initial_values={"logger": name}, logger_factory_args=())


__all__ = [
    "APPLY_CONTEXT_FIELDS",
    "configure_logging",
    "get_logger",
]

"""Centralized logging helpers.

configure_logging() installs a single stream handler on the root logger using
Constants.LOG_FORMAT and the level named by DXPM_LOG_LEVEL. Modules log through
``logging.getLogger(__name__)`` and attach structured fields to DEBUG traces via
extra_context().
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from constants import Constants

_HANDLER_MARKER = "_dxpm_handler"


class _ContextFormatter(logging.Formatter):
    """Formatter that appends structured context fields at DEBUG level."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        ctx = getattr(record, "dxpm_context", None)
        if record.levelno <= logging.DEBUG and ctx:
            fields = " ".join(f"{k}={v}" for k, v in ctx.items())
            return f"{base} | {fields}"
        return base


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once per process.

    Args:
        level: Level name; defaults to DXPM_LOG_LEVEL or INFO.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in root.handlers:
        if getattr(handler, _HANDLER_MARKER, False):
            root.setLevel(level_value)
            return

    handler = logging.StreamHandler()
    handler.setFormatter(_ContextFormatter(Constants.LOG_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)
    root.addHandler(handler)
    root.setLevel(level_value)


def add_file_handler(path: str) -> logging.Handler:
    """Attach a file handler with timestamps to the root logger."""
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logging.getLogger().addHandler(handler)
    return handler


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from logger would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping for a structured log call.

    None values are dropped so call sites can pass optional fields freely.
    """
    return {"dxpm_context": {k: v for k, v in fields.items() if v is not None}}


class Timer:
    """Context manager measuring wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)

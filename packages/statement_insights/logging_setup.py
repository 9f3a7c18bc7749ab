"""Logging for the ``statement_insights`` package.

Modules log through ``get_logger("statement_insights.<module>")`` and never
attach handlers. The CLI calls :func:`configure_logging` once at startup,
which gives the package root logger a single stderr handler; until then the
root only carries a ``NullHandler``. :func:`reset_logging` detaches that
handler again for hosts (and tests) that configure logging more than once.

Messages use a short ``event:key=value`` form, e.g.
``normalize:header_found row=3 data_rows=42``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "statement_insights"
LOG_LEVEL_ENV = "STATEMENT_INSIGHTS_LOG_LEVEL"

_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` (or ``STATEMENT_INSIGHTS_LOG_LEVEL`` when ``None``) into a
    numeric level. Names are case-insensitive; unknown names give INFO."""

    raw = os.getenv(LOG_LEVEL_ENV) if level is None else level
    if isinstance(raw, int):
        return raw
    if not raw or not raw.strip():
        return logging.INFO
    name = raw.strip().upper()
    if name.isdigit():
        return int(name)
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def configure_logging(level: int | str | None = None, *, stream: IO[str] = sys.stderr) -> None:
    """Attach the package's stream handler; later calls are no-ops."""

    global _handler
    if _handler is not None:
        return

    root = logging.getLogger(PACKAGE_LOGGER)
    for h in list(root.handlers):
        if isinstance(h, logging.NullHandler):
            root.removeHandler(h)

    resolved = resolve_level(level)
    _handler = logging.StreamHandler(stream)
    _handler.setLevel(resolved)
    _handler.setFormatter(logging.Formatter(_FORMAT))
    root.setLevel(resolved)
    root.addHandler(_handler)
    root.propagate = False


def reset_logging() -> None:
    global _handler
    root = logging.getLogger(PACKAGE_LOGGER)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.NOTSET)
    root.propagate = True
    _handler = None


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "reset_logging", "resolve_level"]

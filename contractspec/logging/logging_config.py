"""
contractspec.logging.logging_config

Purpose:
    One place that owns handlers, format and level for services built on
    contractspec. Every line carries the request id, uvicorn's own loggers
    included.

Notes:
    - Library modules only call logging.getLogger(__name__).
    - configure_logging() is safe to call once per app factory call: the
      contractspec handler is found by name and re-levelled, never stacked.

Author:
    Kanir Pandya

Created:
    2026-02-15

Updated:
    2026-03-09
"""

from __future__ import annotations

import logging

from contractspec.logging.request_context import RequestIdFilter

LOG_FORMAT = "%(asctime)s | %(levelname)s | request_id=%(request_id)s | %(name)s | %(message)s"

HANDLER_NAME = "contractspec"
LIBRARY_LOGGER = "contractspec"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def resolve_level(level: int | str) -> int:
    """Accept 10 / "debug" / "DEBUG"; anything else is a configuration error."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def _find_handler(logger: logging.Logger) -> logging.Handler | None:
    return next((h for h in logger.handlers if h.get_name() == HANDLER_NAME), None)


def _shared_handler(root: logging.Logger) -> logging.Handler:
    handler = _find_handler(root)
    if handler is None:
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
        handler.addFilter(RequestIdFilter())
        root.addHandler(handler)
    return handler


def configure_logging(level: int | str = logging.INFO) -> logging.Handler:
    lvl = resolve_level(level)

    root = logging.getLogger()
    root.setLevel(lvl)
    handler = _shared_handler(root)
    handler.setLevel(lvl)

    logging.getLogger(LIBRARY_LOGGER).setLevel(lvl)

    # uvicorn installs its own handlers; swap them for ours and stop propagation
    for name in UVICORN_LOGGERS:
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = [handler]
        uv_logger.setLevel(lvl)
        uv_logger.propagate = False

    return handler

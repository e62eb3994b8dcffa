"""
contractspec.logging.request_context

Purpose:
    Request-scoped context storage using contextvars, and the logging filter
    that stamps the current request id onto every log record.

Author:
    Kanir Pandya

Created:
    2026-02-15

Updated:
    2026-03-09
"""

from __future__ import annotations

import contextvars
import logging

NO_REQUEST_ID = "-"

request_id_ctx_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "contractspec_request_id",
    default=None,
)


def current_request_id() -> str:
    return request_id_ctx_var.get() or NO_REQUEST_ID


class RequestIdFilter(logging.Filter):
    """Adds `record.request_id`; records that already carry one keep it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = current_request_id()
        return True

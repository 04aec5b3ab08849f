"""Shared logging configuration.

Records are written as JSON to stderr and kept in a small in-memory ring
buffer served by ``/api/logs``. Records emitted while an HTTP request is
being handled carry that request's method and path.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Optional

from pythonjsonlogger import jsonlogger

_CONFIGURED = False
_LOG_BUFFER: deque[dict[str, str]] = deque(maxlen=200)
_CURRENT_REQUEST: ContextVar[tuple[str, str]] = ContextVar("astrolog_request", default=("", ""))


def bind_request(method: str, path: str) -> Token:
    """Tag records logged from here on with ``method`` and ``path``."""
    return _CURRENT_REQUEST.set((method, path))


def unbind_request(token: Token) -> None:
    _CURRENT_REQUEST.reset(token)


class _ContextFilter(logging.Filter):
    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        record.method, record.path = _CURRENT_REQUEST.get()
        return True


class _BufferHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            method, path = _CURRENT_REQUEST.get()
            timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
            _LOG_BUFFER.appendleft(
                {
                    "time": timestamp.isoformat().replace("+00:00", "Z"),
                    "level": record.levelname,
                    "logger": record.name,
                    "method": method,
                    "path": path,
                    "message": record.getMessage(),
                }
            )
        except Exception:
            self.handleError(record)


def setup_logging(service_name: Optional[str] = None) -> None:
    """Install the JSON stream handler and the ring buffer on the root logger."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    service = service_name or os.getenv("SERVICE_NAME", "astrolog")

    stream = logging.StreamHandler()
    stream.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(service)s %(method)s %(path)s"
        )
    )
    stream.addFilter(_ContextFilter(service))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(stream)
    root.addHandler(_BufferHandler())
    root.setLevel(log_level)
    logging.captureWarnings(True)
    _CONFIGURED = True


def get_log_buffer(limit: int = 100, path: Optional[str] = None) -> list[dict[str, str]]:
    """Newest first; ``path`` keeps only records from requests to that path."""
    entries = list(_LOG_BUFFER)
    if path:
        entries = [entry for entry in entries if entry["path"] == path]
    return entries[:limit]


__all__ = ["bind_request", "get_log_buffer", "setup_logging", "unbind_request"]

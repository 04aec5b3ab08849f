"""Service-layer exceptions mapped to HTTP responses by the API."""

from __future__ import annotations


class LogbookError(Exception):
    """Base class for errors raised by logbook services."""


class LogbookValidationError(LogbookError):
    """Input rejected before any write reached the database."""


class RecordNotFoundError(LogbookError):
    def __init__(self, kind: str, record_id: object) -> None:
        super().__init__(f"{kind}_not_found")
        self.kind = kind
        self.record_id = record_id


__all__ = ["LogbookError", "LogbookValidationError", "RecordNotFoundError"]

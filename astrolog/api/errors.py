"""Map service and storage exceptions to JSON error responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from astrolog.services.errors import LogbookValidationError, RecordNotFoundError

logger = logging.getLogger(__name__)


def _storage_message(exc: SQLAlchemyError) -> str:
    original = getattr(exc, "orig", None)
    return str(original or exc)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LogbookValidationError)
    async def _validation(_request: Request, exc: LogbookValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RecordNotFoundError)
    async def _not_found(_request: Request, exc: RecordNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(IntegrityError)
    async def _integrity(request: Request, exc: IntegrityError) -> JSONResponse:
        logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(status_code=409, content={"detail": _storage_message(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def _storage(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": _storage_message(exc)})


__all__ = ["register_error_handlers"]

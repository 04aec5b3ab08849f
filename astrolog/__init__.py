"""astrolog FastAPI application package."""

import logging
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request

from .api import api_router
from .api.errors import register_error_handlers
from .auth_router import router as auth_router
from .core.config import settings
from .core.logging_config import bind_request, setup_logging, unbind_request
from .db.session import init_db
from .services.auth import AuthContext
from .services.auth_provider import AuthProviderClient


async def _tag_request_logs(request: Request, call_next: Callable[[Request], Awaitable[Any]]):
    token = bind_request(request.method, request.url.path)
    try:
        return await call_next(request)
    finally:
        unbind_request(token)


def create_app(
    auth_provider: AuthProviderClient | None = None,
    auth_context: AuthContext | None = None,
) -> FastAPI:
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Initializing %s API (build %s)", settings.app_name, settings.build_tag)

    app = FastAPI(title=settings.app_name, version=settings.app_version)
    app.state.auth_context = auth_context if auth_context is not None else AuthContext()
    app.state.auth_provider = auth_provider if auth_provider is not None else AuthProviderClient()
    app.include_router(api_router, prefix=settings.api_prefix)
    app.include_router(auth_router)
    register_error_handlers(app)

    app.middleware("http")(_tag_request_logs)

    @app.on_event("startup")
    def _bootstrap_database() -> None:
        init_db()

    @app.on_event("shutdown")
    def _close_provider() -> None:
        app.state.auth_provider.close()

    return app


app = create_app()

"""API dependencies."""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from astrolog.core.config import settings
from astrolog.db.session import get_session
from astrolog.services.auth import AuthContext
from astrolog.services.auth_provider import AuthProviderClient, AuthSession


def get_db() -> Generator[Session, None, None]:
    with get_session() as session:
        yield session


def get_auth_context(request: Request) -> AuthContext:
    return request.app.state.auth_context


def get_auth_provider(request: Request) -> AuthProviderClient:
    return request.app.state.auth_provider


def current_session(
    request: Request, auth: AuthContext = Depends(get_auth_context)
) -> AuthSession | None:
    return auth.get(request.cookies.get(settings.session_cookie_name))


def require_user(session: AuthSession | None = Depends(current_session)) -> AuthSession | None:
    """Gate for every data endpoint."""
    if session is None and settings.auth_required:
        raise HTTPException(status_code=401, detail="Sign in required")
    return session

"""Magic-link sign-in flow and the top-level redirecting routes."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel
from sqlmodel import Session

from astrolog.api.deps import (
    current_session,
    get_auth_context,
    get_auth_provider,
    get_db,
)
from astrolog.core.config import settings
from astrolog.services.auth import AuthContext, bootstrap_callback
from astrolog.services.auth_provider import (
    AuthProviderClient,
    AuthProviderError,
    AuthSession,
    new_code_verifier,
)
from astrolog.services.targets import list_target_catalog

router = APIRouter()
logger = logging.getLogger(__name__)

PKCE_COOKIE = "astrolog_pkce"


class LoginPayload(BaseModel):
    email: str = ""


def _redirect(path: str) -> RedirectResponse:
    return RedirectResponse(url=path, status_code=303)


@router.get("/", include_in_schema=False)
def root(session: AuthSession | None = Depends(current_session)) -> RedirectResponse:
    """Send signed-in users to the target list, everyone else to login."""

    if session is None and settings.auth_required:
        return _redirect(settings.login_path)
    return _redirect(settings.landing_path)


@router.get("/login", tags=["auth"])
def login_page(e: Optional[str] = Query(default=None)) -> dict[str, Any]:
    body: dict[str, Any] = {"message": "Enter your email to receive a magic link."}
    if e:
        body["error"] = e
        body["hint"] = "Sign-in link was invalid or expired. Request a new one."
    return body


@router.get("/targets", tags=["auth"])
def landing(
    q: Optional[str] = Query(default=None),
    session: AuthSession | None = Depends(current_session),
    db: Session = Depends(get_db),
) -> Any:
    if session is None and settings.auth_required:
        return _redirect(settings.login_path)
    return list_target_catalog(db, q)


@router.post("/auth/login", tags=["auth"])
def send_magic_link(
    payload: LoginPayload,
    provider: AuthProviderClient = Depends(get_auth_provider),
) -> Any:
    email = payload.email.strip()
    if not email:
        raise HTTPException(status_code=400, detail="Enter your email.")

    verifier = new_code_verifier()
    redirect_to = f"{settings.public_base_url.rstrip('/')}/auth/callback"
    try:
        provider.send_magic_link(email, redirect_to, verifier=verifier)
    except AuthProviderError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    response = JSONResponse({"message": "Magic link sent. Check your inbox."})
    response.set_cookie(PKCE_COOKIE, verifier, httponly=True, samesite="lax", max_age=3600)
    return response


@router.get("/auth/callback", tags=["auth"])
def auth_callback(
    request: Request,
    code: Optional[str] = Query(default=None),
    access_token: Optional[str] = Query(default=None),
    refresh_token: Optional[str] = Query(default=None),
    fragment: Optional[str] = Query(default=None),
    provider: AuthProviderClient = Depends(get_auth_provider),
    auth: AuthContext = Depends(get_auth_context),
) -> RedirectResponse:
    outcome = bootstrap_callback(
        provider,
        code=code,
        code_verifier=request.cookies.get(PKCE_COOKIE),
        access_token=access_token,
        refresh_token=refresh_token,
        fragment=fragment,
    )
    response = _redirect(outcome.redirect_to)
    response.delete_cookie(PKCE_COOKIE)
    if outcome.session is not None:
        session_id = auth.sign_in(outcome.session)
        response.set_cookie(
            settings.session_cookie_name,
            session_id,
            httponly=True,
            samesite="lax",
            max_age=outcome.session.expires_in or settings.auth_session_ttl,
        )
        logger.info("Signed in %s", outcome.session.email or outcome.session.user_id)
    return response


@router.post("/auth/logout", tags=["auth"])
def logout(
    request: Request,
    provider: AuthProviderClient = Depends(get_auth_provider),
    auth: AuthContext = Depends(get_auth_context),
) -> RedirectResponse:
    session = auth.sign_out(request.cookies.get(settings.session_cookie_name))
    if session is not None:
        try:
            provider.sign_out(session.access_token)
        except AuthProviderError:
            logger.warning("Provider sign-out failed; local session already dropped")
    response = _redirect(settings.login_path)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get("/auth/me", tags=["auth"])
def whoami(session: AuthSession | None = Depends(current_session)) -> dict[str, Any]:
    if session is None:
        raise HTTPException(status_code=401, detail="Sign in required")
    return {"email": session.email, "user_id": session.user_id}


__all__ = ["router"]

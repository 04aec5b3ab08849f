"""System routes: liveness, scheduled heartbeat and build version."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from astrolog.api.deps import get_db
from astrolog.core.config import settings
from astrolog.models import Target

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["system"])


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def heartbeat_authorized(user_agent: str, authorization: str) -> bool:
    """Scheduler user agents or ``Bearer <cron_secret>`` are allowed."""

    if any(agent in user_agent for agent in settings.cron_user_agents):
        return True
    if not settings.cron_secret:
        return False
    expected = f"Bearer {settings.cron_secret}"
    return secrets.compare_digest(authorization.encode("utf-8"), expected.encode("utf-8"))


@health_router.get("/health", summary="Service health check")
async def healthcheck() -> dict[str, str]:
    """Return a simple heartbeat for orchestration layers."""

    return {"status": "ok"}


@health_router.get("/heartbeat", summary="Scheduled data store ping")
def heartbeat(request: Request, db: Session = Depends(get_db)) -> Any:
    """Prove the data store is reachable with a one-row read."""

    user_agent = request.headers.get("user-agent", "")
    authorization = request.headers.get("authorization", "")
    if not heartbeat_authorized(user_agent, authorization):
        return PlainTextResponse("Unauthorized", status_code=401)

    try:
        db.exec(select(Target.target_id).limit(1)).first()
    except SQLAlchemyError as exc:
        logger.error("Heartbeat data store ping failed", exc_info=True)
        return PlainTextResponse(f"Data store ping failed: {exc}", status_code=500)

    return {"ok": True, "ts": _utc_now_iso()}


@health_router.get("/version", summary="Deployed build identifier")
def version() -> JSONResponse:
    return JSONResponse(
        {"buildTag": settings.build_tag or "dev", "now": _utc_now_iso()},
        headers={"Cache-Control": "no-store"},
    )

"""Recent log records kept in memory."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from astrolog.api.deps import require_user
from astrolog.core.logging_config import get_log_buffer

router = APIRouter(prefix="/logs", tags=["logs"], dependencies=[Depends(require_user)])


@router.get("")
def list_logs(
    limit: int = Query(100, ge=1, le=200),
    path: Optional[str] = Query(None, description="Only records logged while serving this path"),
) -> dict[str, list[dict[str, str]]]:
    return {"logs": get_log_buffer(limit=limit, path=path)}


__all__ = ["router"]

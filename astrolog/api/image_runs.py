"""Image run endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlmodel import Session

from astrolog.api.deps import get_db, require_user
from astrolog.services import image_runs as run_service
from astrolog.services.image_runs import ImageRunDetail, ImageRunUpdate

router = APIRouter(prefix="/image-runs", tags=["image-runs"], dependencies=[Depends(require_user)])


@router.get("/{image_run_id}", response_model=ImageRunDetail)
def get_image_run(image_run_id: int, session: Session = Depends(get_db)) -> Any:
    return run_service.get_run_detail(session, image_run_id)


@router.put("/{image_run_id}", response_model=ImageRunDetail)
def update_image_run(image_run_id: int, payload: ImageRunUpdate, session: Session = Depends(get_db)) -> Any:
    return run_service.update_run(session, image_run_id, payload)


@router.delete("/{image_run_id}")
def delete_image_run(image_run_id: int, session: Session = Depends(get_db)) -> Any:
    run_service.delete_run(session, image_run_id)
    return {"deleted": image_run_id}


__all__ = ["router"]

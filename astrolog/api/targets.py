"""Target catalog and target detail endpoints."""

from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlmodel import Session

from astrolog.api.deps import get_db, require_user
from astrolog.models import Target
from astrolog.services import targets as target_service
from astrolog.services.targets import TargetCatalogRow, TargetDetail

router = APIRouter(prefix="/targets", tags=["targets"], dependencies=[Depends(require_user)])


class TargetPayload(BaseModel):
    catalog_no: str = Field(max_length=64)
    description: Optional[str] = None
    notes: Optional[str] = None


@router.get("", response_model=List[TargetCatalogRow])
def list_targets(
    q: Optional[str] = Query(default=None, description="Catalog number substring"),
    session: Session = Depends(get_db),
) -> Any:
    return target_service.list_target_catalog(session, q)


@router.post("", response_model=Target, status_code=201)
def create_target(payload: TargetPayload, session: Session = Depends(get_db)) -> Any:
    return target_service.create_target(
        session, payload.catalog_no, payload.description, payload.notes
    )


@router.get("/{target_id}", response_model=TargetDetail)
def get_target(target_id: int, session: Session = Depends(get_db)) -> Any:
    return target_service.get_target_detail(session, target_id)


@router.put("/{target_id}", response_model=Target)
def update_target(target_id: int, payload: TargetPayload, session: Session = Depends(get_db)) -> Any:
    return target_service.update_target(
        session, target_id, payload.catalog_no, payload.description, payload.notes
    )


@router.delete("/{target_id}")
def delete_target(target_id: int, session: Session = Depends(get_db)) -> Any:
    target_service.delete_target(session, target_id)
    return {"deleted": target_id}


__all__ = ["router"]

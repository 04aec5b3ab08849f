"""Lookup table maintenance and the object catalog picker search."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlmodel import Session

from astrolog.api.deps import get_db, require_user
from astrolog.services import lookups as lookup_service
from astrolog.services.lookups import LOOKUP_SPECS, LookupKind

router = APIRouter(tags=["lookups"], dependencies=[Depends(require_user)])


@router.get("/lookups")
def list_lookup_kinds() -> list[dict[str, Any]]:
    """Describe every maintainable table so a client can build its editor."""

    return [
        {
            "kind": kind.value,
            "title": spec.title,
            "pk": spec.pk,
            "editable": list(spec.editable),
            "order_by": spec.order_by,
            "searchable": bool(spec.searchable),
        }
        for kind, spec in LOOKUP_SPECS.items()
    ]


@router.get("/lookups/{kind}")
def list_lookup_rows(
    kind: LookupKind,
    q: Optional[str] = Query(default=None),
    session: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    return [row.model_dump() for row in lookup_service.list_rows(session, kind, q)]


@router.post("/lookups/{kind}", status_code=201)
def add_lookup_row(
    kind: LookupKind,
    values: dict[str, Any] = Body(...),
    session: Session = Depends(get_db),
) -> dict[str, Any]:
    return lookup_service.add_row(session, kind, values).model_dump()


@router.put("/lookups/{kind}/{row_id}")
def update_lookup_row(
    kind: LookupKind,
    row_id: int,
    patch: dict[str, Any] = Body(...),
    session: Session = Depends(get_db),
) -> dict[str, Any]:
    return lookup_service.update_row(session, kind, row_id, patch).model_dump()


@router.delete("/lookups/{kind}/{row_id}")
def delete_lookup_row(kind: LookupKind, row_id: int, session: Session = Depends(get_db)) -> dict[str, Any]:
    lookup_service.delete_row(session, kind, row_id)
    return {"deleted": row_id}


@router.get("/catalog/search")
def search_catalog(q: Optional[str] = Query(default=None), session: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return [
        {"catalog_no": (row.catalog_no or "").strip(), "description": (row.description or "").strip()}
        for row in lookup_service.search_object_catalog(session, q)
    ]


__all__ = ["router"]

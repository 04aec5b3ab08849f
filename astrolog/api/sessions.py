"""Imaging session endpoints, including the combined new-session form."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlmodel import Session

from astrolog.api.deps import get_db, require_user
from astrolog.models import ImagingSession
from astrolog.services import sessions as session_service
from astrolog.services.sessions import NewSessionRequest, NewSessionResult, SessionUpdate

router = APIRouter(prefix="/sessions", tags=["sessions"], dependencies=[Depends(require_user)])


@router.post("", response_model=NewSessionResult, status_code=201)
def create_session(payload: NewSessionRequest, session: Session = Depends(get_db)) -> Any:
    """Save a new session (or a new run on an existing one) with its filter lines."""

    return session_service.create_session_with_run(session, payload)


@router.get("/{session_id}", response_model=ImagingSession)
def get_session(session_id: int, session: Session = Depends(get_db)) -> Any:
    return session_service.get_session_row(session, session_id)


@router.put("/{session_id}", response_model=ImagingSession)
def update_session(session_id: int, payload: SessionUpdate, session: Session = Depends(get_db)) -> Any:
    return session_service.update_session(session, session_id, payload)


@router.delete("/{session_id}")
def delete_session(session_id: int, session: Session = Depends(get_db)) -> Any:
    session_service.delete_session(session, session_id)
    return {"deleted": session_id}


__all__ = ["router"]

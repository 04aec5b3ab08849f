"""Session creation (the "new session" form) and session edits."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field
from sqlmodel import Session

from astrolog.db.session import atomic
from astrolog.models import ImageRun, ImagingSession, RunFilter
from astrolog.services.errors import LogbookValidationError, RecordNotFoundError
from astrolog.services.targets import build_target, get_target

logger = logging.getLogger(__name__)

MAX_PANELS = 20


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class FilterLineSpec(BaseModel):
    filter_id: Optional[int] = None
    exposures: int = Field(default=0, ge=0)
    exposure_sec: float = Field(default=0.0, ge=0)
    gain: Optional[int] = None
    camera_offset: Optional[int] = None
    bin: Optional[int] = None
    notes: Optional[str] = None


class NewTargetSpec(BaseModel):
    catalog_no: str = ""
    description: Optional[str] = None


class SessionHeaderSpec(BaseModel):
    session_date: Optional[date] = Field(default_factory=utc_today)
    location_id: Optional[int] = None
    telescope_id: Optional[int] = None
    mount_id: Optional[int] = None
    camera_id: Optional[int] = None
    notes: Optional[str] = None


class NewImageRunSpec(BaseModel):
    run_date: Optional[date] = Field(default_factory=utc_today)
    panel_no: Optional[int] = Field(default=1, ge=1, le=MAX_PANELS)
    panel_name: Optional[str] = None
    notes: Optional[str] = None


class NewSessionRequest(BaseModel):
    """Everything the new-session form submits in one go.

    Give ``session_id`` to add a run to an existing session; otherwise give
    either ``target_id`` or ``new_target`` and a session header.
    """

    target_id: Optional[int] = None
    new_target: Optional[NewTargetSpec] = None
    session_id: Optional[int] = None
    session: SessionHeaderSpec = Field(default_factory=SessionHeaderSpec)
    run: NewImageRunSpec = Field(default_factory=NewImageRunSpec)
    lines: list[FilterLineSpec] = Field(min_length=1)


class NewSessionResult(BaseModel):
    target_id: int
    session_id: int
    image_run_id: int
    line_count: int


class SessionUpdate(BaseModel):
    session_date: Optional[date] = None
    location_id: Optional[int] = None
    telescope_id: Optional[int] = None
    mount_id: Optional[int] = None
    camera_id: Optional[int] = None
    notes: Optional[str] = None


def validate_lines(lines: Sequence[FilterLineSpec]) -> None:
    for line in lines:
        if not line.filter_id:
            raise LogbookValidationError("Each filter line needs a filter selected.")


def default_panel_name(panel_no: Optional[int], panel_name: Optional[str]) -> Optional[str]:
    """Fill in ``Panel <n>`` unless the user typed a name of their own."""

    name = (panel_name or "").strip()
    if panel_no and (not name or name.startswith("Panel ")):
        return f"Panel {panel_no}"
    return name or None


def build_lines(image_run_id: int, lines: Sequence[FilterLineSpec]) -> list[RunFilter]:
    return [
        RunFilter(
            image_run_id=image_run_id,
            filter_id=line.filter_id,
            exposures=line.exposures or 0,
            exposure_sec=line.exposure_sec or 0.0,
            gain=line.gain,
            camera_offset=line.camera_offset,
            bin=line.bin,
            notes=line.notes,
        )
        for line in lines
    ]


def get_session_row(db: Session, session_id: int) -> ImagingSession:
    row = db.get(ImagingSession, session_id)
    if not row:
        raise RecordNotFoundError("session", session_id)
    return row


def create_session_with_run(db: Session, request: NewSessionRequest) -> NewSessionResult:
    """Create target (optional), session (optional), image run and lines atomically.

    Validation happens before the first write; a failure part way through
    rolls back every row written by this call.
    """
    validate_lines(request.lines)

    existing: ImagingSession | None = None
    if request.session_id:
        existing = get_session_row(db, request.session_id)

    new_catalog_no = (request.new_target.catalog_no if request.new_target else "").strip()
    if existing is None and not new_catalog_no:
        if not request.target_id:
            raise LogbookValidationError("Pick a target.")
        get_target(db, request.target_id)

    with atomic(db):
        if existing is not None:
            target_id = existing.target_id
            session_row = existing
        else:
            if new_catalog_no:
                target = build_target(new_catalog_no, request.new_target.description)
                db.add(target)
                db.flush()
                target_id = target.target_id
            else:
                target_id = request.target_id
            header = request.session
            session_row = ImagingSession(
                target_id=target_id,
                session_date=header.session_date,
                location_id=header.location_id,
                telescope_id=header.telescope_id,
                mount_id=header.mount_id,
                camera_id=header.camera_id,
                notes=header.notes or None,
            )
            db.add(session_row)
            db.flush()

        run = ImageRun(
            session_id=session_row.session_id,
            run_date=request.run.run_date,
            panel_no=request.run.panel_no,
            panel_name=default_panel_name(request.run.panel_no, request.run.panel_name),
            notes=request.run.notes or None,
        )
        db.add(run)
        db.flush()

        db.add_all(build_lines(run.image_run_id, request.lines))
        result = NewSessionResult(
            target_id=target_id,
            session_id=session_row.session_id,
            image_run_id=run.image_run_id,
            line_count=len(request.lines),
        )

    logger.info(
        "Saved image run %s for session %s (target %s) with %d filter lines",
        result.image_run_id,
        result.session_id,
        result.target_id,
        result.line_count,
    )
    return result


def update_session(db: Session, session_id: int, payload: SessionUpdate) -> ImagingSession:
    row = get_session_row(db, session_id)
    with atomic(db):
        for name, value in payload.model_dump().items():
            setattr(row, name, value)
        db.add(row)
    db.refresh(row)
    return row


def delete_session(db: Session, session_id: int) -> None:
    """Delete a session; its runs and their lines cascade in the database."""

    row = get_session_row(db, session_id)
    with atomic(db):
        db.delete(row)
    logger.info("Deleted session %s and its image runs", session_id)


__all__ = [
    "FilterLineSpec",
    "NewTargetSpec",
    "SessionHeaderSpec",
    "NewImageRunSpec",
    "NewSessionRequest",
    "NewSessionResult",
    "SessionUpdate",
    "validate_lines",
    "default_panel_name",
    "build_lines",
    "get_session_row",
    "create_session_with_run",
    "update_session",
    "delete_session",
]

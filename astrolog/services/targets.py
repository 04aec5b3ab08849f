"""Target catalog, target detail and target edits."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field
from sqlmodel import Session, select

from astrolog.db.session import atomic
from astrolog.models import (
    Camera,
    ImageRun,
    ImagingSession,
    Location,
    Mount,
    RunFilter,
    Target,
    Telescope,
)
from astrolog.services.errors import LogbookValidationError, RecordNotFoundError
from astrolog.services.formatting import fmt_hms, uk_date
from astrolog.services.integration import run_totals, session_totals, target_total

logger = logging.getLogger(__name__)


class TargetCatalogRow(BaseModel):
    target_id: int
    catalog_no: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    last_imaged: Optional[date] = None
    total_integration_sec: float = 0.0
    start_date_display: str = ""
    last_imaged_display: str = ""
    total_integration: str = "00:00:00"


class RunSummary(BaseModel):
    image_run_id: int
    session_id: int
    run_date: Optional[date] = None
    run_date_display: str = ""
    panel_no: Optional[int] = None
    panel_name: Optional[str] = None
    notes: Optional[str] = None
    integration_sec: float = 0.0
    integration: str = "00:00:00"


class SessionSummary(BaseModel):
    session_id: int
    target_id: int
    session_date: Optional[date] = None
    session_date_display: str = ""
    notes: Optional[str] = None
    telescope_id: Optional[int] = None
    mount_id: Optional[int] = None
    camera_id: Optional[int] = None
    location_id: Optional[int] = None
    telescope_name: Optional[str] = None
    mount_name: Optional[str] = None
    camera_name: Optional[str] = None
    location_name: Optional[str] = None
    integration_sec: float = 0.0
    integration: str = "00:00:00"
    runs: list[RunSummary] = Field(default_factory=list)


class TargetDetail(BaseModel):
    target_id: int
    catalog_no: str
    description: Optional[str] = None
    notes: Optional[str] = None
    total_integration_sec: float = 0.0
    total_integration: str = "00:00:00"
    sessions: list[SessionSummary] = Field(default_factory=list)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _load_tree(
    db: Session, target_ids: Sequence[int]
) -> tuple[list[ImagingSession], list[ImageRun], list[RunFilter]]:
    """Fetch sessions, runs and lines below the given targets, one query per tier."""

    if not target_ids:
        return [], [], []
    sessions = db.exec(
        select(ImagingSession)
        .where(ImagingSession.target_id.in_(target_ids))
        .order_by(ImagingSession.session_date.desc(), ImagingSession.session_id.desc())
    ).all()
    session_ids = [s.session_id for s in sessions]
    if not session_ids:
        return list(sessions), [], []
    runs = db.exec(
        select(ImageRun)
        .where(ImageRun.session_id.in_(session_ids))
        .order_by(ImageRun.run_date.desc(), ImageRun.image_run_id.desc())
    ).all()
    run_ids = [r.image_run_id for r in runs]
    if not run_ids:
        return list(sessions), list(runs), []
    lines = db.exec(select(RunFilter).where(RunFilter.image_run_id.in_(run_ids))).all()
    return list(sessions), list(runs), list(lines)


def _names(db: Session, model, pk: str, ids: Iterable[Optional[int]]) -> dict[int, str]:
    wanted = {i for i in ids if i is not None}
    if not wanted:
        return {}
    column = getattr(model, pk)
    rows = db.exec(select(model).where(column.in_(wanted))).all()
    return {getattr(row, pk): row.name for row in rows}


def _latest(*values: Optional[date]) -> Optional[date]:
    present = [v for v in values if v is not None]
    return max(present) if present else None


def list_target_catalog(db: Session, query_text: str | None = None) -> list[TargetCatalogRow]:
    """Targets with first/last imaged dates and total integration.

    Ordered by start date (targets never imaged last), then catalog number.
    ``query_text`` is a case-insensitive substring match on the catalog number.
    """
    stmt = select(Target)
    query_text = (query_text or "").strip()
    if query_text:
        stmt = stmt.where(Target.catalog_no.ilike(f"%{query_text}%"))
    targets = db.exec(stmt).all()

    sessions, runs, lines = _load_tree(db, [t.target_id for t in targets])
    per_session = session_totals(runs, run_totals(lines))

    sessions_by_target: dict[int, list[ImagingSession]] = {}
    for s in sessions:
        sessions_by_target.setdefault(s.target_id, []).append(s)
    last_run_by_session: dict[int, Optional[date]] = {}
    for r in runs:
        last_run_by_session[r.session_id] = _latest(last_run_by_session.get(r.session_id), r.run_date)

    rows: list[TargetCatalogRow] = []
    for target in targets:
        own = sessions_by_target.get(target.target_id, [])
        session_dates = [s.session_date for s in own if s.session_date is not None]
        start_date = min(session_dates) if session_dates else None
        last_imaged = _latest(
            *session_dates, *(last_run_by_session.get(s.session_id) for s in own)
        )
        total = target_total(own, per_session)
        rows.append(
            TargetCatalogRow(
                target_id=target.target_id,
                catalog_no=target.catalog_no,
                description=target.description,
                start_date=start_date,
                last_imaged=last_imaged,
                total_integration_sec=total,
                start_date_display=uk_date(start_date),
                last_imaged_display=uk_date(last_imaged),
                total_integration=fmt_hms(total),
            )
        )

    rows.sort(key=lambda r: (r.start_date is None, r.start_date or date.min, r.catalog_no))
    return rows


def get_target(db: Session, target_id: int) -> Target:
    target = db.get(Target, target_id)
    if not target:
        raise RecordNotFoundError("target", target_id)
    return target


def get_target_detail(db: Session, target_id: int) -> TargetDetail:
    """Target with its sessions (newest first), their runs and every total."""

    target = get_target(db, target_id)
    sessions, runs, lines = _load_tree(db, [target_id])
    per_run = run_totals(lines)
    per_session = session_totals(runs, per_run)

    telescopes = _names(db, Telescope, "telescope_id", (s.telescope_id for s in sessions))
    mounts = _names(db, Mount, "mount_id", (s.mount_id for s in sessions))
    cameras = _names(db, Camera, "camera_id", (s.camera_id for s in sessions))
    locations = _names(db, Location, "location_id", (s.location_id for s in sessions))

    runs_by_session: dict[int, list[RunSummary]] = {}
    for r in runs:
        seconds = per_run.get(r.image_run_id, 0.0)
        runs_by_session.setdefault(r.session_id, []).append(
            RunSummary(
                image_run_id=r.image_run_id,
                session_id=r.session_id,
                run_date=r.run_date,
                run_date_display=uk_date(r.run_date),
                panel_no=r.panel_no,
                panel_name=r.panel_name,
                notes=r.notes,
                integration_sec=seconds,
                integration=fmt_hms(seconds),
            )
        )

    summaries = []
    for s in sessions:
        seconds = per_session.get(s.session_id, 0.0)
        summaries.append(
            SessionSummary(
                session_id=s.session_id,
                target_id=s.target_id,
                session_date=s.session_date,
                session_date_display=uk_date(s.session_date),
                notes=s.notes,
                telescope_id=s.telescope_id,
                mount_id=s.mount_id,
                camera_id=s.camera_id,
                location_id=s.location_id,
                telescope_name=telescopes.get(s.telescope_id),
                mount_name=mounts.get(s.mount_id),
                camera_name=cameras.get(s.camera_id),
                location_name=locations.get(s.location_id),
                integration_sec=seconds,
                integration=fmt_hms(seconds),
                runs=runs_by_session.get(s.session_id, []),
            )
        )

    total = target_total(sessions, per_session)
    return TargetDetail(
        target_id=target.target_id,
        catalog_no=target.catalog_no,
        description=target.description,
        notes=target.notes,
        total_integration_sec=total,
        total_integration=fmt_hms(total),
        sessions=summaries,
    )


def build_target(catalog_no: Optional[str], description: Optional[str] = None,
                 notes: Optional[str] = None) -> Target:
    """Validate and build an unsaved target row."""

    cleaned = (catalog_no or "").strip()
    if not cleaned:
        raise LogbookValidationError("Catalog No is required.")
    return Target(catalog_no=cleaned, description=_clean(description), notes=_clean(notes))


def create_target(db: Session, catalog_no: Optional[str], description: Optional[str] = None,
                  notes: Optional[str] = None) -> Target:
    target = build_target(catalog_no, description, notes)
    with atomic(db):
        db.add(target)
    db.refresh(target)
    logger.info("Created target %s (%s)", target.target_id, target.catalog_no)
    return target


def update_target(db: Session, target_id: int, catalog_no: Optional[str],
                  description: Optional[str] = None, notes: Optional[str] = None) -> Target:
    cleaned = (catalog_no or "").strip()
    if not cleaned:
        raise LogbookValidationError("Catalog No is required.")
    target = get_target(db, target_id)
    with atomic(db):
        target.catalog_no = cleaned
        target.description = _clean(description)
        target.notes = _clean(notes)
        db.add(target)
    db.refresh(target)
    return target


def delete_target(db: Session, target_id: int) -> None:
    """Delete a target; sessions, runs and lines go with it via the schema."""

    target = get_target(db, target_id)
    with atomic(db):
        db.delete(target)
    logger.info("Deleted target %s and its sessions/runs", target_id)


__all__ = [
    "TargetCatalogRow",
    "TargetDetail",
    "SessionSummary",
    "RunSummary",
    "list_target_catalog",
    "get_target",
    "get_target_detail",
    "build_target",
    "create_target",
    "update_target",
    "delete_target",
]

"""Image run detail and edits, including replacement of its filter lines."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field
from sqlmodel import Session, delete, select

from astrolog.db.session import atomic
from astrolog.models import ImageRun, ImagingSession, RunFilter
from astrolog.services.errors import RecordNotFoundError
from astrolog.services.formatting import fmt_hms, uk_date
from astrolog.services.integration import line_seconds, lines_total
from astrolog.services.sessions import (
    MAX_PANELS,
    FilterLineSpec,
    build_lines,
    default_panel_name,
    validate_lines,
)

logger = logging.getLogger(__name__)


class FilterLineRead(BaseModel):
    run_filter_id: int
    filter_id: int
    exposures: int
    exposure_sec: float
    gain: Optional[int] = None
    camera_offset: Optional[int] = None
    bin: Optional[int] = None
    notes: Optional[str] = None
    line_sec: float = 0.0
    line_total: str = "00:00:00"


class ImageRunDetail(BaseModel):
    image_run_id: int
    session_id: int
    target_id: Optional[int] = None
    run_date: Optional[date] = None
    run_date_display: str = ""
    panel_no: Optional[int] = None
    panel_name: Optional[str] = None
    notes: Optional[str] = None
    total_integration_sec: float = 0.0
    total_integration: str = "00:00:00"
    lines: list[FilterLineRead] = Field(default_factory=list)


class ImageRunUpdate(BaseModel):
    run_date: Optional[date] = None
    panel_no: Optional[int] = Field(default=None, ge=1, le=MAX_PANELS)
    panel_name: Optional[str] = None
    notes: Optional[str] = None
    lines: list[FilterLineSpec] = Field(min_length=1)


def get_run(db: Session, image_run_id: int) -> ImageRun:
    run = db.get(ImageRun, image_run_id)
    if not run:
        raise RecordNotFoundError("image_run", image_run_id)
    return run


def get_run_detail(db: Session, image_run_id: int) -> ImageRunDetail:
    run = get_run(db, image_run_id)
    owner = db.get(ImagingSession, run.session_id)
    lines = db.exec(
        select(RunFilter)
        .where(RunFilter.image_run_id == image_run_id)
        .order_by(RunFilter.filter_id, RunFilter.run_filter_id)
    ).all()

    total = lines_total(lines)
    return ImageRunDetail(
        image_run_id=run.image_run_id,
        session_id=run.session_id,
        target_id=owner.target_id if owner else None,
        run_date=run.run_date,
        run_date_display=uk_date(run.run_date),
        panel_no=run.panel_no,
        panel_name=run.panel_name,
        notes=run.notes,
        total_integration_sec=total,
        total_integration=fmt_hms(total),
        lines=[
            FilterLineRead(
                **line.model_dump(exclude={"image_run_id"}),
                line_sec=line_seconds(line),
                line_total=fmt_hms(line_seconds(line)),
            )
            for line in lines
        ],
    )


def update_run(db: Session, image_run_id: int, payload: ImageRunUpdate) -> ImageRunDetail:
    """Update the run header and replace all of its filter lines in one transaction."""

    validate_lines(payload.lines)
    run = get_run(db, image_run_id)

    with atomic(db):
        run.run_date = payload.run_date
        run.panel_no = payload.panel_no
        run.panel_name = default_panel_name(payload.panel_no, payload.panel_name)
        run.notes = payload.notes
        db.add(run)
        db.exec(delete(RunFilter).where(RunFilter.image_run_id == image_run_id))
        db.add_all(build_lines(image_run_id, payload.lines))

    logger.info("Updated image run %s with %d filter lines", image_run_id, len(payload.lines))
    return get_run_detail(db, image_run_id)


def delete_run(db: Session, image_run_id: int) -> None:
    """Delete a run; its filter lines cascade in the database."""

    run = get_run(db, image_run_id)
    with atomic(db):
        db.delete(run)
    logger.info("Deleted image run %s", image_run_id)


__all__ = [
    "FilterLineRead",
    "ImageRunDetail",
    "ImageRunUpdate",
    "get_run",
    "get_run_detail",
    "update_run",
    "delete_run",
]

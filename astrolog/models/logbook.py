"""Target → session → image run → filter line hierarchy.

Each child row references its parent with ``ON DELETE CASCADE``; deleting a
target removes its sessions, their runs and the runs' filter lines in the
database itself.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel


class Target(SQLModel, table=True):
    __tablename__ = "target"

    target_id: Optional[int] = Field(default=None, primary_key=True)
    catalog_no: str = Field(max_length=64, index=True, unique=True)
    description: Optional[str] = None
    notes: Optional[str] = None


class ImagingSession(SQLModel, table=True):
    """One observing session for a target with the equipment used."""

    __tablename__ = "session"

    session_id: Optional[int] = Field(default=None, primary_key=True)
    target_id: int = Field(foreign_key="target.target_id", ondelete="CASCADE", index=True)
    session_date: Optional[date] = Field(default=None, index=True)
    telescope_id: Optional[int] = Field(
        default=None, foreign_key="telescope.telescope_id", ondelete="SET NULL"
    )
    mount_id: Optional[int] = Field(default=None, foreign_key="mount.mount_id", ondelete="SET NULL")
    camera_id: Optional[int] = Field(default=None, foreign_key="camera.camera_id", ondelete="SET NULL")
    location_id: Optional[int] = Field(
        default=None, foreign_key="location.location_id", ondelete="SET NULL"
    )
    notes: Optional[str] = None


class ImageRun(SQLModel, table=True):
    """A sub-unit of a session, optionally one panel of a mosaic."""

    __tablename__ = "image_run"

    image_run_id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="session.session_id", ondelete="CASCADE", index=True)
    run_date: Optional[date] = Field(default=None, index=True)
    panel_no: Optional[int] = None
    panel_name: Optional[str] = Field(default=None, max_length=128)
    notes: Optional[str] = None


class RunFilter(SQLModel, table=True):
    """Exposure settings for one filter within an image run."""

    __tablename__ = "run_filter"
    __table_args__ = (
        CheckConstraint("exposures >= 0", name="ck_run_filter_exposures_nonneg"),
        CheckConstraint("exposure_sec >= 0", name="ck_run_filter_exposure_sec_nonneg"),
    )

    run_filter_id: Optional[int] = Field(default=None, primary_key=True)
    image_run_id: int = Field(foreign_key="image_run.image_run_id", ondelete="CASCADE", index=True)
    filter_id: int = Field(foreign_key="filter.filter_id")
    exposures: int = Field(default=0)
    exposure_sec: float = Field(default=0.0)
    gain: Optional[int] = None
    camera_offset: Optional[int] = None
    bin: Optional[int] = None
    notes: Optional[str] = None


__all__ = ["Target", "ImagingSession", "ImageRun", "RunFilter"]

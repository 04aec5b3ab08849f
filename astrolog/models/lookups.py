"""Flat name/description lookup tables used to populate selection controls."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field, SQLModel


class Camera(SQLModel, table=True):
    __tablename__ = "camera"

    camera_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=128, index=True)


class Mount(SQLModel, table=True):
    __tablename__ = "mount"

    mount_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=128, index=True)


class Location(SQLModel, table=True):
    __tablename__ = "location"

    location_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=128, index=True)


class Telescope(SQLModel, table=True):
    __tablename__ = "telescope"

    telescope_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=128, index=True)
    notes: Optional[str] = None


class ImagingFilter(SQLModel, table=True):
    """Optical filter (L, R, G, B, Ha, OIII, ...)."""

    __tablename__ = "filter"

    filter_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=64, index=True)
    sort_order: Optional[int] = Field(default=None, description="Display order in pickers")


class ObjectCatalogEntry(SQLModel, table=True):
    """Reference catalog used to look up designations when creating targets."""

    __tablename__ = "object_catalog"

    object_id: Optional[int] = Field(default=None, primary_key=True)
    catalog_no: str = Field(max_length=64, index=True)
    description: Optional[str] = None


__all__ = [
    "Camera",
    "Mount",
    "Location",
    "Telescope",
    "ImagingFilter",
    "ObjectCatalogEntry",
]

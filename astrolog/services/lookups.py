"""Maintenance of the lookup tables behind the selection controls.

Each table is a member of :class:`LookupKind`; its :class:`LookupSpec`
declares the primary key, the user-editable columns, the listing order and
whether the listing takes a search term. Only declared columns are ever
written, and only after they pass the kind's values model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy import or_
from sqlmodel import Session, SQLModel, select

from astrolog.core.config import settings
from astrolog.db.session import atomic
from astrolog.models import (
    Camera,
    ImagingFilter,
    Location,
    Mount,
    ObjectCatalogEntry,
    Telescope,
)
from astrolog.services.errors import LogbookValidationError, RecordNotFoundError

logger = logging.getLogger(__name__)


class LookupValues(BaseModel):
    """Typed check of a lookup row body; every column is optional here."""

    model_config = ConfigDict(extra="ignore")


class NamedValues(LookupValues):
    name: Optional[str] = Field(default=None, max_length=128)


class TelescopeValues(NamedValues):
    notes: Optional[str] = None


class FilterValues(LookupValues):
    name: Optional[str] = Field(default=None, max_length=64)
    sort_order: Optional[int] = None


class CatalogValues(LookupValues):
    catalog_no: Optional[str] = Field(default=None, max_length=64)
    description: Optional[str] = None


@dataclass(frozen=True)
class LookupSpec:
    title: str
    model: Type[SQLModel]
    pk: str
    editable: tuple[str, ...]
    order_by: str
    values: Type[LookupValues] = NamedValues
    required: tuple[str, ...] = ("name",)
    searchable: tuple[str, ...] = ()


class LookupKind(str, Enum):
    CAMERA = "camera"
    FILTER = "filter"
    LOCATION = "location"
    MOUNT = "mount"
    TELESCOPE = "telescope"
    OBJECT_CATALOG = "object_catalog"

    @property
    def spec(self) -> LookupSpec:
        return LOOKUP_SPECS[self]


LOOKUP_SPECS: dict[LookupKind, LookupSpec] = {
    LookupKind.CAMERA: LookupSpec("Camera", Camera, "camera_id", ("name",), "name"),
    LookupKind.FILTER: LookupSpec(
        "Filter", ImagingFilter, "filter_id", ("name", "sort_order"), "sort_order", FilterValues
    ),
    LookupKind.LOCATION: LookupSpec("Location", Location, "location_id", ("name",), "name"),
    LookupKind.MOUNT: LookupSpec("Mount", Mount, "mount_id", ("name",), "name"),
    LookupKind.TELESCOPE: LookupSpec(
        "Telescope", Telescope, "telescope_id", ("name", "notes"), "name", TelescopeValues
    ),
    LookupKind.OBJECT_CATALOG: LookupSpec(
        "Object catalog",
        ObjectCatalogEntry,
        "object_id",
        ("catalog_no", "description"),
        "catalog_no",
        CatalogValues,
        required=("catalog_no",),
        searchable=("catalog_no", "description"),
    ),
}


def clean_values(spec: LookupSpec, values: Mapping[str, Any], partial: bool = False) -> dict[str, Any]:
    """Keep editable columns only; strings are trimmed and blank becomes None.

    The surviving values are checked against ``spec.values``; a wrong type
    raises :class:`LogbookValidationError` before anything is written.
    """

    cleaned: dict[str, Any] = {}
    for column in spec.editable:
        if partial and column not in values:
            continue
        value = values.get(column)
        if isinstance(value, str):
            value = value.strip() or None
        cleaned[column] = value
    try:
        checked = spec.values.model_validate(cleaned)
    except ValidationError as exc:
        error = exc.errors()[0]
        column = ".".join(str(part) for part in error["loc"])
        raise LogbookValidationError(f"{column}: {error['msg']}") from exc
    cleaned = {column: getattr(checked, column) for column in cleaned}
    for column in spec.required:
        if column in cleaned and cleaned[column] is None:
            raise LogbookValidationError(f"{column} is required.")
    return cleaned


def list_rows(db: Session, kind: LookupKind, query_text: Optional[str] = None) -> list[SQLModel]:
    spec = kind.spec
    stmt = select(spec.model)
    query_text = (query_text or "").strip()
    if spec.searchable and len(query_text) >= settings.catalog_search_min_chars:
        like = f"%{query_text}%"
        stmt = stmt.where(or_(*(getattr(spec.model, col).ilike(like) for col in spec.searchable)))
    stmt = stmt.order_by(getattr(spec.model, spec.order_by), getattr(spec.model, spec.pk))
    return list(db.exec(stmt.limit(settings.lookup_list_limit)).all())


def get_row(db: Session, kind: LookupKind, row_id: int) -> SQLModel:
    row = db.get(kind.spec.model, row_id)
    if not row:
        raise RecordNotFoundError(kind.value, row_id)
    return row


def add_row(db: Session, kind: LookupKind, values: Mapping[str, Any]) -> SQLModel:
    spec = kind.spec
    row = spec.model(**clean_values(spec, values))
    with atomic(db):
        db.add(row)
    db.refresh(row)
    logger.info("Added %s row %s", kind.value, getattr(row, spec.pk))
    return row


def update_row(db: Session, kind: LookupKind, row_id: int, patch: Mapping[str, Any]) -> SQLModel:
    spec = kind.spec
    values = clean_values(spec, patch, partial=True)
    row = get_row(db, kind, row_id)
    with atomic(db):
        for column, value in values.items():
            setattr(row, column, value)
        db.add(row)
    db.refresh(row)
    return row


def delete_row(db: Session, kind: LookupKind, row_id: int) -> None:
    row = get_row(db, kind, row_id)
    with atomic(db):
        db.delete(row)
    logger.info("Deleted %s row %s", kind.value, row_id)


def search_object_catalog(db: Session, query_text: Optional[str]) -> list[ObjectCatalogEntry]:
    """Catalog picker search; queries shorter than the minimum return nothing."""

    query_text = (query_text or "").strip()
    if len(query_text) < settings.catalog_search_min_chars:
        return []
    like = f"%{query_text}%"
    stmt = (
        select(ObjectCatalogEntry)
        .where(
            or_(
                ObjectCatalogEntry.catalog_no.ilike(like),
                ObjectCatalogEntry.description.ilike(like),
            )
        )
        .order_by(ObjectCatalogEntry.catalog_no)
        .limit(settings.catalog_search_limit)
    )
    return list(db.exec(stmt).all())


__all__ = [
    "LookupKind",
    "LookupSpec",
    "LookupValues",
    "LOOKUP_SPECS",
    "clean_values",
    "list_rows",
    "get_row",
    "add_row",
    "update_row",
    "delete_row",
    "search_object_catalog",
]

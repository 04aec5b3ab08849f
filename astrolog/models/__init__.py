"""Database models."""

from .logbook import ImageRun, ImagingSession, RunFilter, Target
from .lookups import Camera, ImagingFilter, Location, Mount, ObjectCatalogEntry, Telescope

__all__ = [
    "Target",
    "ImagingSession",
    "ImageRun",
    "RunFilter",
    "Camera",
    "ImagingFilter",
    "Location",
    "Mount",
    "ObjectCatalogEntry",
    "Telescope",
]

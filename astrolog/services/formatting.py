"""Display helpers for durations and calendar dates."""

from __future__ import annotations

import math
from datetime import date
from typing import Any


def fmt_hms(total_seconds: Any) -> str:
    """Format seconds as zero-padded ``HH:MM:SS``.

    Missing, NaN and negative values clamp to 0, fractions are floored and
    hours are not wrapped at 24.
    """
    try:
        value = float(total_seconds or 0)
    except (TypeError, ValueError):
        value = 0.0
    if math.isnan(value) or math.isinf(value):
        value = 0.0
    seconds = max(0, math.floor(value))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def uk_date(value: str | date | None) -> str:
    """Render an ISO calendar date as ``DD/MM/YYYY``.

    The date is taken at face value (UTC calendar day), so the host timezone
    never shifts it. Timestamps are cut to their date part; anything that
    does not parse is returned as that truncated string.
    """
    if not value:
        return ""
    if isinstance(value, date):
        value = value.isoformat()
    iso10 = value[:10] if "T" in value else value
    parts = iso10.split("-")
    try:
        year, month, day = (int(p) for p in parts)
    except ValueError:
        return iso10
    if not year or not month or not day:
        return iso10
    try:
        return date(year, month, day).strftime("%d/%m/%Y")
    except ValueError:
        return iso10


__all__ = ["fmt_hms", "uk_date"]

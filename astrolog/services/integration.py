"""Integration-time aggregation over filter lines, runs and sessions.

Integration time is never stored: every total here is recomputed from the
current ``exposures`` and ``exposure_sec`` values of the filter lines. Rows
may be ORM objects or plain mappings carrying the same field names; missing
or null numbers count as zero.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Hashable


def _field(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _number(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    # NaN compares unequal to itself
    return number if number == number else 0.0


def line_seconds(line: Any) -> float:
    """Integration of one filter line: exposures × exposure_sec."""

    return _number(_field(line, "exposures")) * _number(_field(line, "exposure_sec"))


def lines_total(lines: Iterable[Any]) -> float:
    """Total integration of a list of lines, e.g. an unsaved form draft."""

    return sum((line_seconds(line) for line in lines), 0.0)


def run_totals(lines: Iterable[Any], key: str = "image_run_id") -> dict[Hashable, float]:
    """Sum line integrations per owning run."""

    totals: dict[Hashable, float] = {}
    for line in lines:
        run_id = _field(line, key)
        totals[run_id] = totals.get(run_id, 0.0) + line_seconds(line)
    return totals


def session_totals(
    runs: Iterable[Any],
    per_run: Mapping[Hashable, float],
    key: str = "session_id",
) -> dict[Hashable, float]:
    """Sum per-run totals per owning session; runs without lines add 0."""

    totals: dict[Hashable, float] = {}
    for run in runs:
        session_id = _field(run, key)
        seconds = per_run.get(_field(run, "image_run_id"), 0.0)
        totals[session_id] = totals.get(session_id, 0.0) + seconds
    return totals


def target_total(sessions: Iterable[Any], per_session: Mapping[Hashable, float]) -> float:
    """Grand total across the sessions of one target."""

    return sum((per_session.get(_field(s, "session_id"), 0.0) for s in sessions), 0.0)


__all__ = [
    "line_seconds",
    "lines_total",
    "run_totals",
    "session_totals",
    "target_total",
]

"""Service-layer utilities."""

from .errors import LogbookError, LogbookValidationError, RecordNotFoundError
from .formatting import fmt_hms, uk_date
from .integration import line_seconds, lines_total, run_totals, session_totals, target_total
from .lookups import LookupKind

__all__ = [
    "LogbookError",
    "LogbookValidationError",
    "RecordNotFoundError",
    "LookupKind",
    "fmt_hms",
    "uk_date",
    "line_seconds",
    "lines_total",
    "run_totals",
    "session_totals",
    "target_total",
]

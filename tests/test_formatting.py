import math
import time
from datetime import date

import pytest

from astrolog.services.formatting import fmt_hms, uk_date


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "00:00:00"),
        (59, "00:00:59"),
        (3600, "01:00:00"),
        (3661, "01:01:01"),
        (3661.9, "01:01:01"),
        (90000, "25:00:00"),
        (360000, "100:00:00"),
        (None, "00:00:00"),
        (-5, "00:00:00"),
        (math.nan, "00:00:00"),
        ("not a number", "00:00:00"),
    ],
)
def test_fmt_hms(seconds, expected):
    assert fmt_hms(seconds) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-03-05", "05/03/2024"),
        ("2025-01-07", "07/01/2025"),
        ("2025-01-07T23:30:00Z", "07/01/2025"),
        (date(2024, 12, 31), "31/12/2024"),
        ("", ""),
        (None, ""),
        ("bogus", "bogus"),
        ("2025-13-40", "2025-13-40"),
        ("0000-00-00", "0000-00-00"),
    ],
)
def test_uk_date(value, expected):
    assert uk_date(value) == expected


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
def test_uk_date_ignores_host_timezone(monkeypatch):
    monkeypatch.setenv("TZ", "America/Los_Angeles")
    time.tzset()
    try:
        assert uk_date("2025-01-07") == "07/01/2025"
    finally:
        monkeypatch.undo()
        time.tzset()

from __future__ import annotations

import time
from datetime import datetime, timezone

import pytest

from desk_engine.formatting import format_display_date, format_file_size, name_initials


def test_display_date_has_no_padding() -> None:
    assert format_display_date(datetime(2024, 1, 2, 12, tzinfo=timezone.utc)) == "Jan 2, 2024"
    assert format_display_date(datetime(2023, 12, 25)) == "Dec 25, 2023"


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
def test_display_date_uses_local_time(monkeypatch: pytest.MonkeyPatch) -> None:
    late_utc = datetime(2024, 1, 2, 3, 0, tzinfo=timezone.utc)
    monkeypatch.setenv("TZ", "EST5")
    time.tzset()
    assert format_display_date(late_utc) == "Jan 1, 2024"

    monkeypatch.setenv("TZ", "UTC0")
    time.tzset()
    assert format_display_date(late_utc) == "Jan 2, 2024"


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (10 * 1024 * 1024, "10 MB"),
        (1234567, "1.18 MB"),
        (5 * 1024**4, "5120 GB"),
    ],
)
def test_file_size(size: int, expected: str) -> None:
    assert format_file_size(size) == expected


def test_initials() -> None:
    assert name_initials("ada lovelace") == "AL"
    assert name_initials("Grace Brewster Hopper") == "GH"
    assert name_initials("cher") == "C"
    assert name_initials("   ") == "?"

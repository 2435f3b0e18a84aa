"""Tests for date and text helpers."""
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi import HTTPException

from app.utils.dates import format_local_full, last_local_days, local_day_start_utc, resolve_timezone
from app.utils.pagination import build_pagination
from app.utils.text import couple_display_name, full_name, spanish_conjunction


class TestDates:
    def test_local_day_boundaries_follow_dst(self):
        tz = ZoneInfo("America/New_York")

        start = local_day_start_utc(date(2024, 3, 10), tz)
        end = local_day_start_utc(date(2024, 3, 11), tz)

        assert start == datetime(2024, 3, 10, 5, 0)
        assert end == datetime(2024, 3, 11, 4, 0)

    def test_last_local_days_newest_first(self):
        tz = ZoneInfo("America/Mexico_City")
        # 03:00 UTC on Jan 16 is still Jan 15 in Mexico City
        windows = last_local_days(3, tz, now=datetime(2025, 1, 16, 3, 0))

        assert [day for day, _, _ in windows] == [date(2025, 1, 15), date(2025, 1, 14), date(2025, 1, 13)]
        assert windows[0][1] == datetime(2025, 1, 15, 6, 0)
        assert windows[0][2] == datetime(2025, 1, 16, 6, 0)

    def test_format_local_full(self):
        assert format_local_full(datetime(2025, 1, 15, 18, 30, 5), ZoneInfo("America/Mexico_City")) == "15/01/2025 12:30:05"
        assert format_local_full(None, ZoneInfo("UTC")) == ""

    def test_resolve_timezone_rejects_unknown_zone(self):
        with pytest.raises(HTTPException) as exc_info:
            resolve_timezone("Not/AZone")
        assert exc_info.value.status_code == 400

    def test_resolve_timezone_defaults(self):
        assert resolve_timezone(None).key == "America/Mexico_City"


class TestText:
    def test_conjunction(self):
        assert spanish_conjunction("Iván") == "e"
        assert spanish_conjunction("Hilda") == "e"
        assert spanish_conjunction("Marco") == "y"
        assert spanish_conjunction(None) == "y"

    def test_names(self):
        assert full_name("Ana", None) == "Ana"
        assert couple_display_name("Ana", "López") == "Ana López"
        assert couple_display_name("Ana", "López", "Iván", "Ruiz") == "Ana López e Iván Ruiz"
        assert couple_display_name("Ana", "López", "Marco") == "Ana López y Marco"


class TestPagination:
    def test_total_pages_rounds_up(self):
        assert build_pagination(1, 20, 41) == {"page": 1, "limit": 20, "total": 41, "total_pages": 3}
        assert build_pagination(1, 20, 0)["total_pages"] == 0
